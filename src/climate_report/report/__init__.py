"""Report package: the end-to-end "run the report" entry point.

Reads the source files, reshapes them and exports the data views that
the charting collaborator renders.
"""
