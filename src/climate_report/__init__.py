"""Climate indicators report package.

This package reshapes World Bank climate and energy indicators into
long-format observation records and builds the data views behind the
report's charts.
"""

__version__ = "1.0.0"
