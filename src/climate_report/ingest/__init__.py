"""Ingest package for reading the report's source CSV files.

This package reads the wide-format indicator table and the country-code
reference table into Ibis tables on a DuckDB connection.
"""
