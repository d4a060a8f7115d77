"""Test suite for the climate indicators report.

This package contains tests for the report pipeline including:
- Unit tests for individual modules
- Integration tests for complete report runs
"""
