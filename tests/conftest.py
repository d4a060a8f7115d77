"""Pytest configuration and shared fixtures for the climate report tests.

This module provides fixtures for:
- In-memory Ibis DuckDB connections
- Sample wide-format indicator rows and country metadata
- Temporary CSV files shaped like the real sources
"""

import tempfile
from pathlib import Path
from typing import Dict, Generator, List

import ibis
import pandas as pd
import pytest

from climate_report.models import CountryMeta, RawIndicatorRow
from climate_report.reshape import IndicatorReshaper


# ============================================================================
# DuckDB Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def ibis_connection() -> Generator:
    """Provide an in-memory Ibis DuckDB connection for testing.

    Yields:
        Ibis DuckDB backend
    """
    con = ibis.duckdb.connect()
    yield con
    con.disconnect()


@pytest.fixture(scope="function")
def reshaper(ibis_connection) -> IndicatorReshaper:
    """Provide a reshaper over the 1960-2020 year range."""
    return IndicatorReshaper(ibis_connection, year_start=1960, year_end=2020)


# ============================================================================
# Test Data Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def sample_raw_rows() -> List[RawIndicatorRow]:
    """Generate wide-format indicator rows.

    Non-null cells: 1 (USA solid fuel) + 3 + 2 + 3 + 3 + 2 = 14.
    Five rows have a 2017 value. WLD has no country metadata.
    """
    return [
        RawIndicatorRow(
            "United States", "USA", "CO2 emissions from solid fuel consumption (kt)",
            "EN.ATM.CO2E.SF.KT", {"x1990": 1000000.456, "x1991": None},
        ),
        RawIndicatorRow(
            "United States", "USA", "CO2 emissions (metric tons per capita)",
            "EN.ATM.CO2E.PC", {"x1990": 19.3224, "x2017": 15.7394, "x2018": 16.1},
        ),
        RawIndicatorRow(
            "Canada", "CAN", "CO2 emissions (metric tons per capita)",
            "EN.ATM.CO2E.PC", {"x1990": 15.1501, "x2017": 14.9912, "x2018": None},
        ),
        RawIndicatorRow(
            "France", "FRA", "CO2 emissions (metric tons per capita)",
            "EN.ATM.CO2E.PC", {"x1990": 6.4, "x2017": 4.7, "x2018": 4.5},
        ),
        RawIndicatorRow(
            "World", "WLD", "CO2 emissions (metric tons per capita)",
            "EN.ATM.CO2E.PC", {"x1990": 4.1, "x2017": 4.4, "x2018": 4.5},
        ),
        RawIndicatorRow(
            "Germany", "DEU", "CO2 emissions (metric tons per capita)",
            "EN.ATM.CO2E.PC", {"x1990": None, "x2017": 8.7, "x2018": 8.4},
        ),
    ]


@pytest.fixture(scope="function")
def sample_country_meta() -> List[CountryMeta]:
    """Generate country metadata; WLD is deliberately absent."""
    return [
        CountryMeta("USA", "Americas", "Northern America"),
        CountryMeta("CAN", "Americas", "Northern America"),
        CountryMeta("FRA", "Europe", "Western Europe"),
        CountryMeta("DEU", "Europe", "Western Europe"),
    ]


@pytest.fixture(scope="function")
def sample_records(reshaper, sample_raw_rows, sample_country_meta):
    """Observation records loaded from the sample rows."""
    return reshaper.load(sample_raw_rows, sample_country_meta)


@pytest.fixture(scope="function")
def sample_indicator_frame() -> pd.DataFrame:
    """Wide indicator table as published, with x-prefixed year headers.

    x1959 and x2021 fall outside the default year range.
    """
    return pd.DataFrame({
        "country_name": ["United States", "United States", "Canada", "Canada", "World"],
        "country_code": ["USA", "USA", "CAN", "CAN", "WLD"],
        "indicator_name": [
            "CO2 emissions (kt)",
            "CO2 emissions (metric tons per capita)",
            "CO2 emissions (kt)",
            "CO2 emissions (metric tons per capita)",
            "CO2 emissions (metric tons per capita)",
        ],
        "indicator_code": [
            "EN.ATM.CO2E.KT",
            "EN.ATM.CO2E.PC",
            "EN.ATM.CO2E.KT",
            "EN.ATM.CO2E.PC",
            "EN.ATM.CO2E.PC",
        ],
        "x1959": [1.0, 2.0, 3.0, 4.0, 5.0],
        "x1990": [4823400.123, 19.3224, 419490.1, 15.1501, 4.1],
        "x2017": [5107393.4, 15.7394, 572780.0, 14.9912, 4.4],
        "x2021": [6.0, 7.0, 8.0, 9.0, 10.0],
    })


@pytest.fixture(scope="function")
def sample_country_frame() -> pd.DataFrame:
    """Country-code reference table with its published headers."""
    return pd.DataFrame({
        "name": ["United States of America", "Canada", "France"],
        "alpha-2": ["US", "CA", "FR"],
        "alpha-3": ["USA", "CAN", "FRA"],
        "country-code": [840, 124, 250],
        "region": ["Americas", "Americas", "Europe"],
        "sub-region": ["Northern America", "Northern America", "Western Europe"],
    })


# ============================================================================
# Temporary File Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for testing.

    Yields:
        Path to temporary directory
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(scope="function")
def temp_source_files(
    temp_dir: Path,
    sample_indicator_frame: pd.DataFrame,
    sample_country_frame: pd.DataFrame,
) -> Dict[str, Path]:
    """Write both source CSV files to a temporary directory.

    Returns:
        Dictionary with 'indicators' and 'countries' paths
    """
    indicators_path = temp_dir / "climate_indicators.csv"
    countries_path = temp_dir / "country_codes.csv"
    sample_indicator_frame.to_csv(indicators_path, index=False)
    sample_country_frame.to_csv(countries_path, index=False)
    return {"indicators": indicators_path, "countries": countries_path}
