"""Configuration module for project settings and environment variables.

This module manages configuration settings for the climate indicators
report: source and output locations, the year range of the wide-format
indicator table, the report views and the indicator display labels.
Values are read from the environment, optionally seeded from a ``.env``
file in the working directory.
"""

import os
from typing import Dict, List, Optional

from dotenv import load_dotenv

from climate_report.exceptions import ConfigurationError
from climate_report.logging_config import create_logger

load_dotenv()

logger = create_logger(__name__)


def _env_list(name: str, default: str) -> List[str]:
    """Read a comma-separated environment variable into a list of strings."""
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


# get the local root directory
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

DATA_DIR = os.getenv("DATA_DIR", os.path.join(ROOT_DIR, "data"))
RAW_DATA_DIR = os.getenv("RAW_DATA_DIR", os.path.join(DATA_DIR, "raw"))
OUTPUT_DIR = os.getenv("OUTPUT_DIR", os.path.join(DATA_DIR, "report"))

INDICATORS_CSV = os.getenv(
    "INDICATORS_CSV", os.path.join(RAW_DATA_DIR, "climate_indicators.csv")
)
COUNTRIES_CSV = os.getenv(
    "COUNTRIES_CSV", os.path.join(RAW_DATA_DIR, "country_codes.csv")
)

# Inclusive range of year columns kept from the wide-format table
YEAR_START = _env_int("YEAR_START", 1960)
YEAR_END = _env_int("YEAR_END", 2020)

# Report views
MAP_YEAR = _env_int("MAP_YEAR", 2017)
TABLE_YEARS = [int(year) for year in _env_list("TABLE_YEARS", "1990,2000,2010,2017")]
LINE_COUNTRIES = _env_list("LINE_COUNTRIES", "USA,CHN,IND,RUS,JPN,DEU")
LINE_INDICATOR = os.getenv("LINE_INDICATOR", "EN.ATM.CO2E.KT")
BAR_INDICATORS = _env_list("BAR_INDICATORS", "EN.ATM.CO2E.PC,EG.FEC.RNEW.ZS")
MAP_INDICATORS = _env_list(
    "MAP_INDICATORS", "EN.ATM.CO2E.PC,EG.FEC.RNEW.ZS,EG.ELC.RNEW.ZS"
)
TABLE_INDICATOR = os.getenv("TABLE_INDICATOR", "EN.ATM.CO2E.PC")

INDICATOR_LABELS: Dict[str, str] = {
    "EN.ATM.CO2E.KT": "CO2 emissions (kt)",
    "EN.ATM.CO2E.PC": "CO2 emissions (metric tons per capita)",
    "EN.ATM.CO2E.SF.KT": "CO2 emissions from solid fuel consumption (kt)",
    "EN.ATM.CO2E.LF.KT": "CO2 emissions from liquid fuel consumption (kt)",
    "EN.ATM.CO2E.GF.KT": "CO2 emissions from gaseous fuel consumption (kt)",
    "EG.FEC.RNEW.ZS": "Renewable energy consumption (% of final energy)",
    "EG.ELC.RNEW.ZS": "Renewable electricity output (% of total)",
    "EG.USE.PCAP.KG.OE": "Energy use (kg of oil equivalent per capita)",
}


def validate_config(output_dir: Optional[str] = None) -> None:
    """
    Validate critical configuration parameters.
    Raises ConfigurationError if any required config is missing or invalid.

    :param output_dir: Directory the run will write to (default: OUTPUT_DIR)
    :raises ConfigurationError: If configuration is invalid
    """
    if YEAR_START > YEAR_END:
        raise ConfigurationError(
            f"YEAR_START ({YEAR_START}) is after YEAR_END ({YEAR_END})"
        )

    if not YEAR_START <= MAP_YEAR <= YEAR_END:
        raise ConfigurationError(
            f"MAP_YEAR {MAP_YEAR} is outside {YEAR_START}-{YEAR_END}"
        )

    if not TABLE_YEARS:
        raise ConfigurationError("TABLE_YEARS must name at least one year")

    out_of_range = [y for y in TABLE_YEARS if not YEAR_START <= y <= YEAR_END]
    if out_of_range:
        raise ConfigurationError(
            f"TABLE_YEARS {out_of_range} are outside {YEAR_START}-{YEAR_END}"
        )

    output_dir = output_dir or OUTPUT_DIR
    for name, value in (
        ("INDICATORS_CSV", INDICATORS_CSV),
        ("COUNTRIES_CSV", COUNTRIES_CSV),
        ("OUTPUT_DIR", output_dir),
    ):
        if not value:
            raise ConfigurationError(f"Missing required configuration: {name}")

    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as e:
        raise ConfigurationError(
            f"Unable to create output directory at {output_dir}: {e}"
        ) from e

    logger.info("Configuration validation successful")
