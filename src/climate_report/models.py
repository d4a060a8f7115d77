"""Record types flowing through the indicator reshaping pipeline.

Raw rows arrive in wide format (one column per year); the reshaper turns
them into long-format ``ObservationRecord`` values keyed by
(country_code, indicator_code, year). Records are immutable once built;
every view is a new list derived from them.
"""

import datetime
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

# Columns identifying a wide-format indicator row
ID_COLUMNS = ("country_name", "country_code", "indicator_name", "indicator_code")

# Columns required from the country-code reference table
COUNTRY_COLUMNS = ("alpha_3", "region", "sub_region")

OBSERVATION_COLUMNS = (
    "country_name",
    "country_code",
    "indicator_code",
    "year",
    "measure",
    "region",
    "sub_region",
)


@dataclass(frozen=True)
class RawIndicatorRow:
    """One (country, indicator) row of the wide-format indicator table."""

    country_name: str
    country_code: str
    indicator_name: str
    indicator_code: str
    values: Mapping[str, Optional[float]] = field(default_factory=dict)


@dataclass(frozen=True)
class CountryMeta:
    """One row of the ISO country-code reference table."""

    alpha_3: str
    region: Optional[str] = None
    sub_region: Optional[str] = None


@dataclass(frozen=True)
class ObservationRecord:
    """A single long-format observation.

    ``year`` is always January 1 of the observed year. ``region`` and
    ``sub_region`` are None when the country code has no metadata.
    """

    country_name: str
    country_code: str
    indicator_code: str
    year: datetime.date
    measure: float
    region: Optional[str] = None
    sub_region: Optional[str] = None


@dataclass(frozen=True)
class WideRow:
    """A country's values for a set of requested years, keyed by year label."""

    country_name: Optional[str]
    values: Dict[str, Optional[float]]
