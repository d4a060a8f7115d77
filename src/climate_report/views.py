"""Filtered views over observation records.

Each function returns a new list; an empty list is a valid answer and
never an error.
"""

from typing import List, Mapping, Optional, Sequence, Tuple

from climate_report.models import ObservationRecord
from climate_report.utils import YearLike, truncate_year


def filter_by_indicator(
    records: Sequence[ObservationRecord], indicator_code: str
) -> List[ObservationRecord]:
    """Return the records of one indicator."""
    return [r for r in records if r.indicator_code == indicator_code]


def filter_by_country(
    records: Sequence[ObservationRecord], country_code: str
) -> List[ObservationRecord]:
    """Return the records of one country."""
    return [r for r in records if r.country_code == country_code]


def filter_by_year(
    records: Sequence[ObservationRecord], year: YearLike
) -> List[ObservationRecord]:
    """Return the records observed in ``year``.

    ``year`` may be a date (matched on its truncated value) or a plain
    year number.
    """
    target = truncate_year(year)
    return [r for r in records if r.year == target]


def filter_records(
    records: Sequence[ObservationRecord],
    indicator_code: Optional[str] = None,
    country_code: Optional[str] = None,
    year: Optional[YearLike] = None,
) -> List[ObservationRecord]:
    """Apply any combination of the single filters in one pass.

    Predicates left as None match everything, so the result equals
    chaining the corresponding single filters in any order.
    """
    target = truncate_year(year) if year is not None else None
    return [
        r
        for r in records
        if (indicator_code is None or r.indicator_code == indicator_code)
        and (country_code is None or r.country_code == country_code)
        and (target is None or r.year == target)
    ]


def label_indicators(
    records: Sequence[ObservationRecord], labels: Mapping[str, str]
) -> List[Tuple[str, ObservationRecord]]:
    """Pair each record with the display label of its indicator.

    Codes missing from ``labels`` are labelled with the code itself.
    """
    return [(labels.get(r.indicator_code, r.indicator_code), r) for r in records]
