import datetime
import re
from typing import Dict, Iterable, List, Union

from climate_report.exceptions import MalformedYearLabel, SchemaValidationError
from climate_report.logging_config import create_logger

logger = create_logger(__name__)

YEAR_LABEL_PATTERN = re.compile(r"\D*(\d{4})")

YearLike = Union[int, str, datetime.date]


def standardize_column_name(name: str) -> str:
    """Standardize a CSV header by replacing special characters.

    Args:
        name: Raw column header (e.g. 'Country Name', 'alpha-3')

    Returns:
        Lowercase header with only alphanumeric characters and underscores
    """
    return re.sub(r"[^a-zA-Z0-9_]", "_", name.strip()).lower()


def parse_year_label(label: str) -> int:
    """Recover the four-digit year from a wide-format column label.

    Any non-digit prefix is stripped, so '1990', 'x1990' and 'YR1990'
    all resolve to 1990.

    Args:
        label: Column label

    Returns:
        The year as an integer

    Raises:
        MalformedYearLabel: If no four-digit year remains after the prefix
    """
    match = YEAR_LABEL_PATTERN.fullmatch(str(label).strip())
    if not match:
        raise MalformedYearLabel(label)
    return int(match.group(1))


def select_year_columns(
    labels: Iterable[str], year_start: int, year_end: int
) -> Dict[str, int]:
    """Map year-column labels to years, keeping only the inclusive range.

    Every label is parsed, so a malformed label fails the whole table
    even when its neighbours are out of range.

    Args:
        labels: Candidate year-column labels, in table order
        year_start: First year kept
        year_end: Last year kept

    Returns:
        Ordered mapping of kept label to year
    """
    selected: Dict[str, int] = {}
    discarded: List[str] = []
    seen: Dict[int, str] = {}

    for label in labels:
        year = parse_year_label(label)
        if not year_start <= year <= year_end:
            discarded.append(label)
            continue
        if year in seen:
            raise SchemaValidationError(
                f"Columns {seen[year]!r} and {label!r} both resolve to year {year}"
            )
        seen[year] = label
        selected[label] = year

    if discarded:
        logger.debug(
            f"Discarding {len(discarded)} year columns outside "
            f"{year_start}-{year_end}: {discarded}"
        )

    missing = sorted(set(range(year_start, year_end + 1)) - set(seen))
    if missing:
        logger.warning(
            f"{len(missing)} expected year columns are absent "
            f"(first: {missing[0]}, last: {missing[-1]})"
        )

    return selected


def coerce_year(value: YearLike) -> int:
    """Return the calendar year of an int, a year label or a date."""
    if isinstance(value, bool):
        raise TypeError(f"Not a year: {value!r}")
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.year
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return parse_year_label(value)
    # numpy integers and similar
    return int(value)


def truncate_year(value: YearLike) -> datetime.date:
    """Normalize a year-like value to January 1 of that year."""
    return datetime.date(coerce_year(value), 1, 1)
