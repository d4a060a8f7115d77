"""Data quality summary for an indicator load.

Reports how much of the wide table survived reshaping (completeness),
what the long-format records cover, and which country codes found no
region metadata in the left join.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from climate_report.logging_config import create_logger
from climate_report.models import ObservationRecord

logger = create_logger(__name__)


@dataclass
class LoadSummary:
    """Quality metrics for a single reshaping run."""

    raw_rows: int
    year_columns: int
    candidate_cells: int
    records: int
    dropped_cells: int
    completeness_percentage: float
    countries: int
    indicators: int
    year_range_min: Optional[int]
    year_range_max: Optional[int]
    unmatched_country_codes: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def summarize_load(
    raw_row_count: int,
    year_column_count: int,
    records: Sequence[ObservationRecord],
    country_codes: Iterable[str],
) -> LoadSummary:
    """Calculate quality metrics for a reshaped indicator table.

    Args:
        raw_row_count: Number of wide-format rows read
        year_column_count: Number of in-range year columns
        records: Observation records produced from those rows
        country_codes: ``alpha_3`` codes present in the country metadata

    Returns:
        LoadSummary with completeness and join coverage
    """
    candidate_cells = raw_row_count * year_column_count
    completeness = (
        round(100.0 * len(records) / candidate_cells, 2) if candidate_cells else 0.0
    )
    years = [r.year.year for r in records]
    known_codes = set(country_codes)
    unmatched = sorted({r.country_code for r in records} - known_codes)

    summary = LoadSummary(
        raw_rows=raw_row_count,
        year_columns=year_column_count,
        candidate_cells=candidate_cells,
        records=len(records),
        dropped_cells=candidate_cells - len(records),
        completeness_percentage=completeness,
        countries=len({r.country_code for r in records}),
        indicators=len({r.indicator_code for r in records}),
        year_range_min=min(years) if years else None,
        year_range_max=max(years) if years else None,
        unmatched_country_codes=unmatched,
    )

    logger.info(
        f"Completeness: {summary.completeness_percentage:.2f}% "
        f"({summary.records}/{summary.candidate_cells} cells)"
    )
    if unmatched:
        # Aggregates such as WLD or EUU have no ISO entry
        logger.warning(
            f"{len(unmatched)} country codes have no region metadata: "
            f"{unmatched[:10]}{' ...' if len(unmatched) > 10 else ''}"
        )
    return summary
