"""Indicator reshaping pipeline.

This module turns the wide-format World Bank indicator table into the
long-format observation set used by every report view, and provides the
aggregate and pivot primitives built on top of it. The transformations
are expressed as Ibis expressions and executed on an in-memory DuckDB
connection:

1. Select identifier columns plus year columns within the year range
2. Pivot year columns to rows (wide to long)
3. Drop null cells, normalize years to January 1, round to 2 decimals
4. Left join country metadata on ``country_code == alpha_3``
"""

from collections import Counter
from typing import Dict, List, Optional, Sequence, Tuple

import ibis
from ibis.backends import BaseBackend
import ibis.expr.datatypes as dt
import ibis.expr.types as ir
import ibis.selectors as s
import pandas as pd

from climate_report.config import YEAR_END, YEAR_START
from climate_report.exceptions import EmptyGroupError, SchemaValidationError
from climate_report.logging_config import create_logger
from climate_report.models import (
    COUNTRY_COLUMNS,
    ID_COLUMNS,
    OBSERVATION_COLUMNS,
    CountryMeta,
    ObservationRecord,
    RawIndicatorRow,
    WideRow,
)
from climate_report.utils import YearLike, coerce_year, select_year_columns, truncate_year

logger = create_logger(__name__)

COUNTRY_SCHEMA = {"alpha_3": "string", "region": "string", "sub_region": "string"}

# World Bank exports mark missing cells with ".."
MISSING_MARKERS = ("", "..")

# Measures round as decimals, half away from zero
MEASURE_DECIMAL = dt.Decimal(38, 10)

RegionKey = Tuple[Optional[str], Optional[str]]


def _absent(value) -> bool:
    return value is None or (not isinstance(value, str) and pd.isna(value))


def _optional_str(value) -> Optional[str]:
    return None if _absent(value) else str(value)


class IndicatorReshaper:
    """Reshape wide indicator tables into long-format observation records.

    Holds only a DuckDB connection and the year range; every operation
    returns a new list and leaves its input untouched.
    """

    def __init__(
        self,
        con: Optional[BaseBackend] = None,
        year_start: int = YEAR_START,
        year_end: int = YEAR_END,
    ) -> None:
        self.con = con if con is not None else ibis.duckdb.connect()
        self.year_start = year_start
        self.year_end = year_end

    # ------------------------------------------------------------------
    # load
    # ------------------------------------------------------------------

    def load(
        self,
        raw_rows: Sequence[RawIndicatorRow],
        country_meta: Sequence[CountryMeta],
    ) -> List[ObservationRecord]:
        """Build observation records from in-memory wide rows.

        :param raw_rows: Wide-format indicator rows
        :param country_meta: Country metadata rows
        :return: Observation records ordered by country, indicator and year
        :raises MalformedYearLabel: If a year label cannot be parsed
        :raises SchemaValidationError: If country metadata repeats an alpha_3 code
        """
        if not raw_rows:
            logger.info("No raw indicator rows; returning no records")
            return []

        labels: List[str] = []
        for row in raw_rows:
            for label in row.values:
                if label not in labels:
                    labels.append(label)

        frame = pd.DataFrame(
            [
                {
                    **{column: getattr(row, column) for column in ID_COLUMNS},
                    **{label: row.values.get(label) for label in labels},
                }
                for row in raw_rows
            ],
            columns=[*ID_COLUMNS, *labels],
        )
        for label in labels:
            frame[label] = pd.to_numeric(frame[label], errors="coerce").astype("float64")

        schema = {column: "string" for column in ID_COLUMNS}
        schema.update({label: "float64" for label in labels})

        indicators = ibis.memtable(frame, schema=schema)
        return self.load_tables(indicators, self._country_table(country_meta))

    def load_tables(
        self, indicators: ir.Table, countries: ir.Table
    ) -> List[ObservationRecord]:
        """Run the reshaping pipeline over Ibis tables.

        :param indicators: Wide-format indicator table with snake_case headers
        :param countries: Country metadata table with alpha_3, region, sub_region
        :return: Observation records ordered by country, indicator and year
        :raises SchemaValidationError: If identifier columns are missing
        :raises MalformedYearLabel: If a year label cannot be parsed
        """
        expr = self.observations_expr(indicators, countries)
        if expr is None:
            return []

        df = self.con.execute(expr)
        records = [
            ObservationRecord(
                country_name=_optional_str(row.country_name),
                country_code=row.country_code,
                indicator_code=row.indicator_code,
                year=truncate_year(row.year),
                measure=float(row.measure),
                region=_optional_str(row.region),
                sub_region=_optional_str(row.sub_region),
            )
            for row in df.itertuples(index=False)
        ]
        logger.info(f"Reshaped indicators into {len(records)} observation records")
        return records

    def observations_expr(
        self, indicators: ir.Table, countries: ir.Table
    ) -> Optional[ir.Table]:
        """Build the long-format observation expression.

        Returns None when the table has no year columns in range, since
        there is nothing to pivot.
        """
        columns = list(indicators.columns)
        missing = [column for column in ID_COLUMNS if column not in columns]
        if missing:
            raise SchemaValidationError(
                f"Indicator table is missing identifier columns: {missing}"
            )

        year_columns = self.year_columns(indicators)
        if not year_columns:
            logger.warning(
                f"No year columns within {self.year_start}-{self.year_end}; "
                "nothing to reshape"
            )
            return None

        wide = indicators.select(
            "country_name",
            "country_code",
            "indicator_code",
            **{
                str(year): self._year_values(indicators[label])
                for label, year in year_columns.items()
            },
        )

        long = wide.pivot_longer(
            s.matches(r"^\d{4}$"), names_to="year", values_to="measure"
        )
        long = long.filter(
            long.measure.notnull() & ~long.measure.isnan() & ~long.measure.isinf()
        )
        long = long.mutate(
            year=ibis.date(long.year.cast("int32"), 1, 1),
            measure=long.measure.cast(MEASURE_DECIMAL).round(2).cast("float64"),
        )

        meta = countries.select(*COUNTRY_COLUMNS)
        joined = long.left_join(meta, long.country_code == meta.alpha_3)

        return joined.select(*OBSERVATION_COLUMNS).order_by(
            ["country_code", "indicator_code", "year"]
        )

    def year_columns(self, indicators: ir.Table) -> Dict[str, int]:
        """Return the in-range year columns of a wide table, label to year."""
        candidates = [c for c in indicators.columns if c not in ID_COLUMNS]
        return select_year_columns(candidates, self.year_start, self.year_end)

    def describe_source(self, indicators: ir.Table) -> Tuple[int, int]:
        """Return (row count, in-range year column count) of a wide table."""
        row_count = int(self.con.execute(indicators.count()))
        return row_count, len(self.year_columns(indicators))

    # ------------------------------------------------------------------
    # aggregates
    # ------------------------------------------------------------------

    def average_by_region(
        self, records: Sequence[ObservationRecord], strict: bool = False
    ) -> Dict[RegionKey, float]:
        """Average measure per (region, sub_region), highest average first.

        Records without country metadata are grouped under (None, None).
        Ties keep the order in which groups first appear in ``records``.

        :param records: Observation records, usually one indicator and year
        :param strict: Raise instead of returning an empty mapping on no input
        :return: Ordered mapping of (region, sub_region) to mean measure
        :raises EmptyGroupError: If ``strict`` and ``records`` is empty
        """
        if not records:
            if strict:
                raise EmptyGroupError("Cannot average an empty record set")
            logger.warning("No records to average by region")
            return {}

        frame = pd.DataFrame(
            {
                "region": [r.region for r in records],
                "sub_region": [r.sub_region for r in records],
                "measure": [float(r.measure) for r in records],
                "position": list(range(len(records))),
            }
        )
        table = ibis.memtable(
            frame,
            schema={
                "region": "string",
                "sub_region": "string",
                "measure": "float64",
                "position": "int64",
            },
        )

        averages = (
            table.group_by(["region", "sub_region"])
            .aggregate(
                average=table.measure.mean(),
                first_seen=table.position.min(),
            )
            .order_by([ibis.desc("average"), "first_seen"])
        )

        df = self.con.execute(averages)
        return {
            (_optional_str(row.region), _optional_str(row.sub_region)): float(row.average)
            for row in df.itertuples(index=False)
        }

    # ------------------------------------------------------------------
    # pivot
    # ------------------------------------------------------------------

    def pivot_wide(
        self, records: Sequence[ObservationRecord], year_keys: Sequence[YearLike]
    ) -> List[WideRow]:
        """Pivot records back to one row per country, one column per year.

        Rows lacking a value for the first requested year are dropped.

        :param records: Observation records, usually a single indicator
        :param year_keys: Years to emit as columns, in column order
        :return: Rows ordered by country name, values keyed by year label
        """
        if not year_keys:
            raise ValueError("pivot_wide needs at least one year")

        labels: List[str] = []
        for key in year_keys:
            label = str(coerce_year(key))
            if label not in labels:
                labels.append(label)

        selected = [
            (r.country_name, str(r.year.year), float(r.measure))
            for r in records
            if str(r.year.year) in labels
        ]
        if not selected:
            return []

        duplicates = [
            key for key, count in Counter((c, y) for c, y, _ in selected).items()
            if count > 1
        ]
        if duplicates:
            logger.warning(
                f"{len(duplicates)} (country, year) cells have several values; "
                "keeping the largest. Filter to one indicator before pivoting."
            )

        table = ibis.memtable(
            pd.DataFrame(selected, columns=["country_name", "year_label", "measure"]),
            schema={
                "country_name": "string",
                "year_label": "string",
                "measure": "float64",
            },
        )
        wide = table.group_by("country_name").aggregate(
            **{
                label: table.measure.max(where=table.year_label == label)
                for label in labels
            }
        )
        anchor = labels[0]
        wide = wide.filter(wide[anchor].notnull()).order_by("country_name")

        df = self.con.execute(wide)
        rows = []
        for row in df.to_dict(orient="records"):
            rows.append(
                WideRow(
                    country_name=_optional_str(row["country_name"]),
                    values={
                        label: None if _absent(row.get(label)) else float(row[label])
                        for label in labels
                    },
                )
            )
        return rows

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _year_values(column: ir.Column) -> ir.Column:
        if column.type().is_string():
            column = column.strip()
            for marker in MISSING_MARKERS:
                column = column.nullif(marker)
        return column.cast("float64")

    @staticmethod
    def _country_table(country_meta: Sequence[CountryMeta]) -> ir.Table:
        repeated = sorted(
            code
            for code, count in Counter(m.alpha_3 for m in country_meta).items()
            if code is not None and count > 1
        )
        if repeated:
            raise SchemaValidationError(
                f"Country metadata repeats alpha_3 codes: {repeated}"
            )

        frame = pd.DataFrame(
            [(m.alpha_3, m.region, m.sub_region) for m in country_meta],
            columns=list(COUNTRY_COLUMNS),
        )
        return ibis.memtable(frame, schema=COUNTRY_SCHEMA)
