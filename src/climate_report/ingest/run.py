"""Ingest module for the indicator and country-code CSV files.

This module reads both source CSV files into Ibis tables backed by an
in-memory DuckDB connection, normalizing headers to snake_case and
validating the columns the reshaping pipeline relies on.
"""

import os
from typing import Optional, Tuple

import ibis
import ibis.expr.types as ir
from ibis.backends import BaseBackend

from climate_report.config import COUNTRIES_CSV, INDICATORS_CSV
from climate_report.exceptions import SchemaValidationError, SourceFileError
from climate_report.logging_config import create_logger
from climate_report.models import ID_COLUMNS
from climate_report.utils import standardize_column_name

logger = create_logger(__name__)


class Ingest:
    """Read the report's source CSV files into Ibis tables.

    Both files are read fully into DuckDB before any transformation
    begins. Headers are normalized (``Country Name`` becomes
    ``country_name``, ``alpha-3`` becomes ``alpha_3``) so the reshaper can
    address columns by their canonical names.
    """

    def __init__(self, con: Optional[BaseBackend] = None) -> None:
        """Initialize the Ingest process with a DuckDB connection."""
        logger.info("Initializing Ingest Process")
        self.con = con if con is not None else ibis.duckdb.connect()

    def read_csv(self, path: str) -> ir.Table:
        """
        Read a CSV file and normalize its headers.

        :param path: Path to the CSV file
        :return: Ibis table with snake_case headers
        :raises SourceFileError: If the file is missing or unreadable
        """
        if not os.path.isfile(path):
            raise SourceFileError(f"Source file not found: {path}")

        try:
            table = self.con.read_csv(path, header=True)
        except Exception as e:
            logger.error(f"Failed to read {path}: {e}")
            raise SourceFileError(f"Unable to read {path}: {e}") from e

        renames = {
            standardize_column_name(column): column
            for column in table.columns
            if standardize_column_name(column) != column
        }
        if renames:
            logger.debug(f"Renaming columns: {renames}")
            table = table.rename(renames)

        row_count = self.con.execute(table.count())
        logger.info(f"Read {row_count} rows and {len(table.columns)} columns from {path}")
        return table

    def read_indicators(self, path: str = INDICATORS_CSV) -> ir.Table:
        """
        Read the wide-format indicator table.

        :param path: Path to the indicator CSV file
        :return: Ibis table with identifier and year columns
        :raises SchemaValidationError: If identifier columns are missing
        """
        table = self.read_csv(path)
        missing = [column for column in ID_COLUMNS if column not in table.columns]
        if missing:
            raise SchemaValidationError(
                f"Indicator file {path} is missing columns: {missing}"
            )
        return table.cast({column: "string" for column in ID_COLUMNS})

    def read_countries(self, path: str = COUNTRIES_CSV) -> ir.Table:
        """
        Read the country-code reference table.

        Only ``alpha_3`` is required; absent ``region`` or ``sub_region``
        columns are filled with nulls so the join still keeps every record.

        :param path: Path to the country-code CSV file
        :return: Ibis table with alpha_3, region and sub_region columns
        :raises SchemaValidationError: If alpha_3 is missing or not unique
        """
        table = self.read_csv(path)
        if "alpha_3" not in table.columns:
            raise SchemaValidationError(f"Country file {path} has no alpha_3 column")

        for column in ("region", "sub_region"):
            if column not in table.columns:
                logger.warning(f"Country file {path} has no {column} column")
                table = table.mutate(**{column: ibis.null().cast("string")})

        table = table.select(
            table.alpha_3.cast("string").name("alpha_3"),
            table.region.cast("string").name("region"),
            table.sub_region.cast("string").name("sub_region"),
        )

        codes = table.filter(table.alpha_3.notnull())
        counts = codes.group_by("alpha_3").aggregate(occurrences=codes.alpha_3.count())
        repeated = self.con.execute(counts.filter(counts["occurrences"] > 1).alpha_3)
        if len(repeated):
            raise SchemaValidationError(
                f"Country file {path} repeats alpha_3 codes: {sorted(repeated.tolist())}"
            )
        return table

    def read_sources(
        self, indicators_path: str = INDICATORS_CSV, countries_path: str = COUNTRIES_CSV
    ) -> Tuple[ir.Table, ir.Table]:
        """Read both source files, indicators first."""
        return self.read_indicators(indicators_path), self.read_countries(countries_path)
