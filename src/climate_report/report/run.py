"""Report run module.

This module runs the whole report: it ingests both CSV files, reshapes
the indicators into observation records, builds the data view behind
each chart (line chart, grouped bar chart, choropleth maps, table) and
exports every view as CSV alongside a JSON quality summary. Rendering
the charts themselves is left to the charting collaborator.
"""

import argparse
import json
import os
import sys
import time
from typing import Dict, List, Optional, Sequence

import ibis
import pandas as pd

from climate_report.config import (
    BAR_INDICATORS,
    COUNTRIES_CSV,
    INDICATOR_LABELS,
    INDICATORS_CSV,
    LINE_COUNTRIES,
    LINE_INDICATOR,
    MAP_INDICATORS,
    MAP_YEAR,
    OUTPUT_DIR,
    TABLE_INDICATOR,
    TABLE_YEARS,
    validate_config,
)
from climate_report.exceptions import ReportBaseError, ReportError
from climate_report.ingest.run import Ingest
from climate_report.logging_config import create_logger, log_exception
from climate_report.models import ObservationRecord
from climate_report.quality import LoadSummary, summarize_load
from climate_report.reshape import IndicatorReshaper
from climate_report.utils import standardize_column_name
from climate_report.views import filter_by_indicator, filter_records, label_indicators

logger = create_logger(__name__)


class ReportRun:
    """Manage one run of the climate indicators report.

    Key steps:
    - Read the indicator and country-code CSV files
    - Reshape the wide indicator table into observation records
    - Build the line, bar, map and table views
    - Export the views and a quality summary to the output directory
    """

    def __init__(
        self,
        indicators_path: str = INDICATORS_CSV,
        countries_path: str = COUNTRIES_CSV,
        output_dir: str = OUTPUT_DIR,
        labels: Optional[Dict[str, str]] = None,
    ) -> None:
        self.indicators_path = indicators_path
        self.countries_path = countries_path
        self.output_dir = output_dir
        self.labels = labels if labels is not None else dict(INDICATOR_LABELS)

        self.con = ibis.duckdb.connect()
        self.ingest = Ingest(self.con)
        self.reshaper = IndicatorReshaper(self.con)
        self.summary: Optional[LoadSummary] = None

    def load_records(self) -> List[ObservationRecord]:
        """Read both sources and reshape them into observation records."""
        indicators, countries = self.ingest.read_sources(
            self.indicators_path, self.countries_path
        )
        records = self.reshaper.load_tables(indicators, countries)

        raw_rows, year_columns = self.reshaper.describe_source(indicators)
        country_codes = self.con.execute(countries.alpha_3)
        self.summary = summarize_load(
            raw_rows, year_columns, records, country_codes.dropna().tolist()
        )
        return records

    def line_chart_view(self, records: Sequence[ObservationRecord]) -> pd.DataFrame:
        """Time series of the line-chart indicator for the configured countries."""
        rows = []
        for country_code in LINE_COUNTRIES:
            for r in filter_records(
                records, indicator_code=LINE_INDICATOR, country_code=country_code
            ):
                rows.append(
                    {
                        "country_code": r.country_code,
                        "country_name": r.country_name,
                        "year": r.year,
                        "measure": r.measure,
                    }
                )
        return pd.DataFrame(
            rows, columns=["country_code", "country_name", "year", "measure"]
        )

    def bar_chart_view(self, records: Sequence[ObservationRecord]) -> pd.DataFrame:
        """Regional averages of each bar indicator in the map year."""
        rows = []
        for indicator_code in BAR_INDICATORS:
            selected = filter_records(records, indicator_code=indicator_code, year=MAP_YEAR)
            averages = self.reshaper.average_by_region(selected)
            label = self.labels.get(indicator_code, indicator_code)
            for (region, sub_region), average in averages.items():
                rows.append(
                    {
                        "indicator_code": indicator_code,
                        "indicator_label": label,
                        "region": region,
                        "sub_region": sub_region,
                        "average": average,
                    }
                )
        return pd.DataFrame(
            rows,
            columns=["indicator_code", "indicator_label", "region", "sub_region", "average"],
        )

    def map_views(self, records: Sequence[ObservationRecord]) -> Dict[str, pd.DataFrame]:
        """One country-level view per map indicator in the map year."""
        views = {}
        for indicator_code in MAP_INDICATORS:
            selected = filter_records(records, indicator_code=indicator_code, year=MAP_YEAR)
            views[f"map_{standardize_column_name(indicator_code)}"] = pd.DataFrame(
                [
                    {
                        "indicator_label": label,
                        "country_code": r.country_code,
                        "country_name": r.country_name,
                        "measure": r.measure,
                    }
                    for label, r in label_indicators(selected, self.labels)
                ],
                columns=["indicator_label", "country_code", "country_name", "measure"],
            )
        return views

    def table_view(self, records: Sequence[ObservationRecord]) -> pd.DataFrame:
        """Wide table of the table indicator over the table years."""
        rows = self.reshaper.pivot_wide(
            filter_by_indicator(records, TABLE_INDICATOR), TABLE_YEARS
        )
        columns = ["country_name", *[str(year) for year in TABLE_YEARS]]
        return pd.DataFrame(
            [{"country_name": row.country_name, **row.values} for row in rows],
            columns=columns,
        )

    def build_views(self, records: Sequence[ObservationRecord]) -> Dict[str, pd.DataFrame]:
        """Build every chart view from the observation records."""
        views = {
            "line_chart": self.line_chart_view(records),
            "bar_chart": self.bar_chart_view(records),
        }
        views.update(self.map_views(records))
        views["table"] = self.table_view(records)
        return views

    def export_views(self, views: Dict[str, pd.DataFrame]) -> List[str]:
        """
        Write each view as CSV, plus the quality summary as JSON.

        :param views: Mapping of view name to DataFrame
        :return: Paths of the written files
        """
        os.makedirs(self.output_dir, exist_ok=True)
        paths = []
        for name, frame in views.items():
            path = os.path.join(self.output_dir, f"{name}.csv")
            frame.to_csv(path, index=False)
            logger.info(f"Wrote {len(frame)} rows to {path}")
            paths.append(path)

        if self.summary is not None:
            path = os.path.join(self.output_dir, "summary.json")
            with open(path, "w") as f:
                json.dump(self.summary.to_dict(), f, indent=2)
            paths.append(path)
        return paths

    def run(self) -> List[str]:
        """
        Main method to run the report.

        :return: Paths of the exported files
        :raises ReportBaseError: Structural errors abort the run unchanged
        :raises ReportError: Any other failure, chained to its cause
        """
        start_time = time.time()
        try:
            logger.info(f"Starting report run from {self.indicators_path}")
            records = self.load_records()
            views = self.build_views(records)
            paths = self.export_views(views)
        except ReportBaseError as e:
            log_exception(logger, e, self._failure_context())
            raise
        except Exception as e:
            log_exception(logger, e, self._failure_context())
            raise ReportError(f"Report run failed: {e}") from e

        duration = time.time() - start_time
        logger.info(
            f"Report completed successfully: {len(records)} records, "
            f"{len(paths)} files in {duration:.2f}s"
        )
        return paths

    def _failure_context(self) -> Dict[str, str]:
        return {
            "indicators": self.indicators_path,
            "countries": self.countries_path,
            "output": self.output_dir,
        }


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the climate indicators report views")
    parser.add_argument("--indicators", default=INDICATORS_CSV, help="Wide indicator CSV")
    parser.add_argument("--countries", default=COUNTRIES_CSV, help="Country-code CSV")
    parser.add_argument("--output", default=OUTPUT_DIR, help="Output directory")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        validate_config(args.output)
        ReportRun(args.indicators, args.countries, args.output).run()
    except ReportBaseError as e:
        logger.error(f"Report run failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
