"""Storage for batch reports."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import polars as pl
from loguru import logger

from .constants import (
    DEFAULT_OUTPUT_DIR,
    JSON_INDENT,
    REPORT_FILENAME_TEMPLATE,
    REPORT_TIMESTAMP_FORMAT,
    LogMessage,
    ReportKey,
    ScoreFactor,
)
from .models import BatchReport


def default_report_filename(now: datetime | None = None) -> str:
    """Timestamped report file name, e.g. ``session_scores_20250320T101500.json``."""
    now = now or datetime.now(timezone.utc)
    return REPORT_FILENAME_TEMPLATE.format(now.strftime(REPORT_TIMESTAMP_FORMAT))


class ReportStorage:
    """Handles saving batch reports to disk.

    Attributes:
        output_dir: Directory the reports are written to; created on first save.
    """

    def __init__(self, *, output_dir: Path | str = DEFAULT_OUTPUT_DIR):
        self.output_dir = Path(output_dir)

    def save_report(
        self, *, report: BatchReport, filename: str | None = None
    ) -> Path:
        """Save a batch report to a JSON file.

        Args:
            report: Batch report to save.
            filename: File name inside the output directory. Defaults to a
                timestamped name.

        Returns:
            Path: Path of the written file.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.output_dir / (filename or default_report_filename())

        with filepath.open("w") as f:
            json.dump(report.to_dict(), f, indent=JSON_INDENT, default=str)

        logger.success(LogMessage.SAVED_REPORT.format(filepath))
        return filepath

    def save_scores_csv(
        self, *, report: BatchReport, filepath: Path | str | None = None
    ) -> Path | None:
        """Save one row per session with its status, total score and factor points.

        Args:
            report: Batch report whose results are written.
            filepath: Destination path. Defaults to a timestamped ``.csv`` in
                the output directory.

        Returns:
            Path | None: Path of the written file, or None if the report is empty.
        """
        if not report.results:
            logger.warning("No session results to save to CSV")
            return None

        if filepath is None:
            filepath = self.output_dir / Path(default_report_filename()).with_suffix(
                ".csv"
            )
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        rows: list[dict[str, Any]] = []
        for result in report.results:
            row: dict[str, Any] = {
                ReportKey.SESSION_ID.value: result.session_id,
                "status": "scored" if result.succeeded else "failed",
                ReportKey.TOTAL_SCORE.value: (
                    result.score.total_score if result.score else None
                ),
            }
            for factor in ScoreFactor:
                row[factor.value] = (
                    result.score.factors.get(factor.value) if result.score else None
                )
            row[ReportKey.ERROR.value] = result.error
            rows.append(row)

        # Lowest scores first so failures and weak sessions surface at the top
        df = pl.DataFrame(rows, infer_schema_length=None).sort(
            ReportKey.TOTAL_SCORE.value, descending=False, nulls_last=False
        )
        df.write_csv(filepath)

        logger.success(LogMessage.SAVED_SCORES_CSV.format(len(df), filepath))
        return filepath
