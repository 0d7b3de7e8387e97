# testimony_analyzer/exporter.py

from __future__ import annotations

import csv

import pandas as pd

from .logging_setup import get_logger
from .models import ALL_CATEGORIES, DERIVED_COLUMNS

logger = get_logger(__name__)

EXPORT_FILENAME_PREFIX = "glt_testimonies"


def export_csv(df: pd.DataFrame, headers: list[str]) -> str:
    """
    Serialize processed rows as CSV text.

    Column order: Category, Matched_Keywords, Month_Year, then `headers`
    as given (a repeated header repeats its value, a missing one is empty).
    Every field is quoted; lines are joined with '\\n', no trailing newline.
    """
    export_headers = DERIVED_COLUMNS + list(headers)

    csv_text = df.reindex(columns=export_headers).to_csv(
        index=False,
        quoting=csv.QUOTE_ALL,
        lineterminator="\n",
    )

    logger.info("Exported %d rows, %d columns", len(df), len(export_headers))
    return csv_text[:-1]


def export_filename(category: str = ALL_CATEGORIES) -> str:
    """Suggested download name, e.g. 'Financial Miracles' -> 'glt_testimonies_financial_miracles.csv'."""
    return f"{EXPORT_FILENAME_PREFIX}_{category.lower().replace(' ', '_')}.csv"
