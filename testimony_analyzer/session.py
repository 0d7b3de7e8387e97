# testimony_analyzer/session.py

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pandas as pd

from .analytics import analyze, filter_rows
from .categorizer import categorize_testimonies, find_active_columns
from .cleaner import bucket_months, detect_date_column, detect_preview_column
from .exporter import export_csv, export_filename
from .loader import decode_upload, parse_csv
from .logging_setup import get_logger
from .models import ALL_CATEGORIES, ALL_TIME, AnalysisResult, ParsedTable
from .rules import RuleSet, load_rule_set

logger = get_logger(__name__)

TABLE_PREVIEW_LIMIT = 500


class AnalysisSession:
    """
    State for one analysis session and the pipeline derived from it.

    Inputs are plain attributes (table, rules, column choices, filters).
    Derived values (processed frame, analysis, filtered rows, export text)
    are computed on read and cached against the inputs they depend on, so
    changing an input only recomputes the stages downstream of it.

    Loading is synchronous: each load_* call replaces the table wholesale,
    so the last upload wins.
    """

    def __init__(self, rules: RuleSet | None = None):
        self.rules = rules if rules is not None else load_rule_set()
        self.date_column = ""
        self.preview_column = ""
        self.month_filter = ALL_TIME
        self.category_filter = ALL_CATEGORIES
        self._cache: dict[str, tuple] = {}
        self._version = 0
        self._set_table(ParsedTable())

    # ---------- inputs ----------

    def _set_table(self, table: ParsedTable) -> None:
        self._table = table
        self._version += 1
        self._cache.clear()

    @property
    def table(self) -> ParsedTable:
        return self._table

    def load_text(self, text: str) -> ParsedTable:
        table = parse_csv(text)
        self._set_table(table)
        self.preview_column = detect_preview_column(table.headers)
        self.date_column = detect_date_column(table.headers)
        self.month_filter = ALL_TIME
        self.category_filter = ALL_CATEGORIES
        logger.info(
            "Loaded table: preview column=%r, date column=%r",
            self.preview_column,
            self.date_column,
        )
        return table

    def load_bytes(self, raw: bytes) -> ParsedTable:
        return self.load_text(decode_upload(raw))

    def load_path(self, path: str | Path) -> ParsedTable:
        return self.load_bytes(Path(path).read_bytes())

    def reset(self) -> None:
        """Forget the loaded table and filters; rules are kept."""
        self._set_table(ParsedTable())
        self.date_column = ""
        self.preview_column = ""
        self.month_filter = ALL_TIME
        self.category_filter = ALL_CATEGORIES

    def add_rule(self, name: str, keywords_text: str):
        return self.rules.add_from_text(name, keywords_text)

    def remove_rule(self, rule_id: int) -> None:
        self.rules.remove(rule_id)

    @property
    def headers(self) -> list[str]:
        return self.table.headers

    @property
    def has_data(self) -> bool:
        return not self.table.is_empty

    # ---------- derived ----------

    def _memo(self, stage: str, key: tuple, compute: Callable):
        cached = self._cache.get(stage)
        if cached is not None and cached[0] == key:
            return cached[1]
        value = compute()
        self._cache[stage] = (key, value)
        return value

    def _processed_key(self) -> tuple:
        return (self._version, self.rules.snapshot(), self.date_column)

    @property
    def active_columns(self) -> list[str]:
        return self._memo(
            "active_columns",
            (self._version,),
            lambda: find_active_columns(self.table.headers),
        )

    def _process(self) -> tuple[pd.DataFrame, list[str]]:
        df = categorize_testimonies(self.table.to_frame(), self.rules, self.active_columns)
        return bucket_months(df, self.date_column)

    def _processed_and_months(self) -> tuple[pd.DataFrame, list[str]]:
        return self._memo("processed", self._processed_key(), self._process)

    @property
    def processed(self) -> pd.DataFrame:
        return self._processed_and_months()[0]

    @property
    def available_months(self) -> list[str]:
        return self._processed_and_months()[1]

    @property
    def analysis(self) -> AnalysisResult | None:
        df = self.processed
        if df.empty:
            return None
        key = (self._processed_key(), self.month_filter, self.preview_column)
        return self._memo(
            "analysis",
            key,
            lambda: analyze(df, self.month_filter, self.preview_column, self.rules),
        )

    @property
    def filtered_rows(self) -> pd.DataFrame:
        df = self.processed
        key = (self._processed_key(), self.month_filter, self.category_filter)
        return self._memo(
            "filtered",
            key,
            lambda: filter_rows(df, self.month_filter, self.category_filter),
        )

    def table_preview(self, limit: int = TABLE_PREVIEW_LIMIT) -> pd.DataFrame:
        return self.filtered_rows.head(limit)

    def export_text(self) -> str:
        return export_csv(self.filtered_rows, self.table.headers)

    def export_filename(self) -> str:
        return export_filename(self.category_filter)
