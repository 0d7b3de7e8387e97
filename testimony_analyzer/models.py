# testimony_analyzer/models.py

from __future__ import annotations

from dataclasses import dataclass, field

import pandas as pd


# ------------------ SENTINELS ------------------ #

OTHERS = "Others"
UNKNOWN_MONTH = "Unknown"
ALL_TIME = "All Time"
ALL_CATEGORIES = "All"
EMPTY_VALUE = "(Empty)"

# Derived columns added to every processed row
CATEGORY_COLUMN = "Category"
KEYWORDS_COLUMN = "Matched_Keywords"
MONTH_COLUMN = "Month_Year"
DERIVED_COLUMNS = [CATEGORY_COLUMN, KEYWORDS_COLUMN, MONTH_COLUMN]

DEFAULT_RULE_COLOR = "bg-slate-500"


@dataclass(frozen=True)
class Rule:
    id: int
    name: str
    keywords: tuple[str, ...]
    color: str = DEFAULT_RULE_COLOR


@dataclass(frozen=True)
class ParsedTable:
    """
    Header list plus row mappings produced by the CSV parser.

    `headers` keeps every header as written (trimmed), duplicates included.
    Each row maps header -> trimmed value; on duplicate headers the later
    column's value is the one stored.
    """

    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)

    @property
    def columns(self) -> list[str]:
        """Distinct headers in first-seen order."""
        return list(dict.fromkeys(self.headers))

    @property
    def is_empty(self) -> bool:
        return not self.headers

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.rows, columns=self.columns, dtype=object)


@dataclass
class AnalysisResult:
    total: int
    categorization: dict[str, int]
    distribution: list[tuple[str, int]]
    unique_values: int = 0

    def share(self, category: str) -> int:
        """Whole-number percentage of `total` that falls in `category`."""
        if not self.total:
            return 0
        count = self.categorization.get(category, 0)
        return int(count * 100 / self.total + 0.5)
