from __future__ import annotations

import pandas as pd

from .models import (
    ALL_CATEGORIES,
    ALL_TIME,
    CATEGORY_COLUMN,
    EMPTY_VALUE,
    MONTH_COLUMN,
    OTHERS,
    AnalysisResult,
)
from .rules import RuleSet

PREVIEW_MAX_LEN = 50
PREVIEW_CUT_LEN = 47
TOP_VALUES = 10


def filter_by_month(df: pd.DataFrame, month: str = ALL_TIME) -> pd.DataFrame:
    if month == ALL_TIME:
        return df
    return df[df[MONTH_COLUMN] == month]


def filter_rows(
    df: pd.DataFrame,
    month: str = ALL_TIME,
    category: str = ALL_CATEGORIES,
) -> pd.DataFrame:
    """
    Rows for the table view and export: month filter, then category filter.
    """
    out = filter_by_month(df, month)
    if category != ALL_CATEGORIES:
        out = out[out[CATEGORY_COLUMN] == category]
    return out.reset_index(drop=True)


def preview_key(value) -> str:
    """
    Short display key for a free-text value.

    'a long answer ...' (>50 chars) -> first 47 chars + '...'
    ''/whitespace                   -> '(Empty)'
    """
    s = "" if value is None or pd.isna(value) else str(value).strip()
    if not s:
        return EMPTY_VALUE
    if len(s) > PREVIEW_MAX_LEN:
        return s[:PREVIEW_CUT_LEN] + "..."
    return s


def category_counts(df: pd.DataFrame, rule_set: RuleSet) -> dict[str, int]:
    """
    Row count per category.

    Every current rule appears (in rule order) even with zero rows, followed
    by 'Others'.
    """
    counts: dict[str, int] = {name: 0 for name in rule_set.names()}
    counts.setdefault(OTHERS, 0)

    if CATEGORY_COLUMN in df.columns:
        for category in df[CATEGORY_COLUMN].tolist():
            counts[category] = counts.get(category, 0) + 1
    return counts


def _preview_counts(df: pd.DataFrame, column: str | None) -> pd.Series:
    if column and column in df.columns:
        keys = df[column].map(preview_key)
    else:
        keys = pd.Series([EMPTY_VALUE] * len(df), dtype=object)

    if keys.empty:
        return pd.Series(dtype="int64")

    # first-seen order, then a stable sort keeps it for equal counts
    counts = keys.groupby(keys, sort=False).size()
    return counts.sort_values(ascending=False, kind="stable")


def value_distribution(
    df: pd.DataFrame,
    column: str | None,
    top: int | None = TOP_VALUES,
) -> list[tuple[str, int]]:
    """
    Most frequent preview keys of `column`, as (key, count) pairs.

    `top=None` returns every key.
    """
    counts = _preview_counts(df, column)
    if top is not None:
        counts = counts.head(top)
    return [(str(key), int(n)) for key, n in counts.items()]


def analyze(
    df: pd.DataFrame,
    month: str,
    preview_column: str | None,
    rule_set: RuleSet,
) -> AnalysisResult:
    """
    Totals, per-category counts and the top-10 value distribution for the
    selected month. The category filter plays no part here.
    """
    data = filter_by_month(df, month)
    every_value = value_distribution(data, preview_column, top=None)

    return AnalysisResult(
        total=len(data),
        categorization=category_counts(data, rule_set),
        distribution=every_value[:TOP_VALUES],
        unique_values=len(every_value),
    )
