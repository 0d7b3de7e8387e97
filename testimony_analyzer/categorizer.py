# testimony_analyzer/categorizer.py

from __future__ import annotations

from typing import Iterable, Mapping

import pandas as pd

from .logging_setup import get_logger
from .models import CATEGORY_COLUMN, KEYWORDS_COLUMN, OTHERS, Rule
from .rules import RuleSet

logger = get_logger(__name__)

# Header fragments of the free-text testimony questions
TARGET_PHRASES = [
    "share your testimony in details",
    "what was the case before now",
    "narrate what happened to you in this meeting",
    "what was the condition before now",
]


def find_active_columns(headers: Iterable[str]) -> list[str]:
    """Columns whose header mentions one of the testimony questions."""
    active = [
        h for h in headers
        if any(phrase in h.lower() for phrase in TARGET_PHRASES)
    ]
    return list(dict.fromkeys(active))


def build_scan_text(row: Mapping[str, str], active_columns: list[str]) -> str:
    if active_columns:
        parts = [row.get(col) or "" for col in active_columns]
    else:
        parts = [str(v) for v in row.values()]
    return " ".join(parts).lower()


def _distinct_keywords(rule: Rule) -> list[tuple[str, str]]:
    """(keyword, lower-cased keyword) pairs, skipping blanks and repeats."""
    seen: set[str] = set()
    pairs = []
    for kw in rule.keywords:
        kw_low = kw.lower()
        if not kw_low or kw_low in seen:
            continue
        seen.add(kw_low)
        pairs.append((kw, kw_low))
    return pairs


def score_rule(text: str, rule: Rule) -> tuple[int, list[str]]:
    """
    Count the rule's distinct keywords found anywhere in `text`.

    `text` must already be lower-cased. A keyword counts once no matter how
    often it occurs.
    """
    matched = [kw for kw, kw_low in _distinct_keywords(rule) if kw_low in text]
    return len(matched), matched


def classify_text(text: str, rule_set: RuleSet) -> tuple[str, list[str]]:
    best_category = OTHERS
    max_score = 0
    evidence: list[str] = []

    for rule in rule_set:
        score, matched = score_rule(text, rule)
        evidence.extend(matched)
        # strict: ties keep the earlier rule
        if score > max_score:
            max_score = score
            best_category = rule.name

    return best_category, list(dict.fromkeys(evidence))


def classify_row(
    row: Mapping[str, str],
    active_columns: list[str],
    rule_set: RuleSet,
) -> tuple[str, list[str]]:
    return classify_text(build_scan_text(row, active_columns), rule_set)


def _scan_text(df: pd.DataFrame, active_columns: list[str]) -> pd.Series:
    """Lower-cased text per row, as build_scan_text would assemble it."""
    cols = df.reindex(columns=active_columns) if active_columns else df
    if cols.empty:
        return pd.Series("", index=df.index, dtype=object)
    return cols.fillna("").astype(str).agg(" ".join, axis=1).str.lower()


def categorize_testimonies(
    df: pd.DataFrame,
    rule_set: RuleSet,
    active_columns: list[str] | None = None,
) -> pd.DataFrame:
    """
    Apply keyword-scoring categorization to every row.

    Parameters
    ----------
    df : DataFrame
        Parsed testimonies, one column per CSV header.
    rule_set : RuleSet
        Ordered rules; earlier rules win ties.
    active_columns : list of str, optional
        Columns to scan. When empty, every column is scanned.

    Returns
    -------
    DataFrame with new 'Category' and 'Matched_Keywords' columns.
    """
    text = _scan_text(df, active_columns or [])

    best_score = pd.Series(0, index=df.index)
    category = pd.Series(OTHERS, index=df.index, dtype=object)
    evidence: list[list[str]] = [[] for _ in range(len(df))]

    for rule in rule_set:
        score = pd.Series(0, index=df.index)
        for kw, kw_low in _distinct_keywords(rule):
            mask = text.str.contains(kw_low, regex=False)
            score += mask.astype(int)
            for pos in mask.to_numpy().nonzero()[0]:
                evidence[pos].append(kw)
        # strict: ties keep the earlier rule
        better = score > best_score
        category = category.mask(better, rule.name)
        best_score = best_score.mask(better, score)

    df = df.copy()
    df[CATEGORY_COLUMN] = category
    df[KEYWORDS_COLUMN] = [", ".join(dict.fromkeys(matched)) for matched in evidence]

    logger.info(
        "Categorized %d rows; %d fell into %s",
        len(df),
        int((category == OTHERS).sum()),
        OTHERS,
    )
    return df
