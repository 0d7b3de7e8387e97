# testimony_analyzer/cleaner.py
import re
import warnings

import pandas as pd

from .logging_setup import get_logger
from .models import MONTH_COLUMN, UNKNOWN_MONTH

logger = get_logger(__name__)

# e.g. "Sun Apr 06 2025 10:00:00 GMT+0100 (West Africa Standard Time)"
_TZ_NAME_SUFFIX = re.compile(r"\s*\([^()]*\)\s*$")

PREVIEW_COLUMN_HINTS = ["narrate", "share your testimony", "detail"]
DATE_COLUMN_HINTS = ["date", "submission started", "timestamp"]

# pandas resolves these against the clock
_RELATIVE_DATE_WORDS = {"now", "today"}
# dateutil fills a missing year with 1
MIN_YEAR = 1000


def parse_date(value) -> pd.Timestamp:
    """
    Parse a free-form date string with pandas' generic parser.

    Returns NaT for empty or unparseable input instead of raising.
    Clock-relative words ("now", "today") and yearless results count as
    unparseable.
    """
    if value is None:
        return pd.NaT
    s = _TZ_NAME_SUFFIX.sub("", str(value)).strip()
    if not s or s.lower() in _RELATIVE_DATE_WORDS:
        return pd.NaT

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", UserWarning)
            ts = pd.to_datetime(s, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return pd.NaT
    if not isinstance(ts, pd.Timestamp) or ts.year < MIN_YEAR:
        return pd.NaT
    return ts


def month_label(value) -> str:
    """'2025-04-06' -> 'April 2025'; anything unparseable -> 'Unknown'."""
    ts = parse_date(value)
    if pd.isna(ts):
        return UNKNOWN_MONTH
    return f"{ts.month_name()} {ts.year:04d}"


def sort_month_labels(labels) -> list[str]:
    """
    Sort 'Month Year' labels chronologically by re-parsing them.

    Labels that do not parse come first, keeping their relative order.
    """
    def _key(label: str):
        ts = parse_date(label)
        if pd.isna(ts):
            return (0, 0)
        return (1, ts.value)

    return sorted(labels, key=_key)


def bucket_months(df: pd.DataFrame, date_column: str | None) -> tuple[pd.DataFrame, list[str]]:
    """
    Add a 'Month_Year' column derived from `date_column`.

    Returns the new frame and the sorted distinct month labels seen
    ('Unknown' is never among them).
    """
    df = df.copy()

    if date_column and date_column in df.columns:
        labels = [month_label(v) for v in df[date_column].tolist()]
    else:
        if date_column:
            logger.debug("Date column %r not in data; all months unknown", date_column)
        labels = [UNKNOWN_MONTH] * len(df)

    df[MONTH_COLUMN] = labels

    seen = [label for label in dict.fromkeys(labels) if label != UNKNOWN_MONTH]
    months = sort_month_labels(seen)
    logger.info(
        "Bucketed %d rows into %d months (%d unknown)",
        len(df),
        len(months),
        labels.count(UNKNOWN_MONTH),
    )
    return df, months


def _first_matching(headers, hints) -> str | None:
    for h in headers:
        h_low = h.lower()
        if any(hint in h_low for hint in hints):
            return h
    return None


def detect_preview_column(headers: list[str]) -> str:
    """Guess the free-text column to preview; falls back to the first header."""
    found = _first_matching(headers, PREVIEW_COLUMN_HINTS)
    if found is not None:
        return found
    return headers[0] if headers else ""


def detect_date_column(headers: list[str]) -> str:
    return _first_matching(headers, DATE_COLUMN_HINTS) or ""
