# testimony_analyzer/loader.py

from __future__ import annotations

from pathlib import Path

from .logging_setup import get_logger
from .models import ParsedTable

logger = get_logger(__name__)

# latin1 maps every byte, so decoding always ends there at the latest
ENCODINGS_TO_TRY = ["utf-8-sig", "cp1250", "iso-8859-2", "latin1"]


def _keep_row(fields: list[str]) -> bool:
    # A lone empty field is a blank line
    return len(fields) > 1 or (len(fields) == 1 and fields[0] != "")


def split_records(text: str) -> list[list[str]]:
    """
    Split delimited text into raw records (lists of untrimmed fields).

    Quoting rules:
      - '"' toggles the in-quotes state
      - '""' inside quotes is one literal quote
      - ',' outside quotes ends a field
      - CR, LF or CRLF outside quotes ends a record

    An unterminated quote is not an error: everything up to end of input
    lands in the last field.
    """
    records: list[list[str]] = []
    fields: list[str] = []
    field: list[str] = []
    in_quotes = False

    i = 0
    n = len(text)
    while i < n:
        char = text[i]
        if char == '"':
            if in_quotes and i + 1 < n and text[i + 1] == '"':
                field.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(field))
            field = []
        elif char in "\r\n" and not in_quotes:
            if char == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
            fields.append("".join(field))
            if _keep_row(fields):
                records.append(fields)
            fields = []
            field = []
        else:
            field.append(char)
        i += 1

    if field or fields:
        fields.append("".join(field))
        if _keep_row(fields):
            records.append(fields)

    return records


def parse_csv(text: str) -> ParsedTable:
    """
    Parse delimited text into a ParsedTable.

    The first kept record is the header row. Every following record is
    zipped against the headers by position: short records are padded with
    "", extra fields are dropped, values are trimmed.
    """
    records = split_records(text)
    if not records:
        logger.info("Parsed empty input: no header row found")
        return ParsedTable(headers=[], rows=[])

    headers = [h.strip() for h in records[0]]
    rows = []
    for record in records[1:]:
        row: dict[str, str] = {}
        for idx, header in enumerate(headers):
            row[header] = record[idx].strip() if idx < len(record) else ""
        rows.append(row)

    logger.info("Parsed %d rows with %d columns", len(rows), len(headers))
    return ParsedTable(headers=headers, rows=rows)


def decode_upload(raw: bytes) -> str:
    """Decode uploaded bytes, trying encodings common in survey exports."""
    for encoding in ENCODINGS_TO_TRY:
        try:
            text = raw.decode(encoding)
        except UnicodeDecodeError:
            logger.debug("Could not decode upload as %s", encoding)
            continue
        logger.info("Successfully decoded with encoding: %s", encoding)
        return text

    # Unreachable while latin1 is in the list
    raise ValueError(f"Failed to decode upload with tried encodings: {ENCODINGS_TO_TRY}")


def load_testimonies(path: str | Path) -> ParsedTable:
    path = Path(path)
    logger.info("Loading: %s", path)
    return parse_csv(decode_upload(path.read_bytes()))
