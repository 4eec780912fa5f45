"""Validates the provider's parsed JSON and builds ExtractedData."""

from typing import Any

from invoice_scan.extraction.exceptions import ExtractionResponseError
from invoice_scan.extraction.models import ExtractedData, KeyValuePair, TableData

_MAX_PAIRS = 200
_MAX_TABLE_ROWS = 500


def validate_and_build(data: dict[str, Any]) -> ExtractedData:
    """Validate raw parsed JSON and build an ExtractedData.

    Missing lists are treated as empty; ``table`` may be null.

    Raises:
        ExtractionResponseError: on any validation failure.
    """
    key_value_pairs = _build_pairs(
        data.get("key_value_pairs", data.get("keyValuePairs")), "key_value_pairs"
    )
    summary = _build_pairs(data.get("summary"), "summary")
    table = _build_table(data.get("table"))
    confidence = _build_confidence(data.get("confidence"), "confidence")
    return ExtractedData(
        key_value_pairs=key_value_pairs,
        table=table,
        summary=summary,
        confidence=confidence,
    )


def _build_pairs(raw: Any, section: str) -> list[KeyValuePair]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ExtractionResponseError(f"'{section}' must be a list")
    if len(raw) > _MAX_PAIRS:
        raise ExtractionResponseError(
            f"Too many entries in '{section}': {len(raw)} (max {_MAX_PAIRS})"
        )
    return [_build_pair(item, section, i) for i, item in enumerate(raw)]


def _build_pair(raw: Any, section: str, index: int) -> KeyValuePair:
    if not isinstance(raw, dict):
        raise ExtractionResponseError(f"{section}[{index}] must be an object")
    key = raw.get("key")
    if not key or not isinstance(key, str):
        raise ExtractionResponseError(f"{section}[{index}]: 'key' must be a non-empty string")
    value = _cell_text(raw.get("value"), f"{section}[{index}].value")
    confidence = _build_confidence(raw.get("confidence"), f"{section}[{index}].confidence")
    return KeyValuePair(key=key, value=value, confidence=confidence)


def _build_table(raw: Any) -> TableData | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ExtractionResponseError("'table' must be an object or null")
    headers = raw.get("headers", [])
    if not isinstance(headers, list):
        raise ExtractionResponseError("'table.headers' must be a list")
    rows = raw.get("rows", [])
    if not isinstance(rows, list):
        raise ExtractionResponseError("'table.rows' must be a list")
    if len(rows) > _MAX_TABLE_ROWS:
        raise ExtractionResponseError(
            f"Too many table rows: {len(rows)} (max {_MAX_TABLE_ROWS})"
        )

    built_rows: list[list[str]] = []
    for i, row in enumerate(rows):
        if not isinstance(row, list):
            raise ExtractionResponseError(f"table.rows[{i}] must be a list")
        built_rows.append([_cell_text(cell, f"table.rows[{i}]") for cell in row])
    return TableData(
        headers=[_cell_text(h, "table.headers") for h in headers],
        rows=built_rows,
    )


def _build_confidence(raw: Any, path: str) -> float | None:
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ExtractionResponseError(f"'{path}' must be a number or null")
    if not 0.0 <= raw <= 1.0:
        raise ExtractionResponseError(f"'{path}' must be between 0 and 1, got {raw}")
    return float(raw)


def _cell_text(raw: Any, path: str) -> str:
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ExtractionResponseError(f"'{path}' must be a string or number")
    return str(raw)
