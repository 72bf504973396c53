"""Formatting query results as CSV cells, spreadsheet cells and JSON records."""

from __future__ import annotations

import base64
import json
import math
import re
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Iterable, Sequence
from urllib.parse import parse_qs, urlsplit

_SPREADSHEET_PATH_PREFIX = "/spreadsheets/d/"
_GID_PATTERN = re.compile(r"[+-]?[0-9]+")


class ExportError(ValueError):
    """A value could not be formatted against its schema."""


@dataclass(frozen=True)
class FieldSchema:
    """One column of a result schema; records carry the schema of their fields."""

    name: str
    type: str = "STRING"
    repeated: bool = False
    schema: Sequence[FieldSchema] | None = None


def _type_name(value: Any) -> str:
    return "<nil>" if value is None else type(value).__name__


def _shortest_digits(value: float) -> tuple[str, int]:
    """Digits of the shortest round-trip form of a positive float, and the
    position of the decimal point relative to the first digit."""
    _, digits, exponent = Decimal(repr(value)).as_tuple()
    point = len(digits) + int(exponent)
    text = "".join(map(str, digits)).rstrip("0") or "0"
    return text, point


def _fixed(digits: str, point: int) -> str:
    if point <= 0:
        return "0." + "0" * -point + digits
    if point >= len(digits):
        return digits + "0" * (point - len(digits))
    return f"{digits[:point]}.{digits[point:]}"


def _mantissa(digits: str) -> str:
    return digits[0] + (f".{digits[1:]}" if len(digits) > 1 else "")


def _float_text(value: float) -> str:
    """Render a float the way the default value format of the server does."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    sign = "-" if math.copysign(1.0, value) < 0 else ""
    if value == 0:
        return sign + "0"
    digits, point = _shortest_digits(abs(value))
    exponent = point - 1
    if exponent < -4 or exponent >= 6:
        exp_sign = "-" if exponent < 0 else "+"
        return f"{sign}{_mantissa(digits)}e{exp_sign}{abs(exponent):02d}"
    return sign + _fixed(digits, point)


def _json_float(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        raise ExportError(f"json: unsupported value: {_float_text(value)}")
    sign = "-" if math.copysign(1.0, value) < 0 else ""
    if value == 0:
        return sign + "0"
    magnitude = abs(value)
    digits, point = _shortest_digits(magnitude)
    if magnitude < 1e-6 or magnitude >= 1e21:
        exponent = point - 1
        suffix = f"e-{-exponent}" if exponent < 0 else f"e+{exponent:02d}"
        return f"{sign}{_mantissa(digits)}{suffix}"
    return sign + _fixed(digits, point)


def _json_string(value: str) -> str:
    text = json.dumps(value, ensure_ascii=False)
    for char, escape in (
        ("<", "\\u003c"),
        (">", "\\u003e"),
        ("&", "\\u0026"),
        ("\u2028", "\\u2028"),
        ("\u2029", "\\u2029"),
    ):
        text = text.replace(char, escape)
    return text


def _rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    base = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    offset = value.utcoffset()
    if not offset:
        return base + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "-" if minutes < 0 else "+"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{base}{sign}{hours:02d}:{minutes:02d}"


def _format_row(
    formatter: Callable[[Any, FieldSchema], Any],
    record: Iterable[Any],
    schema: Sequence[FieldSchema],
) -> list[Any]:
    values = list(record)
    if len(values) > len(schema):
        raise ExportError(
            f"record length(={len(values)}) exceeds schema length(={len(schema)})"
        )
    row = []
    for index, (value, field) in enumerate(zip(values, schema)):
        try:
            row.append(formatter(value, field))
        except ExportError as exc:
            raise ExportError(
                f"schema(name={field.name}, row={index}) failed: {exc}"
            ) from exc
    return row


def _format_elements(
    formatter: Callable[[Any, FieldSchema], str], value: Any, field: FieldSchema
) -> list[str]:
    if not isinstance(value, (list, tuple)):
        raise ExportError(f"record should be array, but got {_type_name(value)}")
    element_field = replace(field, repeated=False)
    columns = []
    for index, item in enumerate(value):
        try:
            columns.append(formatter(item, element_field))
        except ExportError as exc:
            raise ExportError(f"failed to format record[{index}]: {exc}") from exc
    return columns


def _nested_record(value: Sequence[Any], field: FieldSchema) -> str:
    if field.schema is None:
        raise ExportError("schema should be provided for record")
    return format_record_json(value, field.schema)


def _shared_text(value: Any, field: FieldSchema) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, datetime):
        return _rfc3339(value)
    if isinstance(value, (list, tuple)):
        return _nested_record(value, field)
    return str(value)


def format_csv_value(value: Any, field: FieldSchema) -> str:
    """Format one value as a CSV cell."""
    if value is None:
        return ""
    if field.repeated:
        return "[" + ",".join(_format_elements(format_csv_value, value, field)) + "]"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _float_text(value)
    if isinstance(value, str):
        return value
    return _shared_text(value, field)


def format_csv(record: Iterable[Any], schema: Sequence[FieldSchema]) -> list[str]:
    """Format a result row as CSV cells."""
    return _format_row(format_csv_value, record, schema)


def format_spreadsheet_value(value: Any, field: FieldSchema) -> Any:
    """Format one value as a spreadsheet cell, keeping numbers and booleans."""
    if value is None:
        return ""
    if field.repeated:
        return "[" + ",".join(_format_elements(format_csv_value, value, field)) + "]"
    if isinstance(value, (bool, int, float, str)):
        return value
    return _shared_text(value, field)


def format_spreadsheet(record: Iterable[Any], schema: Sequence[FieldSchema]) -> list[Any]:
    """Format a result row as spreadsheet cells."""
    return _format_row(format_spreadsheet_value, record, schema)


def _single_json(value: Any, field: FieldSchema) -> str:
    if field.repeated:
        return "[" + ",".join(_format_elements(_single_json, value, field)) + "]"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _json_float(value)
    if isinstance(value, str):
        return _json_string(value)
    if isinstance(value, (bytes, bytearray)):
        return _json_string(base64.b64encode(bytes(value)).decode("ascii"))
    if isinstance(value, datetime):
        return f'"{_rfc3339(value)}"'
    if isinstance(value, (list, tuple)):
        return _nested_record(value, field)
    raise ExportError(f"unsupported type: {_type_name(value)}")


def format_record_json(record: Sequence[Any], schema: Sequence[FieldSchema]) -> str:
    """Render a record as a JSON object keyed by its field names."""
    if len(record) != len(schema):
        raise ExportError(
            f"record length(={len(record)}) should be equal to "
            f"schema length(={len(schema)})"
        )
    members = []
    for index, (value, field) in enumerate(zip(record, schema)):
        try:
            encoded = _single_json(value, field)
        except ExportError as exc:
            raise ExportError(
                f"schema(name={field.name}, row={index}) failed: {exc}"
            ) from exc
        members.append(f"{_json_string(field.name)}:{encoded}")
    return "{" + ",".join(members) + "}"


def parse_spreadsheet_url(sheet_url: str) -> tuple[str, int]:
    """Return the spreadsheet ID and sheet ID (gid, 0 if absent) of a sheet URL."""
    parts = urlsplit(sheet_url)
    path = parts.path
    if path.startswith(_SPREADSHEET_PATH_PREFIX):
        path = path[len(_SPREADSHEET_PATH_PREFIX):]
    spreadsheet_id = path.split("/", 1)[0]

    gid = parse_qs(parts.query).get("gid", [""])[0]
    if not gid:
        return spreadsheet_id, 0
    if not _GID_PATTERN.fullmatch(gid):
        raise ValueError(f"invalid sheet id: {gid!r}")
    return spreadsheet_id, int(gid)


def _csv_field(field: str) -> str:
    if not field:
        return field
    needs_quotes = (
        field == "\\."
        or any(char in field for char in ',"\r\n')
        or field[0].isspace()
    )
    if not needs_quotes:
        return field
    return '"' + field.replace('"', '""') + '"'


def write_csv(
    path: str | Path, schema: Sequence[FieldSchema], rows: Iterable[Iterable[Any]]
) -> int:
    """Write a header and the formatted rows to a CSV file; return the row count."""
    count = 0
    with open(path, "w", encoding="utf-8", newline="") as out:
        out.write(",".join(_csv_field(field.name) for field in schema) + "\n")
        for record in rows:
            cells = format_csv(record, schema)
            out.write(",".join(_csv_field(cell) for cell in cells) + "\n")
            count += 1
    return count