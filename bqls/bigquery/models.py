"""Projects, datasets and tables, and filtering of date-sharded tables."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Iterable

_INT64_MAX = (1 << 63) - 1


@dataclass(frozen=True)
class Project:
    project_id: str
    name: str = ""


@dataclass(frozen=True)
class Dataset:
    project_id: str
    dataset_id: str


@dataclass(frozen=True)
class Table:
    project_id: str
    dataset_id: str
    table_id: str


def _split_numeric_suffix(table_id: str) -> tuple[str, int | None]:
    """Split off trailing digits; the number is None if it is not a plain integer."""
    end = len(table_id)
    while end > 0 and unicodedata.category(table_id[end - 1]) == "Nd":
        end -= 1
    digits = table_id[end:]
    if not digits or not digits.isascii():
        return table_id[:end], None
    number = int(digits)
    if number > _INT64_MAX:
        return table_id[:end], None
    return table_id[:end], number


def extract_latest_suffix_tables(tables: Iterable[Table]) -> list[Table]:
    """Keep only the highest-numbered table of each numbered series, sorted by ID."""
    latest: dict[str, tuple[int, Table]] = {}
    for table in tables:
        base, suffix = _split_numeric_suffix(table.table_id)
        if suffix is None:
            latest[table.table_id] = (0, table)
            continue
        current = latest.get(base)
        if current is None or current[0] < suffix:
            latest[base] = (suffix, table)

    return sorted((table for _, table in latest.values()), key=lambda t: t.table_id)