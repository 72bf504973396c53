"""JSON-RPC request identifiers."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

_UINT64_LIMIT = 1 << 64


@dataclass(frozen=True)
class RequestID:
    """A request ID, either an unsigned integer or a string."""

    value: int | str = 0

    def __post_init__(self) -> None:
        if isinstance(self.value, str):
            return
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError(f"request ID must be an integer or string, got {self.value!r}")
        if not 0 <= self.value < _UINT64_LIMIT:
            raise ValueError(f"request ID out of range: {self.value}")

    @property
    def is_string(self) -> bool:
        return isinstance(self.value, str)

    def __str__(self) -> str:
        if self.is_string:
            return json.dumps(self.value, ensure_ascii=False)
        return str(self.value)

    def to_json(self) -> int | str:
        return self.value

    @classmethod
    def from_json(cls, data: Any) -> RequestID:
        """Build an ID from a decoded JSON value; null yields the zero ID."""
        if data is None:
            return cls(0)
        if isinstance(data, (str, int)) and not isinstance(data, bool):
            return cls(data)
        raise ValueError(f"invalid request ID: {data!r}")