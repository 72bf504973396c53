"""Turning analysis errors into protocol diagnostics."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from bqls.lsp.structures import Diagnostic, DiagnosticSeverity, Position, Range

_UNITS = ("bytes", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB", "ZiB")


@dataclass(frozen=True)
class SourceError:
    """An error found in a document, anchored at a position."""

    position: Position
    msg: str
    term_length: int = 0
    severity: DiagnosticSeverity | None = None


def bytes_convert(num_bytes: int) -> str:
    """Render a byte count with a binary unit, e.g. for dry-run estimates."""
    if num_bytes == 0:
        return "0 bytes"
    if num_bytes < 0:
        raise ValueError(f"byte count must not be negative: {num_bytes}")

    base = math.floor(math.log(num_bytes) / math.log(1024))
    text = f"{num_bytes / math.pow(1024, base):.2f}"
    text = text.removesuffix(".00")
    return f"{text} {_UNITS[base]}"


def convert_errors_to_diagnostics(errors: list[SourceError]) -> list[Diagnostic]:
    """Build one diagnostic per error, spanning the error's term on its line."""
    return [
        Diagnostic(
            range=Range(
                start=error.position,
                end=replace(
                    error.position,
                    character=error.position.character + error.term_length,
                ),
            ),
            message=error.msg,
            severity=error.severity or DiagnosticSeverity.ERROR,
        )
        for error in errors
    ]