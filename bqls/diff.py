"""Line-based diffs and the text edits that turn one document into another."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Sequence

from bqls.lsp.structures import Position, Range, TextEdit
from bqls.lsp.uri import DocumentURI


class OpKind(IntEnum):
    """What an operation does to a run of lines."""

    DELETE = 0
    INSERT = 1
    EQUAL = 2


@dataclass
class Operation:
    """A run of deleted or inserted lines.

    ``i1``/``i2`` index the lines of the input, ``j1`` the first line of the
    output; ``content`` holds the inserted lines.
    """

    kind: OpKind
    i1: int
    j1: int
    i2: int = 0
    content: list[str] = field(default_factory=list)


def _shortest_edit_sequence(
    a: Sequence[str], b: Sequence[str]
) -> tuple[list[list[int] | None], int]:
    m, n = len(a), len(b)
    offset = n + m
    v = [0] * (2 * (n + m) + 1)
    trace: list[list[int] | None] = [None] * (n + m + 1)

    for d in range(n + m + 1):
        # k lines are y = x - k; end points for even d lie on even k lines.
        for k in range(-d, d + 1, 2):
            # Prefer the larger x, so deletions come before insertions.
            if k == -d or (k != d and v[k - 1 + offset] < v[k + 1 + offset]):
                x = v[k + 1 + offset]
            else:
                x = v[k - 1 + offset] + 1
            y = x - k

            while x < m and y < n and a[x] == b[y]:
                x += 1
                y += 1

            v[k + offset] = x

            if x == m and y == n:
                trace[d] = list(v)
                return trace, offset

        trace[d] = list(v)
    return [], 0


def _backtrack(
    trace: list[list[int] | None], x: int, y: int, offset: int
) -> list[list[int] | None]:
    snakes: list[list[int] | None] = [None] * len(trace)
    d = len(trace) - 1
    while x > 0 and y > 0 and d > 0:
        v = trace[d]
        if v:
            snakes[d] = [x, y]
            k = x - y
            if k == -d or (k != d and v[k - 1 + offset] < v[k + 1 + offset]):
                k_prev = k + 1
            else:
                k_prev = k - 1
            x = v[k_prev + offset]
            y = x - k_prev
        d -= 1
    if x < 0 or y < 0:
        return snakes
    snakes[d] = [x, y]
    return snakes


def operations(a: Sequence[str], b: Sequence[str]) -> list[Operation]:
    """Return the deletions and insertions that turn ``a`` into ``b``."""
    if not a and not b:
        return []

    trace, offset = _shortest_edit_sequence(a, b)
    snakes = _backtrack(trace, len(a), len(b), offset)
    m, n = len(a), len(b)

    solution: list[Operation] = []

    def add(op: Operation | None, i2: int, j2: int) -> None:
        if op is None:
            return
        op.i2 = i2
        if op.kind is OpKind.INSERT:
            op.content = list(b[op.j1:j2])
        solution.append(op)

    x = y = 0
    for snake in snakes:
        if snake is None or len(snake) < 2:
            continue
        op: Operation | None = None
        while snake[0] - snake[1] > x - y:
            if op is None:
                op = Operation(OpKind.DELETE, i1=x, j1=y)
            x += 1
            if x == m:
                break
        add(op, x, y)

        op = None
        while snake[0] - snake[1] < x - y:
            if op is None:
                op = Operation(OpKind.INSERT, i1=x, j1=y)
            y += 1
        add(op, x, y)

        while x < snake[0]:
            x += 1
            y += 1
        if x >= m and y >= n:
            break
    return solution


def split_lines(text: str) -> list[str]:
    """Split text into lines that keep their trailing newline."""
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def compute_edits(uri: DocumentURI, before: str, after: str) -> list[TextEdit]:
    """Compute the whole-line edits that turn ``before`` into ``after``."""
    edits: list[TextEdit] = []
    for op in operations(split_lines(before), split_lines(after)):
        edit_range = Range(
            start=Position(line=op.i1, character=0),
            end=Position(line=op.i2, character=0),
        )
        if op.kind is OpKind.DELETE:
            edits.append(TextEdit(range=edit_range))
        elif op.kind is OpKind.INSERT:
            content = "".join(op.content)
            if content:
                edits.append(TextEdit(range=edit_range, new_text=content))
    return edits