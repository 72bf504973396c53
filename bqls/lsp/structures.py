"""Basic protocol structures and the results of the server's commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Mapping

from bqls.lsp.uri import DocumentURI


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be an object, got {type(data).__name__}")
    return data


def _int(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{what} must be an integer, got {value!r}")
    return value


@dataclass(frozen=True)
class Position:
    """A zero-based line and character offset in a document."""

    line: int = 0
    character: int = 0

    def __str__(self) -> str:
        return f"{self.line}:{self.character}"

    def to_json(self) -> dict[str, Any]:
        return {"line": self.line, "character": self.character}

    @classmethod
    def from_json(cls, data: Any) -> Position:
        obj = _mapping(data, "position")
        return cls(
            line=_int(obj.get("line", 0), "line"),
            character=_int(obj.get("character", 0), "character"),
        )


@dataclass(frozen=True)
class Range:
    start: Position = field(default_factory=Position)
    end: Position = field(default_factory=Position)

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"

    def to_json(self) -> dict[str, Any]:
        return {"start": self.start.to_json(), "end": self.end.to_json()}

    @classmethod
    def from_json(cls, data: Any) -> Range:
        obj = _mapping(data, "range")
        return cls(
            start=Position.from_json(obj.get("start")),
            end=Position.from_json(obj.get("end")),
        )


@dataclass(frozen=True)
class Location:
    uri: DocumentURI
    range: Range = field(default_factory=Range)

    def to_json(self) -> dict[str, Any]:
        return {"uri": str(self.uri), "range": self.range.to_json()}


class DiagnosticSeverity(IntEnum):
    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


@dataclass(frozen=True)
class Diagnostic:
    range: Range
    message: str
    severity: DiagnosticSeverity | None = None
    code: str = ""
    source: str = ""

    def to_json(self) -> dict[str, Any]:
        result: dict[str, Any] = {"range": self.range.to_json()}
        if self.severity:
            result["severity"] = int(self.severity)
        if self.code:
            result["code"] = self.code
        if self.source:
            result["source"] = self.source
        result["message"] = self.message
        return result


@dataclass(frozen=True)
class Command:
    title: str
    command: str
    arguments: list[Any] | None = None

    def to_json(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "command": self.command,
            "arguments": None if self.arguments is None else list(self.arguments),
        }


@dataclass(frozen=True)
class TextEdit:
    range: Range
    new_text: str = ""

    def to_json(self) -> dict[str, Any]:
        return {"range": self.range.to_json(), "newText": self.new_text}


@dataclass(frozen=True)
class TextDocumentIdentifier:
    uri: DocumentURI

    def to_json(self) -> dict[str, Any]:
        return {"uri": str(self.uri)}


@dataclass(frozen=True)
class TextDocumentPositionParams:
    text_document: TextDocumentIdentifier
    position: Position

    @classmethod
    def from_json(cls, data: Any) -> TextDocumentPositionParams:
        obj = _mapping(data, "params")
        document = _mapping(obj.get("textDocument"), "textDocument")
        uri = document.get("uri", "")
        if not isinstance(uri, str):
            raise ValueError(f"uri must be a string, got {uri!r}")
        return cls(
            text_document=TextDocumentIdentifier(DocumentURI(uri)),
            position=Position.from_json(obj.get("position")),
        )


def _progress(kind: str, **fields: Any) -> dict[str, Any]:
    result: dict[str, Any] = {"kind": kind}
    result.update((key, value) for key, value in fields.items() if value)
    return result


@dataclass(frozen=True)
class WorkDoneProgressBegin:
    title: str = ""
    cancellable: bool = False
    message: str = ""
    percentage: float = 0.0

    def to_json(self) -> dict[str, Any]:
        return _progress(
            "begin",
            title=self.title,
            cancellable=self.cancellable,
            message=self.message,
            percentage=self.percentage,
        )


@dataclass(frozen=True)
class WorkDoneProgressReport:
    cancellable: bool = False
    message: str = ""
    percentage: float = 0.0

    def to_json(self) -> dict[str, Any]:
        return _progress(
            "report",
            cancellable=self.cancellable,
            message=self.message,
            percentage=self.percentage,
        )


@dataclass(frozen=True)
class WorkDoneProgressEnd:
    message: str = ""

    def to_json(self) -> dict[str, Any]:
        return _progress("end", message=self.message)


@dataclass(frozen=True)
class ListDatasetsResult:
    datasets: list[str] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        return {"datasets": list(self.datasets)}


@dataclass(frozen=True)
class ListTablesResult:
    tables: list[str] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        return {"tables": list(self.tables)}


@dataclass(frozen=True)
class JobHistory:
    """One job in a job history; for query jobs the summary is the query text."""

    text_document: TextDocumentIdentifier
    id: str
    owner: str
    summary: str

    def to_json(self) -> dict[str, Any]:
        return {
            "textDocument": self.text_document.to_json(),
            "id": self.id,
            "owner": self.owner,
            "summary": self.summary,
        }


@dataclass(frozen=True)
class ListJobHistoryResult:
    jobs: list[JobHistory] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        return {"jobs": [job.to_json() for job in self.jobs]}


@dataclass(frozen=True)
class SaveResultResult:
    url: str

    def to_json(self) -> dict[str, Any]:
        return {"url": self.url}