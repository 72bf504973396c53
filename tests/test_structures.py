import pytest

from bqls.lsp.structures import (
    Command,
    Diagnostic,
    DiagnosticSeverity,
    JobHistory,
    ListDatasetsResult,
    ListJobHistoryResult,
    ListTablesResult,
    Location,
    Position,
    Range,
    SaveResultResult,
    TextDocumentIdentifier,
    TextDocumentPositionParams,
    TextEdit,
    WorkDoneProgressBegin,
    WorkDoneProgressEnd,
    WorkDoneProgressReport,
)
from bqls.lsp.uri import DocumentURI


def test_position_round_trip():
    pos = Position(line=3, character=7)
    assert Position.from_json(pos.to_json()) == pos


def test_range_round_trip_and_str():
    rng = Range(Position(1, 2), Position(3, 4))
    assert Range.from_json(rng.to_json()) == rng
    assert str(rng) == f"{rng.start}-{rng.end}"
    assert str(Position(3, 4)) == "3:4"


def test_position_rejects_bad_types():
    with pytest.raises(ValueError):
        Position.from_json({"line": "one", "character": 0})
    with pytest.raises(ValueError):
        Position.from_json([1, 2])


def test_position_missing_fields_default_to_zero():
    assert Position.from_json({}) == Position(0, 0)


def test_location_to_json():
    rng = Range(Position(0, 1), Position(0, 5))
    loc = Location(DocumentURI("file:///a.sql"), rng)
    assert loc.to_json() == {"uri": "file:///a.sql", "range": rng.to_json()}


def test_diagnostic_omits_empty_fields():
    rng = Range(Position(0, 0), Position(0, 3))
    data = Diagnostic(range=rng, message="boom").to_json()
    assert "severity" not in data
    assert "code" not in data
    assert "source" not in data
    assert data["message"] == "boom"


def test_diagnostic_includes_severity():
    rng = Range()
    data = Diagnostic(range=rng, message="m", severity=DiagnosticSeverity.WARNING).to_json()
    assert data["severity"] == DiagnosticSeverity.WARNING.value
    assert DiagnosticSeverity.ERROR.value == 1


def test_command_to_json():
    cmd = Command(title="Execute Query", command="bqls.executeQuery", arguments=["x"])
    assert cmd.to_json() == {
        "title": "Execute Query",
        "command": "bqls.executeQuery",
        "arguments": ["x"],
    }
    assert Command(title="t", command="c").to_json()["arguments"] is None


def test_text_edit_to_json():
    rng = Range(Position(1, 0), Position(2, 0))
    assert TextEdit(rng, "select 1\n").to_json() == {
        "range": rng.to_json(),
        "newText": "select 1\n",
    }


def test_text_document_position_params_from_json():
    params = TextDocumentPositionParams.from_json(
        {"textDocument": {"uri": "file:///q.sql"}, "position": {"line": 2, "character": 9}}
    )
    assert params.text_document.uri == "file:///q.sql"
    assert params.text_document.uri.is_file()
    assert params.position == Position(2, 9)


def test_text_document_position_params_rejects_bad_uri():
    with pytest.raises(ValueError):
        TextDocumentPositionParams.from_json({"textDocument": {"uri": 5}})


def test_work_done_progress_kinds():
    begin = WorkDoneProgressBegin(title="Execute Query", message="Runing query...").to_json()
    assert begin == {"kind": "begin", "title": "Execute Query", "message": "Runing query..."}
    report = WorkDoneProgressReport(message="Load rows from BigQuery...").to_json()
    assert report == {"kind": "report", "message": "Load rows from BigQuery..."}
    assert WorkDoneProgressEnd().to_json() == {"kind": "end"}


def test_work_done_progress_percentage_kept_when_set():
    data = WorkDoneProgressReport(percentage=50.0).to_json()
    assert data["percentage"] == 50.0
    assert "message" not in data


def test_list_results_to_json():
    assert ListDatasetsResult(["a", "b"]).to_json() == {"datasets": ["a", "b"]}
    assert ListTablesResult(["t"]).to_json() == {"tables": ["t"]}
    assert SaveResultResult("/tmp/x.csv").to_json() == {"url": "/tmp/x.csv"}


def test_job_history_to_json():
    uri = DocumentURI("bqls://project/p/job/j")
    job = JobHistory(TextDocumentIdentifier(uri), "j", "someone@example.com", "SELECT 1")
    result = ListJobHistoryResult([job]).to_json()
    assert result == {
        "jobs": [
            {
                "textDocument": {"uri": "bqls://project/p/job/j"},
                "id": "j",
                "owner": "someone@example.com",
                "summary": "SELECT 1",
            }
        ]
    }