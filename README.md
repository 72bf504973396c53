# bqls

`bqls` holds the pieces a BigQuery SQL language server is built from:

- `bqls.lsp.uri` – document URIs, including the `bqls://` virtual documents
  that stand for tables and query jobs;
- `bqls.lsp.structures` – Language Server Protocol structures (`Position`,
  `Range`, `Diagnostic`, `TextEdit`, `Command`, work-done progress values)
  and the results of the server's commands, each with `to_json()`;
- `bqls.lsp.jsonrpc` – `RequestID`, a JSON-RPC request ID that is an
  unsigned integer or a string;
- `bqls.diff` – line diffs turned into text edits;
- `bqls.diagnostics` – analysis errors turned into diagnostics, and byte
  counts printed in binary units;
- `bqls.export` – query result rows formatted as CSV cells, spreadsheet
  cells or JSON records;
- `bqls.bigquery.models`, `bqls.bigquery.db`, `bqls.bigquery.cache` –
  project, dataset and table names, their SQLite cache, and a caching
  wrapper around a BigQuery client.

It depends only on the standard library.

## Virtual documents

Query results and table previews are addressed by `bqls://` URIs:

```python
from bqls.lsp.uri import new_job_virtual_text_document_uri

uri = new_job_virtual_text_document_uri("my-project", "job_123")
assert uri.is_virtual_text_document()

info = uri.virtual_text_document_info()
# VirtualTextDocumentInfo(project_id='my-project', dataset_id='', table_id='', job_id='job_123')
```

`new_table_virtual_text_document_uri(project, dataset, table)` builds the URI
of a table. A URI has to name a project, and then either a dataset and a table
or a job; one that does not raises `ValueError`. For `file://` URIs,
`DocumentURI.file_path()` returns the local path.

## Formatting edits

`compute_edits` compares two texts line by line and returns the `TextEdit`
objects that turn the first into the second. Each edit covers whole lines:
deletions carry an empty `new_text`, insertions carry the inserted lines.

```python
from bqls.diff import compute_edits

edits = compute_edits("file:///query.sql", "select 1\n", "SELECT\n  1\n")
payload = [edit.to_json() for edit in edits]
```

`operations(a, b)` gives the underlying delete and insert runs over two lists
of lines, and `split_lines` splits text into lines that keep their newline.

## Diagnostics and sizes

`convert_errors_to_diagnostics` turns `SourceError` values into `Diagnostic`
objects. Each one spans `term_length` characters from the error's position,
and its severity is `DiagnosticSeverity.ERROR` unless the error sets another.
`bytes_convert` prints a byte count in binary units, the way a dry run
reports how much a query will process:

```python
from bqls.diagnostics import bytes_convert

bytes_convert(0)        # "0 bytes"
bytes_convert(1024)     # "1 KiB"
```

## Exporting results

Rows come as lists of values matched with a schema of `FieldSchema` objects.
Repeated fields become `[...]` lists, records (nested lists with a `schema`)
become JSON objects and datetimes are written in RFC 3339 form:

```python
from bqls.export import FieldSchema, format_csv, parse_spreadsheet_url

schema = [FieldSchema("ids", "INTEGER", repeated=True)]
format_csv([[1, 2]], schema)      # ["[1,2]"]

spreadsheet_id, sheet_id = parse_spreadsheet_url(
    "https://docs.google.com/spreadsheets/d/asdf_asdfasdf/edit?gid=123#gid=123"
)
# ("asdf_asdfasdf", 123)
```

`format_spreadsheet` keeps numbers and booleans as they are,
`format_record_json` renders one record as a JSON object, and
`write_csv(path, schema, rows)` writes a header line and the formatted rows to
a file and returns the number of rows. A value that does not fit its schema
raises `ExportError`.

## Metadata cache

`bqls.bigquery.db.Database` keeps project, dataset and table names in SQLite.
`Database.open_default()` opens `$XDG_CACHE_HOME/bqls/cache.sqlite3`, or
`~/.cache/bqls/cache.sqlite3` when `XDG_CACHE_HOME` is not set, creating the
`bqls` directory if needed. Call `migrate()` to create the tables; the
database can be used as a context manager.

`bqls.bigquery.cache.CachedClient` wraps a client object that provides
`list_projects`, `list_datasets`, `list_tables`, `get_table_metadata`,
`get_default_project` and `close`. List calls are answered from the cache
when it has entries; the first time a listing is served that way, it is
fetched again in a background thread to refresh the cache
(`wait_for_refresh()` waits for those threads). When the cache is empty the
wrapped client is called and its answer stored. Table metadata is kept in
memory after the first request.

`bqls.bigquery.models.extract_latest_suffix_tables` folds numbered tables such
as `events_20240101` and `events_20240102` into the highest-numbered one and
returns the tables sorted by ID.

## What it does not do

`bqls` is a library, not a running server. It has no command, no JSON-RPC
connection or message loop, and no handlers for `initialize`, hover,
completion or code actions. It does not parse or format SQL: `compute_edits`
needs the formatted text from elsewhere. It does not talk to BigQuery or to
spreadsheets itself: `CachedClient` needs a client object supplied by the
caller, and the export functions only format cells and parse sheet URLs.