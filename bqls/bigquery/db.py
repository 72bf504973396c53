"""The on-disk SQLite cache of projects, datasets and tables."""

from __future__ import annotations

import os
import sqlite3
import threading
from pathlib import Path
from types import TracebackType
from typing import Iterable, Mapping

from bqls.bigquery.models import Dataset, Project, Table

CACHE_DIR_NAME = "bqls"
CACHE_FILE_NAME = "cache.sqlite3"

_SCHEMA = (
    """CREATE TABLE IF NOT EXISTS projects (
        project_id TEXT PRIMARY KEY,
        name TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS datasets (
        project_id TEXT,
        dataset_id TEXT,
        PRIMARY KEY (project_id, dataset_id)
    )""",
    """CREATE TABLE IF NOT EXISTS tables (
        project_id TEXT,
        dataset_id TEXT,
        table_id TEXT,
        PRIMARY KEY (project_id, dataset_id, table_id)
    )""",
)


def cache_root(environ: Mapping[str, str] | None = None) -> str | None:
    """The user's cache directory, or None when it cannot be determined."""
    env = os.environ if environ is None else environ
    xdg = env.get("XDG_CACHE_HOME", "")
    if xdg:
        return xdg
    home = env.get("HOME", "")
    if home:
        return os.path.join(home, ".cache")
    return None


def bq_cache_path(environ: Mapping[str, str] | None = None) -> Path:
    """Return the server's cache directory, creating it if it is missing."""
    root = cache_root(environ)
    if root is None:
        raise LookupError("cache path not found")

    path = Path(root) / CACHE_DIR_NAME
    if path.exists():
        if not path.is_dir():
            raise NotADirectoryError(f"cache path({path}) is not a directory")
        return path

    path.mkdir()
    return path


def _require_items(items: list, what: str) -> None:
    if not items:
        raise ValueError(f"no {what} to insert")


class Database:
    """Cached listings of projects, datasets and tables."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection
        self._lock = threading.Lock()

    @classmethod
    def open_default(cls, environ: Mapping[str, str] | None = None) -> Database:
        """Open the cache file in the user's cache directory."""
        path = bq_cache_path(environ) / CACHE_FILE_NAME
        return cls(sqlite3.connect(str(path), check_same_thread=False))

    def __enter__(self) -> Database:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def migrate(self) -> None:
        """Create the cache tables if they do not exist."""
        with self._lock, self._conn:
            for statement in _SCHEMA:
                self._conn.execute(statement)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def select_projects(self) -> list[Project]:
        with self._lock:
            rows = self._conn.execute("SELECT project_id, name FROM projects").fetchall()
        return [Project(project_id=pid, name=name or "") for pid, name in rows]

    def insert_projects(self, projects: Iterable[Project]) -> None:
        """Add projects, keeping any that are already cached."""
        items = list(projects)
        _require_items(items, "projects")
        with self._lock, self._conn:
            self._conn.executemany(
                "INSERT OR IGNORE INTO projects(project_id, name) VALUES (?, ?)",
                [(p.project_id, p.name) for p in items],
            )

    def select_datasets(self, project_id: str) -> list[Dataset]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT project_id, dataset_id FROM datasets WHERE project_id = ?",
                (project_id,),
            ).fetchall()
        return [Dataset(project_id=pid, dataset_id=did) for pid, did in rows]

    def replace_datasets(self, project_id: str, datasets: Iterable[Dataset]) -> None:
        """Replace the cached datasets of a project in one transaction."""
        items = list(datasets)
        _require_items(items, "datasets")
        with self._lock, self._conn:
            self._conn.execute("DELETE FROM datasets WHERE project_id = ?", (project_id,))
            self._conn.executemany(
                "INSERT OR IGNORE INTO datasets(project_id, dataset_id) VALUES (?, ?)",
                [(d.project_id, d.dataset_id) for d in items],
            )

    def select_tables(self, project_id: str, dataset_id: str) -> list[Table]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT project_id, dataset_id, table_id FROM tables "
                "WHERE project_id = ? AND dataset_id = ?",
                (project_id, dataset_id),
            ).fetchall()
        return [
            Table(project_id=pid, dataset_id=did, table_id=tid) for pid, did, tid in rows
        ]

    def replace_tables(
        self, project_id: str, dataset_id: str, tables: Iterable[Table]
    ) -> None:
        """Replace the cached tables of a dataset in one transaction."""
        items = list(tables)
        _require_items(items, "tables")
        with self._lock, self._conn:
            self._conn.execute(
                "DELETE FROM tables WHERE project_id = ? AND dataset_id = ?",
                (project_id, dataset_id),
            )
            self._conn.executemany(
                "INSERT OR IGNORE INTO tables(project_id, dataset_id, table_id) "
                "VALUES (?, ?, ?)",
                [(t.project_id, t.dataset_id, t.table_id) for t in items],
            )