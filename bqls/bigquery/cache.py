"""A client wrapper that serves listings from the local cache and refreshes them."""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from types import TracebackType
from typing import Any, Callable, Hashable

from bqls.bigquery.db import Database
from bqls.bigquery.models import Dataset, Project, Table

_LOG = logging.getLogger(__name__)
_INSERT_BATCH = 1000


class CachedClient:
    """Wrap a BigQuery client, caching listings on disk and metadata in memory.

    Cached listings are returned at once; the first time a listing is served
    from the cache, it is fetched again in the background to refresh it.
    Attributes not defined here are taken from the wrapped client.
    """

    def __init__(self, client: Any, db: Database | None = None) -> None:
        self._client = client
        self._db = db if db is not None else Database.open_default()
        self._db.migrate()
        self._metadata_lock = threading.Lock()
        self._metadata: dict[str, Any] = {}
        self._refresh_lock = threading.Lock()
        self._refreshed: set[Hashable] = set()
        self._threads: list[threading.Thread] = []

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._client, name)

    def __enter__(self) -> CachedClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the cache database and the wrapped client."""
        try:
            self._db.close()
        finally:
            self._client.close()

    def get_default_project(self) -> str:
        return self._client.get_default_project()

    def _select(self, what: str, query: Callable[[], list]) -> list:
        try:
            return query()
        except sqlite3.Error as exc:
            _LOG.warning("failed to select %s: %s", what, exc)
            return []

    def _refresh_once(self, key: Hashable, what: str, fetch: Callable[[], Any]) -> None:
        with self._refresh_lock:
            if key in self._refreshed:
                return
            self._refreshed.add(key)
            thread = threading.Thread(
                target=self._run_refresh, args=(what, fetch), daemon=True
            )
            self._threads.append(thread)
        thread.start()

    @staticmethod
    def _run_refresh(what: str, fetch: Callable[[], Any]) -> None:
        try:
            fetch()
        except Exception as exc:  # a failed refresh leaves the old cache in place
            _LOG.warning("failed to recache %s: %s", what, exc)

    def wait_for_refresh(self, timeout: float | None = None) -> bool:
        """Wait for background refreshes; return True if all have finished."""
        with self._refresh_lock:
            threads = list(self._threads)
        deadline = None if timeout is None else time.monotonic() + timeout
        for thread in threads:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            thread.join(remaining)
        return not any(thread.is_alive() for thread in threads)

    def list_projects(self) -> list[Project]:
        cached = self._select("projects", self._db.select_projects)
        if cached:
            self._refresh_once(("projects",), "projects", self._fetch_projects)
            return cached
        return self._fetch_projects()

    def _fetch_projects(self) -> list[Project]:
        result = list(self._client.list_projects())
        for start in range(0, len(result), _INSERT_BATCH):
            try:
                self._db.insert_projects(result[start:start + _INSERT_BATCH])
            except sqlite3.Error as exc:
                _LOG.warning("failed to insert projects: %s", exc)
        return result

    def list_datasets(self, project_id: str) -> list[Dataset]:
        cached = self._select("datasets", lambda: self._db.select_datasets(project_id))
        if cached:
            self._refresh_once(
                ("datasets", project_id),
                "datasets",
                lambda: self._fetch_datasets(project_id),
            )
            return cached
        return self._fetch_datasets(project_id)

    def _fetch_datasets(self, project_id: str) -> list[Dataset]:
        result = list(self._client.list_datasets(project_id))
        if result:
            try:
                self._db.replace_datasets(project_id, result)
            except sqlite3.Error as exc:
                _LOG.warning("failed to insert datasets: %s", exc)
        return result

    def list_tables(self, project_id: str, dataset_id: str) -> list[Table]:
        cached = self._select(
            "tables", lambda: self._db.select_tables(project_id, dataset_id)
        )
        if cached:
            self._refresh_once(
                ("tables", f"{project_id}.{dataset_id}"),
                "tables",
                lambda: self._fetch_tables(project_id, dataset_id),
            )
            return cached
        return self._fetch_tables(project_id, dataset_id)

    def _fetch_tables(self, project_id: str, dataset_id: str) -> list[Table]:
        result = list(self._client.list_tables(project_id, dataset_id))
        if result:
            try:
                self._db.replace_tables(project_id, dataset_id, result)
            except sqlite3.Error as exc:
                _LOG.warning("failed to insert tables: %s", exc)
        return result

    def get_table_metadata(self, project_id: str, dataset_id: str, table_id: str) -> Any:
        """Return table metadata, fetching it only the first time it is asked for."""
        key = f"{project_id}:{dataset_id}:{table_id}"
        with self._metadata_lock:
            if key in self._metadata:
                return self._metadata[key]
            result = self._client.get_table_metadata(project_id, dataset_id, table_id)
            if result is not None:
                self._metadata[key] = result
            return result