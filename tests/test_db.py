import os
import sqlite3

import pytest

from bqls.bigquery.db import Database, bq_cache_path, cache_root
from bqls.bigquery.models import Dataset, Project, Table


@pytest.fixture
def db():
    database = Database(sqlite3.connect(":memory:"))
    database.migrate()
    yield database
    database.close()


def test_cache_root_prefers_xdg(tmp_path):
    env = {"XDG_CACHE_HOME": str(tmp_path / "xdg"), "HOME": str(tmp_path / "home")}
    assert cache_root(env) == str(tmp_path / "xdg")


def test_cache_root_falls_back_to_home(tmp_path):
    env = {"HOME": str(tmp_path)}
    assert cache_root(env) == os.path.join(str(tmp_path), ".cache")


def test_cache_root_missing():
    assert cache_root({}) is None


def test_bq_cache_path_creates_directory(tmp_path):
    env = {"XDG_CACHE_HOME": str(tmp_path)}
    path = bq_cache_path(env)
    assert path == tmp_path / "bqls"
    assert path.is_dir()
    assert bq_cache_path(env) == path


def test_bq_cache_path_rejects_file(tmp_path):
    (tmp_path / "bqls").write_text("not a directory")
    with pytest.raises(NotADirectoryError):
        bq_cache_path({"XDG_CACHE_HOME": str(tmp_path)})


def test_bq_cache_path_without_root():
    with pytest.raises(LookupError):
        bq_cache_path({})


def test_bq_cache_path_does_not_create_parents(tmp_path):
    with pytest.raises(FileNotFoundError):
        bq_cache_path({"HOME": str(tmp_path / "missing")})


def test_open_default_persists(tmp_path):
    env = {"XDG_CACHE_HOME": str(tmp_path)}
    with Database.open_default(env) as database:
        database.migrate()
        database.insert_projects([Project("p1", "Project One")])
    assert (tmp_path / "bqls" / "cache.sqlite3").is_file()
    with Database.open_default(env) as database:
        database.migrate()
        assert database.select_projects() == [Project("p1", "Project One")]


def test_migrate_is_idempotent(db):
    db.migrate()
    assert db.select_projects() == []


def test_insert_projects_ignores_duplicates(db):
    db.insert_projects([Project("p1", "first"), Project("p2", "second")])
    db.insert_projects([Project("p1", "renamed")])
    projects = sorted(db.select_projects(), key=lambda p: p.project_id)
    assert projects == [Project("p1", "first"), Project("p2", "second")]


def test_insert_projects_empty_raises(db):
    with pytest.raises(ValueError):
        db.insert_projects([])


def test_replace_datasets_only_touches_project(db):
    db.replace_datasets("p1", [Dataset("p1", "a"), Dataset("p1", "b")])
    db.replace_datasets("p2", [Dataset("p2", "c")])
    db.replace_datasets("p1", [Dataset("p1", "d")])
    assert db.select_datasets("p1") == [Dataset("p1", "d")]
    assert db.select_datasets("p2") == [Dataset("p2", "c")]


def test_replace_datasets_empty_keeps_existing(db):
    db.replace_datasets("p1", [Dataset("p1", "a")])
    with pytest.raises(ValueError):
        db.replace_datasets("p1", [])
    assert db.select_datasets("p1") == [Dataset("p1", "a")]


def test_replace_tables_round_trip(db):
    tables = [Table("p", "d", "t1"), Table("p", "d", "t2")]
    db.replace_tables("p", "d", tables)
    db.replace_tables("p", "other", [Table("p", "other", "x")])
    got = sorted(db.select_tables("p", "d"), key=lambda t: t.table_id)
    assert got == tables
    db.replace_tables("p", "d", [Table("p", "d", "t3")])
    assert db.select_tables("p", "d") == [Table("p", "d", "t3")]
    assert db.select_tables("p", "other") == [Table("p", "other", "x")]


def test_replace_tables_empty_raises(db):
    with pytest.raises(ValueError):
        db.replace_tables("p", "d", [])


def test_select_unknown_is_empty(db):
    assert db.select_datasets("nope") == []
    assert db.select_tables("nope", "nope") == []


def test_closed_database_raises():
    database = Database(sqlite3.connect(":memory:"))
    database.migrate()
    database.close()
    with pytest.raises(sqlite3.ProgrammingError):
        database.select_projects()