"""Shared fixtures: an in-memory Dao and a scripted editor."""

from __future__ import annotations

import copy
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from bson.objectid import ObjectId

from vimongo.core.events import EventBus
from vimongo.db.dao import DatabaseInfo, ServerStatus
from vimongo.exceptions import BackendError, EditorError, PingError


class FakeDao:
    """Dao backed by dicts. Records every write in ``writes``."""

    def __init__(self) -> None:
        self.collections: dict[tuple[str, str], list[dict[str, Any]]] = {}
        self.writes: list[tuple[str, ...]] = []
        self.list_calls: list[dict[str, Any]] = []
        self.fail_next: BackendError | None = None
        self.ping_error: PingError | None = None
        self.status = ServerStatus(host="localhost:27017", version="7.0.5", uptime=42, current_connections=3)

    def seed(self, db: str, coll: str, documents: list[dict[str, Any]]) -> None:
        self.collections[(db, coll)] = [dict(d) for d in documents]

    def _raise_if_failing(self) -> None:
        if self.fail_next is not None:
            error, self.fail_next = self.fail_next, None
            raise error

    def ping(self) -> None:
        if self.ping_error is not None:
            raise self.ping_error

    def get_server_status(self) -> ServerStatus:
        return self.status

    def list_dbs_with_collections(self, name_filter: str = "") -> list[DatabaseInfo]:
        dbs: dict[str, list[str]] = {}
        for db, coll in sorted(self.collections):
            if name_filter.lower() in coll.lower():
                dbs.setdefault(db, []).append(coll)
        return [DatabaseInfo(name, colls) for name, colls in dbs.items()]

    def list_documents(self, db, coll, filter, sort, page, limit):
        self._raise_if_failing()
        self.list_calls.append({"filter": filter, "sort": sort, "page": page, "limit": limit})
        docs = [d for d in self.collections.get((db, coll), []) if all(d.get(k) == v for k, v in filter.items())]
        return copy.deepcopy(docs[page : page + limit]), len(docs)

    def get_document(self, db, coll, document_id):
        for doc in self.collections.get((db, coll), []):
            if doc.get("_id") == document_id:
                return copy.deepcopy(doc)
        raise BackendError("get document", "not found")

    def insert_document(self, db, coll, document):
        self._raise_if_failing()
        inserted_id = document.get("_id", ObjectId())
        self.collections.setdefault((db, coll), []).append({"_id": inserted_id, **document})
        self.writes.append(("insert", db, coll))
        return inserted_id

    def update_document(self, db, coll, document_id, partial):
        self._raise_if_failing()
        self.writes.append(("update", db, coll))
        for doc in self.collections.get((db, coll), []):
            if doc.get("_id") == document_id:
                doc.update(partial)
                return
        raise BackendError("update document", f"no document with _id {document_id}")

    def delete_document(self, db, coll, document_id):
        self._raise_if_failing()
        self.writes.append(("delete", db, coll))
        docs = self.collections.get((db, coll), [])
        self.collections[(db, coll)] = [d for d in docs if d.get("_id") != document_id]

    def add_collection(self, db, coll):
        self.collections.setdefault((db, coll), [])

    def delete_collection(self, db, coll):
        self.collections.pop((db, coll), None)


class ScriptedEditor:
    """Stands in for ExternalEditor: rewrites the file with ``edit(text)``."""

    def __init__(self, edit: Callable[[str], str] | None = None, error: str | None = None) -> None:
        self.edit = edit or (lambda text: text)
        self.error = error
        self.paths: list[Path] = []
        self.seen: list[str] = []

    def run(self, path: Path) -> None:
        self.paths.append(path)
        text = path.read_text(encoding="utf-8")
        self.seen.append(text)
        if self.error is not None:
            raise EditorError(self.error)
        path.write_text(self.edit(text), encoding="utf-8")


@pytest.fixture
def fake_dao() -> FakeDao:
    return FakeDao()


@pytest.fixture
def scripted_editor() -> Callable[..., ScriptedEditor]:
    return ScriptedEditor


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every vimongo path at a temporary directory."""
    import vimongo.config as config_module

    monkeypatch.setattr(config_module, "CONFIG_PATH", tmp_path / "config.json")
    monkeypatch.setattr(config_module, "KEYBINDINGS_PATH", tmp_path / "keybindings.json")
    monkeypatch.setattr(config_module, "HISTORY_PATH", tmp_path / "history.txt")
    monkeypatch.setattr(config_module, "LOG_PATH", tmp_path / "vimongo.log")
    return tmp_path
