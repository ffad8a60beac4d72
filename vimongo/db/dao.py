"""MongoDB data access used by the browser, the edit pipeline and the header."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from pymongo import MongoClient
from pymongo.errors import ConfigurationError, InvalidURI, PyMongoError

from ..exceptions import BackendError, PingError

if TYPE_CHECKING:
    from ..config import MongoConfig

logger = logging.getLogger(__name__)


@dataclass
class ServerStatus:
    """Subset of ``serverStatus`` shown in the header."""

    host: str = ""
    version: str = ""
    uptime: int = 0
    current_connections: int = 0
    available_connections: int = 0


@dataclass
class DatabaseInfo:
    name: str
    collections: list[str] = field(default_factory=list)


class Dao(Protocol):
    """Operations the UI needs from a MongoDB server."""

    def ping(self) -> None: ...

    def get_server_status(self) -> ServerStatus: ...

    def list_dbs_with_collections(self, name_filter: str = "") -> list[DatabaseInfo]: ...

    def list_documents(
        self,
        db: str,
        coll: str,
        filter: dict[str, Any],
        sort: dict[str, Any],
        page: int,
        limit: int,
    ) -> tuple[list[dict[str, Any]], int]: ...

    def get_document(self, db: str, coll: str, document_id: Any) -> dict[str, Any]: ...

    def insert_document(self, db: str, coll: str, document: dict[str, Any]) -> Any: ...

    def update_document(self, db: str, coll: str, document_id: Any, partial: dict[str, Any]) -> None: ...

    def delete_document(self, db: str, coll: str, document_id: Any) -> None: ...

    def add_collection(self, db: str, coll: str) -> None: ...

    def delete_collection(self, db: str, coll: str) -> None: ...


class MongoDao:
    """Dao backed by a pymongo client.

    Every driver failure is re-raised as BackendError naming the operation,
    so callers only deal with vimongo exceptions.
    """

    def __init__(self, client: MongoClient, config: MongoConfig | None = None) -> None:
        self._client = client
        self.config = config

    @classmethod
    def connect(cls, config: MongoConfig) -> MongoDao:
        """Create a client for a connection config.

        The client connects lazily; call ``ping`` to check the server.
        """
        try:
            client: MongoClient = MongoClient(
                config.get_uri(),
                serverSelectionTimeoutMS=int(config.timeout) * 1000,
                connectTimeoutMS=int(config.timeout) * 1000,
            )
        except (ConfigurationError, InvalidURI) as exc:
            raise BackendError("connect", str(exc)) from exc
        logger.info("Created client for %s", config.get_safe_uri())
        return cls(client, config)

    def close(self) -> None:
        self._client.close()

    def _collection(self, db: str, coll: str) -> Any:
        return self._client[db][coll]

    def ping(self) -> None:
        try:
            self._client.admin.command("ping")
        except PyMongoError as exc:
            raise PingError(str(exc)) from exc

    def get_server_status(self) -> ServerStatus:
        try:
            raw = self._client.admin.command("serverStatus")
        except PyMongoError as exc:
            raise BackendError("serverStatus", str(exc)) from exc
        connections = raw.get("connections", {})
        return ServerStatus(
            host=str(raw.get("host", "")),
            version=str(raw.get("version", "")),
            uptime=int(raw.get("uptime", 0)),
            current_connections=int(connections.get("current", 0)),
            available_connections=int(connections.get("available", 0)),
        )

    def list_dbs_with_collections(self, name_filter: str = "") -> list[DatabaseInfo]:
        """List databases and their collections, sorted by name.

        With ``name_filter``, only collections whose name contains it (case
        insensitive) are kept, and databases left without any are dropped
        unless the database name itself matches.
        """
        needle = name_filter.lower()
        result = []
        try:
            for db_name in sorted(self._client.list_database_names()):
                collections = sorted(self._client[db_name].list_collection_names())
                if needle:
                    matched = [c for c in collections if needle in c.lower()]
                    if not matched and needle not in db_name.lower():
                        continue
                    if matched:
                        collections = matched
                result.append(DatabaseInfo(db_name, collections))
        except PyMongoError as exc:
            raise BackendError("listDatabases", str(exc)) from exc
        return result

    def list_documents(
        self,
        db: str,
        coll: str,
        filter: dict[str, Any],
        sort: dict[str, Any],
        page: int,
        limit: int,
    ) -> tuple[list[dict[str, Any]], int]:
        """Return one page of documents plus the total matching count."""
        collection = self._collection(db, coll)
        try:
            count = collection.count_documents(filter)
            cursor = collection.find(filter).skip(page).limit(limit)
            if sort:
                cursor = cursor.sort(list(sort.items()))
            documents = list(cursor)
        except PyMongoError as exc:
            raise BackendError("find", str(exc)) from exc
        logger.debug("Listed %d/%d documents from %s.%s at %d", len(documents), count, db, coll, page)
        return documents, count

    def get_document(self, db: str, coll: str, document_id: Any) -> dict[str, Any]:
        try:
            document = self._collection(db, coll).find_one({"_id": document_id})
        except PyMongoError as exc:
            raise BackendError("findOne", str(exc)) from exc
        if document is None:
            raise BackendError("findOne", f"document {document_id} not found in {db}.{coll}")
        return document

    def insert_document(self, db: str, coll: str, document: dict[str, Any]) -> Any:
        try:
            result = self._collection(db, coll).insert_one(document)
        except PyMongoError as exc:
            raise BackendError("insert", str(exc)) from exc
        logger.info("Inserted %s into %s.%s", result.inserted_id, db, coll)
        return result.inserted_id

    def update_document(self, db: str, coll: str, document_id: Any, partial: dict[str, Any]) -> None:
        try:
            result = self._collection(db, coll).update_one({"_id": document_id}, {"$set": partial})
        except PyMongoError as exc:
            raise BackendError("update", str(exc)) from exc
        if result.matched_count == 0:
            raise BackendError("update", f"document {document_id} not found in {db}.{coll}")
        logger.info("Updated %s in %s.%s", document_id, db, coll)

    def delete_document(self, db: str, coll: str, document_id: Any) -> None:
        try:
            result = self._collection(db, coll).delete_one({"_id": document_id})
        except PyMongoError as exc:
            raise BackendError("delete", str(exc)) from exc
        if result.deleted_count == 0:
            raise BackendError("delete", f"document {document_id} not found in {db}.{coll}")
        logger.info("Deleted %s from %s.%s", document_id, db, coll)

    def add_collection(self, db: str, coll: str) -> None:
        try:
            self._client[db].create_collection(coll)
        except PyMongoError as exc:
            raise BackendError("createCollection", str(exc)) from exc
        logger.info("Created collection %s.%s", db, coll)

    def delete_collection(self, db: str, coll: str) -> None:
        try:
            self._client[db].drop_collection(coll)
        except PyMongoError as exc:
            raise BackendError("dropCollection", str(exc)) from exc
        logger.info("Dropped collection %s.%s", db, coll)
