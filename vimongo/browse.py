"""Browsing state of the collection shown in the content panel.

``CollectionBrowser`` owns the pagination window, the active filter and sort,
the last listed page and the field names offered by autocomplete. It never
touches widgets; the content panel renders ``documents`` after each call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from .db.query import parse_query_string
from .exceptions import BackendError

if TYPE_CHECKING:
    from .db.dao import Dao
    from .editing.pipeline import DocumentEditPipeline, EditOutcome

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


@dataclass
class CollectionState:
    db: str = ""
    coll: str = ""
    page: int = 0
    limit: int = DEFAULT_LIMIT
    count: int = 0
    filter: dict[str, Any] = field(default_factory=dict)
    sort: dict[str, Any] = field(default_factory=dict)

    @property
    def is_open(self) -> bool:
        return bool(self.db and self.coll)

    def describe(self) -> str:
        """One-line summary shown above the document table."""
        info = f"Documents: {self.count}, Page: {self.page}, Limit: {self.limit}"
        if self.filter:
            info += f", Filter: {self.filter}"
        if self.sort:
            info += f", Sort: {self.sort}"
        return info


def infer_field_names(documents: list[dict[str, Any]]) -> list[str]:
    """Top-level keys plus one level of dotted sub-document keys.

    Arrays and scalars are leaves.
    """
    names: set[str] = set()
    for document in documents:
        for key, value in document.items():
            names.add(key)
            if isinstance(value, dict):
                names.update(f"{key}.{sub}" for sub in value)
    return sorted(names)


class CollectionBrowser:
    """Pagination, filter and sort state machine over a Dao."""

    def __init__(self, dao: Dao, pipeline: DocumentEditPipeline | None = None) -> None:
        self.dao = dao
        self.pipeline = pipeline
        self.state = CollectionState()
        self.documents: list[dict[str, Any]] = []
        self.field_names: list[str] = []

    def open(self, db: str, coll: str) -> list[dict[str, Any]]:
        """Show a collection from its first page.

        Reopening the collection already shown keeps its filter and sort.
        """
        if (db, coll) != (self.state.db, self.state.coll):
            return self._move(db=db, coll=coll, page=0, filter={}, sort={})
        return self._move(page=0)

    def apply_filter(self, filter: dict[str, Any]) -> list[dict[str, Any]]:
        return self._move(filter=dict(filter), page=0)

    def apply_sort(self, sort: dict[str, Any]) -> list[dict[str, Any]]:
        return self._move(sort=dict(sort), page=0)

    def apply_filter_text(self, text: str) -> list[dict[str, Any]]:
        """Parse and apply query bar text.

        Raises:
            QueryParseError: If the text is invalid; the state is left as it was.
        """
        return self.apply_filter(parse_query_string(text))

    def apply_sort_text(self, text: str) -> list[dict[str, Any]]:
        """Parse and apply sort bar text.

        Raises:
            QueryParseError: If the text is invalid; the state is left as it was.
        """
        return self.apply_sort(parse_query_string(text))

    def next_page(self) -> bool:
        """Move one page forward. Returns False when already on the last page."""
        if self.state.page + self.state.limit >= self.state.count:
            return False
        self._move(page=self.state.page + self.state.limit)
        return True

    def prev_page(self) -> bool:
        """Move one page back. Returns False when already on the first page."""
        if self.state.page == 0:
            return False
        self._move(page=max(0, self.state.page - self.state.limit))
        return True

    def refresh(self) -> list[dict[str, Any]]:
        return self._list()

    def set_limit(self, limit: int) -> None:
        """Change the page size, keeping the page aligned to it."""
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.state.limit = limit
        self.state.page = (self.state.page // limit) * limit

    def insert(self) -> EditOutcome:
        outcome = self._require_pipeline().insert(self.state.db, self.state.coll)
        if outcome.committed:
            self._list()
        return outcome

    def edit(self, document_text: str) -> EditOutcome:
        outcome = self._require_pipeline().edit(self.state.db, self.state.coll, document_text)
        if outcome.committed:
            self._list()
        return outcome

    def duplicate(self, document_text: str) -> EditOutcome:
        outcome = self._require_pipeline().duplicate(self.state.db, self.state.coll, document_text)
        if outcome.committed:
            self._list()
        return outcome

    def delete(self, document_id: Any) -> list[dict[str, Any]]:
        """Delete a document and re-list the current page.

        Raises:
            BackendError: If the server refuses the delete.
        """
        self.dao.delete_document(self.state.db, self.state.coll, document_id)
        return self._list()

    def _require_pipeline(self) -> DocumentEditPipeline:
        if self.pipeline is None:
            raise RuntimeError("CollectionBrowser has no edit pipeline")
        return self.pipeline

    def _fetch(self) -> list[dict[str, Any]]:
        state = self.state
        documents, count = self.dao.list_documents(
            state.db, state.coll, state.filter, state.sort, state.page, state.limit
        )
        state.count = count
        return documents

    def _move(self, **changes: Any) -> list[dict[str, Any]]:
        """List with a changed cursor, falling back to the previous one on failure."""
        previous = self.state
        self.state = replace(previous, **changes)
        try:
            return self._list()
        except BackendError:
            self.state = previous
            raise

    def _list(self) -> list[dict[str, Any]]:
        """List the current page; a page past the end is clamped and listed once more.

        Raises:
            BackendError: If listing fails; documents and state are kept.
        """
        if not self.state.is_open:
            raise RuntimeError("No collection is open")

        before = replace(self.state)
        try:
            documents = self._fetch()
            state = self.state
            if state.page > 0 and state.page >= state.count:
                clamped = ((state.count - 1) // state.limit) * state.limit if state.count > 0 else 0
                logger.debug("Page %d is past %d documents, clamping to %d", state.page, state.count, clamped)
                state.page = clamped
                documents = self._fetch()
        except BackendError:
            self.state = before
            raise

        self.documents = documents
        self.field_names = infer_field_names(documents)
        return documents
