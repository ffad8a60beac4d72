"""Insert/edit/duplicate documents through an external editor.

A session drafts the document as pretty JSON in a temporary file, hands the
file to the editor, validates what comes back and only then writes to the
server. Every session ends in COMMITTED or REJECTED, and the temporary file
is gone by the time the outcome is returned.
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..core.events import EventBus, EventMessage, EventType
from ..db.documents import (
    ID_FIELD,
    documents_equal,
    indent_json,
    parse_document,
    remove_field,
)
from ..exceptions import BackendError, DocumentError, EditorError, TempResourceError

if TYPE_CHECKING:
    from ..db.dao import Dao
    from .editor import ExternalEditor

logger = logging.getLogger(__name__)

COMPONENT_ID = "DocModifier"
EMPTY_DOCUMENT = "{}"


class EditState(Enum):
    IDLE = "idle"
    DRAFTING = "drafting"
    AWAITING_EDITOR = "awaiting_editor"
    VALIDATING = "validating"
    COMMITTED = "committed"
    REJECTED = "rejected"


class ChangeDetection(Enum):
    """How an edited draft is compared with the original.

    RAW compares the text byte for byte, so reformatting counts as a change.
    SEMANTIC compares the parsed JSON, so whitespace and key spacing do not.
    """

    RAW = "raw"
    SEMANTIC = "semantic"


class EditAction(Enum):
    INSERT = "insert"
    EDIT = "edit"
    DUPLICATE = "duplicate"


@dataclass
class EditSession:
    target_db: str
    target_coll: str
    original_text: str
    temp_path: Path | None = None
    action: EditAction = EditAction.EDIT


@dataclass
class EditOutcome:
    state: EditState
    document: dict[str, Any] | None = None
    inserted_id: Any = None
    error: Exception | None = None

    @property
    def committed(self) -> bool:
        return self.state is EditState.COMMITTED


class DocumentEditPipeline:
    """Runs one editor session at a time against a Dao."""

    def __init__(
        self,
        dao: Dao,
        bus: EventBus | None,
        editor: ExternalEditor,
        change_detection: ChangeDetection = ChangeDetection.SEMANTIC,
    ) -> None:
        self.dao = dao
        self.bus = bus
        self.editor = editor
        self.change_detection = change_detection
        self.state = EditState.IDLE
        self.last_session: EditSession | None = None

    def insert(self, db: str, coll: str) -> EditOutcome:
        """Open an empty document and insert it if the user fills it in."""
        return self._run(EditSession(db, coll, EMPTY_DOCUMENT, action=EditAction.INSERT))

    def edit(self, db: str, coll: str, document_text: str) -> EditOutcome:
        """Open an existing document and update it if it was changed."""
        return self._run(EditSession(db, coll, document_text, action=EditAction.EDIT))

    def duplicate(self, db: str, coll: str, document_text: str) -> EditOutcome:
        """Open a copy of a document without its _id and insert it."""
        return self._run(EditSession(db, coll, document_text, action=EditAction.DUPLICATE))

    def _run(self, session: EditSession) -> EditOutcome:
        self.last_session = session
        self.state = EditState.DRAFTING
        try:
            draft = self._draft(session)
            session.temp_path = self._write_temp(draft)

            self.state = EditState.AWAITING_EDITOR
            self.editor.run(session.temp_path)

            self.state = EditState.VALIDATING
            edited = self._read_temp(session.temp_path)
            return self._commit(session, draft, edited)
        except (DocumentError, EditorError, TempResourceError, BackendError) as exc:
            logger.error("%s in %s.%s rejected: %s", session.action.value, session.target_db, session.target_coll, exc)
            return self._finish(EditOutcome(EditState.REJECTED, error=exc))
        finally:
            self._cleanup(session)

    def _draft(self, session: EditSession) -> str:
        text = session.original_text
        if session.action is EditAction.DUPLICATE:
            text = remove_field(text, ID_FIELD)
        return indent_json(text)

    def _is_unchanged(self, draft: str, edited: str) -> bool:
        if self.change_detection is ChangeDetection.RAW:
            return draft == edited
        return documents_equal(draft, edited)

    def _commit(self, session: EditSession, draft: str, edited: str) -> EditOutcome:
        if self._is_unchanged(draft, edited):
            logger.debug("Document in %s.%s was not changed", session.target_db, session.target_coll)
            return self._finish(EditOutcome(EditState.REJECTED))

        document = parse_document(edited)

        if session.action is EditAction.EDIT:
            original = parse_document(session.original_text)
            document_id = original.get(ID_FIELD)
            if document_id is None:
                raise DocumentError("Document has no _id field")
            if ID_FIELD in document and document[ID_FIELD] != document_id:
                raise DocumentError("The _id of a document cannot be changed")
            partial = {k: v for k, v in document.items() if k != ID_FIELD}
            self.dao.update_document(session.target_db, session.target_coll, document_id, partial)
            document[ID_FIELD] = document_id
            self._announce(session, document_id)
            return self._finish(EditOutcome(EditState.COMMITTED, document=document))

        document.pop(ID_FIELD, None)
        if not document:
            logger.debug("No document created in %s.%s", session.target_db, session.target_coll)
            return self._finish(EditOutcome(EditState.REJECTED))
        inserted_id = self.dao.insert_document(session.target_db, session.target_coll, document)
        document = {ID_FIELD: inserted_id, **document}
        self._announce(session, inserted_id)
        return self._finish(EditOutcome(EditState.COMMITTED, document=document, inserted_id=inserted_id))

    def _finish(self, outcome: EditOutcome) -> EditOutcome:
        self.state = outcome.state
        return outcome

    def _announce(self, session: EditSession, document_id: Any) -> None:
        if self.bus is None:
            return
        payload = {
            "db": session.target_db,
            "coll": session.target_coll,
            "action": session.action.value,
            "id": document_id,
        }
        self.bus.broadcast(EventMessage(EventType.DOCUMENT_CHANGED, COMPONENT_ID, payload))

    def _write_temp(self, draft: str) -> Path:
        try:
            handle = tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                prefix="doc-",
                suffix=".json",
                delete=False,
            )
        except OSError as exc:
            raise TempResourceError(f"Failed to create temporary document: {exc}") from exc

        path = Path(handle.name)
        try:
            with handle:
                handle.write(draft)
        except OSError as exc:
            path.unlink(missing_ok=True)
            raise TempResourceError(f"Failed to write temporary document: {exc}") from exc
        return path

    def _read_temp(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise TempResourceError(f"Failed to read edited document: {exc}") from exc

    def _cleanup(self, session: EditSession) -> None:
        if session.temp_path is None:
            return
        try:
            session.temp_path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Failed to remove temporary document %s: %s", session.temp_path, exc)
