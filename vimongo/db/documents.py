"""Document <-> text helpers.

Documents travel through the UI as relaxed Extended JSON, so ObjectIds and
dates survive a round trip through the table, the peeker and the editor.
"""

from __future__ import annotations

import json
from typing import Any

from bson import json_util
from bson.errors import BSONError
from bson.objectid import ObjectId

from ..exceptions import DocumentError

ID_FIELD = "_id"

_JSON_OPTIONS = json_util.RELAXED_JSON_OPTIONS


def stringify_document(document: dict[str, Any]) -> str:
    """Single-line Extended JSON, used for table rows."""
    return json_util.dumps(document, json_options=_JSON_OPTIONS, ensure_ascii=False)


def indent_json(text: str) -> str:
    """Pretty-print JSON text with two-space indentation.

    Raises:
        DocumentError: If the text is not valid JSON.
    """
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DocumentError(f"Invalid JSON: {exc}") from exc
    return json.dumps(parsed, indent=2, ensure_ascii=False)


def parse_document(text: str) -> dict[str, Any]:
    """Parse Extended JSON text into a document.

    Raises:
        DocumentError: If the text is not a JSON object.
    """
    if not text.strip():
        raise DocumentError("Document cannot be empty")
    try:
        document = json_util.loads(text)
    except (ValueError, TypeError, BSONError) as exc:
        raise DocumentError(f"Invalid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise DocumentError("Document must be a JSON object")
    return document


def get_id(document: dict[str, Any]) -> Any:
    """Return the document's _id.

    Raises:
        DocumentError: If the document has no _id.
    """
    if ID_FIELD not in document:
        raise DocumentError("Document has no _id field")
    return document[ID_FIELD]


def get_id_from_json(text: str) -> Any:
    return get_id(parse_document(text))


def remove_field(text: str, field: str) -> str:
    """Drop a top-level field from a JSON document, returning compact JSON."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DocumentError(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise DocumentError("Document must be a JSON object")
    data.pop(field, None)
    return json.dumps(data, ensure_ascii=False)


def documents_equal(left: str, right: str) -> bool:
    """Compare two JSON texts by parsed structure, ignoring formatting."""
    try:
        return json.loads(left) == json.loads(right)
    except json.JSONDecodeError:
        return False


def format_id(value: Any) -> str:
    """Short display form of an _id."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict) and "$oid" in value:
        return str(value["$oid"])
    return str(value)


def line_value(line: str) -> str:
    """Value part of one line of indented JSON.

    ``  "name": "Ada",`` gives ``Ada``; a line without a key is returned
    stripped of indentation and the trailing comma.
    """
    text = line.strip().rstrip(",")
    if text.startswith('"'):
        try:
            key, end = json.JSONDecoder().raw_decode(text)
        except json.JSONDecodeError:
            key, end = None, 0
        rest = text[end:].lstrip()
        if isinstance(key, str) and rest.startswith(":"):
            text = rest[1:].strip()
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        try:
            value = json.loads(text)
        except json.JSONDecodeError:
            return text
        return value if isinstance(value, str) else text
    return text
