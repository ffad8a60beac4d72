"""MongoDB access and document text helpers."""

from .dao import Dao, DatabaseInfo, MongoDao, ServerStatus
from .documents import (
    ID_FIELD,
    documents_equal,
    format_id,
    get_id,
    get_id_from_json,
    indent_json,
    line_value,
    parse_document,
    remove_field,
    stringify_document,
)
from .query import DEFAULT_TEXT, PLACEHOLDER, parse_query_string

__all__ = [
    "DEFAULT_TEXT",
    "ID_FIELD",
    "PLACEHOLDER",
    "Dao",
    "DatabaseInfo",
    "MongoDao",
    "ServerStatus",
    "documents_equal",
    "format_id",
    "get_id",
    "get_id_from_json",
    "indent_json",
    "line_value",
    "parse_document",
    "remove_field",
    "stringify_document",
    "parse_query_string",
]
