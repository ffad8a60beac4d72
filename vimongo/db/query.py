"""Parsing of the loosely typed query and sort bars.

Users type shell-like documents rather than strict JSON::

    { name: 'Ada', age: { $gt: 30 }, _id: ObjectId("65f1...") }

The text is normalized into Extended JSON (quoted keys, double-quoted
strings, helper calls turned into ``$oid``/``$date`` wrappers) and then
decoded with bson's json_util.
"""

from __future__ import annotations

import json
from typing import Any

from bson import json_util
from bson.errors import BSONError

from ..exceptions import QueryParseError

PLACEHOLDER = "<$0>"
DEFAULT_TEXT = "{ <$0> }"

_LITERALS = {"true", "false", "null"}
_HELPERS = {
    "ObjectId": "$oid",
    "ObjectID": "$oid",
    "ISODate": "$date",
    "Date": "$date",
    "NumberLong": "$numberLong",
    "NumberDecimal": "$numberDecimal",
}


def parse_query_string(text: str) -> dict[str, Any]:
    """Parse query/sort bar text into a document.

    Empty text (or the untouched placeholder) means "no filter".

    Raises:
        QueryParseError: If the text cannot be turned into a JSON object.
    """
    cleaned = text.replace(PLACEHOLDER, "").strip()
    if not cleaned:
        return {}
    if not cleaned.startswith("{"):
        cleaned = "{" + cleaned + "}"

    normalized = _normalize(cleaned, text)
    try:
        result = json_util.loads(normalized)
    except (ValueError, TypeError, BSONError) as exc:
        raise QueryParseError(text, str(exc)) from exc
    if not isinstance(result, dict):
        raise QueryParseError(text, "query must be a document")
    return result


def _read_string(source: str, start: int, original: str) -> tuple[str, int]:
    """Read a quoted literal starting at ``start``; return (json literal, next index)."""
    quote = source[start]
    chars: list[str] = []
    i = start + 1
    while i < len(source):
        ch = source[i]
        if ch == "\\" and i + 1 < len(source):
            nxt = source[i + 1]
            if quote == "'" and nxt == "'":
                chars.append("'")
            else:
                chars.append(ch + nxt)
            i += 2
            continue
        if ch == quote:
            body = "".join(chars)
            if quote == "'":
                body = body.replace('"', '\\"')
            return '"' + body + '"', i + 1
        chars.append(ch)
        i += 1
    raise QueryParseError(original, "unterminated string")


def _skip_spaces(source: str, i: int) -> int:
    while i < len(source) and source[i].isspace():
        i += 1
    return i


def _read_helper(source: str, name: str, start: int, original: str) -> tuple[str, int]:
    """Read ``Helper("arg")`` starting at the opening parenthesis."""
    i = _skip_spaces(source, start + 1)
    if i < len(source) and source[i] in "\"'":
        literal, i = _read_string(source, i, original)
        try:
            value = json.loads(literal)
        except json.JSONDecodeError as exc:
            raise QueryParseError(original, str(exc)) from exc
    else:
        end = i
        while end < len(source) and source[end] not in ")":
            end += 1
        value = source[i:end].strip()
        i = end
    i = _skip_spaces(source, i)
    if i >= len(source) or source[i] != ")":
        raise QueryParseError(original, f"unclosed {name}(")
    return json.dumps({_HELPERS[name]: value}), i + 1


def _drop_trailing_comma(out: list[str]) -> None:
    while out and out[-1].isspace():
        out.pop()
    if out and out[-1] == ",":
        out.pop()


def _normalize(source: str, original: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(source):
        ch = source[i]
        if ch in "\"'":
            literal, i = _read_string(source, i, original)
            out.append(literal)
            continue
        if ch.isalpha() or ch in "_$":
            end = i
            while end < len(source) and (source[end].isalnum() or source[end] in "_$."):
                end += 1
            word = source[i:end]
            nxt = _skip_spaces(source, end)
            if nxt < len(source) and source[nxt] == "(" and word in _HELPERS:
                literal, i = _read_helper(source, word, nxt, original)
                out.append(literal)
            elif nxt < len(source) and source[nxt] == ":":
                out.append(json.dumps(word))
                i = end
            elif word in _LITERALS:
                out.append(word)
                i = end
            elif word == "new":
                i = end
            else:
                raise QueryParseError(original, f"unexpected word {word!r}")
            continue
        if ch in "}]":
            _drop_trailing_comma(out)
        out.append(ch)
        i += 1
    return "".join(out)
