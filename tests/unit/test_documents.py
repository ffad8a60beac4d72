"""Tests for document text helpers."""

from __future__ import annotations

import json

import pytest
from bson.objectid import ObjectId

from vimongo.db.documents import (
    documents_equal,
    format_id,
    get_id_from_json,
    indent_json,
    line_value,
    parse_document,
    remove_field,
    stringify_document,
)
from vimongo.exceptions import DocumentError

OID = ObjectId("65f1a2b3c4d5e6f708091a2b")


def test_stringify_uses_extended_json():
    text = stringify_document({"_id": OID, "n": 1})
    assert json.loads(text) == {"_id": {"$oid": str(OID)}, "n": 1}


def test_parse_restores_object_id():
    assert parse_document(stringify_document({"_id": OID})) == {"_id": OID}
    assert get_id_from_json('{"_id": {"$oid": "65f1a2b3c4d5e6f708091a2b"}}') == OID


@pytest.mark.parametrize("text", ["", "[1]", "{", '"x"'])
def test_parse_rejects_non_objects(text):
    with pytest.raises(DocumentError):
        parse_document(text)


def test_get_id_requires_id():
    with pytest.raises(DocumentError):
        get_id_from_json('{"a": 1}')


def test_indent_json():
    assert indent_json('{"a":1,"b":[1,2]}') == '{\n  "a": 1,\n  "b": [\n    1,\n    2\n  ]\n}'
    with pytest.raises(DocumentError):
        indent_json("{")


def test_remove_field():
    assert json.loads(remove_field('{"_id": 1, "a": 2}', "_id")) == {"a": 2}
    assert json.loads(remove_field('{"a": 2}', "_id")) == {"a": 2}


def test_documents_equal_ignores_formatting():
    assert documents_equal('{"a":1}', '{\n  "a": 1\n}')
    assert not documents_equal('{"a":1}', '{"a":2}')
    assert not documents_equal('{"a":1}', "{")


def test_format_id():
    assert format_id(OID) == str(OID)
    assert format_id({"$oid": "abc"}) == "abc"
    assert format_id(7) == "7"


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ('  "name": "Ada",', "Ada"),
        ('  "age": 36,', "36"),
        ('  "tags": [', "["),
        ('    "London"', "London"),
        ("  true", "true"),
        ('  "note": "a: b"', "a: b"),
    ],
)
def test_line_value(line, expected):
    assert line_value(line) == expected
