"""Tests for query and sort bar parsing."""

from __future__ import annotations

import datetime

import pytest
from bson.int64 import Int64
from bson.objectid import ObjectId

from vimongo.db.query import DEFAULT_TEXT, parse_query_string
from vimongo.exceptions import QueryParseError


class TestParseQueryString:
    @pytest.mark.parametrize("text", ["", "   ", DEFAULT_TEXT, "{}", "{ }"])
    def test_empty_means_no_filter(self, text):
        assert parse_query_string(text) == {}

    def test_strict_json(self):
        assert parse_query_string('{"name": "Ada"}') == {"name": "Ada"}

    def test_unquoted_keys_and_single_quotes(self):
        assert parse_query_string("{ name: 'Ada', age: { $gt: 30 } }") == {"name": "Ada", "age": {"$gt": 30}}

    def test_braces_are_optional(self):
        assert parse_query_string("createdAt: -1") == {"createdAt": -1}

    def test_dotted_keys(self):
        assert parse_query_string("{ address.city: 'London' }") == {"address.city": "London"}

    def test_literals(self):
        assert parse_query_string("{ a: true, b: false, c: null }") == {"a": True, "b": False, "c": None}

    def test_trailing_commas(self):
        assert parse_query_string("{ tags: { $in: ['a', 'b',] }, }") == {"tags": {"$in": ["a", "b"]}}

    def test_object_id_helper(self):
        result = parse_query_string('{ _id: ObjectId("65f1a2b3c4d5e6f708091a2b") }')
        assert result == {"_id": ObjectId("65f1a2b3c4d5e6f708091a2b")}

    def test_iso_date_helper(self):
        result = parse_query_string("{ createdAt: { $gte: new ISODate('2024-01-01T00:00:00Z') } }")
        value = result["createdAt"]["$gte"]
        assert isinstance(value, datetime.datetime)
        assert (value.year, value.month, value.day) == (2024, 1, 1)

    def test_number_long_helper(self):
        assert parse_query_string("{ views: NumberLong(42) }") == {"views": Int64(42)}

    def test_escaped_quotes_in_strings(self):
        assert parse_query_string("{ title: 'say \"hi\"' }") == {"title": 'say "hi"'}

    def test_unknown_word(self):
        with pytest.raises(QueryParseError) as info:
            parse_query_string("{ status: pending }")
        assert info.value.text == "{ status: pending }"

    def test_unterminated_string(self):
        with pytest.raises(QueryParseError):
            parse_query_string("{ name: 'Ada }")

    def test_unclosed_helper(self):
        with pytest.raises(QueryParseError):
            parse_query_string('{ _id: ObjectId("65f1a2b3c4d5e6f708091a2b" }')

    def test_invalid_object_id(self):
        with pytest.raises(QueryParseError):
            parse_query_string('{ _id: ObjectId("nope") }')

    @pytest.mark.parametrize(
        "text",
        [
            "{ _id: ObjectId('\\q') }",
            '{ d: ISODate("\\x") }',
            "{ views: NumberLong('\\u12') }",
        ],
    )
    def test_bad_escape_in_helper(self, text):
        with pytest.raises(QueryParseError) as info:
            parse_query_string(text)
        assert info.value.text == text

    def test_syntax_error(self):
        with pytest.raises(QueryParseError):
            parse_query_string("{ a: }")
