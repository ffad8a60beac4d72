"""Autocomplete for the query and sort bars.

Candidates are MongoDB query operators plus the field names inferred from
the documents currently listed.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from textual.suggester import Suggester


class MongoOperator(NamedTuple):
    name: str
    description: str


MONGO_OPERATORS = [
    MongoOperator("$eq", "Matches values equal to a specified value"),
    MongoOperator("$ne", "Matches values not equal to a specified value"),
    MongoOperator("$gt", "Matches values greater than a specified value"),
    MongoOperator("$gte", "Matches values greater than or equal to a specified value"),
    MongoOperator("$lt", "Matches values less than a specified value"),
    MongoOperator("$lte", "Matches values less than or equal to a specified value"),
    MongoOperator("$in", "Matches any of the values in an array"),
    MongoOperator("$nin", "Matches none of the values in an array"),
    MongoOperator("$and", "Joins clauses with a logical AND"),
    MongoOperator("$or", "Joins clauses with a logical OR"),
    MongoOperator("$nor", "Joins clauses with a logical NOR"),
    MongoOperator("$not", "Inverts the effect of a query expression"),
    MongoOperator("$exists", "Matches documents that have the specified field"),
    MongoOperator("$type", "Matches documents if a field is of the specified type"),
    MongoOperator("$regex", "Matches values against a regular expression"),
    MongoOperator("$options", "Options for $regex, e.g. 'i'"),
    MongoOperator("$expr", "Allows aggregation expressions in queries"),
    MongoOperator("$mod", "Matches values by modulo"),
    MongoOperator("$text", "Performs a text search"),
    MongoOperator("$where", "Matches documents satisfying a JavaScript expression"),
    MongoOperator("$all", "Matches arrays that contain all given elements"),
    MongoOperator("$elemMatch", "Matches arrays with an element matching all conditions"),
    MongoOperator("$size", "Matches arrays of the specified size"),
]

# Trailing field path or $operator
_WORD_RE = re.compile(r"[\w$.]*$")


def current_word(text: str) -> str:
    """Return the word at the end of ``text``."""
    match = _WORD_RE.search(text)
    return match.group(0) if match else ""


def get_completions(text: str, field_names: list[str], max_results: int = 20) -> list[str]:
    """Candidates for the word at the end of ``text``, operators first.

    Matching is a case-insensitive prefix match; nothing is suggested for
    an empty word.
    """
    word = current_word(text)
    if not word:
        return []

    lowered = word.lower()
    results: list[str] = []
    seen: set[str] = set()
    for candidate in [op.name for op in MONGO_OPERATORS] + list(field_names):
        key = candidate.lower()
        if key in seen or key == lowered or not key.startswith(lowered):
            continue
        seen.add(key)
        results.append(candidate)
    return results[:max_results]


def describe_operator(name: str) -> str | None:
    for operator in MONGO_OPERATORS:
        if operator.name == name:
            return operator.description
    return None


class MongoSuggester(Suggester):
    """Inline suggestion completing the last word of an input."""

    def __init__(self) -> None:
        super().__init__(use_cache=False, case_sensitive=True)
        self.field_names: list[str] = []

    def load_field_names(self, names: list[str]) -> None:
        self.field_names = list(names)

    async def get_suggestion(self, value: str) -> str | None:
        completions = get_completions(value, self.field_names)
        if not completions:
            return None
        word = current_word(value)
        return value + completions[0][len(word) :]
