# -*- coding: utf-8 -*-

"""
Task Management - Query Predicates.

Small predicate tree evaluated by the task store against task documents.
Documents are plain dicts keyed by the wire field names (title, dueDate, ...).

Text matching is a literal, case-insensitive substring test: the search
term is escaped before it is compiled, so "a.c" only matches the three
characters "a.c" and never "abc".
"""

import re
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from typing import Any, Optional, Tuple

_MISSING = object()


class Predicate:
    """Boolean condition over a task document."""

    def matches(self, doc: dict) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class Eq(Predicate):
    field: str
    value: Any

    def matches(self, doc: dict) -> bool:
        return doc.get(self.field, _MISSING) == self.value


@dataclass(frozen=True)
class Ne(Predicate):
    """Field differs from value. A missing field counts as different."""

    field: str
    value: Any

    def matches(self, doc: dict) -> bool:
        return doc.get(self.field, _MISSING) != self.value


@dataclass(frozen=True)
class In(Predicate):
    field: str
    values: Tuple[Any, ...]

    def matches(self, doc: dict) -> bool:
        value = doc.get(self.field, _MISSING)
        return any(value == candidate for candidate in self.values)


@dataclass(frozen=True)
class Between(Predicate):
    """
    Inclusive range test. An open bound is None.

    Missing, null or incomparable values never match.
    """

    field: str
    gte: Any = None
    lte: Any = None

    def matches(self, doc: dict) -> bool:
        value = doc.get(self.field)
        if value is None:
            return False
        try:
            if self.gte is not None and value < self.gte:
                return False
            if self.lte is not None and value > self.lte:
                return False
        except TypeError:
            return False
        return True


def compile_search(term: str) -> re.Pattern:
    """Compile a search term into a literal, case-insensitive, unanchored pattern."""
    return re.compile(re.escape(term), re.IGNORECASE)


def text_matches(pattern: re.Pattern, value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return pattern.search(value) is not None


@dataclass(frozen=True)
class TextContains(Predicate):
    """Substring match on a single text field."""

    field: str
    term: str
    pattern: re.Pattern = dataclass_field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "pattern", compile_search(self.term))

    def matches(self, doc: dict) -> bool:
        return text_matches(self.pattern, doc.get(self.field))


@dataclass(frozen=True)
class AnyContains(Predicate):
    """Substring match against each element of a list field (OR across elements)."""

    field: str
    term: str
    pattern: re.Pattern = dataclass_field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "pattern", compile_search(self.term))

    def matches(self, doc: dict) -> bool:
        values = doc.get(self.field)
        if not isinstance(values, (list, tuple)):
            return False
        return any(text_matches(self.pattern, value) for value in values)


@dataclass(frozen=True)
class And(Predicate):
    clauses: Tuple[Predicate, ...]

    def matches(self, doc: dict) -> bool:
        return all(clause.matches(doc) for clause in self.clauses)


@dataclass(frozen=True)
class Or(Predicate):
    clauses: Tuple[Predicate, ...]

    def matches(self, doc: dict) -> bool:
        return any(clause.matches(doc) for clause in self.clauses)


def all_of(*clauses: Optional[Predicate]) -> And:
    """AND the given clauses, skipping None."""
    return And(tuple(clause for clause in clauses if clause is not None))
