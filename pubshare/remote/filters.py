"""Filter expressions for the record-collection query language.

Values are never interpolated raw: every literal goes through ``quote`` so
user text cannot change the shape of the expression. Expressions also know how
to evaluate themselves against a plain record, which the in-memory client used
by the tests relies on.
"""

from __future__ import annotations

from dataclasses import dataclass


def quote(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    text = str(value).replace("'", "\\'")
    return f"'{text}'"


class Expression:
    def render(self) -> str:
        raise NotImplementedError

    def matches(self, record: dict) -> bool:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class Equals(Expression):
    field: str
    value: object

    def render(self) -> str:
        return f"{self.field} = {quote(self.value)}"

    def matches(self, record: dict) -> bool:
        return record.get(self.field) == self.value


@dataclass(frozen=True)
class Contains(Expression):
    field: str
    value: str

    def render(self) -> str:
        return f"{self.field} ~ {quote(self.value)}"

    def matches(self, record: dict) -> bool:
        haystack = record.get(self.field)
        if haystack is None:
            return False
        return str(self.value).lower() in str(haystack).lower()


@dataclass(frozen=True)
class AnyOf(Expression):
    terms: tuple[Expression, ...]

    def render(self) -> str:
        return "(" + " || ".join(term.render() for term in self.terms) + ")"

    def matches(self, record: dict) -> bool:
        return any(term.matches(record) for term in self.terms)


@dataclass(frozen=True)
class AllOf(Expression):
    terms: tuple[Expression, ...]

    def render(self) -> str:
        return " && ".join(term.render() for term in self.terms)

    def matches(self, record: dict) -> bool:
        return all(term.matches(record) for term in self.terms)


def any_of(*terms: Expression) -> AnyOf:
    return AnyOf(tuple(terms))


def all_of(*terms: Expression) -> AllOf:
    return AllOf(tuple(terms))


def render_filter(value: Expression | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, Expression):
        return value.render()
    return value
