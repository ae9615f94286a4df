"""Small predicate tree translated to SQLAlchemy WHERE clauses.

    cond = Field("active").eq(True) & (Field("name").contains(kw) | Field("author").contains(kw))
    stmt = select(Book).where(to_clause(Book, cond))

``None`` children are dropped, so optional filters can be passed straight
through. A translated ``None`` means "no restriction".
"""
from __future__ import annotations

from typing import Any, Optional, Tuple

from sqlalchemy import and_, false, or_

from library_app.errors import InvalidArgument
from library_app.query.fields import resolve_field


def _column(model: type, name: str):
    column = resolve_field(model, name)
    if column is None:
        raise InvalidArgument(f"Unknown field '{name}' for {model.__name__}")
    return column


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class Condition:
    def __and__(self, other: Optional["Condition"]) -> "And":
        return And(self, other)

    def __or__(self, other: Optional["Condition"]) -> "Or":
        return Or(self, other)

    def to_clause(self, model: type):
        raise NotImplementedError


class Field:
    """Reference to a registered field, with helpers building leaf conditions."""

    def __init__(self, name: str):
        self.name = name

    def eq(self, value: Any) -> "Eq":
        return Eq(self.name, value)

    def contains(self, text: Optional[str]) -> "Contains":
        return Contains(self.name, text)

    def lt(self, value: Any) -> "LessThan":
        return LessThan(self.name, value)

    def gt(self, value: Any) -> "GreaterThan":
        return GreaterThan(self.name, value)

    def __repr__(self) -> str:
        return f"Field({self.name!r})"


class _Leaf(Condition):
    def __init__(self, field: str, value: Any):
        self.field = field.name if isinstance(field, Field) else field
        self.value = value

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and (self.field, self.value) == (other.field, other.value)

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.field, repr(self.value)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.field!r}, {self.value!r})"


class Eq(_Leaf):
    def to_clause(self, model: type):
        column = _column(model, self.field)
        if self.value is None:
            return column.is_(None)
        return column == self.value


class Contains(_Leaf):
    """Case-insensitive substring match. Blank text matches everything."""

    def to_clause(self, model: type):
        column = _column(model, self.field)
        if self.value is None or not str(self.value).strip():
            return None
        return column.ilike(f"%{_escape_like(str(self.value))}%", escape="\\")


class LessThan(_Leaf):
    def to_clause(self, model: type):
        return _column(model, self.field) < self.value


class GreaterThan(_Leaf):
    def to_clause(self, model: type):
        return _column(model, self.field) > self.value


class _Group(Condition):
    def __init__(self, *children: Optional[Condition]):
        self.children: Tuple[Condition, ...] = tuple(c for c in children if c is not None)

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.children == other.children

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.children))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(repr(c) for c in self.children)})"


class And(_Group):
    def to_clause(self, model: type):
        clauses = [c for c in (child.to_clause(model) for child in self.children) if c is not None]
        if not clauses:
            return None
        if len(clauses) == 1:
            return clauses[0]
        return and_(*clauses)


class Or(_Group):
    def to_clause(self, model: type):
        if not self.children:
            return false()
        clauses = [child.to_clause(model) for child in self.children]
        # an unrestricted branch makes the whole disjunction unrestricted
        if any(c is None for c in clauses):
            return None
        if len(clauses) == 1:
            return clauses[0]
        return or_(*clauses)


def to_clause(model: type, condition: Optional[Condition]):
    """Translate ``condition`` for ``model``; None means match all."""
    if condition is None:
        return None
    return condition.to_clause(model)
