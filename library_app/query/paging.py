"""Generic paged queries over any registered model.

``find_page`` applies a condition tree, a page request and its sort keys,
and reports the total match count from a separate count query.
``find_by_id_cursor`` pages by "last seen id" in descending id order.
"""
from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from library_app.errors import InvalidArgument
from library_app.query.conditions import Condition, to_clause
from library_app.query.fields import resolve_field

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


class Direction(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortKey:
    field: str
    direction: Direction = Direction.ASC

    @classmethod
    def parse(cls, value: str) -> "SortKey":
        """Parse ``"name"`` or ``"name,desc"``; an unknown direction falls back to ascending."""
        name, _, raw_direction = (value or "").partition(",")
        raw_direction = raw_direction.strip().lower()
        direction = Direction.ASC
        if raw_direction == "desc":
            direction = Direction.DESC
        elif raw_direction and raw_direction != "asc":
            logger.warning("Unknown sort direction '%s' for field '%s', using asc", raw_direction, name)
        return cls(name.strip(), direction)


@dataclass(frozen=True)
class PageRequest:
    page: int = 0
    size: int = 20
    sort: Tuple[SortKey, ...] = ()

    def __post_init__(self):
        if self.page < 0:
            raise InvalidArgument("Page index must not be negative")
        if self.size < 1:
            raise InvalidArgument("Page size must be at least 1")
        object.__setattr__(self, "sort", tuple(self.sort))

    @classmethod
    def of(cls, page: int = 0, size: int = 20, sort: Iterable[str] = ()) -> "PageRequest":
        return cls(page, size, tuple(SortKey.parse(s) for s in sort if s and s.strip()))

    @property
    def offset(self) -> int:
        return self.page * self.size

    def with_default_sort(self, *keys: SortKey) -> "PageRequest":
        if self.sort:
            return self
        return PageRequest(self.page, self.size, keys)


@dataclass
class Page(Generic[T]):
    content: List[T]
    total_elements: int
    page_request: PageRequest = field(default_factory=PageRequest)

    @classmethod
    def empty(cls, page_request: Optional[PageRequest] = None) -> "Page[T]":
        return cls([], 0, page_request or PageRequest())

    @property
    def page_number(self) -> int:
        return self.page_request.page

    @property
    def page_size(self) -> int:
        return self.page_request.size

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.page_size) if self.total_elements else 0

    @property
    def has_next(self) -> bool:
        return self.page_number + 1 < self.total_pages

    def map(self, fn: Callable[[T], U]) -> "Page[U]":
        return Page([fn(item) for item in self.content], self.total_elements, self.page_request)


def sort_clauses(model: type, keys: Sequence[SortKey]) -> list:
    """ORDER BY clauses for ``keys``; unknown fields are logged and skipped."""
    clauses = []
    for key in keys:
        column = resolve_field(model, key.field)
        if column is None:
            logger.warning("Skipping sort on unknown field '%s' for %s", key.field, model.__name__)
            continue
        clauses.append(column.desc() if key.direction is Direction.DESC else column.asc())
    return clauses


def _select(model: type, condition: Optional[Condition]):
    stmt = select(model)
    clause = to_clause(model, condition)
    if clause is not None:
        stmt = stmt.where(clause)
    return stmt


def count(db: Session, model: type, condition: Optional[Condition] = None) -> int:
    stmt = select(func.count()).select_from(model)
    clause = to_clause(model, condition)
    if clause is not None:
        stmt = stmt.where(clause)
    return db.scalar(stmt) or 0


def find_all(db: Session, model: type, condition: Optional[Condition] = None, *orders: Any) -> List[Any]:
    stmt = _select(model, condition)
    if orders:
        stmt = stmt.order_by(*orders)
    return list(db.scalars(stmt).unique().all())


def find_page(
    db: Session,
    model: type,
    condition: Optional[Condition],
    page_request: PageRequest,
    *orders: Any,
) -> Page:
    """One page of ``model`` rows matching ``condition``.

    Explicit ``orders`` win over the sort keys of ``page_request``. The id is
    always appended as a tie-breaker so repeated requests return the same rows.
    """
    stmt = _select(model, condition)
    ordering = list(orders) if orders else sort_clauses(model, page_request.sort)
    ordering.append(model.id.asc())
    stmt = stmt.order_by(*ordering).offset(page_request.offset).limit(page_request.size)

    total = count(db, model, condition)
    content = list(db.scalars(stmt).unique().all())
    return Page(content, total, page_request)


def find_by_id_cursor(
    db: Session,
    model: type,
    last_id: Optional[int],
    limit: int,
    condition: Optional[Condition] = None,
) -> List[Any]:
    """Up to ``limit`` rows with ``id < last_id``, newest first.

    ``last_id=None`` starts from the newest row.
    """
    if limit < 1:
        raise InvalidArgument("Cursor limit must be at least 1")
    stmt = _select(model, condition)
    if last_id is not None:
        stmt = stmt.where(model.id < last_id)
    stmt = stmt.order_by(model.id.desc()).limit(limit)
    return list(db.scalars(stmt).unique().all())
