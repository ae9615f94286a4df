from library_app.query.conditions import And, Condition, Contains, Eq, Field, GreaterThan, LessThan, Or, to_clause
from library_app.query.fields import register_fields, registered_fields, resolve_field
from library_app.query.paging import (
    Direction,
    Page,
    PageRequest,
    SortKey,
    count,
    find_all,
    find_by_id_cursor,
    find_page,
    sort_clauses,
)

__all__ = [
    "And",
    "Condition",
    "Contains",
    "Direction",
    "Eq",
    "Field",
    "GreaterThan",
    "LessThan",
    "Or",
    "Page",
    "PageRequest",
    "SortKey",
    "count",
    "find_all",
    "find_by_id_cursor",
    "find_page",
    "register_fields",
    "registered_fields",
    "resolve_field",
    "sort_clauses",
    "to_clause",
]
