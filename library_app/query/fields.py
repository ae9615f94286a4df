"""Per-model registry of the field names that may be filtered and sorted on.

Models register their columns once, when ``library_app.models`` is imported.
Names are matched in snake_case; camelCase names coming from HTTP clients
(``createdAt``) are normalized first.
"""
from __future__ import annotations

import re
from typing import Any, Dict, Optional

_REGISTRY: Dict[type, Dict[str, Any]] = {}
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def normalize_field_name(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", (name or "").strip()).lower()


def register_fields(model: type, **columns: Any) -> None:
    """Make ``columns`` addressable by name for ``model``."""
    fields = _REGISTRY.setdefault(model, {})
    for name, column in columns.items():
        fields[normalize_field_name(name)] = column


def registered_fields(model: type) -> Dict[str, Any]:
    return dict(_REGISTRY.get(model, {}))


def resolve_field(model: type, name: str) -> Optional[Any]:
    """Return the column registered under ``name``, or None."""
    return _REGISTRY.get(model, {}).get(normalize_field_name(name))
