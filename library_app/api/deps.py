from typing import List, Optional

from fastapi import Query

from library_app.query import PageRequest, SortKey

MAX_PAGE_SIZE = 1000


def page_params(default_sort: str, default_size: int = 20):
    """Dependency parsing ``page``, ``size`` and repeated ``sort=field,dir`` parameters."""

    def dependency(
        page: int = Query(0, ge=0, description="Zero-based page index"),
        size: int = Query(default_size, ge=1, le=MAX_PAGE_SIZE, description="Page size"),
        sort: Optional[List[str]] = Query(None, description="field[,asc|desc], repeatable"),
    ) -> PageRequest:
        return PageRequest.of(page, size, sort or ()).with_default_sort(SortKey.parse(default_sort))

    return dependency
