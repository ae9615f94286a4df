from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from library_app.models import LoanStatus
from library_app.query import Page

T = TypeVar("T")


class Schema(BaseModel):
    """camelCase on the wire, snake_case accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class BookIn(Schema):
    name: Optional[str] = None
    author: Optional[str] = None
    isbn: Optional[str] = None
    description: Optional[str] = None
    publisher: Optional[str] = None
    publish_year: Optional[int] = None


class BookOut(Schema):
    id: int
    name: str
    author: str
    isbn: Optional[str] = None
    description: Optional[str] = None
    publisher: Optional[str] = None
    publish_year: Optional[int] = None
    available: bool
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserIn(Schema):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class UserOut(Schema):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoanCreate(Schema):
    user_id: int
    book_id: int


class BookSummary(Schema):
    id: int
    name: str
    author: str
    isbn: Optional[str] = None


class UserSummary(Schema):
    id: int
    name: str
    email: str


class LoanOut(Schema):
    id: int
    user_id: int
    book_id: int
    user: Optional[UserSummary] = None
    book: Optional[BookSummary] = None
    loan_date: datetime
    due_date: datetime
    return_date: Optional[datetime] = None
    status: LoanStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PageOut(Schema, Generic[T]):
    content: List[T]
    total_elements: int
    page_number: int
    page_size: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page, item_schema) -> "PageOut":
        return cls(
            content=[item_schema.model_validate(item) for item in page.content],
            total_elements=page.total_elements,
            page_number=page.page_number,
            page_size=page.page_size,
            total_pages=page.total_pages,
        )


class OverdueSweepOut(Schema):
    updated: int
