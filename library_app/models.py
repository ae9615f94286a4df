from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from library_app.query import register_fields


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    ...


class Audited:
    """Identifier plus creation/modification timestamps."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


class SoftDeletable:
    """Logical delete: inactive rows stay in the table but drop out of normal lookups."""

    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    def is_active(self) -> bool:
        return self.active is not False

    def activate(self) -> None:
        self.active = True

    def deactivate(self) -> None:
        self.active = False


class LoanStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    RETURNED = "RETURNED"
    OVERDUE = "OVERDUE"


class Book(Audited, SoftDeletable, Base):
    __tablename__ = "books"
    __table_args__ = {"sqlite_autoincrement": True}

    name: Mapped[str] = mapped_column(String(255), index=True)
    author: Mapped[str] = mapped_column(String(255), index=True)
    isbn: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    publisher: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    publish_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    available: Mapped[bool] = mapped_column(Boolean, default=True)

    loans: Mapped[List["Loan"]] = relationship(back_populates="book")

    def is_available(self) -> bool:
        return bool(self.available)

    def __repr__(self) -> str:
        return f"<Book {self.id} {self.name!r}>"


class User(Audited, SoftDeletable, Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    name: Mapped[str] = mapped_column(String(255), index=True)
    email: Mapped[str] = mapped_column(String(320), index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    loans: Mapped[List["Loan"]] = relationship(back_populates="user")

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email!r}>"


class Loan(Audited, SoftDeletable, Base):
    __tablename__ = "loans"
    __table_args__ = (
        Index("ix_loans_status_due_date", "status", "due_date"),
        {"sqlite_autoincrement": True},
    )

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    book_id: Mapped[int] = mapped_column(ForeignKey("books.id"), index=True)
    loan_date: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    due_date: Mapped[datetime] = mapped_column(DateTime)
    return_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    status: Mapped[LoanStatus] = mapped_column(
        Enum(LoanStatus, native_enum=False, length=16),
        default=LoanStatus.ACTIVE,
        index=True,
    )

    user: Mapped["User"] = relationship(back_populates="loans", lazy="joined")
    book: Mapped["Book"] = relationship(back_populates="loans", lazy="joined")

    def is_returned(self) -> bool:
        return self.status == LoanStatus.RETURNED

    def __repr__(self) -> str:
        return f"<Loan {self.id} book={self.book_id} user={self.user_id} {self.status}>"


# ISBN and email only have to be unique among active rows
Index(
    "uq_books_isbn_active",
    Book.isbn,
    unique=True,
    sqlite_where=Book.active == True,  # noqa: E712
    postgresql_where=Book.active == True,  # noqa: E712
)
Index(
    "uq_users_email_active",
    User.email,
    unique=True,
    sqlite_where=User.active == True,  # noqa: E712
    postgresql_where=User.active == True,  # noqa: E712
)

register_fields(
    Book,
    id=Book.id,
    name=Book.name,
    author=Book.author,
    isbn=Book.isbn,
    description=Book.description,
    publisher=Book.publisher,
    publish_year=Book.publish_year,
    available=Book.available,
    active=Book.active,
    created_at=Book.created_at,
    updated_at=Book.updated_at,
)
register_fields(
    User,
    id=User.id,
    name=User.name,
    email=User.email,
    phone=User.phone,
    address=User.address,
    active=User.active,
    created_at=User.created_at,
    updated_at=User.updated_at,
)
register_fields(
    Loan,
    id=Loan.id,
    user_id=Loan.user_id,
    book_id=Loan.book_id,
    loan_date=Loan.loan_date,
    due_date=Loan.due_date,
    return_date=Loan.return_date,
    status=Loan.status,
    active=Loan.active,
    created_at=Loan.created_at,
    updated_at=Loan.updated_at,
)
