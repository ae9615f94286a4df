"""Loan lifecycle rules.

A loan starts ACTIVE, becomes RETURNED when the book comes back, or OVERDUE
when the sweep finds it past its due date. OVERDUE loans can still be
returned. Nothing here touches the database.
"""
from __future__ import annotations

from datetime import datetime, timedelta

from library_app.errors import AlreadyReturned, BookUnavailable, DuplicateActiveLoan, LoanLimitExceeded
from library_app.models import Book, Loan, LoanStatus, User

MAX_LOANS_PER_USER = 5
LOAN_PERIOD_DAYS = 14


def check_new_loan(user: User, book: Book, *, active_loans_for_user: int, active_loans_for_book: int) -> None:
    """Raise if ``user`` may not borrow ``book`` right now. Checks run in a fixed order."""
    if not book.is_available():
        raise BookUnavailable(book.id)
    if active_loans_for_user >= MAX_LOANS_PER_USER:
        raise LoanLimitExceeded(user.id, MAX_LOANS_PER_USER)
    # the available flag and the loan table can drift apart
    if active_loans_for_book > 0:
        raise DuplicateActiveLoan(book.id)


def due_date_for(loan_date: datetime) -> datetime:
    return loan_date + timedelta(days=LOAN_PERIOD_DAYS)


def new_loan(user: User, book: Book, now: datetime) -> Loan:
    return Loan(
        user=user,
        book=book,
        loan_date=now,
        due_date=due_date_for(now),
        status=LoanStatus.ACTIVE,
        active=True,
    )


def is_past_due(loan: Loan, now: datetime) -> bool:
    return loan.status == LoanStatus.ACTIVE and loan.due_date is not None and now > loan.due_date


def check_returnable(loan: Loan) -> None:
    if loan.is_returned():
        raise AlreadyReturned(loan.id)


def mark_returned(loan: Loan, now: datetime) -> None:
    check_returnable(loan)
    loan.return_date = now
    loan.status = LoanStatus.RETURNED
    loan.book.available = True


def mark_overdue(loan: Loan) -> None:
    loan.status = LoanStatus.OVERDUE
