# library_app/services/loans.py
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from library_app import lending, models
from library_app.errors import BookUnavailable, InvalidArgument, NotFound
from library_app.models import LoanStatus, utcnow
from library_app.query import Field, Page, PageRequest, count, find_all, find_page
from library_app.services.books import get_book
from library_app.services.users import get_user

logger = logging.getLogger(__name__)

IS_ACTIVE = Field("status").eq(LoanStatus.ACTIVE)


def get_loans(db: Session, *, status: Optional[LoanStatus] = None, page_request: PageRequest) -> Page:
    condition = Field("status").eq(status) if status is not None else None
    return find_page(db, models.Loan, condition, page_request)


def get_loan(db: Session, loan_id: Optional[int]) -> Optional[models.Loan]:
    if loan_id is None or loan_id <= 0:
        return None
    return db.get(models.Loan, loan_id)


def get_loans_by_user(db: Session, user_id: int) -> List[models.Loan]:
    return find_all(db, models.Loan, Field("user_id").eq(user_id), models.Loan.loan_date.desc(), models.Loan.id.desc())


def get_loans_by_book(db: Session, book_id: int) -> List[models.Loan]:
    return find_all(db, models.Loan, Field("book_id").eq(book_id), models.Loan.loan_date.desc(), models.Loan.id.desc())


def get_active_loan_count(db: Session, user_id: int) -> int:
    return count(db, models.Loan, Field("user_id").eq(user_id) & IS_ACTIVE)


def create_loan(db: Session, *, user_id: int, book_id: int, now: Optional[datetime] = None) -> models.Loan:
    """Lend ``book_id`` to ``user_id`` for the standard loan period."""
    now = now or utcnow()
    user = get_user(db, user_id)
    if user is None:
        raise InvalidArgument(f"User not found: {user_id}")
    book = get_book(db, book_id)
    if book is None:
        raise InvalidArgument(f"Book not found: {book_id}")

    lending.check_new_loan(
        user,
        book,
        active_loans_for_user=get_active_loan_count(db, user.id),
        active_loans_for_book=count(db, models.Loan, Field("book_id").eq(book.id) & IS_ACTIVE),
    )

    # only one of several concurrent requests can flip the flag
    result = db.execute(
        update(models.Book)
        .where(models.Book.id == book.id, models.Book.available.is_(True))
        .values(available=False)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise BookUnavailable(book.id)

    loan = lending.new_loan(user, book, now)
    db.add(loan)
    db.commit()
    db.refresh(loan)
    logger.info("Loan %s created: book %s to user %s, due %s", loan.id, book.id, user.id, loan.due_date)
    return loan


def return_book(db: Session, loan_id: int, *, now: Optional[datetime] = None) -> models.Loan:
    """Close a loan. OVERDUE loans are returnable too."""
    loan = get_loan(db, loan_id)
    if loan is None:
        raise NotFound(f"Loan not found: {loan_id}")
    lending.mark_returned(loan, now or utcnow())
    db.commit()
    db.refresh(loan)
    logger.info("Loan %s returned, book %s available again", loan.id, loan.book_id)
    return loan


def update_overdue_loans(db: Session, *, now: Optional[datetime] = None) -> int:
    """Mark every ACTIVE loan past its due date as OVERDUE; returns how many changed."""
    now = now or utcnow()
    loans = find_all(db, models.Loan, IS_ACTIVE & Field("due_date").lt(now))
    for loan in loans:
        lending.mark_overdue(loan)
    db.commit()
    if loans:
        logger.info("Marked %d loans overdue", len(loans))
    return len(loans)


def get_overdue_loans(db: Session, *, now: Optional[datetime] = None) -> List[models.Loan]:
    """Loans already marked OVERDUE plus ACTIVE ones the sweep has not reached yet."""
    now = now or utcnow()
    condition = Field("status").eq(LoanStatus.OVERDUE) | (IS_ACTIVE & Field("due_date").lt(now))
    return find_all(db, models.Loan, condition, models.Loan.due_date.asc(), models.Loan.id.asc())
