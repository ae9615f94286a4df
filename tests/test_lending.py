from datetime import datetime, timedelta

import pytest

from library_app import lending
from library_app.errors import AlreadyReturned, BookUnavailable, DuplicateActiveLoan, LoanLimitExceeded
from library_app.models import Book, Loan, LoanStatus, User

NOW = datetime(2024, 3, 1, 12, 0, 0)


def _book(available=True):
    return Book(id=7, name="Dune", author="Frank Herbert", available=available, active=True)


def _user():
    return User(id=3, name="Paul", email="paul@example.com", active=True)


def test_new_loan_allowed():
    lending.check_new_loan(_user(), _book(), active_loans_for_user=4, active_loans_for_book=0)


def test_unavailable_book_is_rejected_first():
    with pytest.raises(BookUnavailable):
        lending.check_new_loan(_user(), _book(available=False), active_loans_for_user=5, active_loans_for_book=1)


def test_loan_limit():
    with pytest.raises(LoanLimitExceeded) as info:
        lending.check_new_loan(_user(), _book(), active_loans_for_user=lending.MAX_LOANS_PER_USER, active_loans_for_book=1)
    assert info.value.limit == 5


def test_duplicate_active_loan_despite_available_flag():
    with pytest.raises(DuplicateActiveLoan):
        lending.check_new_loan(_user(), _book(), active_loans_for_user=0, active_loans_for_book=1)


def test_due_date_is_fourteen_days_out():
    assert lending.due_date_for(NOW) == NOW + timedelta(days=14)


def test_new_loan_fields():
    book, user = _book(), _user()
    loan = lending.new_loan(user, book, NOW)
    assert loan.status == LoanStatus.ACTIVE
    assert loan.loan_date == NOW
    assert loan.due_date == NOW + timedelta(days=14)
    assert loan.return_date is None
    assert loan.book is book and loan.user is user


@pytest.mark.parametrize(
    "status, due_offset, expected",
    [
        (LoanStatus.ACTIVE, timedelta(days=-1), True),
        (LoanStatus.ACTIVE, timedelta(days=1), False),
        (LoanStatus.ACTIVE, timedelta(0), False),
        (LoanStatus.OVERDUE, timedelta(days=-1), False),
        (LoanStatus.RETURNED, timedelta(days=-1), False),
    ],
)
def test_is_past_due(status, due_offset, expected):
    loan = Loan(status=status, due_date=NOW + due_offset)
    assert lending.is_past_due(loan, NOW) is expected


def test_mark_returned_frees_the_book():
    book = _book(available=False)
    loan = Loan(id=1, book=book, status=LoanStatus.ACTIVE, due_date=NOW)
    lending.mark_returned(loan, NOW)
    assert loan.status == LoanStatus.RETURNED
    assert loan.return_date == NOW
    assert book.available is True


def test_overdue_loans_can_be_returned():
    book = _book(available=False)
    loan = Loan(id=1, book=book, status=LoanStatus.OVERDUE, due_date=NOW - timedelta(days=3))
    lending.mark_returned(loan, NOW)
    assert loan.status == LoanStatus.RETURNED


def test_returning_twice_fails():
    loan = Loan(id=1, book=_book(), status=LoanStatus.RETURNED, return_date=NOW)
    with pytest.raises(AlreadyReturned):
        lending.mark_returned(loan, NOW)
    assert loan.return_date == NOW


def test_mark_overdue():
    loan = Loan(status=LoanStatus.ACTIVE)
    lending.mark_overdue(loan)
    assert loan.status == LoanStatus.OVERDUE
