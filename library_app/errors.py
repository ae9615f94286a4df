"""Failure kinds raised by the services.

The HTTP layer maps ``InvalidArgument`` to 400, ``InvalidState`` to 409 and
``NotFound`` to 404. Anything else is an internal error.
"""


class LibraryError(Exception):
    """Base class for every expected failure."""


class InvalidArgument(LibraryError):
    """Missing or malformed input, or a reference to a record that does not exist."""


class NotFound(LibraryError):
    """An operation that requires an existing record could not find it."""


class InvalidState(LibraryError):
    """A business rule forbids the operation in the current state."""


class BookUnavailable(InvalidState):
    def __init__(self, book_id: int):
        super().__init__(f"Book {book_id} is currently on loan.")
        self.book_id = book_id


class LoanLimitExceeded(InvalidState):
    def __init__(self, user_id: int, limit: int):
        super().__init__(f"User {user_id} already holds the maximum of {limit} active loans.")
        self.user_id = user_id
        self.limit = limit


class DuplicateActiveLoan(InvalidState):
    def __init__(self, book_id: int):
        super().__init__(f"Book {book_id} already has an active loan.")
        self.book_id = book_id


class AlreadyReturned(InvalidState):
    def __init__(self, loan_id: int):
        super().__init__(f"Loan {loan_id} has already been returned.")
        self.loan_id = loan_id


class BookOnLoan(InvalidState):
    def __init__(self, book_id: int):
        super().__init__(f"Book {book_id} is on loan and cannot be deleted.")
        self.book_id = book_id


class UserHasLoans(InvalidState):
    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} still has unreturned loans and cannot be deleted.")
        self.user_id = user_id
