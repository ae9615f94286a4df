# library_app/services/books.py
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from library_app import models
from library_app.errors import BookOnLoan, InvalidArgument, NotFound
from library_app.query import Direction, Field, Page, PageRequest, SortKey, count, find_by_id_cursor, find_page

logger = logging.getLogger(__name__)

PREVIEW_LIMIT = 10
LATEST_LIMIT = 50
SCROLL_DEFAULT_SIZE = 20
SCROLL_MAX_SIZE = 100

ACTIVE_BOOK = Field("active").eq(True)


def _has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def normalize_isbn(isbn: Optional[str]) -> Optional[str]:
    return isbn.strip() if _has_text(isbn) else None


def is_valid_isbn(isbn: Optional[str]) -> bool:
    """10 or 13 characters once hyphens are removed."""
    if not _has_text(isbn):
        return False
    return len(isbn.strip().replace("-", "")) in (10, 13)


def validate_book_data(*, name, author, isbn=None, publish_year=None) -> None:
    if not _has_text(name):
        raise InvalidArgument("Book name is required.")
    if not _has_text(author):
        raise InvalidArgument("Book author is required.")
    if _has_text(isbn) and not is_valid_isbn(isbn):
        raise InvalidArgument(f"Malformed ISBN: {isbn}")
    if publish_year is not None and not (1000 <= publish_year <= datetime.now().year):
        raise InvalidArgument(f"Invalid publish year: {publish_year}")


def _isbn_taken(db: Session, isbn: str, *, exclude_id: Optional[int] = None) -> bool:
    q = db.query(models.Book.id).filter_by(isbn=isbn, active=True)
    if exclude_id is not None:
        q = q.filter(models.Book.id != exclude_id)
    return q.first() is not None


def get_books(
    db: Session, *, keyword: Optional[str] = None, author: Optional[str] = None, page_request: PageRequest
) -> Page:
    """Active books, optionally narrowed by keyword and/or author."""
    condition = ACTIVE_BOOK
    if _has_text(keyword) and _has_text(author):
        logger.debug("Book search keyword=%r author=%r", keyword, author)
        condition &= Field("name").contains(keyword) | Field("description").contains(keyword)
        condition &= Field("author").eq(author.strip())
    elif _has_text(keyword):
        logger.debug("Book search keyword=%r", keyword)
        condition &= (
            Field("name").contains(keyword) | Field("author").contains(keyword) | Field("description").contains(keyword)
        )
    elif _has_text(author):
        logger.debug("Book search author=%r", author)
        condition &= Field("author").contains(author)
    return find_page(db, models.Book, condition, page_request)


def get_book(db: Session, book_id: Optional[int]) -> Optional[models.Book]:
    if book_id is None or book_id <= 0:
        logger.warning("Invalid book id: %s", book_id)
        return None
    book = db.query(models.Book).filter_by(id=book_id, active=True).first()
    if book is None:
        logger.info("Book %s not found", book_id)
    return book


def get_book_by_isbn(db: Session, isbn: Optional[str]) -> Optional[models.Book]:
    if not is_valid_isbn(isbn):
        logger.warning("Malformed ISBN lookup: %r", isbn)
        return None
    return db.query(models.Book).filter_by(isbn=isbn.strip(), active=True).first()


def count_books_by_author(db: Session, author: Optional[str]) -> int:
    if not _has_text(author):
        return 0
    return count(db, models.Book, ACTIVE_BOOK & Field("author").eq(author.strip()))


def count_active_books(db: Session) -> int:
    return count(db, models.Book, ACTIVE_BOOK)


def search_preview(db: Session, *, keyword: Optional[str], limit: int = 5) -> Page:
    """First few keyword matches; never more than PREVIEW_LIMIT."""
    if not _has_text(keyword):
        return Page.empty()
    size = min(max(limit, 1), PREVIEW_LIMIT)
    return get_books(db, keyword=keyword, page_request=PageRequest(0, size))


def latest_books(db: Session, *, limit: int = 10) -> Page:
    size = min(max(limit, 1), LATEST_LIMIT)
    request = PageRequest(0, size, (SortKey("created_at", Direction.DESC), SortKey("id", Direction.DESC)))
    return find_page(db, models.Book, ACTIVE_BOOK, request)


def book_exists(db: Session, book_id: Optional[int]) -> bool:
    return get_book(db, book_id) is not None


def author_has_books(db: Session, author: Optional[str]) -> bool:
    return count_books_by_author(db, author) > 0


def books_for_infinite_scroll(db: Session, *, last_id: Optional[int] = None, size: Optional[int] = None) -> List[models.Book]:
    limit = min(size, SCROLL_MAX_SIZE) if size and size > 0 else SCROLL_DEFAULT_SIZE
    return find_by_id_cursor(db, models.Book, last_id, limit, ACTIVE_BOOK)


def _commit(db: Session, book: models.Book) -> models.Book:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise InvalidArgument(f"ISBN already exists: {book.isbn}")
    db.refresh(book)
    return book


def create_book(
    db: Session,
    *,
    name: Optional[str],
    author: Optional[str],
    isbn: Optional[str] = None,
    description: Optional[str] = None,
    publisher: Optional[str] = None,
    publish_year: Optional[int] = None,
) -> models.Book:
    validate_book_data(name=name, author=author, isbn=isbn, publish_year=publish_year)
    isbn = normalize_isbn(isbn)
    if isbn and _isbn_taken(db, isbn):
        raise InvalidArgument(f"ISBN already exists: {isbn}")

    book = models.Book(
        name=name.strip(),
        author=author.strip(),
        isbn=isbn,
        description=description,
        publisher=publisher,
        publish_year=publish_year,
        available=True,
        active=True,
    )
    db.add(book)
    _commit(db, book)
    logger.info("Created book %s %r", book.id, book.name)
    return book


def update_book(
    db: Session,
    book_id: int,
    *,
    name: Optional[str],
    author: Optional[str],
    isbn: Optional[str] = None,
    description: Optional[str] = None,
    publisher: Optional[str] = None,
    publish_year: Optional[int] = None,
) -> models.Book:
    """Replace the descriptive fields of a book. Availability is owned by loans."""
    book = get_book(db, book_id)
    if book is None:
        raise NotFound(f"Book not found: {book_id}")

    validate_book_data(name=name, author=author, isbn=isbn, publish_year=publish_year)
    isbn = normalize_isbn(isbn)
    if isbn and isbn != book.isbn and _isbn_taken(db, isbn, exclude_id=book.id):
        raise InvalidArgument(f"ISBN already exists: {isbn}")

    book.name = name.strip()
    book.author = author.strip()
    book.isbn = isbn
    book.description = description
    book.publisher = publisher
    book.publish_year = publish_year
    _commit(db, book)
    logger.info("Updated book %s %r", book.id, book.name)
    return book


def delete_book(db: Session, book_id: int) -> models.Book:
    """Soft delete; a book on loan cannot be removed."""
    book = get_book(db, book_id)
    if book is None:
        raise NotFound(f"Book not found: {book_id}")
    if not book.is_available():
        raise BookOnLoan(book.id)
    book.deactivate()
    db.commit()
    db.refresh(book)
    logger.info("Deleted book %s %r", book.id, book.name)
    return book
