from datetime import datetime

import pytest

from library_app.errors import BookOnLoan, InvalidArgument, NotFound
from library_app.query import PageRequest
from library_app.services import books, loans


def test_create_and_get(db, make_book):
    book = make_book(name="  Dune ", author="Frank Herbert", isbn="978-0441013593")
    assert book.id is not None
    assert book.name == "Dune"
    assert book.available is True
    assert book.active is True
    assert book.created_at is not None
    assert books.get_book(db, book.id) is book
    assert books.get_book_by_isbn(db, "978-0441013593") is book


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": ""},
        {"name": None},
        {"author": "   "},
        {"isbn": "12345"},
        {"publish_year": 999},
        {"publish_year": datetime.now().year + 1},
    ],
)
def test_create_rejects_bad_input(make_book, overrides):
    with pytest.raises(InvalidArgument):
        make_book(**overrides)


def test_duplicate_isbn_among_active_books(db, make_book):
    first = make_book(isbn="9780132350884")
    with pytest.raises(InvalidArgument):
        make_book(isbn="9780132350884")
    books.delete_book(db, first.id)
    # a soft-deleted book no longer holds its ISBN
    assert make_book(isbn="9780132350884").id != first.id


def test_isbn_lookup_with_malformed_isbn_returns_none(db, make_book):
    make_book(isbn="9780132350884")
    assert books.get_book_by_isbn(db, "97801") is None
    assert books.get_book_by_isbn(db, "") is None


def test_get_book_with_bad_id(db):
    assert books.get_book(db, None) is None
    assert books.get_book(db, 0) is None
    assert books.get_book(db, 42) is None


def test_update_book(db, make_book):
    book = make_book()
    updated = books.update_book(db, book.id, name="New", author="Other", isbn="0-306-40615-2", publish_year=2001)
    assert updated.name == "New"
    assert updated.isbn == "0-306-40615-2"
    assert updated.updated_at >= updated.created_at


def test_update_missing_book(db):
    with pytest.raises(NotFound):
        books.update_book(db, 99, name="x", author="y")


def test_update_rejects_isbn_of_another_book(db, make_book):
    make_book(isbn="9780132350884")
    other = make_book()
    with pytest.raises(InvalidArgument):
        books.update_book(db, other.id, name="x", author="y", isbn="9780132350884")


def test_soft_delete_hides_book(db, make_book):
    book = make_book()
    books.delete_book(db, book.id)
    assert books.get_book(db, book.id) is None
    assert books.count_active_books(db) == 0
    with pytest.raises(NotFound):
        books.delete_book(db, book.id)


def test_book_on_loan_cannot_be_deleted(db, make_book, make_user):
    book = make_book()
    loans.create_loan(db, user_id=make_user().id, book_id=book.id)
    with pytest.raises(BookOnLoan):
        books.delete_book(db, book.id)


def test_keyword_search_matches_name_author_description(db, make_book):
    make_book(name="Python Tricks")
    make_book(name="Other", author="Guido Python")
    make_book(name="Another", description="all about PYTHON")
    make_book(name="Cooking")

    page = books.get_books(db, keyword="python", page_request=PageRequest(0, 10))
    assert page.total_elements == 3


def test_author_filter_and_combined_search(db, make_book):
    make_book(name="Python A", author="Lutz")
    make_book(name="Python B", author="Beazley")
    make_book(name="Perl", author="Lutz")

    by_author = books.get_books(db, author="lut", page_request=PageRequest(0, 10))
    assert by_author.total_elements == 2

    combined = books.get_books(db, keyword="python", author="Lutz", page_request=PageRequest(0, 10))
    assert [b.name for b in combined.content] == ["Python A"]


def test_counts(db, make_book):
    make_book(author="Lutz")
    make_book(author="Lutz")
    make_book(author="Beazley")
    assert books.count_books_by_author(db, "Lutz") == 2
    assert books.count_books_by_author(db, "") == 0
    assert books.author_has_books(db, "Beazley")
    assert not books.author_has_books(db, "Nobody")
    assert books.count_active_books(db) == 3


def test_search_preview_is_capped(db, make_book):
    for _ in range(15):
        make_book(name="Python volume")
    assert len(books.search_preview(db, keyword="python", limit=50).content) == 10
    assert books.search_preview(db, keyword="  ", limit=5).total_elements == 0


def test_latest_books_newest_first(db, make_book):
    created = [make_book() for _ in range(4)]
    page = books.latest_books(db, limit=2)
    assert [b.id for b in page.content] == [created[3].id, created[2].id]
    assert len(books.latest_books(db, limit=500).content) == 4


def test_infinite_scroll(db, make_book):
    created = [make_book() for _ in range(25)]
    first = books.books_for_infinite_scroll(db)
    assert len(first) == 20
    assert first[0].id == created[-1].id
    rest = books.books_for_infinite_scroll(db, last_id=first[-1].id, size=500)
    assert len(rest) == 5
    assert books.book_exists(db, created[0].id)
