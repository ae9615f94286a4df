from library_app.seed import SAMPLE_BOOKS, SAMPLE_USERS, seed_sample_data
from library_app.services import books, users


def test_seed_only_runs_on_empty_catalogue(db):
    assert seed_sample_data(db) is True
    assert books.count_active_books(db) == len(SAMPLE_BOOKS)
    assert users.count_users(db) == len(SAMPLE_USERS)

    assert seed_sample_data(db) is False
    assert books.count_active_books(db) == len(SAMPLE_BOOKS)
