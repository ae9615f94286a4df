import logging

from sqlalchemy.orm import Session

from library_app import models
from library_app.services import books, users

logger = logging.getLogger(__name__)

SAMPLE_BOOKS = [
    dict(name="Clean Code", author="Robert C. Martin", isbn="9780132350884", publisher="Prentice Hall", publish_year=2008),
    dict(name="Refactoring", author="Martin Fowler", isbn="9780134757599", publisher="Addison-Wesley", publish_year=2018),
    dict(name="Design Patterns", author="Erich Gamma", isbn="9780201633610", publisher="Addison-Wesley", publish_year=1994),
    dict(name="Cien Años de Soledad", author="G. G. Márquez", isbn="9780307474728", publisher="Vintage", publish_year=2009),
    dict(name="El Quijote", author="Cervantes", isbn="9788491050299", publisher="Alfaguara", publish_year=2015),
    dict(name="The Pragmatic Programmer", author="Andrew Hunt", isbn="9780135957059", publisher="Addison-Wesley", publish_year=2019),
]

SAMPLE_USERS = [
    dict(name="Ada Lovelace", email="ada@example.com", phone="555-0101", address="12 St James's Square"),
    dict(name="Alan Turing", email="alan@example.com", phone="555-0102", address="Bletchley Park"),
    dict(name="Grace Hopper", email="grace@example.com", phone="555-0103", address="Arlington"),
]


def seed_sample_data(db: Session) -> bool:
    """Insert the sample catalogue and users unless books already exist."""
    if db.query(models.Book.id).first() is not None:
        logger.info("Books already present, skipping sample data")
        return False
    logger.info("Seeding sample data")
    for data in SAMPLE_BOOKS:
        books.create_book(db, **data)
    for data in SAMPLE_USERS:
        if not users.email_exists(db, data["email"]):
            users.create_user(db, **data)
    logger.info("Seeded %d books and %d users", len(SAMPLE_BOOKS), len(SAMPLE_USERS))
    return True
