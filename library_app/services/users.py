# library_app/services/users.py
import logging
import re
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from library_app import models
from library_app.errors import InvalidArgument, NotFound, UserHasLoans
from library_app.query import Field, Page, PageRequest, count, find_page

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
ACTIVE_USER = Field("active").eq(True)
UNRETURNED = (models.LoanStatus.ACTIVE, models.LoanStatus.OVERDUE)


def _normalize_email(email: Optional[str]) -> Optional[str]:
    return email.strip().lower() if email and email.strip() else None


def validate_user_data(*, name: Optional[str], email: Optional[str]) -> None:
    if not (name and name.strip()):
        raise InvalidArgument("User name is required.")
    if not email or not EMAIL_RE.match(email.strip()):
        raise InvalidArgument(f"Malformed email: {email}")


def _email_taken(db: Session, email: str, *, exclude_id: Optional[int] = None) -> bool:
    q = db.query(models.User.id).filter_by(email=email, active=True)
    if exclude_id is not None:
        q = q.filter(models.User.id != exclude_id)
    return q.first() is not None


def get_users(db: Session, *, keyword: Optional[str] = None, page_request: PageRequest) -> Page:
    condition = ACTIVE_USER
    if keyword and keyword.strip():
        condition &= Field("name").contains(keyword) | Field("email").contains(keyword)
    return find_page(db, models.User, condition, page_request)


def get_user(db: Session, user_id: Optional[int]) -> Optional[models.User]:
    if user_id is None or user_id <= 0:
        return None
    return db.query(models.User).filter_by(id=user_id, active=True).first()


def get_user_by_email(db: Session, email: Optional[str]) -> Optional[models.User]:
    email = _normalize_email(email)
    if email is None:
        return None
    return db.query(models.User).filter_by(email=email, active=True).first()


def user_exists(db: Session, user_id: Optional[int]) -> bool:
    return get_user(db, user_id) is not None


def email_exists(db: Session, email: Optional[str]) -> bool:
    return get_user_by_email(db, email) is not None


def count_users(db: Session) -> int:
    return count(db, models.User, ACTIVE_USER)


def _commit(db: Session, user: models.User) -> models.User:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise InvalidArgument(f"Email already exists: {user.email}")
    db.refresh(user)
    return user


def create_user(
    db: Session,
    *,
    name: Optional[str],
    email: Optional[str],
    phone: Optional[str] = None,
    address: Optional[str] = None,
) -> models.User:
    validate_user_data(name=name, email=email)
    email = _normalize_email(email)
    if _email_taken(db, email):
        raise InvalidArgument(f"Email already exists: {email}")

    user = models.User(name=name.strip(), email=email, phone=phone, address=address, active=True)
    db.add(user)
    _commit(db, user)
    logger.info("Created user %s %s", user.id, user.email)
    return user


def update_user(
    db: Session,
    user_id: int,
    *,
    name: Optional[str],
    email: Optional[str],
    phone: Optional[str] = None,
    address: Optional[str] = None,
) -> models.User:
    user = get_user(db, user_id)
    if user is None:
        raise NotFound(f"User not found: {user_id}")

    validate_user_data(name=name, email=email)
    email = _normalize_email(email)
    if email != user.email and _email_taken(db, email, exclude_id=user.id):
        raise InvalidArgument(f"Email already exists: {email}")

    user.name = name.strip()
    user.email = email
    user.phone = phone
    user.address = address
    _commit(db, user)
    logger.info("Updated user %s", user.id)
    return user


def delete_user(db: Session, user_id: int) -> models.User:
    """Soft delete, so the user's loan history stays intact."""
    user = get_user(db, user_id)
    if user is None:
        raise NotFound(f"User not found: {user_id}")
    unreturned = (
        db.query(models.Loan.id)
        .filter(models.Loan.user_id == user.id, models.Loan.status.in_(UNRETURNED))
        .first()
    )
    if unreturned is not None:
        raise UserHasLoans(user.id)
    user.deactivate()
    db.commit()
    db.refresh(user)
    logger.info("Deleted user %s", user.id)
    return user
