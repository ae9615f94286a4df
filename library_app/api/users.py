from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from library_app.api.deps import page_params
from library_app.db import get_db
from library_app.query import PageRequest
from library_app.schemas import PageOut, UserIn, UserOut
from library_app.services import users

router = APIRouter()


@router.get("", response_model=PageOut[UserOut])
def list_users(
    keyword: Optional[str] = None,
    page_request: PageRequest = Depends(page_params("createdAt")),
    db: Session = Depends(get_db),
):
    page = users.get_users(db, keyword=keyword, page_request=page_request)
    return PageOut[UserOut].from_page(page, UserOut)


@router.get("/count", response_model=int)
def total_user_count(db: Session = Depends(get_db)):
    return users.count_users(db)


@router.get("/email/{email}", response_model=UserOut)
def get_user_by_email(email: str, db: Session = Depends(get_db)):
    user = users.get_user_by_email(db, email)
    if user is None:
        raise HTTPException(status_code=404, detail=f"No user with email {email}")
    return UserOut.model_validate(user)


@router.get("/email/{email}/exists")
def email_exists(email: str, db: Session = Depends(get_db)):
    return Response(status_code=200 if users.email_exists(db, email) else 404)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db)):
    user = users.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail=f"User not found: {user_id}")
    return UserOut.model_validate(user)


@router.get("/{user_id}/exists")
def user_exists(user_id: int, db: Session = Depends(get_db)):
    return Response(status_code=200 if users.user_exists(db, user_id) else 404)


@router.post("", response_model=UserOut, status_code=201)
def create_user(payload: UserIn, db: Session = Depends(get_db)):
    return UserOut.model_validate(users.create_user(db, **payload.model_dump()))


@router.put("/{user_id}", response_model=UserOut)
def update_user(user_id: int, payload: UserIn, db: Session = Depends(get_db)):
    return UserOut.model_validate(users.update_user(db, user_id, **payload.model_dump()))


@router.delete("/{user_id}", status_code=204)
def delete_user(user_id: int, db: Session = Depends(get_db)):
    users.delete_user(db, user_id)
    return Response(status_code=204)
