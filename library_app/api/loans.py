from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from library_app.api.deps import page_params
from library_app.db import get_db
from library_app.models import LoanStatus
from library_app.query import PageRequest
from library_app.schemas import LoanCreate, LoanOut, OverdueSweepOut, PageOut
from library_app.services import loans

router = APIRouter()


@router.get("", response_model=PageOut[LoanOut])
def list_loans(
    status: Optional[LoanStatus] = None,
    page_request: PageRequest = Depends(page_params("loanDate")),
    db: Session = Depends(get_db),
):
    page = loans.get_loans(db, status=status, page_request=page_request)
    return PageOut[LoanOut].from_page(page, LoanOut)


@router.get("/overdue", response_model=List[LoanOut])
def overdue_loans(db: Session = Depends(get_db)):
    return [LoanOut.model_validate(loan) for loan in loans.get_overdue_loans(db)]


@router.put("/update-overdue", response_model=OverdueSweepOut)
def update_overdue_loans(db: Session = Depends(get_db)):
    """Admin sweep: ACTIVE loans past their due date become OVERDUE."""
    return OverdueSweepOut(updated=loans.update_overdue_loans(db))


@router.get("/user/{user_id}", response_model=List[LoanOut])
def loans_by_user(user_id: int, db: Session = Depends(get_db)):
    return [LoanOut.model_validate(loan) for loan in loans.get_loans_by_user(db, user_id)]


@router.get("/user/{user_id}/active-count", response_model=int)
def active_loan_count(user_id: int, db: Session = Depends(get_db)):
    return loans.get_active_loan_count(db, user_id)


@router.get("/book/{book_id}", response_model=List[LoanOut])
def loans_by_book(book_id: int, db: Session = Depends(get_db)):
    return [LoanOut.model_validate(loan) for loan in loans.get_loans_by_book(db, book_id)]


@router.get("/{loan_id}", response_model=LoanOut)
def get_loan(loan_id: int, db: Session = Depends(get_db)):
    loan = loans.get_loan(db, loan_id)
    if loan is None:
        raise HTTPException(status_code=404, detail=f"Loan not found: {loan_id}")
    return LoanOut.model_validate(loan)


@router.post("", response_model=LoanOut, status_code=201)
def create_loan(payload: LoanCreate, db: Session = Depends(get_db)):
    return LoanOut.model_validate(loans.create_loan(db, user_id=payload.user_id, book_id=payload.book_id))


@router.put("/{loan_id}/return", response_model=LoanOut)
def return_book(loan_id: int, db: Session = Depends(get_db)):
    return LoanOut.model_validate(loans.return_book(db, loan_id))
