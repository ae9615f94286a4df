from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from library_app.api.deps import page_params
from library_app.db import get_db
from library_app.query import PageRequest
from library_app.schemas import BookIn, BookOut, PageOut
from library_app.services import books

router = APIRouter()


@router.get("", response_model=PageOut[BookOut])
def list_books(
    keyword: Optional[str] = None,
    author: Optional[str] = None,
    page_request: PageRequest = Depends(page_params("createdAt")),
    db: Session = Depends(get_db),
):
    page = books.get_books(db, keyword=keyword, author=author, page_request=page_request)
    return PageOut[BookOut].from_page(page, BookOut)


@router.get("/count", response_model=int)
def total_book_count(db: Session = Depends(get_db)):
    return books.count_active_books(db)


@router.get("/count/author/{author}", response_model=int)
def book_count_by_author(author: str, db: Session = Depends(get_db)):
    return books.count_books_by_author(db, author)


@router.get("/search/preview", response_model=PageOut[BookOut])
def search_preview(keyword: str, limit: int = 5, db: Session = Depends(get_db)):
    page = books.search_preview(db, keyword=keyword, limit=limit)
    return PageOut[BookOut].from_page(page, BookOut)


@router.get("/latest", response_model=PageOut[BookOut])
def latest_books(limit: int = 10, db: Session = Depends(get_db)):
    return PageOut[BookOut].from_page(books.latest_books(db, limit=limit), BookOut)


@router.get("/infinite", response_model=List[BookOut])
def books_for_infinite_scroll(
    last_id: Optional[int] = Query(None, alias="lastId"),
    size: int = 20,
    db: Session = Depends(get_db),
):
    return [BookOut.model_validate(b) for b in books.books_for_infinite_scroll(db, last_id=last_id, size=size)]


@router.get("/isbn/{isbn}", response_model=BookOut)
def get_book_by_isbn(isbn: str, db: Session = Depends(get_db)):
    book = books.get_book_by_isbn(db, isbn)
    if book is None:
        raise HTTPException(status_code=404, detail=f"No book with ISBN {isbn}")
    return BookOut.model_validate(book)


@router.get("/author/{author}/exists")
def author_has_books(author: str, db: Session = Depends(get_db)):
    return Response(status_code=200 if books.author_has_books(db, author) else 404)


@router.get("/{book_id}", response_model=BookOut)
def get_book(book_id: int, db: Session = Depends(get_db)):
    book = books.get_book(db, book_id)
    if book is None:
        raise HTTPException(status_code=404, detail=f"Book not found: {book_id}")
    return BookOut.model_validate(book)


@router.get("/{book_id}/exists")
def book_exists(book_id: int, db: Session = Depends(get_db)):
    return Response(status_code=200 if books.book_exists(db, book_id) else 404)


@router.post("", response_model=BookOut, status_code=201)
def create_book(payload: BookIn, db: Session = Depends(get_db)):
    return BookOut.model_validate(books.create_book(db, **payload.model_dump()))


@router.put("/{book_id}", response_model=BookOut)
def update_book(book_id: int, payload: BookIn, db: Session = Depends(get_db)):
    return BookOut.model_validate(books.update_book(db, book_id, **payload.model_dump()))


@router.delete("/{book_id}", status_code=204)
def delete_book(book_id: int, db: Session = Depends(get_db)):
    books.delete_book(db, book_id)
    return Response(status_code=204)
