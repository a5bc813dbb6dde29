# bookstore/routes/books.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from bookstore.database import get_db
from bookstore.models.users import User
from bookstore.schemas import book as book_schemas
from bookstore.schemas.user import MessageResponse
from bookstore.services import book_service
from bookstore.utils.audit import client_ip
from bookstore.utils.storage import BlobStorage, get_storage
from bookstore.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/books", tags=["Books"])


# =========================
# CATALOG (public)
# =========================
@router.get("", response_model=book_schemas.BookListPage)
def list_books(
    search: Optional[str] = Query(None, description="Search title, author or description"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return book_service.find_all(db, page=page, limit=limit, search=search)


@router.get("/categories", response_model=List[book_schemas.CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return book_service.list_categories(db)


@router.get("/category/{category_id}", response_model=book_schemas.BookListPage)
def list_books_by_category(
    category_id: int,
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return book_service.search_books_by_category(db, category_id, page=page, limit=limit, search=search)


@router.get("/{book_id}", response_model=book_schemas.BookOut)
def get_book(book_id: int, db: Session = Depends(get_db)):
    return book_service.find_one(db, book_id)


@router.post("/{book_id}/toggle-like", response_model=book_schemas.LikeToggleResponse)
def toggle_like(
    book_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return book_service.toggle_like(db, current_user, book_id, ip=client_ip(request))


# =========================
# MANAGEMENT (manager only)
# =========================
@router.post("", response_model=book_schemas.BookOut, status_code=status.HTTP_201_CREATED)
def create_book(
    payload: book_schemas.BookCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return book_service.create_book(db, current_user, payload, ip=client_ip(request))


@router.patch("/{book_id}", response_model=book_schemas.BookOut)
def update_book(
    book_id: int,
    payload: book_schemas.BookUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return book_service.update_book(db, current_user, book_id, payload, ip=client_ip(request))


@router.delete("/{book_id}", response_model=MessageResponse)
def delete_book(
    book_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return book_service.delete_book(db, current_user, book_id, ip=client_ip(request))


# Attach an image or the downloadable PDF (multipart/form-data)
@router.post("/{book_id}/upload", response_model=book_schemas.UploadResponse)
def upload_book_file(
    book_id: int,
    request: Request,
    file: UploadFile = File(...),
    file_type: str = Form(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: BlobStorage = Depends(get_storage),
):
    try:
        content = file.file.read()
    finally:
        file.file.close()
    return book_service.upload_book_file(
        db, current_user, book_id, file_type, file.filename, content, storage,
        content_type=file.content_type, ip=client_ip(request),
    )
