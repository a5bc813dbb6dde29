# bookstore/services/book_service.py
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from bookstore.models.book import Book, BookImage, BookType, Category, Like
from bookstore.models.users import User, Role
from bookstore.schemas.book import BookCreate, BookUpdate, FileKind
from bookstore.utils.audit import write_log
from bookstore.utils.errors import NotFoundError, ValidationFailed
from bookstore.utils.filters import BookFilter, build_book_filter, apply_book_filter
from bookstore.utils.pagination import page_offset, paginate_result
from bookstore.utils.storage import BlobStorage
from bookstore.utils.tokenJWT import require_role

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    FileKind.IMAGE: {"image/jpeg", "image/png", "image/webp"},
    FileKind.PDF: {"application/pdf"},
}

NULLABLE_FIELDS = {"stock", "file_url"}


# ---- HELPERS ----
def _likes_count(db: Session, book_ids: Iterable[int]) -> Dict[int, int]:
    ids = list(book_ids)
    if not ids:
        return {}
    rows = (
        db.query(Like.book_id, func.count(Like.id))
        .filter(Like.book_id.in_(ids))
        .group_by(Like.book_id)
        .all()
    )
    return {book_id: count for book_id, count in rows}


def _book_to_out(book: Book, likes_count: int = 0) -> dict:
    return {
        "id": book.id,
        "title": book.title,
        "author": book.author,
        "description": book.description,
        "price": book.price,
        "stock": book.stock,
        "type": book.type,
        "file_url": book.file_url,
        "is_active": book.is_active,
        "image": book.primary_image_url,
        "likes_count": likes_count,
        "categories": book.category_names,
        "created_at": book.created_at,
        "updated_at": book.updated_at,
    }


def _get_active_book(db: Session, book_id: int) -> Book:
    book = db.query(Book).filter(Book.id == book_id, Book.is_active.is_(True)).first()
    if not book:
        raise NotFoundError(f"Book with ID {book_id} not found")
    return book


def _get_book(db: Session, book_id: int) -> Book:
    book = db.query(Book).filter(Book.id == book_id).first()
    if not book:
        raise NotFoundError(f"Book with ID {book_id} not found")
    return book


def _resolve_categories(db: Session, names: Iterable[str]) -> List[Category]:
    # Get-or-create by name, keeping first-seen order and dropping blanks
    categories = []
    seen = set()
    for raw in names:
        name = (raw or "").strip()
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        category = db.query(Category).filter(func.lower(Category.name) == name.lower()).first()
        if not category:
            category = Category(name=name)
            db.add(category)
        categories.append(category)
    return categories


def _normalize_stock(book: Book) -> None:
    if book.type == BookType.DIGITAL:
        book.stock = None
    elif book.stock is None:
        book.stock = 0


# =========================
# LISTING
# =========================
def _list_books(db: Session, criteria: BookFilter, page: int, limit: int) -> dict:
    query = apply_book_filter(db.query(Book), criteria)
    count = query.count()
    rows = (
        query.options(selectinload(Book.images), selectinload(Book.categories))
        .order_by(Book.created_at.desc(), Book.id.desc())
        .offset(page_offset(count, limit, page))
        .limit(limit)
        .all()
    )
    likes = _likes_count(db, (b.id for b in rows))
    results = [_book_to_out(b, likes.get(b.id, 0)) for b in rows]
    return paginate_result(count, results, limit, page)


def find_all(db: Session, page: int = 1, limit: int = 10, search: Optional[str] = None) -> dict:
    return _list_books(db, build_book_filter(search=search), page, limit)


def search_books_by_category(
    db: Session, category_id: int, page: int = 1, limit: int = 10, search: Optional[str] = None
) -> dict:
    if not db.query(Category).filter(Category.id == category_id).first():
        raise NotFoundError(f"Category with ID {category_id} not found")
    return _list_books(db, build_book_filter(search=search, category_id=category_id), page, limit)


def find_one(db: Session, book_id: int) -> dict:
    book = _get_active_book(db, book_id)
    return _book_to_out(book, _likes_count(db, [book.id]).get(book.id, 0))


def list_categories(db: Session) -> List[Category]:
    return db.query(Category).order_by(Category.name).all()


# =========================
# LIKES
# =========================
def toggle_like(db: Session, user: User, book_id: int, ip: Optional[str] = None) -> dict:
    _get_active_book(db, book_id)

    existing = db.query(Like).filter(Like.user_id == user.id, Like.book_id == book_id).first()
    if existing:
        db.delete(existing)
        result = {"message": "Like removed", "liked": False}
    else:
        db.add(Like(user_id=user.id, book_id=book_id))
        result = {"message": "Like added", "liked": True}
    db.commit()

    write_log(
        db, user_id=user.id, action="LIKE_TOGGLE", resource="books", status="SUCCESS", ip=ip,
        meta={"book_id": book_id, "liked": result["liked"]},
    )
    return result


# =========================
# MANAGEMENT (MANAGER only)
# =========================
def create_book(db: Session, user: User, data: BookCreate, ip: Optional[str] = None) -> dict:
    require_role(user, Role.MANAGER)

    payload = data.model_dump(exclude={"categories"})
    book = Book(**payload)
    _normalize_stock(book)
    book.categories = _resolve_categories(db, data.categories)

    db.add(book)
    db.commit()
    db.refresh(book)

    write_log(
        db, user_id=user.id, action="BOOK_CREATE", resource="books", status="SUCCESS", ip=ip,
        meta={"id": book.id, "title": book.title},
    )
    return _book_to_out(book)


def update_book(db: Session, user: User, book_id: int, data: BookUpdate, ip: Optional[str] = None) -> dict:
    require_role(user, Role.MANAGER)
    book = _get_book(db, book_id)

    # Explicit nulls only clear the nullable columns
    changes = {
        key: value
        for key, value in data.model_dump(exclude_unset=True, exclude={"categories"}).items()
        if value is not None or key in NULLABLE_FIELDS
    }
    for key, value in changes.items():
        setattr(book, key, value)
    if data.categories is not None:
        book.categories = _resolve_categories(db, data.categories)
    _normalize_stock(book)

    db.commit()
    db.refresh(book)

    write_log(
        db, user_id=user.id, action="BOOK_UPDATE", resource="books", status="SUCCESS", ip=ip,
        meta={"id": book.id, "fields": sorted(changes)},
    )
    return _book_to_out(book, _likes_count(db, [book.id]).get(book.id, 0))


def delete_book(db: Session, user: User, book_id: int, ip: Optional[str] = None) -> dict:
    # Soft delete: the book disappears from the catalog, orders keep referencing it
    require_role(user, Role.MANAGER)
    book = _get_active_book(db, book_id)
    book.is_active = False
    db.commit()

    write_log(db, user_id=user.id, action="BOOK_DELETE", resource="books", status="SUCCESS", ip=ip, meta={"id": book_id})
    return {"message": f"Book '{book.title}' deleted"}


def upload_book_file(
    db: Session,
    user: User,
    book_id: int,
    file_kind,
    filename: str,
    content: bytes,
    storage: BlobStorage,
    content_type: Optional[str] = None,
    ip: Optional[str] = None,
) -> dict:
    """Store a file for a book and record its URL.

    ``image`` uploads append to the book's images (the first one becomes
    primary); ``pdf`` uploads replace the book's downloadable file.
    """
    require_role(user, Role.MANAGER)
    try:
        kind = FileKind(file_kind)
    except ValueError:
        raise ValidationFailed(
            "Validation failed",
            errors=[{"field": "file_type", "message": "file_type must be one of: image, pdf"}],
        )
    if content_type is not None and content_type not in ALLOWED_CONTENT_TYPES[kind]:
        raise ValidationFailed(
            "Invalid file type",
            errors=[{"field": "file", "message": f"Unsupported content type {content_type} for {kind.value}"}],
        )
    if not content:
        raise ValidationFailed("Validation failed", errors=[{"field": "file", "message": "File is empty"}])

    book = _get_book(db, book_id)
    url = storage.save(filename, content)

    if kind == FileKind.IMAGE:
        has_primary = any(img.is_primary for img in book.images)
        book.images.append(BookImage(
            image_url=url,
            is_primary=not has_primary,
            position=len(book.images),
        ))
    else:
        book.file_url = url

    db.commit()
    db.refresh(book)
    logger.info("Attached %s %s to book %s", kind.value, url, book.id)

    write_log(
        db, user_id=user.id, action="BOOK_UPLOAD", resource="books", status="SUCCESS", ip=ip,
        meta={"id": book.id, "kind": kind.value, "url": url},
    )
    return {"url": url, "file_type": kind.value, "book": _book_to_out(book)}
