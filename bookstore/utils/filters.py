# bookstore/utils/filters.py
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query

from bookstore.models.book import Book, Category
from bookstore.models.order import Order
from bookstore.models.users import User


@dataclass(frozen=True)
class BookFilter:
    search: Optional[str] = None
    category_id: Optional[int] = None
    active_only: bool = True


@dataclass(frozen=True)
class OrderFilter:
    user_id: Optional[int] = None
    search: Optional[str] = None


def _clean(search: Optional[str]) -> Optional[str]:
    if search is None:
        return None
    s = search.strip()
    return s if s else None


def build_book_filter(search: Optional[str] = None, category_id: Optional[int] = None) -> BookFilter:
    return BookFilter(search=_clean(search), category_id=category_id)


def build_order_filter(user_id: Optional[int] = None, search: Optional[str] = None) -> OrderFilter:
    return OrderFilter(user_id=user_id, search=_clean(search))


def apply_book_filter(query: Query, criteria: BookFilter) -> Query:
    """Narrow a ``Book`` query: text search OR'd over title/author/description,
    AND'd with category membership and the active flag."""
    if criteria.active_only:
        query = query.filter(Book.is_active.is_(True))
    if criteria.search:
        like = f"%{criteria.search}%"
        query = query.filter(or_(
            Book.title.ilike(like),
            Book.author.ilike(like),
            Book.description.ilike(like),
        ))
    if criteria.category_id is not None:
        query = query.filter(Book.categories.any(Category.id == criteria.category_id))
    return query


def apply_order_filter(query: Query, criteria: OrderFilter) -> Query:
    if criteria.user_id is not None:
        query = query.filter(Order.user_id == criteria.user_id)
    if criteria.search:
        like = f"%{criteria.search}%"
        query = query.filter(Order.user.has(or_(
            User.email.ilike(like),
            User.first_name.ilike(like),
            User.last_name.ilike(like),
        )))
    return query
