# bookstore/services/cart_service.py
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from bookstore.models.book import Book, BookType
from bookstore.models.cart import CartItem
from bookstore.models.users import User
from bookstore.utils.audit import write_log
from bookstore.utils.errors import NotFoundError, ValidationFailed

logger = logging.getLogger(__name__)


def _check_quantity(quantity) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationFailed(
            "Validation failed",
            errors=[{"field": "quantity", "message": "Quantity must be a positive integer"}],
        )


def _check_stock(book: Book, requested_total: int) -> None:
    # Digital books have no stock ceiling
    if book.type != BookType.PHYSICAL:
        return
    if (book.stock or 0) < requested_total:
        raise ValidationFailed(
            "Not enough stock available",
            errors=[{"field": "quantity", "message": f"Only {book.stock or 0} in stock"}],
        )


def _active_book_for_update(db: Session, book_id: int) -> Book:
    # Row lock serializes concurrent adds of the same book where the database supports it
    book = (
        db.query(Book)
        .filter(Book.id == book_id, Book.is_active.is_(True))
        .with_for_update()
        .first()
    )
    if not book:
        raise NotFoundError("Book not found")
    return book


def _upsert_cart_item(db: Session, user_id: int, book_id: int, quantity: int) -> CartItem:
    book = _active_book_for_update(db, book_id)

    item = db.query(CartItem).filter(
        CartItem.user_id == user_id, CartItem.book_id == book_id
    ).first()

    _check_stock(book, (item.quantity if item else 0) + quantity)

    if item:
        # Increment in SQL so a concurrent increment is not lost
        db.query(CartItem).filter(CartItem.id == item.id).update(
            {CartItem.quantity: CartItem.quantity + quantity}, synchronize_session=False
        )
    else:
        item = CartItem(user_id=user_id, book_id=book_id, quantity=quantity)
        db.add(item)

    db.commit()
    db.refresh(item)
    return item


def add_to_cart(db: Session, user: User, book_id: int, quantity: int, ip: Optional[str] = None) -> CartItem:
    """Add ``quantity`` of a book to the user's cart.

    A repeat add increments the existing line. Physical books are checked
    against stock using the combined quantity; digital books are not.
    Stock itself is never changed here.
    """
    _check_quantity(quantity)
    try:
        item = _upsert_cart_item(db, user.id, book_id, quantity)
    except IntegrityError:
        # A concurrent request inserted the same (user, book) line first
        db.rollback()
        logger.info("Cart line for user %s book %s created concurrently, retrying as increment", user.id, book_id)
        item = _upsert_cart_item(db, user.id, book_id, quantity)

    write_log(
        db, user_id=user.id, action="CART_ADD", resource="cart", status="SUCCESS", ip=ip,
        meta={"book_id": book_id, "quantity": quantity, "line_quantity": item.quantity},
    )
    return item


def get_cart(db: Session, user: User) -> dict:
    """Current cart priced at today's book prices."""
    cart_items = (
        db.query(CartItem)
        .options(joinedload(CartItem.book).selectinload(Book.images))
        .filter(CartItem.user_id == user.id)
        .order_by(CartItem.id)
        .all()
    )
    if not cart_items:
        raise NotFoundError("Cart is empty")

    items = []
    total_price = Decimal("0")
    for it in cart_items:
        price = Decimal(it.book.price)
        line_total = price * it.quantity
        total_price += line_total
        items.append({
            "id": it.id,
            "book_id": it.book.id,
            "title": it.book.title,
            "author": it.book.author,
            "price": price,
            "quantity": it.quantity,
            "total_item_price": line_total,
            "image": it.book.primary_image_url,
        })

    return {"items": items, "total_price": total_price}


def _own_item(db: Session, user: User, item_id: int) -> CartItem:
    item = db.query(CartItem).filter(CartItem.id == item_id, CartItem.user_id == user.id).first()
    if not item:
        raise NotFoundError("Cart item not found")
    return item


def update_cart_item(db: Session, user: User, item_id: int, quantity: int) -> CartItem:
    # Sets the line quantity outright; stock is checked against the new value
    _check_quantity(quantity)
    item = _own_item(db, user, item_id)
    book = _active_book_for_update(db, item.book_id)
    _check_stock(book, quantity)

    item.quantity = quantity
    db.commit()
    db.refresh(item)
    return item


def remove_cart_item(db: Session, user: User, item_id: int) -> None:
    item = _own_item(db, user, item_id)
    db.delete(item)
    db.commit()
