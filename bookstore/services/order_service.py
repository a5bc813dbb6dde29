# bookstore/services/order_service.py
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from bookstore.models.cart import CartItem
from bookstore.models.order import Order, OrderItem, ORDER_STATUS_PENDING
from bookstore.models.users import User, Role
from bookstore.utils.audit import write_log
from bookstore.utils.errors import NotFoundError
from bookstore.utils.filters import OrderFilter, build_order_filter, apply_order_filter
from bookstore.utils.pagination import page_offset, paginate_result
from bookstore.utils.tokenJWT import has_role, require_role

logger = logging.getLogger(__name__)


# Map Order model to the OrderResponse shape
def order_to_out(order: Order, include_customer: bool = False) -> dict:
    items = []
    for it in order.items:
        items.append({
            "book_id": it.book_id,
            "title": it.book.title if it.book else None,
            "author": it.book.author if it.book else None,
            "quantity": it.quantity,
            "price": it.price,
            "line_total": Decimal(it.price) * it.quantity,
        })
    out = {
        "id": order.id,
        "user_id": order.user_id,
        "status": order.status,
        "total": order.total,
        "created_at": order.created_at,
        "items": items,
        "customer": None,
    }
    if include_customer and order.user is not None:
        out["customer"] = {
            "id": order.user.id,
            "email": order.user.email,
            "first_name": order.user.first_name,
            "last_name": order.user.last_name,
        }
    return out


def create_order(db: Session, user: User, ip: Optional[str] = None) -> Order:
    """Turn the user's cart into a Pending order and empty the cart.

    Each order line snapshots the book price at this moment, so later price
    changes never alter the order. The order insert and the cart purge are
    committed together or not at all. The cart lines are locked while they
    are read, so a concurrent checkout waits and then finds them gone.

    Stock is validated when items are added to the cart and is neither
    re-checked nor decremented here (checkout reserves nothing).
    """
    cart_items = (
        db.query(CartItem)
        .options(joinedload(CartItem.book))
        .filter(CartItem.user_id == user.id)
        .order_by(CartItem.id)
        .with_for_update(of=CartItem)
        .all()
    )
    if not cart_items:
        raise NotFoundError("Cart is empty")
    ordered_ids = [ci.id for ci in cart_items]

    total = sum((Decimal(ci.book.price) * ci.quantity for ci in cart_items), Decimal("0"))

    order = Order(
        user_id=user.id,
        total=total,
        status=ORDER_STATUS_PENDING,
        items=[
            OrderItem(book_id=ci.book_id, quantity=ci.quantity, price=ci.book.price)
            for ci in cart_items
        ],
    )

    try:
        db.add(order)
        db.flush()
        # Purge only the lines that went into this order
        db.query(CartItem).filter(CartItem.id.in_(ordered_ids)).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Order creation failed for user %s", user.id)
        raise

    db.refresh(order)
    logger.info("Order %s created for user %s: %d items, total %s", order.id, user.id, len(cart_items), total)

    write_log(
        db, user_id=user.id, action="ORDER_CREATE", resource="orders", status="SUCCESS", ip=ip,
        meta={"order_id": order.id, "items": len(cart_items), "total": str(total)},
    )
    return order


def _list_orders(db: Session, criteria: OrderFilter, page: int, limit: int, include_customer: bool = False) -> dict:
    query = apply_order_filter(db.query(Order), criteria)
    count = query.count()
    rows = (
        query.options(
            selectinload(Order.items).joinedload(OrderItem.book),
            joinedload(Order.user),
        )
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset(page_offset(count, limit, page))
        .limit(limit)
        .all()
    )
    return paginate_result(count, [order_to_out(o, include_customer) for o in rows], limit, page)


def get_user_orders(db: Session, user: User, page: int = 1, limit: int = 10) -> dict:
    return _list_orders(db, build_order_filter(user_id=user.id), page, limit)


def get_all_orders(db: Session, user: User, page: int = 1, limit: int = 10, search: Optional[str] = None) -> dict:
    """Every order, newest first, optionally searched by owner email or name."""
    require_role(user, Role.MANAGER)
    return _list_orders(db, build_order_filter(search=search), page, limit, include_customer=True)


def get_order(db: Session, user: User, order_id: int) -> dict:
    order = (
        db.query(Order)
        .options(selectinload(Order.items).joinedload(OrderItem.book), joinedload(Order.user))
        .filter(Order.id == order_id)
        .first()
    )
    is_manager = has_role(user, Role.MANAGER)
    if not order or (order.user_id != user.id and not is_manager):
        raise NotFoundError("Order not found")
    return order_to_out(order, include_customer=is_manager)
