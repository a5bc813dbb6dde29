# bookstore/routes/orders.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from bookstore.database import get_db
from bookstore.models.users import User
from bookstore.schemas.order import OrderResponse, OrdersPage
from bookstore.services import order_service
from bookstore.utils.audit import client_ip
from bookstore.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/orders", tags=["Orders"])

# Place an order from the current cart; the cart is emptied
@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    order = order_service.create_order(db, current_user, ip=client_ip(request))
    return order_service.order_to_out(order)


# List the caller's orders, newest first
@router.get("", response_model=OrdersPage)
def list_my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return order_service.get_user_orders(db, current_user, page=page, limit=limit)


# List every order (manager only), searchable by customer email or name
@router.get("/manager", response_model=OrdersPage)
def list_all_orders(
    search: Optional[str] = Query(None, description="Customer email, first or last name"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return order_service.get_all_orders(db, current_user, page=page, limit=limit, search=search)


# Get details of a specific order
@router.get("/{order_id}", response_model=OrderResponse)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return order_service.get_order(db, current_user, order_id)
