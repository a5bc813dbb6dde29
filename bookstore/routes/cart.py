# bookstore/routes/cart.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from bookstore.database import get_db
from bookstore.models.users import User
from bookstore.schemas.cart import CartAddItem, CartUpdateItem, CartOut, CartItemRow
from bookstore.schemas.user import MessageResponse
from bookstore.services import cart_service
from bookstore.utils.audit import client_ip
from bookstore.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/cart", tags=["Cart"])

# Add a book to the cart (repeat adds increase the quantity)
@router.post("", response_model=CartItemRow, status_code=status.HTTP_201_CREATED)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return cart_service.add_to_cart(db, current_user, payload.book_id, payload.quantity, ip=client_ip(request))

@router.get("", response_model=CartOut)
def get_cart(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return cart_service.get_cart(db, current_user)

@router.patch("/items/{item_id}", response_model=CartItemRow)
def update_cart_item(
    item_id: int,
    payload: CartUpdateItem,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return cart_service.update_cart_item(db, current_user, item_id, payload.quantity)

@router.delete("/items/{item_id}", response_model=MessageResponse)
def delete_cart_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart_service.remove_cart_item(db, current_user, item_id)
    return {"message": "Item removed from cart"}
