from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from bookstore.schemas.pagination import PageMeta


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    book_id: int
    title: Optional[str] = None
    author: Optional[str] = None
    quantity: int
    price: float
    line_total: float


# Owner details shown to managers
class OrderCustomer(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


# Output schema representing the full order details
class OrderResponse(BaseModel):
    id: int
    user_id: int
    status: str
    total: float
    created_at: Optional[datetime] = None
    items: List[OrderItemOut]
    customer: Optional[OrderCustomer] = None


# Schema for paginated order lists
class OrdersPage(PageMeta):
    results: List[OrderResponse]
