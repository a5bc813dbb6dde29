from pydantic import BaseModel, Field
from typing import List, Optional

# Request schema for adding a book to the cart
class CartAddItem(BaseModel):
    book_id: int
    quantity: int = Field(gt=0)

# Request schema for updating cart item quantity
class CartUpdateItem(BaseModel):
    quantity: int = Field(gt=0)

# Stored cart row as returned by POST /cart
class CartItemRow(BaseModel):
    id: int
    user_id: int
    book_id: int
    quantity: int

    class Config:
        from_attributes = True

# Response schema for a single cart line priced at the current book price
class CartItemOut(BaseModel):
    id: int
    book_id: int
    title: str
    author: str
    price: float
    quantity: int
    total_item_price: float
    image: Optional[str] = None

# Response schema for the entire cart summary
class CartOut(BaseModel):
    items: List[CartItemOut]
    total_price: float
