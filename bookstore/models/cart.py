# bookstore/models/cart.py
from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import relationship
from bookstore.database import Base

# A single pending line (book + quantity) in a user's cart
class CartItem(Base):
    __tablename__ = "cart_items" # Table name

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False) # Owner of the cart
    book_id = Column(Integer, ForeignKey("books.id"), index=True, nullable=False) # Foreign key to book
    quantity = Column(Integer, CheckConstraint("quantity >= 1"), nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    book = relationship("Book") # Price is always read live from the book

    __table_args__ = (
        # One line per book per user; repeat adds increment quantity
        UniqueConstraint("user_id", "book_id", name="uq_cartitem_user_book"),
    )
