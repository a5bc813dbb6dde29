# bookstore/models/book.py
import enum

from sqlalchemy import (
    Column, Integer, String, Text, Numeric, Boolean, ForeignKey, DateTime, Enum,
    Table, CheckConstraint, UniqueConstraint, func
)
from sqlalchemy.orm import relationship
from bookstore.database import Base

# Physical books carry stock, digital books are delivered through file_url
class BookType(str, enum.Enum):
    PHYSICAL = "PHYSICAL"
    DIGITAL = "DIGITAL"


book_categories = Table(
    "book_categories",
    Base.metadata,
    Column("book_id", Integer, ForeignKey("books.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)

    books = relationship("Book", secondary=book_categories, back_populates="categories")


# Model Book
# A catalog entry. Price and stock are guarded by check constraints;
# stock is only meaningful for PHYSICAL books.
class Book(Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False, index=True)
    author = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")

    price = Column(Numeric(10, 2), CheckConstraint("price >= 0"), nullable=False)
    stock = Column(Integer, CheckConstraint("stock IS NULL OR stock >= 0"), nullable=True)
    type = Column(Enum(BookType), nullable=False, default=BookType.PHYSICAL)
    file_url = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    images = relationship(
        "BookImage", back_populates="book", cascade="all, delete-orphan",
        order_by="BookImage.position",
    )
    categories = relationship("Category", secondary=book_categories, back_populates="books")
    likes = relationship("Like", back_populates="book", cascade="all, delete-orphan")

    @property
    def primary_image_url(self):
        for image in self.images:
            if image.is_primary:
                return image.image_url
        return None

    @property
    def category_names(self):
        return [c.name for c in self.categories]


class BookImage(Base):
    __tablename__ = "book_images"

    id = Column(Integer, primary_key=True, index=True)
    book_id = Column(Integer, ForeignKey("books.id"), index=True, nullable=False)
    image_url = Column(String, nullable=False)
    is_primary = Column(Boolean, nullable=False, default=False)
    position = Column(Integer, nullable=False, default=0)

    book = relationship("Book", back_populates="images")


# A row per (user, book) means "liked"
class Like(Base):
    __tablename__ = "likes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    book_id = Column(Integer, ForeignKey("books.id"), index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    book = relationship("Book", back_populates="likes")

    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_like_user_book"),
    )
