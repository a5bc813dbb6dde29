# bookstore/schemas/book.py
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List

from bookstore.models.book import BookType
from bookstore.schemas.pagination import PageMeta


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Schema for creating a new book
class BookCreate(ORMBase):
    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: float = Field(ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    type: BookType
    file_url: Optional[str] = None
    categories: List[str] = Field(default_factory=list)


# Schema for partial book updates - all fields optional
class BookUpdate(ORMBase):
    title: Optional[str] = Field(None, min_length=1)
    author: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    type: Optional[BookType] = None
    file_url: Optional[str] = None
    is_active: Optional[bool] = None
    categories: Optional[List[str]] = None


# Book as shown in listings and detail views
class BookOut(ORMBase):
    id: int
    title: str
    author: str
    description: str
    price: float
    stock: Optional[int] = None
    type: BookType
    file_url: Optional[str] = None
    is_active: bool
    image: Optional[str] = None
    likes_count: int = 0
    categories: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookListPage(PageMeta):
    results: List[BookOut]


class CategoryOut(ORMBase):
    id: int
    name: str


class LikeToggleResponse(BaseModel):
    message: str
    liked: bool


# Kind of file attached to a book through the upload endpoint
class FileKind(str, Enum):
    IMAGE = "image"
    PDF = "pdf"


class UploadResponse(BaseModel):
    url: str
    file_type: FileKind
    book: BookOut
