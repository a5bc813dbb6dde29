"""Seed a development database with a client, a manager and a few books.

Run with ``python -m bookstore.populate_db``. Existing rows are left alone;
users and books are only inserted when their email/title is missing.
"""
from decimal import Decimal

from bookstore.database import SessionLocal, init_db
from bookstore.models.book import Book, BookType, Category
from bookstore.models.users import User, Role
from bookstore.utils.hashing import get_password_hash

# Configuration
USERS = [
    {"email": "client@bookstore.com", "password": "password123", "first_name": "John", "last_name": "Doe", "role": Role.CLIENT},
    {"email": "manager@bookstore.com", "password": "manager123", "first_name": "Jane", "last_name": "Smith", "role": Role.MANAGER},
]

BOOKS = [
    {"title": "The Pragmatic Programmer", "author": "Andrew Hunt",
     "description": "A guide to mastering the craft of software development.",
     "price": Decimal("29.99"), "stock": 10, "type": BookType.PHYSICAL, "categories": ["Programming"]},
    {"title": "Clean Code", "author": "Robert C. Martin",
     "description": "A handbook of agile software craftsmanship.",
     "price": Decimal("24.99"), "stock": 15, "type": BookType.PHYSICAL, "categories": ["Programming"]},
    {"title": "Refactoring", "author": "Martin Fowler",
     "description": "Improving the design of existing code.",
     "price": Decimal("34.99"), "stock": 5, "type": BookType.PHYSICAL, "categories": ["Programming", "Design"]},
    {"title": "JavaScript: The Good Parts", "author": "Douglas Crockford",
     "description": "Unearthing the excellence in JavaScript.",
     "price": Decimal("19.99"), "stock": None, "type": BookType.DIGITAL,
     "file_url": "https://example.com/js-good-parts.pdf", "categories": ["Programming", "JavaScript"]},
]
# End Configuration


def _category(session, name, cache):
    if name not in cache:
        category = session.query(Category).filter(Category.name == name).first()
        if not category:
            category = Category(name=name)
            session.add(category)
        cache[name] = category
    return cache[name]


def populate():
    init_db()
    session = SessionLocal()
    try:
        for data in USERS:
            if session.query(User).filter(User.email == data["email"]).first():
                continue
            session.add(User(
                email=data["email"],
                password_hash=get_password_hash(data["password"]),
                first_name=data["first_name"],
                last_name=data["last_name"],
                role=data["role"],
            ))
            print(f"Added user {data['email']} ({data['role'].value})")

        categories = {}
        for data in BOOKS:
            if session.query(Book).filter(Book.title == data["title"]).first():
                continue
            fields = {k: v for k, v in data.items() if k != "categories"}
            book = Book(**fields)
            book.categories = [_category(session, name, categories) for name in data["categories"]]
            session.add(book)
            print(f"Added book {data['title']}")

        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


if __name__ == "__main__":
    populate()
