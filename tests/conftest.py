import os
import tempfile
from decimal import Decimal

# Point the app at a private in-memory database before anything imports it
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="bookstore-uploads-"))

import pytest
from fastapi.testclient import TestClient

from bookstore.database import Base, SessionLocal, engine
from bookstore.main import app
from bookstore.models.book import Book, BookImage, BookType, Category
from bookstore.models.users import User, Role
from bookstore.utils.hashing import get_password_hash
from bookstore.utils.storage import LocalBlobStorage, get_storage

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(tmp_path):
    return LocalBlobStorage(upload_dir=tmp_path, public_base_url="/uploads")


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(email="john@bookstore.com", role=Role.CLIENT, first_name="John", last_name="Doe"):
        user = User(
            email=email,
            password_hash=get_password_hash(PASSWORD),
            role=role,
            first_name=first_name,
            last_name=last_name,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def customer(make_user):
    return make_user()


@pytest.fixture
def manager(make_user):
    return make_user(email="jane@bookstore.com", role=Role.MANAGER, first_name="Jane", last_name="Smith")


@pytest.fixture
def make_book(db):
    def _make(title="Clean Code", author="Robert C. Martin", description="Agile craftsmanship",
              price="20.00", stock=10, type=BookType.PHYSICAL, is_active=True,
              categories=(), image_url=None):
        book = Book(
            title=title,
            author=author,
            description=description,
            price=Decimal(price),
            stock=stock,
            type=type,
            is_active=is_active,
        )
        for name in categories:
            category = db.query(Category).filter(Category.name == name).first() or Category(name=name)
            book.categories.append(category)
        if image_url:
            book.images.append(BookImage(image_url=image_url, is_primary=True, position=0))
        db.add(book)
        db.commit()
        db.refresh(book)
        return book
    return _make


@pytest.fixture
def login(client):
    def _login(email, password=PASSWORD):
        resp = client.post("/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}
    return _login
