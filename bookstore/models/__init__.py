# Import every model so Base.metadata knows all tables
from bookstore.models import users, book, cart, order, log  # noqa: F401
