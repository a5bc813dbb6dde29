from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from bookstore.models.book import Book, BookType
from bookstore.models.cart import CartItem
from bookstore.models.log import Log
from bookstore.services import cart_service
from bookstore.utils.errors import NotFoundError, ValidationFailed


def test_first_add_creates_a_line(db, customer, make_book):
    book = make_book(stock=5)
    item = cart_service.add_to_cart(db, customer, book.id, 2)
    assert item.quantity == 2
    assert item.user_id == customer.id
    assert item.book_id == book.id


def test_repeat_add_increments_quantity(db, customer, make_book):
    book = make_book(stock=10)
    cart_service.add_to_cart(db, customer, book.id, 1)
    item = cart_service.add_to_cart(db, customer, book.id, 2)
    assert item.quantity == 3
    assert db.query(CartItem).filter_by(user_id=customer.id).count() == 1


def test_physical_stock_counts_existing_quantity(db, customer, make_book):
    book = make_book(stock=5)
    cart_service.add_to_cart(db, customer, book.id, 2)
    with pytest.raises(ValidationFailed) as exc:
        cart_service.add_to_cart(db, customer, book.id, 4)
    assert exc.value.message == "Not enough stock available"
    assert db.query(CartItem).filter_by(user_id=customer.id).one().quantity == 2


def test_physical_stock_can_be_filled_exactly(db, customer, make_book):
    book = make_book(stock=5)
    cart_service.add_to_cart(db, customer, book.id, 2)
    assert cart_service.add_to_cart(db, customer, book.id, 3).quantity == 5


def test_digital_books_have_no_stock_ceiling(db, customer, make_book):
    book = make_book(type=BookType.DIGITAL, stock=None)
    item = cart_service.add_to_cart(db, customer, book.id, 1000)
    assert item.quantity == 1000


def test_adding_does_not_touch_stock(db, customer, make_book):
    book = make_book(stock=5)
    cart_service.add_to_cart(db, customer, book.id, 3)
    db.expire_all()
    assert db.get(Book, book.id).stock == 5


def test_missing_or_inactive_book_is_not_found(db, customer, make_book):
    hidden = make_book(is_active=False)
    with pytest.raises(NotFoundError):
        cart_service.add_to_cart(db, customer, hidden.id, 1)
    with pytest.raises(NotFoundError):
        cart_service.add_to_cart(db, customer, 9999, 1)


@pytest.mark.parametrize("quantity", [0, -1, True, 1.5])
def test_quantity_must_be_a_positive_integer(db, customer, make_book, quantity):
    book = make_book()
    with pytest.raises(ValidationFailed) as exc:
        cart_service.add_to_cart(db, customer, book.id, quantity)
    assert exc.value.errors[0]["field"] == "quantity"


def test_add_is_audited(db, customer, make_book):
    book = make_book()
    cart_service.add_to_cart(db, customer, book.id, 1, ip="10.0.0.1")
    entry = db.query(Log).filter_by(action="CART_ADD").one()
    assert entry.user_id == customer.id
    assert entry.ip == "10.0.0.1"
    assert entry.meta["book_id"] == book.id


def test_empty_cart_is_not_found(db, customer):
    with pytest.raises(NotFoundError):
        cart_service.get_cart(db, customer)


def test_cart_uses_current_prices(db, customer, make_book):
    a = make_book(title="A", price="20.00", image_url="/uploads/a.png")
    b = make_book(title="B", price="5.00", type=BookType.DIGITAL, stock=None)
    cart_service.add_to_cart(db, customer, a.id, 2)
    cart_service.add_to_cart(db, customer, b.id, 1)

    cart = cart_service.get_cart(db, customer)
    assert cart["total_price"] == Decimal("45.00")
    assert [i["image"] for i in cart["items"]] == ["/uploads/a.png", None]

    a.price = Decimal("25.00")
    db.commit()

    cart = cart_service.get_cart(db, customer)
    assert cart["items"][0]["total_item_price"] == Decimal("50.00")
    assert cart["total_price"] == sum(i["price"] * i["quantity"] for i in cart["items"])
    assert cart["total_price"] == Decimal("55.00")


def test_update_sets_quantity_within_stock(db, customer, make_book):
    book = make_book(stock=4)
    item = cart_service.add_to_cart(db, customer, book.id, 3)
    assert cart_service.update_cart_item(db, customer, item.id, 4).quantity == 4
    with pytest.raises(ValidationFailed):
        cart_service.update_cart_item(db, customer, item.id, 5)


def test_lines_of_other_users_are_not_found(db, customer, make_user, make_book):
    other = make_user(email="other@bookstore.com")
    item = cart_service.add_to_cart(db, other, make_book().id, 1)
    with pytest.raises(NotFoundError):
        cart_service.update_cart_item(db, customer, item.id, 2)
    with pytest.raises(NotFoundError):
        cart_service.remove_cart_item(db, customer, item.id)


def test_remove_line(db, customer, make_book):
    item = cart_service.add_to_cart(db, customer, make_book().id, 1)
    cart_service.remove_cart_item(db, customer, item.id)
    assert db.query(CartItem).count() == 0


def test_concurrent_first_add_is_retried_as_increment(db, customer, make_book, monkeypatch):
    book = make_book(stock=10)
    book_id = book.id
    real_upsert = cart_service._upsert_cart_item
    calls = []

    def racing_upsert(session, user_id, bid, quantity):
        calls.append(quantity)
        if len(calls) == 1:
            # Another request commits the same line before this insert lands
            session.add(CartItem(user_id=user_id, book_id=bid, quantity=2))
            session.commit()
            raise IntegrityError("INSERT INTO cart_items", {}, Exception("UNIQUE constraint failed"))
        return real_upsert(session, user_id, bid, quantity)

    monkeypatch.setattr(cart_service, "_upsert_cart_item", racing_upsert)
    item = cart_service.add_to_cart(db, customer, book_id, 3)

    assert calls == [3, 3]
    assert item.quantity == 5
    assert db.query(CartItem).filter_by(user_id=customer.id).one().quantity == 5
