from decimal import Decimal

import pytest
from sqlmodel import select

from app.core.errors import NotFoundError
from app.models.cart import CartItem
from app.models.order import Order, OrderItem
from app.repositories.course_repo import CourseRepository
from app.repositories.order_repo import OrderRepository
from app.schemas.order import CheckoutRequest
from app.services.checkout_service import CheckoutService
from app.services.pricing_service import PricingResolver


@pytest.fixture()
def order_repo():
    return OrderRepository()


@pytest.fixture()
def checkout(order_repo):
    return CheckoutService(order_repo, PricingResolver(CourseRepository()))


@pytest.fixture()
def billing_payload(billing):
    return CheckoutRequest(**billing)


def test_pricing_resolver_returns_current_price(session, make_course):
    make_course(101, "20.00")
    resolver = PricingResolver(CourseRepository())

    assert resolver.price(session, 101) == Decimal("20.00")


def test_pricing_resolver_missing_course_raises_not_found(session):
    resolver = PricingResolver(CourseRepository())

    with pytest.raises(NotFoundError) as exc:
        resolver.price(session, 404)
    assert exc.value.status_code == 404
    assert exc.value.detail == "course not found"


def test_pricing_resolver_sees_price_changes(session, make_course):
    course = make_course(101, "20.00")
    resolver = PricingResolver(CourseRepository())
    assert resolver.price(session, 101) == Decimal("20.00")

    course.price = Decimal("25.00")
    session.add(course)
    session.commit()

    assert resolver.price(session, 101) == Decimal("25.00")


def test_create_order_totals_cart_lines(session, student, make_course, fill_cart, checkout, billing_payload):
    make_course(101, "20.00")
    make_course(202, "15.50")
    cart = fill_cart(student, 101, 202)

    order, total = checkout.create_order(session, student.id, cart, billing_payload)

    assert total == Decimal("35.50")
    assert order.total == Decimal("35.50")
    assert order.status == "pending"
    assert order.order_number.startswith("ORD-")
    assert order.email == "ada@example.com"

    items = session.exec(select(OrderItem).where(OrderItem.order_id == order.id)).all()
    assert sorted((i.course_id, i.price) for i in items) == [
        (101, Decimal("20.00")),
        (202, Decimal("15.50")),
    ]


def test_create_order_leaves_cart_untouched(session, student, make_course, fill_cart, checkout, billing_payload):
    make_course(101, "20.00")
    cart = fill_cart(student, 101)

    checkout.create_order(session, student.id, cart, billing_payload)

    remaining = session.exec(select(CartItem).where(CartItem.user_id == student.id)).all()
    assert len(remaining) == 1


def test_create_order_counts_each_line(session, student, make_course, checkout, billing_payload):
    make_course(101, "9.99")
    lines = [
        CartItem(user_id=student.id, course_id=101),
        CartItem(user_id=student.id, course_id=101),
    ]

    order, total = checkout.create_order(session, student.id, lines, billing_payload)

    assert total == Decimal("19.98")
    items = session.exec(select(OrderItem).where(OrderItem.order_id == order.id)).all()
    assert len(items) == 2


def test_create_order_missing_price_writes_nothing(session, student, make_course, fill_cart, checkout, billing_payload):
    make_course(101, "20.00")
    cart = fill_cart(student, 101, 999)

    with pytest.raises(NotFoundError):
        checkout.create_order(session, student.id, cart, billing_payload)

    assert session.exec(select(Order)).all() == []
    assert session.exec(select(OrderItem)).all() == []


def test_create_order_item_failure_rolls_back_order(
    session, student, make_course, fill_cart, checkout, order_repo, billing_payload, monkeypatch
):
    make_course(101, "20.00")
    cart = fill_cart(student, 101)

    def _boom(session, items):
        raise RuntimeError("disk full")

    monkeypatch.setattr(order_repo, "create_items", _boom)

    with pytest.raises(RuntimeError):
        checkout.create_order(session, student.id, cart, billing_payload)

    assert session.exec(select(Order)).all() == []
    assert session.exec(select(OrderItem)).all() == []
