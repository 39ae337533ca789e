from decimal import Decimal

from sqlmodel import select

from app.models.cart import CartItem
from app.models.enrollment import Enrollment
from app.models.order import Order, OrderItem

API = "/api/v1"


def add_to_cart(client, headers, *course_ids):
    for course_id in course_ids:
        res = client.post(f"{API}/cart/add", json={"course_id": course_id}, headers=headers)
        assert res.status_code == 201, res.text


def checkout(client, headers, billing):
    res = client.post(f"{API}/checkout", json=billing, headers=headers)
    assert res.status_code == 200, res.text
    return res.json()


def test_checkout_creates_pending_order(client, session, student, make_course, headers_for, billing):
    make_course(101, "20.00")
    make_course(202, "15.50")
    headers = headers_for(student)
    add_to_cart(client, headers, 101, 202)

    body = checkout(client, headers, billing)

    assert body["message"] == "Order created successfully"
    assert body["status"] == "pending"
    assert Decimal(str(body["total_price"])) == Decimal("35.50")

    order = session.get(Order, body["order_id"])
    assert order.status == "pending"
    items = session.exec(select(OrderItem).where(OrderItem.order_id == order.id)).all()
    assert sorted(i.course_id for i in items) == [101, 202]
    # cart is emptied only after payment
    assert len(session.exec(select(CartItem)).all()) == 2


def test_checkout_empty_cart_is_rejected(client, session, student, headers_for, billing):
    res = client.post(f"{API}/checkout", json=billing, headers=headers_for(student))

    assert res.status_code == 400
    assert res.json() == {"err": "cart is empty, add items to the cart before creating an order"}
    assert session.exec(select(Order)).all() == []


def test_checkout_with_vanished_course_writes_nothing(
    client, session, student, make_course, fill_cart, headers_for, billing
):
    make_course(101, "20.00")
    fill_cart(student, 101, 999)

    res = client.post(f"{API}/checkout", json=billing, headers=headers_for(student))

    assert res.status_code == 404
    assert res.json() == {"err": "course not found"}
    assert session.exec(select(Order)).all() == []
    assert session.exec(select(OrderItem)).all() == []


def test_checkout_requires_billing_details(client, student, headers_for):
    res = client.post(f"{API}/checkout", json={"first_name": "Ada"}, headers=headers_for(student))

    assert res.status_code == 400
    assert "err" in res.json()


def test_checkout_requires_student_or_admin(client, teacher, headers_for, billing):
    res = client.post(f"{API}/checkout", json=billing, headers=headers_for(teacher))
    assert res.status_code == 403

    res = client.post(f"{API}/checkout", json=billing)
    assert res.status_code == 401


def test_full_purchase_flow(client, session, gateway, student, make_course, headers_for, billing):
    make_course(101, "20.00")
    make_course(202, "15.50")
    headers = headers_for(student)
    add_to_cart(client, headers, 101, 202)
    order_id = checkout(client, headers, billing)["order_id"]

    res = client.post(f"{API}/payments/create-paypal", headers=headers)
    assert res.status_code == 200, res.text
    approval = res.json()
    assert approval["order_id"] == order_id
    assert approval["approval_url"].startswith("https://sandbox.paypal.test/approve")

    res = client.get(
        f"{API}/payments/paypal-success",
        params={"paymentId": approval["payment_id"], "PayerID": "PAYER-1"},
        headers=headers,
    )
    assert res.status_code == 200, res.text
    assert res.json()["message"] == "Payment succeeded and student enrolled successfully"
    assert res.json()["status"] == "completed"

    order = session.get(Order, order_id)
    session.refresh(order)
    assert order.status == "completed"
    pairs = sorted((e.student_id, e.course_id) for e in session.exec(select(Enrollment)).all())
    assert pairs == [(student.id, 101), (student.id, 202)]
    assert session.exec(select(CartItem).where(CartItem.user_id == student.id)).all() == []

    learning = client.get(f"{API}/student/learning", headers=headers)
    assert learning.status_code == 200
    assert sorted(c["course_id"] for c in learning.json()) == [101, 202]


def test_create_paypal_for_explicit_order(client, gateway, student, make_course, headers_for, billing):
    make_course(101, "20.00")
    headers = headers_for(student)
    add_to_cart(client, headers, 101)
    order_id = checkout(client, headers, billing)["order_id"]

    res = client.post(f"{API}/payments/create-paypal", json={"order_id": order_id}, headers=headers)

    assert res.status_code == 200
    assert gateway.initiated == [order_id]


def test_create_paypal_without_orders(client, student, headers_for):
    res = client.post(f"{API}/payments/create-paypal", headers=headers_for(student))

    assert res.status_code == 404
    assert res.json() == {"err": "order not found"}


def test_success_without_ids_is_rejected(client, session, student, make_course, headers_for, billing):
    make_course(101, "20.00")
    headers = headers_for(student)
    add_to_cart(client, headers, 101)
    order_id = checkout(client, headers, billing)["order_id"]

    res = client.get(f"{API}/payments/paypal-success", params={"paymentId": "PAY-1"}, headers=headers)

    assert res.status_code == 400
    assert res.json() == {"err": "payment ID or payer ID not provided"}
    order = session.get(Order, order_id)
    session.refresh(order)
    assert order.status == "pending"
    assert session.exec(select(Enrollment)).all() == []


def test_capture_failure_keeps_order_pending(
    client, session, gateway, student, make_course, headers_for, billing
):
    make_course(101, "20.00")
    make_course(202, "15.50")
    headers = headers_for(student)
    add_to_cart(client, headers, 101, 202)
    order_id = checkout(client, headers, billing)["order_id"]
    payment_id = client.post(f"{API}/payments/create-paypal", headers=headers).json()["payment_id"]
    gateway.fail_capture = True

    res = client.get(
        f"{API}/payments/paypal-success",
        params={"paymentId": payment_id, "PayerID": "PAYER-1"},
        headers=headers,
    )

    assert res.status_code == 500
    assert res.json() == {"err": "payment execution failed"}
    order = session.get(Order, order_id)
    session.refresh(order)
    assert order.status == "pending"
    assert session.exec(select(Enrollment)).all() == []
    assert len(session.exec(select(CartItem).where(CartItem.user_id == student.id)).all()) == 2


def test_cancel_acknowledges_without_changes(client, session, student, make_course, headers_for, billing):
    make_course(101, "20.00")
    headers = headers_for(student)
    add_to_cart(client, headers, 101)
    order_id = checkout(client, headers, billing)["order_id"]

    res = client.get(f"{API}/payments/paypal-cancel", headers=headers)

    assert res.status_code == 200
    assert res.json() == {"message": "Payment canceled by the user", "status": "canceled"}
    order = session.get(Order, order_id)
    assert order.status == "pending"


def test_reconcile_is_admin_only(client, student, admin, headers_for):
    assert client.post(f"{API}/payments/reconcile", headers=headers_for(student)).status_code == 403

    res = client.post(f"{API}/payments/reconcile", headers=headers_for(admin))
    assert res.status_code == 200
    assert res.json() == {"finalized": [], "failed": []}


def test_orders_me_lists_own_orders(client, student, make_user, make_course, headers_for, billing):
    make_course(101, "20.00")
    headers = headers_for(student)
    add_to_cart(client, headers, 101)
    order_id = checkout(client, headers, billing)["order_id"]

    listing = client.get(f"{API}/orders/me", headers=headers).json()
    assert [o["id"] for o in listing] == [order_id]

    detail = client.get(f"{API}/orders/me/{order_id}", headers=headers).json()
    assert [i["course_id"] for i in detail["items"]] == [101]

    stranger = make_user("student")
    res = client.get(f"{API}/orders/me/{order_id}", headers=headers_for(stranger))
    assert res.status_code == 404
