import os

# Settings are read at import time; configure before importing the app.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.auth import create_access_token
from app.core.errors import GatewayError
from app.core.payment_gateway import (
    ApprovalHandle,
    CaptureOutcome,
    PaymentGateway,
    get_payment_gateway,
)
from app.core.security import hash_password
from app.database import get_session
from app.main import app as fastapi_app
from app.models.cart import CartItem
from app.models.course import Course
from app.models.user import User


# Automatic marking by folder
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


class FakeGateway(PaymentGateway):
    """In-memory PaymentGateway recording every call."""

    def __init__(self):
        self.initiated: list[int] = []
        self.captured: list[tuple[str, str]] = []
        self.fail_capture = False

    def initiate(self, order) -> ApprovalHandle:
        self.initiated.append(order.id)
        payment_id = f"PAY-{order.id}"
        return ApprovalHandle(
            payment_id=payment_id,
            approval_url=f"https://sandbox.paypal.test/approve?token={payment_id}",
        )

    def capture(self, payment_id: str, payer_id: str) -> CaptureOutcome:
        if self.fail_capture:
            raise GatewayError("payment execution failed")
        self.captured.append((payment_id, payer_id))
        return CaptureOutcome(payment_id=payment_id, state="approved")


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture()
def session(engine) -> Generator[Session, None, None]:
    with Session(engine) as s:
        yield s


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def app(session, gateway):
    fastapi_app.dependency_overrides[get_session] = lambda: session
    fastapi_app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


# -------- data factories --------


@pytest.fixture()
def make_user(session):
    counter = {"n": 0}

    def _make(role: str = "student", is_active: bool = True, password: str = "password123"):
        counter["n"] += 1
        user = User(
            first_name=role.capitalize(),
            last_name=f"Number{counter['n']}",
            email=f"{role}{counter['n']}@example.com",
            password_hash=hash_password(password),
            role=role,
            is_active=is_active,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture()
def student(make_user) -> User:
    return make_user("student")


@pytest.fixture()
def teacher(make_user) -> User:
    return make_user("teacher")


@pytest.fixture()
def admin(make_user) -> User:
    return make_user("admin")


@pytest.fixture()
def make_course(session, teacher):
    def _make(course_id: int | None = None, price: str = "10.00", name: str | None = None):
        label = name or f"Course {course_id or ''}".strip()
        course = Course(
            id=course_id,
            teacher_id=teacher.id,
            name=label,
            slug=label.lower().replace(" ", "-"),
            description=f"All about {label}",
            price=Decimal(price),
        )
        session.add(course)
        session.commit()
        session.refresh(course)
        return course

    return _make


@pytest.fixture()
def fill_cart(session):
    def _fill(user: User, *course_ids: int) -> list[CartItem]:
        items = [CartItem(user_id=user.id, course_id=cid) for cid in course_ids]
        session.add_all(items)
        session.commit()
        return items

    return _fill


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture()
def headers_for():
    return auth_headers


BILLING = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "country": "UK",
}


@pytest.fixture()
def billing() -> dict[str, str]:
    return dict(BILLING)
