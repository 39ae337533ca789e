# app/models/order.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Purchase of the courses that were in a user's cart.

    Lifecycle:
      pending   -> created by checkout, awaiting payment
      completed -> payment captured, buyer enrolled, cart cleared

    Payment correlation:
      - payment_id  : provider payment id, stored when the approval URL is issued
      - payer_id    : provider payer id, stored on capture
      - captured_at : set once the provider confirmed the capture; an order
                      with captured_at but status 'pending' still needs
                      finalizing (see PaymentService.reconcile)
    """

    __tablename__ = "orders"

    id: int | None = Field(default=None, primary_key=True)

    user_id: int = Field(
        foreign_key="users.id",
        index=True,
    )

    # Billing details from the checkout form
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    email: str = Field(max_length=255)
    country: str = Field(max_length=100)

    total: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        description="Sum of line prices at checkout time",
    )

    order_number: str = Field(
        unique=True,
        index=True,
        max_length=64,
    )

    # pending | completed
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    payment_id: str | None = Field(default=None, index=True, max_length=128)
    payer_id: str | None = Field(default=None, max_length=128)
    captured_at: datetime | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
    modified_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order. `price` is frozen at checkout.
    """

    __tablename__ = "order_items"

    id: int | None = Field(default=None, primary_key=True)

    order_id: int = Field(
        foreign_key="orders.id",
        index=True,
    )

    course_id: int = Field(
        foreign_key="courses.id",
        index=True,
    )

    price: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        description="Unit price at time of order",
    )
