# app/schemas/order.py
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field

OrderStatus = Literal["pending", "completed"]


class CheckoutRequest(SQLModel):
    """
    Billing details submitted with checkout.

    Backend derives:
      - user_id from token
      - status = 'pending'
      - total from current course prices
      - items from cart
    """

    model_config = ConfigDict(extra="forbid")

    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    email: EmailStr
    country: str = Field(max_length=100)

    @field_validator("first_name", "last_name", "country")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class CheckoutResponse(SQLModel):
    message: str
    order_id: int
    order_number: str
    total_price: Decimal
    status: OrderStatus


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: int
    user_id: int
    order_number: str
    first_name: str
    last_name: str
    email: str
    country: str
    total: Decimal
    status: OrderStatus
    payment_id: str | None = None
    created_at: datetime


class OrderItemRead(SQLModel):
    id: int
    order_id: int
    course_id: int
    price: Decimal


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]
