# app/schemas/cart.py
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field


class CartItemCreate(SQLModel):
    """
    Payload for adding a course to the cart.
    """

    model_config = ConfigDict(extra="forbid")

    course_id: int = Field(gt=0)


class CartItemRead(SQLModel):
    """
    Read model for a single cart row, joined to its course.

    `price` is the course's current price; the order freezes it at checkout.
    """

    id: int
    course_id: int
    course_name: str
    course_slug: str
    price: Decimal
    created_at: datetime


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartItemRead]
    total_items: int
    total_price: Decimal
