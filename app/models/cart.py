# app/models/cart.py
from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class CartItem(SQLModel, table=True):
    """
    Shopping cart entry for a user.

    One user cannot have 2 rows for the same course; the unique
    constraint is what rejects concurrent duplicate adds.
    """

    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_cart_user_course"),
    )

    id: int | None = Field(default=None, primary_key=True)

    user_id: int = Field(
        foreign_key="users.id",
        index=True,
    )

    course_id: int = Field(
        foreign_key="courses.id",
        index=True,
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    modified_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
