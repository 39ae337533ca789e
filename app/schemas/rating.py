# app/schemas/rating.py
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class RatingCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    rating: int = Field(ge=1, le=5)
    review: str | None = Field(default=None, max_length=2000)

    @field_validator("review")
    @classmethod
    def normalize_review(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class RatingUpdate(SQLModel):
    """Partial update; only provided fields change."""

    model_config = ConfigDict(extra="forbid")

    rating: int | None = Field(default=None, ge=1, le=5)
    review: str | None = Field(default=None, max_length=2000)

    @field_validator("review")
    @classmethod
    def normalize_review(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class RatingRead(SQLModel):
    id: int
    course_id: int
    student_id: int
    student_name: str
    rating: int
    review: str | None = None
    created_at: datetime


class RatingList(SQLModel):
    items: list[RatingRead]
    average_rating: float
    rating_count: int
