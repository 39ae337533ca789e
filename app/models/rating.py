# app/models/rating.py
from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class Rating(SQLModel, table=True):
    """
    Student review of a course they are enrolled in.
    One rating per (student, course).
    """

    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_rating_student_course"),
    )

    id: int | None = Field(default=None, primary_key=True)
    student_id: int = Field(foreign_key="users.id", index=True)
    course_id: int = Field(foreign_key="courses.id", index=True)
    rating: int = Field(ge=1, le=5)
    review: str | None = None
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
