# app/models/enrollment.py
from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class Enrollment(SQLModel, table=True):
    """Grants a student access to a course. Rows are never updated."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollment_student_course"),
    )

    id: int | None = Field(default=None, primary_key=True)
    student_id: int = Field(foreign_key="users.id", index=True)
    course_id: int = Field(foreign_key="courses.id", index=True)
    enrolled_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
