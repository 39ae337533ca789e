# app/models/course.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(SQLModel, table=True):
    __tablename__ = "categories"

    id: int | None = Field(default=None, primary_key=True)
    teacher_id: int | None = Field(
        default=None,
        foreign_key="users.id",
        index=True,
        description="Creator; may edit or delete the category",
    )
    name: str = Field(max_length=100, unique=True)
    slug: str = Field(max_length=120, unique=True, index=True)
    description: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class Course(SQLModel, table=True):
    """
    Course catalog entry.

    `price` is the authoritative unit price read at checkout time;
    cart rows never carry their own copy.
    """

    __tablename__ = "courses"

    id: int | None = Field(default=None, primary_key=True)

    teacher_id: int = Field(foreign_key="users.id", index=True)
    category_id: int | None = Field(
        default=None,
        foreign_key="categories.id",
        index=True,
    )

    name: str = Field(max_length=255, index=True)
    slug: str = Field(
        max_length=255,
        unique=True,
        index=True,
        description="URL-friendly identifier (unique)",
    )
    description: str | None = None
    for_who: str | None = Field(default=None, description="Target audience")
    reason: str | None = Field(default=None, description="Why take this course")
    intro_video: str | None = None
    image: str | None = None

    price: Decimal = Field(
        default=Decimal("0.00"),
        max_digits=10,
        decimal_places=2,
        ge=0,
    )

    created_at: datetime = Field(default_factory=_utcnow)
    modified_at: datetime = Field(default_factory=_utcnow)


class Section(SQLModel, table=True):
    __tablename__ = "sections"

    id: int | None = Field(default=None, primary_key=True)
    course_id: int = Field(foreign_key="courses.id", index=True)
    title: str = Field(max_length=255)
    order: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=_utcnow)
    modified_at: datetime = Field(default_factory=_utcnow)


class Video(SQLModel, table=True):
    __tablename__ = "videos"

    id: int | None = Field(default=None, primary_key=True)
    section_id: int = Field(foreign_key="sections.id", index=True)
    title: str = Field(max_length=255)
    video_file: str
    order: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=_utcnow)
    modified_at: datetime = Field(default_factory=_utcnow)
