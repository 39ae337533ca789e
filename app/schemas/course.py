# app/schemas/course.py
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("field cannot be empty")
    return v


# ----- Categories -----


class CategoryCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    description: str | None = None

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _strip_required(v)


class CategoryUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    description: str | None = None

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _strip_required(v)


class CategoryRead(SQLModel):
    id: int
    teacher_id: int | None = None
    name: str
    slug: str
    description: str | None = None


# ----- Courses -----


class CourseCreate(SQLModel):
    """
    Payload for creating a course.

    - slug is optional: if omitted, generated from `name`.
    - teacher_id comes from the token.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    slug: str | None = None
    category_id: int | None = None
    description: str | None = None
    for_who: str | None = None
    reason: str | None = None
    intro_video: str | None = None
    image: str | None = None
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("slug")
    @classmethod
    def normalize_slug(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("slug cannot be empty if provided")
        return v


class CourseUpdate(SQLModel):
    """Partial update; only provided fields change."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    slug: str | None = None
    category_id: int | None = None
    description: str | None = None
    for_who: str | None = None
    reason: str | None = None
    intro_video: str | None = None
    image: str | None = None
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)

    @field_validator("name", "slug")
    @classmethod
    def not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return _strip_required(v)


class CourseRead(SQLModel):
    id: int
    teacher_id: int
    category_id: int | None = None
    name: str
    slug: str
    description: str | None = None
    for_who: str | None = None
    reason: str | None = None
    intro_video: str | None = None
    image: str | None = None
    price: Decimal
    created_at: datetime
    modified_at: datetime


class CoursePage(SQLModel):
    items: list[CourseRead]
    total: int
    page: int
    limit: int


# ----- Sections & videos -----


class SectionCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(max_length=255)
    order: int = Field(default=0, ge=0)

    @field_validator("title")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _strip_required(v)


class VideoCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(max_length=255)
    video_file: str
    order: int = Field(default=0, ge=0)

    @field_validator("title", "video_file")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _strip_required(v)


class VideoRead(SQLModel):
    id: int
    section_id: int
    title: str
    video_file: str
    order: int


class SectionRead(SQLModel):
    id: int
    course_id: int
    title: str
    order: int


class SectionWithVideosRead(SectionRead):
    videos: list[VideoRead]


class InstructorRead(SQLModel):
    id: int
    first_name: str
    last_name: str


class CourseDetailRead(CourseRead):
    """
    Public course page: course, instructor, curriculum, rating summary.
    """

    instructor: InstructorRead | None = None
    sections: list[SectionWithVideosRead]
    average_rating: float
    rating_count: int


# ----- Student learning -----


class LearningCourseRead(SQLModel):
    course_id: int
    name: str
    slug: str
    image: str | None = None
    instructor: InstructorRead
    enrolled_at: datetime


class LearningCourseDetailRead(SQLModel):
    course_id: int
    name: str
    slug: str
    description: str | None = None
    intro_video: str | None = None
    instructor: InstructorRead
    sections: list[SectionWithVideosRead]
