# app/routers/courses.py
from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_teacher
from app.database import get_session
from app.models.user import User
from app.repositories.course_repo import CourseRepository
from app.repositories.rating_repo import RatingRepository
from app.repositories.user_repo import UserRepository
from app.schemas.course import (
    CategoryCreate,
    CategoryRead,
    CategoryUpdate,
    CourseCreate,
    CourseDetailRead,
    CoursePage,
    CourseRead,
    CourseUpdate,
    SectionCreate,
    SectionRead,
    VideoCreate,
    VideoRead,
)
from app.services.course_service import CourseService

router = APIRouter(tags=["Courses"])

repo = CourseRepository()
service = CourseService(repo, RatingRepository(), UserRepository())


# -------- Public endpoints --------


@router.get("/categories", response_model=list[CategoryRead])
def list_categories(session: Session = Depends(get_session)):
    return service.list_categories(session)


@router.get("/courses", response_model=CoursePage)
def list_courses(
    session: Session = Depends(get_session),
    page: int = 1,
    limit: int = 20,
):
    """
    Paginated course list, newest first.
    """
    return service.list_courses(session, page=page, limit=limit)


@router.get("/courses/{slug}", response_model=CourseDetailRead)
def get_course(
    slug: str,
    session: Session = Depends(get_session),
):
    """
    Course page: details, instructor, sections with videos, rating summary.
    """
    return service.get_course_detail(session, slug)


@router.get("/search", response_model=CoursePage)
def search_courses(
    session: Session = Depends(get_session),
    q: str | None = None,
    category_id: int | None = None,
    teacher_id: int | None = None,
    price_min: Decimal | None = None,
    price_max: Decimal | None = None,
    created_after: datetime | None = None,
    created_before: datetime | None = None,
    page: int = 1,
    limit: int = 20,
):
    """
    Filter courses.

    - q matches name or description (case-insensitive)
    - every other filter is optional and combined with AND
    """
    return service.search(
        session,
        q=q,
        category_id=category_id,
        teacher_id=teacher_id,
        price_min=price_min,
        price_max=price_max,
        created_after=created_after,
        created_before=created_before,
        page=page,
        limit=limit,
    )


# -------- Teacher endpoints --------


@router.post(
    "/categories",
    response_model=CategoryRead,
    status_code=status.HTTP_201_CREATED,
)
def create_category(
    payload: CategoryCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_teacher),
):
    return service.create_category(session, current_user, payload)


@router.patch("/categories/{category_id}", response_model=CategoryRead)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_teacher),
):
    """
    Rename or re-describe a category (creator or admin).
    """
    return service.update_category(session, current_user, category_id, payload)


@router.delete(
    "/categories/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_category(
    category_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_teacher),
):
    """
    Delete a category (creator or admin). Its courses become uncategorized.
    """
    service.delete_category(session, current_user, category_id)


@router.get("/teacher/courses", response_model=CoursePage)
def list_teacher_courses(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_teacher),
    page: int = 1,
    limit: int = 20,
):
    """
    Courses owned by the caller, newest first.
    """
    return service.list_teacher_courses(session, current_user, page=page, limit=limit)


@router.post(
    "/courses",
    response_model=CourseRead,
    status_code=status.HTTP_201_CREATED,
)
def create_course(
    payload: CourseCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_teacher),
):
    """
    Create a course owned by the caller.
    """
    return service.create_course(session, current_user, payload)


@router.patch("/courses/{course_id}", response_model=CourseRead)
def update_course(
    course_id: int,
    payload: CourseUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_teacher),
):
    """
    Update a course (owner or admin).
    """
    return service.update_course(session, current_user, course_id, payload)


@router.delete(
    "/courses/{course_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_course(
    course_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_teacher),
):
    """
    Delete a course with its sections and videos (owner or admin).
    """
    service.delete_course(session, current_user, course_id)


@router.post(
    "/courses/{course_id}/sections",
    response_model=SectionRead,
    status_code=status.HTTP_201_CREATED,
)
def add_section(
    course_id: int,
    payload: SectionCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_teacher),
):
    return service.add_section(session, current_user, course_id, payload)


@router.post(
    "/sections/{section_id}/videos",
    response_model=VideoRead,
    status_code=status.HTTP_201_CREATED,
)
def add_video(
    section_id: int,
    payload: VideoCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_teacher),
):
    return service.add_video(session, current_user, section_id, payload)
