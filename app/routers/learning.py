# app/routers/learning.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_student
from app.database import get_session
from app.models.user import User
from app.repositories.course_repo import CourseRepository
from app.repositories.enrollment_repo import EnrollmentRepository
from app.repositories.rating_repo import RatingRepository
from app.repositories.user_repo import UserRepository
from app.schemas.course import LearningCourseDetailRead, LearningCourseRead
from app.services.course_service import CourseService
from app.services.learning_service import LearningService

router = APIRouter(prefix="/student/learning", tags=["Learning"])

course_repo = CourseRepository()
user_repo = UserRepository()
service = LearningService(
    EnrollmentRepository(),
    course_repo,
    user_repo,
    CourseService(course_repo, RatingRepository(), user_repo),
)


@router.get("", response_model=list[LearningCourseRead])
def my_courses(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
):
    """
    Courses the caller is enrolled in, with their instructor.
    """
    return service.list_my_courses(session, current_user.id)


@router.get("/{slug}", response_model=LearningCourseDetailRead)
def course_content(
    slug: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
):
    """
    Sections and videos of an enrolled course; 404 when not enrolled.
    """
    return service.get_course_content(session, current_user.id, slug)
