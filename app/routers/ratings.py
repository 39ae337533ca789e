# app/routers/ratings.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_auth, require_student
from app.database import get_session
from app.models.user import User
from app.repositories.course_repo import CourseRepository
from app.repositories.enrollment_repo import EnrollmentRepository
from app.repositories.rating_repo import RatingRepository
from app.schemas.rating import RatingCreate, RatingList, RatingRead, RatingUpdate
from app.services.rating_service import RatingService

router = APIRouter(tags=["Ratings"])

repo = RatingRepository()
service = RatingService(repo, CourseRepository(), EnrollmentRepository())


@router.get("/courses/{course_id}/ratings", response_model=RatingList)
def list_ratings(
    course_id: int,
    session: Session = Depends(get_session),
    page: int = 1,
    limit: int = 20,
):
    """
    Ratings of a course, newest first, with average and count.
    """
    return service.list_for_course(session, course_id, page=page, limit=limit)


@router.post(
    "/courses/{course_id}/ratings",
    response_model=RatingRead,
    status_code=status.HTTP_201_CREATED,
)
def rate_course(
    course_id: int,
    payload: RatingCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
):
    """
    Rate a course the caller is enrolled in (1-5, once).
    """
    return service.rate(session, current_user, course_id, payload)


@router.get("/student/ratings", response_model=list[RatingRead])
def list_my_ratings(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
):
    """Ratings written by the caller, newest first."""
    return service.list_mine(session, current_user)


@router.get("/ratings/{rating_id}", response_model=RatingRead)
def get_rating(
    rating_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
):
    return service.get(session, current_user, rating_id)


@router.patch("/ratings/{rating_id}", response_model=RatingRead)
def update_rating(
    rating_id: int,
    payload: RatingUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
):
    """
    Edit the caller's own rating (score and/or review).
    """
    return service.update(session, current_user, rating_id, payload)


@router.delete(
    "/ratings/{rating_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_rating(
    rating_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    service.delete(session, current_user, rating_id)
