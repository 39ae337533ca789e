# app/services/rating_service.py
from sqlmodel import Session

from app.core.errors import ForbiddenError, NotFoundError
from app.models.rating import Rating
from app.models.user import User
from app.repositories.course_repo import CourseRepository
from app.repositories.enrollment_repo import EnrollmentRepository
from app.repositories.rating_repo import RatingRepository
from app.schemas.rating import RatingCreate, RatingList, RatingRead, RatingUpdate
from app.services.course_service import page_to_skip


class RatingService:
    """
    Course reviews. Only enrolled students may rate, once per course.
    """

    def __init__(
        self,
        repo: RatingRepository,
        course_repo: CourseRepository,
        enrollment_repo: EnrollmentRepository,
    ):
        self.repo = repo
        self.course_repo = course_repo
        self.enrollment_repo = enrollment_repo

    def _ensure_course(self, session: Session, course_id: int) -> None:
        if not self.course_repo.get_by_id(session, course_id):
            raise NotFoundError("course not found")

    @staticmethod
    def _to_read(rating: Rating, student: User) -> RatingRead:
        return RatingRead(
            id=rating.id,
            course_id=rating.course_id,
            student_id=rating.student_id,
            student_name=f"{student.first_name} {student.last_name}",
            rating=rating.rating,
            review=rating.review,
            created_at=rating.created_at,
        )

    def list_for_course(
        self,
        session: Session,
        course_id: int,
        page: int = 1,
        limit: int = 20,
    ) -> RatingList:
        self._ensure_course(session, course_id)
        skip, limit = page_to_skip(page, limit)
        rows = self.repo.list_for_course(session, course_id, skip=skip, limit=limit)
        average, count = self.repo.summary(session, course_id)
        return RatingList(
            items=[self._to_read(r, u) for r, u in rows],
            average_rating=round(average, 2),
            rating_count=count,
        )

    def rate(
        self,
        session: Session,
        student: User,
        course_id: int,
        payload: RatingCreate,
    ) -> RatingRead:
        """
        Raises:
            NotFoundError: course missing.
            ForbiddenError: caller not enrolled.
            ConflictError: caller already rated this course.
        """
        self._ensure_course(session, course_id)
        if not self.enrollment_repo.is_enrolled(session, student.id, course_id):
            raise ForbiddenError("you must be enrolled in this course to rate it")

        rating = self.repo.create(
            session,
            Rating(
                student_id=student.id,
                course_id=course_id,
                rating=payload.rating,
                review=payload.review,
            ),
        )
        return self._to_read(rating, student)

    def _get_visible(self, session: Session, user: User, rating_id: int) -> tuple[Rating, User]:
        # Someone else's rating is reported as missing.
        row = self.repo.get_with_student(session, rating_id)
        if not row or (user.role != "admin" and row[0].student_id != user.id):
            raise NotFoundError("rating not found")
        return row

    def get(self, session: Session, user: User, rating_id: int) -> RatingRead:
        rating, student = self._get_visible(session, user, rating_id)
        return self._to_read(rating, student)

    def list_mine(self, session: Session, student: User) -> list[RatingRead]:
        return [self._to_read(r, student) for r in self.repo.list_for_student(session, student.id)]

    def update(
        self,
        session: Session,
        user: User,
        rating_id: int,
        payload: RatingUpdate,
    ) -> RatingRead:
        """
        Change score and/or review of the caller's own rating.

        Raises:
            NotFoundError: rating missing.
            ForbiddenError: rating belongs to another student.
        """
        row = self.repo.get_with_student(session, rating_id)
        if not row:
            raise NotFoundError("rating not found")
        rating, student = row
        if rating.student_id != user.id:
            raise ForbiddenError("you can only edit your own rating")

        changes = payload.model_dump(exclude_unset=True)
        if changes.get("rating") is not None:
            rating.rating = changes["rating"]
        if "review" in changes:
            rating.review = changes["review"]

        rating = self.repo.update(session, rating)
        return self._to_read(rating, student)

    def delete(self, session: Session, user: User, rating_id: int) -> None:
        rating = self.repo.get_by_id(session, rating_id)
        if not rating:
            raise NotFoundError("rating not found")
        if user.role != "admin" and rating.student_id != user.id:
            raise ForbiddenError("you can only delete your own rating")
        self.repo.delete(session, rating)
