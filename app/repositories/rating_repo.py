# app/repositories/rating_repo.py
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.errors import ConflictError
from app.models.rating import Rating
from app.models.user import User


class RatingRepository:

    def get_by_id(self, session: Session, rating_id: int) -> Rating | None:
        return session.get(Rating, rating_id)

    def get_with_student(
        self, session: Session, rating_id: int
    ) -> tuple[Rating, User] | None:
        stmt = (
            select(Rating, User)
            .join(User, User.id == Rating.student_id)
            .where(Rating.id == rating_id)
        )
        return session.exec(stmt).first()

    def list_for_course(
        self,
        session: Session,
        course_id: int,
        skip: int = 0,
        limit: int = 20,
    ) -> list[tuple[Rating, User]]:
        stmt = (
            select(Rating, User)
            .join(User, User.id == Rating.student_id)
            .where(Rating.course_id == course_id)
            .order_by(Rating.created_at.desc(), Rating.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def list_for_student(self, session: Session, student_id: int) -> list[Rating]:
        stmt = (
            select(Rating)
            .where(Rating.student_id == student_id)
            .order_by(Rating.created_at.desc(), Rating.id.desc())
        )
        return list(session.exec(stmt).all())

    def summary(self, session: Session, course_id: int) -> tuple[float, int]:
        """(average rating, number of ratings); (0.0, 0) when unrated."""
        stmt = select(
            func.coalesce(func.avg(Rating.rating), 0.0),
            func.count(Rating.id),
        ).where(Rating.course_id == course_id)
        avg, count = session.exec(stmt).one()
        return float(avg or 0.0), int(count or 0)

    def create(self, session: Session, rating: Rating) -> Rating:
        session.add(rating)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise ConflictError("you have already rated this course")
        session.refresh(rating)
        return rating

    def update(self, session: Session, rating: Rating) -> Rating:
        session.add(rating)
        session.commit()
        session.refresh(rating)
        return rating

    def delete(self, session: Session, rating: Rating) -> None:
        session.delete(rating)
        session.commit()
