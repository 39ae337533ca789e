# app/repositories/enrollment_repo.py
from sqlmodel import Session, select

from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.user import User


class EnrollmentRepository:
    """
    Enrollment writer and learning queries.

    add_missing() does not commit; it is part of order finalization.
    """

    def is_enrolled(self, session: Session, student_id: int, course_id: int) -> bool:
        stmt = select(Enrollment.id).where(
            Enrollment.student_id == student_id,
            Enrollment.course_id == course_id,
        )
        return session.exec(stmt).first() is not None

    def enrolled_course_ids(self, session: Session, student_id: int) -> set[int]:
        stmt = select(Enrollment.course_id).where(Enrollment.student_id == student_id)
        return set(session.exec(stmt).all())

    def add_missing(
        self,
        session: Session,
        student_id: int,
        course_ids: list[int],
    ) -> list[Enrollment]:
        """
        Create an Enrollment for each course id the student does not hold yet.
        Duplicates in `course_ids` are collapsed.
        """
        existing = self.enrolled_course_ids(session, student_id)
        created: list[Enrollment] = []
        for course_id in dict.fromkeys(course_ids):
            if course_id in existing:
                continue
            created.append(Enrollment(student_id=student_id, course_id=course_id))
        session.add_all(created)
        session.flush()
        return created

    def list_courses_for_student(
        self, session: Session, student_id: int
    ) -> list[tuple[Enrollment, Course, User]]:
        stmt = (
            select(Enrollment, Course, User)
            .join(Course, Course.id == Enrollment.course_id)
            .join(User, User.id == Course.teacher_id)
            .where(Enrollment.student_id == student_id)
            .order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc())
        )
        return list(session.exec(stmt).all())
