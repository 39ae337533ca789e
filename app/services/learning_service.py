# app/services/learning_service.py
from sqlmodel import Session

from app.core.errors import NotFoundError
from app.repositories.course_repo import CourseRepository
from app.repositories.enrollment_repo import EnrollmentRepository
from app.repositories.user_repo import UserRepository
from app.schemas.course import (
    InstructorRead,
    LearningCourseDetailRead,
    LearningCourseRead,
)
from app.services.course_service import CourseService


class LearningService:
    """
    What a student sees after purchase: their courses and the content
    of each one.
    """

    def __init__(
        self,
        enrollment_repo: EnrollmentRepository,
        course_repo: CourseRepository,
        user_repo: UserRepository,
        course_service: CourseService,
    ):
        self.enrollment_repo = enrollment_repo
        self.course_repo = course_repo
        self.user_repo = user_repo
        self.course_service = course_service

    def list_my_courses(self, session: Session, student_id: int) -> list[LearningCourseRead]:
        rows = self.enrollment_repo.list_courses_for_student(session, student_id)
        return [
            LearningCourseRead(
                course_id=course.id,
                name=course.name,
                slug=course.slug,
                image=course.image,
                instructor=InstructorRead.model_validate(teacher, from_attributes=True),
                enrolled_at=enrollment.enrolled_at,
            )
            for enrollment, course, teacher in rows
        ]

    def get_course_content(
        self, session: Session, student_id: int, slug: str
    ) -> LearningCourseDetailRead:
        """
        Full curriculum of an enrolled course.

        404 when the course does not exist or the student is not enrolled,
        so unpurchased content is indistinguishable from missing content.
        """
        course = self.course_repo.get_by_slug(session, slug)
        if not course or not self.enrollment_repo.is_enrolled(
            session, student_id, course.id
        ):
            raise NotFoundError("course not found or not enrolled")

        teacher = self.user_repo.get_by_id(session, course.teacher_id)
        return LearningCourseDetailRead(
            course_id=course.id,
            name=course.name,
            slug=course.slug,
            description=course.description,
            intro_video=course.intro_video,
            instructor=InstructorRead.model_validate(teacher, from_attributes=True),
            sections=self.course_service.build_curriculum(session, course.id),
        )
