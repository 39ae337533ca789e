# app/services/course_service.py
import re
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import Session

from app.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models.course import Category, Course, Section, Video
from app.models.user import User
from app.repositories.course_repo import CourseRepository
from app.repositories.rating_repo import RatingRepository
from app.repositories.user_repo import UserRepository
from app.schemas.course import (
    CategoryCreate,
    CategoryUpdate,
    CourseCreate,
    CourseDetailRead,
    CoursePage,
    CourseRead,
    CourseUpdate,
    InstructorRead,
    SectionCreate,
    SectionWithVideosRead,
    VideoCreate,
    VideoRead,
)

MAX_PAGE_SIZE = 100


def slugify(raw: str, fallback: str = "course") -> str:
    """
    Basic slugification:
      - lowercase
      - non-alphanumeric -> '-'
      - collapse multiple '-'
      - strip leading/trailing '-'
    """
    value = raw.strip().lower()
    value = re.sub(r"[^a-z0-9]+", "-", value)
    value = re.sub(r"-+", "-", value)
    value = value.strip("-")
    return value or fallback


def page_to_skip(page: int, limit: int) -> tuple[int, int]:
    """Clamp page/limit and return (skip, limit)."""
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)
    return (page - 1) * limit, limit


class CourseService:
    """
    Business logic for the catalog.

    Responsibilities:
      - slug generation & uniqueness
      - ownership: a teacher edits only their own courses (admins edit all)
      - curriculum assembly (sections -> videos)
      - search filters and pagination
    """

    def __init__(
        self,
        repo: CourseRepository,
        rating_repo: RatingRepository,
        user_repo: UserRepository,
    ):
        self.repo = repo
        self.rating_repo = rating_repo
        self.user_repo = user_repo

    # ----- Helpers -----

    def _ensure_unique_slug(self, session: Session, base_slug: str) -> str:
        """
        Ensure slug is unique by appending -2, -3, ... if needed.
        """
        slug = base_slug
        i = 2
        while self.repo.get_by_slug(session, slug) is not None:
            slug = f"{base_slug}-{i}"
            i += 1
        return slug

    def _get_course(self, session: Session, course_id: int) -> Course:
        course = self.repo.get_by_id(session, course_id)
        if not course:
            raise NotFoundError("course not found")
        return course

    def _get_owned_course(self, session: Session, user: User, course_id: int) -> Course:
        course = self._get_course(session, course_id)
        if user.role != "admin" and course.teacher_id != user.id:
            raise ForbiddenError("you can only manage your own courses")
        return course

    def _check_category(self, session: Session, category_id: int | None) -> None:
        if category_id is not None and not self.repo.get_category(session, category_id):
            raise NotFoundError("category not found")

    def build_curriculum(
        self, session: Session, course_id: int
    ) -> list[SectionWithVideosRead]:
        sections: list[SectionWithVideosRead] = []
        for section in self.repo.list_sections(session, course_id):
            videos = [
                VideoRead.model_validate(v, from_attributes=True)
                for v in self.repo.list_videos(session, section.id)
            ]
            sections.append(
                SectionWithVideosRead(
                    id=section.id,
                    course_id=section.course_id,
                    title=section.title,
                    order=section.order,
                    videos=videos,
                )
            )
        return sections

    # ----- Categories -----

    def list_categories(self, session: Session) -> list[Category]:
        return self.repo.list_categories(session)

    def create_category(
        self, session: Session, teacher: User, payload: CategoryCreate
    ) -> Category:
        slug = slugify(payload.name, fallback="category")
        if self.repo.get_category_by_slug(session, slug):
            raise ConflictError("category already exists")
        return self.repo.create_category(
            session,
            Category(
                teacher_id=teacher.id,
                name=payload.name,
                slug=slug,
                description=payload.description,
            ),
        )

    def _get_owned_category(self, session: Session, user: User, category_id: int) -> Category:
        category = self.repo.get_category(session, category_id)
        if not category:
            raise NotFoundError("category not found")
        if user.role != "admin" and category.teacher_id != user.id:
            raise ForbiddenError("you can only manage your own categories")
        return category

    def update_category(
        self,
        session: Session,
        user: User,
        category_id: int,
        payload: CategoryUpdate,
    ) -> Category:
        """
        Rename and/or re-describe a category (creator or admin).

        A new name re-derives the slug; clashing with another category
        is a conflict.
        """
        category = self._get_owned_category(session, user, category_id)
        changes = payload.model_dump(exclude_unset=True)

        if changes.get("name"):
            slug = slugify(changes["name"], fallback="category")
            existing = self.repo.get_category_by_slug(session, slug)
            if existing is not None and existing.id != category.id:
                raise ConflictError("category already exists")
            category.name = changes["name"]
            category.slug = slug
        if "description" in changes:
            category.description = changes["description"]

        return self.repo.update_category(session, category)

    def delete_category(self, session: Session, user: User, category_id: int) -> None:
        category = self._get_owned_category(session, user, category_id)
        self.repo.delete_category(session, category)

    # ----- Courses -----

    def list_courses(self, session: Session, page: int = 1, limit: int = 20) -> CoursePage:
        skip, limit = page_to_skip(page, limit)
        courses = self.repo.list_courses(session, skip=skip, limit=limit)
        return CoursePage(
            items=[CourseRead.model_validate(c, from_attributes=True) for c in courses],
            total=self.repo.count(session),
            page=max(page, 1),
            limit=limit,
        )

    def list_teacher_courses(
        self, session: Session, teacher: User, page: int = 1, limit: int = 20
    ) -> CoursePage:
        """Courses owned by `teacher`, newest first."""
        return self.search(session, teacher_id=teacher.id, page=page, limit=limit)

    def get_course_detail(self, session: Session, slug: str) -> CourseDetailRead:
        """
        Public course page: course fields, instructor, sections with videos
        and rating summary.
        """
        course = self.repo.get_by_slug(session, slug)
        if not course:
            raise NotFoundError("course not found")

        teacher = self.user_repo.get_by_id(session, course.teacher_id)
        average, count = self.rating_repo.summary(session, course.id)

        return CourseDetailRead(
            **CourseRead.model_validate(course, from_attributes=True).model_dump(),
            instructor=(
                InstructorRead.model_validate(teacher, from_attributes=True)
                if teacher
                else None
            ),
            sections=self.build_curriculum(session, course.id),
            average_rating=round(average, 2),
            rating_count=count,
        )

    def create_course(self, session: Session, teacher: User, payload: CourseCreate) -> Course:
        """
        Create a new course owned by `teacher`, with a unique slug.
        """
        self._check_category(session, payload.category_id)
        slug = self._ensure_unique_slug(session, slugify(payload.slug or payload.name))

        course = Course(
            teacher_id=teacher.id,
            category_id=payload.category_id,
            name=payload.name,
            slug=slug,
            description=payload.description,
            for_who=payload.for_who,
            reason=payload.reason,
            intro_video=payload.intro_video,
            image=payload.image,
            price=payload.price,
        )
        return self.repo.create(session, course)

    def update_course(
        self,
        session: Session,
        user: User,
        course_id: int,
        payload: CourseUpdate,
    ) -> Course:
        """
        Partial update of a course.

        - If slug is changed, enforce uniqueness.
        """
        course = self._get_owned_course(session, user, course_id)
        changes = payload.model_dump(exclude_unset=True)

        if "category_id" in changes:
            self._check_category(session, changes["category_id"])

        if changes.get("slug"):
            new_base_slug = slugify(changes.pop("slug"))
            if new_base_slug != course.slug:
                course.slug = self._ensure_unique_slug(session, new_base_slug)
        changes.pop("slug", None)

        for key, value in changes.items():
            if value is None and key in ("name", "price"):
                continue
            setattr(course, key, value)

        course.modified_at = datetime.now(timezone.utc)
        return self.repo.update(session, course)

    def delete_course(self, session: Session, user: User, course_id: int) -> None:
        course = self._get_owned_course(session, user, course_id)
        self.repo.delete(session, course)

    # ----- Curriculum -----

    def add_section(
        self,
        session: Session,
        user: User,
        course_id: int,
        payload: SectionCreate,
    ) -> Section:
        course = self._get_owned_course(session, user, course_id)
        return self.repo.create_section(
            session,
            Section(course_id=course.id, title=payload.title, order=payload.order),
        )

    def add_video(
        self,
        session: Session,
        user: User,
        section_id: int,
        payload: VideoCreate,
    ) -> Video:
        section = self.repo.get_section(session, section_id)
        if not section:
            raise NotFoundError("section not found")
        self._get_owned_course(session, user, section.course_id)
        return self.repo.create_video(
            session,
            Video(
                section_id=section.id,
                title=payload.title,
                video_file=payload.video_file,
                order=payload.order,
            ),
        )

    # ----- Search -----

    def search(
        self,
        session: Session,
        *,
        q: str | None = None,
        category_id: int | None = None,
        teacher_id: int | None = None,
        price_min: Decimal | None = None,
        price_max: Decimal | None = None,
        created_after: datetime | None = None,
        created_before: datetime | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> CoursePage:
        if price_min is not None and price_max is not None and price_min > price_max:
            raise ValidationError("price_min cannot be greater than price_max")
        if created_after and created_before and created_after > created_before:
            raise ValidationError("created_after cannot be later than created_before")

        skip, limit = page_to_skip(page, limit)
        courses, total = self.repo.search(
            session,
            q=q.strip() if q else None,
            category_id=category_id,
            teacher_id=teacher_id,
            price_min=price_min,
            price_max=price_max,
            created_after=created_after,
            created_before=created_before,
            skip=skip,
            limit=limit,
        )
        return CoursePage(
            items=[CourseRead.model_validate(c, from_attributes=True) for c in courses],
            total=total,
            page=max(page, 1),
            limit=limit,
        )
