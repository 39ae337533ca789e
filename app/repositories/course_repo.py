# app/repositories/course_repo.py
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, or_
from sqlmodel import Session, select

from app.core.errors import NotFoundError
from app.models.course import Category, Course, Section, Video


class CourseRepository:
    """
    Data access layer for the catalog: Category, Course, Section, Video.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    # ----- Pricing -----

    def get_price(self, session: Session, course_id: int) -> Decimal:
        """
        Current unit price of a course.

        Raises:
            NotFoundError: course row absent.
        """
        stmt = select(Course.price).where(Course.id == course_id)
        price = session.exec(stmt).first()
        if price is None:
            raise NotFoundError("course not found")
        return Decimal(price)

    # ----- Courses -----

    def get_by_id(self, session: Session, course_id: int) -> Course | None:
        return session.get(Course, course_id)

    def get_by_slug(self, session: Session, slug: str) -> Course | None:
        stmt = select(Course).where(Course.slug == slug)
        return session.exec(stmt).first()

    def list_courses(self, session: Session, skip: int = 0, limit: int = 20) -> list[Course]:
        stmt = (
            select(Course)
            .order_by(Course.created_at.desc(), Course.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def count(self, session: Session) -> int:
        value = session.exec(select(func.count()).select_from(Course)).one()
        return int(value or 0)

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
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Course], int]:
        """
        Filtered course listing.

        Returns:
            (page of courses, total rows matching the filters)
        """
        stmt = select(Course)
        if q:
            pattern = f"%{q}%"
            stmt = stmt.where(
                or_(Course.name.ilike(pattern), Course.description.ilike(pattern))
            )
        if category_id is not None:
            stmt = stmt.where(Course.category_id == category_id)
        if teacher_id is not None:
            stmt = stmt.where(Course.teacher_id == teacher_id)
        if price_min is not None:
            stmt = stmt.where(Course.price >= price_min)
        if price_max is not None:
            stmt = stmt.where(Course.price <= price_max)
        if created_after is not None:
            stmt = stmt.where(Course.created_at >= created_after)
        if created_before is not None:
            stmt = stmt.where(Course.created_at <= created_before)

        total = session.exec(select(func.count()).select_from(stmt.subquery())).one()

        page_stmt = (
            stmt.order_by(Course.created_at.desc(), Course.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(page_stmt).all()), int(total or 0)

    def create(self, session: Session, course: Course) -> Course:
        session.add(course)
        session.commit()
        session.refresh(course)
        return course

    def update(self, session: Session, course: Course) -> Course:
        session.add(course)
        session.commit()
        session.refresh(course)
        return course

    def delete(self, session: Session, course: Course) -> None:
        for section in self.list_sections(session, course.id):
            for video in self.list_videos(session, section.id):
                session.delete(video)
            session.delete(section)
        session.delete(course)
        session.commit()

    # ----- Categories -----

    def list_categories(self, session: Session) -> list[Category]:
        return list(session.exec(select(Category).order_by(Category.name)).all())

    def get_category(self, session: Session, category_id: int) -> Category | None:
        return session.get(Category, category_id)

    def get_category_by_slug(self, session: Session, slug: str) -> Category | None:
        return session.exec(select(Category).where(Category.slug == slug)).first()

    def create_category(self, session: Session, category: Category) -> Category:
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    def update_category(self, session: Session, category: Category) -> Category:
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    def delete_category(self, session: Session, category: Category) -> int:
        """
        Delete a category; its courses stay, uncategorized.

        Returns:
            number of courses detached
        """
        stmt = select(Course).where(Course.category_id == category.id)
        courses = session.exec(stmt).all()
        for course in courses:
            course.category_id = None
            session.add(course)
        session.delete(category)
        session.commit()
        return len(courses)

    # ----- Sections & videos -----

    def get_section(self, session: Session, section_id: int) -> Section | None:
        return session.get(Section, section_id)

    def list_sections(self, session: Session, course_id: int) -> list[Section]:
        stmt = (
            select(Section)
            .where(Section.course_id == course_id)
            .order_by(Section.order, Section.id)
        )
        return list(session.exec(stmt).all())

    def list_videos(self, session: Session, section_id: int) -> list[Video]:
        stmt = (
            select(Video)
            .where(Video.section_id == section_id)
            .order_by(Video.order, Video.id)
        )
        return list(session.exec(stmt).all())

    def create_section(self, session: Session, section: Section) -> Section:
        session.add(section)
        session.commit()
        session.refresh(section)
        return section

    def create_video(self, session: Session, video: Video) -> Video:
        session.add(video)
        session.commit()
        session.refresh(video)
        return video
