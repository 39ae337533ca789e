# app/services/pricing_service.py
from decimal import Decimal
from typing import Iterable

from sqlmodel import Session

from app.repositories.course_repo import CourseRepository


class PricingResolver:
    """
    Resolves the authoritative unit price of courses at checkout time.

    One point lookup per distinct course id, no caching: a price change
    is visible to the very next checkout.
    """

    def __init__(self, course_repo: CourseRepository):
        self.course_repo = course_repo

    def price(self, session: Session, course_id: int) -> Decimal:
        """Raises NotFoundError when the course does not exist."""
        return self.course_repo.get_price(session, course_id)

    def resolve(self, session: Session, course_ids: Iterable[int]) -> dict[int, Decimal]:
        """
        Price map for every distinct id; fails on the first missing course.
        """
        prices: dict[int, Decimal] = {}
        for course_id in course_ids:
            if course_id not in prices:
                prices[course_id] = self.price(session, course_id)
        return prices
