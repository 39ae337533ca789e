# app/services/cart_service.py
from decimal import Decimal

from sqlmodel import Session

from app.core.errors import ConflictError, NotFoundError
from app.models.cart import CartItem
from app.repositories.cart_repo import CartRepository
from app.repositories.course_repo import CourseRepository
from app.repositories.enrollment_repo import EnrollmentRepository
from app.schemas.cart import CartItemCreate, CartItemRead, CartSummary
from app.schemas.user import MessageResponse


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - validate course existence
      - refuse courses the user already owns
      - one row per (user, course); duplicates surface as 409
      - compute totals from current course prices
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        course_repo: CourseRepository,
        enrollment_repo: EnrollmentRepository,
    ):
        self.cart_repo = cart_repo
        self.course_repo = course_repo
        self.enrollment_repo = enrollment_repo

    def get_cart_summary(self, session: Session, user_id: int) -> CartSummary:
        """
        Return full cart summary:
          - list of CartItemRead (joined to course name / slug / price)
          - total_items
          - total_price
        """
        rows = self.cart_repo.list_with_courses(session, user_id)

        items: list[CartItemRead] = []
        total_price = Decimal("0.00")
        for item, course in rows:
            total_price += course.price
            items.append(
                CartItemRead(
                    id=item.id,
                    course_id=course.id,
                    course_name=course.name,
                    course_slug=course.slug,
                    price=course.price,
                    created_at=item.created_at,
                )
            )

        return CartSummary(items=items, total_items=len(items), total_price=total_price)

    def add_to_cart(
        self,
        session: Session,
        user_id: int,
        payload: CartItemCreate,
    ) -> MessageResponse:
        """
        Add a course to the user's cart.

        Rules:
          - course must exist (404)
          - user must not be enrolled already (409)
          - course must not already be in the cart (409, enforced by the
            unique constraint so concurrent adds cannot both succeed)
        """
        course = self.course_repo.get_by_id(session, payload.course_id)
        if not course:
            raise NotFoundError("course not found")

        if self.enrollment_repo.is_enrolled(session, user_id, course.id):
            raise ConflictError("you are already enrolled in this course")

        self.cart_repo.create(session, CartItem(user_id=user_id, course_id=course.id))
        return MessageResponse(message="course added to cart successfully")

    def remove_item(self, session: Session, user_id: int, cart_id: int) -> MessageResponse:
        """
        Remove one cart row. Rows of other users are reported as missing.
        """
        item = self.cart_repo.get_by_id(session, cart_id)
        if not item or item.user_id != user_id:
            raise NotFoundError("cart item not found")

        self.cart_repo.delete(session, item)
        return MessageResponse(message="course removed from cart successfully")
