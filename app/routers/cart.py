# app/routers/cart.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_student
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.course_repo import CourseRepository
from app.repositories.enrollment_repo import EnrollmentRepository
from app.schemas.cart import CartSummary, CartItemCreate
from app.schemas.user import MessageResponse
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
course_repo = CourseRepository()
enrollment_repo = EnrollmentRepository()
service = CartService(cart_repo, course_repo, enrollment_repo)


@router.get("", response_model=CartSummary)
def get_my_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
):
    """
    Get current user's cart with course names and current prices.

    Auth:
      - student or admin.
    """
    return service.get_cart_summary(session, current_user.id)


@router.post(
    "/add",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
):
    """
    Add a course to the current user's cart.

    409 if the course is already in the cart or already owned.
    """
    return service.add_to_cart(session, current_user.id, payload)


@router.delete("/{cart_id}", response_model=MessageResponse)
def remove_cart_item(
    cart_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
):
    """
    Remove one row from the cart.
    """
    return service.remove_item(session, current_user.id, cart_id)
