# app/routers/orders.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import require_student
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.course_repo import CourseRepository
from app.repositories.order_repo import OrderRepository
from app.schemas.order import (
    CheckoutRequest,
    CheckoutResponse,
    OrderRead,
    OrderWithItemsRead,
)
from app.services.checkout_service import CheckoutService
from app.services.order_service import OrderService
from app.services.pricing_service import PricingResolver

router = APIRouter(tags=["Orders"])

order_repo = OrderRepository()
cart_repo = CartRepository()
course_repo = CourseRepository()
checkout_service = CheckoutService(order_repo, PricingResolver(course_repo))
service = OrderService(order_repo, cart_repo, checkout_service)


@router.post(
    "/checkout",
    response_model=CheckoutResponse,
)
def checkout(
    payload: CheckoutRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
):
    """
    Create a pending order from the current user's cart.

    The cart is kept until the payment is confirmed.

    Auth:
      - student or admin.
    """
    return service.checkout(session, current_user.id, payload)


@router.get(
    "/orders/me",
    response_model=list[OrderRead],
)
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
    skip: int = 0,
    limit: int = 50,
):
    """
    List the authenticated user's orders (without items), newest first.
    """
    return service.list_user_orders(session, current_user.id, skip, limit)


@router.get(
    "/orders/me/{order_id}",
    response_model=OrderWithItemsRead,
)
def get_my_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
):
    """
    Get a single order (with items) belonging to the current user.
    """
    return service.get_user_order(session, current_user.id, order_id)
