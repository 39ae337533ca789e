# app/services/order_service.py
from sqlmodel import Session

from app.core.errors import NotFoundError, ValidationError
from app.models.order import Order, OrderItem
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.schemas.order import (
    CheckoutRequest,
    CheckoutResponse,
    OrderItemRead,
    OrderWithItemsRead,
)
from app.services.checkout_service import CheckoutService


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Reject checkout of an empty cart
      - Delegate order creation to the CheckoutService
      - Read access to the caller's own orders
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        checkout: CheckoutService,
    ):
        self.order_repo = order_repo
        self.cart_repo = cart_repo
        self.checkout_service = checkout

    # -------- User-facing operations --------

    def checkout(
        self,
        session: Session,
        user_id: int,
        payload: CheckoutRequest,
    ) -> CheckoutResponse:
        """
        Create a pending order from the current cart.

        - 400 if the cart is empty (nothing is written).
        - 404 if a course in the cart no longer exists.
        """
        cart_items = self.cart_repo.list_for_user(session, user_id)
        if not cart_items:
            raise ValidationError(
                "cart is empty, add items to the cart before creating an order"
            )

        order, total = self.checkout_service.create_order(
            session, user_id, cart_items, payload
        )

        return CheckoutResponse(
            message="Order created successfully",
            order_id=order.id,
            order_number=order.order_number,
            total_price=total,
            status="pending",
        )

    def list_user_orders(
        self,
        session: Session,
        user_id: int,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        return self.order_repo.list_for_user(session, user_id, skip, limit)

    def get_user_order(
        self,
        session: Session,
        user_id: int,
        order_id: int,
    ) -> OrderWithItemsRead:
        """
        Get a single order for the user, including items.

        - 404 if order not found or does not belong to this user.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order or order.user_id != user_id:
            raise NotFoundError("order not found")

        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_with_items_dto(order, items)

    # -------- Helper DTO builder --------

    def _build_order_with_items_dto(
        self,
        order: Order,
        items: list[OrderItem],
    ) -> OrderWithItemsRead:
        return OrderWithItemsRead(
            id=order.id,
            user_id=order.user_id,
            order_number=order.order_number,
            first_name=order.first_name,
            last_name=order.last_name,
            email=order.email,
            country=order.country,
            total=order.total,
            status=order.status,
            payment_id=order.payment_id,
            created_at=order.created_at,
            items=[
                OrderItemRead(
                    id=it.id,
                    order_id=it.order_id,
                    course_id=it.course_id,
                    price=it.price,
                )
                for it in items
            ],
        )
