# app/services/checkout_service.py
import logging
from decimal import Decimal, ROUND_HALF_UP

from sqlmodel import Session

from app.core.security import generate_order_number
from app.models.cart import CartItem
from app.models.order import Order, OrderItem
from app.repositories.order_repo import OrderRepository
from app.schemas.order import CheckoutRequest
from app.services.pricing_service import PricingResolver

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class CheckoutService:
    """
    Turns a non-empty cart snapshot into a pending Order.

    Responsibilities:
      - resolve current prices (before any write)
      - compute the total as the sum of one price per cart line
      - write Order + OrderItems atomically

    The cart itself is left untouched; it is emptied when the payment
    is confirmed.
    """

    def __init__(self, order_repo: OrderRepository, pricing: PricingResolver):
        self.order_repo = order_repo
        self.pricing = pricing

    def create_order(
        self,
        session: Session,
        user_id: int,
        cart_items: list[CartItem],
        billing: CheckoutRequest,
    ) -> tuple[Order, Decimal]:
        """
        Steps:
          1. Resolve the unit price of every distinct course in the cart.
             Any miss aborts before anything is written.
          2. total = sum(price of each cart line), rounded to cents.
          3. Insert the Order (status 'pending', time-derived order number).
          4. Insert one OrderItem per cart line, carrying its price.
          5. Commit. Any failure in 3-5 rolls everything back.
        """
        # 1) Prices
        prices = self.pricing.resolve(session, (ci.course_id for ci in cart_items))

        # 2) Total
        total = sum((prices[ci.course_id] for ci in cart_items), Decimal("0"))
        total = total.quantize(CENT, rounding=ROUND_HALF_UP)

        try:
            # 3) Order
            order = self.order_repo.create_order(
                session,
                Order(
                    user_id=user_id,
                    first_name=billing.first_name,
                    last_name=billing.last_name,
                    email=billing.email,
                    country=billing.country,
                    total=total,
                    order_number=generate_order_number(),
                    status="pending",
                ),
            )

            # 4) Items
            self.order_repo.create_items(
                session,
                [
                    OrderItem(
                        order_id=order.id,
                        course_id=ci.course_id,
                        price=prices[ci.course_id],
                    )
                    for ci in cart_items
                ],
            )

            # 5) Commit
            session.commit()
        except Exception:
            session.rollback()
            logger.exception("Checkout transaction failed for user %s", user_id)
            raise

        session.refresh(order)
        logger.info(
            "Order %s (%s) created for user %s, total %s",
            order.id,
            order.order_number,
            user_id,
            total,
        )
        return order, total
