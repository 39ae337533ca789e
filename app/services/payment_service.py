# app/services/payment_service.py
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.errors import ConflictError, InternalError, NotFoundError, ValidationError
from app.core.payment_gateway import PaymentGateway
from app.models.order import Order
from app.repositories.cart_repo import CartRepository
from app.repositories.enrollment_repo import EnrollmentRepository
from app.repositories.order_repo import OrderRepository
from app.schemas.payment import (
    ApprovalResponse,
    PaymentResultResponse,
    ReconcileResponse,
)

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Payment succeeded and student enrolled successfully"
CANCEL_MESSAGE = "Payment canceled by the user"


class PaymentService:
    """
    Payment lifecycle of an order.

    Responsibilities:
      - initiate: ask the gateway for an approval URL, remember the
        provider payment id on the order
      - confirm: capture the approved payment, then finalize
      - finalize: enroll + mark completed + clear cart in one transaction
      - cancel: acknowledge only
      - reconcile: finalize orders whose capture was recorded but whose
        finalization never committed

    The gateway is passed per call so routers can inject it as a
    FastAPI dependency.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        enrollment_repo: EnrollmentRepository,
    ):
        self.order_repo = order_repo
        self.cart_repo = cart_repo
        self.enrollment_repo = enrollment_repo

    # -------- Initiation --------

    def initiate_payment(
        self,
        session: Session,
        user_id: int,
        gateway: PaymentGateway,
        order_id: int | None = None,
    ) -> ApprovalResponse:
        """
        Create a provider payment for one of the caller's orders.

        Target order:
          - `order_id` when given (must belong to the caller)
          - otherwise the caller's most recent order

        Raises:
            NotFoundError: no such order for this user.
            ConflictError: order already completed, or its payment was
                already captured and is waiting to be finalized.
            GatewayError: provider failure (order unchanged).
        """
        if order_id is not None:
            order = self.order_repo.get_by_id(session, order_id)
            if order is not None and order.user_id != user_id:
                order = None
        else:
            order = self.order_repo.get_latest_for_user(session, user_id)

        if order is None:
            raise NotFoundError("order not found")
        if order.status != "pending":
            raise ConflictError("order is already completed")
        if order.captured_at is not None:
            raise ConflictError("payment already captured")

        handle = gateway.initiate(order)

        order.payment_id = handle.payment_id
        order.modified_at = datetime.now(timezone.utc)
        self.order_repo.update_order(session, order)
        session.commit()

        return ApprovalResponse(
            approval_url=handle.approval_url,
            payment_id=handle.payment_id,
            order_id=order.id,
        )

    # -------- Confirmation --------

    def confirm_payment(
        self,
        session: Session,
        user_id: int,
        payment_id: str | None,
        payer_id: str | None,
        gateway: PaymentGateway,
    ) -> PaymentResultResponse:
        """
        Handle the provider's success redirect.

        Steps:
          1. Both ids are required; nothing is read or written otherwise.
          2. Find the order by (user, payment_id).
          3. Already completed => report success again, no second capture.
          4. Capture unless a previous attempt already did; persist the
             capture marker (payer_id, captured_at) on its own commit.
          5. Finalize: enrollments, status, cart in one transaction.
        """
        # 1) Parameters
        if not payment_id or not payer_id:
            raise ValidationError("payment ID or payer ID not provided")

        # 2) Order
        order = self._resolve_order(session, user_id, payment_id)

        # 3) Replay
        if order.status == "completed":
            logger.info("Order %s already completed; confirmation replayed", order.id)
            return self._success(order)

        # 4) Capture
        if order.captured_at is None:
            gateway.capture(payment_id, payer_id)

            order.payment_id = payment_id
            order.payer_id = payer_id
            order.captured_at = datetime.now(timezone.utc)
            order.modified_at = order.captured_at
            self.order_repo.update_order(session, order)
            session.commit()
            logger.info("Payment %s captured for order %s", payment_id, order.id)

        # 5) Finalize
        self.finalize_order(session, order)
        return self._success(order)

    def finalize_order(self, session: Session, order: Order) -> Order:
        """
        Enroll the buyer in every purchased course, mark the order completed
        and empty the buyer's cart. All or nothing; safe to run twice.

        Raises:
            InternalError: the transaction could not be committed.
        """
        order_id = order.id
        user_id = order.user_id
        try:
            items = self.order_repo.list_items_for_order(session, order_id)
            self.enrollment_repo.add_missing(
                session, user_id, [it.course_id for it in items]
            )

            order.status = "completed"
            order.modified_at = datetime.now(timezone.utc)
            self.order_repo.update_order(session, order)

            removed = self.cart_repo.clear_user_cart(session, user_id)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Finalizing order %s failed: %s", order_id, exc)
            raise InternalError("failed to finalize order")

        session.refresh(order)
        logger.info(
            "Order %s completed: %d course(s) enrolled, %d cart row(s) cleared",
            order_id,
            len(items),
            removed,
        )
        return order

    # -------- Cancellation --------

    def cancel_payment(self) -> PaymentResultResponse:
        """Acknowledge the provider's cancel redirect. No state is touched."""
        return PaymentResultResponse(message=CANCEL_MESSAGE, status="canceled")

    # -------- Admin --------

    def reconcile(self, session: Session, limit: int = 100) -> ReconcileResponse:
        """
        Finalize orders left 'pending' after a recorded capture.
        """
        finalized: list[int] = []
        failed: list[int] = []

        for order in self.order_repo.list_captured_pending(session, limit=limit):
            try:
                self.finalize_order(session, order)
            except InternalError:
                failed.append(order.id)
                continue
            finalized.append(order.id)

        if finalized or failed:
            logger.info(
                "Reconcile finished: %d finalized, %d failed", len(finalized), len(failed)
            )
        return ReconcileResponse(finalized=finalized, failed=failed)

    # ---- internal helpers ----

    def _resolve_order(self, session: Session, user_id: int, payment_id: str) -> Order:
        order = self.order_repo.get_by_payment_id(session, user_id, payment_id)
        if order is not None:
            return order

        # Orders paid without going through create-paypal carry no payment id.
        latest = self.order_repo.get_latest_for_user(session, user_id, status="pending")
        if latest is not None and latest.payment_id is None:
            logger.warning(
                "No order carries payment %s; using latest pending order %s of user %s",
                payment_id,
                latest.id,
                user_id,
            )
            return latest

        raise NotFoundError("order not found")

    @staticmethod
    def _success(order: Order) -> PaymentResultResponse:
        return PaymentResultResponse(
            message=SUCCESS_MESSAGE,
            status="completed",
            order_id=order.id,
        )
