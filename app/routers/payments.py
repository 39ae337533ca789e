# app/routers/payments.py
from fastapi import APIRouter, Body, Depends, Query
from sqlmodel import Session

from app.core.auth import require_admin, require_student
from app.core.payment_gateway import PaymentGateway, get_payment_gateway
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.enrollment_repo import EnrollmentRepository
from app.repositories.order_repo import OrderRepository
from app.schemas.payment import (
    ApprovalResponse,
    CreatePaymentRequest,
    PaymentResultResponse,
    ReconcileResponse,
)
from app.services.payment_service import PaymentService

router = APIRouter(prefix="/payments", tags=["Payments"])

order_repo = OrderRepository()
cart_repo = CartRepository()
enrollment_repo = EnrollmentRepository()
service = PaymentService(order_repo, cart_repo, enrollment_repo)


@router.post("/create-paypal", response_model=ApprovalResponse)
def create_paypal_payment(
    payload: CreatePaymentRequest | None = Body(default=None),
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Create a PayPal payment for an order and return the approval URL
    the buyer must visit.

    Body (optional): {"order_id": int}; defaults to the latest order.
    """
    order_id = payload.order_id if payload else None
    return service.initiate_payment(session, current_user.id, gateway, order_id)


@router.get("/paypal-success", response_model=PaymentResultResponse)
def paypal_success(
    payment_id: str | None = Query(default=None, alias="paymentId"),
    payer_id: str | None = Query(default=None, alias="PayerID"),
    session: Session = Depends(get_session),
    current_user: User = Depends(require_student),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    PayPal return URL.

    Captures the payment, enrolls the buyer in every purchased course,
    marks the order completed and empties the cart.
    """
    return service.confirm_payment(
        session, current_user.id, payment_id, payer_id, gateway
    )


@router.get(
    "/paypal-cancel",
    response_model=PaymentResultResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_student)],
)
def paypal_cancel():
    """PayPal cancel URL. Nothing changes; the order stays pending."""
    return service.cancel_payment()


# -------- Admin endpoints --------


@router.post(
    "/reconcile",
    response_model=ReconcileResponse,
    dependencies=[Depends(require_admin)],
)
def reconcile_payments(
    session: Session = Depends(get_session),
    limit: int = 100,
):
    """
    Finalize orders whose payment was captured but which are still pending.
    """
    return service.reconcile(session, limit=limit)
