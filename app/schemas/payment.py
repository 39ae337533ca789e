# app/schemas/payment.py
from pydantic import ConfigDict
from sqlmodel import SQLModel, Field


class CreatePaymentRequest(SQLModel):
    """
    Optional body for /payments/create-paypal.

    Without order_id the caller's most recent order is used.
    """

    model_config = ConfigDict(extra="forbid")

    order_id: int | None = Field(default=None, gt=0)


class ApprovalResponse(SQLModel):
    approval_url: str
    payment_id: str
    order_id: int


class PaymentResultResponse(SQLModel):
    message: str
    status: str
    order_id: int | None = None


class ReconcileResponse(SQLModel):
    finalized: list[int]
    failed: list[int]
