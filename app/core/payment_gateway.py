# app/core/payment_gateway.py
"""
Payment provider adapter.

`PaymentGateway` is the capability the payment service depends on:

  - initiate(order)               -> ApprovalHandle(payment_id, approval_url)
  - capture(payment_id, payer_id) -> CaptureOutcome

`PayPalGateway` implements it against the PayPal v1 payments REST API
(create payment + execute payment). It never touches the database and
never retries; every failure surfaces as GatewayError.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from functools import lru_cache
from typing import Any

import httpx

from app.core.config import get_settings
from app.core.errors import GatewayError
from app.models.order import Order

logger = logging.getLogger(__name__)

settings = get_settings()


@dataclass(frozen=True)
class ApprovalHandle:
    payment_id: str
    approval_url: str


@dataclass(frozen=True)
class CaptureOutcome:
    payment_id: str
    state: str
    raw: dict[str, Any] = field(default_factory=dict)


class PaymentGateway(ABC):
    @abstractmethod
    def initiate(self, order: Order) -> ApprovalHandle:
        """Create a provider payment for `order` and return where to send the buyer."""

    @abstractmethod
    def capture(self, payment_id: str, payer_id: str) -> CaptureOutcome:
        """Capture an approved payment."""


def format_amount(amount: Decimal) -> str:
    """Two-decimal string, e.g. Decimal('35.5') -> '35.50'."""
    return f"{Decimal(amount):.2f}"


class PayPalGateway(PaymentGateway):
    """
    PayPal v1 payments.

    Endpoints:
      - POST {base}/v1/payments/payment                      (create)
      - POST {base}/v1/payments/payment/{payment_id}/execute (capture)

    Both use HTTP basic auth with the REST client id / secret.
    """

    PAYMENT_PATH = "/v1/payments/payment"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        base_url: str,
        currency: str = "USD",
        return_url: str = "",
        cancel_url: str = "",
        timeout: float = 15.0,
        http_client: httpx.Client | None = None,
    ):
        self.currency = currency
        self.return_url = return_url
        self.cancel_url = cancel_url
        self._client = http_client or httpx.Client(
            base_url=base_url.rstrip("/"),
            auth=(client_id, client_secret),
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    # ---- internal helpers ----

    def _post(self, path: str, payload: dict[str, Any]) -> httpx.Response:
        try:
            return self._client.post(path, json=payload)
        except httpx.HTTPError as exc:
            logger.error("PayPal request to %s failed: %s", path, exc)
            raise GatewayError("payment provider unreachable")

    def _build_payment_payload(self, order: Order) -> dict[str, Any]:
        return {
            "intent": "sale",
            "payer": {"payment_method": "paypal"},
            "transactions": [
                {
                    "amount": {
                        "total": format_amount(order.total),
                        "currency": self.currency,
                    },
                    "description": "Order payment",
                    "invoice_number": order.order_number,
                    "custom": str(order.id),
                }
            ],
            "redirect_urls": {
                "return_url": self.return_url,
                "cancel_url": self.cancel_url,
            },
        }

    @staticmethod
    def _find_approval_url(body: dict[str, Any]) -> str | None:
        for link in body.get("links") or []:
            if link.get("rel") == "approval_url" and link.get("href"):
                return link["href"]
        return None

    # ---- PaymentGateway ----

    def initiate(self, order: Order) -> ApprovalHandle:
        response = self._post(self.PAYMENT_PATH, self._build_payment_payload(order))

        if response.status_code not in (200, 201):
            logger.error(
                "PayPal create payment for order %s returned %s: %s",
                order.id,
                response.status_code,
                response.text,
            )
            raise GatewayError("failed to create payment")

        try:
            body = response.json()
        except ValueError:
            raise GatewayError("invalid response from payment provider")

        approval_url = self._find_approval_url(body)
        if not approval_url:
            raise GatewayError("approval URL not found")

        payment_id = body.get("id")
        if not payment_id:
            raise GatewayError("payment ID missing from provider response")

        logger.info("PayPal payment %s created for order %s", payment_id, order.id)
        return ApprovalHandle(payment_id=payment_id, approval_url=approval_url)

    def capture(self, payment_id: str, payer_id: str) -> CaptureOutcome:
        response = self._post(
            f"{self.PAYMENT_PATH}/{payment_id}/execute",
            {"payer_id": payer_id},
        )

        if response.status_code not in (200, 201):
            logger.warning(
                "PayPal execute for %s returned %s: %s",
                payment_id,
                response.status_code,
                response.text,
            )
            raise GatewayError("payment execution failed")

        try:
            body = response.json()
        except ValueError:
            body = {}

        return CaptureOutcome(
            payment_id=body.get("id", payment_id),
            state=body.get("state", "approved"),
            raw=body,
        )


@lru_cache
def get_payment_gateway() -> PaymentGateway:
    """
    FastAPI dependency returning the process-wide gateway.

    Tests override it via app.dependency_overrides.
    """
    return PayPalGateway(
        client_id=settings.PAYPAL_CLIENT_ID,
        client_secret=settings.PAYPAL_CLIENT_SECRET,
        base_url=settings.PAYPAL_API_BASE,
        currency=settings.PAYPAL_CURRENCY,
        return_url=settings.PAYPAL_RETURN_URL,
        cancel_url=settings.PAYPAL_CANCEL_URL,
        timeout=settings.PAYPAL_TIMEOUT_SECONDS,
    )
