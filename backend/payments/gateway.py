from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import uuid4

import requests
from django.conf import settings

from core.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)

SANDBOX_SNAP_URL = "https://app.sandbox.midtrans.com/snap/v1/transactions"
PRODUCTION_SNAP_URL = "https://app.midtrans.com/snap/v1/transactions"

_PASSTHROUGH_STATUSES = {"settlement", "pending", "deny", "cancel", "expire", "refund"}


@dataclass
class SnapTransaction:
    """Token and hosted payment page returned by Snap (or the stub)."""

    token: str
    redirect_url: str


def snap_url() -> str:
    return PRODUCTION_SNAP_URL if settings.MIDTRANS_IS_PRODUCTION else SANDBOX_SNAP_URL


def _get_server_key() -> Optional[str]:
    key = getattr(settings, "MIDTRANS_SERVER_KEY", "")
    return key or None


def _should_use_stub() -> bool:
    if getattr(settings, "MIDTRANS_USE_STUB", False):
        return True
    return _get_server_key() is None


def format_gross_amount(amount):
    """Snap wants a JSON number; IDR amounts are whole so send them as ints."""
    amount = Decimal(str(amount))
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def build_payment_preview_url(*, order_id: str, amount, token: str) -> str:
    return (
        f"{settings.FRONTEND_URL.rstrip('/')}/payments/preview?"
        f"order={order_id}&amount={format_gross_amount(amount)}&token={token}"
    )


def _stub_transaction(*, order_id: str, gross_amount) -> SnapTransaction:
    token = f"snap_test_{uuid4().hex}"
    return SnapTransaction(
        token=token,
        redirect_url=build_payment_preview_url(order_id=order_id, amount=gross_amount, token=token),
    )


def create_transaction(*, order_id: str, gross_amount, customer: dict, items: list[dict]) -> SnapTransaction:
    """
    Create a Snap transaction (or stub equivalent) for ``order_id``.

    ``items`` are ``{"id", "name", "price", "quantity"}`` dicts whose prices
    add up to ``gross_amount``. Network, HTTP and response-shape failures are
    logged and raised as ``PaymentGatewayError``.
    """

    if _should_use_stub():
        return _stub_transaction(order_id=order_id, gross_amount=gross_amount)

    payload = {
        "transaction_details": {
            "order_id": order_id,
            "gross_amount": format_gross_amount(gross_amount),
        },
        "customer_details": customer,
        "item_details": [
            {**item, "price": format_gross_amount(item["price"]), "name": str(item["name"])[:50]}
            for item in items
        ],
        "callbacks": {
            "finish": f"{settings.FRONTEND_URL.rstrip('/')}/checkout/finish?order={order_id}",
        },
    }

    try:
        response = requests.post(
            snap_url(),
            json=payload,
            auth=(_get_server_key(), ""),
            headers={"Accept": "application/json"},
            timeout=settings.MIDTRANS_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        logger.exception("Midtrans request failed for order %s: %s", order_id, exc)
        raise PaymentGatewayError() from exc

    try:
        data = response.json()
    except ValueError:
        data = {}

    if response.status_code >= 400:
        messages = ", ".join(data.get("error_messages") or []) or "Unknown error"
        logger.error("Midtrans API error for order %s: %s - %s", order_id, response.status_code, messages)
        raise PaymentGatewayError()

    token = data.get("token")
    redirect_url = data.get("redirect_url")
    if not token or not redirect_url:
        logger.error("Midtrans response for order %s is missing token or redirect_url: %s", order_id, data)
        raise PaymentGatewayError()
    return SnapTransaction(token=token, redirect_url=redirect_url)


def compute_signature(order_id: str, status_code: str, gross_amount: str) -> str:
    raw = f"{order_id}{status_code}{gross_amount}{settings.MIDTRANS_SERVER_KEY}"
    return hashlib.sha512(raw.encode("utf-8")).hexdigest()


def verify_signature(order_id: str, status_code: str, gross_amount: str, signature_key: str) -> bool:
    expected = compute_signature(order_id, status_code, gross_amount)
    return hmac.compare_digest(expected, signature_key or "")


def map_transaction_status(transaction_status: str, fraud_status: Optional[str] = None) -> str:
    if transaction_status == "capture":
        return "capture" if fraud_status == "accept" else "deny"
    if transaction_status in _PASSTHROUGH_STATUSES:
        return transaction_status
    return "pending"
