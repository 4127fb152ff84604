import hashlib
import types
from decimal import Decimal

import pytest
import requests

from core.exceptions import PaymentGatewayError
from payments import gateway

ITEMS = [{"id": "1", "name": "Beach Villa", "price": Decimal("330.00"), "quantity": 1}]
CUSTOMER = {"first_name": "Greta", "email": "guest@example.com"}


def test_stub_returns_preview_url(settings):
    settings.MIDTRANS_USE_STUB = True
    settings.FRONTEND_URL = "https://app.test"

    snap = gateway.create_transaction(order_id="ORDER-1", gross_amount=Decimal("330.00"), customer=CUSTOMER, items=ITEMS)

    assert isinstance(snap, gateway.SnapTransaction)
    assert snap.token.startswith("snap_test_")
    assert snap.redirect_url.startswith("https://app.test/payments/preview?")
    assert "order=ORDER-1" in snap.redirect_url
    assert "amount=330" in snap.redirect_url


def test_stub_used_when_no_server_key(settings, monkeypatch):
    settings.MIDTRANS_USE_STUB = False
    settings.MIDTRANS_SERVER_KEY = ""

    def fail(*args, **kwargs):
        raise AssertionError("network must not be touched")

    monkeypatch.setattr(gateway.requests, "post", fail)

    snap = gateway.create_transaction(order_id="ORDER-2", gross_amount=100, customer=CUSTOMER, items=ITEMS)
    assert snap.token.startswith("snap_test_")


def test_calls_snap_when_configured(settings, monkeypatch):
    settings.MIDTRANS_USE_STUB = False
    settings.MIDTRANS_SERVER_KEY = "SB-Mid-server-real"
    settings.MIDTRANS_IS_PRODUCTION = False

    captured = {}

    def fake_post(url, **kwargs):
        captured["url"] = url
        captured["kwargs"] = kwargs
        return types.SimpleNamespace(
            status_code=201,
            json=lambda: {"token": "tok_123", "redirect_url": "https://app.sandbox.midtrans.com/snap/v2/vtweb/tok_123"},
        )

    monkeypatch.setattr(gateway.requests, "post", fake_post)

    snap = gateway.create_transaction(order_id="ORDER-3", gross_amount=Decimal("330.00"), customer=CUSTOMER, items=ITEMS)

    assert snap.token == "tok_123"
    assert captured["url"] == gateway.SANDBOX_SNAP_URL
    kwargs = captured["kwargs"]
    assert kwargs["auth"] == ("SB-Mid-server-real", "")
    assert kwargs["timeout"] == 30
    assert kwargs["json"]["transaction_details"] == {"order_id": "ORDER-3", "gross_amount": 330}
    assert kwargs["json"]["item_details"][0]["price"] == 330
    assert kwargs["json"]["customer_details"] == CUSTOMER


def test_production_flag_switches_endpoint(settings):
    settings.MIDTRANS_IS_PRODUCTION = True

    assert gateway.snap_url() == gateway.PRODUCTION_SNAP_URL


def test_http_error_becomes_gateway_error(settings, monkeypatch):
    settings.MIDTRANS_USE_STUB = False
    settings.MIDTRANS_SERVER_KEY = "SB-Mid-server-real"
    monkeypatch.setattr(
        gateway.requests,
        "post",
        lambda url, **kwargs: types.SimpleNamespace(
            status_code=401,
            json=lambda: {"error_messages": ["Access denied due to unauthorized transaction"]},
        ),
    )

    with pytest.raises(PaymentGatewayError):
        gateway.create_transaction(order_id="ORDER-4", gross_amount=100, customer=CUSTOMER, items=ITEMS)


def test_network_error_becomes_gateway_error(settings, monkeypatch):
    settings.MIDTRANS_USE_STUB = False
    settings.MIDTRANS_SERVER_KEY = "SB-Mid-server-real"

    def boom(url, **kwargs):
        raise requests.Timeout("timed out")

    monkeypatch.setattr(gateway.requests, "post", boom)

    with pytest.raises(PaymentGatewayError):
        gateway.create_transaction(order_id="ORDER-5", gross_amount=100, customer=CUSTOMER, items=ITEMS)


def test_signature_verification(settings):
    settings.MIDTRANS_SERVER_KEY = "SB-Mid-server-test"
    expected = hashlib.sha512(b"ORDER-1200330000.00SB-Mid-server-test").hexdigest()

    assert gateway.compute_signature("ORDER-1", "200", "330000.00") == expected
    assert gateway.verify_signature("ORDER-1", "200", "330000.00", expected)
    assert not gateway.verify_signature("ORDER-1", "200", "330001.00", expected)
    assert not gateway.verify_signature("ORDER-1", "200", "330000.00", "")


@pytest.mark.parametrize(
    "transaction_status, fraud_status, expected",
    [
        ("capture", "accept", "capture"),
        ("capture", "challenge", "deny"),
        ("capture", None, "deny"),
        ("settlement", None, "settlement"),
        ("pending", None, "pending"),
        ("deny", None, "deny"),
        ("cancel", None, "cancel"),
        ("expire", None, "expire"),
        ("refund", None, "refund"),
        ("authorize", None, "pending"),
    ],
)
def test_status_mapping(transaction_status, fraud_status, expected):
    assert gateway.map_transaction_status(transaction_status, fraud_status) == expected


def test_gross_amount_formatting():
    assert gateway.format_gross_amount(Decimal("330000.00")) == 330000
    assert gateway.format_gross_amount(Decimal("12.50")) == 12.5
