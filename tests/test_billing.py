"""Tests for Stripe wallet top-ups."""

from __future__ import annotations

from types import SimpleNamespace

import stripe
from sqlalchemy import select

from models import db
from models.user import User
from models.wallet_top_up import WalletTopUp


def _completed_checkout(
    user_id: str,
    amount: str = "1000.00",
    session_id: str = "cs_test_123",
    event_type: str = "checkout.session.completed",
) -> stripe.Event:
    """Build the event the way the Stripe SDK hands it to the webhook."""

    values = {
        "id": "evt_test_1",
        "object": "event",
        "type": event_type,
        "data": {
            "object": {
                "id": session_id,
                "metadata": {
                    "user_id": user_id,
                    "billing_type": "wallet_topup",
                    "amount": amount,
                },
            }
        },
    }
    return stripe.Event.construct_from(values, "sk_test")


def _post_webhook(client):
    return client.post("/billing/webhook", data=b"{}", headers={"Stripe-Signature": "sig"})


def test_webhook_credits_wallet_once(app, client, make_user, monkeypatch):
    """Replayed deliveries of the same checkout session credit only once."""

    user_id = make_user()
    event = _completed_checkout(user_id)

    def _mock_construct_event(payload, sig_header, secret):
        assert secret == app.config["STRIPE_WEBHOOK_SECRET"]
        return event

    monkeypatch.setattr(stripe.Webhook, "construct_event", staticmethod(_mock_construct_event))

    assert _post_webhook(client).status_code == 200
    assert _post_webhook(client).status_code == 200

    with app.app_context():
        assert float(db.session.get(User, user_id).wallet_balance) == 1000.0
        top_up = db.session.execute(select(WalletTopUp)).scalar_one()
        assert top_up.source == "stripe"
        assert top_up.reference == "cs_test_123"


def test_webhook_ignores_other_events(app, client, make_user, monkeypatch):
    user_id = make_user()
    event = _completed_checkout(user_id, event_type="invoice.paid")

    monkeypatch.setattr(stripe.Webhook, "construct_event", staticmethod(lambda *args: event))

    assert _post_webhook(client).status_code == 200
    with app.app_context():
        assert float(db.session.get(User, user_id).wallet_balance) == 0.0


def test_webhook_rejects_bad_signature(client, monkeypatch):
    def _mock_construct_event(payload, sig_header, secret):
        raise stripe.SignatureVerificationError("bad signature", sig_header)

    monkeypatch.setattr(stripe.Webhook, "construct_event", staticmethod(_mock_construct_event))

    response = _post_webhook(client)

    assert response.status_code == 400
    assert response.get_json()["error"] == "Invalid webhook signature."


def test_checkout_session_uses_wallet_metadata(app, client, make_user, auth_headers, monkeypatch):
    user_id = make_user()
    captured = {}

    def _mock_create(**kwargs):
        captured.update(kwargs)
        return SimpleNamespace(id="cs_test_456", url="https://checkout.stripe.test/cs_test_456")

    monkeypatch.setattr(stripe.checkout.Session, "create", staticmethod(_mock_create))

    response = client.post(
        "/billing/checkout-session",
        json={"amount": 2500},
        headers=auth_headers(user_id),
    )

    assert response.status_code == 200
    assert response.get_json() == {
        "session_id": "cs_test_456",
        "url": "https://checkout.stripe.test/cs_test_456",
    }
    line_item = captured["line_items"][0]
    assert line_item["price_data"]["currency"] == "ngn"
    assert line_item["price_data"]["unit_amount"] == 250000
    assert captured["metadata"] == {
        "user_id": user_id,
        "billing_type": "wallet_topup",
        "amount": "2500.00",
    }
    assert captured["customer_email"] == "farmer@example.com"


def test_checkout_session_rejects_non_positive_amount(client, make_user, auth_headers):
    response = client.post(
        "/billing/checkout-session",
        json={"amount": -10},
        headers=auth_headers(make_user()),
    )

    assert response.status_code == 400
    assert response.get_json()["error"] == "Amount must be greater than zero!"


def test_completed_checkout_without_top_up_metadata_is_ignored(app, client, make_user, monkeypatch):
    user_id = make_user()
    event = stripe.Event.construct_from(
        {
            "id": "evt_test_2",
            "object": "event",
            "type": "checkout.session.completed",
            "data": {"object": {"id": "cs_test_789", "metadata": {}}},
        },
        "sk_test",
    )

    monkeypatch.setattr(stripe.Webhook, "construct_event", staticmethod(lambda *args: event))

    assert _post_webhook(client).status_code == 200
    with app.app_context():
        assert float(db.session.get(User, user_id).wallet_balance) == 0.0
        assert db.session.execute(select(WalletTopUp)).scalars().all() == []
