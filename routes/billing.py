"""Stripe Checkout wallet top-ups."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
import stripe
from sqlalchemy import select

from models import db
from models.wallet_top_up import WalletTopUp
from services.session import require_user
from services.users import credit_wallet
from utils.request_validation import parse_json_request

billing_bp = Blueprint("billing", __name__)

WALLET_TOP_UP = "wallet_topup"


def _init_stripe() -> str | None:
    """Configure Stripe with the API key from configuration."""

    api_key = current_app.config.get("STRIPE_SECRET_KEY")
    if not api_key:
        return None
    stripe.api_key = api_key
    return api_key


def _parse_amount(raw) -> Decimal | None:
    try:
        amount = Decimal(str(raw))
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount.quantize(Decimal("0.01"))


@billing_bp.route("/checkout-session", methods=["POST"])
@jwt_required()
def create_checkout_session():
    """Create a Stripe Checkout session that tops up the caller's wallet."""

    if not _init_stripe():
        return jsonify({"error": "Stripe secret key is not configured."}), 500

    user = require_user()
    data = parse_json_request(request)

    amount = _parse_amount(data.get("amount"))
    if amount is None:
        return jsonify({"error": "Amount must be greater than zero!"}), 400

    success_url = data.get("success_url") or current_app.config.get("BILLING_SUCCESS_URL")
    cancel_url = data.get("cancel_url") or current_app.config.get("BILLING_CANCEL_URL")
    if not success_url or not cancel_url:
        return (
            jsonify({"error": "Billing success and cancel URLs must be configured."}),
            400,
        )

    currency = current_app.config.get("WALLET_CURRENCY", "ngn")
    try:
        session = stripe.checkout.Session.create(
            mode="payment",
            line_items=[
                {
                    "price_data": {
                        "currency": currency,
                        # Stripe amounts are in the smallest currency unit (kobo).
                        "unit_amount": int(amount * 100),
                        "product_data": {
                            "name": f"{current_app.config.get('APP_NAME', 'CCSA FarmAI')} wallet top-up"
                        },
                    },
                    "quantity": 1,
                }
            ],
            success_url=success_url,
            cancel_url=cancel_url,
            customer_email=user.email,
            metadata={
                "user_id": user.id,
                "billing_type": WALLET_TOP_UP,
                "amount": str(amount),
            },
        )
    except stripe.StripeError as exc:  # pragma: no cover - network error
        current_app.logger.warning("Stripe checkout failed: %s", exc)
        return jsonify({"error": "Failed to start checkout."}), 502

    return jsonify({"session_id": session.id, "url": session.url})


def _handle_wallet_top_up(session_id: str | None, metadata: dict) -> None:
    user_id = metadata.get("user_id")
    amount = _parse_amount(metadata.get("amount"))
    if not session_id or not user_id or amount is None:
        return

    already_credited = db.session.execute(
        select(WalletTopUp.id).where(WalletTopUp.reference == session_id)
    ).first()
    if already_credited:
        current_app.logger.info("Ignoring replayed checkout session %s", session_id)
        return

    if not credit_wallet(user_id, amount, source="stripe", reference=session_id):
        current_app.logger.warning("Checkout session %s names unknown user %s", session_id, user_id)
        return
    current_app.logger.info("Credited %s to wallet of user %s via Stripe", amount, user_id)


@billing_bp.route("/webhook", methods=["POST"])
def billing_webhook():
    """Handle Stripe webhook events for wallet top-ups."""

    if not _init_stripe():
        return jsonify({"error": "Stripe secret key is not configured."}), 500

    payload = request.get_data()
    sig_header = request.headers.get("Stripe-Signature")
    webhook_secret = current_app.config.get("STRIPE_WEBHOOK_SECRET")
    if not webhook_secret:
        return jsonify({"error": "Stripe webhook secret is not configured."}), 500

    try:
        event = stripe.Webhook.construct_event(payload, sig_header, webhook_secret)
    except (ValueError, stripe.SignatureVerificationError):
        return jsonify({"error": "Invalid webhook signature."}), 400

    # Stripe objects are not dicts; read a plain copy of the event.
    event_data = event.to_dict()
    event_type = event_data.get("type")
    data_object = event_data.get("data", {}).get("object", {})
    metadata = data_object.get("metadata", {}) or {}

    if event_type == "checkout.session.completed" and metadata.get("billing_type") == WALLET_TOP_UP:
        _handle_wallet_top_up(data_object.get("id"), metadata)

    db.session.commit()
    return jsonify({"status": "success"})
