"""Authentication blueprint: registration, login, verification and password reset."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt, jwt_required

from services import auth as auth_actions
from services.session import issue_session, refresh_session_claims
from utils.request_validation import parse_json_request

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/register", methods=["POST"])
def register():
    """Register a new account and send the verification email."""

    payload = parse_json_request(request)
    result = auth_actions.register(payload)
    return jsonify(result), HTTPStatus.CREATED


@auth_bp.route("/login", methods=["POST"])
def login():
    """Check credentials and, when they hold, issue a session token."""

    payload = parse_json_request(request)
    callback_url = request.args.get("callbackUrl") or payload.get("callback_url")
    result, user = auth_actions.login(payload, callback_url)
    if user is not None:
        result["access_token"] = issue_session(user)
        result["user"] = user.to_dict()
    return jsonify(result)


@auth_bp.route("/logout", methods=["POST"])
def logout():
    # Tokens are stateless; the client discards its copy.
    return jsonify({"success": True})


@auth_bp.route("/verify", methods=["POST"])
def verify_email():
    payload = parse_json_request(request)
    return jsonify(auth_actions.verify_email(payload.get("token") or ""))


@auth_bp.route("/forgot-password", methods=["POST"])
def forgot_password():
    payload = parse_json_request(request)
    return jsonify(auth_actions.forgot_password(payload))


@auth_bp.route("/reset-password", methods=["POST"])
def reset_password():
    payload = parse_json_request(request)
    token = payload.get("token") or request.args.get("token")
    return jsonify(auth_actions.reset_password(payload, token))


@auth_bp.route("/resend-verification", methods=["POST"])
def resend_verification():
    payload = parse_json_request(request)
    return jsonify(auth_actions.resend_verification_email(payload))


@auth_bp.route("/session", methods=["GET"])
@jwt_required()
def read_session():
    """Return the session claims refreshed from the database.

    When the user still exists a re-signed token carrying the fresh claims is
    included so the client can replace its stale one.
    """

    claims, user = refresh_session_claims(get_jwt())
    body = {
        "user": {
            "id": claims.get("sub"),
            "name": claims.get("name"),
            "email": claims.get("email"),
            "role": claims.get("role"),
            "wallet_balance": claims.get("wallet_balance"),
            "email_verified": claims.get("email_verified"),
        }
    }
    if user is not None:
        body["access_token"] = issue_session(user)
    return jsonify(body)
