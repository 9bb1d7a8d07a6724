"""Wallet blueprint: balance and manual top-ups."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from services import users as user_actions
from services.session import require_user
from utils.request_validation import parse_json_request

wallet_bp = Blueprint("wallet", __name__)


@wallet_bp.route("", methods=["GET"])
@jwt_required()
def wallet_balance():
    user = require_user()
    return jsonify({"wallet_balance": float(user.wallet_balance or 0)})


@wallet_bp.route("/add-funds", methods=["POST"])
@jwt_required()
def add_funds():
    user = require_user()
    payload = parse_json_request(request)
    return jsonify(user_actions.add_funds_to_wallet(user.id, payload))
