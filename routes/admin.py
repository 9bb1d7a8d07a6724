"""Admin blueprint: user management and dashboard statistics."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from services import admin as admin_actions
from services.session import require_user
from utils.request_validation import parse_json_request

admin_bp = Blueprint("admin", __name__)


@admin_bp.route("/users", methods=["GET"])
@jwt_required()
def list_users():
    return jsonify(admin_actions.list_users(require_user()))


@admin_bp.route("/users", methods=["POST"])
@jwt_required()
def create_user():
    actor = require_user()
    payload = parse_json_request(request)
    return jsonify(admin_actions.create_user(actor, payload)), HTTPStatus.CREATED


@admin_bp.route("/users/<user_id>", methods=["PUT"])
@jwt_required()
def update_user(user_id: str):
    actor = require_user()
    payload = parse_json_request(request)
    return jsonify(admin_actions.update_user(actor, user_id, payload))


@admin_bp.route("/users/<user_id>", methods=["DELETE"])
@jwt_required()
def delete_user(user_id: str):
    return jsonify(admin_actions.delete_user(require_user(), user_id))


@admin_bp.route("/stats", methods=["GET"])
@jwt_required()
def stats():
    return jsonify(admin_actions.get_stats(require_user()))
