"""AI feature blueprint: farmers assistant and the three analyzers."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from services import ai as ai_actions
from services.session import require_user
from utils.request_validation import parse_json_request

ai_bp = Blueprint("ai", __name__)


@ai_bp.route("/assistant", methods=["POST"])
@jwt_required()
def farmers_assistant():
    user = require_user()
    payload = parse_json_request(request)
    return jsonify(ai_actions.generate_farmers_assistant_response(user.id, payload))


@ai_bp.route("/farm-analysis", methods=["POST"])
@jwt_required()
def farm_analysis():
    user = require_user()
    payload = parse_json_request(request)
    return jsonify(ai_actions.generate_farm_analysis(user.id, payload))


@ai_bp.route("/soil-analysis", methods=["POST"])
@jwt_required()
def soil_analysis():
    user = require_user()
    payload = parse_json_request(request)
    return jsonify(ai_actions.generate_soil_analysis(user.id, payload))


@ai_bp.route("/crop-analysis", methods=["POST"])
@jwt_required()
def crop_analysis():
    user = require_user()
    payload = parse_json_request(request)
    return jsonify(ai_actions.generate_crop_analysis(user.id, payload))


@ai_bp.route("/prompts", methods=["POST"])
@jwt_required()
def save_prompt():
    user = require_user()
    payload = parse_json_request(request)
    return jsonify(ai_actions.save_prompt(user.id, payload)), HTTPStatus.CREATED


@ai_bp.route("/prompts/count", methods=["GET"])
@jwt_required()
def prompt_count():
    user = require_user()
    return jsonify(ai_actions.get_prompt_count(user.id))
