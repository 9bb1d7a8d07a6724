"""Signed-in user blueprint: profile, password, profile image and dashboard."""

from __future__ import annotations

import os
from typing import Iterable
from urllib.parse import urlparse

from flask import Blueprint, current_app, jsonify, request, send_file, url_for
from flask_jwt_extended import jwt_required
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import BadRequest, NotFound

from services import users as user_actions
from services.session import require_user
from services.usage import usage_summary
from storage.local_storage import LocalStorage
from utils.request_validation import parse_json_request

user_bp = Blueprint("user", __name__)

MAX_UPLOAD_SIZE_DEFAULT = 5 * 1024 * 1024  # 5 MB
ALLOWED_EXTENSIONS_DEFAULT = {"jpeg", "jpg", "png", "webp"}


def _storage() -> LocalStorage:
    return LocalStorage(current_app.config["UPLOAD_DIR"])


def _allowed_extensions() -> set[str]:
    configured = current_app.config.get("ALLOWED_UPLOAD_TYPES")
    if not configured:
        return set(ALLOWED_EXTENSIONS_DEFAULT)
    if isinstance(configured, str):
        values: Iterable[str] = configured.split(",")
    else:
        values = configured

    normalized = {item.strip().lower().lstrip(".") for item in values if isinstance(item, str)}
    normalized.discard("")
    if not normalized:
        return set(ALLOWED_EXTENSIONS_DEFAULT)
    if "jpeg" in normalized or "jpg" in normalized:
        normalized.update({"jpeg", "jpg"})
    return normalized


def _validate_image(file: FileStorage) -> None:
    if file.filename is None or file.filename.strip() == "":
        raise BadRequest("An image file is required.")

    extension = file.filename.rsplit(".", 1)[-1].lower() if "." in file.filename else ""
    if extension not in _allowed_extensions():
        allowed = ", ".join(sorted(_allowed_extensions()))
        raise BadRequest(f"File type not allowed. Allowed types: {allowed}.")

    max_size = int(current_app.config.get("MAX_UPLOAD_SIZE", MAX_UPLOAD_SIZE_DEFAULT))
    file.stream.seek(0, os.SEEK_END)
    size = file.stream.tell()
    file.stream.seek(0)
    if size > max_size:
        raise BadRequest("File exceeds the maximum upload size.")


def _stored_image_name(image_url: str | None) -> str | None:
    """Return the stored file name behind one of our image URLs, if it is one."""

    if not image_url:
        return None
    prefix = url_for("user.profile_image", name="_").rsplit("/", 1)[0] + "/"
    parsed = urlparse(image_url)
    if parsed.netloc and parsed.netloc != request.host:
        return None
    path = parsed.path
    if not path.startswith(prefix):
        return None
    return path[len(prefix):] or None


def _discard_replaced_image(previous: str | None, current_url: str | None) -> None:
    if previous is None or previous == _stored_image_name(current_url):
        return
    storage = _storage()
    if storage.exists(previous):
        storage.delete(previous)
        current_app.logger.info("Removed replaced profile image %s", previous)


@user_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user = require_user()
    return jsonify({"user": user.to_dict()})


@user_bp.route("/dashboard", methods=["GET"])
@jwt_required()
def dashboard():
    """Return the usage summary shown on the farmer dashboard."""

    user = require_user()
    body = {"user": user.to_dict(), "usage": usage_summary(user)}
    if user.is_admin:
        body["redirect"] = current_app.config.get("ADMIN_LOGIN_REDIRECT", "/admin/dashboard")
    return jsonify(body)


@user_bp.route("/profile", methods=["PATCH"])
@jwt_required()
def update_profile():
    user = require_user()
    payload = parse_json_request(request)
    return jsonify(user_actions.update_profile(user, payload))


@user_bp.route("/password", methods=["POST"])
@jwt_required()
def update_password():
    user = require_user()
    payload = parse_json_request(request)
    return jsonify(user_actions.update_password(user, payload))


@user_bp.route("/profile-image", methods=["POST"])
@jwt_required()
def update_profile_image():
    """Set the profile image from a URL, or from an uploaded file."""

    user = require_user()
    previous = _stored_image_name(user.image)

    if request.mimetype == "multipart/form-data":
        file = request.files.get("image")
        if not isinstance(file, FileStorage):
            raise BadRequest("An image file is required.")
        _validate_image(file)
        stored_name = _storage().save(file, file.filename or "image")
        image_url = url_for("user.profile_image", name=stored_name, _external=True)
        result = user_actions.update_profile_image(user, {"image_url": image_url})
    else:
        payload = parse_json_request(request)
        result = user_actions.update_profile_image(user, payload)

    _discard_replaced_image(previous, result["image"])
    return jsonify(result)


@user_bp.route("/images/<name>", methods=["GET"])
def profile_image(name: str):
    storage = _storage()
    if not storage.exists(name):
        raise NotFound("Image not found.")
    return send_file(storage.open(name), download_name=name)
