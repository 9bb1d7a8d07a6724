"""Tests for profile, password, profile image and wallet endpoints."""

from __future__ import annotations

from io import BytesIO

import pytest
from flask.testing import FlaskClient
from sqlalchemy import select

from models import db
from models.user import User
from models.wallet_top_up import WalletTopUp


def test_me_and_dashboard(client: FlaskClient, make_user, auth_headers):
    headers = auth_headers(make_user("farmer@example.com"))

    me = client.get("/user/me", headers=headers)
    dashboard = client.get("/user/dashboard", headers=headers)

    assert me.get_json()["user"]["email"] == "farmer@example.com"
    assert dashboard.get_json()["usage"] == {
        "prompt_count": 0,
        "free_tier_limit": 3,
        "free_prompts_remaining": 3,
        "wallet_balance": 0.0,
        "can_use_ai": True,
    }
    assert "redirect" not in dashboard.get_json()


def test_dashboard_sends_admins_to_admin_area(client: FlaskClient, make_user, auth_headers):
    headers = auth_headers(make_user("admin@example.com", role="ADMIN"))

    response = client.get("/user/dashboard", headers=headers)

    assert response.get_json()["redirect"] == "/admin/dashboard"


def test_update_profile(client: FlaskClient, app, make_user, auth_headers):
    user_id = make_user()

    ok = client.patch("/user/profile", json={"name": "Ngozi"}, headers=auth_headers(user_id))
    short = client.patch("/user/profile", json={"name": "N"}, headers=auth_headers(user_id))

    assert ok.get_json() == {"success": "Profile updated successfully!"}
    assert short.status_code == 400
    with app.app_context():
        assert db.session.get(User, user_id).name == "Ngozi"


def test_update_password(client: FlaskClient, app, make_user, auth_headers):
    user_id = make_user(password="Password123")
    headers = auth_headers(user_id)

    wrong = client.post(
        "/user/password",
        json={"current_password": "nope", "new_password": "NewPassword456"},
        headers=headers,
    )
    ok = client.post(
        "/user/password",
        json={"current_password": "Password123", "new_password": "NewPassword456"},
        headers=headers,
    )

    assert wrong.status_code == 400
    assert wrong.get_json()["error"] == "Current password is incorrect!"
    assert ok.get_json() == {"success": "Password updated successfully!"}
    with app.app_context():
        assert db.session.get(User, user_id).check_password("NewPassword456")


def test_update_profile_image_from_url(client: FlaskClient, app, make_user, auth_headers):
    user_id = make_user()

    response = client.post(
        "/user/profile-image",
        json={"image_url": "https://cdn.example.com/me.png"},
        headers=auth_headers(user_id),
    )

    assert response.status_code == 200
    assert response.get_json()["image"] == "https://cdn.example.com/me.png"
    with app.app_context():
        assert db.session.get(User, user_id).image == "https://cdn.example.com/me.png"


def test_update_profile_image_from_upload(client: FlaskClient, app, make_user, auth_headers, tmp_path):
    user_id = make_user()
    headers = auth_headers(user_id)

    response = client.post(
        "/user/profile-image",
        data={"image": (BytesIO(b"\x89PNG fake image"), "me.png")},
        content_type="multipart/form-data",
        headers=headers,
    )

    assert response.status_code == 200
    image_url = response.get_json()["image"]
    stored_name = image_url.rsplit("/", 1)[-1]
    assert stored_name.endswith(".png")
    assert (tmp_path / "uploads" / stored_name).read_bytes() == b"\x89PNG fake image"

    served = client.get(f"/user/images/{stored_name}")
    assert served.status_code == 200
    assert served.data == b"\x89PNG fake image"


def test_profile_image_upload_rejects_other_types(client: FlaskClient, make_user, auth_headers):
    response = client.post(
        "/user/profile-image",
        data={"image": (BytesIO(b"#!/bin/sh"), "run.sh")},
        content_type="multipart/form-data",
        headers=auth_headers(make_user()),
    )

    assert response.status_code == 400
    assert "File type not allowed" in response.get_json()["error"]


def test_missing_image_is_not_found(client: FlaskClient):
    assert client.get("/user/images/missing.png").status_code == 404


def test_add_funds_credits_wallet_and_ledger(client: FlaskClient, app, make_user, auth_headers):
    user_id = make_user()

    response = client.post("/wallet/add-funds", json={"amount": 500}, headers=auth_headers(user_id))

    assert response.status_code == 200
    assert response.get_json() == {
        "success": "₦500 added to your wallet successfully!",
        "wallet_balance": 500.0,
    }
    with app.app_context():
        top_up = db.session.execute(select(WalletTopUp)).scalar_one()
        assert top_up.user_id == user_id
        assert top_up.source == "manual"
        assert float(top_up.amount) == 500.0


def test_add_funds_accumulates(client: FlaskClient, make_user, auth_headers):
    user_id = make_user(wallet_balance="100.50")

    response = client.post("/wallet/add-funds", json={"amount": "49.50"}, headers=auth_headers(user_id))

    assert response.get_json()["wallet_balance"] == 150.0
    assert response.get_json()["success"] == "₦49.50 added to your wallet successfully!"


@pytest.mark.parametrize("amount", [-5, 0])
def test_add_funds_rejects_non_positive_amounts(client: FlaskClient, app, make_user, auth_headers, amount):
    user_id = make_user(wallet_balance=10)

    response = client.post("/wallet/add-funds", json={"amount": amount}, headers=auth_headers(user_id))

    assert response.status_code == 400
    assert response.get_json()["error"] == "Amount must be greater than zero!"
    with app.app_context():
        assert float(db.session.get(User, user_id).wallet_balance) == 10.0
        assert db.session.execute(select(WalletTopUp)).scalars().all() == []


def test_add_funds_rejects_non_numeric_amount(client: FlaskClient, make_user, auth_headers):
    response = client.post(
        "/wallet/add-funds", json={"amount": "lots"}, headers=auth_headers(make_user())
    )

    assert response.status_code == 400
    assert response.get_json()["error"] == "Invalid fields!"


def _upload(client: FlaskClient, headers: dict, content: bytes, filename: str = "me.png"):
    return client.post(
        "/user/profile-image",
        data={"image": (BytesIO(content), filename)},
        content_type="multipart/form-data",
        headers=headers,
    )


def test_replacing_uploaded_image_removes_old_file(client: FlaskClient, make_user, auth_headers, tmp_path):
    headers = auth_headers(make_user())

    first = _upload(client, headers, b"first").get_json()["image"].rsplit("/", 1)[-1]
    second = _upload(client, headers, b"second").get_json()["image"].rsplit("/", 1)[-1]

    assert not (tmp_path / "uploads" / first).exists()
    assert (tmp_path / "uploads" / second).read_bytes() == b"second"
    assert client.get(f"/user/images/{first}").status_code == 404


def test_switching_to_external_url_removes_uploaded_file(client: FlaskClient, make_user, auth_headers, tmp_path):
    headers = auth_headers(make_user())
    stored = _upload(client, headers, b"first").get_json()["image"].rsplit("/", 1)[-1]

    response = client.post(
        "/user/profile-image",
        json={"image_url": "https://cdn.example.com/me.png"},
        headers=headers,
    )

    assert response.status_code == 200
    assert not (tmp_path / "uploads" / stored).exists()


def test_external_image_with_matching_path_is_left_alone(client: FlaskClient, app, make_user, auth_headers, tmp_path):
    user_id = make_user()
    headers = auth_headers(user_id)
    stored = _upload(client, headers, b"mine").get_json()["image"].rsplit("/", 1)[-1]
    with app.app_context():
        db.session.get(User, user_id).image = f"https://cdn.example.com/user/images/{stored}"
        db.session.commit()

    client.post(
        "/user/profile-image",
        json={"image_url": "https://cdn.example.com/other.png"},
        headers=headers,
    )

    assert (tmp_path / "uploads" / stored).exists()
