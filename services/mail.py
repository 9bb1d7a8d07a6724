"""Transactional email delivery for verification and password reset links."""

from __future__ import annotations

from flask import current_app
from jinja2 import Template
import requests

RESEND_API_URL = "https://api.resend.com/emails"

EMAIL_LAYOUT_TEMPLATE = """
<div style="font-family: sans-serif; max-width: 600px; margin: 0 auto;">
  <h1 style="color: #16A34A; text-align: center;">{{ app_name }}</h1>
  <h2>{{ heading }}</h2>
  <p>{{ intro }}</p>
  <div style="text-align: center; margin: 24px 0;">
    <a href="{{ link }}" style="background-color: #16A34A; color: white; padding: 12px 24px; text-decoration: none; border-radius: 4px;">
      {{ button_label }}
    </a>
  </div>
  <p>{{ outro }}</p>
  <p>This link will expire in {{ expiry }}.</p>
</div>
"""


class Mailer:
    """Send HTML email through the Resend HTTP API."""

    def __init__(self, api_key: str | None, sender: str, timeout: float = 10.0):
        self.api_key = (api_key or "").strip()
        self.sender = sender
        self.timeout = timeout

    def send(self, to: str, subject: str, html: str) -> None:
        if not self.api_key:
            current_app.logger.warning(
                "RESEND_API_KEY is not configured; not sending %r to %s", subject, to
            )
            return

        response = requests.post(
            RESEND_API_URL,
            json={"from": self.sender, "to": [to], "subject": subject, "html": html},
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        current_app.logger.info("Sent %r to %s", subject, to)


def get_mailer() -> Mailer:
    return current_app.extensions["mailer"]


def _expiry_label() -> str:
    seconds = int(current_app.config.get("TOKEN_TTL_SECONDS", 3600))
    if seconds % 3600 == 0:
        hours = seconds // 3600
        return "1 hour" if hours == 1 else f"{hours} hours"
    minutes = max(seconds // 60, 1)
    return f"{minutes} minutes"


def render_email(**context) -> str:
    context.setdefault("app_name", current_app.config.get("APP_NAME", "CCSA FarmAI"))
    context.setdefault("expiry", _expiry_label())
    return Template(EMAIL_LAYOUT_TEMPLATE).render(**context)


def send_verification_email(email: str, token: str) -> None:
    app_name = current_app.config.get("APP_NAME", "CCSA FarmAI")
    confirm_link = f"{current_app.config['APP_URL']}/verify?token={token}"
    html = render_email(
        heading="Confirm your email address",
        intro=(
            f"Thank you for signing up for {app_name}. Please confirm your email "
            "address by clicking the link below."
        ),
        link=confirm_link,
        button_label="Confirm Email",
        outro=f"If you didn't sign up for {app_name}, you can safely ignore this email.",
    )
    get_mailer().send(email, "Confirm your email address", html)


def send_password_reset_email(email: str, token: str) -> None:
    reset_link = f"{current_app.config['APP_URL']}/reset-password?token={token}"
    html = render_email(
        heading="Reset your password",
        intro=(
            "We received a request to reset your password. Click the button below "
            "to create a new password."
        ),
        link=reset_link,
        button_label="Reset Password",
        outro="If you didn't request a password reset, you can safely ignore this email.",
    )
    get_mailer().send(email, "Reset your password", html)
