from typing import Annotated

from pydantic import BaseModel, BeforeValidator, EmailStr, Field, field_validator, model_validator


def normalize_email(value: object) -> object:
    """Strip whitespace and lower-case an email before validation."""
    if isinstance(value, str):
        return value.strip().lower()
    return value


Email = Annotated[EmailStr, BeforeValidator(normalize_email)]


class LoginSchema(BaseModel):
    """Login form."""

    email: Email
    password: str = Field(min_length=1)


class RegisterSchema(BaseModel):
    """Registration form."""

    name: str = Field(min_length=1)
    email: Email
    password: str = Field(min_length=8)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class ForgotPasswordSchema(BaseModel):
    email: Email


class ResendVerificationSchema(BaseModel):
    email: Email


class VerifyEmailSchema(BaseModel):
    token: str = Field(min_length=1)


class ResetPasswordSchema(BaseModel):
    """New password form; the token travels alongside it."""

    password: str = Field(min_length=8)
    confirm_password: str = Field(min_length=8)

    @model_validator(mode="after")
    def passwords_match(self) -> "ResetPasswordSchema":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self
