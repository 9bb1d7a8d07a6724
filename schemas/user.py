from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, HttpUrl

from .auth import Email


class UpdateProfileSchema(BaseModel):
    name: str = Field(min_length=2)


class UpdatePasswordSchema(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8)


class UpdateProfileImageSchema(BaseModel):
    image_url: HttpUrl


class AddFundsSchema(BaseModel):
    # Sign is checked by the action so it can answer with its own message.
    amount: Decimal = Field(max_digits=12, decimal_places=2)


class CreateUserSchema(BaseModel):
    """Admin form for creating an account."""

    name: str = Field(min_length=2)
    email: Email
    password: str = Field(min_length=8)
    role: Literal["USER", "ADMIN"]


class UpdateUserSchema(BaseModel):
    """Admin form for editing an account."""

    name: str = Field(min_length=2)
    email: Email
    role: Literal["USER", "ADMIN"]
