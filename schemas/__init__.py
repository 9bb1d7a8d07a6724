"""Request schemas for the form-backed actions."""

from .ai import (
    SUPPORTED_LANGUAGES,
    CropAnalyzerSchema,
    FarmAnalyzerSchema,
    FarmersAssistantSchema,
    SavePromptSchema,
    SoilAnalyzerSchema,
)
from .auth import (
    ForgotPasswordSchema,
    LoginSchema,
    RegisterSchema,
    ResendVerificationSchema,
    ResetPasswordSchema,
    VerifyEmailSchema,
)
from .user import (
    AddFundsSchema,
    CreateUserSchema,
    UpdatePasswordSchema,
    UpdateProfileImageSchema,
    UpdateProfileSchema,
    UpdateUserSchema,
)

__all__ = [
    "SUPPORTED_LANGUAGES",
    "AddFundsSchema",
    "CreateUserSchema",
    "CropAnalyzerSchema",
    "FarmAnalyzerSchema",
    "FarmersAssistantSchema",
    "ForgotPasswordSchema",
    "LoginSchema",
    "RegisterSchema",
    "ResendVerificationSchema",
    "ResetPasswordSchema",
    "SavePromptSchema",
    "SoilAnalyzerSchema",
    "UpdatePasswordSchema",
    "UpdateProfileImageSchema",
    "UpdateProfileSchema",
    "UpdateUserSchema",
    "VerifyEmailSchema",
]
