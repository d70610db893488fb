"""
Request and response bodies for sign-in, sign-up and password reset.
"""

from pydantic import BaseModel, Field, model_validator, field_validator

from ..core.security import check_password_policy
from .common import ApiModel


class LoginInput(ApiModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)
    remember_me: bool = False


class RegisterInput(ApiModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., max_length=128)
    confirm_password: str

    @field_validator("password")
    @classmethod
    def _password_policy(cls, value: str) -> str:
        return check_password_policy(value)

    @model_validator(mode="after")
    def _passwords_match(self) -> "RegisterInput":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match.")
        return self


class ForgotPasswordInput(ApiModel):
    email: str = Field(..., min_length=3, max_length=320)


class ResetPasswordInput(RegisterInput):
    reset_code: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
