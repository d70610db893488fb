"""
Pydantic models for user data.

Credential material (password hashes, lockout counters) never leaves
the service layer; none of these schemas carries it.
"""

from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from ..core.security import check_password_policy
from .common import ApiModel


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"


class UserSortOrder(str, Enum):
    """Accepted values of the ``sortOrder`` query parameter for users."""

    ID_ASC = "id_asc"
    ID_DESC = "id_desc"
    EMAIL_ASC = "email_asc"
    EMAIL_DESC = "email_desc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    ROLE_ASC = "role_asc"
    ROLE_DESC = "role_desc"


class UserBase(ApiModel):
    email: str = Field(..., min_length=3, max_length=320, examples=["jane@example.com"])
    name: Optional[str] = Field(None, max_length=100, examples=["Jane Doe"])
    phone: Optional[str] = Field(None, max_length=30, examples=["+40 700 000 000"])
    role: UserRole = Field(UserRole.USER, examples=["USER"])


class UserCreate(UserBase):
    """Schema for creating a user from the admin screens.

    The password is optional; a user created without one can set it
    through the password reset flow.
    """

    password: Optional[str] = Field(None, examples=["Str0ngPassword"])

    @field_validator("password")
    @classmethod
    def _password_policy(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return check_password_policy(value)


class UserUpdate(UserBase):
    """Schema for editing a user (admin): email, name, phone and role."""

    version: Optional[int] = None


class UserSelfUpdate(ApiModel):
    """Partial update of the signed-in user's own profile."""

    email: Optional[str] = Field(None, min_length=3, max_length=320)
    name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)


class UserRead(UserBase):
    """Schema for reading a user."""

    id: str
    version: int = 1


class UserInfo(ApiModel):
    """Public profile of a user, embedded in client responses."""

    name: Optional[str] = None
    user_name: Optional[str] = None
    email: str
    phone: Optional[str] = None
