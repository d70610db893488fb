"""
Pydantic models for clients (foster caretakers).
"""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from .common import ApiModel
from .user import UserInfo, UserRead


class ClientSortOrder(str, Enum):
    """Accepted values of the ``sortOrder`` query parameter for clients."""

    ID_ASC = "id_asc"
    ID_DESC = "id_desc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    ADDR_ASC = "addr_asc"
    ADDR_DESC = "addr_desc"
    USER_ASC = "user_asc"
    USER_DESC = "user_desc"


class ClientBase(ApiModel):
    user_id: Optional[str] = Field(None, description="Linked user account, if any")
    name: str = Field(..., min_length=3, max_length=100, examples=["Maria Popescu"])
    address: Optional[str] = Field(None, examples=["12 Linden Street"])
    phone: Optional[str] = Field(None, examples=["+40 700 000 001"])
    description: Optional[str] = None


class ClientCreate(ClientBase):
    """Schema for creating a client."""
    pass


class ClientUpdate(ClientBase):
    """Schema for editing a client; ``version`` enables conflict detection."""

    version: Optional[int] = None


class ClientRead(ClientBase):
    id: int
    version: int = 1
    user_info: Optional[UserInfo] = None


class ClientFormOptions(ApiModel):
    """Choices offered by the admin client form."""

    users: List[UserRead]
