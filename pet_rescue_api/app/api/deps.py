"""
Dependencies and helpers shared by the API and admin routers.
"""

from typing import Any, Dict

from fastapi import Depends, HTTPException, Query, status

from ..core.config import settings
from ..core.db import WriteStatus
from ..core.security import get_current_user
from ..schemas.client import ClientRead
from ..services.client_service import ClientService
from ..services.results import WriteResult


class PageParams:
    """``pageNumber`` and ``pageSize`` query parameters."""

    def __init__(
        self,
        page_number: int = Query(1, ge=1, alias="pageNumber"),
        page_size: int = Query(settings.default_page_size, ge=1, alias="pageSize"),
    ):
        self.page_number = page_number
        self.page_size = page_size


def unwrap(result: WriteResult) -> Any:
    """Return the written record or raise the matching HTTP error."""
    if result.status == WriteStatus.OK:
        return result.record
    if result.status == WriteStatus.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    if result.status == WriteStatus.CONFLICT:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="The record was modified by someone else; reload and try again.",
        )
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.reason)


async def get_current_client(
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> ClientRead:
    """The client profile of the authenticated API user.

    A user without a client profile cannot work with fosters and is
    treated as unauthenticated.
    """
    client = await ClientService.get_client_for_user_id(current_user["user_id"])
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No client profile for this user",
        )
    return client
