"""
Router for the ``/admin`` endpoints.

The sign-in routes are public; the management routers are included
behind ``require_admin``.
"""

from fastapi import APIRouter, Depends

from ...core.security import require_admin
from . import auth, clients, fosters, pets, users

router = APIRouter()

router.include_router(auth.router, tags=["admin auth"])

_admin_only = [Depends(require_admin)]
router.include_router(pets.router, prefix="/pets", tags=["admin pets"], dependencies=_admin_only)
router.include_router(
    clients.router, prefix="/clients", tags=["admin clients"], dependencies=_admin_only
)
router.include_router(
    fosters.router, prefix="/foster", tags=["admin foster"], dependencies=_admin_only
)
router.include_router(users.router, prefix="/users", tags=["admin users"], dependencies=_admin_only)
