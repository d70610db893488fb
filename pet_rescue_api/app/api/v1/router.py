"""
Top-level router of the JSON API.

This router aggregates the domain routers under the ``/api`` prefix.
When new endpoints are added, include their routers here.
"""

from fastapi import APIRouter

from .endpoints import auth, foster, pets, stats, users

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(pets.router, prefix="/pets", tags=["pets"])
router.include_router(foster.router, prefix="/foster", tags=["foster"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(stats.router, prefix="/stats", tags=["stats"])
