"""
Main entrypoint for the Pet Rescue API.

This module assembles the FastAPI application, sets up logging and
includes the routers: the JSON API under ``/api`` and the management
endpoints under ``/admin``.  The app is instantiated at module import
time as ``app`` so it can be served with uvicorn, e.g.::

    uvicorn pet_rescue_api.app.main:app --reload

The application title and version are provided via ``Settings`` from
``core.config``.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.admin.router import router as admin_router
from .api.v1.router import router as api_router
from .core.config import settings
from .core.db import init_db
from .core.logging_config import setup_logging


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Initialise logging before anything else so that startup messages
    # are formatted consistently.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    # Browser front-ends call the JSON API from another origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api")
    app.include_router(admin_router, prefix="/admin")

    @app.on_event("startup")
    async def startup_event() -> None:
        # Apply migrations at startup.  This will create the database
        # file if it does not exist and ensure all tables are up to date.
        init_db()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
