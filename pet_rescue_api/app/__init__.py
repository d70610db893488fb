"""
Application package initializer.

The project is organised into layers: ``core`` (configuration,
logging, database, query building, pagination and security),
``schemas`` (pydantic request and response models), ``services``
(business logic over the SQLite store) and ``api`` (FastAPI routers).
"""

from .main import app  # noqa: F401
