"""
Application package initializer.

The package is organised by layer: ``core`` (configuration, logging,
database, errors and month dates), ``schemas`` (pydantic payloads),
``repositories`` (subscription stores), ``services`` (business logic)
and ``api`` (versioned FastAPI routers).
"""

from .main import app  # noqa: F401
