"""
Top-level package for the Subscription Tracker API.

All functionality lives in submodules under ``app``; import the ASGI
application as ``subscription_api.app.main:app``.
"""

__all__ = []
