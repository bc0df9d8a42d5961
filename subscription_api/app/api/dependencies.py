"""
FastAPI dependencies.

The subscription service is created once in ``create_app`` and stored
on ``app.state``; route handlers receive it through
``get_subscription_service`` instead of importing a module-level
instance.  Tests may replace it with ``app.dependency_overrides``.
"""

from fastapi import Request

from ..services.subscription_service import SubscriptionService


def get_subscription_service(request: Request) -> SubscriptionService:
    return request.app.state.subscription_service
