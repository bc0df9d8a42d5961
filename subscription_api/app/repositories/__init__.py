"""
Persistence layer for subscriptions.

``base`` defines the store contract the domain service depends on.
``sqlite`` is the production implementation and ``memory`` keeps the
same behaviour in a dictionary for tests and local experiments.
"""

from .base import CostQuery, SubscriptionChanges, SubscriptionDraft, SubscriptionRepository
from .memory import InMemorySubscriptionRepository
from .sqlite import SQLiteSubscriptionRepository

__all__ = [
    "CostQuery",
    "InMemorySubscriptionRepository",
    "SQLiteSubscriptionRepository",
    "SubscriptionChanges",
    "SubscriptionDraft",
    "SubscriptionRepository",
]
