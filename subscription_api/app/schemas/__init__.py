"""
Pydantic schema definitions for API payloads.

Schemas are separated from the persistence layer to decouple the API
representation from how records are stored.
"""
