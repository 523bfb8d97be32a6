"""
Store component - generic entity store engine.

Per-entity stores (content, users, packages) subclass EntityStore and only
declare their endpoints, envelope family and record type.
"""

from ._impl import DEFAULT_PAGE_SIZE, CreateStrategy, EntityStore, same_id

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "CreateStrategy",
    "EntityStore",
    "same_id",
]
