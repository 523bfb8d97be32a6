"""
Content component - article, category and tag stores.
"""

from .component import ArticleStore, CategoryStore, TagStore

__all__ = ["ArticleStore", "CategoryStore", "TagStore"]
