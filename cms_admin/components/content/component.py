"""
Content component - articles, categories and tags.

Create strategies:
- articles, categories: re-fetch the current page (server-side ordering wins)
- tags: prepend the returned tag (the tag list is unpaginated)
"""

from __future__ import annotations

from typing import Any

from cms_admin.components.store import EntityStore
from cms_admin.core.entities import Article, Category, EntityId, Tag
from cms_admin.core.envelopes import ADMIN, ITEMS_PAGE, LEGACY, LIST_PAGE


class ArticleStore(EntityStore[Article]):
    record_type = Article
    label = "article"
    plural = "articles"
    collection_path = "admin/articles"
    envelope = ADMIN
    page_format = ITEMS_PAGE
    filter_param = "title"
    create_strategy = "refresh"

    def update_status(self, article_id: EntityId, status: str) -> Article | None:
        """PATCH only the publication status; the article keeps its position."""
        payload: dict[str, Any] = {"status": status}
        return self._update(
            f"{self._item_path(article_id)}/status", article_id, payload, method="PATCH"
        )


class CategoryStore(EntityStore[Category]):
    record_type = Category
    label = "category"
    plural = "categories"
    collection_path = "admin/categories"
    envelope = ADMIN
    page_format = ITEMS_PAGE
    create_strategy = "refresh"


class TagStore(EntityStore[Tag]):
    record_type = Tag
    label = "tag"
    plural = "tags"
    collection_path = "tags"
    envelope = LEGACY
    page_format = LIST_PAGE
    create_strategy = "prepend"
