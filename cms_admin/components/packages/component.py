"""
Packages component - purchasable packages and their license keys.

Keys are scoped to a parent package: listing and creation go through
``admin/packages/{package_id}/keys`` while updates and deletion use the
key-level ``admin/keys/{key_id}`` endpoint. Every key operation invoked
without a package id is a no-op, so no request is ever sent with an empty
path segment.
"""

from __future__ import annotations

import logging
from typing import Any

from cms_admin.components.store import EntityStore, same_id
from cms_admin.core.entities import EntityId, Package, PackageKey
from cms_admin.core.envelopes import LICENSING, NESTED_PAGE

logger = logging.getLogger(__name__)


class PackageStore(EntityStore[Package]):
    record_type = Package
    label = "package"
    plural = "packages"
    collection_path = "admin/packages"
    envelope = LICENSING
    page_format = NESTED_PAGE
    create_strategy = "refresh"


class PackageKeyStore(EntityStore[PackageKey]):
    """License keys of the currently selected package."""

    record_type = PackageKey
    label = "key"
    plural = "keys"
    envelope = LICENSING
    page_format = NESTED_PAGE
    create_strategy = "refresh"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.package_id: EntityId | None = None

    @staticmethod
    def keys_path(package_id: EntityId) -> str:
        return f"admin/packages/{package_id}/keys"

    def _item_path(self, entity_id: EntityId) -> str:
        return f"admin/keys/{entity_id}"

    def fetch_list(  # type: ignore[override]
        self,
        package_id: EntityId | None,
        page: int = 1,
        page_size: int | None = None,
    ) -> None:
        if package_id is None:
            logger.debug("No package selected; skipping key fetch")
            return
        self.package_id = package_id
        self._fetch(self.keys_path(package_id), page, page_size, None)

    def refresh(self) -> None:
        if self.package_id is None:
            return
        self.fetch_list(self.package_id, self.pagination.current_page, self.pagination.page_size)

    def _refetch(self, package_id: EntityId) -> None:
        """Re-fetch scoped to package_id, keeping the page when the scope is unchanged."""
        page = 1
        if self.package_id is not None and same_id(self.package_id, package_id):
            page = self.pagination.current_page
        self.fetch_list(package_id, page, self.pagination.page_size)

    def create(  # type: ignore[override]
        self,
        package_id: EntityId | None,
        data: dict[str, Any],
    ) -> PackageKey | None:
        if package_id is None:
            logger.debug("No package selected; skipping key creation")
            return None
        payload = {**data, "package_id": package_id}
        return self._create(
            self.keys_path(package_id),
            payload,
            after=lambda _record: self._refetch(package_id),
        )

    def update(  # type: ignore[override]
        self,
        package_id: EntityId | None,
        key_id: EntityId,
        data: dict[str, Any],
    ) -> PackageKey | None:
        if package_id is None:
            logger.debug("No package selected; skipping key update")
            return None
        return self._update(self._item_path(key_id), key_id, data)

    def delete(  # type: ignore[override]
        self,
        package_id: EntityId | None,
        key_id: EntityId,
    ) -> None:
        if package_id is None:
            logger.debug("No package selected; skipping key deletion")
            return

        def after(deleted_id: EntityId) -> None:
            self._discard(deleted_id)
            self._refetch(package_id)

        self._delete(self._item_path(key_id), key_id, after=after)
