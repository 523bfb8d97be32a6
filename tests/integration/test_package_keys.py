"""
License keys scoped to a parent package.
"""

from __future__ import annotations

import pytest

from cms_admin.core.errors import HttpError
from cms_admin.ui.context import AdminContext
from tests.conftest import FakeBackend


class TestScope:
    def test_list_scoped_to_package(
        self, logged_in_ctx: AdminContext, backend: FakeBackend
    ) -> None:
        keys = logged_in_ctx.package_keys

        keys.fetch_list(1)

        assert keys.package_id == 1
        assert [k.content for k in keys] == ["AAAA-1111", "AAAA-2222"]
        method, path, params, _ = backend.last_request()
        assert (method, path) == ("GET", "/api/admin/packages/1/keys")
        assert params == {"page": "1", "pageSize": "10"}

    @pytest.mark.parametrize("operation", ["fetch", "create", "update", "delete"])
    def test_no_package_is_noop(
        self, logged_in_ctx: AdminContext, backend: FakeBackend, operation: str
    ) -> None:
        keys = logged_in_ctx.package_keys
        before = backend.request_count()

        if operation == "fetch":
            keys.fetch_list(None)
        elif operation == "create":
            assert keys.create(None, {"content": "X"}) is None
        elif operation == "update":
            assert keys.update(None, 11, {"status": "revoked"}) is None
        else:
            keys.delete(None, 11)

        assert backend.request_count() == before
        assert keys.error is None

    def test_refresh_without_package_is_noop(
        self, logged_in_ctx: AdminContext, backend: FakeBackend
    ) -> None:
        before = backend.request_count()
        logged_in_ctx.package_keys.refresh()
        assert backend.request_count() == before


class TestMutations:
    def test_create_refetches_scope(
        self, logged_in_ctx: AdminContext, backend: FakeBackend
    ) -> None:
        keys = logged_in_ctx.package_keys
        keys.fetch_list(2)

        created = keys.create(2, {"content": "BBBB-2222"})

        assert created is not None and created.package_id == 2
        assert [k.content for k in keys] == ["BBBB-1111", "BBBB-2222"]
        assert [(m, p) for m, p, _, _ in backend.requests[-2:]] == [
            ("POST", "/api/admin/packages/2/keys"),
            ("GET", "/api/admin/packages/2/keys"),
        ]

    def test_create_for_other_package_switches_scope(self, logged_in_ctx: AdminContext) -> None:
        keys = logged_in_ctx.package_keys
        keys.fetch_list(1)

        keys.create(2, {"content": "BBBB-3333"})

        assert keys.package_id == 2
        assert keys.pagination.current_page == 1
        assert "BBBB-3333" in [k.content for k in keys]

    def test_update_uses_key_endpoint(
        self, logged_in_ctx: AdminContext, backend: FakeBackend
    ) -> None:
        keys = logged_in_ctx.package_keys
        keys.fetch_list(1)

        keys.update(1, 12, {"status": "revoked"})

        method, path, _, _ = backend.last_request()
        assert (method, path) == ("PUT", "/api/admin/keys/12")
        assert keys.get(12).status == "revoked"
        assert keys.get(12).is_purchased is True

    def test_delete_discards_then_refetches(
        self, logged_in_ctx: AdminContext, backend: FakeBackend
    ) -> None:
        keys = logged_in_ctx.package_keys
        keys.fetch_list(1)

        keys.delete(1, 11)

        assert keys.ids() == [12]
        assert [(m, p) for m, p, _, _ in backend.requests[-2:]] == [
            ("DELETE", "/api/admin/keys/11"),
            ("GET", "/api/admin/packages/1/keys"),
        ]

    def test_delete_missing_key(self, logged_in_ctx: AdminContext) -> None:
        keys = logged_in_ctx.package_keys
        keys.fetch_list(1)

        with pytest.raises(HttpError):
            keys.delete(1, 999)

        assert keys.error == "Key not found"
        assert keys.ids() == [11, 12]
