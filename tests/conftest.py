"""
Shared fixtures: an in-process fake of the REST backend.

The fake speaks the three envelope families the console deals with
(admin: result/msg, legacy: success/message, licensing: status/message) and
records every request it receives, so tests can assert that nothing was
sent over the wire.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from cms_admin.adapters.token_storage import InMemoryTokenStorage
from cms_admin.app_shell.config import Settings
from cms_admin.ui.context import AdminContext

BASE_URL = "http://testserver/api"
ADMIN_EMAIL = "a@b.com"
ADMIN_PASSWORD = "x"
ADMIN_TOKEN = "T"
ADMIN_PROFILE: dict[str, Any] = {"id": 1, "email": ADMIN_EMAIL, "name": "Admin"}

FAMILIES = {
    "admin": ("result", "msg"),
    "legacy": ("success", "message"),
    "licensing": ("status", "message"),
}


def _envelope(family: str, ok: bool, message: str | None = None, data: Any = None) -> dict:
    ok_field, message_field = FAMILIES[family]
    body: dict[str, Any] = {ok_field: ok, message_field: message or ""}
    if data is not None:
        body["data"] = data
    return body


class FakeBackend:
    """In-memory REST backend with FastAPI routes."""

    def __init__(self) -> None:
        self.requests: list[tuple[str, str, dict[str, str], str | None]] = []
        self.profile: dict[str, Any] = dict(ADMIN_PROFILE)
        self.login_override: dict[str, Any] | None = None
        self.profile_override: tuple[int, dict[str, Any]] | None = None
        # list-shaped endpoints return everything unless this is set
        self.paginate_lists = False
        self._ids = count(1000)

        self.articles: list[dict[str, Any]] = [
            {"id": i, "title": f"Article {i}", "status": "draft", "views": i * 10}
            for i in range(1, 26)
        ]
        self.categories: list[dict[str, Any]] = [
            {"id": 1, "name": "Technology", "description": "Tech news"},
            {"id": 2, "name": "Business", "description": "Markets"},
            {"id": 3, "name": "Sports", "description": ""},
        ]
        self.tags: list[dict[str, Any]] = [
            {"_id": "t1", "name": "python", "slug": "python", "bgColor": "#fff"},
            {"_id": "t2", "name": "rust", "slug": "rust", "bgColor": "#000"},
        ]
        self.users: list[dict[str, Any]] = [
            {"_id": f"u{i}", "email": f"user{i}@example.com", "firstName": f"User{i}"}
            for i in range(1, 13)
        ]
        self.packages: list[dict[str, Any]] = [
            {"id": 1, "name": "Basic", "price": 9.9},
            {"id": 2, "name": "Pro", "price": 29.9},
        ]
        self.keys: list[dict[str, Any]] = [
            {"id": 11, "package_id": 1, "content": "AAAA-1111", "status": "active", "is_purchased": False},
            {"id": 12, "package_id": 1, "content": "AAAA-2222", "status": "active", "is_purchased": True},
            {"id": 21, "package_id": 2, "content": "BBBB-1111", "status": "active", "is_purchased": False},
        ]

        self.app = self._build_app()

    # --- Inspection helpers ---

    def request_count(self) -> int:
        return len(self.requests)

    def last_request(self) -> tuple[str, str, dict[str, str], str | None]:
        return self.requests[-1]

    def next_id(self) -> int:
        return next(self._ids)

    # --- App ---

    def _authorized(self, request: Request) -> bool:
        return request.headers.get("authorization") == f"Bearer {ADMIN_TOKEN}"

    def _build_app(self) -> FastAPI:
        app = FastAPI()

        @app.middleware("http")
        async def record(request: Request, call_next: Callable) -> Any:
            self.requests.append(
                (
                    request.method,
                    request.url.path,
                    dict(request.query_params),
                    request.headers.get("authorization"),
                )
            )
            return await call_next(request)

        @app.post("/api/v1/auth/login")
        async def login(request: Request) -> Any:
            if self.login_override is not None:
                return self.login_override
            body = await request.json()
            if body.get("email") == ADMIN_EMAIL and body.get("password") == ADMIN_PASSWORD:
                return _envelope(
                    "legacy",
                    True,
                    "Login successful",
                    {"token": ADMIN_TOKEN, "user": self.profile},
                )
            return _envelope("legacy", False, "Invalid credentials")

        @app.get("/api/v1/auth/me")
        async def me(request: Request) -> Any:
            if self.profile_override is not None:
                status, body = self.profile_override
                return JSONResponse(body, status_code=status)
            if not self._authorized(request):
                return JSONResponse(_envelope("legacy", False, "Unauthorized"), status_code=401)
            return _envelope("legacy", True, None, self.profile)

        self._mount(app, "/api/admin/articles", lambda: self.articles, "admin", "items",
                    id_field="id", filter_param="title", filter_field="title", label="Article")
        self._mount(app, "/api/admin/categories", lambda: self.categories, "admin", "items",
                    id_field="id", filter_param="q", filter_field="name", label="Category")
        self._mount(app, "/api/tags", lambda: self.tags, "legacy", "list",
                    id_field="_id", filter_param="q", filter_field="name", label="Tag")
        self._mount(app, "/api/users", lambda: self.users, "legacy", "list",
                    id_field="_id", filter_param="q", filter_field="email", label="User",
                    create_path="/api/users/register")
        self._mount(app, "/api/admin/packages", lambda: self.packages, "licensing", "nested",
                    id_field="id", filter_param="q", filter_field="name", label="Package")

        @app.patch("/api/admin/articles/{item_id}/status")
        async def article_status(item_id: str, request: Request) -> Any:
            if not self._authorized(request):
                return JSONResponse(_envelope("admin", False, "Unauthorized"), status_code=401)
            body = await request.json()
            for article in self.articles:
                if str(article["id"]) == item_id:
                    article["status"] = body["status"]
                    return _envelope("admin", True, "Article status updated", dict(article))
            return JSONResponse(_envelope("admin", False, "Article not found"), status_code=404)

        @app.get("/api/admin/packages/{package_id}/keys")
        async def list_keys(package_id: str, request: Request) -> Any:
            if not self._authorized(request):
                return JSONResponse(_envelope("licensing", False, "Unauthorized"), status_code=401)
            keys = [k for k in self.keys if str(k["package_id"]) == package_id]
            return _envelope("licensing", True, None, self._paginate(keys, request, "nested"))

        @app.post("/api/admin/packages/{package_id}/keys")
        async def create_key(package_id: str, request: Request) -> Any:
            if not self._authorized(request):
                return JSONResponse(_envelope("licensing", False, "Unauthorized"), status_code=401)
            body = await request.json()
            key = {"id": self.next_id(), "status": "active", "is_purchased": False, **body}
            self.keys.append(key)
            return _envelope("licensing", True, "Key created successfully", key)

        @app.api_route("/api/admin/keys/{key_id}", methods=["PUT", "DELETE"])
        async def key_item(key_id: str, request: Request) -> Any:
            if not self._authorized(request):
                return JSONResponse(_envelope("licensing", False, "Unauthorized"), status_code=401)
            for key in self.keys:
                if str(key["id"]) == key_id:
                    if request.method == "DELETE":
                        self.keys.remove(key)
                        return _envelope("licensing", True, "Key deleted successfully")
                    key.update(await request.json())
                    return _envelope("licensing", True, "Key updated", dict(key))
            return JSONResponse(_envelope("licensing", False, "Key not found"), status_code=404)

        return app

    def _paginate(self, records: list[dict[str, Any]], request: Request, shape: str) -> Any:
        page = int(request.query_params.get("page", 1))
        size = int(request.query_params.get("pageSize", 10))
        if shape == "list":
            if self.paginate_lists:
                return records[(page - 1) * size: page * size]
            return records

        total = len(records)
        total_pages = math.ceil(total / size) if total else 0
        items = records[(page - 1) * size: page * size]
        if shape == "items":
            return {
                "items": items,
                "page": page,
                "pageSize": size,
                "totalItems": total,
                "totalPages": total_pages,
            }
        return {
            "data": items,
            "pagination": {
                "page": page,
                "limit": size,
                "total": total,
                "totalPages": total_pages,
                "hasNext": page < total_pages,
                "hasPrev": page > 1,
            },
        }

    def _mount(
        self,
        app: FastAPI,
        prefix: str,
        records: Callable[[], list[dict[str, Any]]],
        family: str,
        shape: str,
        *,
        id_field: str,
        filter_param: str,
        filter_field: str,
        label: str,
        create_path: str | None = None,
    ) -> None:
        def denied() -> JSONResponse:
            return JSONResponse(_envelope(family, False, "Unauthorized"), status_code=401)

        def not_found() -> JSONResponse:
            return JSONResponse(_envelope(family, False, f"{label} not found"), status_code=404)

        async def list_items(request: Request) -> Any:
            if not self._authorized(request):
                return denied()
            found = records()
            keyword = request.query_params.get(filter_param)
            if keyword:
                found = [r for r in found if keyword.lower() in str(r.get(filter_field, "")).lower()]
            return _envelope(family, True, None, self._paginate(found, request, shape))

        async def create_item(request: Request) -> Any:
            if not self._authorized(request):
                return denied()
            body = await request.json()
            record = {id_field: self.next_id(), **body}
            records().insert(0, record)
            return _envelope(family, True, f"{label} created successfully", record)

        async def update_item(request: Request) -> Any:
            if not self._authorized(request):
                return denied()
            item_id = request.path_params["item_id"]
            for record in records():
                if str(record[id_field]) == item_id:
                    record.update(await request.json())
                    return _envelope(family, True, f"{label} updated successfully", dict(record))
            return not_found()

        async def delete_item(request: Request) -> Any:
            if not self._authorized(request):
                return denied()
            item_id = request.path_params["item_id"]
            for record in records():
                if str(record[id_field]) == item_id:
                    records().remove(record)
                    return _envelope(family, True, f"{label} deleted successfully")
            return not_found()

        app.add_api_route(prefix, list_items, methods=["GET"])
        app.add_api_route(create_path or prefix, create_item, methods=["POST"])
        app.add_api_route(prefix + "/{item_id}", update_item, methods=["PUT"])
        app.add_api_route(prefix + "/{item_id}", delete_item, methods=["DELETE"])


# --- Fixtures ---


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def api_client(backend: FakeBackend) -> Iterator[TestClient]:
    client = TestClient(backend.app, base_url=BASE_URL)
    yield client
    client.close()


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base_url=BASE_URL, page_size=10)


@pytest.fixture
def token_storage() -> InMemoryTokenStorage:
    return InMemoryTokenStorage()


@pytest.fixture
def ctx(
    settings: Settings,
    api_client: TestClient,
    token_storage: InMemoryTokenStorage,
) -> Iterator[AdminContext]:
    context = AdminContext.create(settings, client=api_client, storage=token_storage)
    yield context
    context.close()


@pytest.fixture
def logged_in_ctx(ctx: AdminContext) -> AdminContext:
    result = ctx.session.login(ADMIN_EMAIL, ADMIN_PASSWORD)
    assert result.success, result.error
    return ctx
