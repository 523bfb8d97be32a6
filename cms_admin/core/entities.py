from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Literal
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

# --- Enums / Literals ---
AuthStatus = Literal["anonymous", "authenticating", "authenticated", "auth_failed"]
NotificationKind = Literal["success", "info", "error"]
NOTIFICATION_KINDS: tuple[str, ...] = ("success", "info", "error")

EntityId = int | str


# --- Session ---


class Profile(BaseModel):
    """Current admin profile as returned by the server."""

    model_config = ConfigDict(extra="allow")

    id: EntityId | None = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    email: str | None = None


# --- Pagination / Status ---


class Pagination(BaseModel):
    current_page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, gt=0)
    total_items: int = Field(default=0, ge=0)
    total_pages: int = Field(default=0, ge=0)
    has_next: bool = False
    has_prev: bool = False

    @model_validator(mode="after")
    def _clamp_current_page(self) -> Pagination:
        upper = max(self.total_pages, 1)
        if self.current_page > upper:
            self.current_page = upper
        return self

    @classmethod
    def for_total(cls, page: int, page_size: int, total_items: int) -> Pagination:
        total_pages = math.ceil(total_items / page_size) if total_items else 0
        return cls(
            current_page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class RequestStatus(BaseModel):
    loading: bool = False
    error: str | None = None


# --- Notifications ---


class Notification(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    message: str
    kind: NotificationKind = "info"
    created_at: datetime
    read: bool = False
    link: str | None = None


# --- Entity records ---
# Records are a cache of the server of record: unknown fields are kept as-is.


class EntityRecord(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: EntityId

    def merged(self, fields: dict[str, Any]) -> EntityRecord:
        """Return a copy with ``fields`` applied, keeping the identifier."""
        data = self.model_dump(by_alias=True, exclude={"id"})
        data.update({k: v for k, v in fields.items() if k not in ("id", "_id")})
        return type(self).model_validate({"id": self.id, **data})


class Article(EntityRecord):
    title: str = ""
    summary: str | None = None
    content: str | None = None
    category: Any = None
    tags: list[Any] = Field(default_factory=list)
    status: str | None = None
    published_at: str | None = Field(default=None, alias="publishedAt")
    views: int | None = None


class Category(EntityRecord):
    name: str = ""
    description: str | None = None


class Tag(EntityRecord):
    id: EntityId = Field(alias="_id")
    name: str = ""
    slug: str | None = None
    bg_color: str | None = Field(default=None, alias="bgColor")
    text_color: str | None = Field(default=None, alias="textColor")


class User(EntityRecord):
    id: EntityId = Field(alias="_id")
    email: str = ""
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    role: str | None = None
    is_active: bool | None = Field(default=None, alias="isActive")


class Package(EntityRecord):
    name: str = ""
    price: float | None = None
    created_at: str | None = None


class PackageKey(EntityRecord):
    package_id: EntityId | None = None
    content: str = ""
    status: str | None = None
    is_purchased: bool = False
    created_at: str | None = None
