"""
Response envelope adapters.

The backend wraps every payload in an envelope, but the field names differ
between endpoint families:

- admin:     {"result": bool, "msg": str, "data": ...}
- legacy:    {"success": bool, "message": str, "data": ...}
- licensing: {"status": bool, "message": str, "data": ...}

Each family gets one ``EnvelopeFormat``; everything past this module only
sees the canonical ``Envelope``. List payloads come in three page shapes,
handled by the ``PageFormat`` implementations below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from .entities import Pagination
from .errors import HttpError

MALFORMED_MESSAGE = "Malformed response"


@dataclass(frozen=True)
class Envelope:
    """Canonical envelope used inside the client."""

    ok: bool
    message: str | None
    data: Any


@dataclass(frozen=True)
class EnvelopeFormat:
    """Field naming of one endpoint family."""

    name: str
    ok_field: str
    message_field: str
    data_field: str = "data"

    def parse(self, body: Any, status: int = 200) -> Envelope:
        if not isinstance(body, dict) or self.ok_field not in body:
            raise HttpError(status, MALFORMED_MESSAGE)
        message = body.get(self.message_field)
        return Envelope(
            ok=bool(body[self.ok_field]),
            message=str(message) if message else None,
            data=body.get(self.data_field),
        )

    def unwrap(self, body: Any, status: int = 200) -> Envelope:
        """Parse and raise ``HttpError`` when the envelope reports failure."""
        envelope = self.parse(body, status)
        if not envelope.ok:
            raise HttpError(status, envelope.message)
        return envelope


ADMIN = EnvelopeFormat(name="admin", ok_field="result", message_field="msg")
LEGACY = EnvelopeFormat(name="legacy", ok_field="success", message_field="message")
LICENSING = EnvelopeFormat(name="licensing", ok_field="status", message_field="message")


# --- Page shapes ---


@dataclass
class Page:
    items: list[dict[str, Any]]
    pagination: Pagination


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_records(value: Any, status: int) -> list[dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise HttpError(status, MALFORMED_MESSAGE)
    return value


class PageFormat(Protocol):
    def parse(self, data: Any, page: int, page_size: int, status: int = 200) -> Page: ...


class ItemsPageFormat:
    """``{"items": [...], "page", "pageSize", "totalItems", "totalPages"}``."""

    def parse(self, data: Any, page: int, page_size: int, status: int = 200) -> Page:
        if not isinstance(data, dict):
            raise HttpError(status, MALFORMED_MESSAGE)
        items = _as_records(data.get("items"), status)
        size = _as_int(data.get("pageSize"), page_size) or page_size
        total_items = _as_int(data.get("totalItems"), len(items))
        total_pages = _as_int(data.get("totalPages"), -1)
        if total_pages < 0:
            return Page(items, Pagination.for_total(_as_int(data.get("page"), page), size, total_items))
        current = _as_int(data.get("page"), page)
        return Page(
            items,
            Pagination(
                current_page=max(current, 1),
                page_size=size,
                total_items=max(total_items, 0),
                total_pages=total_pages,
                has_next=current < total_pages,
                has_prev=current > 1,
            ),
        )


class ListPageFormat:
    """
    Bare list of records, without totals.

    A list longer than the page means the server ignored paging: the whole
    collection came back and is sliced locally. Otherwise the list is the
    requested page itself; the requested page is kept and the totals are
    the lower bound seen so far. A full page may have a successor.
    """

    def parse(self, data: Any, page: int, page_size: int, status: int = 200) -> Page:
        records = _as_records(data, status)
        if len(records) > page_size:
            pagination = Pagination.for_total(page, page_size, len(records))
            start = (pagination.current_page - 1) * page_size
            return Page(records[start:start + page_size], pagination)

        full = len(records) == page_size
        if full:
            total_pages = page + 1
        elif records or page > 1:
            total_pages = page
        else:
            total_pages = 0
        return Page(
            records,
            Pagination(
                current_page=page,
                page_size=page_size,
                total_items=(page - 1) * page_size + len(records),
                total_pages=total_pages,
                has_next=full,
                has_prev=page > 1,
            ),
        )


class NestedPageFormat:
    """``{"data": [...], "pagination": {"page", "limit", "total", "totalPages", ...}}``."""

    def parse(self, data: Any, page: int, page_size: int, status: int = 200) -> Page:
        if not isinstance(data, dict):
            raise HttpError(status, MALFORMED_MESSAGE)
        items = _as_records(data.get("data"), status)
        meta = data.get("pagination") or {}
        if not isinstance(meta, dict):
            raise HttpError(status, MALFORMED_MESSAGE)
        current = _as_int(meta.get("page"), page)
        total_pages = _as_int(meta.get("totalPages"), 0)
        return Page(
            items,
            Pagination(
                current_page=max(current, 1),
                page_size=_as_int(meta.get("limit"), page_size) or page_size,
                total_items=max(_as_int(meta.get("total"), len(items)), 0),
                total_pages=max(total_pages, 0),
                has_next=bool(meta.get("hasNext", current < total_pages)),
                has_prev=bool(meta.get("hasPrev", current > 1)),
            ),
        )


ITEMS_PAGE = ItemsPageFormat()
LIST_PAGE = ListPageFormat()
NESTED_PAGE = NestedPageFormat()
