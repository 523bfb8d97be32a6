"""
EntityStore - shared engine of the per-entity stores.

Binds one domain collection to its CRUD endpoints and tracks request status
and pagination. Subclasses only declare their endpoint family, paths and
record type.

Key behaviors:
- fetch_list replaces the whole collection with the server's page; on
  failure it empties the collection, records the error and never raises
- create either re-fetches the current page or prepends the returned record,
  depending on the store's ``create_strategy``
- update merges the server's answer into the matching record in place
- delete drops the record by id (also when the server reports it missing)
- mutations without an access token raise MissingCredentials before any I/O
- mutations record the error, then re-raise
- the loading flag is always cleared in a final step

Overlapping calls are not serialized: the last write wins on the loading and
error flags and on the list contents. State is re-read after every request,
never carried across it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any, Generic, Literal, TypeVar, cast

from pydantic import ValidationError

from cms_admin.components.notifications import NotificationStore
from cms_admin.core.entities import EntityId, EntityRecord, Pagination, RequestStatus
from cms_admin.core.envelopes import MALFORMED_MESSAGE, EnvelopeFormat, PageFormat
from cms_admin.core.errors import (
    AdminClientError,
    HttpError,
    MissingCredentials,
    display_message,
)
from cms_admin.ports.http import HttpPort, TokenSource

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=EntityRecord)

CreateStrategy = Literal["refresh", "prepend"]

DEFAULT_PAGE_SIZE = 10


def same_id(left: EntityId, right: EntityId) -> bool:
    """Identifiers arrive as ints or strings depending on the endpoint."""
    return str(left) == str(right)


class EntityStore(Generic[T]):
    """Collection + request status + pagination for one entity type."""

    record_type: type[EntityRecord] = EntityRecord
    label: str = "item"
    plural: str = "items"
    collection_path: str = ""
    create_path: str | None = None
    envelope: EnvelopeFormat
    page_format: PageFormat
    filter_param: str = "q"
    create_strategy: CreateStrategy = "refresh"

    def __init__(
        self,
        http: HttpPort,
        session: TokenSource,
        notifications: NotificationStore | None = None,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._http = http
        self._session = session
        self._notifications = notifications
        self.items: list[T] = []
        self.pagination = Pagination(page_size=page_size)
        self.status = RequestStatus()
        self.filter: str | None = None

    # --- Read helpers ---

    @property
    def loading(self) -> bool:
        return self.status.loading

    @property
    def error(self) -> str | None:
        return self.status.error

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self.items))

    def get(self, entity_id: EntityId) -> T | None:
        for record in self.items:
            if same_id(record.id, entity_id):
                return record
        return None

    def ids(self) -> list[EntityId]:
        return [record.id for record in self.items]

    # --- Public operations ---

    def fetch_list(
        self,
        page: int = 1,
        page_size: int | None = None,
        filter: str | None = None,
    ) -> None:
        """Load one page; failures leave an empty collection and an error."""
        self._fetch(self.collection_path, page, page_size, filter)

    def refresh(self) -> None:
        """Re-fetch the current page with the last used filter."""
        self.fetch_list(self.pagination.current_page, self.pagination.page_size, self.filter)

    def create(self, data: dict[str, Any]) -> T | None:
        return self._create(self.create_path or self.collection_path, data)

    def update(self, entity_id: EntityId, data: dict[str, Any]) -> T | None:
        return self._update(self._item_path(entity_id), entity_id, data)

    def delete(self, entity_id: EntityId) -> None:
        self._delete(self._item_path(entity_id), entity_id)

    # --- Engine ---

    def _item_path(self, entity_id: EntityId) -> str:
        return f"{self.collection_path}/{entity_id}"

    def _require_token(self) -> None:
        if not self._session.access_token:
            raise MissingCredentials()

    def _fetch(
        self,
        path: str,
        page: int,
        page_size: int | None,
        filter: str | None,
    ) -> None:
        size = page_size if page_size is not None else self.pagination.page_size
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if size <= 0:
            raise ValueError(f"page_size must be > 0, got {size}")

        keyword = filter.strip() if filter else ""
        self.filter = keyword or None
        params: dict[str, Any] = {"page": page, "pageSize": size}
        if keyword:
            params[self.filter_param] = keyword

        self.status.loading = True
        self.status.error = None
        try:
            self._require_token()
            response = self._http.request("GET", path, params=params)
            envelope = self.envelope.unwrap(response.body, response.status_code)
            page_obj = self.page_format.parse(envelope.data, page, size, response.status_code)
            records = self._parse_records(page_obj.items, response.status_code)
            pagination = page_obj.pagination
        except AdminClientError as e:
            message = display_message(e, f"Failed to fetch {self.plural}")
            logger.warning(f"Fetching {self.plural} failed: {message}")
            self.items = []
            self.status.error = message
            self._notify("error", message)
        else:
            self.items = records
            self.pagination = pagination
            logger.info(
                f"Loaded {len(records)} {self.plural} "
                f"(page {pagination.current_page}/{pagination.total_pages}, "
                f"filter={keyword or '(none)'})"
            )
        finally:
            self.status.loading = False

    def _create(
        self,
        path: str,
        data: dict[str, Any],
        *,
        after: Callable[[T | None], None] | None = None,
    ) -> T | None:
        fallback = f"Failed to add {self.label}"
        self.status.loading = True
        self.status.error = None
        try:
            self._require_token()
            response = self._http.request("POST", path, json=data)
            envelope = self.envelope.unwrap(response.body, response.status_code)
            record = self._parse_record(envelope.data, response.status_code)
            (after or self._after_create)(record)
            self._notify(
                "success", envelope.message or f"{self.label.capitalize()} created successfully"
            )
            return record
        except AdminClientError as e:
            self._record_failure(e, fallback)
            raise
        finally:
            self.status.loading = False

    def _after_create(self, record: T | None) -> None:
        if self.create_strategy == "prepend" and record is not None:
            self.items = [record, *(r for r in self.items if not same_id(r.id, record.id))]
        else:
            self.refresh()

    def _update(
        self,
        path: str,
        entity_id: EntityId,
        data: dict[str, Any],
        *,
        method: str = "PUT",
    ) -> T | None:
        fallback = f"Failed to update {self.label}"
        self.status.loading = True
        self.status.error = None
        try:
            self._require_token()
            response = self._http.request(method, path, json=data)
            envelope = self.envelope.unwrap(response.body, response.status_code)
            returned = envelope.data if isinstance(envelope.data, dict) else None
            fields = returned if returned is not None else data
            try:
                self.items = [
                    cast(T, r.merged(fields)) if same_id(r.id, entity_id) else r
                    for r in self.items
                ]
            except ValidationError as e:
                raise HttpError(response.status_code, MALFORMED_MESSAGE) from e

            record = self.get(entity_id)
            if record is None and returned is not None:
                record = self._parse_record(returned, response.status_code)
            self._notify(
                "success", envelope.message or f"{self.label.capitalize()} updated successfully"
            )
            return record
        except AdminClientError as e:
            self._record_failure(e, fallback)
            raise
        finally:
            self.status.loading = False

    def _delete(
        self,
        path: str,
        entity_id: EntityId,
        *,
        after: Callable[[EntityId], None] | None = None,
    ) -> None:
        fallback = f"Failed to delete {self.label}"
        self.status.loading = True
        self.status.error = None
        try:
            self._require_token()
            response = self._http.request("DELETE", path)
            envelope = self.envelope.unwrap(response.body, response.status_code)
            (after or self._after_delete)(entity_id)
            self._notify(
                "success", envelope.message or f"{self.label.capitalize()} deleted successfully"
            )
        except AdminClientError as e:
            if isinstance(e, HttpError) and e.is_not_found:
                self._discard(entity_id)
            self._record_failure(e, fallback)
            raise
        finally:
            self.status.loading = False

    def _after_delete(self, entity_id: EntityId) -> None:
        self._discard(entity_id)

    def _discard(self, entity_id: EntityId) -> None:
        self.items = [r for r in self.items if not same_id(r.id, entity_id)]

    # --- Parsing / feedback ---

    def _parse_record(self, data: Any, status: int) -> T | None:
        if not isinstance(data, dict):
            return None
        try:
            return cast(T, self.record_type.model_validate(data))
        except ValidationError as e:
            raise HttpError(status, MALFORMED_MESSAGE) from e

    def _parse_records(self, raw: list[dict[str, Any]], status: int) -> list[T]:
        records: list[T] = []
        seen: set[str] = set()
        for item in raw:
            record = self._parse_record(item, status)
            if record is None or str(record.id) in seen:
                continue
            seen.add(str(record.id))
            records.append(record)
        return records

    def _record_failure(self, exc: AdminClientError, fallback: str) -> None:
        message = display_message(exc, fallback)
        logger.warning(f"{fallback}: {exc}")
        self.status.error = message
        self._notify("error", message)

    def _notify(self, kind: Literal["success", "info", "error"], message: str) -> None:
        if self._notifications is not None:
            self._notifications.add(message, kind)
