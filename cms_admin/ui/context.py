from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from cms_admin.adapters.clock import SystemClock
from cms_admin.adapters.http_client import HttpClient
from cms_admin.adapters.token_storage import FileTokenStorage
from cms_admin.app_shell.config import Settings
from cms_admin.components.auth import SessionStore
from cms_admin.components.content import ArticleStore, CategoryStore, TagStore
from cms_admin.components.notifications import NotificationStore
from cms_admin.components.packages import PackageKeyStore, PackageStore
from cms_admin.components.store import EntityStore
from cms_admin.components.users import UserStore
from cms_admin.ports.clock import ClockPort
from cms_admin.ports.storage import TokenStoragePort

logger = logging.getLogger(__name__)


@dataclass
class AdminContext:
    """
    Every store of the admin console, built once per process.

    UI code receives the context explicitly instead of reaching for
    module-level singletons.
    """

    settings: Settings
    http: HttpClient
    session: SessionStore
    notifications: NotificationStore
    articles: ArticleStore
    categories: CategoryStore
    tags: TagStore
    users: UserStore
    packages: PackageStore
    package_keys: PackageKeyStore

    @classmethod
    def create(
        cls,
        settings: Settings,
        *,
        client: httpx.Client | None = None,
        storage: TokenStoragePort | None = None,
        clock: ClockPort | None = None,
    ) -> AdminContext:
        # Adapters
        http = HttpClient(settings.api_base_url, timeout=settings.request_timeout, client=client)
        storage = storage or FileTokenStorage(settings.token_path)
        notifications = NotificationStore(clock or SystemClock())

        # Session owns the token; the HTTP adapter only reads it
        session = SessionStore(http, storage, notifications)
        http.bind_token_source(session)
        page_size = settings.page_size

        return cls(
            settings=settings,
            http=http,
            session=session,
            notifications=notifications,
            articles=ArticleStore(http, session, notifications, page_size=page_size),
            categories=CategoryStore(http, session, notifications, page_size=page_size),
            tags=TagStore(http, session, notifications, page_size=page_size),
            users=UserStore(http, session, notifications, page_size=page_size),
            packages=PackageStore(http, session, notifications, page_size=page_size),
            package_keys=PackageKeyStore(http, session, notifications, page_size=page_size),
        )

    def entity_stores(self) -> dict[str, EntityStore]:
        return {
            "articles": self.articles,
            "categories": self.categories,
            "tags": self.tags,
            "users": self.users,
            "packages": self.packages,
        }

    def bootstrap(self) -> bool:
        """Probe the persisted token; True when the session is authenticated."""
        authenticated = self.session.restore()
        logger.info(f"Startup session check: {'authenticated' if authenticated else 'anonymous'}")
        return authenticated

    def close(self) -> None:
        self.http.close()
