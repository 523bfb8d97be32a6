import logging
import re
from collections.abc import Callable
from typing import Any, NamedTuple, Protocol

import flet as ft

logger = logging.getLogger(__name__)

LOGIN_ROUTE = "/login"
HOME_ROUTE = "/"


class AuthState(Protocol):
    @property
    def is_authenticated(self) -> bool: ...


class RouteConfig(NamedTuple):
    # builder accepts page and **kwargs
    builder: Callable[..., ft.View]
    protected: bool


class RouteGuard:
    """Decides whether navigation may proceed, based on the session flag."""

    def __init__(self, session: AuthState, login_route: str = LOGIN_ROUTE, home_route: str = HOME_ROUTE):
        self.session = session
        self.login_route = login_route
        self.home_route = home_route

    def check(self, route: str, protected: bool) -> str | None:
        """Return the route to redirect to, or None to allow."""
        authenticated = self.session.is_authenticated
        if protected and not authenticated:
            return self.login_route
        if route == self.login_route and authenticated:
            return self.home_route
        return None


class Router:
    def __init__(self, page: ft.Page, guard: RouteGuard):
        self.page = page
        self.guard = guard
        self.routes: dict[str, RouteConfig] = {}
        # Simple dynamic routes: regex -> config
        self.dynamic_routes: dict[str, RouteConfig] = {}

    def register(
        self,
        route: str,
        builder: Callable[..., ft.View],
        protected: bool = True
    ) -> None:
        self.routes[route] = RouteConfig(builder, protected)

    def register_dynamic(
        self,
        pattern: str,
        builder: Callable[..., ft.View],
        protected: bool = True
    ) -> None:
        """Register a regex pattern route.
        Example: '^/packages/(?P<package_id>[^/]+)/keys$'
        The builder will receive regex group dict as kwargs.
        """
        self.dynamic_routes[pattern] = RouteConfig(builder, protected)

    def resolve(self, route: str) -> tuple[RouteConfig | None, dict[str, Any]]:
        config = self.routes.get(route)
        if config:
            return config, {}
        for pattern, dyn_config in self.dynamic_routes.items():
            match = re.match(pattern, route)
            if match:
                return dyn_config, match.groupdict()
        return None, {}

    def handle_route_change(self, e: ft.RouteChangeEvent) -> None:
        route = e.route or HOME_ROUTE
        logger.info(f"Navigate to: {route}")

        config, kwargs = self.resolve(route)

        if not config:
            logger.warning(f"No route found for: {route}")
            self.page.views.clear()
            self.page.views.append(
                ft.View(
                    "/404",
                    [ft.AppBar(title=ft.Text("404")), ft.Text(f"Page not found: {route}")]
                )
            )
            self.page.update()
            return

        redirect = self.guard.check(route, config.protected)
        if redirect is not None:
            logger.info(f"Access to {route} redirected to {redirect}.")
            self.page.go(redirect)
            return

        self.page.views.clear()
        try:
            view = config.builder(self.page, **kwargs)
            self.page.views.append(view)
            self.page.update()
        except TypeError as err:
            logger.error(f"Error building view for {route}: {err}")
            self.page.views.append(ft.View("/error", [ft.Text(f"Error: {err}")]))
            self.page.update()

    def view_pop(self, view: ft.View) -> None:
        self.page.views.pop()
        top_view = self.page.views[-1]
        self.page.go(top_view.route)
