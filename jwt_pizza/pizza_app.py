"""Main Textual app class."""

from __future__ import annotations

import logging
from pathlib import Path

from textual.app import App
from textual.binding import Binding

from jwt_pizza.auth_screens import LoginScreen, RegisterScreen
from jwt_pizza.config import DEBUG_LOG_PATH
from jwt_pizza.context import PizzaContext, build_context
from jwt_pizza.dashboard_screens import (
    AdminDashboardScreen,
    DashboardScreen,
    DinerDashboardScreen,
    FranchiseDashboardScreen,
)
from jwt_pizza.dashboards import Dashboard, dashboard_for
from jwt_pizza.errors import PizzaError
from jwt_pizza.info_screens import AboutScreen, DocsScreen, HistoryScreen, HomeScreen, NotFoundScreen
from jwt_pizza.models import User
from jwt_pizza.order_screens import DeliveryScreen, MenuScreen, PaymentScreen
from jwt_pizza.router import NOT_FOUND, Route, resolve
from jwt_pizza.screens import PizzaScreen

logger = logging.getLogger(__name__)

SCREENS_BY_ROUTE: dict[str, type[PizzaScreen]] = {
    "home": HomeScreen,
    "about": AboutScreen,
    "history": HistoryScreen,
    "docs": DocsScreen,
    "login": LoginScreen,
    "register": RegisterScreen,
    "menu": MenuScreen,
    "payment": PaymentScreen,
    "delivery": DeliveryScreen,
    "diner-dashboard": DinerDashboardScreen,
    "franchise-dashboard": FranchiseDashboardScreen,
    "admin-dashboard": AdminDashboardScreen,
    NOT_FOUND: NotFoundScreen,
}


def configure_debug_log(path: str = DEBUG_LOG_PATH) -> None:
    """Send package debug logs to a file; the terminal belongs to the UI."""
    package_logger = logging.getLogger("jwt_pizza")
    if any(isinstance(handler, logging.FileHandler) for handler in package_logger.handlers):
        return
    try:
        log_file = Path(path)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError as exc:
        logging.getLogger(__name__).warning("debug_log_unavailable path=%s error=%r", path, exc)
        return
    handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)


class PizzaApp(App):
    """A Textual storefront for ordering pizza from the JWT Pizza service."""

    TITLE = "JWT Pizza"
    SUB_TITLE = "The web's best pizza"

    CSS = """
    #nav {
        height: 1;
        padding: 0 1;
        background: $panel;
    }

    #main {
        height: 1fr;
        border: round $primary;
        padding: 1;
    }

    #contentinfo {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }

    .heading {
        text-style: bold;
        color: #d97706;
        margin-bottom: 1;
    }

    .section {
        text-style: bold;
        margin-top: 1;
    }

    .status {
        margin-top: 1;
    }

    .status.error {
        color: #ffb3b3;
    }

    .row, .filter, .pager, #payment-buttons, #delivery-buttons {
        height: auto;
    }

    .row-label {
        width: 1fr;
    }

    .pizza-item {
        width: 100%;
    }
    """

    BINDINGS = [
        ("g", "navigate('/')", "Home"),
        ("o", "navigate('/menu')", "Order"),
        ("a", "navigate('/about')", "About"),
        ("h", "navigate('/history')", "History"),
        ("question_mark", "navigate('/docs')", "Docs"),
        ("d", "dashboard", "Dashboard"),
        ("f", "navigate('/franchise-dashboard')", "Franchise"),
        ("m", "navigate('/admin-dashboard')", "Admin"),
        ("l", "login_or_logout", "Login/Logout"),
        ("r", "navigate('/register')", "Register"),
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    def __init__(self, context: PizzaContext | None = None, initial_path: str = "/") -> None:
        super().__init__()
        self.context = context or build_context()
        self.initial_path = initial_path
        self.current_route: Route | None = None
        self._unsubscribe = self.context.session.subscribe(self._on_session_change)

    async def on_mount(self) -> None:
        try:
            await self.context.session.restore()
        except PizzaError as exc:
            logger.warning("session_restore_failed error=%r", exc)
        self.navigate(self.initial_path)

    async def on_unmount(self) -> None:
        self._unsubscribe()
        await self.context.aclose()

    def _on_session_change(self, user: User | None) -> None:
        logger.debug("session_change user_id=%s", user.id if user is not None else None)
        screen = self.screen
        if isinstance(screen, PizzaScreen) and screen.is_mounted:
            screen.refresh_nav()

    def navigate(self, path: str, dashboard: Dashboard | None = None) -> None:
        route = resolve(path)
        logger.debug("navigate path=%s view=%s", path, route.name)
        if route.name == "logout":
            self.run_worker(self.action_logout(), exclusive=True)
            return
        if route.name == "admin-dashboard":
            user = self.context.session.user
            if user is None or not user.is_admin:
                route = Route(name=NOT_FOUND, path=route.path)
        self.current_route = route
        screen_type = SCREENS_BY_ROUTE[route.name]
        if dashboard is not None and issubclass(screen_type, DashboardScreen):
            screen = screen_type(route, dashboard=dashboard)
        else:
            screen = screen_type(route)
        # The first routed screen lands on top of Textual's default screen.
        if isinstance(self.screen, PizzaScreen):
            self.switch_screen(screen)
        else:
            self.push_screen(screen)

    def action_navigate(self, path: str) -> None:
        self.navigate(path)

    def action_dashboard(self) -> None:
        user = self.context.session.user
        if user is None:
            self.navigate("/login")
            return
        dashboard = dashboard_for(self.context.service, user)
        self.navigate(dashboard.path, dashboard=dashboard)

    async def action_login_or_logout(self) -> None:
        if self.context.session.user is None:
            self.navigate("/login")
            return
        await self.action_logout()

    async def action_logout(self) -> None:
        await self.context.session.logout()
        self.navigate("/")
