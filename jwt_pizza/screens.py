"""Shared screen layout: navigation bar, heading, body and status line."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.screen import Screen
from textual.widgets import Footer, Header, Static

from jwt_pizza.context import PizzaContext
from jwt_pizza.errors import PizzaError
from jwt_pizza.models import User
from jwt_pizza.rendering import format_initials_badge
from jwt_pizza.router import Route

if TYPE_CHECKING:
    from jwt_pizza.pizza_app import PizzaApp

logger = logging.getLogger(__name__)

FOOTER_TEXT = "If you want to support the pizza revolution, order a pie today. © JWT Pizza"


class NavBar(Static):
    """Top navigation: view shortcuts plus the login or initials badge."""

    def show(self, user: User | None) -> None:
        text = Text()
        text.append("JWT Pizza", style="bold #d97706")
        text.append("   [o] Order  [a] About  [h] History  [?] Docs")
        if user is not None:
            text.append("  [d] Dashboard")
            if user.is_franchisee:
                text.append("  [f] Franchise")
            if user.is_admin:
                text.append("  [m] Admin")
        text.append("   ")
        text.append_text(format_initials_badge(user))
        self.update(text)


class PizzaScreen(Screen):
    """Base for every routed view.

    Subclasses supply ``HEADING``, ``compose_body`` and an async ``load``;
    handled failures from ``load`` land on the status line instead of
    unwinding the app.
    """

    HEADING = ""

    def __init__(self, route: Route | None = None) -> None:
        super().__init__()
        self.route = route
        self.status_message = ""

    @property
    def pizza_app(self) -> PizzaApp:
        return cast("PizzaApp", self.app)

    @property
    def context(self) -> PizzaContext:
        return self.pizza_app.context

    def compose(self) -> ComposeResult:
        yield Header()
        yield NavBar(id="nav")
        with VerticalScroll(id="main"):
            yield Static(self.HEADING, id="heading", classes="heading")
            yield from self.compose_body()
            yield Static(id="status", classes="status")
        yield Static(FOOTER_TEXT, id="contentinfo")
        yield Footer()

    def compose_body(self) -> ComposeResult:
        yield from ()

    async def on_mount(self) -> None:
        self.refresh_nav()
        try:
            await self.load()
        except PizzaError as exc:
            logger.debug("view_load_failed view=%s error=%r", type(self).__name__, exc)
            self.show_status(exc.message, error=True)

    async def load(self) -> None:
        return None

    def refresh_nav(self) -> None:
        self.query_one("#nav", NavBar).show(self.context.session.user)

    def set_heading(self, text: str) -> None:
        self.query_one("#heading", Static).update(text)

    def show_status(self, message: str, error: bool = False) -> None:
        self.status_message = message
        status = self.query_one("#status", Static)
        status.set_class(error, "error")
        status.update(message)

    def navigate(self, path: str) -> None:
        self.pizza_app.navigate(path)
