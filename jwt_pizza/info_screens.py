"""Informational views: home, about, history, API docs and not-found."""

from __future__ import annotations

import json

from rich.text import Text
from textual.app import ComposeResult
from textual.widgets import Button, Static

from jwt_pizza.models import ApiDocs
from jwt_pizza.screens import PizzaScreen


class HomeScreen(PizzaScreen):
    HEADING = "The web's best pizza"

    def compose_body(self) -> ComposeResult:
        yield Static("Pizza is an absolute delight that brings joy to people of all ages.", classes="body")
        yield Button("Order now", id="order-now", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "order-now":
            self.navigate("/menu")


class AboutScreen(PizzaScreen):
    HEADING = "The secret sauce"

    def compose_body(self) -> ComposeResult:
        yield Static(
            "At JWT Pizza, our amazing employees are the secret behind our delicious pizzas. "
            "They craft authentic Italian pizza with passion in every slice.",
            classes="body",
        )


class HistoryScreen(PizzaScreen):
    HEADING = "Mama Rucci, my my"

    def compose_body(self) -> ComposeResult:
        yield Static(
            "It all started in Mama Rucci's kitchen, where a secret family recipe for dough "
            "turned into the pizza the whole town lined up for.",
            classes="body",
        )


class NotFoundScreen(PizzaScreen):
    HEADING = "Oops"

    def compose_body(self) -> ComposeResult:
        path = self.route.path if self.route is not None else ""
        yield Static(
            f"It looks like we have dropped a pizza on the floor. Please try another page. ({path})",
            classes="body",
        )


def format_docs(docs: ApiDocs) -> Text:
    """Render the API catalog entry by entry."""
    text = Text()
    text.append(f"version {docs.version}\n", style="dim")
    for endpoint in docs.endpoints:
        text.append("\n")
        if endpoint.requires_auth:
            text.append("🔐 ")
        text.append(f"[{endpoint.method}] {endpoint.path}", style="bold")
        text.append(f"\n{endpoint.description}\n")
        if endpoint.example:
            text.append(f"Example: {endpoint.example}\n", style="italic")
        if endpoint.response is not None:
            text.append(f"Response: {json.dumps(endpoint.response)}\n", style="dim")
    return text


class DocsScreen(PizzaScreen):
    HEADING = "JWT Pizza API"

    def compose_body(self) -> ComposeResult:
        yield Static(id="endpoints")

    async def load(self) -> None:
        self.docs = await self.context.service.get_docs()
        self.query_one("#endpoints", Static).update(format_docs(self.docs))
