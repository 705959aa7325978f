"""Login and registration views."""

from __future__ import annotations

import logging

from textual.app import ComposeResult
from textual.widgets import Button, Input, Static

from jwt_pizza.errors import AuthError
from jwt_pizza.screens import PizzaScreen

logger = logging.getLogger(__name__)


class AuthScreen(PizzaScreen):
    """Shared submit handling; subclasses only differ in fields and the call made."""

    SWITCH_PATH = "/"

    def field(self, key: str) -> str:
        return self.query_one(f"#{key}", Input).value.strip()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.query_one("#submit", Button).press()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "switch":
            self.navigate(self.SWITCH_PATH)
            return
        if event.button.id != "submit":
            return
        try:
            await self.authenticate()
        except AuthError as exc:
            self.show_status(exc.message, error=True)
            return
        self.finish()

    async def authenticate(self) -> None:
        raise NotImplementedError

    def finish(self) -> None:
        """Resume a pending checkout if one brought us here, otherwise go home."""
        intent = self.context.checkout.consume_intent()
        if intent is not None:
            logger.debug("resume_intent path=%s", intent.path)
            self.navigate(intent.path)
            return
        self.navigate("/")


class LoginScreen(AuthScreen):
    HEADING = "Welcome back"
    SWITCH_PATH = "/register"

    def compose_body(self) -> ComposeResult:
        yield Input(placeholder="Email address", id="email")
        yield Input(placeholder="Password", password=True, id="password")
        yield Button("Login", id="submit", variant="primary")
        yield Static("Are you new?")
        yield Button("Register instead", id="switch")

    async def authenticate(self) -> None:
        await self.context.session.login(self.field("email"), self.field("password"))


class RegisterScreen(AuthScreen):
    HEADING = "Welcome to the party"
    SWITCH_PATH = "/login"

    def compose_body(self) -> ComposeResult:
        yield Input(placeholder="Full name", id="name")
        yield Input(placeholder="Email address", id="email")
        yield Input(placeholder="Password", password=True, id="password")
        yield Button("Register", id="submit", variant="primary")
        yield Static("Already have an account?")
        yield Button("Login instead", id="switch")

    async def authenticate(self) -> None:
        name = self.field("name")
        if not name:
            raise AuthError("Full name is required")
        await self.context.session.register(name, self.field("email"), self.field("password"))
