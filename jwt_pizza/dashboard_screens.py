"""Diner, franchisee and admin dashboard views."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widget import Widget
from textual.widgets import Button, Input, Static

from jwt_pizza.confirm_modal import ConfirmModal
from jwt_pizza.dashboards import AdminDashboard, Dashboard, DinerDashboard, FranchiseeDashboard
from jwt_pizza.errors import AuthError, PizzaError
from jwt_pizza.form_modal import FormField, FormModal
from jwt_pizza.models import Franchise, Store, User
from jwt_pizza.rendering import format_order_summary, format_role_tags, format_store_row, format_user_row
from jwt_pizza.router import Route
from jwt_pizza.screens import PizzaScreen

logger = logging.getLogger(__name__)


async def replace_rows(container: Widget, rows: list[Widget], empty_text: str) -> None:
    await container.remove_children()
    if not rows:
        await container.mount(Static(empty_text, classes="empty"))
        return
    await container.mount(*rows)


class DashboardScreen(PizzaScreen):
    """Builds its dashboard for the signed-in user, or reuses the one it was handed."""

    def __init__(self, route: Route | None = None, dashboard: Dashboard | None = None) -> None:
        super().__init__(route)
        self.dashboard = dashboard

    async def load(self) -> None:
        user = self.context.session.user
        if user is None:
            self.navigate("/login")
            return
        if self.dashboard is None:
            self.dashboard = self.build_dashboard(user)
        if self.dashboard is None:
            return
        await self.dashboard.load()
        self.set_heading(self.dashboard.title)
        await self.render_dashboard()

    def build_dashboard(self, user: User) -> Dashboard | None:
        raise NotImplementedError

    async def render_dashboard(self) -> None:
        return None


class DinerDashboardScreen(DashboardScreen):
    HEADING = "Your pizza kitchen"

    dashboard: DinerDashboard | None

    def compose_body(self) -> ComposeResult:
        yield Static(id="profile")
        yield Button("Edit", id="edit-user")
        yield Static("Here is your history of all the good times.")
        yield Static(id="orders")
        with Horizontal(classes="pager"):
            yield Button("«", id="orders-prev")
            yield Button("»", id="orders-next")

    def build_dashboard(self, user: User) -> DinerDashboard:
        return DinerDashboard(self.context.service, user)

    async def render_dashboard(self) -> None:
        if self.dashboard is None:
            return
        self.render_profile(self.dashboard.user)
        self.render_orders()

    def render_profile(self, user: User) -> None:
        text = Text()
        text.append("name: ", style="dim")
        text.append(f"{user.name}\n")
        text.append("email: ", style="dim")
        text.append(f"{user.email}\n")
        text.append("role: ", style="dim")
        text.append_text(format_role_tags(user.roles))
        self.query_one("#profile", Static).update(text)

    def render_orders(self) -> None:
        if self.dashboard is None:
            return
        orders = self.dashboard.history.orders
        if not orders:
            self.query_one("#orders", Static).update("How have you lived this long without having a pizza? Buy one now!")
            return
        text = Text()
        for idx, order in enumerate(orders):
            if idx > 0:
                text.append("\n")
            text.append_text(format_order_summary(order))
        self.query_one("#orders", Static).update(text)

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if self.dashboard is None:
            return
        button_id = event.button.id
        try:
            if button_id == "orders-next":
                await self.dashboard.next_page()
                self.render_orders()
            elif button_id == "orders-prev":
                await self.dashboard.previous_page()
                self.render_orders()
            elif button_id == "edit-user":
                self.open_editor()
        except PizzaError as exc:
            self.show_status(exc.message, error=True)

    def open_editor(self) -> None:
        user = self.context.session.user
        if user is None:
            return
        fields = [
            FormField("name", "Full name", value=user.name),
            FormField("email", "Email address", value=user.email),
            FormField("password", "Password", password=True, required=False),
        ]
        self.app.push_screen(FormModal("Edit user", fields, "Update"), self.apply_edit)

    async def apply_edit(self, values: dict[str, str] | None) -> None:
        if values is None:
            return
        try:
            user = await self.context.session.update_user(values["name"], values["email"], values.get("password") or None)
        except AuthError as exc:
            self.show_status(exc.message, error=True)
            return
        self.render_profile(user)
        self.refresh_nav()
        self.show_status("Profile updated")


class FranchiseDashboardScreen(DashboardScreen):
    """Stores of one franchise; reached by franchisees and by admins via /franchise/:id."""

    HEADING = "So you want a piece of the pie?"

    dashboard: FranchiseeDashboard | None

    def compose_body(self) -> ComposeResult:
        yield Static(id="franchise-info")
        yield Vertical(id="stores")
        yield Button("Create store", id="create-store", variant="primary")

    def build_dashboard(self, user: User) -> FranchiseeDashboard:
        franchise_id = self.route.params.get("franchise_id") if self.route is not None else None
        return FranchiseeDashboard(self.context.service, user, franchise_id=franchise_id)

    async def render_dashboard(self) -> None:
        if self.dashboard is None:
            return
        if self.dashboard.franchise_id is None:
            self.query_one("#create-store", Button).display = False
            self.query_one("#franchise-info", Static).update(
                "If you are already a franchisee, please log in using your franchise account. "
                "Otherwise, call 800-555-5555 to get started."
            )
            return
        await self.render_franchise()

    async def render_franchise(self) -> None:
        franchise = self.dashboard.franchise if self.dashboard is not None else None
        if franchise is None:
            return
        admins = ", ".join(admin.name or admin.email for admin in franchise.admins)
        self.query_one("#franchise-info", Static).update(
            f"Everything you need to run a JWT Pizza franchise. Your gold mine awaits.\nadmins: {admins}"
        )
        rows: list[Widget] = [
            Horizontal(
                Static(format_store_row(store), classes="row-label"),
                Button("Close", id=f"close-store-{idx}", variant="error"),
                classes="row",
            )
            for idx, store in enumerate(franchise.stores)
        ]
        await replace_rows(self.query_one("#stores", Vertical), rows, "No stores yet")

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if self.dashboard is None or self.dashboard.franchise is None:
            return
        button_id = event.button.id or ""
        if button_id == "create-store":
            self.app.push_screen(FormModal("Create store", [FormField("name", "store name")], "Create"), self.apply_create)
            return
        if button_id.startswith("close-store-"):
            store = self.dashboard.franchise.stores[int(button_id.rsplit("-", 1)[1])]
            self.ask_close(store)

    def ask_close(self, store: Store) -> None:
        if self.dashboard is None or self.dashboard.franchise is None:
            return
        self.dashboard.request_close_store(store)
        message = (
            f"Are you sure you want to close the {self.dashboard.franchise.name} store {store.name}? "
            "This cannot be restored. All outstanding revenue will not be refunded."
        )
        self.app.push_screen(ConfirmModal("Sorry to see you go", message), self.apply_close)

    async def apply_close(self, confirmed: bool | None) -> None:
        if self.dashboard is None:
            return
        if not confirmed:
            self.dashboard.cancel_close_store()
            return
        try:
            store = await self.dashboard.confirm_close_store()
        except PizzaError as exc:
            self.show_status(exc.message, error=True)
            return
        self.show_status(f"Closed {store.name}")
        await self.render_franchise()

    async def apply_create(self, values: dict[str, str] | None) -> None:
        if values is None or self.dashboard is None:
            return
        try:
            store = await self.dashboard.create_store(values["name"])
        except PizzaError as exc:
            self.show_status(exc.message, error=True)
            return
        self.show_status(f"Opened {store.name}")
        await self.render_franchise()


def format_franchise_row(franchise: Franchise) -> Text:
    text = Text()
    text.append(franchise.name, style="bold")
    admins = ", ".join(admin.name or admin.email for admin in franchise.admins)
    if admins:
        text.append(f"  {admins}")
    for store in franchise.stores:
        text.append("\n    ")
        text.append_text(format_store_row(store))
    return text


class AdminDashboardScreen(DashboardScreen):
    HEADING = "Mama Ricci's kitchen"

    dashboard: AdminDashboard | None

    def compose_body(self) -> ComposeResult:
        yield Static("Keep the dough rolling and the franchises signing up.")
        yield Static("Franchises", classes="section")
        with Horizontal(classes="filter"):
            yield Input(placeholder="Filter franchises", id="franchise-filter")
            yield Button("Submit", id="franchise-filter-submit")
        yield Vertical(id="franchises")
        with Horizontal(classes="pager"):
            yield Button("«", id="franchises-prev")
            yield Button("»", id="franchises-next")
        yield Button("Add Franchise", id="add-franchise", variant="primary")
        yield Static("Users", classes="section")
        with Horizontal(classes="filter"):
            yield Input(placeholder="Filter users", id="user-filter")
            yield Button("Filter", id="user-filter-submit")
        yield Vertical(id="users")
        with Horizontal(classes="pager"):
            yield Button("«", id="users-prev")
            yield Button("»", id="users-next")

    def build_dashboard(self, user: User) -> AdminDashboard | None:
        if not user.is_admin:
            self.navigate("/not-found")
            return None
        return AdminDashboard(self.context.service, user)

    async def render_dashboard(self) -> None:
        await self.render_franchises()
        await self.render_users()

    async def render_franchises(self) -> None:
        if self.dashboard is None:
            return
        rows: list[Widget] = [
            Horizontal(
                Static(format_franchise_row(franchise), classes="row-label"),
                Button("Close", id=f"close-franchise-{idx}", variant="error"),
                classes="row",
            )
            for idx, franchise in enumerate(self.dashboard.franchises.franchises)
        ]
        await replace_rows(self.query_one("#franchises", Vertical), rows, "No franchises")

    async def render_users(self) -> None:
        if self.dashboard is None:
            return
        rows: list[Widget] = [
            Horizontal(
                Static(format_user_row(user), classes="row-label"),
                Button("Delete", id=f"delete-user-{idx}", variant="error"),
                classes="row",
            )
            for idx, user in enumerate(self.dashboard.users.users)
        ]
        await replace_rows(self.query_one("#users", Vertical), rows, "No users")

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        if event.input.id == "franchise-filter":
            await self.run_action_safely(self.filter_franchises)
        elif event.input.id == "user-filter":
            await self.run_action_safely(self.filter_users)

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if self.dashboard is None:
            return
        button_id = event.button.id or ""
        handlers = {
            "franchise-filter-submit": self.filter_franchises,
            "user-filter-submit": self.filter_users,
            "franchises-prev": lambda: self.page_franchises(-1),
            "franchises-next": lambda: self.page_franchises(1),
            "users-prev": lambda: self.page_users(-1),
            "users-next": lambda: self.page_users(1),
        }
        if button_id in handlers:
            await self.run_action_safely(handlers[button_id])
            return
        if button_id == "add-franchise":
            fields = [FormField("name", "franchise name"), FormField("email", "franchisee admin email")]
            self.app.push_screen(FormModal("Create franchise", fields, "Create"), self.apply_create)
            return
        if button_id.startswith("close-franchise-"):
            franchise = self.dashboard.franchises.franchises[int(button_id.rsplit("-", 1)[1])]
            self.ask_close(franchise)
            return
        if button_id.startswith("delete-user-"):
            user = self.dashboard.users.users[int(button_id.rsplit("-", 1)[1])]
            await self.run_action_safely(lambda: self.delete_user(user))

    async def run_action_safely(self, action: Callable[[], Awaitable[None]]) -> None:
        try:
            await action()
        except PizzaError as exc:
            self.show_status(exc.message, error=True)

    async def filter_franchises(self) -> None:
        if self.dashboard is None:
            return
        await self.dashboard.filter_franchises(self.query_one("#franchise-filter", Input).value)
        await self.render_franchises()

    async def filter_users(self) -> None:
        if self.dashboard is None:
            return
        await self.dashboard.filter_users(self.query_one("#user-filter", Input).value)
        await self.render_users()

    async def page_franchises(self, delta: int) -> None:
        if self.dashboard is None:
            return
        await self.dashboard.franchise_page(delta)
        await self.render_franchises()

    async def page_users(self, delta: int) -> None:
        if self.dashboard is None:
            return
        await self.dashboard.user_page(delta)
        await self.render_users()

    async def delete_user(self, user: User) -> None:
        if self.dashboard is None:
            return
        await self.dashboard.delete_user(user)
        self.show_status(f"Deleted {user.name}")
        await self.render_users()

    def ask_close(self, franchise: Franchise) -> None:
        if self.dashboard is None:
            return
        self.dashboard.request_close_franchise(franchise)
        message = (
            f"Are you sure you want to close the {franchise.name} franchise? This will close all associated "
            "stores and cannot be restored. All outstanding revenue will not be refunded."
        )
        self.app.push_screen(ConfirmModal("Sorry to see you go", message), self.apply_close)

    async def apply_close(self, confirmed: bool | None) -> None:
        if self.dashboard is None:
            return
        if not confirmed:
            self.dashboard.cancel_close_franchise()
            return
        try:
            franchise = await self.dashboard.confirm_close_franchise()
        except PizzaError as exc:
            self.show_status(exc.message, error=True)
            return
        self.show_status(f"Closed {franchise.name}")
        await self.render_franchises()

    async def apply_create(self, values: dict[str, str] | None) -> None:
        if values is None or self.dashboard is None:
            return
        try:
            franchise = await self.dashboard.create_franchise(values["name"], values["email"])
        except PizzaError as exc:
            self.show_status(exc.message, error=True)
            return
        self.show_status(f"Created {franchise.name}")
        await self.render_franchises()
