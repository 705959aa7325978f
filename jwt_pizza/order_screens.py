"""Menu, payment and delivery views of the checkout workflow."""

from __future__ import annotations

import logging

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Select, Static

from jwt_pizza.checkout import CheckoutState
from jwt_pizza.errors import PaymentError, ValidationError
from jwt_pizza.models import MenuItem
from jwt_pizza.rendering import format_currency
from jwt_pizza.router import Route
from jwt_pizza.screens import PizzaScreen

logger = logging.getLogger(__name__)


class MenuScreen(PizzaScreen):
    """Store picker, pizza list and the running selection."""

    HEADING = "Awesome is a click away"

    def __init__(self, route: Route | None = None) -> None:
        super().__init__(route)
        self.pizza_buttons: dict[str, MenuItem] = {}

    def compose_body(self) -> ComposeResult:
        yield Static("Pick your store and pizzas from below. Remember to order extra for a midnight party.")
        with Vertical(id="order-form"):
            yield Select([], prompt="choose store", id="store")
            yield Static("Selected pizzas: 0", id="selected")
            yield Button("Checkout", id="checkout", variant="primary", disabled=True)
        yield Vertical(id="pizzas")

    async def load(self) -> None:
        checkout = self.context.checkout
        await checkout.open_menu()

        options = checkout.store_options()
        select = self.query_one("#store", Select)
        select.set_options(options)
        chosen = self.context.cart.store_id
        if chosen is not None and any(value == str(chosen) for _, value in options):
            select.value = str(chosen)

        buttons = []
        self.pizza_buttons = {}
        for idx, item in enumerate(checkout.menu):
            button_id = f"pizza-{idx}"
            self.pizza_buttons[button_id] = item
            button = Button(f"{item.title}  {format_currency(item.price)}", id=button_id, classes="pizza-item")
            button.tooltip = item.description
            buttons.append(button)
        pizzas = self.query_one("#pizzas", Vertical)
        await pizzas.remove_children()
        await pizzas.mount(*buttons)
        self.refresh_selection()

    def refresh_selection(self) -> None:
        cart = self.context.cart
        self.query_one("#selected", Static).update(f"Selected pizzas: {cart.count}")
        self.query_one("#checkout", Button).disabled = not cart.can_checkout()

    def on_select_changed(self, event: Select.Changed) -> None:
        value = event.value
        self.context.checkout.select_store(value if isinstance(value, str) else None)
        self.refresh_selection()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        if button_id in self.pizza_buttons:
            self.context.checkout.add_item(self.pizza_buttons[button_id].id)
            self.refresh_selection()
            return
        if button_id != "checkout":
            return
        try:
            state = self.context.checkout.checkout()
        except ValidationError as exc:
            self.show_status(exc.message, error=True)
            return
        if state == CheckoutState.AWAITING_AUTH:
            self.navigate("/login")
            return
        self.navigate("/payment")


def format_cart_lines(items: list[MenuItem]) -> Text:
    text = Text()
    for idx, item in enumerate(items):
        if idx > 0:
            text.append("\n")
        text.append(f"{item.title}", style="bold")
        text.append(f"  {format_currency(item.price)}")
    return text


class PaymentScreen(PizzaScreen):
    """Confirmation of the pending order, with Pay now and Cancel."""

    HEADING = "So worth it"

    def compose_body(self) -> ComposeResult:
        yield Static(id="summary")
        yield Static(id="items")
        yield Static(id="total")
        with Horizontal(id="payment-buttons"):
            yield Button("Pay now", id="pay", variant="success")
            yield Button("Cancel", id="cancel")

    async def load(self) -> None:
        checkout = self.context.checkout
        if checkout.state == CheckoutState.AWAITING_AUTH:
            self.navigate("/login")
            return
        cart = self.context.cart
        if checkout.state != CheckoutState.CONFIRMING:
            self.query_one("#pay", Button).disabled = True
            self.show_status("Your cart is empty. Pick some pizzas first.")
            return
        self.query_one("#summary", Static).update(f"Send me those {cart.count} pizzas right now!")
        self.query_one("#items", Static).update(format_cart_lines(cart.items))
        self.query_one("#total", Static).update(f"Total: {format_currency(cart.total_price())}")

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        checkout = self.context.checkout
        if event.button.id == "cancel":
            checkout.cancel()
            self.navigate("/menu")
            return
        if event.button.id != "pay":
            return
        try:
            await checkout.pay()
        except PaymentError as exc:
            self.show_status(exc.message, error=True)
            if checkout.state == CheckoutState.AWAITING_AUTH:
                self.navigate("/login")
            return
        except ValidationError as exc:
            self.show_status(exc.message, error=True)
            return
        self.navigate("/delivery")


class DeliveryScreen(PizzaScreen):
    """Receipt of the submitted order with JWT verification."""

    HEADING = "Here is your JWT Pizza!"

    def compose_body(self) -> ComposeResult:
        yield Static(id="receipt")
        yield Static(id="jwt")
        yield Static(id="verification")
        with Horizontal(id="delivery-buttons"):
            yield Button("Verify", id="verify", variant="primary")
            yield Button("Order more", id="order-more")

    async def load(self) -> None:
        receipt = self.context.checkout.receipt
        if receipt is None:
            self.query_one("#verify", Button).disabled = True
            self.show_status("No order has been placed yet.")
            return
        order = receipt.order
        text = Text()
        text.append(f"order ID: {order.id}\n")
        text.append(f"pie count: {len(order.items)}\n")
        text.append(f"total: {format_currency(order.total_price())}")
        self.query_one("#receipt", Static).update(text)
        self.query_one("#jwt", Static).update(receipt.jwt)

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        checkout = self.context.checkout
        if event.button.id == "order-more":
            checkout.order_more()
            self.navigate("/menu")
            return
        if event.button.id != "verify":
            return
        try:
            result = await checkout.verify()
        except ValidationError as exc:
            self.show_status(exc.message, error=True)
            return
        text = Text()
        text.append(result.message, style="bold green" if result.valid else "bold red")
        if result.payload is not None:
            text.append(f"\n{result.payload}")
        self.query_one("#verification", Static).update(text)
