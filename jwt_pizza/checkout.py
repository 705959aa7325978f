"""Checkout and payment workflow."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from enum import Enum

from jwt_pizza.api import PizzaService
from jwt_pizza.cart import Cart
from jwt_pizza.config import DB_PATH
from jwt_pizza.errors import ApiError, PaymentError, ValidationError
from jwt_pizza.models import Franchise, Identifier, MenuItem, OrderReceipt, VerifyResult, same_id
from jwt_pizza.persistence import save_receipt, update_receipt_status
from jwt_pizza.session import SessionStore

logger = logging.getLogger(__name__)

PAYMENT_PATH = "/payment"


class CheckoutState(str, Enum):
    BROWSING = "browsing"
    SELECTING = "selecting"
    CONFIRMING = "confirming"
    AWAITING_AUTH = "awaiting_auth"
    SUBMITTING = "submitting"
    DELIVERED = "delivered"
    VERIFYING = "verifying"


@dataclass(frozen=True)
class ResumeIntent:
    """Where to send the user once the login detour succeeds."""

    path: str
    state: CheckoutState


class CheckoutWorkflow:
    """Drives one order from menu selection to JWT verification.

    The cart survives a login detour; ``pending_intent`` is a single slot that
    the login view consumes exactly once.
    """

    def __init__(self, service: PizzaService, session: SessionStore, cart: Cart, db_path: str = DB_PATH) -> None:
        self.service = service
        self.session = session
        self.cart = cart
        self.db_path = db_path
        self.state = CheckoutState.BROWSING
        self.menu: list[MenuItem] = []
        self.franchises: list[Franchise] = []
        self.receipt: OrderReceipt | None = None
        self.verification: VerifyResult | None = None
        self.error = ""
        self.pending_intent: ResumeIntent | None = None

    def _transition(self, state: CheckoutState) -> None:
        logger.debug("checkout_state from=%s to=%s items=%d", self.state.value, state.value, self.cart.count)
        self.state = state

    async def open_menu(self) -> None:
        """Fetch the menu and the stores that can take the order."""
        self.menu = await self.service.get_menu()
        self.franchises = (await self.service.get_franchises()).franchises
        self.error = ""
        self.pending_intent = None
        self._transition(CheckoutState.SELECTING)

    def store_options(self) -> list[tuple[str, str]]:
        """(label, store id) pairs grouped by franchise."""
        options: list[tuple[str, str]] = []
        for franchise in self.franchises:
            for store in franchise.stores:
                options.append((f"{franchise.name} · {store.name}", str(store.id)))
        return options

    def select_store(self, store_id: Identifier | None) -> None:
        if store_id is None:
            self.cart.select_store(None)
            return
        for franchise in self.franchises:
            store = franchise.find_store(store_id)
            if store is not None:
                self.cart.select_store(store.id, franchise.id)
                return
        self.cart.select_store(store_id)

    def add_item(self, menu_id: Identifier) -> MenuItem:
        item = next((item for item in self.menu if same_id(item.id, menu_id)), None)
        if item is None:
            raise ValidationError(f"Pizza {menu_id} is not on the menu")
        self.cart.add_item(item)
        return item

    def checkout(self) -> CheckoutState:
        if not self.cart.can_checkout():
            raise ValidationError("Choose a store and at least one pizza")
        if not self.session.is_authenticated:
            self.pending_intent = ResumeIntent(path=PAYMENT_PATH, state=CheckoutState.CONFIRMING)
            self._transition(CheckoutState.AWAITING_AUTH)
        else:
            self._transition(CheckoutState.CONFIRMING)
        self.error = ""
        return self.state

    def consume_intent(self) -> ResumeIntent | None:
        """Hand out the pending resume intent once, after a successful login."""
        intent = self.pending_intent
        self.pending_intent = None
        if intent is None:
            return None
        if not self.session.is_authenticated or not self.cart.can_checkout():
            return None
        self._transition(intent.state)
        return intent

    async def pay(self) -> OrderReceipt:
        if self.state != CheckoutState.CONFIRMING:
            raise ValidationError("Nothing is waiting for payment")
        if not self.session.is_authenticated:
            self.pending_intent = ResumeIntent(path=PAYMENT_PATH, state=CheckoutState.CONFIRMING)
            self._transition(CheckoutState.AWAITING_AUTH)
            raise PaymentError("Log in to place your order")

        order = self.cart.to_order()
        self._transition(CheckoutState.SUBMITTING)
        try:
            receipt = await self.service.create_order(order)
        except ApiError as exc:
            self.error = exc.message
            self._transition(CheckoutState.CONFIRMING)
            raise PaymentError(exc.message) from exc

        self.receipt = receipt
        self.verification = None
        self.error = ""
        self.cart.clear()
        self._transition(CheckoutState.DELIVERED)
        if receipt.order.id is not None:
            try:
                save_receipt(receipt, self.db_path)
            except sqlite3.Error as exc:
                logger.warning("receipt_save_failed order_id=%s error=%r", receipt.order.id, exc)
        return receipt

    async def verify(self) -> VerifyResult:
        if self.receipt is None:
            raise ValidationError("No order to verify")

        self._transition(CheckoutState.VERIFYING)
        try:
            result = await self.service.verify_order(self.receipt.jwt)
        except ApiError as exc:
            result = VerifyResult(message="invalid", payload={"error": exc.message})
        finally:
            self._transition(CheckoutState.DELIVERED)

        self.verification = result
        if self.receipt.order.id is not None:
            status = "VERIFIED" if result.valid else "INVALID"
            try:
                update_receipt_status(str(self.receipt.order.id), status, self.db_path)
            except sqlite3.Error as exc:
                logger.warning("receipt_status_failed order_id=%s error=%r", self.receipt.order.id, exc)
        return result

    def cancel(self) -> None:
        if self.state not in (CheckoutState.CONFIRMING, CheckoutState.AWAITING_AUTH):
            return
        self.cart.clear()
        self.pending_intent = None
        self.error = ""
        self._transition(CheckoutState.SELECTING)

    def order_more(self) -> None:
        self.receipt = None
        self.verification = None
        self.cart.clear()
        self.error = ""
        self._transition(CheckoutState.SELECTING)
