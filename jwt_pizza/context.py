"""Wiring of the objects every view shares."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from jwt_pizza.api import PizzaService
from jwt_pizza.cart import Cart
from jwt_pizza.checkout import CheckoutWorkflow
from jwt_pizza.config import API_BASE_URL, DB_PATH
from jwt_pizza.persistence import bootstrap_schema
from jwt_pizza.session import SessionStore


@dataclass
class PizzaContext:
    """Session, service, cart and checkout workflow for one running app."""

    service: PizzaService
    session: SessionStore
    cart: Cart
    checkout: CheckoutWorkflow

    async def aclose(self) -> None:
        await self.service.aclose()


def build_context(
    base_url: str = API_BASE_URL,
    db_path: str = DB_PATH,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PizzaContext:
    """Create the shared objects; requests read the token from the session slot."""
    bootstrap_schema(db_path)
    service = PizzaService(base_url, transport=transport)
    session = SessionStore(service, db_path=db_path)
    service.token_source = session.current_token
    cart = Cart()
    checkout = CheckoutWorkflow(service, session, cart, db_path=db_path)
    return PizzaContext(service=service, session=session, cart=cart, checkout=checkout)
