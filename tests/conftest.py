"""Shared fixtures: an in-memory pizza backend behind httpx.MockTransport."""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Union

import httpx
import pytest
import pytest_asyncio

from jwt_pizza.api import PizzaService
from jwt_pizza.context import build_context

DINER = {"id": "3", "name": "Kai Chen", "email": "d@jwt.com", "roles": [{"role": "diner"}]}
ADMIN = {"id": "1", "name": "Admin User", "email": "a@jwt.com", "roles": [{"role": "admin"}]}
FRANCHISEE = {
    "id": "2",
    "name": "Franchise Owner",
    "email": "f@jwt.com",
    "roles": [{"role": "franchisee", "objectId": "1"}],
}

MENU = [
    {"id": 1, "title": "Veggie", "image": "pizza1.png", "price": 0.0038, "description": "A garden of delight"},
    {"id": 2, "title": "Pepperoni", "image": "pizza2.png", "price": 0.0042, "description": "Spicy treat"},
    {"id": 3, "title": "Margarita", "image": "pizza3.png", "price": 0.0014, "description": "Essential classic"},
]

FRANCHISES = [
    {"id": 1, "name": "LotaPizza", "stores": [{"id": 4, "name": "Lehi"}, {"id": 5, "name": "Springville"}]},
    {"id": 2, "name": "PizzaCorp", "stores": [{"id": 7, "name": "Spanish Fork"}]},
]

FRANCHISE_DETAIL = {
    "id": "1",
    "name": "LotaPizza",
    "admins": [{"id": "2", "name": "Franchise Owner", "email": "f@jwt.com"}],
    "stores": [{"id": "4", "name": "Lehi", "totalRevenue": 100}, {"id": "5", "name": "Springville", "totalRevenue": 200}],
}

Responder = Union[Callable[[httpx.Request], httpx.Response], Any]


class FakeBackend:
    """Route table of (method, path regex) -> responder; later routes win."""

    def __init__(self) -> None:
        self.routes: list[tuple[str, re.Pattern[str], Responder, int]] = []
        self.calls: list[httpx.Request] = []

    def route(self, method: str, path: str, responder: Responder, status: int = 200) -> None:
        self.routes.append((method, re.compile(path), responder, status))

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        for method, pattern, responder, status in reversed(self.routes):
            if request.method == method and pattern.fullmatch(request.url.path):
                if callable(responder):
                    return responder(request)
                return httpx.Response(status, json=responder)
        return httpx.Response(404, json={"message": "unknown endpoint"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls_to(self, method: str, path: str) -> list[httpx.Request]:
        return [call for call in self.calls if call.method == method and call.url.path == path]


def body_of(request: httpx.Request) -> Any:
    return json.loads(request.content or b"null")


def install_storefront(backend: FakeBackend, login_user: dict = DINER, me: dict | None = None) -> None:
    """The default mocks: auth, menu, franchises, orders, verification and docs."""

    def auth_put(request: httpx.Request) -> httpx.Response:
        payload = body_of(request)
        if payload["email"] == login_user["email"] and payload["password"] == "a":
            return httpx.Response(200, json={"user": login_user, "token": "test-token"})
        return httpx.Response(404, json={"message": "Invalid credentials"})

    def auth_post(request: httpx.Request) -> httpx.Response:
        payload = body_of(request)
        user = {"id": "4", "name": payload["name"], "email": payload["email"], "roles": [{"role": "diner"}]}
        return httpx.Response(200, json={"user": user, "token": "test-token"})

    def order_post(request: httpx.Request) -> httpx.Response:
        payload = body_of(request)
        order = dict(payload, id=23, date="2024-01-01T00:00:00.000Z")
        return httpx.Response(200, json={"order": order, "jwt": "eyJpYXQ"})

    backend.route("PUT", r"/api/auth", auth_put)
    backend.route("POST", r"/api/auth", auth_post)
    backend.route("DELETE", r"/api/auth", {"message": "logout successful"})
    backend.route("GET", r"/api/user/me", me)
    backend.route("GET", r"/api/order/menu", MENU)
    backend.route("GET", r"/api/franchise", FRANCHISES)
    backend.route("GET", r"/api/franchise/[^/]+", [FRANCHISE_DETAIL])
    backend.route("POST", r"/api/order", order_post)
    backend.route(
        "GET",
        r"/api/order",
        {
            "dinerId": "3",
            "orders": [
                {
                    "id": "1",
                    "franchiseId": "1",
                    "storeId": "4",
                    "date": "2024-01-01T00:00:00.000Z",
                    "items": [{"menuId": "1", "description": "Veggie", "price": 0.0038}],
                }
            ],
            "page": 1,
        },
    )
    backend.route(
        "GET",
        r"/api/order/verify/.+",
        {"message": "valid", "payload": {"order": {"id": "23", "storeId": "4", "franchiseId": "1", "items": []}}},
    )
    backend.route(
        "GET",
        r"/api/docs",
        {
            "version": "1.0.0",
            "endpoints": [
                {
                    "method": "GET",
                    "path": "/api/order/menu",
                    "requiresAuth": False,
                    "description": "Get menu",
                    "example": "curl localhost:3000/api/order/menu",
                    "response": [],
                }
            ],
        },
    )


@pytest.fixture
def backend() -> FakeBackend:
    fake = FakeBackend()
    install_storefront(fake)
    return fake


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "state.db")


@pytest_asyncio.fixture
async def service(backend):
    """A service with a settable token, for endpoint-level tests."""
    pizza_service = PizzaService("http://pizza.test", transport=backend.transport())
    yield pizza_service
    await pizza_service.aclose()


@pytest_asyncio.fixture
async def context(backend, db_path):
    """Fully wired session, cart and checkout against the fake backend."""
    ctx = build_context(base_url="http://pizza.test", db_path=db_path, transport=backend.transport())
    yield ctx
    await ctx.aclose()
