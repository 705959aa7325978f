"""Async HTTP client for the JWT Pizza backend."""

from __future__ import annotations

import logging
from typing import Any, Callable
from urllib.parse import quote

import httpx

from jwt_pizza.config import API_BASE_URL, HTTP_TIMEOUT_SECONDS, ORDER_HISTORY_FIRST_PAGE
from jwt_pizza.errors import ApiError, AuthzError, NotFoundError
from jwt_pizza.models import (
    ApiDocs,
    Franchise,
    FranchisePage,
    Identifier,
    MenuItem,
    Order,
    OrderHistory,
    OrderReceipt,
    Store,
    User,
    UserPage,
    VerifyResult,
    same_id,
)

logger = logging.getLogger(__name__)

TokenSource = Callable[[], "str | None"]


def name_pattern(term: str | None) -> str:
    """Wrap a filter term in wildcards; no term matches everything."""
    term = (term or "").strip()
    if not term:
        return "*"
    return f"*{term}*"


class PizzaService:
    """Thin wrapper over the backend endpoints.

    The bearer token is read from ``token_source`` each time a request is
    built, so a logout takes effect for every request issued after it.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        token_source: TokenSource | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token_source = token_source or (lambda: None)
        self._client = httpx.AsyncClient(base_url=self.base_url, transport=transport, timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self, token: str | None) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        token: str | None = None,
    ) -> Any:
        bearer = token if token is not None else self.token_source()
        logger.debug("api_request method=%s path=%s params=%r auth=%s", method, path, params, bool(bearer))
        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                params=params,
                headers=self._headers(bearer),
            )
        except httpx.HTTPError as exc:
            logger.warning("api_unreachable method=%s path=%s error=%r", method, path, exc)
            raise ApiError(0, f"Unable to reach the pizza service: {exc}") from exc

        body = self._decode(response)
        if response.is_success:
            return body

        message = self._error_message(body, response)
        logger.debug("api_error method=%s path=%s status=%s message=%r", method, path, response.status_code, message)
        if response.status_code == 403:
            raise AuthzError(response.status_code, message)
        if response.status_code == 404:
            raise NotFoundError(response.status_code, message)
        raise ApiError(response.status_code, message)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _error_message(body: Any, response: httpx.Response) -> str:
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        if isinstance(body, str) and body.strip():
            return body.strip()
        return response.reason_phrase or f"HTTP {response.status_code}"

    # auth

    async def login(self, email: str, password: str) -> tuple[User, str]:
        body = await self._request("PUT", "/api/auth", json={"email": email, "password": password})
        return User.from_json(body["user"]), str(body["token"])

    async def register(self, name: str, email: str, password: str) -> tuple[User, str]:
        body = await self._request("POST", "/api/auth", json={"name": name, "email": email, "password": password})
        return User.from_json(body["user"]), str(body["token"])

    async def logout(self, token: str | None = None) -> str:
        body = await self._request("DELETE", "/api/auth", token=token)
        if isinstance(body, dict):
            return str(body.get("message") or "")
        return ""

    # users

    async def get_me(self) -> User | None:
        body = await self._request("GET", "/api/user/me")
        if not isinstance(body, dict) or "id" not in body:
            return None
        return User.from_json(body)

    async def update_user(
        self, user_id: Identifier, name: str, email: str, password: str | None = None
    ) -> tuple[User, str | None]:
        payload: dict[str, Any] = {"name": name, "email": email}
        if password:
            payload["password"] = password
        body = await self._request("PUT", f"/api/user/{user_id}", json=payload)
        if isinstance(body, dict) and "user" in body:
            token = body.get("token")
            return User.from_json(body["user"]), str(token) if token else None
        return User.from_json(body), None

    async def list_users(self, page: int = 0, limit: int = 10, name: str = "*") -> UserPage:
        body = await self._request("GET", "/api/user", params={"page": page, "limit": limit, "name": name})
        return UserPage.from_json(body or {})

    async def delete_user(self, user_id: Identifier) -> None:
        await self._request("DELETE", f"/api/user/{user_id}")

    # menu and orders

    async def get_menu(self) -> list[MenuItem]:
        body = await self._request("GET", "/api/order/menu")
        return [MenuItem.from_json(item) for item in body or []]

    async def create_order(self, order: Order) -> OrderReceipt:
        body = await self._request("POST", "/api/order", json=order.to_json())
        return OrderReceipt.from_json(body or {})

    async def get_orders(self, page: int = ORDER_HISTORY_FIRST_PAGE) -> OrderHistory:
        body = await self._request("GET", "/api/order", params={"page": page})
        return OrderHistory.from_json(body or {})

    async def verify_order(self, jwt: str) -> VerifyResult:
        body = await self._request("GET", f"/api/order/verify/{quote(jwt, safe='')}")
        if not isinstance(body, dict):
            return VerifyResult(message="invalid", payload=body)
        return VerifyResult(message=str(body.get("message") or ""), payload=body.get("payload"))

    # franchises

    async def get_franchises(
        self, page: int | None = None, limit: int | None = None, name: str | None = None
    ) -> FranchisePage:
        params: dict[str, Any] = {}
        if page is not None:
            params["page"] = page
        if limit is not None:
            params["limit"] = limit
        if name is not None:
            params["name"] = name
        body = await self._request("GET", "/api/franchise", params=params or None)
        return FranchisePage.from_json(body)

    async def get_franchise(self, franchise_id: Identifier) -> Franchise:
        body = await self._request("GET", f"/api/franchise/{franchise_id}")
        if isinstance(body, list):
            match = next((item for item in body if same_id(item.get("id"), franchise_id)), None)
            if match is None and body:
                match = body[0]
            body = match
        if not isinstance(body, dict):
            raise NotFoundError(404, f"Franchise {franchise_id} not found")
        return Franchise.from_json(body)

    async def create_franchise(self, name: str, admin_email: str) -> Franchise:
        body = await self._request("POST", "/api/franchise", json={"name": name, "admins": [{"email": admin_email}]})
        return Franchise.from_json(body)

    async def close_franchise(self, franchise_id: Identifier) -> None:
        await self._request("DELETE", f"/api/franchise/{franchise_id}")

    async def create_store(self, franchise_id: Identifier, name: str) -> Store:
        body = await self._request("POST", f"/api/franchise/{franchise_id}/store", json={"name": name})
        return Store.from_json(body)

    async def close_store(self, franchise_id: Identifier, store_id: Identifier) -> None:
        await self._request("DELETE", f"/api/franchise/{franchise_id}/store/{store_id}")

    # docs

    async def get_docs(self) -> ApiDocs:
        body = await self._request("GET", "/api/docs")
        return ApiDocs.from_json(body or {})
