"""Domain models for the JWT Pizza storefront."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Union

Identifier = Union[int, str]

ROLE_DINER = "diner"
ROLE_FRANCHISEE = "franchisee"
ROLE_ADMIN = "admin"


def to_decimal(raw: Any) -> Decimal:
    """Build a Decimal from a JSON number without binary float noise."""
    if raw is None or raw == "":
        return Decimal("0")
    if isinstance(raw, Decimal):
        return raw
    return Decimal(str(raw))


def same_id(left: Identifier | None, right: Identifier | None) -> bool:
    """Compare ids that may arrive as numbers in one payload and strings in another."""
    if left is None or right is None:
        return False
    return str(left) == str(right)


@dataclass(frozen=True)
class Role:
    """One role grant; franchisee grants carry the owned franchise id."""

    role: str
    object_id: Identifier | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Role:
        return cls(role=str(data.get("role", ROLE_DINER)), object_id=data.get("objectId"))


@dataclass
class User:
    """An authenticated identity as returned by the auth and user endpoints."""

    id: Identifier
    name: str
    email: str
    roles: list[Role] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> User:
        return cls(
            id=data["id"],
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            roles=[Role.from_json(role) for role in data.get("roles") or []],
        )

    def has_role(self, role: str) -> bool:
        return any(grant.role == role for grant in self.roles)

    def franchise_ids(self) -> list[Identifier]:
        """Franchise ids this user administers through franchisee grants."""
        return [
            grant.object_id
            for grant in self.roles
            if grant.role == ROLE_FRANCHISEE and grant.object_id is not None
        ]

    @property
    def is_admin(self) -> bool:
        return self.has_role(ROLE_ADMIN)

    @property
    def is_franchisee(self) -> bool:
        return self.has_role(ROLE_FRANCHISEE)


@dataclass(frozen=True)
class MenuItem:
    """A pizza on the menu."""

    id: Identifier
    title: str
    image: str
    price: Decimal
    description: str

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> MenuItem:
        return cls(
            id=data["id"],
            title=str(data.get("title") or ""),
            image=str(data.get("image") or ""),
            price=to_decimal(data.get("price")),
            description=str(data.get("description") or ""),
        )


@dataclass
class Store:
    """A location under a franchise."""

    id: Identifier
    name: str
    total_revenue: Decimal | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Store:
        revenue = data.get("totalRevenue")
        return cls(
            id=data["id"],
            name=str(data.get("name") or ""),
            total_revenue=to_decimal(revenue) if revenue is not None else None,
        )


@dataclass(frozen=True)
class FranchiseAdmin:
    """A franchisee listed on a franchise."""

    id: Identifier | None
    name: str
    email: str

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> FranchiseAdmin:
        return cls(id=data.get("id"), name=str(data.get("name") or ""), email=str(data.get("email") or ""))


@dataclass
class Franchise:
    """A franchise with its administrators and stores."""

    id: Identifier
    name: str
    admins: list[FranchiseAdmin] = field(default_factory=list)
    stores: list[Store] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Franchise:
        return cls(
            id=data["id"],
            name=str(data.get("name") or ""),
            admins=[FranchiseAdmin.from_json(admin) for admin in data.get("admins") or []],
            stores=[Store.from_json(store) for store in data.get("stores") or []],
        )

    def find_store(self, store_id: Identifier) -> Store | None:
        return next((store for store in self.stores if same_id(store.id, store_id)), None)


@dataclass(frozen=True)
class OrderItem:
    """One line of a submitted order."""

    menu_id: Identifier
    description: str
    price: Decimal

    @classmethod
    def from_menu_item(cls, item: MenuItem) -> OrderItem:
        return cls(menu_id=item.id, description=item.title, price=item.price)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> OrderItem:
        return cls(
            menu_id=data.get("menuId"),
            description=str(data.get("description") or ""),
            price=to_decimal(data.get("price")),
        )

    def to_json(self) -> dict[str, Any]:
        return {"menuId": self.menu_id, "description": self.description, "price": float(self.price)}


@dataclass
class Order:
    """An order request, or a committed order once the server assigned id and date."""

    items: list[OrderItem]
    store_id: Identifier
    franchise_id: Identifier | None
    id: Identifier | None = None
    date: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Order:
        return cls(
            items=[OrderItem.from_json(item) for item in data.get("items") or []],
            store_id=data.get("storeId"),
            franchise_id=data.get("franchiseId"),
            id=data.get("id"),
            date=data.get("date"),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "items": [item.to_json() for item in self.items],
            "storeId": self.store_id,
            "franchiseId": self.franchise_id,
        }

    def total_price(self) -> Decimal:
        return sum((item.price for item in self.items), Decimal("0"))


@dataclass(frozen=True)
class OrderReceipt:
    """The committed order plus the JWT that proves it."""

    order: Order
    jwt: str

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> OrderReceipt:
        return cls(order=Order.from_json(data.get("order") or {}), jwt=str(data.get("jwt") or ""))


@dataclass
class OrderHistory:
    """One page of a diner's past orders."""

    diner_id: Identifier | None
    orders: list[Order]
    page: int

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> OrderHistory:
        return cls(
            diner_id=data.get("dinerId"),
            orders=[Order.from_json(order) for order in data.get("orders") or []],
            page=int(data.get("page") or 1),
        )


@dataclass
class UserPage:
    """One page of the admin user listing."""

    users: list[User]
    more: bool = False

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> UserPage:
        return cls(users=[User.from_json(user) for user in data.get("users") or []], more=bool(data.get("more")))


@dataclass
class FranchisePage:
    """One page of franchises; bare-array responses become a single page."""

    franchises: list[Franchise]
    more: bool = False

    @classmethod
    def from_json(cls, data: Any) -> FranchisePage:
        if isinstance(data, list):
            return cls(franchises=[Franchise.from_json(item) for item in data], more=False)
        if not isinstance(data, dict):
            return cls(franchises=[], more=False)
        return cls(
            franchises=[Franchise.from_json(item) for item in data.get("franchises") or []],
            more=bool(data.get("more")),
        )


@dataclass(frozen=True)
class VerifyResult:
    """Outcome of checking an order JWT with the backend."""

    message: str
    payload: Any = None

    @property
    def valid(self) -> bool:
        return self.message == "valid"


@dataclass(frozen=True)
class ApiEndpoint:
    """One entry of the backend's self-description."""

    method: str
    path: str
    requires_auth: bool
    description: str
    example: str = ""
    response: Any = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ApiEndpoint:
        return cls(
            method=str(data.get("method") or ""),
            path=str(data.get("path") or ""),
            requires_auth=bool(data.get("requiresAuth")),
            description=str(data.get("description") or ""),
            example=str(data.get("example") or ""),
            response=data.get("response"),
        )


@dataclass
class ApiDocs:
    """The API catalog served at /api/docs."""

    version: str
    endpoints: list[ApiEndpoint]

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ApiDocs:
        return cls(
            version=str(data.get("version") or ""),
            endpoints=[ApiEndpoint.from_json(endpoint) for endpoint in data.get("endpoints") or []],
        )
