"""Role-gated dashboards for diners, franchisees and admins."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Generic, TypeVar

from jwt_pizza.api import PizzaService, name_pattern
from jwt_pizza.config import FRANCHISE_PAGE_LIMIT, ORDER_HISTORY_FIRST_PAGE, USER_PAGE_LIMIT
from jwt_pizza.errors import ValidationError
from jwt_pizza.models import (
    ROLE_ADMIN,
    ROLE_DINER,
    ROLE_FRANCHISEE,
    Franchise,
    FranchisePage,
    Identifier,
    OrderHistory,
    Store,
    User,
    UserPage,
    same_id,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class ConfirmState(str, Enum):
    IDLE = "idle"
    CONFIRMING = "confirming"


class ConfirmFlow(Generic[T]):
    """Two-step confirmation: ``IDLE -> CONFIRMING(target) -> IDLE``."""

    def __init__(self) -> None:
        self.state = ConfirmState.IDLE
        self.target: T | None = None

    def request(self, target: T) -> None:
        self.state = ConfirmState.CONFIRMING
        self.target = target

    def cancel(self) -> None:
        self.state = ConfirmState.IDLE
        self.target = None

    async def confirm(self, action: Callable[[T], Awaitable[R]]) -> R:
        if self.state != ConfirmState.CONFIRMING or self.target is None:
            raise ValidationError("Nothing is waiting for confirmation")
        target = self.target
        # Back to idle before the call so a failure never leaves a half-open dialog.
        self.cancel()
        return await action(target)


class Dashboard:
    """Common shape of every role dashboard."""

    role = ROLE_DINER
    path = "/diner-dashboard"

    def __init__(self, service: PizzaService) -> None:
        self.service = service

    @property
    def title(self) -> str:
        raise NotImplementedError

    async def load(self) -> None:
        raise NotImplementedError


class DinerDashboard(Dashboard):
    """The signed-in user's profile and order history."""

    role = ROLE_DINER
    path = "/diner-dashboard"

    def __init__(self, service: PizzaService, user: User) -> None:
        super().__init__(service)
        self.user = user
        self.history = OrderHistory(diner_id=user.id, orders=[], page=ORDER_HISTORY_FIRST_PAGE)

    @property
    def title(self) -> str:
        return "Your pizza kitchen"

    async def load(self, page: int = ORDER_HISTORY_FIRST_PAGE) -> None:
        self.history = await self.service.get_orders(page=page)
        logger.debug("diner_orders user_id=%s page=%s count=%d", self.user.id, page, len(self.history.orders))

    async def next_page(self) -> None:
        await self.load(self.history.page + 1)

    async def previous_page(self) -> None:
        await self.load(max(ORDER_HISTORY_FIRST_PAGE, self.history.page - 1))


class FranchiseeDashboard(Dashboard):
    """Stores and revenue of one franchise."""

    role = ROLE_FRANCHISEE
    path = "/franchise-dashboard"

    def __init__(self, service: PizzaService, user: User, franchise_id: Identifier | None = None) -> None:
        super().__init__(service)
        self.user = user
        if franchise_id is None:
            owned = user.franchise_ids()
            franchise_id = owned[0] if owned else None
        self.franchise_id = franchise_id
        self.franchise: Franchise | None = None
        self.close_flow: ConfirmFlow[Store] = ConfirmFlow()

    @property
    def title(self) -> str:
        if self.franchise is None:
            return "So you want a piece of the pie?"
        return self.franchise.name

    async def load(self) -> None:
        if self.franchise_id is None:
            self.franchise = None
            return
        self.franchise = await self.service.get_franchise(self.franchise_id)
        logger.debug("franchise_loaded franchise_id=%s stores=%d", self.franchise_id, len(self.franchise.stores))

    async def create_store(self, name: str) -> Store:
        name = name.strip()
        if not name:
            raise ValidationError("Store name is required")
        if self.franchise is None or self.franchise_id is None:
            raise ValidationError("No franchise to add a store to")
        store = await self.service.create_store(self.franchise_id, name)
        self.franchise.stores.append(store)
        logger.debug("store_created franchise_id=%s store_id=%s", self.franchise_id, store.id)
        return store

    def request_close_store(self, store: Store) -> None:
        self.close_flow.request(store)

    def cancel_close_store(self) -> None:
        self.close_flow.cancel()

    async def confirm_close_store(self) -> Store:
        return await self.close_flow.confirm(self._close_store)

    async def _close_store(self, store: Store) -> Store:
        if self.franchise_id is None:
            raise ValidationError("No franchise to close a store in")
        await self.service.close_store(self.franchise_id, store.id)
        if self.franchise is not None:
            self.franchise.stores = [item for item in self.franchise.stores if not same_id(item.id, store.id)]
        logger.debug("store_closed franchise_id=%s store_id=%s", self.franchise_id, store.id)
        return store


@dataclass
class ListQuery:
    """Paging and filter state of one admin list."""

    limit: int
    page: int = 0
    filter: str = ""

    @property
    def name(self) -> str:
        return name_pattern(self.filter)


class AdminDashboard(Dashboard):
    """Every franchise and every user."""

    role = ROLE_ADMIN
    path = "/admin-dashboard"

    def __init__(self, service: PizzaService, user: User) -> None:
        super().__init__(service)
        self.user = user
        self.franchise_query = ListQuery(limit=FRANCHISE_PAGE_LIMIT)
        self.user_query = ListQuery(limit=USER_PAGE_LIMIT)
        self.franchises = FranchisePage(franchises=[])
        self.users = UserPage(users=[])
        self.close_flow: ConfirmFlow[Franchise] = ConfirmFlow()

    @property
    def title(self) -> str:
        return "Mama Ricci's kitchen"

    async def load(self) -> None:
        await self.refresh_franchises()
        await self.refresh_users()

    async def refresh_franchises(self) -> None:
        query = self.franchise_query
        self.franchises = await self.service.get_franchises(page=query.page, limit=query.limit, name=query.name)

    async def refresh_users(self) -> None:
        query = self.user_query
        self.users = await self.service.list_users(page=query.page, limit=query.limit, name=query.name)

    async def filter_franchises(self, term: str) -> None:
        self.franchise_query.filter = term.strip()
        self.franchise_query.page = 0
        await self.refresh_franchises()

    async def filter_users(self, term: str) -> None:
        self.user_query.filter = term.strip()
        self.user_query.page = 0
        await self.refresh_users()

    async def franchise_page(self, delta: int) -> None:
        if delta > 0 and not self.franchises.more:
            return
        self.franchise_query.page = max(0, self.franchise_query.page + delta)
        await self.refresh_franchises()

    async def user_page(self, delta: int) -> None:
        if delta > 0 and not self.users.more:
            return
        self.user_query.page = max(0, self.user_query.page + delta)
        await self.refresh_users()

    async def create_franchise(self, name: str, admin_email: str) -> Franchise:
        name = name.strip()
        admin_email = admin_email.strip()
        if not name or not admin_email:
            raise ValidationError("Franchise name and franchisee admin email are required")
        franchise = await self.service.create_franchise(name, admin_email)
        logger.debug("franchise_created franchise_id=%s", franchise.id)
        await self.refresh_franchises()
        return franchise

    def request_close_franchise(self, franchise: Franchise) -> None:
        self.close_flow.request(franchise)

    def cancel_close_franchise(self) -> None:
        self.close_flow.cancel()

    async def confirm_close_franchise(self) -> Franchise:
        return await self.close_flow.confirm(self._close_franchise)

    async def _close_franchise(self, franchise: Franchise) -> Franchise:
        await self.service.close_franchise(franchise.id)
        logger.debug("franchise_closed franchise_id=%s", franchise.id)
        await self.refresh_franchises()
        return franchise

    async def delete_user(self, user: User) -> None:
        await self.service.delete_user(user.id)
        logger.debug("user_deleted user_id=%s", user.id)
        await self.refresh_users()


def dashboard_for(service: PizzaService, user: User) -> Dashboard:
    """Pick the most privileged dashboard the user's roles allow."""
    if user.is_admin:
        return AdminDashboard(service, user)
    if user.is_franchisee and user.franchise_ids():
        return FranchiseeDashboard(service, user)
    return DinerDashboard(service, user)

