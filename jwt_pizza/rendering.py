"""Rendering helpers for badges, prices and list rows."""

from __future__ import annotations

from decimal import Decimal

from rich.text import Text

from jwt_pizza.config import CURRENCY_SYMBOL
from jwt_pizza.models import ROLE_ADMIN, ROLE_FRANCHISEE, Order, Role, Store, User
from jwt_pizza.session import initials


def badge_style(role: str) -> str:
    """Return a consistent badge style for role tags."""
    if role == ROLE_ADMIN:
        return "bold #ffffff on #b23a48"
    if role == ROLE_FRANCHISEE:
        return "bold #ffffff on #2f6db5"
    return "bold #0b1f0f on #5fbf72"


def format_price(amount: Decimal | None) -> str:
    """Plain decimal text without exponent or trailing zeros: 0.0080 -> 0.008."""
    if amount is None:
        return "0"
    normalized = amount.normalize()
    text = format(normalized, "f")
    return text if text not in ("", "-0") else "0"


def format_currency(amount: Decimal | None) -> str:
    return f"{CURRENCY_SYMBOL} {format_price(amount)}"


def format_initials_badge(user: User | None) -> Text:
    """Nav-bar badge: initials for signed-in users, login hint otherwise."""
    text = Text()
    if user is None:
        text.append("Login", style="bold")
        text.append("  Register")
        return text
    text.append(f" {initials(user.name)} ", style="bold #ffffff on #d97706")
    text.append("  Logout")
    return text


def format_role_tags(roles: list[Role]) -> Text:
    """Render role grants as compact colored tags."""
    text = Text()
    for idx, grant in enumerate(roles):
        if idx > 0:
            text.append(" ")
        label = grant.role if grant.object_id is None else f"{grant.role} #{grant.object_id}"
        text.append(f" {label} ", style=badge_style(grant.role))
    return text


def format_user_row(user: User) -> Text:
    text = Text()
    text.append(user.name, style="bold")
    text.append(f"  {user.email}  ")
    text.append_text(format_role_tags(user.roles))
    return text


def format_store_row(store: Store) -> Text:
    text = Text()
    text.append(store.name, style="bold")
    if store.total_revenue is not None:
        text.append(f"  {format_currency(store.total_revenue)}")
    return text


def format_order_summary(order: Order) -> Text:
    """Order history / receipt line: id, date, pizza count and total."""
    text = Text()
    text.append(f"#{order.id}" if order.id is not None else "#-", style="bold")
    if order.date:
        text.append(f"  {order.date[:10]}")
    count = len(order.items)
    text.append(f"  {count} {'pizza' if count == 1 else 'pizzas'}")
    text.append(f"  {format_currency(order.total_price())}")
    return text
