"""Cart manager for one checkout attempt."""

from __future__ import annotations

from decimal import Decimal

from jwt_pizza.errors import ValidationError
from jwt_pizza.models import Identifier, MenuItem, Order, OrderItem


class Cart:
    """Selected pizzas and the store they are ordered from."""

    def __init__(self) -> None:
        self.store_id: Identifier | None = None
        self.franchise_id: Identifier | None = None
        self.items: list[MenuItem] = []

    @property
    def count(self) -> int:
        return len(self.items)

    def select_store(self, store_id: Identifier | None, franchise_id: Identifier | None = None) -> None:
        self.store_id = store_id
        self.franchise_id = franchise_id

    def add_item(self, item: MenuItem) -> None:
        self.items.append(item)

    def remove_item(self, index: int) -> MenuItem:
        if not (0 <= index < len(self.items)):
            raise IndexError(f"No cart item at position {index}")
        return self.items.pop(index)

    def clear(self) -> None:
        self.store_id = None
        self.franchise_id = None
        self.items.clear()

    def total_price(self) -> Decimal:
        return sum((item.price for item in self.items), Decimal("0"))

    def can_checkout(self) -> bool:
        return self.store_id is not None and len(self.items) > 0

    def to_order(self) -> Order:
        """Build the order request body for the current selection."""
        if not self.can_checkout():
            raise ValidationError("Choose a store and at least one pizza")
        return Order(
            items=[OrderItem.from_menu_item(item) for item in self.items],
            store_id=self.store_id,  # type: ignore[arg-type]
            franchise_id=self.franchise_id,
        )
