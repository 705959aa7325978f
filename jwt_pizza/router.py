"""Path dispatch for the storefront views."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

NOT_FOUND = "not-found"

_ROUTES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^/$"), "home"),
    (re.compile(r"^/about$"), "about"),
    (re.compile(r"^/history$"), "history"),
    (re.compile(r"^/docs$"), "docs"),
    (re.compile(r"^/login$"), "login"),
    (re.compile(r"^/register$"), "register"),
    (re.compile(r"^/logout$"), "logout"),
    (re.compile(r"^/menu$"), "menu"),
    (re.compile(r"^/payment$"), "payment"),
    (re.compile(r"^/delivery$"), "delivery"),
    (re.compile(r"^/diner-dashboard$"), "diner-dashboard"),
    (re.compile(r"^/franchise-dashboard$"), "franchise-dashboard"),
    (re.compile(r"^/franchise/(?P<franchise_id>[^/]+)$"), "franchise-dashboard"),
    (re.compile(r"^/admin(?:-dashboard)?$"), "admin-dashboard"),
]


@dataclass(frozen=True)
class Route:
    """A resolved view name plus any path parameters."""

    name: str
    path: str
    params: dict[str, str] = field(default_factory=dict)

    @property
    def found(self) -> bool:
        return self.name != NOT_FOUND


def resolve(path: str) -> Route:
    """Map a path to a view; anything unknown lands on the not-found view."""
    clean = path.split("?", 1)[0].strip() or "/"
    if len(clean) > 1:
        clean = clean.rstrip("/")
    for pattern, name in _ROUTES:
        match = pattern.match(clean)
        if match:
            return Route(name=name, path=clean, params=match.groupdict())
    return Route(name=NOT_FOUND, path=clean)
