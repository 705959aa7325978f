"""Runtime configuration defaults for the API client, persistence and logging."""

from __future__ import annotations

import os

API_BASE_URL = os.environ.get("JWT_PIZZA_API_URL", "http://localhost:3000")
HTTP_TIMEOUT_SECONDS = 10.0

DB_PATH = os.environ.get("JWT_PIZZA_DB_PATH", "data/jwt-pizza.db")
DEBUG_LOG_PATH = os.environ.get("JWT_PIZZA_DEBUG_LOG", "/tmp/jwt-pizza-debug.log")

# Page sizes used by the admin dashboard lists.
USER_PAGE_LIMIT = 10
FRANCHISE_PAGE_LIMIT = 3
ORDER_HISTORY_FIRST_PAGE = 1

CURRENCY_SYMBOL = "₿"
