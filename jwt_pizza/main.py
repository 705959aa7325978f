"""Entry point for the JWT Pizza Textual app."""

from __future__ import annotations

import argparse

from jwt_pizza.config import API_BASE_URL, DB_PATH
from jwt_pizza.context import build_context
from jwt_pizza.pizza_app import PizzaApp, configure_debug_log


def main(argv: list[str] | None = None) -> None:
    """Run the Textual application."""
    parser = argparse.ArgumentParser(prog="jwt-pizza", description="Order pizza from a JWT Pizza service.")
    parser.add_argument("--api-url", default=API_BASE_URL, help="base URL of the pizza service")
    parser.add_argument("--db", default=DB_PATH, help="local state database")
    parser.add_argument("--path", default="/", help="view to open first, e.g. /menu or /admin-dashboard")
    args = parser.parse_args(argv)

    configure_debug_log()
    context = build_context(base_url=args.api_url, db_path=args.db)
    PizzaApp(context=context, initial_path=args.path).run()


if __name__ == "__main__":
    main()
