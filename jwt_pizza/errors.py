"""Error taxonomy shared by the service, session, checkout and dashboards."""

from __future__ import annotations


class PizzaError(Exception):
    """Base class for every handled storefront failure."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ApiError(PizzaError):
    """A backend call returned a non-2xx status or never reached the server."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status

    def __str__(self) -> str:
        return f"{self.status}: {self.message}" if self.status else self.message


class AuthzError(ApiError):
    """The backend refused the caller's role or ownership."""


class NotFoundError(ApiError):
    """Unknown resource or unmatched route."""


class AuthError(PizzaError):
    """Invalid credentials, duplicate registration or a rejected profile update."""


class PaymentError(PizzaError):
    """Order submission failed; the cart is kept for a retry."""


class ValidationError(PizzaError):
    """A client-side guard blocked the action before any request was sent."""
