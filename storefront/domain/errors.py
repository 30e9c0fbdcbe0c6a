"""Errors raised by the order workflow.

Every error carries a machine-readable ``kind`` and a human-readable message;
the API layer maps ``kind`` to an HTTP status in one place.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.message}


class InvalidRequest(StorefrontError):
    """Missing or malformed input."""

    kind = "invalid_request"
    status_code = 400


class Unauthorized(StorefrontError):
    """Bearer credential missing or rejected by the identity service."""

    kind = "unauthorized"
    status_code = 401


class Forbidden(StorefrontError):
    """Caller lacks the capability for the requested action."""

    kind = "forbidden"
    status_code = 403


class NotFound(StorefrontError):
    kind = "not_found"
    status_code = 404


class InsufficientStock(StorefrontError):
    """Requested quantity exceeds the variant's available stock."""

    kind = "insufficient_stock"
    status_code = 409

    def __init__(self, variant_id: int, requested: int, available: int):
        self.variant_id = variant_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for variant {variant_id}: "
            f"requested {requested}, available {available}"
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["variant_id"] = self.variant_id
        return data


class Conflict(StorefrontError):
    """Illegal state transition or duplicate tracking assignment."""

    kind = "conflict"
    status_code = 409


class Internal(StorefrontError):
    """Store or transport failure."""

    kind = "internal"
    status_code = 500
