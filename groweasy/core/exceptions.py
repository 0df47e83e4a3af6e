"""Domain exceptions raised by services and mapped to HTTP responses in main."""
from typing import Dict, Optional


class MarketplaceError(Exception):
    """Base exception for marketplace business rule violations."""
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(MarketplaceError):
    status_code = 404


class PermissionDeniedError(MarketplaceError):
    status_code = 403


class ConflictError(MarketplaceError):
    """Duplicate record (email, SKU, coupon code, affiliate link...)."""
    status_code = 400


class InvalidStateError(MarketplaceError):
    """Requested transition is not allowed from the record's current status."""
    status_code = 400


class UnprocessableError(MarketplaceError):
    """Request is well formed but breaks a field rule once merged with stored values."""
    status_code = 422


class PaymentGatewayError(MarketplaceError):
    """Razorpay / RazorpayX call failed."""
    status_code = 502
