"""Caller-facing errors raised by the transaction lifecycle.

Every error here is recoverable: the API layer turns it into a JSON
response with the error's ``status_code``.
"""


class MarketplaceError(Exception):
    """Base class for marketplace errors."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(MarketplaceError):
    """Transaction, product or user does not exist."""

    status_code = 404


class Unauthorized(MarketplaceError):
    """Caller is not allowed to act on the transaction."""

    status_code = 403


class InvalidState(MarketplaceError):
    """Operation is not legal for the transaction's current status."""

    status_code = 409


class InvalidRating(MarketplaceError):
    status_code = 422


class InvalidDispute(MarketplaceError):
    status_code = 422


class BelowReputationThreshold(MarketplaceError):
    """Seller's stored credibility score is under the admission minimum."""

    status_code = 403

    def __init__(self, message: str, score: float, minimum: float):
        super().__init__(message)
        self.score = score
        self.minimum = minimum


class ProductUnavailable(MarketplaceError):
    status_code = 409


class ConcurrentUpdateError(MarketplaceError):
    """Compare-and-set kept losing to concurrent writers."""

    status_code = 409


class InvalidAmount(MarketplaceError):
    status_code = 422
