"""
Marketplace Errors

Every rule the engine enforces fails with a specific MarketplaceError
subclass. Each class carries a stable ``code`` so callers can branch on the
error kind without matching messages.
"""


class MarketplaceError(Exception):
    """Base exception for marketplace rule violations."""

    code = "marketplace_error"

    def __init__(self, message: str, *, item_id: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.item_id = item_id

    def __str__(self) -> str:
        return self.message


class NotFound(MarketplaceError):
    """Item id does not exist."""

    code = "not_found"


class NotOwner(MarketplaceError):
    """Caller is not the current owner of the item."""

    code = "not_owner"


class InvalidPrice(MarketplaceError):
    """Listing price is not a positive integer."""

    code = "invalid_price"


class InvalidAmount(MarketplaceError):
    """Fee, tip or like amount is out of range."""

    code = "invalid_amount"


class InvalidOfferPrice(MarketplaceError):
    """Offer price is not a positive integer."""

    code = "invalid_offer_price"


class NotForSale(MarketplaceError):
    code = "not_for_sale"


class PriceMismatch(MarketplaceError):
    """Tendered amount differs from the listed price."""

    code = "price_mismatch"


class SelfTransfer(MarketplaceError):
    code = "self_transfer"


class SelfPurchase(MarketplaceError):
    code = "self_purchase"


class InvalidRecipient(MarketplaceError):
    code = "invalid_recipient"


class OwnerCannotOffer(MarketplaceError):
    code = "owner_cannot_offer"


class NoMatchingOffer(MarketplaceError):
    code = "no_matching_offer"


class DuplicateLike(MarketplaceError):
    code = "duplicate_like"


class InvalidRarity(MarketplaceError):
    code = "invalid_rarity"


class InvalidSortKey(MarketplaceError):
    code = "invalid_sort_key"


class InvalidMetadata(MarketplaceError):
    code = "invalid_metadata"


class PaymentFailed(MarketplaceError):
    """The payment gateway rejected a transfer; nothing was moved."""

    code = "payment_failed"


class InsufficientBalance(PaymentFailed):
    """Payer balance does not cover the requested amount."""

    code = "insufficient_balance"

    def __init__(
        self,
        message: str,
        *,
        account: str | None = None,
        required: int = 0,
        available: int = 0,
        item_id: int | None = None,
    ) -> None:
        super().__init__(message, item_id=item_id)
        self.account = account
        self.required = required
        self.available = available


__all__ = [
    "MarketplaceError",
    "NotFound",
    "NotOwner",
    "InvalidPrice",
    "InvalidAmount",
    "InvalidOfferPrice",
    "NotForSale",
    "PriceMismatch",
    "SelfTransfer",
    "SelfPurchase",
    "InvalidRecipient",
    "OwnerCannotOffer",
    "NoMatchingOffer",
    "DuplicateLike",
    "InvalidRarity",
    "InvalidSortKey",
    "InvalidMetadata",
    "PaymentFailed",
    "InsufficientBalance",
]
