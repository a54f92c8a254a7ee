"""
NFT Marketplace Services Module

Contains the marketplace engine components:
- ItemRegistry: append-only item store and minting
- ListingManager: listing, purchase and transfer
- OfferLedger: pending offers and their settlement
- EngagementTracker: likes and tips
- MarketplaceService: transactional facade over all of the above
"""

from .gateway import (
    InMemoryPaymentGateway,
    PaymentGateway,
    PaymentReceipt,
    TransferLeg,
)
from .engagement import EngagementTracker
from .listing import ListingManager
from .marketplace import MarketplaceService
from .offers import OfferLedger
from .query import SortKey
from .registry import ItemRegistry
from .settlement import SettlementLedger

__all__ = [
    # Gateway
    "PaymentGateway",
    "InMemoryPaymentGateway",
    "PaymentReceipt",
    "TransferLeg",
    # Components
    "ItemRegistry",
    "ListingManager",
    "OfferLedger",
    "EngagementTracker",
    "SettlementLedger",
    "SortKey",
    # Facade
    "MarketplaceService",
]
