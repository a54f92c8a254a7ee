"""
NFT Marketplace Models

Pydantic models for all domain entities.
"""

from nftmarket.models.base import (
    MarketModel,
    Rarity,
    generate_id,
    utc_now,
)
from nftmarket.models.item import (
    Item,
    Offer,
)
from nftmarket.models.settlement import (
    MARKETPLACE_FEE_PERCENT,
    TIP_FEE_PERCENT,
    FeeSplit,
    MarketplaceStats,
    Settlement,
    SettlementKind,
)

__all__ = [
    # Base
    "MarketModel",
    "Rarity",
    "generate_id",
    "utc_now",
    # Item
    "Item",
    "Offer",
    # Settlement
    "MARKETPLACE_FEE_PERCENT",
    "TIP_FEE_PERCENT",
    "FeeSplit",
    "MarketplaceStats",
    "Settlement",
    "SettlementKind",
]
