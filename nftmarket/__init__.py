"""
NFT Marketplace Engine

Single-ledger marketplace state engine for unique digital items: minting,
listing, trading, offers, likes and tips with fee settlement.
"""

__version__ = "1.0.0"

from nftmarket.config import settings

__all__ = ["settings", "__version__"]
