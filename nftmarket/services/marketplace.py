"""
Marketplace Service

Single entry point to the marketplace state engine: minting, listings,
purchases, transfers, offers, likes, tips and queries.

Every mutating call runs as one transaction under a single lock: the item is
looked up, the caller's authority and the item's state are checked, the
payment (if any) is executed through the gateway, and only then is the item
changed. A rejected call leaves the registry exactly as it was.

Reads take no lock and return deep copies of registry records.
"""

import asyncio
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

import structlog

from nftmarket.config import Settings, get_settings
from nftmarket.errors import MarketplaceError
from nftmarket.models.base import Rarity
from nftmarket.models.item import Item, Offer
from nftmarket.models.settlement import (
    MARKETPLACE_FEE_PERCENT,
    TIP_FEE_PERCENT,
    MarketplaceStats,
    Settlement,
)
from nftmarket.monitoring.logging import log_duration, operation_context
from nftmarket.services import query
from nftmarket.services.engagement import EngagementTracker
from nftmarket.services.gateway import InMemoryPaymentGateway, PaymentGateway
from nftmarket.services.listing import ListingManager
from nftmarket.services.offers import OfferLedger
from nftmarket.services.query import SortKey
from nftmarket.services.registry import ItemRegistry
from nftmarket.services.settlement import SettlementLedger

logger = structlog.get_logger(__name__)


class MarketplaceService:
    """
    Central service for marketplace operations.
    """

    MARKETPLACE_FEE_PERCENT = MARKETPLACE_FEE_PERCENT
    TIP_FEE_PERCENT = TIP_FEE_PERCENT

    def __init__(
        self,
        gateway: PaymentGateway | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.gateway = gateway if gateway is not None else InMemoryPaymentGateway()

        self.ledger = SettlementLedger(self.gateway, self.settings.fee_account)
        self.registry = ItemRegistry(
            self.ledger,
            persistent_whitelist=self.settings.mint_whitelist_set,
        )
        self.listings = ListingManager(self.registry, self.ledger)
        self.offers = OfferLedger(self.registry, self.ledger)
        self.engagement = EngagementTracker(
            self.registry,
            self.ledger,
            default_like_fee=self.settings.like_fee,
        )

        # Whole-registry write lock; one mutating operation at a time
        self._lock = asyncio.Lock()

    @property
    def fee_account(self) -> str:
        return self.ledger.fee_account

    @asynccontextmanager
    async def _transaction(
        self,
        operation: str,
        caller: str,
        item_id: int | None = None,
    ) -> AsyncIterator[None]:
        async with self._lock:
            with operation_context(operation, caller=caller, item_id=item_id):
                try:
                    yield
                except MarketplaceError as e:
                    logger.warning("operation_rejected", error=e.code, reason=e.message)
                    raise

    # =========================================================================
    # Registry
    # =========================================================================

    async def create_item(
        self,
        caller: str,
        name: str,
        description: str,
        uri: str,
        rarity: Rarity | int | str,
        fee: int = 0,
        whitelist: Iterable[str] = (),
    ) -> int:
        """Mint a new item and return its id."""
        async with self._transaction("create_item", caller):
            item = await self.registry.create(
                caller,
                name=name,
                description=description,
                uri=uri,
                rarity=rarity,
                fee=fee,
                whitelist=whitelist,
            )
            return item.id

    async def get_item(self, item_id: int) -> Item:
        """Get an item by id; raises NotFound."""
        return self.registry.snapshot(item_id)

    async def item_count(self) -> int:
        return len(self.registry)

    # =========================================================================
    # Listings
    # =========================================================================

    async def list_for_sale(self, caller: str, item_id: int, price: int) -> Item:
        async with self._transaction("list_for_sale", caller, item_id):
            item = await self.listings.list_for_sale(caller, item_id, price)
            return item.model_copy(deep=True)

    async def set_price(self, caller: str, item_id: int, price: int) -> Item:
        async with self._transaction("set_price", caller, item_id):
            item = await self.listings.set_price(caller, item_id, price)
            return item.model_copy(deep=True)

    async def cancel_listing(self, caller: str, item_id: int) -> Item:
        async with self._transaction("cancel_listing", caller, item_id):
            item = await self.listings.cancel_listing(caller, item_id)
            return item.model_copy(deep=True)

    async def purchase(
        self,
        caller: str,
        item_id: int,
        amount: int | None = None,
    ) -> Settlement:
        """Buy a listed item; ``amount`` defaults to the asking price."""
        async with self._transaction("purchase", caller, item_id):
            return await self.listings.purchase(caller, item_id, amount)

    async def transfer(self, caller: str, item_id: int, recipient: str) -> Item:
        async with self._transaction("transfer", caller, item_id):
            item = await self.listings.transfer(caller, item_id, recipient)
            return item.model_copy(deep=True)

    # =========================================================================
    # Offers
    # =========================================================================

    async def make_offer(self, caller: str, item_id: int, price: int) -> Offer:
        async with self._transaction("make_offer", caller, item_id):
            return await self.offers.make_offer(caller, item_id, price)

    async def accept_offer(self, caller: str, item_id: int, buyer: str) -> Settlement:
        """Sell to ``buyer``; every other pending offer is cleared."""
        async with self._transaction("accept_offer", caller, item_id):
            return await self.offers.accept_offer(caller, item_id, buyer)

    async def decline_offer(self, caller: str, item_id: int, buyer: str) -> Offer:
        async with self._transaction("decline_offer", caller, item_id):
            return await self.offers.decline_offer(caller, item_id, buyer)

    async def withdraw_offer(self, caller: str, item_id: int) -> Offer:
        async with self._transaction("withdraw_offer", caller, item_id):
            return await self.offers.withdraw_offer(caller, item_id)

    async def list_offers(self, item_id: int) -> list[Offer]:
        return self.offers.list_offers(item_id)

    # =========================================================================
    # Engagement
    # =========================================================================

    async def like(self, caller: str, item_id: int, fee: int | None = None) -> Settlement:
        async with self._transaction("like", caller, item_id):
            return await self.engagement.like(caller, item_id, fee)

    async def tip(self, caller: str, item_id: int, amount: int) -> Settlement:
        async with self._transaction("tip", caller, item_id):
            return await self.engagement.tip(caller, item_id, amount)

    async def get_like_count(self, item_id: int) -> int:
        return self.engagement.get_like_count(item_id)

    async def get_likers(self, item_id: int) -> list[str]:
        return self.engagement.get_likers(item_id)

    # =========================================================================
    # Queries
    # =========================================================================

    async def list_for_sale_items(
        self,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Item]:
        return query.items_for_sale(self.registry, limit=limit, offset=offset)

    async def items_by_rarity(self, rarity: Rarity | int | str) -> list[Item]:
        return query.items_by_rarity(self.registry, rarity)

    async def items_by_owner(
        self,
        owner: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Item]:
        return query.items_by_owner(self.registry, owner, limit=limit, offset=offset)

    async def items_by_creator(self, creator: str) -> list[Item]:
        return query.items_by_creator(self.registry, creator)

    async def search_and_sort(
        self,
        query_text: str = "",
        rarity: Rarity | int | str | None = None,
        sort: SortKey | str | None = None,
    ) -> list[Item]:
        with log_duration(logger, "search_and_sort", level="debug", query=query_text):
            return query.search_and_sort(
                self.registry, query_text, rarity=rarity, sort=sort
            )

    # =========================================================================
    # Statistics
    # =========================================================================

    async def get_marketplace_stats(self) -> MarketplaceStats:
        """Get overall marketplace statistics."""
        with log_duration(logger, "marketplace_stats", level="debug"):
            return query.marketplace_stats(self.registry, self.ledger.history())

    async def get_settlements(self, item_id: int | None = None) -> list[Settlement]:
        if item_id is not None:
            self.registry.get(item_id)
        return self.ledger.history(item_id)
