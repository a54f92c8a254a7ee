"""
Ownership & Listing Manager

Listing, repricing, direct purchase and gift transfer of items.

Every method validates first and pays second; nothing after the gateway
call can fail, so a rejected payment leaves the item untouched.
"""

import structlog

from nftmarket.errors import (
    InvalidPrice,
    InvalidRecipient,
    NotForSale,
    PriceMismatch,
    SelfPurchase,
    SelfTransfer,
)
from nftmarket.models.item import Item
from nftmarket.models.settlement import (
    MARKETPLACE_FEE_PERCENT,
    FeeSplit,
    Settlement,
    SettlementKind,
)
from nftmarket.services.registry import (
    ItemRegistry,
    clean_identity,
    is_positive_int,
    require_owner,
)
from nftmarket.services.settlement import SettlementLedger

logger = structlog.get_logger(__name__)


class ListingManager:
    """Mutates owner, price and sale flag of registry items."""

    def __init__(self, registry: ItemRegistry, ledger: SettlementLedger) -> None:
        self._registry = registry
        self._ledger = ledger

    def _require_price(self, item: Item, price: int) -> None:
        if not is_positive_int(price):
            raise InvalidPrice(
                f"Price must be a positive integer, got {price!r}", item_id=item.id
            )

    async def list_for_sale(self, caller: str, item_id: int, price: int) -> Item:
        caller = clean_identity(caller)
        item = self._registry.get(item_id)
        require_owner(item, caller)
        self._require_price(item, price)

        item.list_at(price)
        logger.info("item_listed", item_id=item_id, price=price)
        return item

    async def set_price(self, caller: str, item_id: int, price: int) -> Item:
        """Change the asking price; the sale flag is left as it is."""
        caller = clean_identity(caller)
        item = self._registry.get(item_id)
        require_owner(item, caller)
        self._require_price(item, price)

        old_price = item.price
        item.reprice(price)
        logger.info("item_repriced", item_id=item_id, old_price=old_price, price=price)
        return item

    async def cancel_listing(self, caller: str, item_id: int) -> Item:
        """Take the item off sale. Pending offers stay in place."""
        caller = clean_identity(caller)
        item = self._registry.get(item_id)
        require_owner(item, caller)

        item.clear_listing()
        logger.info("listing_cancelled", item_id=item_id)
        return item

    async def purchase(
        self,
        caller: str,
        item_id: int,
        amount: int | None = None,
    ) -> Settlement:
        """
        Buy a listed item at exactly its asking price.

        The buyer pays the seller the price less the marketplace fee, and the
        fee account the fee, in a single gateway transfer.
        """
        caller = clean_identity(caller)
        item = self._registry.get(item_id)
        if not item.for_sale:
            raise NotForSale(f"Item {item_id} is not for sale", item_id=item_id)
        if item.owner == caller:
            raise SelfPurchase(f"{caller} already owns item {item_id}", item_id=item_id)

        tendered = item.price if amount is None else amount
        if tendered != item.price:
            raise PriceMismatch(
                f"Tendered {tendered!r} does not match price {item.price}",
                item_id=item_id,
            )

        seller = item.owner
        split = FeeSplit.compute(item.price, MARKETPLACE_FEE_PERCENT)
        settlement = await self._ledger.settle(
            SettlementKind.PURCHASE,
            item_id,
            payer=caller,
            payee=seller,
            split=split,
        )

        item.transfer_to(caller)
        logger.info(
            "item_purchased",
            item_id=item_id,
            seller=seller,
            buyer=caller,
            price=split.gross,
            marketplace_fee=split.fee,
        )
        return settlement

    async def transfer(self, caller: str, item_id: int, recipient: str) -> Item:
        """Give the item away. No payment, no fee."""
        caller = clean_identity(caller)
        item = self._registry.get(item_id)
        require_owner(item, caller)
        recipient = clean_identity(recipient)
        if not isinstance(recipient, str) or not recipient:
            raise InvalidRecipient("Recipient must be a non-empty identity", item_id=item_id)
        if recipient == caller:
            raise SelfTransfer(f"{caller} cannot transfer item {item_id} to itself", item_id=item_id)

        item.transfer_to(recipient)
        logger.info("item_transferred", item_id=item_id, sender=caller, recipient=recipient)
        return item
