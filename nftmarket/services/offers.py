"""
Offer Ledger

Pending buy proposals per item. Each buyer holds at most one offer per item;
a new offer from the same buyer replaces the old one.

Accepting an offer sells the item to that buyer and clears every pending
offer on it: a sale invalidates all other offers.
"""

import structlog

from nftmarket.errors import (
    InvalidOfferPrice,
    NoMatchingOffer,
    NotForSale,
    OwnerCannotOffer,
)
from nftmarket.models.item import Item, Offer
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


class OfferLedger:
    """Make, accept, decline and withdraw offers."""

    def __init__(self, registry: ItemRegistry, ledger: SettlementLedger) -> None:
        self._registry = registry
        self._ledger = ledger

    def _find_offer(self, item: Item, buyer: str) -> Offer:
        offer = item.offers.get(buyer)
        if offer is None:
            raise NoMatchingOffer(
                f"No offer from {buyer} on item {item.id}", item_id=item.id
            )
        return offer

    async def make_offer(self, caller: str, item_id: int, offer_price: int) -> Offer:
        caller = clean_identity(caller)
        item = self._registry.get(item_id)
        if not is_positive_int(offer_price):
            raise InvalidOfferPrice(
                f"Offer price must be a positive integer, got {offer_price!r}",
                item_id=item_id,
            )
        if item.owner == caller:
            raise OwnerCannotOffer(
                f"Owner cannot make an offer on item {item_id}", item_id=item_id
            )

        offer = Offer(buyer=caller, offer_price=offer_price)
        previous = item.put_offer(offer)

        logger.info(
            "offer_made",
            item_id=item_id,
            buyer=caller,
            offer_price=offer_price,
            replaced_price=previous.offer_price if previous else None,
        )
        return offer

    async def accept_offer(self, caller: str, item_id: int, buyer: str) -> Settlement:
        """
        Sell the item to ``buyer`` at their offered price.

        The buyer funds the sale: the owner receives the offer price less the
        marketplace fee and the fee account receives the fee.
        """
        caller = clean_identity(caller)
        buyer = clean_identity(buyer)
        item = self._registry.get(item_id)
        require_owner(item, caller)
        if not item.for_sale:
            raise NotForSale(f"Item {item_id} is not for sale", item_id=item_id)
        offer = self._find_offer(item, buyer)

        split = FeeSplit.compute(offer.offer_price, MARKETPLACE_FEE_PERCENT)
        settlement = await self._ledger.settle(
            SettlementKind.OFFER,
            item_id,
            payer=buyer,
            payee=caller,
            split=split,
        )

        cleared = len(item.offers)
        item.transfer_to(buyer)
        item.offers.clear()

        logger.info(
            "offer_accepted",
            item_id=item_id,
            seller=caller,
            buyer=buyer,
            offer_price=offer.offer_price,
            marketplace_fee=split.fee,
            offers_cleared=cleared,
        )
        return settlement

    async def decline_offer(self, caller: str, item_id: int, buyer: str) -> Offer:
        """Remove ``buyer``'s offer only; other offers remain."""
        caller = clean_identity(caller)
        buyer = clean_identity(buyer)
        item = self._registry.get(item_id)
        require_owner(item, caller)
        offer = self._find_offer(item, buyer)

        del item.offers[buyer]
        logger.info("offer_declined", item_id=item_id, buyer=buyer)
        return offer

    async def withdraw_offer(self, caller: str, item_id: int) -> Offer:
        """Buyer retracts their own offer."""
        caller = clean_identity(caller)
        item = self._registry.get(item_id)
        offer = self._find_offer(item, caller)

        del item.offers[caller]
        logger.info("offer_withdrawn", item_id=item_id, buyer=caller)
        return offer

    def list_offers(self, item_id: int) -> list[Offer]:
        item = self._registry.get(item_id)
        return [offer.model_copy() for offer in item.offers.values()]
