"""
Engagement Tracker

Likes and tips. Both pay the item's creator, not its current owner.

A like costs a flat fee that goes entirely to the creator and can be given
once per identity per item; there is no unlike. Tips are repeatable and
carry the 1% tip fee for the marketplace.
"""

import structlog

from nftmarket.errors import DuplicateLike, InvalidAmount
from nftmarket.models.settlement import (
    TIP_FEE_PERCENT,
    FeeSplit,
    Settlement,
    SettlementKind,
)
from nftmarket.services.registry import ItemRegistry, clean_identity, is_positive_int
from nftmarket.services.settlement import SettlementLedger

logger = structlog.get_logger(__name__)


class EngagementTracker:
    """Like and tip bookkeeping with creator fee routing."""

    def __init__(
        self,
        registry: ItemRegistry,
        ledger: SettlementLedger,
        default_like_fee: int = 0,
    ) -> None:
        self._registry = registry
        self._ledger = ledger
        self.default_like_fee = default_like_fee

    async def like(self, caller: str, item_id: int, fee: int | None = None) -> Settlement:
        caller = clean_identity(caller)
        item = self._registry.get(item_id)
        like_fee = self.default_like_fee if fee is None else fee
        if isinstance(like_fee, bool) or not isinstance(like_fee, int) or like_fee < 0:
            raise InvalidAmount(
                f"Like fee must be a non-negative integer, got {like_fee!r}",
                item_id=item_id,
            )
        if caller in item.likers:
            raise DuplicateLike(f"{caller} already liked item {item_id}", item_id=item_id)

        settlement = await self._ledger.settle(
            SettlementKind.LIKE,
            item_id,
            payer=caller,
            payee=item.creator,
            split=FeeSplit.compute(like_fee, 0),
        )

        item.record_like(caller)
        logger.info("item_liked", item_id=item_id, liker=caller, likes=item.likes)
        return settlement

    async def tip(self, caller: str, item_id: int, amount: int) -> Settlement:
        caller = clean_identity(caller)
        item = self._registry.get(item_id)
        if not is_positive_int(amount):
            raise InvalidAmount(
                f"Tip amount must be a positive integer, got {amount!r}",
                item_id=item_id,
            )

        split = FeeSplit.compute(amount, TIP_FEE_PERCENT)
        settlement = await self._ledger.settle(
            SettlementKind.TIP,
            item_id,
            payer=caller,
            payee=item.creator,
            split=split,
        )

        logger.info(
            "item_tipped",
            item_id=item_id,
            tipper=caller,
            amount=amount,
            tip_fee=split.fee,
        )
        return settlement

    def get_like_count(self, item_id: int) -> int:
        return self._registry.get(item_id).likes

    def get_likers(self, item_id: int) -> list[str]:
        return sorted(self._registry.get(item_id).likers)
