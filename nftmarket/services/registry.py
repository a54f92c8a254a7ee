"""
Item Registry

Append-only store of every minted item. Ids are the registry position at
mint time, so they are sequential and never reused.
"""

from collections.abc import Iterable, Iterator

import structlog
from pydantic import ValidationError

from nftmarket.config import normalize_identity
from nftmarket.errors import InvalidAmount, InvalidMetadata, NotFound, NotOwner
from nftmarket.models.base import Rarity
from nftmarket.models.item import Item
from nftmarket.models.settlement import FeeSplit, SettlementKind
from nftmarket.services.settlement import SettlementLedger

logger = structlog.get_logger(__name__)


def clean_identity(value: str) -> str:
    """Identities are stored stripped, so compare them stripped too."""
    return value.strip() if isinstance(value, str) else value


def require_owner(item: Item, caller: str) -> None:
    if item.owner != caller:
        raise NotOwner(f"{caller} does not own item {item.id}", item_id=item.id)


def is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class ItemRegistry:
    """
    Owns the item collection and mints new items.

    Lookups return the live record; callers outside the engine should use
    ``snapshot`` so they cannot mutate registry state.
    """

    def __init__(
        self,
        ledger: SettlementLedger,
        persistent_whitelist: Iterable[str] = (),
    ) -> None:
        self._items: list[Item] = []
        self._ledger = ledger
        self._persistent_whitelist = frozenset(
            normalize_identity(entry) for entry in persistent_whitelist if entry.strip()
        )

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self._items)

    def get(self, item_id: int) -> Item:
        """Live record for ``item_id``; raises NotFound when out of range."""
        if isinstance(item_id, bool) or not isinstance(item_id, int):
            raise NotFound(f"Item {item_id!r} not found")
        if item_id < 0 or item_id >= len(self._items):
            raise NotFound(f"Item {item_id} not found", item_id=item_id)
        return self._items[item_id]

    def snapshot(self, item_id: int) -> Item:
        return self.get(item_id).model_copy(deep=True)

    def is_whitelisted(self, caller: str, whitelist: Iterable[str] = ()) -> bool:
        allowed = self._persistent_whitelist | {
            normalize_identity(entry) for entry in whitelist if entry.strip()
        }
        return normalize_identity(caller) in allowed

    async def create(
        self,
        caller: str,
        name: str,
        description: str,
        uri: str,
        rarity: Rarity | int | str,
        fee: int = 0,
        whitelist: Iterable[str] = (),
    ) -> Item:
        """
        Mint a new item owned and created by ``caller``.

        Unless ``caller`` is whitelisted, the minting ``fee`` is paid to the
        fee account before the item is appended.
        """
        caller = clean_identity(caller)
        tier = Rarity.parse(rarity)
        if isinstance(fee, bool) or not isinstance(fee, int) or fee < 0:
            raise InvalidAmount(f"Minting fee must be a non-negative integer, got {fee!r}")
        if not name or not name.strip():
            raise InvalidMetadata("Item name must not be empty")

        item_id = len(self._items)
        # Build the record first so malformed metadata fails before payment
        try:
            item = Item(
                id=item_id,
                owner=caller,
                creator=caller,
                name=name,
                description=description,
                uri=uri,
                rarity=tier,
            )
        except ValidationError as e:
            raise InvalidMetadata(f"Invalid item metadata: {e}") from e

        whitelisted = self.is_whitelisted(caller, whitelist)
        if fee > 0 and not whitelisted:
            await self._ledger.settle(
                SettlementKind.MINT_FEE,
                item_id,
                payer=caller,
                payee=self._ledger.fee_account,
                split=FeeSplit.compute(fee, 0),
            )

        self._items.append(item)

        logger.info(
            "item_minted",
            item_id=item_id,
            creator=caller,
            rarity=tier.name,
            fee_waived=whitelisted or fee == 0,
        )
        return item
