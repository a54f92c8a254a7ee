"""
Query Layer

Read-only projections over registry items. Every function takes an iterable
of items and returns a fresh list of deep copies; none of them mutates its
input, so repeated calls over an unchanged registry return equal results.
"""

from collections.abc import Iterable
from enum import Enum

from nftmarket.errors import InvalidSortKey
from nftmarket.models.base import Rarity
from nftmarket.models.item import Item
from nftmarket.models.settlement import MarketplaceStats, Settlement, SettlementKind
from nftmarket.services.registry import clean_identity


class SortKey(str, Enum):
    """Orderings supported by search_and_sort."""
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    LIKES_DESC = "likes_desc"

    @classmethod
    def parse(cls, value: "SortKey | str") -> "SortKey":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            raw = value.strip()
            # Accept camelCase spellings such as "priceDesc"
            camel = "".join(f"_{c.lower()}" if c.isupper() else c for c in raw)
            for candidate in (raw.lower(), camel.lstrip("_")):
                try:
                    return cls(candidate)
                except ValueError:
                    continue
        raise InvalidSortKey(f"Unknown sort key: {value!r}")


def _copies(items: Iterable[Item]) -> list[Item]:
    return [item.model_copy(deep=True) for item in items]


def _page(items: list[Item], limit: int | None, offset: int) -> list[Item]:
    offset = max(offset, 0)
    if limit is None:
        return items[offset:]
    return items[offset : offset + max(limit, 0)]


def items_for_sale(
    items: Iterable[Item],
    limit: int | None = None,
    offset: int = 0,
) -> list[Item]:
    return _page(_copies(i for i in items if i.for_sale), limit, offset)


def items_by_rarity(items: Iterable[Item], rarity: Rarity | int | str) -> list[Item]:
    tier = Rarity.parse(rarity)
    return _copies(i for i in items if i.rarity == tier)


def items_by_owner(
    items: Iterable[Item],
    owner: str,
    limit: int | None = None,
    offset: int = 0,
) -> list[Item]:
    owner = clean_identity(owner)
    return _page(_copies(i for i in items if i.owner == owner), limit, offset)


def items_by_creator(items: Iterable[Item], creator: str) -> list[Item]:
    creator = clean_identity(creator)
    return _copies(i for i in items if i.creator == creator)


def search_and_sort(
    items: Iterable[Item],
    query: str = "",
    rarity: Rarity | int | str | None = None,
    sort: SortKey | str | None = None,
) -> list[Item]:
    """
    Filter by text and rarity, then order.

    ``query`` is matched case-insensitively as a substring of the name or
    the description; an empty query matches everything. Sorting is stable,
    so ties keep registry order.
    """
    needle = (query or "").strip().casefold()
    tier = Rarity.parse(rarity) if rarity is not None else None
    sort_key = SortKey.parse(sort) if sort is not None else None

    results = [
        i
        for i in items
        if (not needle or needle in i.name.casefold() or needle in i.description.casefold())
        and (tier is None or i.rarity == tier)
    ]

    if sort_key == SortKey.PRICE_ASC:
        results.sort(key=lambda i: i.price)
    elif sort_key == SortKey.PRICE_DESC:
        results.sort(key=lambda i: i.price, reverse=True)
    elif sort_key == SortKey.LIKES_DESC:
        results.sort(key=lambda i: i.likes, reverse=True)

    return _copies(results)


def marketplace_stats(
    items: Iterable[Item],
    settlements: Iterable[Settlement],
) -> MarketplaceStats:
    """Aggregate registry and settlement history into MarketplaceStats."""
    items = list(items)
    settlements = list(settlements)
    sales = [
        s for s in settlements
        if s.kind in (SettlementKind.PURCHASE, SettlementKind.OFFER)
    ]
    engagement = [
        s for s in settlements
        if s.kind in (SettlementKind.LIKE, SettlementKind.TIP)
    ]

    return MarketplaceStats(
        total_items=len(items),
        items_for_sale=sum(1 for i in items if i.for_sale),
        total_sales=len(sales),
        sales_volume=sum(s.gross for s in sales),
        fees_collected=sum(s.fee for s in settlements)
        + sum(s.net for s in settlements if s.kind == SettlementKind.MINT_FEE),
        creator_revenue=sum(s.net for s in engagement),
        total_likes=sum(i.likes for i in items),
        total_tips=sum(1 for s in settlements if s.kind == SettlementKind.TIP),
    )
