"""
Item Models

The tradable item record and the offers attached to it.
"""

from datetime import datetime

from pydantic import Field, model_validator

from nftmarket.models.base import MarketModel, Rarity, utc_now


class Offer(MarketModel):
    """A buyer's pending purchase proposal for one item."""

    buyer: str = Field(min_length=1, description="Identity proposing to buy")
    offer_price: int = Field(gt=0, description="Proposed price in base units")
    created_at: datetime = Field(default_factory=utc_now)


class Item(MarketModel):
    """
    A unique item held in the registry.

    ``owner``, ``price``, ``for_sale``, ``offers``, ``likes`` and ``likers``
    change over the item's life; every other field is fixed at mint time.
    Mutations go through the helper methods below so that each assignment
    keeps the model valid.
    """

    id: int = Field(ge=0)
    owner: str = Field(min_length=1)
    creator: str = Field(min_length=1)

    # Metadata
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    uri: str = Field(default="", max_length=2048)
    rarity: Rarity

    # Listing
    price: int = Field(default=0, ge=0)
    for_sale: bool = Field(default=False)

    # Offers keyed by buyer, in insertion order
    offers: dict[str, Offer] = Field(default_factory=dict)

    # Engagement
    likes: int = Field(default=0, ge=0)
    likers: set[str] = Field(default_factory=set)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def check_invariants(self) -> "Item":
        if self.for_sale and self.price <= 0:
            raise ValueError("an item for sale must have a positive price")
        if self.likes != len(self.likers):
            raise ValueError("likes must equal the number of likers")
        return self

    @property
    def rarity_tier(self) -> Rarity:
        return Rarity(self.rarity)

    def list_at(self, price: int) -> None:
        """Put the item on sale at ``price``."""
        self.price = price
        self.for_sale = True
        self.updated_at = utc_now()

    def reprice(self, price: int) -> None:
        self.price = price
        self.updated_at = utc_now()

    def clear_listing(self) -> None:
        self.for_sale = False
        self.price = 0
        self.updated_at = utc_now()

    def transfer_to(self, new_owner: str) -> None:
        """
        Hand the item to ``new_owner``.

        The listing is cleared and any offer the new owner had pending is
        discarded, since an owner may not hold an offer on their own item.
        """
        self.for_sale = False
        self.price = 0
        self.owner = new_owner
        self.offers.pop(self.owner, None)
        self.updated_at = utc_now()

    def put_offer(self, offer: Offer) -> Offer | None:
        """Store ``offer``, replacing and returning the buyer's previous one."""
        previous = self.offers.pop(offer.buyer, None)
        self.offers[offer.buyer] = offer
        return previous

    def record_like(self, identity: str) -> None:
        self.likers.add(identity)
        self.likes = len(self.likers)
