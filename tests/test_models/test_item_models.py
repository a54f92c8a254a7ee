"""
Item Model Tests

Tests cover:
- Rarity parsing
- Item construction and field validation
- Invariants enforced on assignment (for_sale/price, likes/likers)
- Mutation helpers (listing, transfer, offers, likes)
"""

import pytest
from pydantic import ValidationError

from nftmarket.errors import InvalidRarity
from nftmarket.models.base import Rarity
from nftmarket.models.item import Item, Offer


def make_item(**overrides) -> Item:
    fields = {
        "id": 0,
        "owner": "alice",
        "creator": "alice",
        "name": "Glass Owl",
        "description": "An owl made of glass",
        "uri": "ipfs://owl",
        "rarity": Rarity.COMMON,
    }
    fields.update(overrides)
    return Item(**fields)


# =============================================================================
# Rarity
# =============================================================================


class TestRarity:
    """Tests for Rarity enum and parsing."""

    def test_rarity_values(self):
        assert Rarity.COMMON == 1
        assert Rarity.UNCOMMON == 2
        assert Rarity.RARE == 3
        assert Rarity.EPIC == 4

    @pytest.mark.parametrize(
        "value,expected",
        [
            (Rarity.EPIC, Rarity.EPIC),
            (3, Rarity.RARE),
            ("rare", Rarity.RARE),
            ("  Uncommon ", Rarity.UNCOMMON),
            ("2", Rarity.UNCOMMON),
        ],
    )
    def test_parse_accepts_enum_int_and_name(self, value, expected):
        assert Rarity.parse(value) is expected

    @pytest.mark.parametrize("value", [0, 5, "legendary", None, True, 2.0])
    def test_parse_rejects_unknown(self, value):
        with pytest.raises(InvalidRarity):
            Rarity.parse(value)

    def test_label(self):
        assert Rarity.EPIC.label == "Epic"


# =============================================================================
# Item
# =============================================================================


class TestItemModel:
    """Tests for Item construction."""

    def test_defaults(self):
        item = make_item()

        assert item.price == 0
        assert item.for_sale is False
        assert item.offers == {}
        assert item.likes == 0
        assert item.likers == set()
        assert item.rarity_tier is Rarity.COMMON

    def test_rejects_negative_price(self):
        with pytest.raises(ValidationError):
            make_item(price=-1)

    def test_rejects_for_sale_without_price(self):
        with pytest.raises(ValidationError):
            make_item(for_sale=True, price=0)

    def test_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            make_item(name="   ")

    def test_rejects_likes_without_likers(self):
        with pytest.raises(ValidationError):
            make_item(likes=2)

    def test_assignment_is_validated(self):
        item = make_item()

        with pytest.raises(ValidationError):
            item.for_sale = True


class TestItemMutations:
    """Tests for Item mutation helpers."""

    def test_list_at_sets_price_and_flag(self):
        item = make_item()
        item.list_at(250)

        assert item.for_sale is True
        assert item.price == 250

    def test_reprice_keeps_sale_flag(self):
        item = make_item()
        item.reprice(40)

        assert item.price == 40
        assert item.for_sale is False

    def test_clear_listing(self):
        item = make_item()
        item.list_at(250)
        item.clear_listing()

        assert item.for_sale is False
        assert item.price == 0

    def test_transfer_resets_listing_and_drops_new_owner_offer(self):
        item = make_item()
        item.list_at(300)
        item.put_offer(Offer(buyer="bob", offer_price=200))
        item.put_offer(Offer(buyer="carol", offer_price=220))

        item.transfer_to("bob")

        assert item.owner == "bob"
        assert item.creator == "alice"
        assert item.for_sale is False
        assert item.price == 0
        assert list(item.offers) == ["carol"]

    def test_transfer_drops_offer_of_stored_owner(self):
        item = make_item()
        item.put_offer(Offer(buyer="bob", offer_price=200))

        item.transfer_to(" bob")

        assert item.owner == "bob"
        assert item.offers == {}

    def test_put_offer_replaces_previous_from_same_buyer(self):
        item = make_item()
        item.put_offer(Offer(buyer="bob", offer_price=100))
        item.put_offer(Offer(buyer="carol", offer_price=110))

        previous = item.put_offer(Offer(buyer="bob", offer_price=150))

        assert previous.offer_price == 100
        assert list(item.offers) == ["carol", "bob"]
        assert item.offers["bob"].offer_price == 150

    def test_record_like_keeps_count_in_step(self):
        item = make_item()
        item.record_like("bob")
        item.record_like("carol")

        assert item.likes == 2
        assert item.likers == {"bob", "carol"}


class TestOfferModel:
    """Tests for Offer validation."""

    def test_offer_requires_positive_price(self):
        with pytest.raises(ValidationError):
            Offer(buyer="bob", offer_price=0)

    def test_offer_requires_buyer(self):
        with pytest.raises(ValidationError):
            Offer(buyer="", offer_price=10)
