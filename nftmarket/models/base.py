"""
Base Models and Common Types

Foundation classes for all marketplace models.
"""

from datetime import UTC, datetime
from enum import IntEnum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict

from nftmarket.errors import InvalidRarity


def utc_now() -> datetime:
    return datetime.now(UTC)


def generate_id() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


class MarketModel(BaseModel):
    """Base model for all marketplace entities with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_assignment=True,
        use_enum_values=True,
    )


class Rarity(IntEnum):
    """
    Rarity tier of an item, fixed at mint time.

    Values match the tiers offered by the minting form.
    """

    COMMON = 1
    UNCOMMON = 2
    RARE = 3
    EPIC = 4

    @classmethod
    def parse(cls, value: Any) -> "Rarity":
        """Accept a Rarity, its integer value, or its case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise InvalidRarity(f"Unknown rarity: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise InvalidRarity(f"Unknown rarity: {value!r}") from None
        if isinstance(value, str):
            name = value.strip().upper()
            if name.isdigit():
                return cls.parse(int(name))
            if name in cls.__members__:
                return cls[name]
        raise InvalidRarity(f"Unknown rarity: {value!r}")

    @property
    def label(self) -> str:
        return self.name.capitalize()
