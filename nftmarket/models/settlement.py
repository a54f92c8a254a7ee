"""
Settlement Models

Fee arithmetic and the records of value the engine moved.
"""

from datetime import datetime
from enum import Enum

from pydantic import Field, model_validator

from nftmarket.models.base import MarketModel, generate_id, utc_now

# Fixed fee schedule, in whole percent of the gross amount
MARKETPLACE_FEE_PERCENT = 2
TIP_FEE_PERCENT = 1


class SettlementKind(str, Enum):
    """What caused a value movement."""
    MINT_FEE = "mint_fee"
    PURCHASE = "purchase"
    OFFER = "offer"
    LIKE = "like"
    TIP = "tip"


class FeeSplit(MarketModel):
    """
    How a gross amount divides between the payee and the fee account.

    The fee is rounded down: ``fee = gross * fee_percent // 100``.
    """

    gross: int = Field(ge=0)
    fee: int = Field(ge=0)
    net: int = Field(ge=0)
    fee_percent: int = Field(ge=0, le=100)

    @model_validator(mode="after")
    def check_sum(self) -> "FeeSplit":
        if self.fee + self.net != self.gross:
            raise ValueError("fee and net must add up to gross")
        return self

    @classmethod
    def compute(cls, gross: int, fee_percent: int) -> "FeeSplit":
        fee = gross * fee_percent // 100
        return cls(gross=gross, fee=fee, net=gross - fee, fee_percent=fee_percent)


class Settlement(MarketModel):
    """
    Record of a completed payment.

    ``payee`` received ``net``; the fee account received ``fee``.
    """

    id: str = Field(default_factory=generate_id)
    kind: SettlementKind
    item_id: int
    payer: str
    payee: str
    gross: int = Field(ge=0)
    fee: int = Field(default=0, ge=0)
    net: int = Field(ge=0)
    settled_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_split(
        cls,
        kind: SettlementKind,
        item_id: int,
        payer: str,
        payee: str,
        split: FeeSplit,
    ) -> "Settlement":
        return cls(
            kind=kind,
            item_id=item_id,
            payer=payer,
            payee=payee,
            gross=split.gross,
            fee=split.fee,
            net=split.net,
        )


class MarketplaceStats(MarketModel):
    """
    Overall marketplace statistics.
    """

    total_items: int = 0
    items_for_sale: int = 0
    total_sales: int = 0
    sales_volume: int = 0
    fees_collected: int = 0
    creator_revenue: int = 0
    total_likes: int = 0
    total_tips: int = 0

    calculated_at: datetime = Field(default_factory=utc_now)
