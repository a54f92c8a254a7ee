"""
Payment Gateway

The engine never moves value itself. It asks a PaymentGateway to check
balances and to execute multi-leg transfers that either complete in full or
not at all.

InMemoryPaymentGateway keeps balances in a dict and is the gateway used by
tests and local runs; production deployments plug in a wallet-backed
implementation of the same interface.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime

import structlog
from pydantic import Field

from nftmarket.errors import InsufficientBalance, PaymentFailed
from nftmarket.models.base import MarketModel, generate_id, utc_now

logger = structlog.get_logger(__name__)


class TransferLeg(MarketModel):
    """One payee and the amount it receives."""

    recipient: str = Field(min_length=1)
    amount: int = Field(ge=0)


class PaymentReceipt(MarketModel):
    """Proof that a set of legs was executed."""

    id: str = Field(default_factory=generate_id)
    payer: str
    legs: list[TransferLeg] = Field(default_factory=list)
    memo: str | None = None
    executed_at: datetime = Field(default_factory=utc_now)

    @property
    def total(self) -> int:
        return sum(leg.amount for leg in self.legs)


class PaymentGateway(ABC):
    """
    Interface to the external payment primitive.

    ``transfer`` must be atomic: it either executes every leg or raises
    PaymentFailed (or InsufficientBalance) having executed none.
    """

    @abstractmethod
    async def get_balance(self, account: str) -> int:
        """Current balance of ``account`` in base units."""

    @abstractmethod
    async def transfer(
        self,
        payer: str,
        legs: Sequence[TransferLeg],
        memo: str | None = None,
    ) -> PaymentReceipt:
        """Move value from ``payer`` to every leg's recipient."""

    async def ensure_balance(self, account: str, required: int) -> None:
        """Raise InsufficientBalance if ``account`` holds less than ``required``."""
        available = await self.get_balance(account)
        if available < required:
            raise InsufficientBalance(
                f"Balance {available} of {account} is below required {required}",
                account=account,
                required=required,
                available=available,
            )


class InMemoryPaymentGateway(PaymentGateway):
    """Dict-backed gateway with all-or-nothing transfers."""

    def __init__(self, balances: dict[str, int] | None = None) -> None:
        self._balances: dict[str, int] = dict(balances or {})
        self._receipts: list[PaymentReceipt] = []

    async def get_balance(self, account: str) -> int:
        return self._balances.get(account, 0)

    def deposit(self, account: str, amount: int) -> int:
        """Credit ``account`` from outside the marketplace (funding)."""
        if amount <= 0:
            raise PaymentFailed(f"Deposit amount must be positive, got {amount}")
        self._balances[account] = self._balances.get(account, 0) + amount
        return self._balances[account]

    @property
    def receipts(self) -> list[PaymentReceipt]:
        return list(self._receipts)

    async def transfer(
        self,
        payer: str,
        legs: Sequence[TransferLeg],
        memo: str | None = None,
    ) -> PaymentReceipt:
        payable = [leg for leg in legs if leg.amount > 0]
        total = sum(leg.amount for leg in payable)

        # Validate everything before touching any balance
        await self.ensure_balance(payer, total)

        self._balances[payer] = self._balances.get(payer, 0) - total
        for leg in payable:
            self._balances[leg.recipient] = self._balances.get(leg.recipient, 0) + leg.amount

        receipt = PaymentReceipt(payer=payer, legs=payable, memo=memo)
        self._receipts.append(receipt)

        logger.debug(
            "payment_executed",
            receipt_id=receipt.id,
            payer=payer,
            total=total,
            legs=len(payable),
        )
        return receipt
