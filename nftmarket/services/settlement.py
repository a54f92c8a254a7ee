"""
Settlement Ledger

Executes fee-split payments through the gateway and keeps the history of
every settlement the engine produced.
"""

import structlog

from nftmarket.models.settlement import FeeSplit, Settlement, SettlementKind
from nftmarket.services.gateway import PaymentGateway, TransferLeg

logger = structlog.get_logger(__name__)


class SettlementLedger:
    """
    Pays out a FeeSplit in one atomic gateway call and records the result.

    The payee receives ``split.net`` and the fee account ``split.fee``. A
    settlement is appended only after the gateway call returned, so a failed
    payment leaves no trace.
    """

    def __init__(self, gateway: PaymentGateway, fee_account: str) -> None:
        self.gateway = gateway
        self.fee_account = fee_account
        self._settlements: list[Settlement] = []

    async def settle(
        self,
        kind: SettlementKind,
        item_id: int,
        payer: str,
        payee: str,
        split: FeeSplit,
    ) -> Settlement:
        legs = [
            TransferLeg(recipient=payee, amount=split.net),
            TransferLeg(recipient=self.fee_account, amount=split.fee),
        ]
        receipt = await self.gateway.transfer(
            payer,
            legs,
            memo=f"{SettlementKind(kind).value}:{item_id}",
        )

        settlement = Settlement.from_split(kind, item_id, payer, payee, split)
        self._settlements.append(settlement)

        logger.info(
            "settlement_recorded",
            settlement_id=settlement.id,
            receipt_id=receipt.id,
            kind=settlement.kind,
            item_id=item_id,
            gross=split.gross,
            fee=split.fee,
        )
        return settlement

    def history(self, item_id: int | None = None) -> list[Settlement]:
        """Settlements in the order they happened, optionally for one item."""
        return [
            s.model_copy()
            for s in self._settlements
            if item_id is None or s.item_id == item_id
        ]

    def __len__(self) -> int:
        return len(self._settlements)
