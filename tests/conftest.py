"""
NFT Marketplace - Test Fixtures

Shared pytest fixtures for all test modules.
"""

from __future__ import annotations

import os

import pytest

os.environ["APP_ENV"] = "testing"

from nftmarket.config import Settings  # noqa: E402
from nftmarket.models.base import Rarity  # noqa: E402
from nftmarket.services.gateway import InMemoryPaymentGateway  # noqa: E402
from nftmarket.services.marketplace import MarketplaceService  # noqa: E402

FEE_ACCOUNT = "fee-vault"
STARTING_BALANCE = 10_000


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        app_env="testing",
        fee_account=FEE_ACCOUNT,
        like_fee=5,
        mint_whitelist="",
    )


# =============================================================================
# Gateway and Service
# =============================================================================


@pytest.fixture
def gateway() -> InMemoryPaymentGateway:
    """Gateway with funded accounts for the usual cast of callers."""
    return InMemoryPaymentGateway(
        {name: STARTING_BALANCE for name in ("alice", "bob", "carol", "dave")}
    )


@pytest.fixture
def service(gateway, test_settings) -> MarketplaceService:
    return MarketplaceService(gateway=gateway, settings=test_settings)


@pytest.fixture
async def minted_item(service) -> int:
    """An item minted by alice with the fee waived."""
    return await service.create_item(
        "alice",
        name="Sunset Dragon",
        description="A dragon at dusk",
        uri="ipfs://dragon",
        rarity=Rarity.RARE,
        fee=0,
    )


@pytest.fixture
async def listed_item(service, minted_item) -> int:
    """alice's item listed at 1000."""
    await service.list_for_sale("alice", minted_item, 1000)
    return minted_item
