"""
NFT Marketplace Configuration Management

Centralized configuration using Pydantic Settings for type-safe environment
variable loading with validation.

The marketplace fee percentages are fixed constants of the engine and are not
configurable here; only deployment-specific values live in Settings.
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def normalize_identity(value: str) -> str:
    """Canonical form used for whitelist membership checks."""
    return value.strip().lower()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ═══════════════════════════════════════════════════════════════
    # APPLICATION
    # ═══════════════════════════════════════════════════════════════
    app_name: str = Field(default="nft-marketplace", description="Application name")
    app_env: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Environment"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    # ═══════════════════════════════════════════════════════════════
    # MARKETPLACE
    # ═══════════════════════════════════════════════════════════════
    fee_account: str = Field(
        default="marketplace",
        min_length=1,
        description="Account receiving the marketplace and tip fee cut",
    )
    like_fee: int = Field(
        default=1, ge=0, description="Default fee charged for a like"
    )
    mint_whitelist: str = Field(
        default="",
        description="Comma-separated identities exempt from the minting fee",
    )

    @field_validator("fee_account")
    @classmethod
    def validate_fee_account(cls, v: str) -> str:
        """Fee account must not be blank."""
        v = v.strip()
        if not v:
            raise ValueError("fee_account must not be blank")
        return v

    @model_validator(mode="after")
    def warn_default_fee_account(self) -> "Settings":
        if self.app_env == "production" and self.fee_account == "marketplace":
            logger.warning(
                "fee_account_default_warning: production is collecting fees into "
                "the default 'marketplace' account"
            )
        return self

    @property
    def mint_whitelist_set(self) -> frozenset[str]:
        """Parse the persisted whitelist into normalized identities."""
        return frozenset(
            normalize_identity(entry)
            for entry in self.mint_whitelist.split(",")
            if entry.strip()
        )

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton settings instance
settings = get_settings()
