"""Runtime configuration — env-driven via pydantic-settings.

Reads from a .env file and NFTMARKET_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class MarketConfig(BaseSettings):
    """Marketplace configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export NFTMARKET_ENVIRONMENT=staging
        export NFTMARKET_LOG_LEVEL=DEBUG
        export NFTMARKET_JOURNAL_PATH=/data/journal.db

    Or via .env file::

        NFTMARKET_MARKETPLACE_ADDRESS=0x5FbDB2315678afecb367f032d93F642f64180aa3
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="NFTMARKET_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Storage
    journal_path: Path = Path(".nftmarket/journal.db")

    # Identity the token owners approve before listing
    marketplace_address: str = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

    # Display only; the ledger works in smallest units
    currency_symbol: str = "ETH"
    currency_decimals: int = 18

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


# Module-level singleton, import as `from nftmarket.config import config`
config = MarketConfig()
