"""Application settings and configuration management."""

from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings

logger = structlog.get_logger(__name__)


class ScoringThresholds(BaseModel):
    """Tunable thresholds for the risk scorer."""

    min_liquidity_sol: float = Field(
        default=2.0, description="Minimum SOL-equivalent liquidity before flagging"
    )
    max_fdv_to_liquidity: float = Field(
        default=50.0, description="FDV / liquidity above this is skewed"
    )
    min_transactions_5m: int = Field(
        default=10, description="Minimum transaction count over 5 minutes"
    )
    min_volume_5m_usd: float = Field(
        default=500.0, description="Minimum 5-minute volume in USD"
    )
    min_pair_age_hours: float = Field(
        default=12.0, description="Pairs younger than this are fresh launches"
    )
    volume_liquidity_alert: float = Field(
        default=1.5, description="1h volume / liquidity above this is churn"
    )
    sell_pressure_ratio: float = Field(
        default=0.7, description="sells / (buys + sells) above this is dumping"
    )
    min_trades_for_pressure: int = Field(
        default=20, description="Trades needed before sell pressure is evaluated"
    )
    default_sol_price_usd: float = Field(
        default=150.0, gt=0, description="SOL price used when none is available"
    )


class AppSettings(BaseSettings):
    """Application settings with environment variable support."""

    # Upstream API
    dexscreener_base: str = Field(
        default="https://api.dexscreener.com",
        description="DexScreener API base URL",
    )
    http_timeout_seconds: float = Field(
        default=10.0, description="HTTP request timeout in seconds"
    )

    # Caching
    cache_ttl_seconds: float = Field(
        default=10.0, gt=0, description="Pair response cache TTL in seconds"
    )

    # Data storage
    database_path: str = Field(
        default="./rugscan.sqlite", description="SQLite key-value store path"
    )
    recent_limit: int = Field(
        default=8, ge=1, description="Number of recent scans kept"
    )

    # Scoring
    thresholds: ScoringThresholds = Field(
        default_factory=ScoringThresholds, description="Risk scoring thresholds"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "extra": "ignore",
    }


def load_settings(yaml_path: str) -> AppSettings:
    """Load settings from YAML file and environment variables.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        AppSettings instance with loaded configuration

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValidationError: If configuration is invalid
        ValueError: If the YAML cannot be parsed
    """
    yaml_file = Path(yaml_path)
    if not yaml_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

    try:
        with open(yaml_file, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}

        if not isinstance(yaml_config, dict):
            raise ValueError(
                f"Invalid YAML configuration: expected a mapping in {yaml_path}"
            )

        logger.info("Loading configuration", yaml_path=yaml_path)

        settings = AppSettings(**yaml_config)

        logger.info(
            "Configuration loaded successfully",
            dexscreener_base=settings.dexscreener_base,
            cache_ttl_seconds=settings.cache_ttl_seconds,
            database_path=settings.database_path,
        )

        return settings

    except yaml.YAMLError as e:
        logger.error("Failed to parse YAML configuration", error=str(e))
        raise ValueError(f"Invalid YAML configuration: {e}") from e
    except ValidationError as e:
        logger.error("Configuration validation failed", error=str(e))
        raise
