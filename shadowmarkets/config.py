"""Configuration management using Pydantic Settings."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

Role = Literal["creation", "oracle", "all"]


class ConfigError(Exception):
    """Missing or invalid startup configuration. Fatal."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []


class ChainConfig(BaseModel):
    """Market program gateway and collateral parameters."""

    paper_mode: bool = True
    gateway_url: str = ""
    collateral_mint: str = ""
    collateral_decimals: int = 6
    oracle_address: str = ""  # Empty: settle with the operator's own address
    timeout_seconds: float = 30.0
    max_retries: int = 3
    paper_balance_base_units: int = 1_000_000_000
    paper_state_file: str = "paper-chain.json"


class MarketConfig(BaseModel):
    """Market creation and activation parameters."""

    initial_liquidity_base_units: int = 1_000_000
    seed_trade_amount: float = 1.0  # Whole collateral units
    yes_odds_bps: int | None = None
    default_duration_seconds: int = 3600
    activation_window_seconds: int = 900  # Enforced by the market program
    markets_file: str = "markets.json"

    @field_validator("yes_odds_bps")
    @classmethod
    def check_odds(cls, v: int | None) -> int | None:
        if v is not None and not 0 < v < 10_000:
            raise ValueError("yes_odds_bps must be between 1 and 9999")
        return v

    @field_validator(
        "default_duration_seconds", "activation_window_seconds", "initial_liquidity_base_units"
    )
    @classmethod
    def check_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v


class SourceConfig(BaseModel):
    """Private event source selection and per-source parameters."""

    kind: Literal["local", "github", "discord"] = "local"

    # Local signal file
    local_events_file: str = "private-events.json"

    # GitHub issues
    github_owner: str = ""
    github_repo: str = ""
    github_per_page: int = 30
    github_window_seconds: int = 30 * 60
    github_consumed_file: str = "github-consumed.json"
    github_api_url: str = "https://api.github.com"

    # Discord queue written by the bot process
    discord_guild_id: str = ""
    discord_channel_id: str = ""
    discord_window_seconds: int = 60 * 60
    discord_pending_file: str = "discord-pending.json"
    discord_consumed_file: str = "discord-consumed.json"


class LlmConfig(BaseModel):
    """Optional LLM oracle used to override the deterministic decision."""

    provider: Literal["none", "openai_compatible", "gemini", "pydantic_ai"] = "none"
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    timeout_seconds: float = 30.0


class OracleConfig(BaseModel):
    """Settlement policy."""

    unhandled_kind_policy: Literal["refuse", "default_no"] = "refuse"


class SchedulerConfig(BaseModel):
    """Poll intervals in seconds."""

    creation_interval_seconds: int = 20
    oracle_interval_seconds: int = 20

    @field_validator("creation_interval_seconds", "oracle_interval_seconds")
    @classmethod
    def check_interval(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("interval must be positive")
        return v


class TelegramConfig(BaseModel):
    """Operator alert switches."""

    send_creation_alerts: bool = True
    send_activation_alerts: bool = True
    send_settlement_alerts: bool = True


class Settings(BaseSettings):
    """Main configuration class."""

    # Paths
    data_dir: Path = Path("data")

    # Secrets
    chain_api_key: str = ""
    github_token: str = ""
    llm_api_key: str = ""
    logfire_token: str = ""
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""

    # Nested configuration sections
    chain: ChainConfig = Field(default_factory=ChainConfig)
    market: MarketConfig = Field(default_factory=MarketConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    llm: LlmConfig = Field(default_factory=LlmConfig)
    oracle: OracleConfig = Field(default_factory=OracleConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("data_dir", mode="after")
    @classmethod
    def resolve_data_dir(cls, v: Path) -> Path:
        """Resolve data directory to absolute path."""
        return v.resolve()

    @property
    def markets_path(self) -> Path:
        return self.data_dir / self.market.markets_file

    def data_path(self, name: str) -> Path:
        """Resolve a data file name against data_dir (absolute names pass through)."""
        path = Path(name)
        return path if path.is_absolute() else self.data_dir / path

    @property
    def llm_enabled(self) -> bool:
        return self.llm.provider != "none"

    def validate_for_role(self, role: Role) -> None:
        """Fail fast when required configuration for a role is missing."""
        missing: list[str] = []

        if not self.chain.paper_mode:
            if not self.chain.gateway_url:
                missing.append("chain.gateway_url")
            if not self.chain_api_key:
                missing.append("chain_api_key")

        if role in ("creation", "all") and not self.chain.paper_mode:
            if not self.chain.collateral_mint:
                missing.append("chain.collateral_mint")

        if self.source.kind == "github":
            if not self.github_token:
                missing.append("github_token")
            if not self.source.github_owner:
                missing.append("source.github_owner")
            if not self.source.github_repo:
                missing.append("source.github_repo")
        elif self.source.kind == "discord":
            if not self.source.discord_guild_id:
                missing.append("source.discord_guild_id")
            if not self.source.discord_channel_id:
                missing.append("source.discord_channel_id")

        if role in ("oracle", "all") and self.llm_enabled and not self.llm_api_key:
            missing.append("llm_api_key")

        if missing:
            raise ConfigError(
                f"Missing required configuration for role '{role}': {', '.join(missing)}",
                missing=missing,
            )

        if (
            role in ("oracle", "all")
            and self.source.kind == "discord"
            and not self.llm_enabled
        ):
            logger.warning(
                "Discord predictions have no deterministic settlement rule and no LLM "
                "oracle is configured; unhandled_kind_policy=%s decides them",
                self.oracle.unhandled_kind_policy,
            )

    def load_yaml_config(self) -> None:
        """Load and merge YAML configuration."""
        config_path = self.data_dir / "config.yaml"

        if not config_path.exists():
            logger.warning(
                f"Config file not found: {config_path}. "
                "Using defaults. Run 'python -m shadowmarkets init' to create it."
            )
            return

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)

            if not yaml_config:
                logger.warning(f"Empty config file: {config_path}")
                return

            for section_name in [
                "chain",
                "market",
                "source",
                "llm",
                "oracle",
                "scheduler",
                "telegram",
            ]:
                if section_name in yaml_config:
                    section = getattr(self, section_name)
                    yaml_section = yaml_config[section_name]

                    section_dict = section.model_dump()
                    section_dict.update(yaml_section)

                    new_section = section.__class__(**section_dict)
                    setattr(self, section_name, new_section)

            logger.info(f"Loaded configuration from {config_path}")

        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML config: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to load config: {e}")
            raise


@lru_cache()
def get_settings() -> Settings:
    """Get singleton Settings instance."""
    settings = Settings()
    settings.load_yaml_config()
    return settings
