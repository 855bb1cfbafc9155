"""Configuration management using Pydantic Settings."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class FirebaseConfig(BaseModel):
    """Firestore connection parameters."""

    project_id: str = ""
    credentials_path: str = ""  # Empty: application default credentials


class BalanceConfig(BaseModel):
    """Balance aggregation behaviour."""

    # skip: drop malformed bets and report them; reject: raise
    integrity_policy: Literal["skip", "reject"] = "skip"


class NotificationConfig(BaseModel):
    """Notification dispatch parameters."""

    dedupe: bool = True
    fallback_sender_name: str = "Someone"
    closing_soon_window_minutes: int = 60


class SchedulerConfig(BaseModel):
    """Job scheduling intervals in minutes."""

    closing_soon_sweep_minutes: int = 60


class ApiConfig(BaseModel):
    """HTTP API parameters."""

    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"]
    )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_origins(cls, v):
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


_YAML_SECTIONS = ["firebase", "balances", "notifications", "scheduler", "api"]


class Settings(BaseSettings):
    """Main configuration class."""

    # Paths
    data_dir: Path = Path("data")

    # Secrets
    logfire_token: str = ""

    # Nested configuration sections
    firebase: FirebaseConfig = Field(default_factory=FirebaseConfig)
    balances: BalanceConfig = Field(default_factory=BalanceConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

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

    def load_yaml_config(self) -> None:
        """Load and merge data/config.yaml over the defaults."""
        config_path = self.data_dir / "config.yaml"

        if not config_path.exists():
            logger.warning(
                f"Config file not found: {config_path}. "
                "Using defaults. Run 'python -m sidebet init' to create it."
            )
            return

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)

            if not yaml_config:
                logger.warning(f"Empty config file: {config_path}")
                return

            for section_name in _YAML_SECTIONS:
                if section_name in yaml_config:
                    section = getattr(self, section_name)
                    section_dict = section.model_dump()
                    section_dict.update(yaml_config[section_name] or {})
                    setattr(self, section_name, section.__class__(**section_dict))

            logger.info(f"Loaded configuration from {config_path}")

        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML config: {e}")
            raise


@lru_cache()
def get_settings() -> Settings:
    """Get singleton Settings instance."""
    settings = Settings()
    settings.load_yaml_config()
    return settings
