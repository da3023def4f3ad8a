from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["auto", "json", "console"] = Field(
        default="auto",
        description="Log renderer; auto is console at DEBUG and JSON otherwise",
    )

    # Network Settings
    network: str = Field(default="mainnet", description="Conflux network: mainnet or testnet")
    default_space: Optional[str] = Field(
        default=None,
        description="Space selected by the CLI when none is passed",
    )
    core_rpc_url: str = Field(default="", description="Override the Conflux Core RPC URL")
    espace_rpc_url: str = Field(default="", description="Override the Conflux eSpace RPC URL")

    # Provider Requests
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Max seconds to wait for a single wallet provider request",
    )

    # Transaction Confirmation
    receipt_poll_interval_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Seconds between transaction receipt polls",
    )
    receipt_max_attempts: int = Field(
        default=120,
        ge=1,
        description="Receipt polls before a transaction is reported unconfirmed",
    )

    @field_validator("network")
    @classmethod
    def _normalize_network(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def confirmation_window_seconds(self) -> float:
        return self.receipt_poll_interval_seconds * self.receipt_max_attempts

    def rpc_url_for(self, space: str) -> str:
        if space == "core":
            return self.core_rpc_url
        if space == "espace":
            return self.espace_rpc_url
        return ""


# Global settings instance
settings = Settings()
