"""Application configuration management using Pydantic Settings."""

from typing import List, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "postgresql+asyncpg://postgres:postgres@db:5432/bridge"

    # API
    API_V1_PREFIX: str = "/api"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Chains
    L1_RPC_URL: str = "http://localhost:8545"
    L2_RPC_URL: str = "http://localhost:9545"
    L1_CHAIN_ID: int = 1
    L2_CHAIN_ID: int = 10
    NATIVE_TOKEN_SYMBOL: str = "SYS"
    RPC_CONCURRENCY: int = 8  # Max in-flight RPC calls per cycle
    RPC_TIMEOUT_SECONDS: float = 30.0

    # Bridge contracts (L1 side, used to derive withdrawal stages)
    OPTIMISM_PORTAL_ADDRESS: str = "0x0000000000000000000000000000000000000000"
    L2_OUTPUT_ORACLE_ADDRESS: str = "0x0000000000000000000000000000000000000000"
    L2_TO_L1_MESSAGE_PASSER_ADDRESS: str = "0x4200000000000000000000000000000000000016"

    # Indexer (Blockscout)
    INDEXER_API_URL: str = "http://localhost:4000/api"
    INDEXER_TIMEOUT_SECONDS: float = 30.0
    INDEXER_MAX_PAGES: int = 1

    # Collector tasks
    DATA_COLLECTOR_ENABLE_DEPOSITS: bool = True
    DATA_COLLECTOR_ENABLE_WITHDRAWALS: bool = True
    DATA_COLLECTOR_ENABLE_WATCHER: bool = True
    DATA_COLLECTOR_POLL_INTERVAL_SECONDS: float = 60.0
    DATA_COLLECTOR_DEPOSITS_INTERVAL_SECONDS: Optional[float] = None  # Defaults to poll interval
    DATA_COLLECTOR_WITHDRAWALS_INTERVAL_SECONDS: Optional[float] = None
    DATA_COLLECTOR_WATCHER_INTERVAL_SECONDS: Optional[float] = None
    DATA_COLLECTOR_COOLDOWN_SECONDS: float = 0.0  # Idle time after a run before the task may start again

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v) -> List[str]:
        """Parse CORS_ORIGINS from JSON string to list."""
        if isinstance(v, str):
            return json.loads(v)
        return v

    @field_validator("INDEXER_API_URL", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the indexer base URL so paths can be appended."""
        return v.rstrip("/")

    def task_interval(self, task_name: str) -> float:
        """Return the polling interval for a collector task, falling back to the shared one."""
        override = getattr(self, f"DATA_COLLECTOR_{task_name.upper()}_INTERVAL_SECONDS", None)
        return override if override is not None else self.DATA_COLLECTOR_POLL_INTERVAL_SECONDS


# Global settings instance
settings = Settings()
