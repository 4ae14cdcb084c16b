from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["auto", "json", "console"] = Field(
        default="auto",
        description="Log renderer; auto picks console output at DEBUG and JSON lines otherwise",
    )

    # Network selection (read once at startup)
    bridge_environment: str = Field(
        default="test",
        description="Active network profile: test (Solana devnet -> Base Sepolia) or main",
        validation_alias=AliasChoices("bridge_environment", "BRIDGE_ENVIRONMENT", "SOLANA_NETWORK"),
    )

    # Solana RPC
    solana_devnet_rpc: str = Field(
        default="https://api.devnet.solana.com",
        description="Solana devnet RPC endpoint used by the test profile",
    )
    solana_mainnet_rpc: str = Field(
        default="https://api.mainnet-beta.solana.com",
        description="Solana mainnet RPC endpoint used by the main profile",
    )
    solana_commitment: str = Field(
        default="confirmed",
        description="Commitment used for blockhash and balance reads",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Default timeout for a single RPC round trip when the caller passes none",
    )

    # Destination side
    bridge_indexer_url: str = Field(
        default="",
        description="Base URL of the destination-side relay indexer; empty disables completion tracking",
    )
    stable_destination_token: Optional[str] = Field(
        default=None,
        description="Override the Base token contract that bridged USDC arrives as",
    )

    @property
    def has_indexer(self) -> bool:
        return bool(self.bridge_indexer_url)


# Global settings instance
settings = Settings()
