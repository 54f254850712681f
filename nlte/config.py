from pathlib import Path
from typing import Any, Dict

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.celo import CELO_CONTRACTS, CELO_NETWORKS, CELO_TOKENS, DEFAULT_NETWORK


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

    # Network
    celo_network: str = Field(
        default=DEFAULT_NETWORK,
        description="Celo network to target (sepolia, alfajores, mainnet)",
        validation_alias=AliasChoices("celo_network", "NEXT_PUBLIC_CELO_NETWORK"),
    )
    celo_rpc_url: str = Field(default="", description="Override the network's default RPC URL")
    rpc_timeout_seconds: float = Field(default=10.0, gt=0, description="Timeout for a single JSON-RPC call")

    # Bounded probes
    balance_check_timeout_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Max seconds a balance lookup may take before validation degrades to a warning",
    )
    gas_estimate_timeout_seconds: float = Field(
        default=3.0,
        gt=0,
        description="Max seconds a live gas estimate may take before the placeholder is kept",
    )
    rewards_check_timeout_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Max seconds a pending-rewards lookup may take",
    )

    # Contract overrides
    staking_contract_address: str = Field(
        default="",
        description="Staking contract address (empty = per-network deployment table)",
    )
    rewards_contract_address: str = Field(
        default="",
        description="Rewards contract address (empty = per-network deployment table)",
    )

    # Persistence
    store_path: str = Field(
        default="",
        description="JSON file backing contacts and scheduled transfers (empty = in-memory)",
    )

    @property
    def network(self) -> Dict[str, Any]:
        return CELO_NETWORKS.get(self.celo_network.lower(), CELO_NETWORKS[DEFAULT_NETWORK])

    @property
    def network_slug(self) -> str:
        slug = self.celo_network.lower()
        return slug if slug in CELO_NETWORKS else DEFAULT_NETWORK

    @property
    def rpc_url(self) -> str:
        return self.celo_rpc_url or self.network["rpc_url"]

    @property
    def chain_id(self) -> int:
        return int(self.network["chain_id"])

    @property
    def token_addresses(self) -> Dict[str, str]:
        return dict(CELO_TOKENS[self.network_slug])

    @property
    def contract_addresses(self) -> Dict[str, str]:
        contracts = dict(CELO_CONTRACTS[self.network_slug])
        if self.staking_contract_address:
            contracts["staking"] = self.staking_contract_address
        if self.rewards_contract_address:
            contracts["rewards"] = self.rewards_contract_address
        return contracts


# Global settings instance
settings = Settings()
