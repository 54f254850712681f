"""Celo network, token and contract deployment tables."""

from __future__ import annotations

from typing import Any, Dict

DEFAULT_NETWORK = "sepolia"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

CELO_NETWORKS: Dict[str, Dict[str, Any]] = {
    "sepolia": {
        "chain_id": 44787,
        "name": "Celo Sepolia Testnet",
        # Shares the Alfajores RPC endpoint for now.
        "rpc_url": "https://alfajores-forno.celo-testnet.org",
        "block_explorer": "https://celo-sepolia.blockscout.com",
    },
    "alfajores": {
        "chain_id": 44787,
        "name": "Celo Alfajores Testnet",
        "rpc_url": "https://alfajores-forno.celo-testnet.org",
        "block_explorer": "https://alfajores.celoscan.io",
    },
    "mainnet": {
        "chain_id": 42220,
        "name": "Celo Mainnet",
        "rpc_url": "https://forno.celo.org",
        "block_explorer": "https://celoscan.io",
    },
}

CELO_TOKENS: Dict[str, Dict[str, str]] = {
    "sepolia": {
        "CELO": "0xF194afDf50B03e69Bd7D057c1Aa9e10c9954E4C9",
        "cUSD": "0xdE9e4C3ce781b4bA68120d6261cbad65ce0aB00b",
        "cEUR": "0x10c892A6EC43a53E45D0B916B4b7D383B1b78C0F",
        "cREAL": "0xE4D517785D091D3c54818832dB6094bcc2744545",
    },
    "alfajores": {
        "CELO": "0xF194afDf50B03e69Bd7D057c1Aa9e10c9954E4C9",
        "cUSD": "0xdE9e4C3ce781b4bA68120d6261cbad65ce0aB00b",
        "cEUR": "0x10c892A6EC43a53E45D0B916B4b7D383B1b78C0F",
        "cREAL": "0xE4D517785D091D3c54818832dB6094bcc2744545",
    },
    "mainnet": {
        "CELO": "0x471EcE3750Da237f93B8E339c536989b8978a438",
        "cUSD": "0x765DE816845861e75A25fCA122bb6898B8B1282a",
        "cEUR": "0xD8763CBa276a3738E6DE85b4b3bF5FDed6D6cA73",
        "cREAL": "0xe8537a3d056DA446677B9E9d6c5dB704EaAb4787",
    },
}

# Zero address = not deployed on that network.
CELO_CONTRACTS: Dict[str, Dict[str, str]] = {
    "sepolia": {
        "staking": "0x7b18750f69a8034463dde05c29637316cf349aa6",
        "rewards": "0x1d5304af7137334b258a443c9ffc74f0c6cb80e9",
    },
    "alfajores": {
        "staking": ZERO_ADDRESS,
        "rewards": ZERO_ADDRESS,
    },
    "mainnet": {
        "staking": ZERO_ADDRESS,
        "rewards": ZERO_ADDRESS,
    },
}


def explorer_tx_url(tx_hash: str, network: str = DEFAULT_NETWORK) -> str:
    base_url = CELO_NETWORKS.get(network, CELO_NETWORKS[DEFAULT_NETWORK])["block_explorer"]
    return f"{base_url}/tx/{tx_hash}"


__all__ = [
    "DEFAULT_NETWORK",
    "ZERO_ADDRESS",
    "CELO_NETWORKS",
    "CELO_TOKENS",
    "CELO_CONTRACTS",
    "explorer_tx_url",
]
