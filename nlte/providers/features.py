from typing import Dict, FrozenSet, Tuple

from ..core.celo import ZERO_ADDRESS
from ..core.models import CeloToken
from .base import FeatureFlags

# Only CELO -> cUSD via Mento today.
SUPPORTED_SWAP_PAIRS: FrozenSet[Tuple[str, str]] = frozenset({
    (CeloToken.CELO.value, CeloToken.cUSD.value),
})


class ContractFeatureFlags(FeatureFlags):
    """Features are available when their contracts are deployed (non-zero address)"""

    def __init__(self, contract_addresses: Dict[str, str]):
        self.contract_addresses = contract_addresses

    def _deployed(self, key: str) -> bool:
        address = (self.contract_addresses.get(key) or "").lower()
        return bool(address) and address != ZERO_ADDRESS

    def is_staking_supported(self) -> bool:
        # Claiming needs the rewards contract too.
        return self._deployed("staking") and self._deployed("rewards")

    def is_swap_supported(self, from_token: str, to_token: str) -> bool:
        return (from_token, to_token) in SUPPORTED_SWAP_PAIRS
