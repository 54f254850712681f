from abc import ABC, abstractmethod
from typing import Any, Dict

from ..core.models import GasEstimate


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: float = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class BalanceOracle(ABC):
    """Live token balances"""

    @abstractmethod
    async def get_balance(self, address: str, token: str) -> str:
        """Human-readable balance as a decimal string"""
        pass


class FeeOracle(ABC):
    """Live network fee data"""

    @abstractmethod
    async def get_gas_estimate(self, from_address: str, to_address: str, amount: str, token: str) -> GasEstimate:
        """Gas estimate for a token transfer"""
        pass


class RewardOracle(ABC):
    """Pending staking rewards"""

    @abstractmethod
    async def get_pending_rewards(self, address: str) -> int:
        """Total claimable rewards in the smallest unit"""
        pass


class FeatureFlags(ABC):
    """Which on-chain features are available on the current network"""

    @abstractmethod
    def is_staking_supported(self) -> bool:
        pass

    @abstractmethod
    def is_swap_supported(self, from_token: str, to_token: str) -> bool:
        pass
