"""
NLTE Engine Service.

Wires the parser, drafter, validator, contact book and scheduled transfer
book to the configured store and Celo collaborators, and exposes the two
core operations:

- parse(command, user_key) -> ParsedCommand
- draft_transaction(parsed, from_address) -> TransactionDraft
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config import Settings, settings
from ..core.contacts import ContactBook, ContactResolver
from ..core.drafter import TransactionDrafter
from ..core.models import NaturalLanguageCommand, ParsedCommand, TransactionDraft
from ..core.parser import CommandParser
from ..core.scheduled import ScheduledTransferBook
from ..core.store import KeyValueStore, build_store
from ..core.validator import TransactionValidator
from ..providers.base import BalanceOracle, FeatureFlags, FeeOracle, RewardOracle
from ..providers.celo_rpc import CeloRpcProvider
from ..providers.features import ContractFeatureFlags

logger = logging.getLogger(__name__)


class NLTEService:
    """
    Usage:
        service = get_nlte_service()
        parsed = service.parse(NaturalLanguageCommand(text="Send 1 CELO to alice", timestamp=now_ms), user_key)
        draft = await service.draft_transaction(parsed, from_address)
    """

    def __init__(
        self,
        store: KeyValueStore,
        features: FeatureFlags,
        balance_oracle: Optional[BalanceOracle] = None,
        fee_oracle: Optional[FeeOracle] = None,
        reward_oracle: Optional[RewardOracle] = None,
        balance_timeout_seconds: float = 2.0,
        gas_timeout_seconds: float = 3.0,
        rewards_timeout_seconds: float = 2.0,
    ) -> None:
        self.store = store
        self.contacts = ContactBook(store)
        self.scheduled = ScheduledTransferBook(store)
        self.parser = CommandParser(ContactResolver(self.contacts))
        self.validator = TransactionValidator(
            features=features,
            balance_oracle=balance_oracle,
            reward_oracle=reward_oracle,
            balance_timeout_seconds=balance_timeout_seconds,
            rewards_timeout_seconds=rewards_timeout_seconds,
        )
        self.drafter = TransactionDrafter(
            validator=self.validator,
            fee_oracle=fee_oracle,
            gas_timeout_seconds=gas_timeout_seconds,
        )

    def parse(self, command: NaturalLanguageCommand, user_key: Optional[str] = None) -> ParsedCommand:
        return self.parser.parse(command, user_key=user_key)

    async def draft_transaction(self, parsed: ParsedCommand, from_address: str) -> TransactionDraft:
        return await self.drafter.draft(parsed, from_address)

    @classmethod
    def from_settings(cls, config: Settings) -> "NLTEService":
        provider = CeloRpcProvider(
            rpc_url=config.rpc_url,
            token_addresses=config.token_addresses,
            contract_addresses=config.contract_addresses,
            timeout_s=config.rpc_timeout_seconds,
        )
        logger.info("NLTE targeting %s via %s", config.network_slug, config.rpc_url)
        return cls(
            store=build_store(config.store_path or None),
            features=ContractFeatureFlags(config.contract_addresses),
            balance_oracle=provider,
            fee_oracle=provider,
            reward_oracle=provider,
            balance_timeout_seconds=config.balance_check_timeout_seconds,
            gas_timeout_seconds=config.gas_estimate_timeout_seconds,
            rewards_timeout_seconds=config.rewards_check_timeout_seconds,
        )


_nlte_service: Optional[NLTEService] = None


def get_nlte_service() -> NLTEService:
    """Get the singleton NLTE service instance."""
    global _nlte_service
    if _nlte_service is None:
        _nlte_service = NLTEService.from_settings(settings)
    return _nlte_service
