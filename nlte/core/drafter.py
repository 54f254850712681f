"""
Transaction Drafter

Assembles a ``TransactionDraft`` from a ``ParsedCommand``, validates it and,
when validation passes, refines the gas estimate. Business-rule failures
end up in ``draft.validation``; nothing here raises for them.
"""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from ..providers.base import FeeOracle
from .models import (
    CeloToken,
    DraftMetadata,
    GasEstimate,
    ParsedCommand,
    TransactionDraft,
    TransactionIntent,
    ValidationResult,
)
from .probes import probe
from .tokens import default_token, to_decimal
from .validator import TransactionValidator

logger = logging.getLogger(__name__)

DEFAULT_GAS_TIMEOUT_SECONDS = 3.0

# Placeholder until a live estimate replaces it.
DEFAULT_GAS_ESTIMATE = GasEstimate(
    gas_limit="100000",
    max_fee_per_gas="5000000000",
    max_priority_fee_per_gas="1000000000",
    estimated_cost="0.0005",
)

# Staking and claiming call heavier contract methods.
STAKE_GAS_ESTIMATE = GasEstimate(
    gas_limit="150000",
    max_fee_per_gas="5000000000",
    max_priority_fee_per_gas="1000000000",
    estimated_cost="0.00075",
)

CLAIM_REWARDS_GAS_ESTIMATE = GasEstimate(
    gas_limit="120000",
    max_fee_per_gas="5000000000",
    max_priority_fee_per_gas="1000000000",
    estimated_cost="0.0006",
)

GAS_PRESETS: Dict[TransactionIntent, GasEstimate] = {
    TransactionIntent.STAKE: STAKE_GAS_ESTIMATE,
    TransactionIntent.CLAIM_REWARDS: CLAIM_REWARDS_GAS_ESTIMATE,
}

PLACEHOLDER_SWAP_RATE = "1.0"


def generate_transaction_id() -> str:
    return f"tx_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(getattr(value, "value", value))


class TransactionDrafter:
    """
    Usage:
        drafter = TransactionDrafter(validator, fee_oracle)
        draft = await drafter.draft(parsed, "0x...")
        if draft.validation.is_valid:
            ...
    """

    def __init__(
        self,
        validator: TransactionValidator,
        fee_oracle: Optional[FeeOracle] = None,
        gas_timeout_seconds: float = DEFAULT_GAS_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.validator = validator
        self.fee_oracle = fee_oracle
        self.gas_timeout_seconds = gas_timeout_seconds
        self._clock = clock

    async def draft(self, parsed: ParsedCommand, from_address: str) -> TransactionDraft:
        draft = self.build(parsed, from_address)

        validation = await self.validator.validate_draft(draft)
        draft = replace(draft, validation=validation)

        if validation.is_valid:
            gas_estimate = await self.estimate_gas(draft)
            draft = replace(draft, gas_estimate=gas_estimate)

        logger.info(
            "Drafted %s %s: valid=%s errors=%s warnings=%s",
            draft.intent.value,
            draft.id,
            validation.is_valid,
            validation.error_codes,
            validation.warning_codes,
        )
        return draft

    def build(self, parsed: ParsedCommand, from_address: str) -> TransactionDraft:
        """The unvalidated draft: defaults filled, metadata copied over."""

        params = parsed.parameters
        token = _text(params.get("token") or params.get("from_token")) or default_token().value
        to_token = _text(params.get("to_token"))
        stake_duration = params.get("stake_duration")

        return TransactionDraft(
            id=generate_transaction_id(),
            intent=parsed.intent,
            from_address=from_address,
            to_address=_text(params.get("recipient")) or None,
            token=token,
            amount=_text(params.get("amount")) or "0",
            gas_estimate=DEFAULT_GAS_ESTIMATE,
            metadata=DraftMetadata(
                recipient_name=_text(params.get("recipient_name")),
                from_token=_text(params.get("from_token")),
                to_token=to_token,
                swap_rate=PLACEHOLDER_SWAP_RATE if to_token else None,
                stake_duration=int(stake_duration) if stake_duration is not None else None,
            ),
            validation=ValidationResult(),
            timestamp=int(self._clock() * 1000),
        )

    async def estimate_gas(self, draft: TransactionDraft) -> GasEstimate:
        """Best effort; any failure keeps the current estimate."""

        preset = GAS_PRESETS.get(draft.intent)
        if preset is not None:
            return preset

        if draft.intent != TransactionIntent.SEND or not draft.to_address or self.fee_oracle is None:
            return draft.gas_estimate

        oracle = self.fee_oracle
        result = await probe(
            "gas estimation",
            lambda: oracle.get_gas_estimate(draft.from_address, draft.to_address, draft.amount, draft.token),
            self.gas_timeout_seconds,
        )
        if result.degraded or result.value is None:
            logger.warning("Using default gas estimate for %s: %s", draft.id, result.reason)
            return draft.gas_estimate
        return result.value


def get_transaction_description(draft: TransactionDraft) -> str:
    if draft.intent == TransactionIntent.SEND:
        return f"Send {draft.amount} {draft.token} to {draft.to_address or 'unknown'}"
    if draft.intent == TransactionIntent.SWAP:
        return f"Swap {draft.amount} {draft.token} for {draft.metadata.to_token or '?'}"
    if draft.intent == TransactionIntent.STAKE:
        suffix = f" for {draft.metadata.stake_duration} days" if draft.metadata.stake_duration else ""
        return f"Stake {draft.amount} {draft.token}{suffix}"
    if draft.intent == TransactionIntent.CLAIM_REWARDS:
        return "Claim pending rewards"
    return "Unknown transaction"


def calculate_total_cost(draft: TransactionDraft) -> str:
    """Total CELO spent: amount plus gas for CELO, gas alone for stablecoins."""

    amount = to_decimal(draft.amount) or Decimal("0")
    gas_cost = to_decimal(draft.gas_estimate.estimated_cost) or Decimal("0")
    if draft.token == CeloToken.CELO.value:
        return f"{amount + gas_cost:.6f}"
    return f"{gas_cost:.6f}"


def format_transaction_for_display(draft: TransactionDraft) -> Dict[str, Any]:
    return {
        "id": draft.id,
        "type": draft.intent.value,
        "description": get_transaction_description(draft),
        "amount": f"{draft.amount} {draft.token}",
        "recipient": draft.to_address,
        "gasCost": f"{draft.gas_estimate.estimated_cost} CELO",
        "totalCost": f"{calculate_total_cost(draft)} CELO",
        "isValid": draft.validation.is_valid,
        "errors": [e.to_dict() for e in draft.validation.errors],
        "warnings": [w.to_dict() for w in draft.validation.warnings],
        "timestamp": datetime.fromtimestamp(draft.timestamp / 1000, tz=timezone.utc).isoformat(),
    }


__all__ = [
    "CLAIM_REWARDS_GAS_ESTIMATE",
    "DEFAULT_GAS_ESTIMATE",
    "GAS_PRESETS",
    "STAKE_GAS_ESTIMATE",
    "TransactionDrafter",
    "calculate_total_cost",
    "format_transaction_for_display",
    "generate_transaction_id",
    "get_transaction_description",
]
