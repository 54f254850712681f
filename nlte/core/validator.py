"""
Transaction Validator

Checks a draft against every rule and merges the outcome into a
``ValidationResult``. Errors block, warnings don't; ``is_valid`` is
exactly "no errors".

Network reads happen up front in ``collect_context`` through bounded
probes. The rules themselves only look at the draft and that context,
so they stay synchronous and deterministic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Tuple

from ..providers.base import BalanceOracle, FeatureFlags, RewardOracle
from .models import (
    CeloToken,
    TransactionDraft,
    TransactionIntent,
    ValidationIssue,
    ValidationResult,
)
from .probes import ProbeResult, probe
from .tokens import NATIVE_TOKEN, is_supported_token, is_valid_address, is_valid_amount, to_decimal

logger = logging.getLogger(__name__)

# 0 = flexible
RECOMMENDED_STAKE_DURATIONS: Tuple[int, ...] = (0, 30, 90, 180, 365)

LOW_BALANCE_MARGIN = Decimal("1.1")

DEFAULT_BALANCE_TIMEOUT_SECONDS = 2.0
DEFAULT_REWARDS_TIMEOUT_SECONDS = 2.0


@dataclass(frozen=True)
class ValidationContext:
    """Everything the rules need beyond the draft itself.

    A probe left as ``None`` was not attempted; the matching rule is skipped.
    """
    staking_supported: bool = True
    swap_supported: bool = True
    balance: Optional[ProbeResult[str]] = None
    pending_rewards: Optional[ProbeResult[int]] = None


class TransactionValidator:
    """
    Rule checks, split the way the draft intent needs them:
    - amount and token apply to every intent (amount not for CLAIM_REWARDS)
    - recipient applies to SEND
    - staking availability, stake token and duration apply to STAKE
    - rewards availability and pending rewards apply to CLAIM_REWARDS
    - balance sufficiency applies to everything except CLAIM_REWARDS
    """

    def __init__(
        self,
        features: FeatureFlags,
        balance_oracle: Optional[BalanceOracle] = None,
        reward_oracle: Optional[RewardOracle] = None,
        balance_timeout_seconds: float = DEFAULT_BALANCE_TIMEOUT_SECONDS,
        rewards_timeout_seconds: float = DEFAULT_REWARDS_TIMEOUT_SECONDS,
    ):
        self.features = features
        self.balance_oracle = balance_oracle
        self.reward_oracle = reward_oracle
        self.balance_timeout_seconds = balance_timeout_seconds
        self.rewards_timeout_seconds = rewards_timeout_seconds

    async def validate_draft(self, draft: TransactionDraft) -> ValidationResult:
        context = await self.collect_context(draft)
        return self.validate(draft, context)

    async def collect_context(self, draft: TransactionDraft) -> ValidationContext:
        staking_supported = self.features.is_staking_supported()
        swap_supported = True
        if draft.intent == TransactionIntent.SWAP:
            swap_supported = self.features.is_swap_supported(
                draft.metadata.from_token or draft.token,
                draft.metadata.to_token or "",
            )

        balance: Optional[ProbeResult[str]] = None
        if (
            draft.intent != TransactionIntent.CLAIM_REWARDS
            and self.balance_oracle is not None
            and is_valid_amount(draft.amount)
            and is_supported_token(draft.token)
        ):
            oracle = self.balance_oracle
            balance = await probe(
                "balance check",
                lambda: oracle.get_balance(draft.from_address, draft.token),
                self.balance_timeout_seconds,
            )

        pending_rewards: Optional[ProbeResult[int]] = None
        if (
            draft.intent == TransactionIntent.CLAIM_REWARDS
            and staking_supported
            and self.reward_oracle is not None
        ):
            rewards = self.reward_oracle
            pending_rewards = await probe(
                "pending rewards check",
                lambda: rewards.get_pending_rewards(draft.from_address),
                self.rewards_timeout_seconds,
            )

        return ValidationContext(
            staking_supported=staking_supported,
            swap_supported=swap_supported,
            balance=balance,
            pending_rewards=pending_rewards,
        )

    def validate(self, draft: TransactionDraft, context: ValidationContext) -> ValidationResult:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []

        for issue in (
            self._check_amount(draft),
            self._check_token(draft),
            self._check_recipient(draft),
        ):
            if issue:
                errors.append(issue)

        if draft.intent == TransactionIntent.STAKE:
            stake_errors, stake_warnings = self._check_stake(draft, context)
            errors.extend(stake_errors)
            warnings.extend(stake_warnings)

        if draft.intent == TransactionIntent.CLAIM_REWARDS:
            claim_errors, claim_warnings = self._check_claim_rewards(context)
            errors.extend(claim_errors)
            warnings.extend(claim_warnings)

        if draft.intent == TransactionIntent.SWAP and not context.swap_supported:
            warnings.append(
                ValidationIssue(
                    code="UNSUPPORTED_SWAP_PAIR",
                    message=(
                        f"Swapping {draft.metadata.from_token or draft.token} for "
                        f"{draft.metadata.to_token} is not available on this network yet"
                    ),
                    field="toToken",
                )
            )

        balance_errors, balance_warnings = self._check_balance(draft, context.balance)
        errors.extend(balance_errors)
        warnings.extend(balance_warnings)

        return ValidationResult(errors=errors, warnings=warnings)

    def _check_amount(self, draft: TransactionDraft) -> Optional[ValidationIssue]:
        if draft.intent == TransactionIntent.CLAIM_REWARDS:
            return None
        if not is_valid_amount(draft.amount):
            return ValidationIssue(
                code="INVALID_AMOUNT",
                message="Transaction amount must be greater than 0",
                field="amount",
            )
        return None

    def _check_token(self, draft: TransactionDraft) -> Optional[ValidationIssue]:
        if not is_supported_token(draft.token):
            return ValidationIssue(
                code="INVALID_TOKEN",
                message=f"Unsupported token: {draft.token}",
                field="token",
            )
        return None

    def _check_recipient(self, draft: TransactionDraft) -> Optional[ValidationIssue]:
        if draft.intent != TransactionIntent.SEND:
            return None
        # An unresolved contact name and plain free text look the same here.
        if not draft.to_address:
            return ValidationIssue(
                code="INVALID_RECIPIENT",
                message="Recipient address is required",
                field="to",
            )
        if not is_valid_address(draft.to_address):
            return ValidationIssue(
                code="INVALID_RECIPIENT",
                message=(
                    f'"{draft.to_address}" is not a valid address. '
                    "Use full address (0x...) or known contact name."
                ),
                field="to",
            )
        return None

    def _check_stake(
        self,
        draft: TransactionDraft,
        context: ValidationContext,
    ) -> Tuple[List[ValidationIssue], List[ValidationIssue]]:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []

        if not context.staking_supported:
            errors.append(
                ValidationIssue(
                    code="STAKING_NOT_SUPPORTED",
                    message="Staking contracts are not deployed on this network",
                    field="intent",
                )
            )

        if draft.token != NATIVE_TOKEN.value:
            errors.append(
                ValidationIssue(
                    code="INVALID_STAKE_TOKEN",
                    message=f"Only {CeloToken.CELO.value} can be staked",
                    field="token",
                )
            )

        duration = draft.metadata.stake_duration
        if duration is not None and duration not in RECOMMENDED_STAKE_DURATIONS:
            warnings.append(
                ValidationIssue(
                    code="INVALID_DURATION",
                    message="Recommended durations: 0 (flexible), 30, 90, 180, or 365 days",
                    field="stakeDuration",
                )
            )

        return errors, warnings

    def _check_claim_rewards(
        self,
        context: ValidationContext,
    ) -> Tuple[List[ValidationIssue], List[ValidationIssue]]:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []

        if not context.staking_supported:
            errors.append(
                ValidationIssue(
                    code="REWARDS_NOT_SUPPORTED",
                    message="Rewards contracts are not deployed on this network",
                    field="intent",
                )
            )

        pending = context.pending_rewards
        if pending is not None:
            if pending.degraded:
                warnings.append(
                    ValidationIssue(
                        code="REWARDS_CHECK_FAILED",
                        message="Could not check pending rewards (continuing anyway)",
                    )
                )
            elif not pending.value:
                # Claiming zero wastes gas but is not invalid.
                warnings.append(
                    ValidationIssue(
                        code="NO_REWARDS",
                        message="You have no pending rewards to claim",
                        field="amount",
                    )
                )

        return errors, warnings

    def _check_balance(
        self,
        draft: TransactionDraft,
        balance: Optional[ProbeResult[str]],
    ) -> Tuple[List[ValidationIssue], List[ValidationIssue]]:
        if draft.intent == TransactionIntent.CLAIM_REWARDS or balance is None:
            return [], []

        if balance.degraded:
            return [], [
                ValidationIssue(
                    code="BALANCE_CHECK_FAILED",
                    message="Could not verify balance (continuing anyway)",
                )
            ]

        available = to_decimal(balance.value)
        amount = to_decimal(draft.amount)
        if available is None or amount is None:
            logger.warning("Unusable balance %r for amount %r", balance.value, draft.amount)
            return [], [
                ValidationIssue(
                    code="BALANCE_CHECK_FAILED",
                    message="Could not verify balance (continuing anyway)",
                )
            ]

        if available < amount:
            return [
                ValidationIssue(
                    code="INSUFFICIENT_BALANCE",
                    message=f"Insufficient {draft.token} balance. Available: {balance.value}",
                    field="amount",
                )
            ], []

        if available < amount * LOW_BALANCE_MARGIN:
            return [], [
                ValidationIssue(
                    code="LOW_BALANCE",
                    message="Low balance after transaction",
                    field="amount",
                )
            ]

        return [], []


__all__ = [
    "LOW_BALANCE_MARGIN",
    "RECOMMENDED_STAKE_DURATIONS",
    "TransactionValidator",
    "ValidationContext",
]
