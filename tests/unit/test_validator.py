"""
Tests for TransactionValidator.

Rules are exercised two ways: synchronously through ``validate`` with a
hand-built ValidationContext, and end to end through ``validate_draft``
with mocked oracles.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from nlte.core.models import (
    DraftMetadata,
    TransactionDraft,
    TransactionIntent,
    ValidationResult,
)
from nlte.core.drafter import DEFAULT_GAS_ESTIMATE
from nlte.core.probes import ProbeResult
from nlte.core.validator import TransactionValidator, ValidationContext

SENDER = "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01"
ALICE = "0x1111111111111111111111111111111111111111"


def make_draft(intent=TransactionIntent.SEND, token="cUSD", amount="10", to_address=ALICE, **metadata):
    return TransactionDraft(
        id="tx_test",
        intent=intent,
        from_address=SENDER,
        to_address=to_address,
        token=token,
        amount=amount,
        gas_estimate=DEFAULT_GAS_ESTIMATE,
        metadata=DraftMetadata(**metadata),
        validation=ValidationResult(),
        timestamp=0,
    )


@pytest.fixture
def validator(feature_flags):
    return TransactionValidator(feature_flags())


class TestRules:

    def test_valid_send(self, validator):
        result = validator.validate(make_draft(), ValidationContext())
        assert result.is_valid
        assert result.warnings == []

    @pytest.mark.parametrize("amount", ["0", "-5", "abc", ""])
    def test_invalid_amount(self, validator, amount):
        result = validator.validate(make_draft(amount=amount), ValidationContext())
        assert "INVALID_AMOUNT" in result.error_codes

    def test_claim_skips_amount_rule(self, validator):
        draft = make_draft(intent=TransactionIntent.CLAIM_REWARDS, amount="0", to_address=None)
        assert "INVALID_AMOUNT" not in validator.validate(draft, ValidationContext()).error_codes

    def test_invalid_token(self, validator):
        result = validator.validate(make_draft(token="DOGE"), ValidationContext())
        assert result.error_codes == ["INVALID_TOKEN"]

    @pytest.mark.parametrize("to_address", [None, "", "alice"])
    def test_invalid_recipient(self, validator, to_address):
        result = validator.validate(make_draft(to_address=to_address), ValidationContext())
        assert result.error_codes == ["INVALID_RECIPIENT"]

    def test_recipient_only_checked_for_send(self, validator):
        draft = make_draft(intent=TransactionIntent.SWAP, token="CELO", to_address=None, to_token="cUSD")
        assert validator.validate(draft, ValidationContext()).is_valid


class TestStakeRules:

    def test_valid_stake(self, validator):
        draft = make_draft(intent=TransactionIntent.STAKE, token="CELO", to_address=None, stake_duration=90)
        assert validator.validate(draft, ValidationContext()).is_valid

    def test_staking_not_supported(self, validator):
        draft = make_draft(intent=TransactionIntent.STAKE, token="CELO", to_address=None)
        result = validator.validate(draft, ValidationContext(staking_supported=False))
        assert result.error_codes == ["STAKING_NOT_SUPPORTED"]

    def test_only_celo_can_be_staked(self, validator):
        draft = make_draft(intent=TransactionIntent.STAKE, token="cUSD", to_address=None)
        assert validator.validate(draft, ValidationContext()).error_codes == ["INVALID_STAKE_TOKEN"]

    def test_unusual_duration_is_a_warning(self, validator):
        draft = make_draft(intent=TransactionIntent.STAKE, token="CELO", to_address=None, stake_duration=45)
        result = validator.validate(draft, ValidationContext())
        assert result.is_valid
        assert result.warning_codes == ["INVALID_DURATION"]


class TestClaimRules:

    def _claim(self):
        return make_draft(intent=TransactionIntent.CLAIM_REWARDS, amount="0", to_address=None, token="CELO")

    def test_rewards_not_supported(self, validator):
        result = validator.validate(self._claim(), ValidationContext(staking_supported=False))
        assert result.error_codes == ["REWARDS_NOT_SUPPORTED"]

    def test_no_pending_rewards_is_a_warning(self, validator):
        context = ValidationContext(pending_rewards=ProbeResult.success(0))
        result = validator.validate(self._claim(), context)
        assert result.is_valid
        assert result.warning_codes == ["NO_REWARDS"]

    def test_pending_rewards_present(self, validator):
        context = ValidationContext(pending_rewards=ProbeResult.success(10 ** 18))
        result = validator.validate(self._claim(), context)
        assert result.is_valid
        assert result.warnings == []

    def test_failed_rewards_probe_is_a_warning(self, validator):
        context = ValidationContext(pending_rewards=ProbeResult.failure("timeout"))
        result = validator.validate(self._claim(), context)
        assert result.is_valid
        assert result.warning_codes == ["REWARDS_CHECK_FAILED"]


class TestSwapRules:

    def test_unsupported_pair_is_a_warning(self, validator):
        draft = make_draft(intent=TransactionIntent.SWAP, token="cEUR", to_address=None,
                           from_token="cEUR", to_token="cREAL")
        result = validator.validate(draft, ValidationContext(swap_supported=False))
        assert result.is_valid
        assert result.warning_codes == ["UNSUPPORTED_SWAP_PAIR"]


class TestBalanceRules:

    @pytest.mark.parametrize("balance,errors,warnings", [
        ("100", [], []),
        ("11", [], []),
        ("10.5", [], ["LOW_BALANCE"]),
        ("10", [], ["LOW_BALANCE"]),
        ("9.99", ["INSUFFICIENT_BALANCE"], []),
        ("0", ["INSUFFICIENT_BALANCE"], []),
    ])
    def test_balance_thresholds(self, validator, balance, errors, warnings):
        context = ValidationContext(balance=ProbeResult.success(balance))
        result = validator.validate(make_draft(amount="10"), context)
        assert result.error_codes == errors
        assert result.warning_codes == warnings

    def test_failed_balance_probe_is_a_warning(self, validator):
        context = ValidationContext(balance=ProbeResult.failure("timeout"))
        result = validator.validate(make_draft(), context)
        assert result.is_valid
        assert result.warning_codes == ["BALANCE_CHECK_FAILED"]

    def test_garbage_balance_is_a_warning(self, validator):
        context = ValidationContext(balance=ProbeResult.success("n/a"))
        assert validator.validate(make_draft(), context).warning_codes == ["BALANCE_CHECK_FAILED"]

    def test_skipped_balance_probe_adds_nothing(self, validator):
        assert validator.validate(make_draft(), ValidationContext(balance=None)).warnings == []


class TestMonotonicity:

    def test_adding_a_violation_never_makes_a_draft_valid(self, validator):
        context = ValidationContext(balance=ProbeResult.success("100"))
        base = make_draft()
        variants = [
            make_draft(amount="0"),
            make_draft(token="DOGE"),
            make_draft(to_address="alice"),
        ]
        assert validator.validate(base, context).is_valid
        for draft in variants:
            assert not validator.validate(draft, context).is_valid

        combined = make_draft(amount="0", token="DOGE", to_address="alice")
        assert set(validator.validate(combined, context).error_codes) == {
            "INVALID_AMOUNT", "INVALID_TOKEN", "INVALID_RECIPIENT",
        }


class TestValidateDraft:

    @pytest.mark.asyncio
    async def test_balance_oracle_consulted(self, feature_flags):
        balance_oracle = MagicMock()
        balance_oracle.get_balance = AsyncMock(return_value="5")
        validator = TransactionValidator(feature_flags(), balance_oracle=balance_oracle)

        result = await validator.validate_draft(make_draft(amount="10"))

        balance_oracle.get_balance.assert_awaited_once_with(SENDER, "cUSD")
        assert result.error_codes == ["INSUFFICIENT_BALANCE"]

    @pytest.mark.asyncio
    async def test_slow_balance_oracle_degrades(self, feature_flags):
        async def slow(address, token):
            await asyncio.sleep(1)
            return "1000"

        balance_oracle = MagicMock()
        balance_oracle.get_balance = slow
        validator = TransactionValidator(
            feature_flags(), balance_oracle=balance_oracle, balance_timeout_seconds=0.01,
        )

        result = await validator.validate_draft(make_draft())

        assert result.is_valid
        assert result.warning_codes == ["BALANCE_CHECK_FAILED"]

    @pytest.mark.asyncio
    async def test_balance_not_probed_for_invalid_amount(self, feature_flags):
        balance_oracle = MagicMock()
        balance_oracle.get_balance = AsyncMock(return_value="100")
        validator = TransactionValidator(feature_flags(), balance_oracle=balance_oracle)

        await validator.validate_draft(make_draft(amount="0"))

        balance_oracle.get_balance.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_claim_queries_rewards_not_balance(self, feature_flags):
        balance_oracle = MagicMock()
        balance_oracle.get_balance = AsyncMock(return_value="100")
        reward_oracle = MagicMock()
        reward_oracle.get_pending_rewards = AsyncMock(return_value=0)
        validator = TransactionValidator(
            feature_flags(), balance_oracle=balance_oracle, reward_oracle=reward_oracle,
        )
        draft = make_draft(intent=TransactionIntent.CLAIM_REWARDS, amount="0", to_address=None, token="CELO")

        result = await validator.validate_draft(draft)

        reward_oracle.get_pending_rewards.assert_awaited_once_with(SENDER)
        balance_oracle.get_balance.assert_not_awaited()
        assert result.warning_codes == ["NO_REWARDS"]

    @pytest.mark.asyncio
    async def test_rewards_not_probed_when_unsupported(self, feature_flags):
        reward_oracle = MagicMock()
        reward_oracle.get_pending_rewards = AsyncMock(return_value=5)
        validator = TransactionValidator(feature_flags(staking=False), reward_oracle=reward_oracle)
        draft = make_draft(intent=TransactionIntent.CLAIM_REWARDS, amount="0", to_address=None, token="CELO")

        result = await validator.validate_draft(draft)

        reward_oracle.get_pending_rewards.assert_not_awaited()
        assert result.error_codes == ["REWARDS_NOT_SUPPORTED"]

    @pytest.mark.asyncio
    async def test_swap_pair_checked_with_feature_flags(self):
        features = MagicMock()
        features.is_staking_supported.return_value = True
        features.is_swap_supported.return_value = False
        validator = TransactionValidator(features)
        draft = make_draft(intent=TransactionIntent.SWAP, token="cEUR", to_address=None,
                           from_token="cEUR", to_token="cUSD")

        result = await validator.validate_draft(draft)

        features.is_swap_supported.assert_called_once_with("cEUR", "cUSD")
        assert result.warning_codes == ["UNSUPPORTED_SWAP_PAIR"]
