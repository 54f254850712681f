"""
NLTE Models

Core types shared by the parser, drafter and validator.
Python attributes are snake_case; ``to_dict`` emits the camelCase wire shape.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class TransactionIntent(str, Enum):
    """Intent categories the parser can recognize."""
    SEND = "SEND"
    SWAP = "SWAP"
    STAKE = "STAKE"
    CLAIM_REWARDS = "CLAIM_REWARDS"
    UNKNOWN = "UNKNOWN"


class CeloToken(str, Enum):
    """Tokens supported on the Celo network."""
    CELO = "CELO"
    cUSD = "cUSD"
    cEUR = "cEUR"
    cREAL = "cREAL"


# Parameter keys -> wire keys
_PARAMETER_WIRE_KEYS: Dict[str, str] = {
    "amount": "amount",
    "token": "token",
    "recipient": "recipient",
    "recipient_name": "recipientName",
    "from_token": "fromToken",
    "to_token": "toToken",
    "stake_duration": "stakeDuration",
    "scheduled_time": "scheduledTime",
    "is_scheduled": "isScheduled",
}
_PARAMETER_PY_KEYS: Dict[str, str] = {wire: py for py, wire in _PARAMETER_WIRE_KEYS.items()}


def _wire_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class NaturalLanguageCommand:
    """Raw free-text command as typed by the user."""
    text: str
    timestamp: int  # ms epoch
    user_id: Optional[str] = None


@dataclass(frozen=True)
class ParsedCommand:
    """Structured result of parsing one command. Built once, never mutated."""
    intent: TransactionIntent
    parameters: Dict[str, Any] = field(default_factory=dict)
    confidence: float = 0.0
    raw_command: str = ""

    @property
    def is_scheduled(self) -> bool:
        return bool(self.parameters.get("is_scheduled"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent": self.intent.value,
            "parameters": {
                _PARAMETER_WIRE_KEYS.get(key, key): _wire_value(value)
                for key, value in self.parameters.items()
            },
            "confidence": self.confidence,
            "rawCommand": self.raw_command,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParsedCommand":
        raw_parameters = data.get("parameters") or {}
        parameters = {
            _PARAMETER_PY_KEYS.get(key, key): value
            for key, value in raw_parameters.items()
            if value is not None
        }
        try:
            intent = TransactionIntent(str(data.get("intent", "UNKNOWN")).upper())
        except ValueError:
            intent = TransactionIntent.UNKNOWN
        return cls(
            intent=intent,
            parameters=parameters,
            confidence=float(data.get("confidence", 0.0)),
            raw_command=data.get("rawCommand", data.get("raw_command", "")),
        )


@dataclass(frozen=True)
class GasEstimate:
    """Gas figures for a draft. Wei values as decimal strings, cost in CELO."""
    gas_limit: str
    max_fee_per_gas: str
    max_priority_fee_per_gas: str
    estimated_cost: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "gasLimit": self.gas_limit,
            "maxFeePerGas": self.max_fee_per_gas,
            "maxPriorityFeePerGas": self.max_priority_fee_per_gas,
            "estimatedCost": self.estimated_cost,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GasEstimate":
        return cls(
            gas_limit=str(data["gasLimit"]),
            max_fee_per_gas=str(data["maxFeePerGas"]),
            max_priority_fee_per_gas=str(data["maxPriorityFeePerGas"]),
            estimated_cost=str(data["estimatedCost"]),
        )


@dataclass(frozen=True)
class DraftMetadata:
    recipient_name: Optional[str] = None
    from_token: Optional[str] = None
    to_token: Optional[str] = None
    swap_rate: Optional[str] = None
    stake_duration: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recipientName": self.recipient_name,
            "fromToken": self.from_token,
            "toToken": self.to_token,
            "swapRate": self.swap_rate,
            "stakeDuration": self.stake_duration,
        }


@dataclass(frozen=True)
class ValidationIssue:
    """A validation error (blocking) or warning (non-blocking)."""
    code: str
    message: str
    field: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.field is not None:
            data["field"] = self.field
        return data


@dataclass(frozen=True)
class ValidationResult:
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    @property
    def error_codes(self) -> List[str]:
        return [e.code for e in self.errors]

    @property
    def warning_codes(self) -> List[str]:
        return [w.code for w in self.warnings]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }


@dataclass(frozen=True)
class TransactionDraft:
    """A populated, validated, not-yet-submitted transaction.

    Frozen: the drafter rebuilds it with ``dataclasses.replace`` at each step.
    """
    id: str
    intent: TransactionIntent
    from_address: str
    token: str
    amount: str
    gas_estimate: GasEstimate
    metadata: DraftMetadata
    validation: ValidationResult
    timestamp: int  # ms epoch
    to_address: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "intent": self.intent.value,
            "from": self.from_address,
            "to": self.to_address,
            "token": self.token,
            "amount": self.amount,
            "gasEstimate": self.gas_estimate.to_dict(),
            "metadata": self.metadata.to_dict(),
            "validation": self.validation.to_dict(),
            "timestamp": self.timestamp,
        }
