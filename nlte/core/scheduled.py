"""
Scheduled Transfers

Persistence and lifecycle for sends deferred to a future time:

    pending -> completed | failed   (by the executor)
    pending -> cancelled            (by the user)

The executor asks ``next_due`` for work, which hands out the earliest-due
pending auto-approved transfer, and brackets each run with
``begin_execution`` / ``complete`` or ``fail``. One run per user at a time.
"""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from .models import ParsedCommand, TransactionIntent
from .store import KeyValueStore, normalize_user_key
from .tokens import is_valid_address, is_valid_amount

logger = logging.getLogger(__name__)

SCHEDULED_TRANSFERS_NAMESPACE = "scheduled_transfers"


class TransferStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ScheduledTransferError(Exception):
    """Base class for scheduled transfer failures."""


class TransferNotFoundError(ScheduledTransferError):
    pass


class InvalidTransferStateError(ScheduledTransferError):
    pass


class ExecutionInProgressError(ScheduledTransferError):
    pass


@dataclass(frozen=True)
class ScheduledTransfer:
    id: str
    recipient_address: str
    amount: str  # plain decimal, not wei
    scheduled_time: int  # ms epoch
    created_at: int  # ms epoch
    status: TransferStatus = TransferStatus.PENDING
    auto_approved: bool = False
    token: Optional[str] = None
    recipient_name: Optional[str] = None
    tx_hash: Optional[str] = None
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "recipientAddress": self.recipient_address,
            "recipientName": self.recipient_name,
            "amount": self.amount,
            "token": self.token,
            "scheduledTime": self.scheduled_time,
            "createdAt": self.created_at,
            "status": self.status.value,
            "autoApproved": self.auto_approved,
            "txHash": self.tx_hash,
            "errorMessage": self.error_message,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduledTransfer":
        return cls(
            id=data["id"],
            recipient_address=data["recipientAddress"],
            recipient_name=data.get("recipientName"),
            amount=str(data["amount"]),
            token=data.get("token"),
            scheduled_time=int(data["scheduledTime"]),
            created_at=int(data.get("createdAt") or 0),
            status=TransferStatus(data.get("status", TransferStatus.PENDING.value)),
            auto_approved=bool(data.get("autoApproved", False)),
            tx_hash=data.get("txHash"),
            error_message=data.get("errorMessage"),
        )


class ScheduledTransferBook:
    """Scheduled transfers per user, stored in the injected store."""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._in_flight: Dict[str, str] = {}  # user -> transfer id

    def list(self, user_key: str) -> List[ScheduledTransfer]:
        """Newest first."""

        transfers = self._load(user_key)
        return sorted(transfers, key=lambda t: t.created_at, reverse=True)

    def get(self, user_key: str, transfer_id: str) -> ScheduledTransfer:
        for transfer in self._load(user_key):
            if transfer.id == transfer_id:
                return transfer
        raise TransferNotFoundError(f"Scheduled transfer {transfer_id} not found")

    def create(
        self,
        user_key: str,
        recipient_address: str,
        amount: str,
        scheduled_time: int,
        token: Optional[str] = None,
        auto_approved: bool = False,
        recipient_name: Optional[str] = None,
        now_ms: Optional[int] = None,
    ) -> ScheduledTransfer:
        now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
        if not is_valid_address(recipient_address):
            raise ScheduledTransferError(f"Invalid recipient address: {recipient_address}")
        if not is_valid_amount(amount):
            raise ScheduledTransferError(f"Invalid amount: {amount}")
        if scheduled_time <= now_ms:
            raise ScheduledTransferError("Scheduled time must be in the future")

        transfer = ScheduledTransfer(
            id=f"sched_{secrets.token_hex(8)}",
            recipient_address=recipient_address,
            recipient_name=recipient_name,
            amount=amount,
            token=token,
            scheduled_time=scheduled_time,
            created_at=now_ms,
            auto_approved=auto_approved,
        )
        self._save(user_key, [*self._load(user_key), transfer])
        logger.info("Scheduled %s %s to %s at %s", amount, token, recipient_address, scheduled_time)
        return transfer

    def create_from_command(
        self,
        user_key: str,
        parsed: ParsedCommand,
        auto_approved: bool = False,
        now_ms: Optional[int] = None,
    ) -> ScheduledTransfer:
        if parsed.intent != TransactionIntent.SEND or not parsed.is_scheduled:
            raise ScheduledTransferError("Command is not a scheduled send")
        params = parsed.parameters
        try:
            scheduled_time = int(params["scheduled_time"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ScheduledTransferError(
                f"Scheduled time is missing or invalid: {params.get('scheduled_time')!r}"
            ) from exc
        token = params.get("token")
        return self.create(
            user_key,
            recipient_address=str(params.get("recipient") or ""),
            amount=str(params.get("amount") or ""),
            scheduled_time=scheduled_time,
            token=getattr(token, "value", token),
            auto_approved=auto_approved,
            recipient_name=params.get("recipient_name"),
            now_ms=now_ms,
        )

    def cancel(self, user_key: str, transfer_id: str) -> ScheduledTransfer:
        transfer = self.get(user_key, transfer_id)
        if transfer.status != TransferStatus.PENDING:
            raise InvalidTransferStateError(f"Cannot cancel a {transfer.status.value} transfer")
        if self._in_flight.get(normalize_user_key(user_key)) == transfer_id:
            raise ExecutionInProgressError("Transfer is executing")
        return self._update(user_key, replace(transfer, status=TransferStatus.CANCELLED))

    def next_due(self, user_key: str, now_ms: Optional[int] = None) -> Optional[ScheduledTransfer]:
        """Earliest-due pending auto-approved transfer, or None.

        Returns None while another transfer of this user is executing.
        """
        if normalize_user_key(user_key) in self._in_flight:
            return None
        now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
        due = [
            t for t in self._load(user_key)
            if t.status == TransferStatus.PENDING
            and t.auto_approved
            and t.scheduled_time <= now_ms
        ]
        if not due:
            return None
        return min(due, key=lambda t: (t.scheduled_time, t.created_at))

    def begin_execution(self, user_key: str, transfer_id: str) -> ScheduledTransfer:
        key = normalize_user_key(user_key)
        if key in self._in_flight:
            raise ExecutionInProgressError(
                f"Transfer {self._in_flight[key]} is already executing for {user_key}"
            )
        transfer = self.get(user_key, transfer_id)
        if transfer.status != TransferStatus.PENDING:
            raise InvalidTransferStateError(f"Cannot execute a {transfer.status.value} transfer")
        self._in_flight[key] = transfer_id
        return transfer

    def complete(self, user_key: str, transfer_id: str, tx_hash: str) -> ScheduledTransfer:
        transfer = self._finish(user_key, transfer_id)
        logger.info("Scheduled transfer %s completed: %s", transfer_id, tx_hash)
        return self._update(user_key, replace(transfer, status=TransferStatus.COMPLETED, tx_hash=tx_hash))

    def fail(self, user_key: str, transfer_id: str, error_message: str) -> ScheduledTransfer:
        transfer = self._finish(user_key, transfer_id)
        logger.error("Scheduled transfer %s failed: %s", transfer_id, error_message)
        return self._update(
            user_key,
            replace(transfer, status=TransferStatus.FAILED, error_message=error_message),
        )

    def is_executing(self, user_key: str) -> bool:
        return normalize_user_key(user_key) in self._in_flight

    def _finish(self, user_key: str, transfer_id: str) -> ScheduledTransfer:
        key = normalize_user_key(user_key)
        if self._in_flight.get(key) != transfer_id:
            raise InvalidTransferStateError(f"Transfer {transfer_id} is not executing")
        transfer = self.get(user_key, transfer_id)
        del self._in_flight[key]
        return transfer

    def _update(self, user_key: str, updated: ScheduledTransfer) -> ScheduledTransfer:
        transfers = [updated if t.id == updated.id else t for t in self._load(user_key)]
        self._save(user_key, transfers)
        return updated

    def _load(self, user_key: str) -> List[ScheduledTransfer]:
        raw = self.store.get(user_key, SCHEDULED_TRANSFERS_NAMESPACE, default=[]) or []
        return [ScheduledTransfer.from_dict(item) for item in raw]

    def _save(self, user_key: str, transfers: List[ScheduledTransfer]) -> None:
        self.store.set(user_key, SCHEDULED_TRANSFERS_NAMESPACE, [t.to_dict() for t in transfers])


__all__ = [
    "SCHEDULED_TRANSFERS_NAMESPACE",
    "ExecutionInProgressError",
    "InvalidTransferStateError",
    "ScheduledTransfer",
    "ScheduledTransferBook",
    "ScheduledTransferError",
    "TransferNotFoundError",
    "TransferStatus",
]
