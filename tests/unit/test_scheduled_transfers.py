"""
Tests for the scheduled transfer book.
"""

import pytest

from nlte.core.models import CeloToken, ParsedCommand, TransactionIntent
from nlte.core.scheduled import (
    ExecutionInProgressError,
    InvalidTransferStateError,
    ScheduledTransferBook,
    ScheduledTransferError,
    TransferNotFoundError,
    TransferStatus,
)

OWNER = "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01"
ALICE = "0x1111111111111111111111111111111111111111"
NOW = 1_700_000_000_000
HOUR = 3_600_000


@pytest.fixture
def book(store):
    return ScheduledTransferBook(store)


def create(book, scheduled_time=NOW + HOUR, auto_approved=True, now_ms=NOW, **kwargs):
    return book.create(
        OWNER,
        recipient_address=kwargs.pop("recipient_address", ALICE),
        amount=kwargs.pop("amount", "1.5"),
        scheduled_time=scheduled_time,
        token=kwargs.pop("token", "CELO"),
        auto_approved=auto_approved,
        now_ms=now_ms,
        **kwargs,
    )


class TestCreate:

    def test_create_and_get(self, book):
        transfer = create(book, recipient_name="alice")

        assert transfer.status == TransferStatus.PENDING
        assert transfer.amount == "1.5"
        assert transfer.created_at == NOW
        assert transfer.id.startswith("sched_")
        assert book.get(OWNER, transfer.id) == transfer
        assert book.get(OWNER.lower(), transfer.id) == transfer

    def test_rejects_past_time(self, book):
        with pytest.raises(ScheduledTransferError):
            create(book, scheduled_time=NOW)

    def test_rejects_non_address_recipient(self, book):
        with pytest.raises(ScheduledTransferError):
            create(book, recipient_address="alice")

    def test_rejects_invalid_amount(self, book):
        with pytest.raises(ScheduledTransferError):
            create(book, amount="0")

    def test_create_from_command(self, book):
        parsed = ParsedCommand(
            intent=TransactionIntent.SEND,
            parameters={
                "amount": "2",
                "token": CeloToken.cUSD,
                "recipient": ALICE,
                "recipient_name": "alice",
                "scheduled_time": NOW + HOUR,
                "is_scheduled": True,
            },
            confidence=0.9,
        )
        transfer = book.create_from_command(OWNER, parsed, auto_approved=True, now_ms=NOW)

        assert transfer.token == "cUSD"
        assert transfer.recipient_name == "alice"
        assert transfer.scheduled_time == NOW + HOUR

    def test_create_from_immediate_send_is_rejected(self, book):
        parsed = ParsedCommand(
            intent=TransactionIntent.SEND,
            parameters={"amount": "2", "token": CeloToken.cUSD, "recipient": ALICE},
        )
        with pytest.raises(ScheduledTransferError):
            book.create_from_command(OWNER, parsed, now_ms=NOW)

    @pytest.mark.parametrize("extra", [{}, {"scheduled_time": "soon"}, {"scheduled_time": [1]}])
    def test_missing_or_bad_scheduled_time_is_rejected(self, book, extra):
        parsed = ParsedCommand(
            intent=TransactionIntent.SEND,
            parameters={"amount": "2", "recipient": ALICE, "is_scheduled": True, **extra},
        )
        with pytest.raises(ScheduledTransferError, match="Scheduled time"):
            book.create_from_command(OWNER, parsed, now_ms=NOW)
        assert book.list(OWNER) == []

    def test_unresolved_recipient_is_rejected(self, book):
        parsed = ParsedCommand(
            intent=TransactionIntent.SEND,
            parameters={"amount": "2", "recipient": "bob", "scheduled_time": NOW + HOUR, "is_scheduled": True},
        )
        with pytest.raises(ScheduledTransferError):
            book.create_from_command(OWNER, parsed, now_ms=NOW)


class TestListAndCancel:

    def test_list_newest_first(self, book):
        first = create(book, now_ms=NOW)
        second = create(book, now_ms=NOW + 1)
        assert [t.id for t in book.list(OWNER)] == [second.id, first.id]

    def test_cancel(self, book):
        transfer = create(book)
        cancelled = book.cancel(OWNER, transfer.id)

        assert cancelled.status == TransferStatus.CANCELLED
        assert book.get(OWNER, transfer.id).status == TransferStatus.CANCELLED

    def test_cancel_twice(self, book):
        transfer = create(book)
        book.cancel(OWNER, transfer.id)
        with pytest.raises(InvalidTransferStateError):
            book.cancel(OWNER, transfer.id)

    def test_cancel_unknown(self, book):
        with pytest.raises(TransferNotFoundError):
            book.cancel(OWNER, "sched_missing")

    def test_cancel_while_executing(self, book):
        transfer = create(book)
        book.begin_execution(OWNER, transfer.id)
        with pytest.raises(ExecutionInProgressError):
            book.cancel(OWNER, transfer.id)


class TestExecution:

    def test_next_due_picks_earliest_auto_approved(self, book):
        later = create(book, scheduled_time=NOW + 2 * HOUR)
        earlier = create(book, scheduled_time=NOW + HOUR)
        create(book, scheduled_time=NOW + 30 * 60_000, auto_approved=False)

        assert book.next_due(OWNER, now_ms=NOW) is None
        assert book.next_due(OWNER, now_ms=NOW + 3 * HOUR).id == earlier.id

        book.begin_execution(OWNER, earlier.id)
        book.complete(OWNER, earlier.id, "0xhash")
        assert book.next_due(OWNER, now_ms=NOW + 3 * HOUR).id == later.id

    def test_one_execution_per_user(self, book):
        first = create(book, scheduled_time=NOW + HOUR)
        second = create(book, scheduled_time=NOW + 2 * HOUR)

        book.begin_execution(OWNER, first.id)

        assert book.is_executing(OWNER)
        assert book.next_due(OWNER, now_ms=NOW + 3 * HOUR) is None
        with pytest.raises(ExecutionInProgressError):
            book.begin_execution(OWNER, second.id)

    def test_complete(self, book):
        transfer = create(book)
        book.begin_execution(OWNER, transfer.id)
        done = book.complete(OWNER, transfer.id, "0xabc")

        assert done.status == TransferStatus.COMPLETED
        assert done.tx_hash == "0xabc"
        assert not book.is_executing(OWNER)

    def test_fail(self, book):
        transfer = create(book)
        book.begin_execution(OWNER, transfer.id)
        failed = book.fail(OWNER, transfer.id, "insufficient funds")

        assert failed.status == TransferStatus.FAILED
        assert failed.error_message == "insufficient funds"
        assert not book.is_executing(OWNER)

    def test_complete_without_begin(self, book):
        transfer = create(book)
        with pytest.raises(InvalidTransferStateError):
            book.complete(OWNER, transfer.id, "0xabc")

    def test_cannot_execute_cancelled(self, book):
        transfer = create(book)
        book.cancel(OWNER, transfer.id)
        with pytest.raises(InvalidTransferStateError):
            book.begin_execution(OWNER, transfer.id)

    def test_wire_shape(self, book):
        data = create(book).to_dict()
        assert data["recipientAddress"] == ALICE
        assert data["status"] == "pending"
        assert data["autoApproved"] is True
