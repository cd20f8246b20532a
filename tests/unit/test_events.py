"""
test_events.py - Unit tests for event delivery

Tests:
- Receipts: sequence numbers, receipt log
- Event log: ordering, filtering
- Listeners: subscribe, unsubscribe, ordering, exceptions
"""

import pytest

from token_ledger import (
    Transfer, Approval, InsufficientBalance,
    ZERO_ADDRESS, EVENT_TRANSFER, EVENT_APPROVAL,
)
from tests.token_helpers import (
    INITIAL_SUPPLY, INITIAL_HOLDER, RECIPIENT, ANOTHER_ACCOUNT, EventRecorder,
)


class TestReceipts:
    """Tests for the receipt log."""

    def test_sequence_numbers_are_monotonic(self, token):
        r1 = token.transfer(INITIAL_HOLDER, RECIPIENT, 1)
        r2 = token.approve(INITIAL_HOLDER, RECIPIENT, 1)
        r3 = token.mint(RECIPIENT, 1)
        assert [r1.sequence_number, r2.sequence_number, r3.sequence_number] == [1, 2, 3]

    def test_receipts_are_logged(self, token):
        receipt = token.transfer(INITIAL_HOLDER, RECIPIENT, 1)
        assert token.receipts[-1] is receipt
        assert [r.operation for r in token.receipts] == ["mint", "transfer"]

    def test_failed_operation_consumes_no_sequence(self, token):
        with pytest.raises(InsufficientBalance):
            token.transfer(RECIPIENT, INITIAL_HOLDER, 1)
        receipt = token.transfer(INITIAL_HOLDER, RECIPIENT, 1)
        assert receipt.sequence_number == 1


class TestEventLog:
    """Tests for the event log."""

    def test_event_log_in_emission_order(self, token):
        token.approve(INITIAL_HOLDER, RECIPIENT, 10)
        token.transfer_from(INITIAL_HOLDER, RECIPIENT, ANOTHER_ACCOUNT, 4)
        token.burn(ANOTHER_ACCOUNT, 4)
        assert token.event_log == [
            Transfer(ZERO_ADDRESS, INITIAL_HOLDER, INITIAL_SUPPLY),
            Approval(INITIAL_HOLDER, RECIPIENT, 10),
            Approval(INITIAL_HOLDER, RECIPIENT, 6),
            Transfer(INITIAL_HOLDER, ANOTHER_ACCOUNT, 4),
            Transfer(ANOTHER_ACCOUNT, ZERO_ADDRESS, 4),
        ]

    def test_events_filtered_by_kind(self, token):
        token.approve(INITIAL_HOLDER, RECIPIENT, 10)
        token.transfer(INITIAL_HOLDER, RECIPIENT, 1)
        assert token.events(EVENT_APPROVAL) == [Approval(INITIAL_HOLDER, RECIPIENT, 10)]
        assert len(token.events(EVENT_TRANSFER)) == 2

    def test_events_returns_a_copy(self, token):
        events = token.events()
        events.clear()
        assert len(token.event_log) == 1

    def test_event_log_matches_receipts(self, token):
        token.approve(INITIAL_HOLDER, RECIPIENT, 10)
        token.transfer_from(INITIAL_HOLDER, RECIPIENT, ANOTHER_ACCOUNT, 4)
        flattened = [e for r in token.receipts for e in r.events]
        assert flattened == token.event_log


class TestListeners:
    """Tests for subscribe / unsubscribe."""

    def test_listener_sees_events_after_subscription_only(self, token, recorder):
        token.transfer(INITIAL_HOLDER, RECIPIENT, 1)
        assert recorder.events == [Transfer(INITIAL_HOLDER, RECIPIENT, 1)]

    def test_listener_sees_state_after_mutation(self, token):
        seen = []
        token.subscribe(lambda event: seen.append(token.balance_of(RECIPIENT)))
        token.transfer(INITIAL_HOLDER, RECIPIENT, 7)
        assert seen == [7]

    def test_multiple_listeners_in_subscription_order(self, token):
        calls = []
        token.subscribe(lambda event: calls.append(("first", event.kind)))
        token.subscribe(lambda event: calls.append(("second", event.kind)))
        token.approve(INITIAL_HOLDER, RECIPIENT, 2)
        token.transfer_from(INITIAL_HOLDER, RECIPIENT, ANOTHER_ACCOUNT, 1)
        assert calls == [
            ("first", EVENT_APPROVAL), ("second", EVENT_APPROVAL),
            ("first", EVENT_APPROVAL), ("second", EVENT_APPROVAL),
            ("first", EVENT_TRANSFER), ("second", EVENT_TRANSFER),
        ]

    def test_unsubscribe_stops_delivery(self, token, recorder):
        token.unsubscribe(recorder)
        token.transfer(INITIAL_HOLDER, RECIPIENT, 1)
        assert recorder.events == []

    def test_unsubscribe_unknown_listener_raises(self, token):
        with pytest.raises(ValueError, match="not subscribed"):
            token.unsubscribe(EventRecorder())

    def test_listener_not_called_on_failure(self, token, recorder):
        with pytest.raises(InsufficientBalance):
            token.burn(RECIPIENT, 1)
        assert recorder.events == []

    def test_listener_exception_propagates_after_mutation(self, token):
        def explode(event):
            raise RuntimeError("listener failed")

        token.subscribe(explode)
        with pytest.raises(RuntimeError, match="listener failed"):
            token.transfer(INITIAL_HOLDER, RECIPIENT, 5)
        assert token.balance_of(RECIPIENT) == 5
        assert token.receipts[-1].operation == "transfer"

    def test_failing_listener_does_not_starve_others(self, token):
        """A raising listener still lets every listener see every event."""
        failed = []

        def explode(event):
            failed.append(event)
            raise RuntimeError("listener failed")

        seen = EventRecorder()
        token.approve(INITIAL_HOLDER, RECIPIENT, 10)
        token.subscribe(explode)
        token.subscribe(seen)
        seen.clear()
        failed.clear()

        with pytest.raises(RuntimeError, match="listener failed"):
            token.transfer_from(INITIAL_HOLDER, RECIPIENT, ANOTHER_ACCOUNT, 5)

        expected = [
            Approval(INITIAL_HOLDER, RECIPIENT, 5),
            Transfer(INITIAL_HOLDER, ANOTHER_ACCOUNT, 5),
        ]
        assert seen.events == expected
        assert failed == expected
        assert token.event_log[-2:] == expected
        assert token.balance_of(ANOTHER_ACCOUNT) == 5

    def test_first_listener_error_is_raised(self, token):
        def first(event):
            raise KeyError("first")

        def second(event):
            raise RuntimeError("second")

        token.subscribe(first)
        token.subscribe(second)
        with pytest.raises(KeyError):
            token.transfer(INITIAL_HOLDER, RECIPIENT, 1)

    def test_listener_may_unsubscribe_itself(self, token):
        calls = []

        def once(event):
            calls.append(event)
            token.unsubscribe(once)

        token.subscribe(once)
        token.approve(INITIAL_HOLDER, RECIPIENT, 2)
        token.approve(INITIAL_HOLDER, RECIPIENT, 3)
        assert calls == [Approval(INITIAL_HOLDER, RECIPIENT, 2)]
