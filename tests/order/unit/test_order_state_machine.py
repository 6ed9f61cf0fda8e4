"""
Tests for OrderStateMachine

Forward-only lifecycle: skipping forward is allowed, moving back or out of
a final status is not, re-sending the current status is a no-op.
"""

from datetime import datetime

import pytest

from enums.order_status import OrderStatus
from exceptions.order import InvalidStatusTransitionException
from utils.order_state_machine import OrderStateMachine, get_next_valid_statuses


class TestIsValidTransition:

    @pytest.mark.parametrize("from_status,to_status", [
        (OrderStatus.PENDING, OrderStatus.CONFIRMED),
        (OrderStatus.CONFIRMED, OrderStatus.PREPARING),
        (OrderStatus.PREPARING, OrderStatus.SHIPPED),
        (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
        (OrderStatus.CONFIRMED, OrderStatus.SHIPPED),
        (OrderStatus.PENDING, OrderStatus.DELIVERED),
        (OrderStatus.PENDING, OrderStatus.CANCELLED),
        (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
    ])
    def test_forward_moves_allowed(self, from_status, to_status):
        assert OrderStateMachine.is_valid_transition(from_status, to_status) is True

    @pytest.mark.parametrize("from_status,to_status", [
        (OrderStatus.SHIPPED, OrderStatus.CONFIRMED),
        (OrderStatus.CONFIRMED, OrderStatus.PENDING),
        (OrderStatus.DELIVERED, OrderStatus.SHIPPED),
        (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
        (OrderStatus.CANCELLED, OrderStatus.PENDING),
        (OrderStatus.CANCELLED, OrderStatus.DELIVERED),
    ])
    def test_backward_and_final_moves_rejected(self, from_status, to_status):
        assert OrderStateMachine.is_valid_transition(from_status, to_status) is False

    @pytest.mark.parametrize("status", list(OrderStatus))
    def test_same_status_is_noop(self, status):
        assert OrderStateMachine.is_valid_transition(status, status) is True

    def test_accepts_literal_strings(self):
        assert OrderStateMachine.is_valid_transition("pending", "confirmed") is True


class TestParseStatus:

    def test_known_value(self):
        assert OrderStateMachine.parse_status("shipped") == OrderStatus.SHIPPED

    @pytest.mark.parametrize("value", ["refunded", "SHIPPED", ""])
    def test_unknown_value_rejected(self, value):
        with pytest.raises(InvalidStatusTransitionException) as exc_info:
            OrderStateMachine.parse_status(value)

        assert exc_info.value.current_status is None
        assert exc_info.value.requested_status == value
        assert "Unknown order status" in str(exc_info.value)


class TestValidTransitions:

    def test_from_pending(self):
        assert get_next_valid_statuses(OrderStatus.PENDING) == [
            OrderStatus.CONFIRMED,
            OrderStatus.PREPARING,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
            OrderStatus.CANCELLED,
        ]

    def test_from_shipped(self):
        assert OrderStateMachine.get_valid_transitions("shipped") == [OrderStatus.DELIVERED, OrderStatus.CANCELLED]

    @pytest.mark.parametrize("status", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_final_statuses_have_no_transitions(self, status):
        assert OrderStateMachine.get_valid_transitions(status) == []
        assert OrderStateMachine.is_final_status(status) is True

    def test_summary(self):
        summary = OrderStateMachine.get_status_summary()

        assert summary['total_statuses'] == 6
        assert summary['total_transitions'] == 14
        assert summary['final_statuses'] == ['cancelled', 'delivered']


class TestValidateAndLogTransition:

    def test_valid_transition_logged(self, caplog):
        with caplog.at_level("INFO", logger="utils.order_state_machine"):
            result = OrderStateMachine.validate_and_log_transition(5, "pending", "confirmed", actor_id=9)

        assert result == OrderStatus.CONFIRMED
        assert "ORDER_STATUS_TRANSITION: Order 5 pending -> confirmed by user 9" in caplog.text

    def test_invalid_transition_raises(self):
        with pytest.raises(InvalidStatusTransitionException) as exc_info:
            OrderStateMachine.validate_and_log_transition(5, OrderStatus.DELIVERED, OrderStatus.SHIPPED)

        assert exc_info.value.order_id == 5
        assert exc_info.value.current_status == "delivered"
        assert exc_info.value.requested_status == "shipped"


class TestDeliveredAt:

    def test_stamped_on_delivery(self):
        now = datetime(2026, 3, 1, 12, 0)
        assert OrderStateMachine.delivered_at_for(OrderStatus.DELIVERED, None, now) == now

    def test_existing_stamp_kept(self):
        first = datetime(2026, 3, 1, 12, 0)
        later = datetime(2026, 3, 2, 12, 0)
        assert OrderStateMachine.delivered_at_for(OrderStatus.DELIVERED, first, later) == first

    def test_other_statuses_leave_it_unset(self):
        assert OrderStateMachine.delivered_at_for(OrderStatus.SHIPPED, None) is None
