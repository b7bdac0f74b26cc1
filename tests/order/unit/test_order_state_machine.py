"""
Unit Tests for OrderStateMachine
"""

import pytest

from enums.order_status import OrderStatus
from utils.order_state_machine import OrderStateMachine


class TestOrderStateMachine:

    @pytest.mark.parametrize("from_status,to_status", [
        (OrderStatus.PROCESSING, OrderStatus.SHIPPED),
        (OrderStatus.PROCESSING, OrderStatus.CANCELLED),
        (OrderStatus.SHIPPED, OrderStatus.OUT_FOR_DELIVERY),
        (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED),
        (OrderStatus.DELIVERED, OrderStatus.RETURN_REQUESTED),
        (OrderStatus.RETURN_REQUESTED, OrderStatus.RETURNED),
        (OrderStatus.RETURN_REQUESTED, OrderStatus.DELIVERED),
    ])
    def test_valid_transitions(self, from_status, to_status):
        assert OrderStateMachine.is_valid_transition(from_status, to_status) is True

    @pytest.mark.parametrize("from_status,to_status", [
        (OrderStatus.CANCELLED, OrderStatus.PROCESSING),
        (OrderStatus.RETURNED, OrderStatus.DELIVERED),
        (OrderStatus.DELIVERED, OrderStatus.SHIPPED),
        (OrderStatus.PROCESSING, OrderStatus.RETURN_REQUESTED),
        (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED),
    ])
    def test_invalid_transitions(self, from_status, to_status):
        assert OrderStateMachine.is_valid_transition(from_status, to_status) is False

    def test_same_status_is_noop_unless_final(self):
        assert OrderStateMachine.is_valid_transition(OrderStatus.SHIPPED, OrderStatus.SHIPPED) is True
        assert OrderStateMachine.is_valid_transition(OrderStatus.CANCELLED, OrderStatus.CANCELLED) is False

    def test_customer_cannot_ship(self):
        assert OrderStateMachine.validate_transition(1, OrderStatus.PROCESSING, OrderStatus.SHIPPED) is False
        assert OrderStateMachine.validate_transition(1, OrderStatus.PROCESSING, OrderStatus.SHIPPED,
                                                     by_admin=True) is True

    def test_customer_can_cancel_and_request_return(self):
        assert OrderStateMachine.validate_transition(1, OrderStatus.PROCESSING, OrderStatus.CANCELLED) is True
        assert OrderStateMachine.validate_transition(1, OrderStatus.DELIVERED,
                                                     OrderStatus.RETURN_REQUESTED) is True

    def test_final_statuses_have_no_exits(self):
        for status in OrderStateMachine.FINAL_STATUSES:
            assert OrderStateMachine.is_final_status(status)
            assert OrderStateMachine.get_valid_transitions(status) == []
