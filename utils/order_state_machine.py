"""
Order State Machine for validating order status transitions.

Every lifecycle action in OrderService checks its transition here before
touching the order, so customers and admins cannot move an order into a state
that skips delivery, reopens a cancellation or returns an undelivered order.
"""

import logging
from typing import Dict, List, Set

from enums.order_status import OrderStatus

logger = logging.getLogger(__name__)


class OrderStatusTransition:
    """Represents a valid status transition with metadata"""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus, requires_admin: bool = True,
                 description: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.requires_admin = requires_admin
        self.description = description

    def __repr__(self):
        admin_flag = " (Admin)" if self.requires_admin else ""
        return f"{self.from_status.value} -> {self.to_status.value}{admin_flag}"


class OrderStateMachine:
    """
    Finite state machine for order status transitions.

    Valid status transitions:
    - PROCESSING -> SHIPPED / OUT_FOR_DELIVERY / DELIVERED (admin)
    - PROCESSING -> CANCELLED (customer or admin)
    - SHIPPED -> OUT_FOR_DELIVERY / DELIVERED / CANCELLED (admin)
    - OUT_FOR_DELIVERY -> DELIVERED (admin)
    - DELIVERED -> RETURN_REQUESTED (customer)
    - RETURN_REQUESTED -> RETURNED (admin approves) / DELIVERED (admin rejects)

    Final states: CANCELLED, RETURNED
    """

    VALID_TRANSITIONS: List[OrderStatusTransition] = [
        # From PROCESSING
        OrderStatusTransition(OrderStatus.PROCESSING, OrderStatus.SHIPPED,
                              description="Order handed to carrier"),
        OrderStatusTransition(OrderStatus.PROCESSING, OrderStatus.OUT_FOR_DELIVERY,
                              description="Local delivery with installer"),
        OrderStatusTransition(OrderStatus.PROCESSING, OrderStatus.DELIVERED,
                              description="Delivered directly"),
        OrderStatusTransition(OrderStatus.PROCESSING, OrderStatus.CANCELLED, requires_admin=False,
                              description="Cancelled before dispatch"),

        # From SHIPPED
        OrderStatusTransition(OrderStatus.SHIPPED, OrderStatus.OUT_FOR_DELIVERY,
                              description="Out for delivery"),
        OrderStatusTransition(OrderStatus.SHIPPED, OrderStatus.DELIVERED,
                              description="Delivered"),
        OrderStatusTransition(OrderStatus.SHIPPED, OrderStatus.CANCELLED,
                              description="Shipped order cancelled by admin"),

        # From OUT_FOR_DELIVERY
        OrderStatusTransition(OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED,
                              description="Delivered"),

        # Returns
        OrderStatusTransition(OrderStatus.DELIVERED, OrderStatus.RETURN_REQUESTED, requires_admin=False,
                              description="Customer requested a return"),
        OrderStatusTransition(OrderStatus.RETURN_REQUESTED, OrderStatus.RETURNED,
                              description="Return approved"),
        OrderStatusTransition(OrderStatus.RETURN_REQUESTED, OrderStatus.DELIVERED,
                              description="Return rejected"),
    ]

    FINAL_STATUSES: Set[OrderStatus] = {OrderStatus.CANCELLED, OrderStatus.RETURNED}

    _transition_map: Dict[OrderStatus, Set[OrderStatus]] = {}
    _admin_required_transitions: Set[tuple] = set()

    @classmethod
    def _build_transition_map(cls):
        if cls._transition_map:
            return

        for transition in cls.VALID_TRANSITIONS:
            cls._transition_map.setdefault(transition.from_status, set()).add(transition.to_status)
            if transition.requires_admin:
                cls._admin_required_transitions.add((transition.from_status, transition.to_status))

    @classmethod
    def is_valid_transition(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        """
        Check if a status transition is valid according to the state machine.

        Staying in the same non-final status is allowed (no-op).
        """
        cls._build_transition_map()

        if from_status == to_status:
            return from_status not in cls.FINAL_STATUSES

        return to_status in cls._transition_map.get(from_status, set())

    @classmethod
    def requires_admin(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        cls._build_transition_map()
        return (from_status, to_status) in cls._admin_required_transitions

    @classmethod
    def get_valid_transitions(cls, from_status: OrderStatus) -> List[OrderStatus]:
        cls._build_transition_map()
        return sorted(cls._transition_map.get(from_status, set()), key=lambda s: s.value)

    @classmethod
    def is_final_status(cls, status: OrderStatus) -> bool:
        return status in cls.FINAL_STATUSES

    @classmethod
    def validate_transition(cls, order_id: int, from_status: OrderStatus, to_status: OrderStatus,
                            by_admin: bool = False) -> bool:
        """
        Validate a status transition and log it.

        Args:
            order_id: ID of the order being transitioned
            from_status: Current order status
            to_status: Desired new status
            by_admin: True if an admin performs the transition

        Returns:
            True if transition is valid, False otherwise
        """
        if not cls.is_valid_transition(from_status, to_status):
            logger.warning(f"Invalid status transition for order {order_id}: "
                           f"{from_status.value} -> {to_status.value}")
            return False

        if cls.requires_admin(from_status, to_status) and not by_admin:
            logger.warning(f"Admin required for transition {from_status.value} -> {to_status.value} "
                           f"on order {order_id}")
            return False

        performer = "admin" if by_admin else "customer"
        logger.info(f"ORDER_STATUS_TRANSITION: Order {order_id} {from_status.value} -> {to_status.value} "
                    f"by {performer}")
        return True
