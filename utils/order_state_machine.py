"""
Order State Machine for validating order status transitions and maintaining consistency.

This module implements a finite state machine to ensure valid order status transitions
and provide audit logging for all status changes.

Lifecycle:
    pending -> confirmed -> preparing -> shipped -> delivered
    cancelled is reachable from every non-final status

Transitions move forward only. Forward jumps that skip stages
(e.g. pending -> shipped) are allowed because sellers often confirm and ship
in one step; moving back, or out of a final status, is rejected.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Set

from enums.order_status import OrderStatus
from exceptions.order import InvalidStatusTransitionException

logger = logging.getLogger(__name__)


class OrderStatusTransition:
    """Represents a valid status transition with metadata"""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus, description: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.description = description

    def __repr__(self):
        return f"{self.from_status.value} -> {self.to_status.value}"


class OrderStateMachine:
    """
    Finite state machine for order status transitions with validation and audit logging.

    Valid status transitions:
    - Any status -> any LATER status of the delivery sequence
    - Any non-final status -> CANCELLED

    Invalid transitions (will be rejected):
    - Any backward move (e.g. SHIPPED -> CONFIRMED)
    - DELIVERED -> any status (final state)
    - CANCELLED -> any status (final state)
    """

    SEQUENCE: List[OrderStatus] = [
        OrderStatus.PENDING,
        OrderStatus.CONFIRMED,
        OrderStatus.PREPARING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
    ]

    FINAL_STATUSES: Set[OrderStatus] = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

    DESCRIPTIONS: Dict[OrderStatus, str] = {
        OrderStatus.CONFIRMED: "Order confirmed",
        OrderStatus.PREPARING: "Order is being prepared",
        OrderStatus.SHIPPED: "Order handed to delivery",
        OrderStatus.DELIVERED: "Order delivered and paid on delivery",
        OrderStatus.CANCELLED: "Order cancelled",
    }

    # Built lazily from SEQUENCE
    _transition_map: Dict[OrderStatus, List[OrderStatusTransition]] = {}

    @classmethod
    def _build_transition_map(cls):
        """Build internal transition map for fast lookup"""
        if cls._transition_map:
            return  # Already built

        for index, from_status in enumerate(cls.SEQUENCE):
            if from_status in cls.FINAL_STATUSES:
                cls._transition_map[from_status] = []
                continue
            transitions = [
                OrderStatusTransition(from_status, to_status, cls.DESCRIPTIONS[to_status])
                for to_status in cls.SEQUENCE[index + 1:]
            ]
            transitions.append(OrderStatusTransition(
                from_status, OrderStatus.CANCELLED, cls.DESCRIPTIONS[OrderStatus.CANCELLED]
            ))
            cls._transition_map[from_status] = transitions
        cls._transition_map[OrderStatus.CANCELLED] = []

    @staticmethod
    def parse_status(status: str | OrderStatus) -> OrderStatus:
        """
        Convert a raw status value into OrderStatus.

        Raises:
            InvalidStatusTransitionException: If the value is not one of the six statuses
        """
        if isinstance(status, OrderStatus):
            return status
        try:
            return OrderStatus(status)
        except ValueError:
            raise InvalidStatusTransitionException(current_status=None, requested_status=str(status))

    @classmethod
    def is_valid_transition(cls, from_status: str | OrderStatus, to_status: str | OrderStatus) -> bool:
        """
        Check if a status transition is valid according to the state machine.

        Staying in the same status is valid (no-op).

        Raises:
            InvalidStatusTransitionException: If either status is unknown
        """
        cls._build_transition_map()
        from_status = cls.parse_status(from_status)
        to_status = cls.parse_status(to_status)

        if from_status == to_status:
            return True

        return any(t.to_status == to_status for t in cls._transition_map.get(from_status, []))

    @classmethod
    def get_valid_transitions(cls, from_status: str | OrderStatus) -> List[OrderStatus]:
        """
        Get all valid next statuses from the current status, in lifecycle order.
        """
        cls._build_transition_map()
        return [t.to_status for t in cls._transition_map.get(cls.parse_status(from_status), [])]

    @classmethod
    def get_transition_description(cls, from_status: OrderStatus, to_status: OrderStatus) -> str:
        cls._build_transition_map()
        for transition in cls._transition_map.get(from_status, []):
            if transition.to_status == to_status:
                return transition.description
        return f"Transition from {from_status.value} to {to_status.value}"

    @classmethod
    def is_final_status(cls, status: str | OrderStatus) -> bool:
        """
        Check if a status is final (no transitions allowed from it).
        """
        return cls.parse_status(status) in cls.FINAL_STATUSES

    @classmethod
    def validate_and_log_transition(cls, order_id: int, from_status: str | OrderStatus,
                                    to_status: str | OrderStatus,
                                    actor_id: Optional[int] = None) -> OrderStatus:
        """
        Validate a status transition and write an audit log entry.

        Args:
            order_id: ID of the order being transitioned
            from_status: Current order status
            to_status: Desired new status
            actor_id: ID of the admin/seller performing the transition (if known)

        Returns:
            The parsed target status

        Raises:
            InvalidStatusTransitionException: If a status is unknown or the move is not allowed
        """
        from_status = cls.parse_status(from_status)
        to_status = cls.parse_status(to_status)

        if not cls.is_valid_transition(from_status, to_status):
            logger.error(f"Invalid status transition for order {order_id}: {from_status.value} -> {to_status.value}")
            raise InvalidStatusTransitionException(
                current_status=from_status.value,
                requested_status=to_status.value,
                order_id=order_id
            )

        if from_status != to_status:
            performer = f"user {actor_id}" if actor_id is not None else "system"
            logger.info(
                f"ORDER_STATUS_TRANSITION: Order {order_id} {from_status.value} -> {to_status.value} "
                f"by {performer}: {cls.get_transition_description(from_status, to_status)}"
            )

        return to_status

    @classmethod
    def delivered_at_for(cls, to_status: OrderStatus, current_delivered_at: Optional[datetime],
                         now: Optional[datetime] = None) -> Optional[datetime]:
        """
        Side effect of entering a status on the delivered_at timestamp.

        Entering DELIVERED stamps the time once; an existing stamp is never
        overwritten.
        """
        if to_status == OrderStatus.DELIVERED and current_delivered_at is None:
            return now or datetime.now()
        return current_delivered_at

    @classmethod
    def get_status_summary(cls) -> Dict[str, object]:
        """
        Get a summary of the state machine configuration.
        """
        cls._build_transition_map()
        transitions = [t for ts in cls._transition_map.values() for t in ts]
        return {
            'total_statuses': len(OrderStatus),
            'total_transitions': len(transitions),
            'final_statuses': sorted(s.value for s in cls.FINAL_STATUSES),
            'transition_map': {s.value: [t.to_status.value for t in ts] for s, ts in cls._transition_map.items()},
        }


def get_next_valid_statuses(current_status: str | OrderStatus) -> List[OrderStatus]:
    """
    Get all valid next statuses for an order.
    """
    return OrderStateMachine.get_valid_transitions(current_status)
