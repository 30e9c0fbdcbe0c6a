"""
Order lifecycle state machine.

Pending -> Preparing -> Shipped -> Delivered, or Pending -> Cancelled.
Delivered and Cancelled are terminal.
"""
from enum import Enum
from typing import NamedTuple


class OrderStatus(str, Enum):
    PENDING = "Pending"
    PREPARING = "Preparing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class Action(str, Enum):
    PREPARE = "prepare"
    SHIP = "ship"
    DELIVER = "deliver"
    CANCEL = "cancel"


class Capability(str, Enum):
    STAFF = "staff"
    OWNER = "owner"


class Transition(NamedTuple):
    sources: frozenset
    target: OrderStatus
    allowed: frozenset  # kto moze wywolac akcje


TRANSITIONS: dict[Action, Transition] = {
    Action.PREPARE: Transition(
        frozenset({OrderStatus.PENDING}),
        OrderStatus.PREPARING,
        frozenset({Capability.STAFF}),
    ),
    Action.SHIP: Transition(
        frozenset({OrderStatus.PENDING, OrderStatus.PREPARING}),
        OrderStatus.SHIPPED,
        frozenset({Capability.STAFF}),
    ),
    Action.DELIVER: Transition(
        frozenset({OrderStatus.SHIPPED}),
        OrderStatus.DELIVERED,
        frozenset({Capability.STAFF}),
    ),
    Action.CANCEL: Transition(
        frozenset({OrderStatus.PENDING}),
        OrderStatus.CANCELLED,
        frozenset({Capability.STAFF, Capability.OWNER}),
    ),
}

TERMINAL_STATES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


def is_valid_transition(current: OrderStatus, action: Action) -> bool:
    """True if ``action`` may fire while the order is in ``current``."""
    return OrderStatus(current) in TRANSITIONS[action].sources
