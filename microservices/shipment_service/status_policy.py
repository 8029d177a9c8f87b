"""
Shipment status transition policies.

A policy decides whether a shipment may move from its current status to a
target status. The lifecycle engine consults it before appending a history
entry; a rejected transition surfaces as InvalidStatusTransitionError.
"""

from typing import Callable, Dict

from .models import ShipmentStatus

TransitionPolicy = Callable[[ShipmentStatus, ShipmentStatus], bool]

# Statuses a shipment never leaves under the strict policy
TERMINAL_STATUSES = frozenset({
    ShipmentStatus.DELIVERED,
    ShipmentStatus.REJECTED,
})


def permissive_policy(current: ShipmentStatus, target: ShipmentStatus) -> bool:
    """Any status may follow any status"""
    return True


def terminal_delivered_policy(current: ShipmentStatus, target: ShipmentStatus) -> bool:
    """Terminal statuses are final; re-posting the same status is allowed"""
    if current in TERMINAL_STATUSES:
        return target == current
    return True


POLICIES: Dict[str, TransitionPolicy] = {
    "permissive": permissive_policy,
    "strict": terminal_delivered_policy,
}


def get_transition_policy(name: str) -> TransitionPolicy:
    """
    Look up a policy by its configuration name.

    Raises:
        ValueError: unknown policy name
    """
    key = (name or "permissive").strip().lower()
    try:
        return POLICIES[key]
    except KeyError:
        raise ValueError(
            f"Unknown transition policy '{name}'. Expected one of: {', '.join(sorted(POLICIES))}"
        ) from None


__all__ = [
    "TransitionPolicy",
    "TERMINAL_STATUSES",
    "permissive_policy",
    "terminal_delivered_policy",
    "get_transition_policy",
]
