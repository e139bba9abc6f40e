# domain/workflow.py

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, FrozenSet, Mapping, Tuple

from domain.models import OrderStatus


# Every status may move to every other status; admins pick the new state
# directly from the order screen.
ALLOWED_TRANSITIONS: Mapping[OrderStatus, FrozenSet[OrderStatus]] = {
    status: frozenset(OrderStatus) for status in OrderStatus
}

# Statuses for which the order screen hides the "Ship Order" control.
# Assignment is still accepted for them if requested.
TRACKING_HIDDEN_STATUSES: FrozenSet[OrderStatus] = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.CANCELLED}
)


@dataclass(frozen=True)
class SideEffectRule:
    name: str
    description: str
    resulting_status: OrderStatus


TRACKING_IMPLIES_SHIPPED = SideEffectRule(
    name="tracking_implies_shipped",
    description="Adding a tracking number marks the order as shipped.",
    resulting_status=OrderStatus.SHIPPED,
)


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return OrderStatus.parse(target) in ALLOWED_TRANSITIONS[OrderStatus.parse(current)]


def shows_tracking_control(status: OrderStatus) -> bool:
    return OrderStatus.parse(status) not in TRACKING_HIDDEN_STATUSES


def validate_tracking_number(val: Any) -> Tuple[bool, str]:
    if val is None or not str(val).strip():
        return False, "Please enter a tracking number"
    return True, ""


def status_change(current: OrderStatus, target: Any, now: datetime) -> Dict[str, Any]:
    """
    Build the row changes for a plain status update.

    Raises ValueError for an unknown status or a transition the table forbids.
    """
    new_status = OrderStatus.parse(target)
    if not can_transition(current, new_status):
        raise ValueError(f"Cannot move order from {current.value} to {new_status.value}")
    return {
        "status": new_status.value,
        "updated_at": now.isoformat(),
    }


def tracking_assignment(tracking_number: str, now: datetime) -> Dict[str, Any]:
    """
    Build the row changes for TRACKING_IMPLIES_SHIPPED.

    The tracking number is stored as typed; blank input raises ValueError.
    """
    ok, msg = validate_tracking_number(tracking_number)
    if not ok:
        raise ValueError(msg)
    return {
        "tracking_number": tracking_number,
        "status": TRACKING_IMPLIES_SHIPPED.resulting_status.value,
        "updated_at": now.isoformat(),
    }
