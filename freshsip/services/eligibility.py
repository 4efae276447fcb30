"""Which orders a delivery person may see right now."""
from typing import Any, Dict, List, Optional

from freshsip.core.clock import Clock
from freshsip.core.exceptions import ForbiddenError, InvalidInputError, NotFoundError
from freshsip.core.logging import get_service_logger
from freshsip.models.order import Order
from freshsip.models.time_slot import (
    ASAP,
    TIME_SLOTS,
    TimeSlot,
    slot_for_hour,
    slot_labels,
    sort_by_slot,
    target_hour,
)
from freshsip.repositories.order_repository import OrderRepository
from freshsip.repositories.user_repository import UserRepository
from freshsip.services.projections import day_row, quicksip_row

logger = get_service_logger("eligibility")


def resolve_target_slot(hour: int, minutes: int, slots=TIME_SLOTS) -> TimeSlot:
    """
    Map a wall-clock time to the slot being served.

    From half past the hour the next hour's slot is served, so 17:35 targets
    the slot starting at 18:00.

    Raises:
        InvalidInputError: No configured slot starts at the target hour
    """
    slot = slot_for_hour(target_hour(hour, minutes), slots)
    if slot is None:
        raise InvalidInputError("No delivery slot available for this time.")
    return slot


def rule_description(minutes: int) -> str:
    return "Next hour (>=30 mins)" if minutes >= 30 else "Current hour (<30 mins)"


class EligibilityService:
    """Lists today's deliverable orders for the slot a worker is serving."""

    def __init__(self, orders: OrderRepository, users: UserRepository, clock: Clock, slots=TIME_SLOTS):
        self.orders = orders
        self.users = users
        self.clock = clock
        self.slots = slots

    def list_eligible_orders(
        self,
        user_id: str,
        hour: Optional[int] = None,
        minutes: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Orders for today in the target slot.

        QuickSip orders created today match their own slot or ASAP. FreshPlan
        days dated today match only their resolved slot, so an ASAP plan day
        is never listed.

        Raises:
            InvalidInputError: The time maps to no slot
            NotFoundError: The worker does not exist
            ForbiddenError: The worker is not registered for the target slot
        """
        now = self.clock.now()
        if hour is None:
            hour = now.hour
        if minutes is None:
            minutes = now.minute

        target = resolve_target_slot(hour, minutes, self.slots).range

        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError("User not found.")

        active_slots = user.active_time_slots
        if target not in active_slots:
            raise ForbiddenError(
                "You are not active for this time slot.",
                extra={
                    "targetTimeSlot": target,
                    "yourActiveSlots": active_slots,
                    "availableSlots": slot_labels(self.slots),
                },
            )

        bounds = self.clock.day_bounds(now)
        rows: List[Dict[str, Any]] = []
        for order in self.orders.find_touching(*bounds):
            rows.extend(self._matching_rows(order, target, bounds))

        rows = sort_by_slot(rows, slot_labels(self.slots), key="deliveryTimeSlot")
        formatted = f"{hour}:{minutes:02d}"

        logger.info(
            f"Found {len(rows)} orders for {target}",
            extra={"user_id": user_id, "role": user.role},
        )
        return {
            "orders": rows,
            "targetTimeSlot": target,
            "currentTime": {"hour": hour, "minutes": minutes, "formatted": formatted},
            "message": f"Found {len(rows)} orders for {target}",
            "timeSlotInfo": {
                "current": formatted,
                "showingFrom": target,
                "rule": rule_description(minutes),
            },
        }

    def _matching_rows(self, order: Order, target: str, bounds) -> List[Dict[str, Any]]:
        if order.is_quicksip:
            if not self.clock.is_within(order.created_at, bounds):
                return []
            if order.quicksip_time_slot in (target, ASAP):
                return [quicksip_row(order)]
            return []

        if order.is_freshplan:
            return [
                day_row(order, day)
                for day in order.days
                if self.clock.is_within(day.date, bounds) and day.resolved_time_slot == target
            ]
        return []

    def clock_info(self) -> Dict[str, Any]:
        """Server wall clock and the slot table, for clients testing the rule."""
        now = self.clock.now()
        return {
            "message": "Use POST method with hour and minutes in body",
            "currentTime": {
                "hour": now.hour,
                "minutes": now.minute,
                "formatted": f"{now.hour}:{now.minute:02d}",
            },
            "availableTimeSlots": [slot.to_dict() for slot in self.slots],
            "example": {"method": "POST", "body": {"hour": now.hour, "minutes": now.minute}},
        }
