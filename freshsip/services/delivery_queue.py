"""Delivery person's slot registration and their own delivery history."""
from datetime import date
from typing import Any, Dict, List, Optional

from freshsip.core.clock import Clock
from freshsip.core.exceptions import InvalidInputError, NotFoundError
from freshsip.core.logging import get_service_logger
from freshsip.models.order import Fulfillment, OrderStatus
from freshsip.models.time_slot import TIME_SLOTS, slot_labels, sort_by_slot
from freshsip.models.user import DeliveryActiveInfo
from freshsip.repositories.order_repository import OrderRepository
from freshsip.repositories.user_repository import UserRepository
from freshsip.services.projections import day_row, quicksip_row, with_delivery_times

logger = get_service_logger("delivery_queue")


def _is_picked(unit: Fulfillment) -> bool:
    return unit.is_out_for_delivery


def _is_finished(unit: Fulfillment) -> bool:
    return unit.status == OrderStatus.DELIVERED.value or unit.was_not_delivered


class DeliveryQueueService:
    """Delivery worker slot registration and their picked / delivered history."""

    def __init__(self, orders: OrderRepository, users: UserRepository, clock: Clock, slots=TIME_SLOTS):
        self.orders = orders
        self.users = users
        self.clock = clock
        self.slots = slots

    def get_active_info(self, user_id: str) -> DeliveryActiveInfo:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        return user.delivery_active_info or DeliveryActiveInfo()

    def update_active_info(self, user_id: str, is_active: bool, time_slots: List[str]) -> DeliveryActiveInfo:
        """
        Register the slots a worker is serving.

        Raises:
            InvalidInputError: A label is not a configured slot
            NotFoundError: The worker does not exist
        """
        valid = slot_labels(self.slots)
        invalid = [slot for slot in time_slots if slot not in valid]
        if invalid:
            raise InvalidInputError(
                f"Invalid time slots: {', '.join(invalid)}",
                extra={"validTimeSlots": valid},
            )

        info = DeliveryActiveInfo(is_active=is_active, time_slots=time_slots, last_updated=self.clock.now())
        user = self.users.update_delivery_active_info(user_id, info)
        if user is None:
            raise NotFoundError("User not found.")

        logger.info(
            f"Delivery active slots set to {time_slots or 'none'}",
            extra={"user_id": user_id, "role": user.role},
        )
        return user.delivery_active_info or info

    def _history(
        self,
        delivery_person_id: str,
        matches,
        day: Optional[date],
        time_slot: Optional[str],
    ) -> List[Dict[str, Any]]:
        bounds = self.clock.day_bounds(day or self.clock.now().date())
        rows: List[Dict[str, Any]] = []

        for order in self.orders.find_touching(*bounds):
            if order.is_quicksip:
                if self._owned(order, delivery_person_id, matches) and self.clock.is_within(order.created_at, bounds):
                    row = quicksip_row(order, slot_key="timeSlot")
                    row["deliveryDate"] = order.created_at
                    rows.append(with_delivery_times(row, order.delivery_info))
            elif order.is_freshplan:
                for plan_day in order.days:
                    if self._owned(plan_day, delivery_person_id, matches) and self.clock.is_within(plan_day.date, bounds):
                        row = day_row(order, plan_day, slot_key="timeSlot")
                        row["deliveryDate"] = plan_day.date
                        rows.append(with_delivery_times(row, plan_day.delivery_info))

        if time_slot:
            rows = [row for row in rows if row["timeSlot"] == time_slot]
        return sort_by_slot(rows, slot_labels(self.slots))

    @staticmethod
    def _owned(unit: Fulfillment, delivery_person_id: str, matches) -> bool:
        return matches(unit) and unit.handled_by_courier(delivery_person_id)

    def picked_orders(
        self,
        delivery_person_id: str,
        day: Optional[date] = None,
        time_slot: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Orders and plan days this worker picked up and has not finished."""
        return self._history(delivery_person_id, _is_picked, day, time_slot)

    def delivered_orders(
        self,
        delivery_person_id: str,
        day: Optional[date] = None,
        time_slot: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Orders and plan days this worker delivered or could not deliver."""
        return self._history(delivery_person_id, _is_finished, day, time_slot)
