"""Chef dashboard listings: one row per product line to prepare."""
from datetime import date
from typing import Any, Dict, Iterator, List, Optional, Tuple

from freshsip.core.clock import Clock
from freshsip.core.logging import get_service_logger
from freshsip.models.base import stringify_ids
from freshsip.models.order import Day, Fulfillment, Order, OrderItem, OrderStatus
from freshsip.models.time_slot import ASAP, TIME_SLOTS, kitchen_slot_order, sort_by_slot
from freshsip.repositories.order_repository import OrderRepository

logger = get_service_logger("kitchen_queue")

KITCHEN_STATUSES = (
    OrderStatus.PENDING.value,
    OrderStatus.RECEIVED.value,
    OrderStatus.DONE.value,
)

NOT_PRODUCED = frozenset({OrderStatus.CANCELLED.value, OrderStatus.REFUNDED.value})


def kitchen_slot(item: OrderItem, day: Optional[Day] = None, order: Optional[Order] = None) -> str:
    """
    Slot a kitchen row is filed under.

    Plan days use the same slot delivery sees for the day. QuickSip rows take
    the item slot, else the order slot, else ASAP.
    """
    if day is not None:
        return day.resolved_time_slot
    if item.time_slot:
        return item.time_slot
    if order is not None and order.delivery_time_slot:
        return order.delivery_time_slot
    return ASAP


class KitchenQueueService:
    """Builds the pending / received / done queues for a calendar date."""

    def __init__(self, orders: OrderRepository, clock: Clock, slots=TIME_SLOTS):
        self.orders = orders
        self.clock = clock
        self.slot_order = kitchen_slot_order(slots)

    def _units(self, day: date) -> Iterator[Tuple[Order, Optional[Day], Fulfillment]]:
        """
        Every kitchen unit of work falling on ``day``: QuickSip orders whose
        fulfillment date is that day, and FreshPlan days dated that day.
        """
        bounds = self.clock.day_bounds(day)
        for order in self.orders.find_touching(*bounds):
            if order.is_quicksip:
                if self.clock.is_within(order.fulfillment_date, bounds):
                    yield order, None, order
            elif order.is_freshplan:
                for plan_day in order.days:
                    if self.clock.is_within(plan_day.date, bounds):
                        yield order, plan_day, plan_day

    def _visible(self, unit: Fulfillment, status: str, chef_id: str) -> bool:
        if unit.status != status:
            return False
        # Anyone may pick up pending work; received/done belong to one chef
        if status == OrderStatus.PENDING.value:
            return True
        return unit.handled_by_chef(chef_id)

    def _rows(self, order: Order, day: Optional[Day]) -> List[Dict[str, Any]]:
        if day is None:
            items = order.products
            unit: Fulfillment = order
            delivery_date = order.fulfillment_date
            prefix = order.id
        else:
            items = day.items
            unit = day
            delivery_date = day.date
            prefix = f"{order.id}-{day.id}"

        rows = []
        for index, item in enumerate(items):
            row = {
                "_id": f"{prefix}-{item.id or index}",
                "product": stringify_ids(item.product),
                "customization": item.customization.to_dict() if item.customization else None,
                "quantity": item.quantity,
                "timeSlot": kitchen_slot(item, day, order),
                "status": unit.status,
                "orderNumber": order.order_number,
                "orderType": order.order_type,
                "deliveryDate": delivery_date,
                "orderId": order.id,
                "statusInfo": stringify_ids(unit.status_info.to_dict()) if unit.status_info else None,
            }
            if day is not None:
                row["dayId"] = day.id
            rows.append(row)
        return rows

    def list_items(self, status: str, chef_id: str, day: Optional[date] = None) -> List[Dict[str, Any]]:
        """
        Product rows in ``status`` for a date, in kitchen priority order.

        Args:
            status: One of pending, received, done
            chef_id: Caller; received/done rows are limited to their own work
            day: Calendar date in the business zone, today when omitted
        """
        if status not in KITCHEN_STATUSES:
            raise ValueError(f"Not a kitchen queue status: {status}")

        rows: List[Dict[str, Any]] = []
        for order, plan_day, unit in self._units(day or self.clock.now().date()):
            if self._visible(unit, status, chef_id):
                rows.extend(self._rows(order, plan_day))

        logger.debug(f"Kitchen queue {status}: {len(rows)} items", extra={"user_id": chef_id, "status": status})
        return sort_by_slot(rows, self.slot_order)

    def pending_items(self, chef_id: str, day: Optional[date] = None) -> List[Dict[str, Any]]:
        return self.list_items(OrderStatus.PENDING.value, chef_id, day)

    def received_items(self, chef_id: str, day: Optional[date] = None) -> List[Dict[str, Any]]:
        return self.list_items(OrderStatus.RECEIVED.value, chef_id, day)

    def done_items(self, chef_id: str, day: Optional[date] = None) -> List[Dict[str, Any]]:
        return self.list_items(OrderStatus.DONE.value, chef_id, day)

    def chef_stats(self, chef_id: str, day: Optional[date] = None) -> Dict[str, int]:
        """Counts of orders and plan days on the chef's board for a date."""
        stats = {"totalOrders": 0, "pendingOrders": 0, "receivedOrders": 0, "doneOrders": 0}
        counters = {
            OrderStatus.PENDING.value: "pendingOrders",
            OrderStatus.RECEIVED.value: "receivedOrders",
            OrderStatus.DONE.value: "doneOrders",
        }
        for _order, _day, unit in self._units(day or self.clock.now().date()):
            if unit.status in counters and self._visible(unit, unit.status, chef_id):
                stats[counters[unit.status]] += 1
                stats["totalOrders"] += 1
        return stats

    def production_items(self, day: Optional[date] = None) -> List[Dict[str, Any]]:
        """
        Everything the kitchen must produce on a date, whatever its status.

        Cancelled or refunded orders and plan days are left out. Rows are not
        limited to one chef.
        """
        rows: List[Dict[str, Any]] = []
        for order, plan_day, unit in self._units(day or self.clock.now().date()):
            if order.status in NOT_PRODUCED or unit.status in NOT_PRODUCED:
                continue
            rows.extend(self._rows(order, plan_day))
        return sort_by_slot(rows, self.slot_order)
