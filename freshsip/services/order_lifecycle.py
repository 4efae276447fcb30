"""Order status transitions for the kitchen and the delivery team."""
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from freshsip.config.settings import Settings
from freshsip.core.clock import Clock
from freshsip.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from freshsip.core.logging import get_service_logger
from freshsip.models.base import to_object_id
from freshsip.models.order import (
    CancellationDetails,
    Day,
    DeliveryStatus,
    Fulfillment,
    KitchenStatus,
    Order,
    OrderStatus,
    PaymentStatus,
)
from freshsip.models.time_slot import slot_labels
from freshsip.models.user import UserRole
from freshsip.repositories.order_repository import OrderRepository
from freshsip.repositories.user_repository import UserRepository

logger = get_service_logger("order_lifecycle")


def split_legacy_item_id(item_id: str) -> Tuple[str, Optional[str]]:
    """
    Split a composite ``<orderId>-<dayId>-<itemId>`` kitchen id.

    Older chef dashboards post a single ``itemId``; QuickSip rows only carry the
    order id before the first dash.
    """
    parts = item_id.split("-")
    order_id = parts[0]
    day_id = parts[1] if len(parts) > 1 and parts[1] else None
    return order_id, day_id


class OrderLifecycleService:
    """Owns every status change on QuickSip orders and FreshPlan days."""

    def __init__(self, orders: OrderRepository, users: UserRepository, clock: Clock, settings: Settings):
        self.orders = orders
        self.users = users
        self.clock = clock
        self.settings = settings

    def _load(self, order_id: str) -> Order:
        order = self.orders.get(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        return order

    def _resolve_target(self, order: Order, day_id: Optional[str]) -> Optional[Fulfillment]:
        """
        Pick what a status change applies to: the order itself for QuickSip,
        one Day for FreshPlan. Returns None for an unrecognised order type.
        """
        if order.is_quicksip:
            return order
        if order.is_freshplan:
            if not day_id:
                raise InvalidInputError("Day ID is required for FreshPlan orders")
            day = order.find_day(day_id)
            if day is None:
                raise NotFoundError("Day not found in order")
            return day
        return None

    def _event_time(self, supplied: Optional[datetime]) -> datetime:
        return self.clock.localize(supplied) if supplied else self.clock.now()

    def update_item_status(
        self,
        chef_id: str,
        order_id: str,
        status: str,
        day_id: Optional[str] = None,
        chef_time: Optional[datetime] = None,
    ) -> Order:
        """
        Record a kitchen transition (``received`` or ``done``).

        Args:
            chef_id: Acting chef, stamped into ``statusInfo.chefId``
            order_id: Order to update
            status: Requested kitchen status
            day_id: Plan day, required for FreshPlan orders
            chef_time: Client-side timestamp; server time when omitted

        Returns:
            The saved order

        Raises:
            InvalidInputError: Unknown status or missing day id
            NotFoundError: Order or day does not exist
        """
        try:
            kitchen_status = KitchenStatus(status)
        except ValueError:
            raise InvalidInputError("Invalid status. Must be received or done")

        order = self._load(order_id)
        target = self._resolve_target(order, day_id)
        if target is None:
            logger.warning(
                f"Order {order.id} has unknown type {order.order_type!r}; kitchen status not applied",
                extra={"order_id": order.id, "status": kitchen_status.value},
            )
            return order

        target.apply_kitchen_status(kitchen_status, to_object_id(chef_id), self._event_time(chef_time))
        order = self.orders.save(order)

        logger.info(
            f"Kitchen status {kitchen_status.value} recorded on order {order.order_number}",
            extra={"order_id": order.id, "day_id": day_id, "user_id": chef_id, "status": kitchen_status.value},
        )
        return order

    def update_delivery_status(
        self,
        delivery_person_id: str,
        order_id: str,
        status: str,
        day_id: Optional[str] = None,
        delivery_time: Optional[datetime] = None,
    ) -> Order:
        """
        Record a delivery transition (``picked``, ``delivered`` or
        ``not-delivered``) on the order or on one plan day.
        """
        try:
            delivery_status = DeliveryStatus(status)
        except ValueError:
            raise InvalidInputError("Invalid status. Must be picked, delivered, or not-delivered")

        order = self._load(order_id)
        target = self._resolve_target(order, day_id)
        if target is None:
            logger.warning(
                f"Order {order.id} has unknown type {order.order_type!r}; delivery status not applied",
                extra={"order_id": order.id, "status": delivery_status.value},
            )
            return order

        target.apply_delivery_status(
            delivery_status,
            to_object_id(delivery_person_id),
            self._event_time(delivery_time),
            self.settings.NOT_DELIVERED_REASON,
        )
        order = self.orders.save(order)

        logger.info(
            f"Delivery status {delivery_status.value} recorded on order {order.order_number}",
            extra={
                "order_id": order.id,
                "day_id": day_id,
                "user_id": delivery_person_id,
                "status": delivery_status.value,
            },
        )
        return order

    def confirm_cod_payment(self, delivery_person_id: str, order_id: str, day_id: Optional[str] = None) -> Order:
        """
        Mark cash-on-delivery money as collected.

        A complete-plan FreshPlan is paid once, on its first delivery day, and
        only after that day was delivered. Everything else needs the order
        itself to be delivered.
        """
        order = self._load(order_id)

        if order.payment_status == PaymentStatus.COMPLETED.value:
            raise ConflictError("Payment already completed")
        if order.payment_status != PaymentStatus.COD.value:
            raise ConflictError("This order is not a COD order")

        if order.is_freshplan and order.is_complete_plan_checkout and day_id:
            day = order.find_day(day_id)
            if day is None:
                raise NotFoundError("Day schedule not found")
            if day.status != OrderStatus.DELIVERED.value:
                raise ConflictError("Order must be delivered before confirming payment")
            first = order.first_day()
            if first is None or first.id != day.id:
                raise ConflictError("Payment can only be collected on the first delivery day")
        elif order.status != OrderStatus.DELIVERED.value:
            raise ConflictError("Order must be delivered before confirming payment")

        order.payment_status = PaymentStatus.COMPLETED
        order = self.orders.save(order)

        logger.info(
            f"COD payment confirmed for order {order.order_number}",
            extra={"order_id": order.id, "day_id": day_id, "user_id": delivery_person_id},
        )
        return order

    def cancel_order(
        self,
        user_id: str,
        order_id: str,
        reason: Optional[str] = None,
        cancelled_by: Optional[str] = None,
        day_id: Optional[str] = None,
    ) -> Tuple[Order, Optional[Day]]:
        """
        Cancel a whole order, or a single FreshPlan day when ``day_id`` is given.

        Cancelling a day leaves the order and its other days untouched.

        Returns:
            The saved order and the cancelled day (None for order-level)
        """
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.role == UserRole.CUSTOMER.value:
            raise ForbiddenError("Unauthorized: Only chefs and admins can cancel orders")

        order = self._load(order_id)
        if order.status == OrderStatus.CANCELLED.value:
            raise ConflictError("Order is already cancelled")

        details = CancellationDetails(
            cancelled_by=cancelled_by or user.role,
            cancelled_by_id=to_object_id(user.id),
            cancelled_at=self.clock.now(),
            reason=reason,
        )

        day = None
        if day_id and order.is_freshplan:
            day = order.find_day(day_id)
            if day is None:
                raise NotFoundError("Day not found in order")
            if day.status == OrderStatus.CANCELLED.value:
                raise ConflictError("This day is already cancelled")
            if day.status == OrderStatus.DELIVERED.value:
                raise ConflictError("Delivered days cannot be cancelled")
            day.cancel(details)
        else:
            if order.status == OrderStatus.DELIVERED.value:
                raise ConflictError("Delivered orders cannot be cancelled")
            order.cancel(details)

        order = self.orders.save(order)

        logger.info(
            f"Order {order.order_number} cancelled by {details.cancelled_by}",
            extra={"order_id": order.id, "day_id": day_id, "user_id": user_id, "role": user.role},
        )
        return order, day

    def update_day_time_slot(self, user_id: str, order_id: str, day_id: str, time_slot: str) -> Tuple[Order, Day]:
        """
        Move one FreshPlan day to another delivery slot on behalf of its owner.

        Every item of the day takes the new slot, so the kitchen board and the
        delivery eligibility both pick it up.

        Raises:
            InvalidInputError: ``time_slot`` is not a configured slot
            NotFoundError: Order missing, not the caller's, not a plan, already
                finished, or the day does not exist
        """
        valid = slot_labels()
        if time_slot not in valid:
            raise InvalidInputError(f"Invalid time slot: {time_slot}", extra={"validTimeSlots": valid})

        order = self.orders.get(order_id)
        if order is None or not order.is_freshplan or not order.owned_by(user_id) or order.is_terminal:
            raise NotFoundError("Order not found or cannot be modified")

        day = order.find_day(day_id)
        if day is None:
            raise NotFoundError("Day schedule not found")

        previous = day.resolved_time_slot
        day.assign_time_slot(time_slot)
        order = self.orders.save(order)

        logger.info(
            f"Plan day moved from {previous} to {time_slot} on order {order.order_number}",
            extra={"order_id": order.id, "day_id": day_id, "user_id": user_id},
        )
        return order, order.find_day(day_id)


def transition_response(order: Order, day: Optional[Day] = None) -> Dict[str, Any]:
    """Short summary of the saved state returned to clients."""
    target = day if day is not None else order
    body = {
        "orderId": order.id,
        "orderNumber": order.order_number,
        "status": target.status,
    }
    if day is not None:
        body["dayId"] = day.id
    return body
