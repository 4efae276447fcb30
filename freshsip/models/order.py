"""Order model for QuickSip and FreshPlan orders stored in MongoDB."""
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, List, Optional, Tuple

from pydantic import BeforeValidator, Field, PrivateAttr, model_validator

from freshsip.models.base import IdStr, MongoModel, same_id
from freshsip.models.time_slot import ASAP, DEFAULT_PLAN_SLOT


class OrderType(str, Enum):
    """Order type enumeration."""
    QUICKSIP = "quicksip"
    FRESHPLAN = "freshplan"


class OrderStatus(str, Enum):
    """Status values as persisted on an order or a plan day."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    RECEIVED = "received"
    DONE = "done"
    OUT_FOR_DELIVERY = "out-for-delivery"
    PICKED = "picked"
    DELIVERED = "delivered"
    NOT_DELIVERED = "not-delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class KitchenStatus(str, Enum):
    """Transitions a chef can request."""
    RECEIVED = "received"
    DONE = "done"


class DeliveryStatus(str, Enum):
    """Transitions a delivery person can request."""
    PICKED = "picked"
    DELIVERED = "delivered"
    NOT_DELIVERED = "not-delivered"


class PaymentStatus(str, Enum):
    """Payment status enumeration."""
    COD = "cod"
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


# Stored value for each delivery transition. "not-delivered" is persisted as
# the generic "cancelled" for compatibility with existing documents; the
# deliveryInfo.notDeliveredTime stamp tells the two outcomes apart.
DELIVERY_STATUS_MAP = {
    DeliveryStatus.PICKED: OrderStatus.OUT_FOR_DELIVERY,
    DeliveryStatus.DELIVERED: OrderStatus.DELIVERED,
    DeliveryStatus.NOT_DELIVERED: OrderStatus.CANCELLED,
}

TERMINAL_STATUSES = frozenset({
    OrderStatus.DELIVERED.value,
    OrderStatus.NOT_DELIVERED.value,
    OrderStatus.CANCELLED.value,
    OrderStatus.REFUNDED.value,
})

# Older documents carry padded values such as "not-delivered "
StoredStatus = Annotated[OrderStatus, BeforeValidator(lambda v: v.strip() if isinstance(v, str) else v)]


class Customization(MongoModel):
    size: Optional[str] = None
    quantity: Optional[str] = None
    ice: Optional[str] = None
    sugar: Optional[str] = None
    dilution: Optional[str] = None
    fibre: Optional[bool] = None
    final_price: float = 0.0


class OrderItem(MongoModel):
    """A product line on a QuickSip order or a plan day."""
    id: Optional[IdStr] = Field(None, alias="_id")
    product: Any = None
    quantity: int = 1
    price: float = 0.0
    customization: Optional[Customization] = None
    time_slot: Optional[str] = None

    @property
    def line_total(self) -> float:
        final_price = self.customization.final_price if self.customization else 0.0
        return (final_price or 0.0) * (self.quantity or 1)


class StatusInfo(MongoModel):
    chef_id: Any = None
    received_time: Optional[datetime] = None
    done_time: Optional[datetime] = None


class DeliveryInfo(MongoModel):
    delivery_person_id: Any = None
    picked_time: Optional[datetime] = None
    delivered_time: Optional[datetime] = None
    not_delivered_time: Optional[datetime] = None
    not_delivered_reason: Optional[str] = None


class CancellationDetails(MongoModel):
    cancelled_by: Optional[str] = None
    cancelled_by_id: Any = None
    cancelled_at: Optional[datetime] = None
    reason: Optional[str] = None


class CustomerDetails(MongoModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    additional_address_info: Optional[str] = None


class Fulfillment(MongoModel):
    """
    Status-bearing part of an order.

    A QuickSip order is fulfilled as a whole; a FreshPlan order is fulfilled
    one Day at a time. Both carry the same status, kitchen stamp, delivery
    stamp and cancellation details.
    """
    status: StoredStatus = OrderStatus.PENDING
    status_info: Optional[StatusInfo] = None
    delivery_info: Optional[DeliveryInfo] = None
    cancellation_details: Optional[CancellationDetails] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_out_for_delivery(self) -> bool:
        return self.status in (OrderStatus.OUT_FOR_DELIVERY.value, OrderStatus.PICKED.value)

    @property
    def was_not_delivered(self) -> bool:
        """True for the not-delivered outcome, stored either way."""
        if self.status == OrderStatus.NOT_DELIVERED.value:
            return True
        return (
            self.status == OrderStatus.CANCELLED.value
            and self.delivery_info is not None
            and self.delivery_info.not_delivered_time is not None
        )

    def handled_by_chef(self, chef_id: str) -> bool:
        return self.status_info is not None and same_id(self.status_info.chef_id, chef_id)

    def handled_by_courier(self, delivery_person_id: str) -> bool:
        return self.delivery_info is not None and same_id(self.delivery_info.delivery_person_id, delivery_person_id)

    def apply_kitchen_status(self, status: KitchenStatus, chef_id: Any, at: datetime) -> None:
        if status == KitchenStatus.RECEIVED:
            self.status_info = StatusInfo(chef_id=chef_id, received_time=at)
        else:
            previous = self.status_info or StatusInfo()
            self.status_info = StatusInfo(
                chef_id=previous.chef_id if previous.chef_id is not None else chef_id,
                received_time=previous.received_time,
                done_time=at,
            )
        self.status = OrderStatus(status.value)

    def apply_delivery_status(self, status: DeliveryStatus, delivery_person_id: Any, at: datetime, reason: str) -> None:
        info = (self.delivery_info or DeliveryInfo()).model_dump()
        info["delivery_person_id"] = delivery_person_id
        if status == DeliveryStatus.PICKED:
            info["picked_time"] = at
        elif status == DeliveryStatus.DELIVERED:
            info["delivered_time"] = at
        else:
            info["not_delivered_time"] = at
            info["not_delivered_reason"] = reason
        self.delivery_info = DeliveryInfo(**info)
        self.status = DELIVERY_STATUS_MAP[status]

    def cancel(self, details: CancellationDetails) -> None:
        self.status = OrderStatus.CANCELLED
        self.cancellation_details = details


class Day(Fulfillment):
    """One delivery date of a FreshPlan order."""
    id: IdStr = Field(alias="_id")
    date: Optional[datetime] = None
    items: List[OrderItem] = Field(default_factory=list)
    time_slot: Optional[str] = None

    _order_id: Optional[str] = PrivateAttr(default=None)

    @property
    def order_id(self) -> Optional[str]:
        return self._order_id

    @property
    def resolved_time_slot(self) -> str:
        """Day-level slot, else the first item's, else the first morning slot."""
        if self.time_slot:
            return self.time_slot
        if self.items and self.items[0].time_slot:
            return self.items[0].time_slot
        return DEFAULT_PLAN_SLOT

    @property
    def total(self) -> float:
        return sum(item.line_total for item in self.items)

    def assign_time_slot(self, time_slot: str) -> None:
        """Move the whole day, and every item on it, to ``time_slot``."""
        self.time_slot = time_slot
        for item in self.items:
            item.time_slot = time_slot


class PlanRelated(MongoModel):
    plan_day_id: Any = None
    is_complete_plan_checkout: bool = False
    day_schedule: List[Day] = Field(default_factory=list)


class Order(Fulfillment):
    """Customer order. QuickSip orders use the top-level status fields."""
    id: IdStr = Field(alias="_id")
    user: Any = None
    order_type: str = OrderType.QUICKSIP.value
    products: List[OrderItem] = Field(default_factory=list)
    total_amount: float = 0.0
    delivery_charge: float = 0.0
    delivery_time_slot: Optional[str] = None
    scheduled_delivery_date: Optional[datetime] = None
    customer_details: Optional[CustomerDetails] = None
    payment_status: Optional[PaymentStatus] = None
    plan_related: Optional[PlanRelated] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int = 0

    @model_validator(mode="after")
    def _link_days(self):
        for day in self.days:
            day._order_id = self.id
        return self

    @property
    def order_number(self) -> str:
        return self.id[-6:].upper()

    @property
    def is_quicksip(self) -> bool:
        return self.order_type == OrderType.QUICKSIP.value

    @property
    def is_freshplan(self) -> bool:
        return self.order_type == OrderType.FRESHPLAN.value

    @property
    def days(self) -> Tuple[Day, ...]:
        if self.plan_related is None:
            return ()
        return tuple(self.plan_related.day_schedule)

    @property
    def is_complete_plan_checkout(self) -> bool:
        return self.plan_related is not None and self.plan_related.is_complete_plan_checkout

    @property
    def quicksip_time_slot(self) -> str:
        return self.delivery_time_slot or ASAP

    @property
    def fulfillment_date(self) -> Optional[datetime]:
        """Date a QuickSip order is prepared for."""
        return self.scheduled_delivery_date or self.created_at

    def owned_by(self, user_id: str) -> bool:
        owner = self.user.get("_id") if isinstance(self.user, dict) else self.user
        return same_id(owner, user_id)

    def find_day(self, day_id: Optional[str]) -> Optional[Day]:
        if not day_id:
            return None
        for day in self.days:
            if same_id(day.id, day_id):
                return day
        return None

    def first_day(self) -> Optional[Day]:
        """Earliest day of the plan by date; undated days sort last."""
        dated = [day for day in self.days if day.date is not None]
        if dated:
            return min(dated, key=lambda day: day.date)
        return self.days[0] if self.days else None
