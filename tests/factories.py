"""Builders for stored order and user documents, shaped like MongoDB returns them."""
import copy
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytz
from bson import ObjectId

from freshsip.core.clock import Clock
from freshsip.core.exceptions import ConcurrentUpdateError
from freshsip.models.order import Order
from freshsip.models.user import DeliveryActiveInfo, User
from freshsip.repositories.order_repository import OrderRepository, restore_object_ids
from freshsip.repositories.user_repository import UserRepository

TIMEZONE = "Asia/Kolkata"

# 2025-06-10 17:35 in the business zone
NOW = pytz.timezone(TIMEZONE).localize(datetime(2025, 6, 10, 17, 35))

# Naive UTC values, as pymongo returns them with tz_aware=False
TODAY = datetime(2025, 6, 10, 6, 0)
TODAY_LATER = datetime(2025, 6, 10, 9, 0)
YESTERDAY = datetime(2025, 6, 9, 6, 0)
TOMORROW = datetime(2025, 6, 11, 6, 0)


class FixedClock(Clock):

    def __init__(self, now: datetime = NOW, tz_name: str = TIMEZONE):
        super().__init__(tz_name)
        self._now = now

    def now(self) -> datetime:
        return self._now


def item_doc(final_price: float = 60.0, quantity: int = 1, time_slot: Optional[str] = None) -> Dict[str, Any]:
    doc = {
        "_id": ObjectId(),
        "product": ObjectId(),
        "quantity": quantity,
        "price": final_price,
        "customization": {"size": "M", "finalPrice": final_price},
    }
    if time_slot:
        doc["timeSlot"] = time_slot
    return doc


def quicksip_doc(
    status: str = "pending",
    time_slot: Optional[str] = "6-7 PM",
    created_at: datetime = TODAY,
    payment_status: str = "cod",
    items: Optional[List[Dict[str, Any]]] = None,
    **extra,
) -> Dict[str, Any]:
    doc = {
        "_id": ObjectId(),
        "user": ObjectId(),
        "orderType": "quicksip",
        "products": items if items is not None else [item_doc()],
        "totalAmount": 120.0,
        "deliveryCharge": 20.0,
        "status": status,
        "paymentStatus": payment_status,
        "customerDetails": {
            "name": "Asha",
            "phone": "9000000001",
            "address": "12 MG Road",
            "additionalAddressInfo": "Gate 2",
        },
        "createdAt": created_at,
        "updatedAt": created_at,
    }
    if time_slot:
        doc["deliveryTimeSlot"] = time_slot
    doc.update(extra)
    return doc


def day_doc(
    date: datetime = TODAY,
    status: str = "pending",
    time_slot: Optional[str] = None,
    items: Optional[List[Dict[str, Any]]] = None,
    **extra,
) -> Dict[str, Any]:
    doc = {
        "_id": ObjectId(),
        "date": date,
        "items": items if items is not None else [item_doc(time_slot="7-8 AM")],
        "status": status,
    }
    if time_slot:
        doc["timeSlot"] = time_slot
    doc.update(extra)
    return doc


def freshplan_doc(
    days: List[Dict[str, Any]],
    complete: bool = True,
    payment_status: str = "cod",
    created_at: datetime = YESTERDAY,
    **extra,
) -> Dict[str, Any]:
    doc = {
        "_id": ObjectId(),
        "user": ObjectId(),
        "orderType": "freshplan",
        "products": [],
        "totalAmount": 900.0,
        "deliveryCharge": 30.0,
        "status": "pending",
        "paymentStatus": payment_status,
        "customerDetails": {"name": "Ravi", "phone": "9000000002", "address": "4 Park St"},
        "planRelated": {
            "isCompletePlanCheckout": complete,
            "daySchedule": days,
        },
        "createdAt": created_at,
        "updatedAt": created_at,
    }
    doc.update(extra)
    return doc


def user_doc(role: str = "delivery", time_slots: Optional[List[str]] = None, **extra) -> Dict[str, Any]:
    doc = {
        "_id": ObjectId(),
        "username": f"{role}-user",
        "email": f"{role}@example.com",
        "role": role,
        "password": "hashed",
    }
    if time_slots is not None:
        doc["deliveryActiveInfo"] = {"isActive": True, "timeSlots": time_slots}
    doc.update(extra)
    return doc


class InMemoryOrderRepository(OrderRepository):
    """Stores documents the way the Mongo repository writes them."""

    def __init__(self, documents: Optional[List[Dict[str, Any]]] = None):
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.saves = 0
        for document in documents or []:
            self.add(document)

    def add(self, document: Dict[str, Any]) -> str:
        order_id = str(document["_id"])
        self.documents[order_id] = copy.deepcopy(document)
        return order_id

    def raw(self, order_id: Any) -> Dict[str, Any]:
        return self.documents[str(order_id)]

    def get(self, order_id: str) -> Optional[Order]:
        document = self.documents.get(str(order_id))
        return Order.from_dict(copy.deepcopy(document)) if document else None

    def find_touching(self, start: datetime, end: datetime) -> List[Order]:
        return [Order.from_dict(copy.deepcopy(document)) for document in self.documents.values()]

    def save(self, order: Order) -> Order:
        stored = self.documents.get(order.id)
        if stored is None or stored.get("version", 0) != order.version:
            raise ConcurrentUpdateError("Order was modified by another request. Reload and try again.")
        document = restore_object_ids(order.to_dict())
        document["version"] = order.version + 1
        self.documents[order.id] = copy.deepcopy(document)
        self.saves += 1
        order.version += 1
        return order


class InMemoryUserRepository(UserRepository):

    def __init__(self, documents: Optional[List[Dict[str, Any]]] = None):
        self.documents = {str(document["_id"]): copy.deepcopy(document) for document in documents or []}

    def get(self, user_id: str) -> Optional[User]:
        document = self.documents.get(str(user_id))
        return User.from_dict(copy.deepcopy(document)) if document else None

    def update_delivery_active_info(self, user_id: str, info: DeliveryActiveInfo) -> Optional[User]:
        document = self.documents.get(str(user_id))
        if document is None:
            return None
        document["deliveryActiveInfo"] = info.to_dict()
        return User.from_dict(copy.deepcopy(document))

    def add(self, document: Dict[str, Any]) -> str:
        user_id = str(document["_id"])
        self.documents[user_id] = copy.deepcopy(document)
        return user_id
