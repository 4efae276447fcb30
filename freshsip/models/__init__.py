"""
Database models package.

This file makes it easy to import all models at once.
"""

from .base import MongoModel
from .order import (
    CancellationDetails,
    Customization,
    CustomerDetails,
    Day,
    DeliveryInfo,
    DeliveryStatus,
    KitchenStatus,
    Order,
    OrderItem,
    OrderStatus,
    OrderType,
    PaymentStatus,
    PlanRelated,
    StatusInfo,
)
from .time_slot import ASAP, TIME_SLOTS, TimeSlot
from .user import DeliveryActiveInfo, User, UserRole

__all__ = [
    "MongoModel",
    "CancellationDetails",
    "Customization",
    "CustomerDetails",
    "Day",
    "DeliveryInfo",
    "DeliveryStatus",
    "KitchenStatus",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderType",
    "PaymentStatus",
    "PlanRelated",
    "StatusInfo",
    "ASAP",
    "TIME_SLOTS",
    "TimeSlot",
    "DeliveryActiveInfo",
    "User",
    "UserRole",
]
