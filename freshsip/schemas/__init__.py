"""
Schemas package.

Pydantic models for request validation:
- base: camelCase base schema
- orders: chef, delivery, plan and cancellation request bodies
"""

from freshsip.schemas.base import BaseSchema
from freshsip.schemas.orders import (
    CancelOrderRequest,
    ConfirmPaymentRequest,
    DeliveryActiveRequest,
    DeliveryOrdersRequest,
    EditDeliverySlotRequest,
    UpdateDeliveryStatusRequest,
    UpdateItemStatusRequest,
)

__all__ = [
    "BaseSchema",
    "CancelOrderRequest",
    "ConfirmPaymentRequest",
    "DeliveryActiveRequest",
    "DeliveryOrdersRequest",
    "EditDeliverySlotRequest",
    "UpdateDeliveryStatusRequest",
    "UpdateItemStatusRequest",
]
