"""Request schemas for the chef, delivery and order endpoints."""
from datetime import datetime
from typing import List, Optional

from pydantic import Field, model_validator

from freshsip.schemas.base import BaseSchema
from freshsip.services.order_lifecycle import split_legacy_item_id


class UpdateItemStatusRequest(BaseSchema):
    """
    Kitchen transition. Either ``orderId`` (+ ``dayId`` for plans) or the
    legacy composite ``itemId`` must be sent.
    """
    order_id: Optional[str] = None
    day_id: Optional[str] = None
    item_id: Optional[str] = None
    status: str
    chef_time: Optional[datetime] = None

    @model_validator(mode="after")
    def fill_ids_from_item_id(self):
        if not self.order_id and self.item_id:
            self.order_id, legacy_day_id = split_legacy_item_id(self.item_id)
            self.day_id = self.day_id or legacy_day_id
        if not self.order_id:
            raise ValueError("Order ID and status are required")
        return self


class UpdateDeliveryStatusRequest(BaseSchema):
    order_id: str
    day_id: Optional[str] = None
    status: str
    delivery_time: Optional[datetime] = None


class ConfirmPaymentRequest(BaseSchema):
    order_id: str
    day_id: Optional[str] = None


class DeliveryOrdersRequest(BaseSchema):
    """Wall-clock time of the delivery person; server time when omitted."""
    hour: Optional[int] = Field(None, ge=0, le=23)
    minutes: Optional[int] = Field(None, ge=0, le=59)


class DeliveryActiveRequest(BaseSchema):
    is_active: bool = True
    time_slots: List[str]


class CancelOrderRequest(BaseSchema):
    order_id: str
    day_id: Optional[str] = None
    reason: Optional[str] = None
    cancelled_by: Optional[str] = None


class EditDeliverySlotRequest(BaseSchema):
    """Customer moving one plan day to another slot."""
    order_id: str
    day_id: str
    time_slot: str
