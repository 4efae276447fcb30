"""Delivery endpoints: eligible orders, transitions, COD and active slots."""
from typing import Any, Optional

from fastapi import APIRouter, Depends

from freshsip.core.clock import Clock
from freshsip.core.dependencies import (
    get_clock,
    get_delivery_service,
    get_eligibility_service,
    get_lifecycle_service,
    require_delivery,
)
from freshsip.core.security import AuthUser
from freshsip.models.time_slot import TIME_SLOTS
from freshsip.schemas.orders import (
    ConfirmPaymentRequest,
    DeliveryActiveRequest,
    DeliveryOrdersRequest,
    UpdateDeliveryStatusRequest,
)
from freshsip.services.delivery_queue import DeliveryQueueService
from freshsip.services.eligibility import EligibilityService
from freshsip.services.order_lifecycle import OrderLifecycleService, transition_response

router = APIRouter()


@router.post("/orders")
def eligible_orders(
    body: DeliveryOrdersRequest,
    courier: AuthUser = Depends(require_delivery),
    eligibility: EligibilityService = Depends(get_eligibility_service),
) -> Any:
    """
    Orders the caller can deliver now.

    The body carries the courier's wall-clock ``hour`` and ``minutes``; from
    half past the hour the next slot is served.
    """
    result = eligibility.list_eligible_orders(courier.user_id, body.hour, body.minutes)
    return {"success": True, **result}


@router.get("/orders")
def eligibility_info(
    courier: AuthUser = Depends(require_delivery),
    eligibility: EligibilityService = Depends(get_eligibility_service),
) -> Any:
    return eligibility.clock_info()


@router.post("/update-status")
def update_delivery_status(
    body: UpdateDeliveryStatusRequest,
    courier: AuthUser = Depends(require_delivery),
    lifecycle: OrderLifecycleService = Depends(get_lifecycle_service),
) -> Any:
    order = lifecycle.update_delivery_status(
        courier.user_id,
        body.order_id,
        body.status,
        day_id=body.day_id,
        delivery_time=body.delivery_time,
    )
    day = order.find_day(body.day_id) if order.is_freshplan else None
    return {
        "success": True,
        "message": f"Order status updated to {body.status}",
        **transition_response(order, day),
    }


@router.post("/confirm-payment")
def confirm_payment(
    body: ConfirmPaymentRequest,
    courier: AuthUser = Depends(require_delivery),
    lifecycle: OrderLifecycleService = Depends(get_lifecycle_service),
) -> Any:
    order = lifecycle.confirm_cod_payment(courier.user_id, body.order_id, day_id=body.day_id)
    return {
        "success": True,
        "message": "Payment confirmed successfully",
        "orderId": order.id,
        "paymentStatus": order.payment_status,
    }


@router.get("/active")
def get_active_slots(
    courier: AuthUser = Depends(require_delivery),
    delivery: DeliveryQueueService = Depends(get_delivery_service),
) -> Any:
    info = delivery.get_active_info(courier.user_id)
    return {
        "success": True,
        "deliveryActiveInfo": info.to_dict(),
        "availableTimeSlots": [slot.to_dict() for slot in TIME_SLOTS],
    }


@router.post("/active")
def update_active_slots(
    body: DeliveryActiveRequest,
    courier: AuthUser = Depends(require_delivery),
    delivery: DeliveryQueueService = Depends(get_delivery_service),
) -> Any:
    info = delivery.update_active_info(courier.user_id, body.is_active, body.time_slots)
    return {
        "success": True,
        "deliveryActiveInfo": info.to_dict(),
        "availableTimeSlots": [slot.to_dict() for slot in TIME_SLOTS],
    }


@router.get("/picked-orders")
def picked_orders(
    date: Optional[str] = None,
    timeSlot: Optional[str] = None,
    courier: AuthUser = Depends(require_delivery),
    delivery: DeliveryQueueService = Depends(get_delivery_service),
    clock: Clock = Depends(get_clock),
) -> Any:
    """Orders the caller is currently carrying."""
    day = clock.parse_day(date)
    orders = delivery.picked_orders(courier.user_id, day, timeSlot)
    return {"success": True, "date": day.isoformat(), "count": len(orders), "orders": orders}


@router.get("/delivered-orders")
def delivered_orders(
    date: Optional[str] = None,
    timeSlot: Optional[str] = None,
    courier: AuthUser = Depends(require_delivery),
    delivery: DeliveryQueueService = Depends(get_delivery_service),
    clock: Clock = Depends(get_clock),
) -> Any:
    """Orders the caller delivered, or could not deliver, on the date."""
    day = clock.parse_day(date)
    orders = delivery.delivered_orders(courier.user_id, day, timeSlot)
    return {"success": True, "date": day.isoformat(), "count": len(orders), "orders": orders}
