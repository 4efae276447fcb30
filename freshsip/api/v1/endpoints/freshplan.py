"""FreshPlan customer endpoints."""
from typing import Any

from fastapi import APIRouter, Depends

from freshsip.core.dependencies import get_current_user, get_lifecycle_service
from freshsip.core.security import AuthUser
from freshsip.schemas.orders import EditDeliverySlotRequest
from freshsip.services.order_lifecycle import OrderLifecycleService, transition_response

router = APIRouter()


@router.put("/edit-delivery")
def edit_delivery_slot(
    body: EditDeliverySlotRequest,
    user: AuthUser = Depends(get_current_user),
    lifecycle: OrderLifecycleService = Depends(get_lifecycle_service),
) -> Any:
    """Move one day of the caller's plan to another delivery slot."""
    order, day = lifecycle.update_day_time_slot(user.user_id, body.order_id, body.day_id, body.time_slot)
    return {
        "success": True,
        "message": "Delivery time updated successfully",
        "timeSlot": day.resolved_time_slot,
        **transition_response(order, day),
    }
