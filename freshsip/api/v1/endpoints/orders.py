"""Order management endpoints."""
from typing import Any

from fastapi import APIRouter, Depends

from freshsip.core.dependencies import get_current_user, get_lifecycle_service
from freshsip.core.security import AuthUser
from freshsip.schemas.orders import CancelOrderRequest
from freshsip.services.order_lifecycle import OrderLifecycleService, transition_response

router = APIRouter()


@router.post("/cancel")
def cancel_order(
    body: CancelOrderRequest,
    user: AuthUser = Depends(get_current_user),
    lifecycle: OrderLifecycleService = Depends(get_lifecycle_service),
) -> Any:
    """
    Cancel an order, or one day of a FreshPlan when ``dayId`` is sent.

    Staff only; customers cancel through support.
    """
    order, day = lifecycle.cancel_order(
        user.user_id,
        body.order_id,
        reason=body.reason,
        cancelled_by=body.cancelled_by,
        day_id=body.day_id,
    )
    message = "Day cancelled successfully" if day is not None else "Order cancelled successfully"
    return {"success": True, "message": message, **transition_response(order, day)}
