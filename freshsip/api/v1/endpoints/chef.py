"""Kitchen endpoints for chefs."""
from datetime import timedelta
from typing import Any, Optional

from fastapi import APIRouter, Depends

from freshsip.core.clock import Clock
from freshsip.core.dependencies import get_clock, get_kitchen_service, get_lifecycle_service, require_chef
from freshsip.core.security import AuthUser
from freshsip.schemas.orders import UpdateItemStatusRequest
from freshsip.services.kitchen_queue import KitchenQueueService
from freshsip.services.order_lifecycle import OrderLifecycleService, transition_response

router = APIRouter()


@router.post("/update-item-status")
def update_item_status(
    body: UpdateItemStatusRequest,
    chef: AuthUser = Depends(require_chef),
    lifecycle: OrderLifecycleService = Depends(get_lifecycle_service),
) -> Any:
    """Mark an order (QuickSip) or a plan day (FreshPlan) received or done."""
    order = lifecycle.update_item_status(
        chef.user_id,
        body.order_id,
        body.status,
        day_id=body.day_id,
        chef_time=body.chef_time,
    )
    day = order.find_day(body.day_id) if order.is_freshplan else None
    return {
        "success": True,
        "message": "Item status updated successfully",
        **transition_response(order, day),
    }


def _listing(status: str, chef: AuthUser, kitchen: KitchenQueueService, clock: Clock, date: Optional[str]):
    day = clock.parse_day(date)
    items = kitchen.list_items(status, chef.user_id, day)
    return {"success": True, "date": day.isoformat(), "count": len(items), "items": items}


@router.get("/pending-orders")
def pending_orders(
    date: Optional[str] = None,
    chef: AuthUser = Depends(require_chef),
    kitchen: KitchenQueueService = Depends(get_kitchen_service),
    clock: Clock = Depends(get_clock),
) -> Any:
    """All pending items for the date, whoever ends up preparing them."""
    return _listing("pending", chef, kitchen, clock, date)


@router.get("/received-orders")
def received_orders(
    date: Optional[str] = None,
    chef: AuthUser = Depends(require_chef),
    kitchen: KitchenQueueService = Depends(get_kitchen_service),
    clock: Clock = Depends(get_clock),
) -> Any:
    """Items this chef has received and not finished."""
    return _listing("received", chef, kitchen, clock, date)


@router.get("/done-orders")
def done_orders(
    date: Optional[str] = None,
    chef: AuthUser = Depends(require_chef),
    kitchen: KitchenQueueService = Depends(get_kitchen_service),
    clock: Clock = Depends(get_clock),
) -> Any:
    return _listing("done", chef, kitchen, clock, date)


@router.get("/stats")
def chef_stats(
    date: Optional[str] = None,
    chef: AuthUser = Depends(require_chef),
    kitchen: KitchenQueueService = Depends(get_kitchen_service),
    clock: Clock = Depends(get_clock),
) -> Any:
    day = clock.parse_day(date)
    return {"success": True, "date": day.isoformat(), "stats": kitchen.chef_stats(chef.user_id, day)}


def _production(kitchen: KitchenQueueService, day):
    items = kitchen.production_items(day)
    return {"success": True, "date": day.isoformat(), "count": len(items), "items": items}


@router.get("/today-orders")
def today_orders(
    chef: AuthUser = Depends(require_chef),
    kitchen: KitchenQueueService = Depends(get_kitchen_service),
    clock: Clock = Depends(get_clock),
) -> Any:
    """Every non-cancelled line to produce today, across all statuses."""
    return _production(kitchen, clock.now().date())


@router.get("/tomorrow-orders")
def tomorrow_orders(
    chef: AuthUser = Depends(require_chef),
    kitchen: KitchenQueueService = Depends(get_kitchen_service),
    clock: Clock = Depends(get_clock),
) -> Any:
    """Production plan for the next day."""
    return _production(kitchen, clock.now().date() + timedelta(days=1))
