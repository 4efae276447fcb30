"""Row shapes shared by the delivery listings."""
from typing import Any, Dict, List, Optional

from freshsip.models.base import stringify_ids
from freshsip.models.order import Day, Order, OrderItem


def customer_summary(order: Order) -> Dict[str, Any]:
    """Contact block, falling back to the populated user for name and phone."""
    details = order.customer_details
    user = order.user if isinstance(order.user, dict) else {}
    return {
        "name": (details.name if details else None) or user.get("username"),
        "phone": (details.phone if details else None) or user.get("phone"),
        "address": details.address if details else None,
        "additionalInfo": details.additional_address_info if details else None,
    }


def item_summaries(items: List[OrderItem]) -> List[Dict[str, Any]]:
    return [
        {
            "product": stringify_ids(item.product),
            "customization": item.customization.to_dict() if item.customization else None,
            "quantity": item.quantity,
        }
        for item in items
    ]


def quicksip_row(order: Order, slot_key: str = "deliveryTimeSlot") -> Dict[str, Any]:
    return {
        "_id": order.id,
        "orderId": order.id,
        "orderNumber": order.order_number,
        "orderType": order.order_type,
        "customer": customer_summary(order),
        "items": item_summaries(order.products),
        "totalAmount": order.total_amount,
        "deliveryCharge": order.delivery_charge or 0,
        slot_key: order.quicksip_time_slot,
        "status": order.status,
        "createdAt": order.created_at,
    }


def day_row(order: Order, day: Day, slot_key: str = "deliveryTimeSlot") -> Dict[str, Any]:
    return {
        "_id": f"{order.id}-{day.id}",
        "orderId": order.id,
        "orderNumber": order.order_number,
        "orderType": order.order_type,
        "dayId": day.id,
        "customer": customer_summary(order),
        "items": item_summaries(day.items),
        "totalAmount": day.total,
        "deliveryCharge": order.delivery_charge or 0,
        slot_key: day.resolved_time_slot,
        "status": day.status,
        "createdAt": order.created_at,
        "dayDate": day.date,
    }


def with_delivery_times(row: Dict[str, Any], info: Optional[Any]) -> Dict[str, Any]:
    """Attach the delivery stamps to a listing row."""
    row["pickedTime"] = info.picked_time if info else None
    row["deliveredTime"] = info.delivered_time if info else None
    row["notDeliveredTime"] = info.not_delivered_time if info else None
    row["notDeliveredReason"] = info.not_delivered_reason if info else None
    return row
