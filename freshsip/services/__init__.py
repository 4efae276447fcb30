from .delivery_queue import DeliveryQueueService
from .eligibility import EligibilityService, resolve_target_slot
from .kitchen_queue import KitchenQueueService
from .order_lifecycle import OrderLifecycleService

__all__ = [
    "DeliveryQueueService",
    "EligibilityService",
    "resolve_target_slot",
    "KitchenQueueService",
    "OrderLifecycleService",
]
