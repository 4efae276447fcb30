"""User model for MongoDB operations."""
import enum
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from freshsip.models.base import IdStr, MongoModel


class UserRole(str, enum.Enum):
    """User roles in the system."""
    CUSTOMER = "customer"  # Places QuickSip orders and FreshPlans
    CHEF = "chef"  # Works the kitchen queue
    DELIVERY = "delivery"  # Picks up and delivers orders
    ADMIN = "admin"  # Back office


class DeliveryActiveInfo(MongoModel):
    """Slots a delivery person has registered to work."""
    is_active: bool = False
    time_slots: List[str] = Field(default_factory=list)
    last_updated: Optional[datetime] = None


class User(MongoModel):
    """
    Represents users of the system.

    Staff accounts (chef, delivery, admin) live in the same collection as
    customers and are told apart by ``role``.
    """
    id: IdStr = Field(alias="_id")
    username: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: str = UserRole.CUSTOMER.value
    delivery_active_info: Optional[DeliveryActiveInfo] = None

    @property
    def active_time_slots(self) -> List[str]:
        if self.delivery_active_info is None:
            return []
        return list(self.delivery_active_info.time_slots)

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
