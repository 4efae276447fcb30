"""User persistence over a MongoDB collection."""
from abc import ABC, abstractmethod
from typing import Optional

from pymongo import ReturnDocument
from pymongo.collection import Collection

from freshsip.models.base import to_object_id
from freshsip.models.user import DeliveryActiveInfo, User


class UserRepository(ABC):

    @abstractmethod
    def get(self, user_id: str) -> Optional[User]:
        """Load one user or return None."""

    @abstractmethod
    def update_delivery_active_info(self, user_id: str, info: DeliveryActiveInfo) -> Optional[User]:
        """Replace the delivery active-slot info and return the updated user."""


class MongoUserRepository(UserRepository):
    """User repository backed by the ``users`` collection."""

    def __init__(self, collection: Collection):
        self.collection = collection

    def get(self, user_id: str) -> Optional[User]:
        # Password hashes never leave the store
        document = self.collection.find_one({"_id": to_object_id(user_id)}, {"password": 0})
        return User.from_dict(document) if document else None

    def update_delivery_active_info(self, user_id: str, info: DeliveryActiveInfo) -> Optional[User]:
        document = self.collection.find_one_and_update(
            {"_id": to_object_id(user_id)},
            {"$set": {"deliveryActiveInfo": info.to_dict()}},
            projection={"password": 0},
            return_document=ReturnDocument.AFTER,
        )
        return User.from_dict(document) if document else None
