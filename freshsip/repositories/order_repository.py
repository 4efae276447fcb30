"""Order persistence over a MongoDB collection."""
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo.collection import Collection

from freshsip.core.exceptions import ConcurrentUpdateError
from freshsip.models.base import to_object_id
from freshsip.models.order import Order

logger = logging.getLogger(__name__)


class OrderRepository(ABC):
    """Storage contract the order services depend on."""

    @abstractmethod
    def get(self, order_id: str) -> Optional[Order]:
        """Load one order or return None."""

    @abstractmethod
    def find_touching(self, start: datetime, end: datetime) -> List[Order]:
        """
        Orders relevant to a time window: created (or scheduled) inside it, or
        owning a plan day dated inside it. Callers apply the exact filters.
        """

    @abstractmethod
    def save(self, order: Order) -> Order:
        """
        Replace the whole document if nobody saved it since it was loaded.

        Raises ConcurrentUpdateError when the stored version moved on.
        """


def restore_object_ids(document: Dict[str, Any]) -> Dict[str, Any]:
    """Turn domain string ids back into ObjectId before writing."""
    document["_id"] = to_object_id(document.get("_id"))
    for item in document.get("products", []):
        if "_id" in item:
            item["_id"] = to_object_id(item["_id"])
    for day in document.get("planRelated", {}).get("daySchedule", []):
        day["_id"] = to_object_id(day.get("_id"))
        for item in day.get("items", []):
            if "_id" in item:
                item["_id"] = to_object_id(item["_id"])
    return document


class MongoOrderRepository(OrderRepository):
    """Order repository backed by the ``orders`` collection."""

    def __init__(self, collection: Collection):
        self.collection = collection

    def get(self, order_id: str) -> Optional[Order]:
        document = self.collection.find_one({"_id": to_object_id(order_id)})
        if document is None:
            return None
        return Order.from_dict(document)

    def find_touching(self, start: datetime, end: datetime) -> List[Order]:
        window = {"$gte": start, "$lte": end}
        cursor = self.collection.find({
            "$or": [
                {"createdAt": window},
                {"scheduledDeliveryDate": window},
                {"planRelated.daySchedule": {"$elemMatch": {"date": window}}},
            ]
        })
        return [Order.from_dict(document) for document in cursor]

    def save(self, order: Order) -> Order:
        expected_version = order.version
        document = restore_object_ids(order.to_dict())
        document["version"] = expected_version + 1
        document["updatedAt"] = datetime.now(timezone.utc)

        query: Dict[str, Any] = {"_id": document["_id"]}
        if expected_version == 0:
            # Documents written before versioning have no field at all
            query["$or"] = [{"version": {"$exists": False}}, {"version": 0}]
        else:
            query["version"] = expected_version

        result = self.collection.replace_one(query, document)
        if result.matched_count == 0:
            logger.warning(
                f"Stale write rejected for order {order.id} at version {expected_version}",
                extra={"order_id": order.id},
            )
            raise ConcurrentUpdateError(
                "Order was modified by another request. Reload and try again.",
                extra={"orderId": order.id},
            )

        order.version = expected_version + 1
        order.updated_at = document["updatedAt"]
        return order
