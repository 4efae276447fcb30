from .order_repository import MongoOrderRepository, OrderRepository
from .user_repository import MongoUserRepository, UserRepository

__all__ = [
    "MongoOrderRepository",
    "OrderRepository",
    "MongoUserRepository",
    "UserRepository",
]
