"""FastAPI dependencies: storage, services and the authenticated caller."""
import logging
from typing import Callable, Optional

from fastapi import Depends, Header, Request
from pymongo.database import Database

from freshsip.config.database import ORDERS_COLLECTION, USERS_COLLECTION
from freshsip.config.settings import Settings, get_settings
from freshsip.core.clock import Clock
from freshsip.core.exceptions import ForbiddenError, OrderLifecycleError
from freshsip.core.security import AuthUser, verify_token
from freshsip.models.user import UserRole
from freshsip.repositories.order_repository import MongoOrderRepository, OrderRepository
from freshsip.repositories.user_repository import MongoUserRepository, UserRepository
from freshsip.services.delivery_queue import DeliveryQueueService
from freshsip.services.eligibility import EligibilityService
from freshsip.services.kitchen_queue import KitchenQueueService
from freshsip.services.order_lifecycle import OrderLifecycleService

logger = logging.getLogger(__name__)


def get_database(request: Request) -> Database:
    """Database handle opened by the application lifespan."""
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise OrderLifecycleError("Database is not available", status_code=503)
    return database


def get_order_repository(database: Database = Depends(get_database)) -> OrderRepository:
    return MongoOrderRepository(database[ORDERS_COLLECTION])


def get_user_repository(database: Database = Depends(get_database)) -> UserRepository:
    return MongoUserRepository(database[USERS_COLLECTION])


def get_clock(settings: Settings = Depends(get_settings)) -> Clock:
    return Clock(settings.TIMEZONE)


def get_lifecycle_service(
    orders: OrderRepository = Depends(get_order_repository),
    users: UserRepository = Depends(get_user_repository),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_settings),
) -> OrderLifecycleService:
    return OrderLifecycleService(orders, users, clock, settings)


def get_eligibility_service(
    orders: OrderRepository = Depends(get_order_repository),
    users: UserRepository = Depends(get_user_repository),
    clock: Clock = Depends(get_clock),
) -> EligibilityService:
    return EligibilityService(orders, users, clock)


def get_kitchen_service(
    orders: OrderRepository = Depends(get_order_repository),
    clock: Clock = Depends(get_clock),
) -> KitchenQueueService:
    return KitchenQueueService(orders, clock)


def get_delivery_service(
    orders: OrderRepository = Depends(get_order_repository),
    users: UserRepository = Depends(get_user_repository),
    clock: Clock = Depends(get_clock),
) -> DeliveryQueueService:
    return DeliveryQueueService(orders, users, clock)


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> AuthUser:
    """
    Caller from the session cookie, or from an ``Authorization: Bearer``
    header for non-browser clients.
    """
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token and authorization and authorization.startswith("Bearer "):
        token = authorization.split("Bearer ")[1]

    user = verify_token(token, settings)
    request.state.user_id = user.user_id
    return user


def require_role(role: UserRole, message: str) -> Callable:
    """Dependency factory rejecting callers without ``role``."""

    async def checker(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        if user.role != role.value:
            logger.warning(f"Rejected {user.role} caller on {role.value} route", extra={"user_id": user.user_id})
            raise ForbiddenError(message)
        return user

    return checker


require_chef = require_role(UserRole.CHEF, "Unauthorized. Chef access required.")
require_delivery = require_role(UserRole.DELIVERY, "Unauthorized. Delivery access required.")
