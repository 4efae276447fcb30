"""Main API router."""
from fastapi import APIRouter

from freshsip.api.v1.endpoints import chef, delivery, freshplan, orders

# Create main router
api_router = APIRouter()

api_router.include_router(
    chef.router,
    prefix="/chef",
    tags=["Kitchen"]
)

api_router.include_router(
    delivery.router,
    prefix="/delivery",
    tags=["Delivery"]
)

api_router.include_router(
    orders.router,
    prefix="/orders",
    tags=["Orders"]
)

api_router.include_router(
    freshplan.router,
    prefix="/freshplan",
    tags=["FreshPlan"]
)
