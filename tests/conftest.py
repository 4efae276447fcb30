import pytest
from fastapi.testclient import TestClient

from freshsip.config.settings import Settings, get_settings
from freshsip.core.dependencies import get_clock, get_order_repository, get_user_repository
from freshsip.core.security import create_access_token
from freshsip.main import create_app
from freshsip.services.delivery_queue import DeliveryQueueService
from freshsip.services.eligibility import EligibilityService
from freshsip.services.kitchen_queue import KitchenQueueService
from freshsip.services.order_lifecycle import OrderLifecycleService
from tests.factories import TIMEZONE, FixedClock, InMemoryOrderRepository, InMemoryUserRepository


@pytest.fixture
def settings():
    return Settings(
        JWT_SECRET="test-secret",
        TIMEZONE=TIMEZONE,
        ENVIRONMENT="test",
        LOG_TO_FILE=False,
    )


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def orders():
    return InMemoryOrderRepository()


@pytest.fixture
def users():
    return InMemoryUserRepository()


@pytest.fixture
def lifecycle(orders, users, clock, settings):
    return OrderLifecycleService(orders, users, clock, settings)


@pytest.fixture
def eligibility(orders, users, clock):
    return EligibilityService(orders, users, clock)


@pytest.fixture
def kitchen(orders, clock):
    return KitchenQueueService(orders, clock)


@pytest.fixture
def delivery(orders, users, clock):
    return DeliveryQueueService(orders, users, clock)


@pytest.fixture
def client(settings, orders, users, clock):
    """TestClient without the lifespan; storage is replaced by the in-memory repositories."""
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_order_repository] = lambda: orders
    app.dependency_overrides[get_user_repository] = lambda: users
    app.dependency_overrides[get_clock] = lambda: clock
    return TestClient(app)


@pytest.fixture
def auth_headers(settings):
    """Build an Authorization header for a stored user document."""

    def _headers(user_document):
        token = create_access_token(
            {"userId": str(user_document["_id"]), "role": user_document["role"]},
            settings,
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
