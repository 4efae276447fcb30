"""MongoDB client construction.

The client is created once by the application lifespan (see ``freshsip.main``)
and handed to request handlers through ``freshsip.core.dependencies``.
"""
import logging
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from freshsip.config.settings import Settings

logger = logging.getLogger(__name__)

ORDERS_COLLECTION = "orders"
USERS_COLLECTION = "users"


def create_mongo_client(settings: Settings) -> MongoClient:
    """
    Create a MongoClient for the configured URI.

    The driver connects lazily, so this does not fail when the server is down.
    """
    if not settings.MONGO_URI or not settings.MONGO_DB_NAME:
        raise ValueError("MONGO_URI and MONGO_DB_NAME must be set in the environment.")

    client = MongoClient(
        settings.MONGO_URI,
        serverSelectionTimeoutMS=settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
        tz_aware=False,
    )
    logger.info(f"MongoDB client created for database '{settings.MONGO_DB_NAME}'")
    return client


def get_database(client: MongoClient, settings: Settings) -> Database:
    """Return the application database from a client."""
    return client[settings.MONGO_DB_NAME]


def ensure_indexes(database: Database) -> None:
    """Create the indexes the order queries rely on."""
    orders = database[ORDERS_COLLECTION]
    orders.create_index("user")
    orders.create_index("status")
    orders.create_index([("createdAt", -1)])
    orders.create_index("planRelated.daySchedule.date")


def check_mongo_connection(client: Optional[MongoClient]) -> bool:
    """
    Check MongoDB connection.
    Returns True if the server answers a ping, False otherwise.
    """
    if client is None:
        return False
    try:
        client.admin.command("ping")
        return True
    except PyMongoError as e:
        logger.error(f"MongoDB connection test failed: {e}")
        return False
