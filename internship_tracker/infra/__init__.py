"""Infrastructure layer - Configuration and persistence"""

from .db import DatabaseEngine, get_engine, init_db
from .gateway import PersistenceGateway, SqlSnapshotGateway, JsonFileGateway, create_gateway

__all__ = [
    "DatabaseEngine",
    "get_engine",
    "init_db",
    "PersistenceGateway",
    "SqlSnapshotGateway",
    "JsonFileGateway",
    "create_gateway",
]
