"""
Persistence gateway - the key-value snapshot store.

Architecture Decision: Repository Pattern + Factory Pattern
Each collection is written as one JSON array under a fixed key. The gateway is
the only place that touches storage; failures are logged here and never reach
the caller, so an unsaved change never blocks the in-memory state.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from internship_tracker.domain.models import SnapshotModel
from internship_tracker.infra.db import SnapshotRecord, get_engine

logger = logging.getLogger(__name__)

Records = List[Dict[str, Any]]
M = TypeVar("M", bound=SnapshotModel)


def decode_snapshot(key: str, payload: str) -> Optional[Records]:
    """Parse a stored payload; anything but a JSON array counts as no data"""
    try:
        data = json.loads(payload)
    except (TypeError, ValueError) as e:
        logger.warning(f"Unparseable snapshot for {key}: {e}")
        return None
    if not isinstance(data, list):
        logger.warning(f"Snapshot for {key} is not a list, ignoring it")
        return None
    return data


class PersistenceGateway(ABC):
    """
    Abstract snapshot store.

    load() returns None for a missing key or unreadable content; save() and
    clear() report success as a bool. None of them raise.
    """

    @abstractmethod
    async def load(self, key: str) -> Optional[Records]:
        ...

    @abstractmethod
    async def save(self, key: str, records: Records) -> bool:
        ...

    @abstractmethod
    async def clear(self, key: str) -> bool:
        ...


class SqlSnapshotGateway(PersistenceGateway):
    """Snapshots stored in the `snapshots` table"""

    def __init__(self, session_factory: Optional[async_sessionmaker] = None):
        self.session_factory = session_factory

    def _get_session(self) -> AsyncSession:
        """Get session - either from the injected factory or the global engine"""
        if self.session_factory:
            return self.session_factory()
        return get_engine().get_session()

    async def load(self, key: str) -> Optional[Records]:
        try:
            async with self._get_session() as session:
                record = await session.get(SnapshotRecord, key)
                payload = record.payload if record else None
        except SQLAlchemyError as e:
            logger.error(f"Error loading {key}: {e}")
            return None

        if payload is None:
            logger.debug(f"No snapshot stored for {key}")
            return None
        return decode_snapshot(key, payload)

    async def save(self, key: str, records: Records) -> bool:
        try:
            payload = json.dumps(records, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Error serializing {key}: {e}")
            return False

        try:
            async with self._get_session() as session:
                record = await session.get(SnapshotRecord, key)
                if record is None:
                    session.add(SnapshotRecord(key=key, payload=payload, updated_at=datetime.now()))
                else:
                    record.payload = payload
                    record.updated_at = datetime.now()
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error saving {key}: {e}")
            return False
        return True

    async def clear(self, key: str) -> bool:
        try:
            async with self._get_session() as session:
                await session.execute(delete(SnapshotRecord).where(SnapshotRecord.key == key))
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error clearing {key}: {e}")
            return False
        return True


class JsonFileGateway(PersistenceGateway):
    """Snapshots stored as <key>.json files in one directory"""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    async def load(self, key: str) -> Optional[Records]:
        path = self._path(key)
        if not path.exists():
            logger.debug(f"No snapshot stored for {key}")
            return None
        try:
            payload = path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error loading {key}: {e}")
            return None
        return decode_snapshot(key, payload)

    async def save(self, key: str, records: Records) -> bool:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            payload = json.dumps(records, indent=2, ensure_ascii=False)
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding='utf-8')
            tmp_path.replace(path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving {key}: {e}")
            return False
        return True

    async def clear(self, key: str) -> bool:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Error clearing {key}: {e}")
            return False
        return True


def create_gateway(settings) -> PersistenceGateway:
    """
    Create the gateway selected by settings.storage_backend.

    Returns:
        PersistenceGateway instance for the configured backend
    """
    if settings.storage_backend == "json":
        return JsonFileGateway(settings.data_dir / "snapshots")
    return SqlSnapshotGateway(get_engine(settings.get_db_url()).session_factory)


async def load_collection(gateway: PersistenceGateway, key: str, model: Type[M]) -> Optional[List[M]]:
    """
    Load a snapshot and validate every record against a domain model.

    A snapshot with any invalid record is treated like unparseable content.
    """
    records = await gateway.load(key)
    if records is None:
        return None
    try:
        return TypeAdapter(List[model]).validate_python(records)
    except ValidationError as e:
        logger.warning(f"Invalid records in {key}, starting empty: {e.error_count()} error(s)")
        return None


async def save_collection(gateway: PersistenceGateway, key: str, items: Sequence[SnapshotModel]) -> bool:
    """Write a collection of domain records as a snapshot"""
    return await gateway.save(key, [item.to_record() for item in items])
