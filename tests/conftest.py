"""
Pytest configuration and fixtures
"""

import itertools
from typing import AsyncGenerator, Dict, List, Optional, Sequence

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from core.config import Settings
from models import Base
from schemas.warehouse import ColumnSpec
from sync_engine.loaders.base import LoadJobHandle, WarehouseLoader
from sync_engine.staging.base import StagingStore
from sync_engine.targets import build_targets

# In-memory SQLite shared by every session of one test
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


# ============================================================================
# Fakes for the cloud collaborators
# ============================================================================

class FakeStagingStore(StagingStore):
    """Object store kept in memory; captures file contents at upload time"""

    def __init__(self, bucket: str = "test-bucket"):
        self.bucket = bucket
        self.objects: Dict[str, str] = {}
        self.uploaded: Dict[str, str] = {}
        self.uploads: List[str] = []
        self.deleted: List[str] = []
        self.fail_upload: Optional[Exception] = None
        self.fail_delete: Optional[Exception] = None

    def uri(self, object_name: str) -> str:
        return f"gs://{self.bucket}/{object_name}"

    async def upload(self, local_path: str, object_name: str) -> str:
        if self.fail_upload is not None:
            raise self.fail_upload
        with open(local_path, encoding="utf-8") as f:
            self.objects[object_name] = f.read()
        self.uploaded[object_name] = self.objects[object_name]
        self.uploads.append(object_name)
        return self.uri(object_name)

    async def delete(self, object_name: str) -> None:
        if self.fail_delete is not None:
            raise self.fail_delete
        self.deleted.append(object_name)
        self.objects.pop(object_name, None)


class FakeWarehouseLoader(WarehouseLoader):
    """Records load submissions instead of calling the warehouse"""

    def __init__(self):
        self.submissions: List[dict] = []
        self.fail_submit: Optional[Exception] = None
        self._job_ids = itertools.count(1)

    async def submit_append_load(
        self,
        source_uri: str,
        table_id: str,
        schema: Sequence[ColumnSpec],
    ) -> LoadJobHandle:
        if self.fail_submit is not None:
            raise self.fail_submit
        self.submissions.append(
            {"source_uri": source_uri, "table_id": table_id, "schema": list(schema)}
        )
        return LoadJobHandle(
            job_id=f"job_{next(self._job_ids)}",
            table_id=table_id,
            source_uri=source_uri,
        )


@pytest.fixture
def staging_store():
    return FakeStagingStore()


@pytest.fixture
def warehouse_loader():
    return FakeWarehouseLoader()


@pytest.fixture
def test_settings():
    return Settings(_env_file=None)


@pytest.fixture
def targets(test_settings):
    return build_targets(test_settings)


# ============================================================================
# Sample payloads
# ============================================================================

@pytest.fixture
def delivered_order():
    """Delivered order with a full status history"""
    return {
        "orderId": "PED-1001",
        "customerName": "Maria Souza",
        "customerPhone": "61999990000",
        "address": "Rua 12, Lote 3, Aguas Claras, Brasilia",
        "pharmacyUnitId": "unit_01",
        "deliveryMan": "courier_7",
        "deliveryManName": "João",
        "status": "Entregue",
        "priceNumber": "45.90",
        "rating": 5,
        "reviewComment": "Rápido",
        "reviewDate": {"_seconds": 1736942400, "_nanoseconds": 0},
        "items": "Dipirona, Vitamina C , ",
        "licensePlate": "ABC1D23",
        "statusHistory": [
            {"status": "Pendente", "timestamp": "2025-01-15T12:00:00Z"},
            {"status": "A caminho", "timestamp": "2025-01-15T12:10:00Z"},
            {"status": "Entregue", "timestamp": "2025-01-15T12:40:00Z"},
        ],
        "createdAt": {"_seconds": 1736942400, "_nanoseconds": 0},
        "updatedAt": "2025-01-15T12:40:00Z",
    }


@pytest.fixture
def completed_run():
    """Completed delivery run"""
    return {
        "deliverymanId": "courier_7",
        "motorcycleId": "M003",
        "pharmacyUnitId": "unit_01",
        "orderIds": ["order_1", "order_2"],
        "startTime": "2025-01-15T12:05:00Z",
        "endTime": "2025-01-15T13:05:00Z",
        "totalDistance": "12.5",
        "status": "completed",
        "checkpoints": [{"lat": -15.8, "lng": -47.9}, {"lat": -15.9, "lng": -48.0}],
    }
