"""
API endpoint tests
"""

import asyncio
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from api.main import app
from api.dependencies import get_db, get_staging_store, get_targets, get_warehouse_loader
from core.database import build_session_maker, create_tables
from models.base import SyncTarget
from sync_engine.queue import SyncQueueRepository
from sync_engine.sources import SourceDocumentRepository


@pytest.fixture
def session_maker(tmp_path):
    """File-backed SQLite so the client's event loop opens its own connections"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}", poolclass=NullPool)
    asyncio.run(create_tables(engine))
    yield build_session_maker(engine)
    asyncio.run(engine.dispose())


@pytest.fixture
def fakes(staging_store, warehouse_loader):
    return staging_store, warehouse_loader


@pytest.fixture
def client(session_maker, fakes, targets):
    """Create test client with database and cloud overrides"""

    async def override_get_db():
        async with session_maker() as session:
            yield session

    staging_store, warehouse_loader = fakes
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_staging_store] = lambda: staging_store
    app.dependency_overrides[get_warehouse_loader] = lambda: warehouse_loader
    app.dependency_overrides[get_targets] = lambda: targets

    yield TestClient(app)

    app.dependency_overrides.clear()


def run(session_maker, fn):
    async def _run():
        async with session_maker() as session:
            return await fn(session)
    return asyncio.run(_run())


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["health"] == "/health"


def test_health_endpoint_database_connected(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["database_connected"] is True
    assert data["status"] == "healthy"
    assert data["last_runs"] == []
    assert "X-Request-ID" in response.headers


def test_request_id_propagated(client):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


def test_event_enqueues_and_dedupes(client, session_maker):
    body = {"before": {"status": "A caminho"}, "after": {"status": "Entregue"}}

    first = client.post("/events/orders/order_1", json=body)
    second = client.post("/events/orders/order_1", json=body)

    assert first.status_code == 200
    assert first.json() == {"target": "orders", "reference_id": "order_1", "enqueued": True}
    assert second.json()["enqueued"] is False

    count = run(session_maker, lambda s: SyncQueueRepository(s, SyncTarget.ORDERS).count_unprocessed())
    assert count == 1


def test_event_delete_ignored(client):
    response = client.post("/events/delivery_runs/run_1", json={"before": {"status": "completed"}})

    assert response.status_code == 200
    assert response.json()["enqueued"] is False


def test_event_unknown_target(client):
    response = client.post("/events/invoices/inv_1", json={"after": {"status": "paid"}})
    assert response.status_code == 422


def test_queue_status(client):
    client.post("/events/delivery_runs/run_1", json={"after": {"status": "completed"}})
    client.post("/events/delivery_runs/run_2", json={"after": {"status": "completed"}})

    response = client.get("/queue")

    assert response.status_code == 200
    data = response.json()
    assert data["total_unprocessed"] == 2
    runs = next(t for t in data["targets"] if t["target"] == "delivery_runs")
    assert runs["unprocessed"] == 2
    assert runs["sample_reference_ids"] == ["run_1", "run_2"]
    assert runs["oldest_queued_at"] is not None


def test_manual_sync(client, session_maker, fakes, completed_run):
    async def seed(session):
        await SourceDocumentRepository(session, "deliveryRuns").put("run_1", completed_run)
        await SyncQueueRepository(session, SyncTarget.DELIVERY_RUNS).enqueue("run_1")

    run(session_maker, seed)
    staging_store, warehouse_loader = fakes

    response = client.post("/sync/delivery_runs")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "success"
    assert data["entries_retired"] == 1
    assert data["load_job_id"] == "job_1"
    assert len(warehouse_loader.submissions) == 1

    health = client.get("/health").json()
    assert health["last_runs"][0]["target"] == "delivery_runs"
    assert health["last_runs"][0]["status"] == "success"


def test_manual_sync_empty_queue(client):
    response = client.post("/sync/orders")

    assert response.status_code == 200
    assert response.json()["status"] == "empty"


def test_manual_sync_load_failure_returns_503(client, session_maker, fakes, completed_run):
    async def seed(session):
        await SourceDocumentRepository(session, "deliveryRuns").put("run_1", completed_run)
        await SyncQueueRepository(session, SyncTarget.DELIVERY_RUNS).enqueue("run_1")

    run(session_maker, seed)
    _, warehouse_loader = fakes
    warehouse_loader.fail_submit = RuntimeError("quota exceeded")

    response = client.post("/sync/delivery_runs")

    assert response.status_code == 503
    count = run(
        session_maker, lambda s: SyncQueueRepository(s, SyncTarget.DELIVERY_RUNS).count_unprocessed()
    )
    assert count == 1

    health = client.get("/health").json()
    assert health["status"] == "degraded"
