"""
End-to-end batch sync tests: queue -> transform -> stage -> load -> retire
"""

import json
import pytest
from sqlalchemy import select

from models.base import SyncRunStatus, SyncTarget
from models.sync_run import SyncRun
from sync_engine.observers import SyncEventObserver
from sync_engine.queue import SyncQueueRepository
from sync_engine.runner import BatchSyncRunner
from sync_engine.sources import SourceDocumentRepository


def make_runner(db_session, targets, target, staging_store, warehouse_loader, batch_size=100):
    return BatchSyncRunner(
        db_session=db_session,
        target=targets[target],
        staging_store=staging_store,
        warehouse_loader=warehouse_loader,
        batch_size=batch_size,
    )


async def sync_runs(db_session):
    result = await db_session.execute(select(SyncRun))
    return result.scalars().all()


@pytest.mark.asyncio
async def test_empty_queue_twice_is_a_noop(db_session, targets, staging_store, warehouse_loader):
    runner = make_runner(db_session, targets, SyncTarget.ORDERS, staging_store, warehouse_loader)

    first = await runner.run()
    second = await runner.run()

    assert first["status"] == "empty"
    assert second["status"] == "empty"
    assert staging_store.uploads == []
    assert warehouse_loader.submissions == []
    assert await sync_runs(db_session) == []


@pytest.mark.asyncio
async def test_single_delivered_order_synced(
    db_session, targets, staging_store, warehouse_loader, delivered_order
):
    """One eligible entry: one artifact, one line, one load job, entry retired, artifact deleted"""
    await SourceDocumentRepository(db_session, "orders").put("order_1", delivered_order)
    await SyncQueueRepository(db_session, SyncTarget.ORDERS).enqueue("order_1")

    result = await make_runner(
        db_session, targets, SyncTarget.ORDERS, staging_store, warehouse_loader
    ).run()

    assert result["status"] == "success"
    assert result["entries_read"] == 1
    assert result["records_transformed"] == 1
    assert result["entries_retired"] == 1
    assert result["load_job_id"] == "job_1"

    assert len(staging_store.uploads) == 1
    object_name = staging_store.uploads[0]
    assert object_name.startswith("sync/sync_")
    assert object_name.endswith(".ndjson")
    assert staging_store.deleted == [object_name]

    assert len(warehouse_loader.submissions) == 1
    submission = warehouse_loader.submissions[0]
    assert submission["source_uri"] == f"gs://test-bucket/{object_name}"
    assert submission["table_id"] == "orders"
    assert submission["schema"] == targets[SyncTarget.ORDERS].schema

    assert await SyncQueueRepository(db_session, SyncTarget.ORDERS).count_unprocessed() == 0

    runs = await sync_runs(db_session)
    assert len(runs) == 1
    assert runs[0].status == SyncRunStatus.SUCCESS
    assert runs[0].load_job_id == "job_1"


@pytest.mark.asyncio
async def test_staged_file_contents(
    db_session, targets, staging_store, warehouse_loader, delivered_order
):
    """The staged artifact holds exactly one JSON row per synced record"""
    orders = SourceDocumentRepository(db_session, "orders")
    queue = SyncQueueRepository(db_session, SyncTarget.ORDERS)
    for order_id in ("order_1", "order_2"):
        await orders.put(order_id, delivered_order)
        await queue.enqueue(order_id)

    await make_runner(db_session, targets, SyncTarget.ORDERS, staging_store, warehouse_loader).run()

    object_name = staging_store.uploads[0]
    assert object_name not in staging_store.objects
    lines = staging_store.uploaded[object_name].splitlines()
    rows = [json.loads(line) for line in lines]
    assert [row["order_id"] for row in rows] == ["order_1", "order_2"]
    assert rows[0]["region"] == "AGUAS CLARAS"
    assert rows[0]["delivery_time_minutes"] == 30.0
    assert rows[0]["license_plate"] == "ABC1D23"


@pytest.mark.asyncio
async def test_non_terminal_record_retired_without_load(
    db_session, targets, staging_store, warehouse_loader, delivered_order
):
    await SourceDocumentRepository(db_session, "orders").put(
        "order_1", {**delivered_order, "status": "A caminho"}
    )
    await SyncQueueRepository(db_session, SyncTarget.ORDERS).enqueue("order_1")

    result = await make_runner(
        db_session, targets, SyncTarget.ORDERS, staging_store, warehouse_loader
    ).run()

    assert result["status"] == "skipped"
    assert result["entries_retired"] == 1
    assert staging_store.uploads == []
    assert warehouse_loader.submissions == []
    assert await SyncQueueRepository(db_session, SyncTarget.ORDERS).count_unprocessed() == 0


@pytest.mark.asyncio
async def test_missing_record_retired(db_session, targets, staging_store, warehouse_loader):
    await SyncQueueRepository(db_session, SyncTarget.DELIVERY_RUNS).enqueue("run_gone")

    result = await make_runner(
        db_session, targets, SyncTarget.DELIVERY_RUNS, staging_store, warehouse_loader
    ).run()

    assert result["status"] == "skipped"
    assert result["entries_retired"] == 1
    assert warehouse_loader.submissions == []


@pytest.mark.asyncio
async def test_mixed_batch_loads_eligible_and_retires_all(
    db_session, targets, staging_store, warehouse_loader, completed_run
):
    runs = SourceDocumentRepository(db_session, "deliveryRuns")
    queue = SyncQueueRepository(db_session, SyncTarget.DELIVERY_RUNS)

    await runs.put("run_1", completed_run)
    await runs.put("run_2", {**completed_run, "status": "active"})
    for run_id in ("run_1", "run_2", "run_3"):
        await queue.enqueue(run_id)

    result = await make_runner(
        db_session, targets, SyncTarget.DELIVERY_RUNS, staging_store, warehouse_loader
    ).run()

    assert result["status"] == "success"
    assert result["entries_read"] == 3
    assert result["records_eligible"] == 1
    assert result["entries_retired"] == 3
    assert staging_store.uploads[0].startswith("delivery_runs_sync/sync_")
    assert warehouse_loader.submissions[0]["table_id"] == "delivery_runs"
    assert await queue.count_unprocessed() == 0


@pytest.mark.asyncio
async def test_batch_size_bounds_the_slice(
    db_session, targets, staging_store, warehouse_loader, completed_run
):
    runs = SourceDocumentRepository(db_session, "deliveryRuns")
    queue = SyncQueueRepository(db_session, SyncTarget.DELIVERY_RUNS)
    for i in range(3):
        await runs.put(f"run_{i}", completed_run)
        await queue.enqueue(f"run_{i}")

    result = await make_runner(
        db_session, targets, SyncTarget.DELIVERY_RUNS, staging_store, warehouse_loader,
        batch_size=2
    ).run()

    assert result["entries_read"] == 2
    assert await queue.count_unprocessed() == 1


@pytest.mark.asyncio
async def test_duplicate_entries_load_record_once(
    db_session, targets, staging_store, warehouse_loader, completed_run
):
    """Racing observers can queue a record twice; the batch loads it once and retires both"""
    await SourceDocumentRepository(db_session, "deliveryRuns").put("run_1", completed_run)
    queue = SyncQueueRepository(db_session, SyncTarget.DELIVERY_RUNS)
    await queue.enqueue("run_1")
    await queue.enqueue("run_1")

    result = await make_runner(
        db_session, targets, SyncTarget.DELIVERY_RUNS, staging_store, warehouse_loader
    ).run()

    assert result["records_transformed"] == 1
    assert result["entries_retired"] == 2


@pytest.mark.asyncio
async def test_observer_to_warehouse_flow(
    db_session, targets, staging_store, warehouse_loader, delivered_order
):
    """A status change to Entregue ends up as one load and an empty queue"""
    await SourceDocumentRepository(db_session, "orders").put("order_1", delivered_order)
    observer = SyncEventObserver(db_session, targets)
    await observer.on_order_written("order_1", {"status": "A caminho"}, delivered_order)

    result = await make_runner(
        db_session, targets, SyncTarget.ORDERS, staging_store, warehouse_loader
    ).run()

    assert result["status"] == "success"
    assert len(warehouse_loader.submissions) == 1
    assert await SyncQueueRepository(db_session, SyncTarget.ORDERS).count_unprocessed() == 0
