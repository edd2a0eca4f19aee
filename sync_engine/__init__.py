"""
Queue-driven batch sync of delivery records into the analytics warehouse.

This package contains every component between a source record write and a
warehouse load:

Modules:
    observers: Enqueue records that reach a sync-eligible status
    queue: Sync queue repository (enqueue, dedupe, fetch, retire)
    sources: Read access to the operational document store
    targets: Per-target collection, statuses, table, schema and transformer
    runner: Batch sync orchestrator for one target
    scheduler: APScheduler integration running the batch sync periodically
    timestamps: Permissive timestamp and number parsing

Subpackages:
    enrichment: Region, delivery duration and license plate derivation
    transformers: Source document -> warehouse row mapping
    staging: NDJSON batch files and the object storage they are staged in
    loaders: Append-only bulk load submission into the warehouse

Architecture:
    Observer (on write) -> sync queue (append) -> batch sync (periodic drain)
    -> transformer (per record) -> staged NDJSON -> load submission
    -> sync queue (retire entries)

    Delivery is at-least-once: an invocation that aborts before the load is
    submitted leaves its queue entries for the next tick, and overlapping
    invocations may load a record twice. Retirement deletes by id, so
    repeating it is harmless.

Usage:
    from sync_engine.targets import build_targets
    from sync_engine.runner import BatchSyncRunner

Example:
    targets = build_targets()
    runner = BatchSyncRunner(
        db_session=session,
        target=targets[SyncTarget.ORDERS],
        staging_store=GCSStagingStore("my-bucket"),
        warehouse_loader=BigQueryLoader("delivery_analytics"),
    )
    result = await runner.run()

    print(f"Retired {result['entries_retired']} entries")

Error Handling:
    All components raise the structured exceptions from core.exceptions.
    Infrastructure failures abort the invocation; per-record transform
    failures are isolated and counted; vehicle lookup failures degrade to
    the raw value.
"""

__all__ = [
    "BatchSyncRunner",
    "SyncScheduler",
    "SyncEventObserver",
    "SyncQueueRepository",
    "SourceDocumentRepository",
    "TargetDefinition",
    "build_targets",
]
