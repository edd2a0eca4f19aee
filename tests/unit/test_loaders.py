"""
Unit tests for NDJSON staging, the GCS store and the BigQuery loader
"""

import json
import os
import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from google.api_core.exceptions import NotFound
from google.cloud import bigquery

from core.exceptions import LoadSubmissionError, StagingUploadError
from schemas.warehouse import DeliveryRunWarehouseRow, DELIVERY_RUNS_TABLE_SCHEMA
from sync_engine.loaders.bigquery_loader import BigQueryLoader, to_schema_fields
from sync_engine.staging.gcs_store import GCSStagingStore
from sync_engine.staging.ndjson import NDJSON_CONTENT_TYPE, staging_object_name, write_ndjson


def make_run_row(run_id="run_1"):
    return DeliveryRunWarehouseRow(
        run_id=run_id,
        deliveryman_id="courier_7",
        pharmacy_unit_id="unit_01",
        order_ids=["order_1"],
        start_time=datetime(2025, 1, 15, 12, 5, tzinfo=timezone.utc),
        total_distance=3.2,
        status="completed",
    )


class TestNdjson:
    """Test local batch files"""

    def test_object_name(self):
        assert staging_object_name("sync", 1736942400000) == "sync/sync_1736942400000.ndjson"
        assert staging_object_name("delivery_runs_sync/", 5) == "delivery_runs_sync/sync_5.ndjson"

    def test_one_row_per_line(self, tmp_path):
        staged = write_ndjson([make_run_row("run_1"), make_run_row("run_2")], "delivery_runs_sync",
                              directory=str(tmp_path))

        with open(staged.local_path, encoding="utf-8") as f:
            lines = f.read().splitlines()

        assert staged.line_count == 2
        assert staged.object_name.startswith("delivery_runs_sync/sync_")
        assert [json.loads(line)["run_id"] for line in lines] == ["run_1", "run_2"]
        assert json.loads(lines[0])["start_time"] == "2025-01-15T12:05:00Z"

        staged.remove_local()
        assert not os.path.exists(staged.local_path)
        # second removal is a no-op
        staged.remove_local()


class TestGCSStagingStore:
    """Test the GCS staging store against a mocked client"""

    @pytest.mark.asyncio
    async def test_upload(self):
        client = MagicMock()
        blob = client.bucket.return_value.blob.return_value
        store = GCSStagingStore("staging-bucket", client=client)

        uri = await store.upload("/tmp/batch.ndjson", "sync/sync_1.ndjson")

        assert uri == "gs://staging-bucket/sync/sync_1.ndjson"
        client.bucket.assert_called_with("staging-bucket")
        client.bucket.return_value.blob.assert_called_with("sync/sync_1.ndjson")
        blob.upload_from_filename.assert_called_once_with(
            "/tmp/batch.ndjson", content_type=NDJSON_CONTENT_TYPE
        )

    @pytest.mark.asyncio
    async def test_upload_failure_wrapped(self):
        client = MagicMock()
        client.bucket.return_value.blob.return_value.upload_from_filename.side_effect = \
            ConnectionError("reset by peer")
        store = GCSStagingStore("staging-bucket", client=client)

        with pytest.raises(StagingUploadError) as exc_info:
            await store.upload("/tmp/batch.ndjson", "sync/sync_1.ndjson")

        assert exc_info.value.context["bucket"] == "staging-bucket"

    @pytest.mark.asyncio
    async def test_delete_missing_object_is_not_an_error(self):
        client = MagicMock()
        client.bucket.return_value.blob.return_value.delete.side_effect = NotFound("gone")
        store = GCSStagingStore("staging-bucket", client=client)

        await store.delete("sync/sync_1.ndjson")

    def test_client_not_built_until_used(self):
        store = GCSStagingStore("staging-bucket")
        assert store._client is None


class TestBigQueryLoader:
    """Test load job submission against a mocked client"""

    def test_schema_fields(self):
        fields = to_schema_fields(DELIVERY_RUNS_TABLE_SCHEMA)

        assert fields[0].name == "run_id"
        assert fields[0].mode == "REQUIRED"
        order_ids = next(f for f in fields if f.name == "order_ids")
        assert order_ids.mode == "REPEATED"

    def test_job_config_is_append_only_with_pinned_schema(self):
        config = BigQueryLoader("analytics", client=MagicMock()).build_job_config(
            DELIVERY_RUNS_TABLE_SCHEMA
        )

        assert config.source_format == bigquery.SourceFormat.NEWLINE_DELIMITED_JSON
        assert config.write_disposition == bigquery.WriteDisposition.WRITE_APPEND
        assert config.autodetect is False
        assert [f.name for f in config.schema] == [c.name for c in DELIVERY_RUNS_TABLE_SCHEMA]

    @pytest.mark.asyncio
    async def test_submit_returns_without_waiting(self):
        client = MagicMock()
        client.load_table_from_uri.return_value.job_id = "job_123"
        loader = BigQueryLoader("analytics", project="proj", client=client)

        handle = await loader.submit_append_load(
            "gs://b/delivery_runs_sync/sync_1.ndjson", "delivery_runs", DELIVERY_RUNS_TABLE_SCHEMA
        )

        assert handle.job_id == "job_123"
        assert handle.table_id == "proj.analytics.delivery_runs"
        args, kwargs = client.load_table_from_uri.call_args
        assert args == ("gs://b/delivery_runs_sync/sync_1.ndjson", "proj.analytics.delivery_runs")
        assert kwargs["job_config"].write_disposition == bigquery.WriteDisposition.WRITE_APPEND
        client.load_table_from_uri.return_value.result.assert_not_called()

    @pytest.mark.asyncio
    async def test_submit_failure_wrapped(self):
        client = MagicMock()
        client.load_table_from_uri.side_effect = RuntimeError("quota exceeded")
        loader = BigQueryLoader("analytics", client=client)

        with pytest.raises(LoadSubmissionError) as exc_info:
            await loader.submit_append_load("gs://b/x.ndjson", "orders", DELIVERY_RUNS_TABLE_SCHEMA)

        assert exc_info.value.context["table_id"] == "analytics.orders"
