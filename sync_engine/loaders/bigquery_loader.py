"""
BigQuery bulk loader (append-only, explicit schema)
"""

from typing import List, Optional, Sequence
import asyncio
import logging

from google.cloud import bigquery

from core.exceptions import LoadSubmissionError
from schemas.warehouse import ColumnSpec
from sync_engine.loaders.base import LoadJobHandle, WarehouseLoader

logger = logging.getLogger(__name__)


def to_schema_fields(schema: Sequence[ColumnSpec]) -> List[bigquery.SchemaField]:
    return [
        bigquery.SchemaField(column.name, column.field_type, mode=column.mode)
        for column in schema
    ]


class BigQueryLoader(WarehouseLoader):
    """
    Submit NDJSON load jobs into BigQuery.

    Ensures:
    - WRITE_APPEND only; rows are never overwritten or merged
    - No schema auto-detection; the table schema is always declared
    - Fire-and-forget: returns once the job is created
    """

    def __init__(
        self,
        dataset: str,
        project: Optional[str] = None,
        client: Optional[bigquery.Client] = None
    ):
        self.dataset = dataset
        self.project = project
        self._client = client

    @property
    def client(self) -> bigquery.Client:
        # Created lazily; no credentials are needed until first use
        if self._client is None:
            self._client = bigquery.Client(project=self.project)
        return self._client

    def table_ref(self, table_id: str) -> str:
        if self.project:
            return f"{self.project}.{self.dataset}.{table_id}"
        return f"{self.dataset}.{table_id}"

    def build_job_config(self, schema: Sequence[ColumnSpec]) -> bigquery.LoadJobConfig:
        return bigquery.LoadJobConfig(
            source_format=bigquery.SourceFormat.NEWLINE_DELIMITED_JSON,
            write_disposition=bigquery.WriteDisposition.WRITE_APPEND,
            autodetect=False,
            schema=to_schema_fields(schema),
        )

    async def submit_append_load(
        self,
        source_uri: str,
        table_id: str,
        schema: Sequence[ColumnSpec],
    ) -> LoadJobHandle:
        destination = self.table_ref(table_id)

        try:
            job = await asyncio.to_thread(
                self.client.load_table_from_uri,
                source_uri,
                destination,
                job_config=self.build_job_config(schema),
            )
        except Exception as e:
            raise LoadSubmissionError(
                "Warehouse rejected load job",
                context={"table_id": destination, "source_uri": source_uri},
                original_exception=e
            )

        logger.info(f"Load job {job.job_id} submitted: {source_uri} -> {destination}")
        return LoadJobHandle(
            job_id=job.job_id,
            table_id=destination,
            source_uri=source_uri,
            location=getattr(job, "location", None),
        )
