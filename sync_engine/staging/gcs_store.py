"""
Google Cloud Storage staging store
"""

from typing import Optional
import asyncio
import logging

from google.api_core.exceptions import NotFound
from google.cloud import storage

from core.exceptions import StagingUploadError
from sync_engine.staging.base import StagingStore
from sync_engine.staging.ndjson import NDJSON_CONTENT_TYPE

logger = logging.getLogger(__name__)


class GCSStagingStore(StagingStore):
    """Stage batch files in a GCS bucket"""

    def __init__(
        self,
        bucket_name: str,
        project: Optional[str] = None,
        client: Optional[storage.Client] = None
    ):
        self.bucket_name = bucket_name
        self.project = project
        self._client = client

    @property
    def client(self) -> storage.Client:
        # Created lazily; no credentials are needed until first use
        if self._client is None:
            self._client = storage.Client(project=self.project)
        return self._client

    def uri(self, object_name: str) -> str:
        return f"gs://{self.bucket_name}/{object_name}"

    async def upload(self, local_path: str, object_name: str) -> str:
        try:
            blob = self.client.bucket(self.bucket_name).blob(object_name)
            # Blocking client call
            await asyncio.to_thread(
                blob.upload_from_filename, local_path, content_type=NDJSON_CONTENT_TYPE
            )
        except Exception as e:
            raise StagingUploadError(
                "Failed to upload batch file",
                context={"bucket": self.bucket_name, "object_name": object_name},
                original_exception=e
            )

        logger.info(f"Uploaded {local_path} to {self.uri(object_name)}")
        return self.uri(object_name)

    async def delete(self, object_name: str) -> None:
        blob = self.client.bucket(self.bucket_name).blob(object_name)
        try:
            await asyncio.to_thread(blob.delete)
        except NotFound:
            logger.debug(f"Staged object {self.uri(object_name)} already deleted")
            return
        logger.info(f"Deleted staged object {self.uri(object_name)}")
