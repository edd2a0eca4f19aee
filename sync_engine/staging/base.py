"""
Abstract object storage used to hand batch files to the warehouse
"""

from abc import ABC, abstractmethod


class StagingStore(ABC):
    """
    Write-once, read-once blob storage for staged NDJSON batches.

    Each staged object lives for one batch sync invocation: uploaded, read by
    the warehouse load job, then deleted.
    """

    @abstractmethod
    async def upload(self, local_path: str, object_name: str) -> str:
        """
        Upload a local file.

        Returns:
            URI the warehouse can load from

        Raises:
            StagingUploadError: If the upload fails
        """
        pass

    @abstractmethod
    async def delete(self, object_name: str) -> None:
        """Delete an uploaded object; deleting a missing object is not an error"""
        pass

    @abstractmethod
    def uri(self, object_name: str) -> str:
        pass
