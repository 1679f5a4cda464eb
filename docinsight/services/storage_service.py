"""Storage service for handling Supabase storage operations."""

from typing import Any, Dict, List, Optional

import httpx

from docinsight.core.exceptions import StorageError, StorageNotFoundError
from docinsight.utils.logging import get_logger

LOGGER = get_logger(__name__)


class StorageService:
    """Service for managing files in a Supabase storage bucket."""

    def __init__(
        self,
        url: str,
        service_role_key: str,
        bucket: str = "documents",
        timeout: int = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url.rstrip("/")
        self.bucket = bucket
        self.timeout = timeout
        self.transport = transport
        self.base_api_url = f"{self.url}/storage/v1"
        self.headers = {
            "Authorization": f"Bearer {service_role_key}",
            "apikey": service_role_key,
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def upload_file(
        self,
        path: str,
        content: bytes,
        content_type: str = "application/pdf",
    ) -> Dict[str, Any]:
        """Upload bytes to the bucket without overwriting.

        Args:
            path: Target path within the bucket.
            content: File content.
            content_type: MIME type sent with the object.

        Returns:
            Dict containing the upload result.

        Raises:
            StorageError: If the upload fails.
        """
        upload_url = f"{self.base_api_url}/object/{self.bucket}/{path}"

        try:
            async with self._client() as client:
                response = await client.post(
                    upload_url,
                    headers={**self.headers, "Content-Type": content_type, "x-upsert": "false"},
                    content=content,
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error uploading file to Supabase: {str(e)}", exc_info=True)
            raise StorageError(f"Storage upload error: {str(e)}", original_error=e) from e

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to upload file to Supabase: {response.text}",
                extra={"bucket": self.bucket, "path": path, "status_code": response.status_code}
            )
            raise StorageError(f"Upload failed: {response.text}")

        return response.json()

    async def download_file(self, path: str) -> bytes:
        """Download an object's bytes.

        Raises:
            StorageNotFoundError: If the object does not exist.
            StorageError: For any other failure.
        """
        download_url = f"{self.base_api_url}/object/{self.bucket}/{path}"

        try:
            async with self._client() as client:
                response = await client.get(download_url, headers=self.headers)
        except httpx.HTTPError as e:
            LOGGER.error(f"Error downloading file from Supabase: {str(e)}", exc_info=True)
            raise StorageError(f"Storage download error: {str(e)}", original_error=e) from e

        # Supabase reports missing objects as 400 with a not_found body on some versions
        if response.status_code == 404 or (
            response.status_code == 400 and "not_found" in response.text
        ):
            raise StorageNotFoundError(f"Object not found: {path}")

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to download file from Supabase: {response.text}",
                extra={"bucket": self.bucket, "path": path, "status_code": response.status_code}
            )
            raise StorageError(f"Download failed: {response.text}")

        return response.content

    async def remove_files(self, paths: List[str]) -> None:
        """Delete objects from the bucket.

        Raises:
            StorageError: If the delete request fails.
        """
        remove_url = f"{self.base_api_url}/object/{self.bucket}"

        try:
            async with self._client() as client:
                response = await client.request(
                    "DELETE",
                    remove_url,
                    headers=self.headers,
                    json={"prefixes": paths},
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error removing files from Supabase: {str(e)}", exc_info=True)
            raise StorageError(f"Storage remove error: {str(e)}", original_error=e) from e

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to remove files from Supabase: {response.text}",
                extra={"bucket": self.bucket, "paths": paths, "status_code": response.status_code}
            )
            raise StorageError(f"Remove failed: {response.text}")
