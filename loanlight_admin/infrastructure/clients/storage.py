"""Blob storage client: upload files to a bucket and resolve their public URLs"""

import logging
import secrets
import string
import time
from typing import Optional

import httpx

from loanlight_admin.config import settings
from loanlight_admin.domain.exceptions import GatewayError, GatewayTimeoutError

logger = logging.getLogger(__name__)

_ALPHABET = string.ascii_lowercase + string.digits


def unique_file_name(original_name: str) -> str:
    """Random name that keeps the original extension: <13 random chars>_<epoch ms>.<ext>"""
    extension = original_name.rsplit(".", 1)[-1] if "." in original_name else "bin"
    token = "".join(secrets.choice(_ALPHABET) for _ in range(13))
    return f"{token}_{int(time.time() * 1000)}.{extension}"


class StorageClient:
    """Client for the backend's object storage API"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.supabase_key
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{path}"

    async def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        """
        Upload (upsert) an object and return its stored key.

        Raises:
            GatewayError: On timeout, HTTP errors, or network failure
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/storage/v1/object/{bucket}/{path}",
                    content=content,
                    headers={
                        "apikey": self.api_key,
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": content_type,
                        "cache-control": "max-age=3600",
                        "x-upsert": "true",
                    },
                )
                response.raise_for_status()
            except httpx.TimeoutException as e:
                raise GatewayTimeoutError(f"Storage timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise GatewayError(f"Storage error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise GatewayError(f"Storage unreachable: {e}") from e

        return path

    async def upload_file(
        self,
        filename: str,
        content: bytes,
        bucket: str,
        folder: str | None = None,
        content_type: str = "application/octet-stream",
    ) -> Optional[str]:
        """
        Store a user-supplied file under a unique name.

        Returns:
            Public URL of the stored file, or None if the upload failed
        """
        name = unique_file_name(filename)
        path = f"{folder}/{name}" if folder else name
        try:
            stored = await self.upload(bucket, path, content, content_type)
        except GatewayError as e:
            logger.error(f"Error uploading file: {e}", extra={"bucket": bucket, "path": path})
            return None
        return self.public_url(bucket, stored)
