"""Object storage for digest audio."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

import httpx

from ..errors import AppError, ErrorCode

logger = logging.getLogger(__name__)


class ObjectStorage(ABC):
    """Bucket/key blob storage with public URLs."""

    @abstractmethod
    async def upload(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str,
        overwrite: bool = False,
    ) -> None:
        """
        Store bytes under bucket/key.

        Raises:
            AppError(UPLOAD_FAILED)
        """

    @abstractmethod
    def get_public_url(self, bucket: str, key: str) -> str:
        pass


class SupabaseStorage(ObjectStorage):
    """Supabase Storage over its REST API."""

    def __init__(
        self,
        url: Optional[str],
        service_key: Optional[str],
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = (url or "").rstrip("/")
        self.service_key = service_key
        self.timeout = timeout
        self.transport = transport

    async def upload(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str,
        overwrite: bool = False,
    ) -> None:
        if not self.url or not self.service_key:
            raise AppError("Supabase URL or service key is not set", ErrorCode.CONFIG_MISSING)

        headers = {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Content-Type": content_type,
            "x-upsert": "true" if overwrite else "false",
        }
        upload_url = f"{self.url}/storage/v1/object/{bucket}/{key}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(upload_url, headers=headers, content=data)
        except httpx.HTTPError as e:
            raise AppError(f"Upload failed: {e}", ErrorCode.UPLOAD_FAILED, is_retryable=True) from e

        if not response.is_success:
            raise AppError(
                f"Upload failed ({response.status_code}): {response.text}",
                ErrorCode.UPLOAD_FAILED,
                is_retryable=response.status_code >= 500,
            )

        logger.debug("Uploaded %d bytes to %s/%s", len(data), bucket, key)

    def get_public_url(self, bucket: str, key: str) -> str:
        return f"{self.url}/storage/v1/object/public/{bucket}/{key}"


class MemoryObjectStorage(ObjectStorage):
    """In-memory storage for tests and dry runs."""

    def __init__(self, base_url: str = "memory://storage") -> None:
        self.base_url = base_url
        self.objects: Dict[Tuple[str, str], Tuple[bytes, str]] = {}

    async def upload(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str,
        overwrite: bool = False,
    ) -> None:
        if (bucket, key) in self.objects and not overwrite:
            raise AppError(f"Object {bucket}/{key} already exists", ErrorCode.UPLOAD_FAILED)
        self.objects[(bucket, key)] = (data, content_type)

    def get_public_url(self, bucket: str, key: str) -> str:
        return f"{self.base_url}/{bucket}/{key}"
