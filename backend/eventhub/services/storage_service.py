"""
Event image uploads through the remote `upload-to-b2` storage function.

The function receives multipart form data (file, filename, contentType) and
answers with {"publicUrl": "..."}. Objects are keyed as

    events/{event_id}/{unix_millis}-{sanitized_filename}
"""

import re
import time
import uuid
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from eventhub.core.config import get_settings
from eventhub.core.logging import get_logger
from eventhub.core.metrics import record_image_upload
from eventhub.schemas.results import UploadResult
from eventhub.services.error_policy import ErrorTier, StoreError, handle_errors

logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "image/jpeg"
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


@dataclass(frozen=True)
class ImageFile:
    filename: str
    content: bytes
    content_type: Optional[str] = None


def sanitize_filename(filename: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("-", filename)


def build_storage_key(event_id: uuid.UUID | str, filename: str, timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"events/{event_id}/{timestamp_ms}-{sanitize_filename(filename)}"


class StorageFunctionClient:
    """HTTP client for the remote storage functions."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers = {"X-Service-Name": "event-hub-api"}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
                headers["apikey"] = self.api_key
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def invoke(self, function_name: str, *, data: dict[str, str], files: dict[str, Any]) -> Any:
        """POST multipart data to a named function and return its JSON body."""
        client = await self._get_client()
        response = await client.post(f"/{function_name}", data=data, files=files)
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


_storage_client: Optional[StorageFunctionClient] = None


def get_storage_client() -> StorageFunctionClient:
    global _storage_client
    if _storage_client is None:
        settings = get_settings()
        _storage_client = StorageFunctionClient(
            base_url=settings.FUNCTIONS_BASE_URL,
            api_key=settings.FUNCTIONS_API_KEY,
            timeout=settings.FUNCTIONS_TIMEOUT,
        )
    return _storage_client


async def close_storage_client() -> None:
    global _storage_client
    if _storage_client is not None:
        await _storage_client.close()
        _storage_client = None


def _upload_failed(message: str) -> UploadResult:
    record_image_upload(success=False)
    return UploadResult.fail(message)


@handle_errors(ErrorTier.SURFACED, _upload_failed)
async def upload_event_image(
    storage: StorageFunctionClient,
    image: ImageFile,
    event_id: uuid.UUID,
) -> UploadResult:
    """Upload an image for an event and return its public URL."""
    key = build_storage_key(event_id, image.filename)
    content_type = image.content_type or DEFAULT_CONTENT_TYPE

    body = await storage.invoke(
        get_settings().UPLOAD_FUNCTION_NAME,
        data={"filename": key, "contentType": content_type},
        files={"file": (image.filename, image.content, content_type)},
    )

    public_url = body.get("publicUrl") if isinstance(body, dict) else None
    if not public_url:
        logger.error("upload_missing_url", event_id=str(event_id), response=body)
        raise StoreError("No URL returned from storage")

    record_image_upload(success=True)
    logger.info("event_image_uploaded", event_id=str(event_id), key=key)
    return UploadResult(url=public_url)
