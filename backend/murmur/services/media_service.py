"""
Murmur Backend — Media Storage Service
========================================

What:  Decodes and validates client images, then stores them on the media host.
How:   `decode_image()` turns a base64 data URI into checked bytes; a MediaStore
       implementation persists them and returns a stable URL.
Who:   PostService (post images) and UserService (profile / cover images).

Input format:
    data:<mime>;base64,<payload>   e.g. data:image/png;base64,iVBORw0KGgo...

Validation order (cheapest first):
    1. Data URI shape
    2. Declared MIME type in the allow-list
    3. Base64 decoding
    4. Decoded size (empty / over settings.max_image_size)
    5. Actual MIME type from magic bytes (python-magic)

Stores:
    LocalMediaStore: date-organised files under STORAGE_ROOT written with
                      aiofiles, served back by GET /api/media/{path}
    S3MediaStore:    any S3-compatible host through boto3; calls are retried
                      with tenacity (exponential backoff + jitter) on
                      transient connection errors
"""

import asyncio
import base64
import binascii
import logging
import os
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
import aiofiles.os
import boto3
from botocore.client import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    ConnectionClosedError,
    EndpointConnectionError,
    ReadTimeoutError,
)
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from murmur.config import settings
from murmur.exceptions import MediaStorageError, ValidationError
from murmur.services.media_base import MediaStore

logger = logging.getLogger(__name__)

# ── Allowed Image Types ───────────────────────────────────────────────────
ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<payload>.+)$", re.DOTALL)

# Connection-level failures worth another attempt; ClientErrors (auth,
# missing bucket) are not retried.
TRANSIENT_S3_ERRORS = (
    EndpointConnectionError,
    ConnectionClosedError,
    ConnectTimeoutError,
    ReadTimeoutError,
)


@dataclass(frozen=True)
class ImagePayload:
    """A decoded, validated image ready to be stored."""
    content: bytes
    mime_type: str
    extension: str


def _detect_mime_type(content: bytes, declared: str) -> str:
    """
    Inspect magic bytes to find the real content type.

    Falls back to the declared type when libmagic is not installed
    (e.g. minimal CI images).
    """
    try:
        import magic
    except ImportError:
        logger.warning(
            "python-magic not available, trusting declared image type '%s'. "
            "Install libmagic for content sniffing.",
            declared,
        )
        return declared
    return magic.from_buffer(content, mime=True)


def decode_image(data_uri: str) -> ImagePayload:
    """
    Validate a base64 data URI and return its bytes.

    Raises:
        ValidationError: with field="img" for every rejection reason
    """
    match = _DATA_URI_RE.match(data_uri.strip())
    if not match:
        raise ValidationError(
            message="Image must be a base64 data URI (data:image/...;base64,...)",
            field="img",
        )

    declared = match.group("mime").lower()
    if declared not in ALLOWED_MIME_TYPES:
        raise ValidationError(
            message=f"Image type '{declared}' is not supported. Allowed: png, jpeg, gif, webp",
            field="img",
            context={"declared_mime": declared},
        )

    try:
        content = base64.b64decode(match.group("payload"), validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError(message="Image payload is not valid base64", field="img")

    if not content:
        raise ValidationError(message="Image is empty", field="img")

    if len(content) > settings.max_image_size:
        max_mb = settings.max_image_size / (1024 * 1024)
        raise ValidationError(
            message=f"Image exceeds the maximum size of {max_mb:.0f}MB",
            field="img",
            context={"size": len(content), "max_size": settings.max_image_size},
        )

    detected = _detect_mime_type(content, declared)
    if detected not in ALLOWED_MIME_TYPES:
        raise ValidationError(
            message="Image content does not match a supported image type",
            field="img",
            context={"detected_mime": detected},
        )

    return ImagePayload(content=content, mime_type=detected, extension=ALLOWED_MIME_TYPES[detected])


# ══════════════════════════════════════════════════════════════════════════
# Local Disk Store
# ══════════════════════════════════════════════════════════════════════════

class LocalMediaStore(MediaStore):
    """
    Stores images on local disk.

    Directory Structure:
        storage/
        └── 2026/
            └── 10/
                └── 19/
                    ├── a1b2c3d4-....jpg
                    └── e5f6g7h8-....png

    URL: <media_url_prefix>/2026/10/19/a1b2c3d4-....jpg
    """

    def __init__(self, storage_root: Optional[str] = None, url_prefix: Optional[str] = None):
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.url_prefix = (url_prefix or settings.media_url_prefix).rstrip("/")
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("LocalMediaStore initialized with storage_root=%s", self.storage_root)

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """Returns (absolute_path, relative_path) for a new YYYY/MM/DD/<uuid><ext> file."""
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        relative_path = f"{date_dir}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    def resolve(self, relative_path: str) -> Optional[Path]:
        """
        Map a relative media path to a file inside storage_root.

        Returns None for paths escaping the root (../) and for missing files.
        """
        candidate = (self.storage_root / relative_path).resolve()
        if not candidate.is_relative_to(self.storage_root):
            return None
        if not candidate.is_file():
            return None
        return candidate

    async def upload(self, data_uri: str) -> str:
        image = decode_image(data_uri)
        absolute_path, relative_path = self._generate_storage_path(image.extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(image.content)
        except OSError as e:
            logger.error("Failed to store image at %s: %s", absolute_path, str(e))
            raise MediaStorageError(
                message="Failed to save image. Please try again.",
                context={"path": relative_path, "os_error": str(e)},
            )

        logger.info("Image stored: %s (%d bytes)", relative_path, len(image.content))
        return f"{self.url_prefix}/{relative_path}"

    async def delete(self, url: str) -> bool:
        prefix = f"{self.url_prefix}/"
        if not url.startswith(prefix):
            logger.debug("Not a local media URL, skipping delete: %s", url)
            return False

        path = self.resolve(url[len(prefix):])
        if path is None:
            logger.debug("Delete: image already gone: %s", url)
            return False

        try:
            await aiofiles.os.remove(path)
        except OSError as e:
            logger.warning("Failed to delete image %s: %s", path.name, str(e))
            return False
        logger.info("Deleted image: %s", path.name)
        return True

    async def health_check(self) -> bool:
        return self.storage_root.is_dir() and os.access(self.storage_root, os.W_OK)


# ══════════════════════════════════════════════════════════════════════════
# S3-Compatible Store
# ══════════════════════════════════════════════════════════════════════════

class S3MediaStore(MediaStore):
    """
    Stores images in an S3-compatible bucket (AWS S3, MinIO, R2, ...).

    Keys:   images/<uuid><ext>
    URL:    <public base>/<bucket>/<key>, where the public base is
            S3_PUBLIC_URL, else S3_ENDPOINT_URL; on plain AWS (no endpoint)
            https://<bucket>.s3.<region>.amazonaws.com/<key>

    boto3 is synchronous; calls run in a worker thread so the event loop
    is never blocked.
    """

    KEY_PREFIX = "images"

    def __init__(self, client=None, bucket: Optional[str] = None):
        self.bucket = bucket or settings.s3_bucket
        self._client = client or boto3.client(
            "s3",
            endpoint_url=settings.s3_endpoint_url,
            aws_access_key_id=settings.s3_access_key or None,
            aws_secret_access_key=settings.s3_secret_key or None,
            region_name=settings.s3_region,
            config=Config(signature_version="s3v4"),
        )

        public_base = settings.s3_public_url or settings.s3_endpoint_url
        if public_base:
            self.url_base = f"{public_base.rstrip('/')}/{self.bucket}"
        else:
            self.url_base = f"https://{self.bucket}.s3.{settings.s3_region}.amazonaws.com"
        logger.info("S3MediaStore initialized with bucket=%s url_base=%s", self.bucket, self.url_base)

    def key_from_url(self, url: str) -> Optional[str]:
        """Object key for a URL this store issued, else None."""
        prefix = f"{self.url_base}/"
        if not url.startswith(prefix):
            return None
        return url[len(prefix):] or None

    @retry(
        retry=retry_if_exception_type(TRANSIENT_S3_ERRORS),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential(multiplier=settings.retry_min_wait, max=settings.retry_max_wait)
        + wait_random(0, 1),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _put_object(self, key: str, image: ImagePayload) -> None:
        await asyncio.to_thread(
            self._client.put_object,
            Bucket=self.bucket,
            Key=key,
            Body=image.content,
            ContentType=image.mime_type,
            CacheControl="public, max-age=31536000, immutable",
        )

    @retry(
        retry=retry_if_exception_type(TRANSIENT_S3_ERRORS),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential(multiplier=settings.retry_min_wait, max=settings.retry_max_wait)
        + wait_random(0, 1),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _delete_object(self, key: str) -> None:
        await asyncio.to_thread(self._client.delete_object, Bucket=self.bucket, Key=key)

    async def upload(self, data_uri: str) -> str:
        image = decode_image(data_uri)
        key = f"{self.KEY_PREFIX}/{uuid.uuid4()}{image.extension}"

        try:
            await self._put_object(key, image)
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 upload failed for %s: %s", key, str(e))
            raise MediaStorageError(
                context={"key": key, "error_type": type(e).__name__},
            )

        logger.info("Image uploaded to s3://%s/%s (%d bytes)", self.bucket, key, len(image.content))
        return f"{self.url_base}/{key}"

    async def delete(self, url: str) -> bool:
        key = self.key_from_url(url)
        if key is None:
            logger.debug("Not an URL of bucket %s, skipping delete: %s", self.bucket, url)
            return False
        try:
            await self._delete_object(key)
        except (BotoCoreError, ClientError) as e:
            logger.warning("S3 delete failed for %s: %s", key, str(e))
            return False
        logger.info("Deleted s3://%s/%s", self.bucket, key)
        return True

    async def health_check(self) -> bool:
        try:
            await asyncio.to_thread(self._client.head_bucket, Bucket=self.bucket)
            return True
        except (BotoCoreError, ClientError) as e:
            logger.warning("S3 health check failed: %s", str(e))
            return False


def build_media_store() -> MediaStore:
    """Create the store selected by settings.media_backend."""
    if settings.media_backend == "s3":
        return S3MediaStore()
    return LocalMediaStore()
