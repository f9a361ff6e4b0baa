"""Media storage integration for user images.

Incoming files are first written to a local temp directory, then pushed to
Cloudinary. The temp file is removed once the upload attempt finishes,
whatever its outcome.
"""

import hashlib
import logging
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx
from fastapi import UploadFile

from src.config import Settings, get_settings
from src.exceptions import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


@dataclass(frozen=True)
class MediaUpload:
    """Result of a successful upload."""

    url: str


async def save_upload(upload: UploadFile, settings: Settings | None = None) -> Path:
    """Write an incoming image upload to the temp directory and return its path."""
    settings = settings or get_settings()

    if upload.content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError(
            f"Invalid file type. Allowed types: {', '.join(sorted(ALLOWED_IMAGE_TYPES))}"
        )

    data = await upload.read()
    if not data:
        raise ValidationError(f"Uploaded file '{upload.filename}' is empty")
    if len(data) > settings.max_upload_bytes:
        raise ValidationError(
            f"File too large. Maximum size is {settings.max_upload_bytes // (1024 * 1024)}MB."
        )

    settings.upload_temp_dir.mkdir(parents=True, exist_ok=True)
    filename = Path(upload.filename or "upload").name
    path = settings.upload_temp_dir / f"{uuid.uuid4().hex}-{filename}"
    path.write_bytes(data)
    return path


class MediaStorageService:
    """Client for the Cloudinary upload API."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.timeout = self.settings.media_upload_timeout_seconds
        self._transport = transport

    @property
    def upload_url(self) -> str:
        return (
            f"{self.settings.cloudinary_base_url.rstrip('/')}/"
            f"{self.settings.cloudinary_cloud_name}/auto/upload"
        )

    def _sign(self, params: dict[str, Any]) -> str:
        """Compute the Cloudinary request signature for the given params."""
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1(  # noqa: S324
            f"{to_sign}{self.settings.cloudinary_api_secret}".encode()
        ).hexdigest()

    async def upload(self, local_path: Path | str | None) -> MediaUpload | None:
        """Upload a local file and return its public URL, or None on failure.

        A single attempt is made, bounded by the configured timeout.
        """
        if not local_path:
            return None

        path = Path(local_path)
        try:
            if not self.settings.media_storage_configured:
                logger.error("Media storage credentials are not configured")
                return None

            params = {"timestamp": int(time.time())}
            form = {
                **{key: str(value) for key, value in params.items()},
                "api_key": self.settings.cloudinary_api_key,
                "signature": self._sign(params),
            }

            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.upload_url,
                    data=form,
                    files={"file": (path.name, path.read_bytes())},
                )
                response.raise_for_status()
                data = response.json()

            url = data.get("secure_url") or data.get("url")
            if not url:
                logger.error(f"Media upload response for {path.name} had no URL")
                return None

            logger.info(f"Uploaded {path.name} to media storage")
            return MediaUpload(url=url)
        except httpx.HTTPError as e:
            logger.error(f"HTTP error uploading {path.name} to media storage: {e}")
            return None
        except (OSError, ValueError) as e:
            logger.error(f"Failed to upload {path.name} to media storage: {e}")
            return None
        finally:
            path.unlink(missing_ok=True)
