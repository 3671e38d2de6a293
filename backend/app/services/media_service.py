"""
Employee photo handling.

A photo reference is either an already-hosted URL or inline image data
(typically a base64 data URL). Inline data is uploaded to Cloudinary and
replaced by the hosted URL; hosted URLs pass through untouched so feeding a
stored value back into an update never re-uploads it.
"""

import hashlib
import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, Optional

import httpx

from app.core.config import settings
from app.core.errors import OperationError

logger = logging.getLogger(__name__)


def is_remote_url(ref: str) -> bool:
    return ref.startswith("http://") or ref.startswith("https://")


class UploadError(Exception):
    """The image hosting service could not store a photo."""


class PhotoUploader(ABC):
    @abstractmethod
    async def upload(self, data: str) -> str:
        """Store inline image data and return its durable URL."""


class CloudinaryUploader(PhotoUploader):
    """
    Signed uploads through the Cloudinary REST API.

    API Documentation: https://cloudinary.com/documentation/image_upload_api_reference
    """

    API_BASE_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        folder: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "CloudinaryUploader":
        return cls(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            folder=settings.CLOUDINARY_FOLDER,
            timeout=settings.UPLOAD_TIMEOUT_SECONDS,
        )

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def sign(self, params: Dict[str, str]) -> str:
        """SHA-1 over the alphabetically sorted params followed by the API secret."""
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode("utf-8")).hexdigest()

    async def upload(self, data: str) -> str:
        if not self.configured:
            raise UploadError("Cloudinary credentials are not configured")

        params = {"folder": self.folder, "timestamp": str(int(time.time()))}
        form = {
            **params,
            "file": data,
            "api_key": self.api_key,
            "signature": self.sign(params),
        }
        url = self.API_BASE_URL.format(cloud_name=self.cloud_name)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, data=form)
        except httpx.HTTPError as e:
            raise UploadError(f"Cloudinary request failed: {e}") from e

        if response.status_code >= 400:
            raise UploadError(f"Cloudinary returned {response.status_code}: {response.text[:200]}")

        try:
            secure_url = response.json().get("secure_url")
        except ValueError as e:
            raise UploadError("Cloudinary returned a non-JSON response") from e
        if not secure_url:
            raise UploadError("Cloudinary response did not include secure_url")

        logger.info(f"Uploaded employee photo to {secure_url}")
        return secure_url


class PhotoResolver:
    """Turn a photo reference into a hosted URL, uploading only when needed."""

    def __init__(self, uploader: PhotoUploader):
        self.uploader = uploader

    async def resolve(self, ref: Optional[str]) -> Optional[str]:
        if not ref:
            return None
        if is_remote_url(ref):
            return ref
        try:
            return await self.uploader.upload(ref)
        except UploadError as e:
            raise OperationError.upstream(str(e)) from e
