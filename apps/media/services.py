"""
Image Upload Gateway
Signed uploads to the image CDN. Failures are non-fatal: callers get None.
"""

from __future__ import annotations

import hashlib
import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass
from typing import IO, Any

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_MULTIPLE_CHOICES = 300

DEFAULT_FOLDER = 'ecommerce'
UPLOAD_URL_TEMPLATE = 'https://api.cloudinary.com/v1_1/{cloud_name}/image/upload'


@dataclass(frozen=True)
class UploadedImage:
    url: str
    public_id: str
    width: int | None = None
    height: int | None = None


def sign_upload(folder: str, timestamp: int, api_secret: str) -> str:
    """SHA-1 signature over the sorted upload params followed by the secret"""
    payload = f"folder={folder}&timestamp={timestamp}{api_secret}"
    return hashlib.sha1(payload.encode('utf-8')).hexdigest()  # noqa: S324 # CDN-mandated digest


class ImageUploadService:
    """Uploads images to the CDN with server-held credentials"""

    def __init__(self) -> None:
        self.cloud_name = settings.CLOUDINARY_CLOUD_NAME
        self.api_key = settings.CLOUDINARY_API_KEY
        self.api_secret = settings.CLOUDINARY_API_SECRET
        self.timeout = settings.STORE_API_TIMEOUT

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def upload_image(self, file: IO[bytes] | Any, folder: str = DEFAULT_FOLDER) -> UploadedImage | None:
        if not self.is_configured:
            logger.error("🔥 [Media] Image CDN credentials not configured")
            return None

        timestamp = int(time.time())
        data = {
            'folder': folder,
            'api_key': self.api_key,
            'timestamp': str(timestamp),
            'signature': sign_upload(folder, timestamp, self.api_secret),
        }
        filename = getattr(file, 'name', None) or 'upload'
        content_type = getattr(file, 'content_type', None) or 'application/octet-stream'

        try:
            response = requests.post(
                UPLOAD_URL_TEMPLATE.format(cloud_name=self.cloud_name),
                data=data,
                files={'file': (filename, file, content_type)},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"🔥 [Media] Upload of {filename} failed: {e}")
            return None

        if not HTTP_OK <= response.status_code < HTTP_MULTIPLE_CHOICES:
            logger.error(f"🔥 [Media] CDN rejected {filename}: {response.status_code} {response.text[:200]}")
            return None

        try:
            result = response.json()
            image = UploadedImage(
                url=result['secure_url'],
                public_id=result['public_id'],
                width=result.get('width'),
                height=result.get('height'),
            )
        except (ValueError, KeyError) as e:
            logger.error(f"🔥 [Media] Unexpected CDN response for {filename}: {e}")
            return None

        logger.info(f"✅ [Media] Uploaded {filename} to {folder} as {image.public_id}")
        return image

    def upload_images(self, files: Iterable[Any], folder: str = DEFAULT_FOLDER) -> list[UploadedImage]:
        """Upload several files; failed uploads are dropped"""
        uploaded = []
        for file in files:
            image = self.upload_image(file, folder=folder)
            if image is not None:
                uploaded.append(image)
        return uploaded
