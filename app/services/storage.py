"""
Object storage for report images.

put() stores bytes with public read access and returns the public URL.
Firebase Storage is used in production; the in-memory variant backs
USE_MOCK_DB mode and tests.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

from firebase_admin import storage

from app.core.errors import UploadFailed

logger = logging.getLogger(__name__)


class ObjectStorage(ABC):

    @abstractmethod
    def put(self, path: str, data: bytes, content_type: str, public: bool = True) -> str:
        """Store bytes and return their public URL. Raises UploadFailed."""
        raise NotImplementedError


class FirebaseObjectStorage(ObjectStorage):
    """Firebase Storage bucket (FIREBASE_STORAGE_BUCKET)."""

    def __init__(self, bucket_name: Optional[str], timeout: float = 30.0):
        self.bucket_name = bucket_name
        self.timeout = timeout

    def put(self, path: str, data: bytes, content_type: str, public: bool = True) -> str:
        if not self.bucket_name:
            raise UploadFailed(
                "Image storage is not configured: FIREBASE_STORAGE_BUCKET is missing",
                reason=UploadFailed.NOT_CONFIGURED,
            )

        try:
            blob = storage.bucket(self.bucket_name).blob(path)
            blob.upload_from_string(data, content_type=content_type, timeout=self.timeout)
            if public:
                blob.make_public()
        except ValueError as e:
            # firebase_admin raises ValueError when the app is not initialized
            raise UploadFailed(f"Image storage is not configured: {e}", reason=UploadFailed.NOT_CONFIGURED) from e
        except Exception as e:
            logger.error(f"Upload to {self.bucket_name}/{path} failed: {e}", exc_info=True)
            raise UploadFailed(f"Image upload failed: {e}", reason=UploadFailed.STORAGE_ERROR) from e

        logger.info(f"Uploaded {len(data)} bytes to {self.bucket_name}/{path}")
        return blob.public_url


class InMemoryObjectStorage(ObjectStorage):

    def __init__(self, base_url: str = "memory://reports-bucket"):
        self.base_url = base_url.rstrip("/")
        self.objects: Dict[str, Tuple[bytes, str]] = {}

    def put(self, path: str, data: bytes, content_type: str, public: bool = True) -> str:
        self.objects[path] = (data, content_type)
        return f"{self.base_url}/{path}"
