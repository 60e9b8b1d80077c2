"""
Media Ingestion - decode inline images and persist them to object storage.

Images arrive as data URLs (data:image/jpeg;base64,...). Each one is decoded,
given a collision-resistant storage path and stored with public read access.
Any failure is fatal to the enclosing operation (UploadFailed); nothing is
retried here.
"""

import base64
import binascii
import logging
import re
import secrets
import time
from typing import Dict, List, Optional, Tuple

from app.core.errors import UploadFailed
from app.services.storage import ObjectStorage

logger = logging.getLogger(__name__)

MIME_EXTENSIONS: Dict[str, str] = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/pjpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}
DEFAULT_EXTENSION = "img"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^;,]*)*),(?P<payload>.*)$", re.DOTALL)
UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def is_data_url(value: str) -> bool:
    return isinstance(value, str) and value.startswith("data:")


def extension_for_mime(mime_type: Optional[str]) -> str:
    return MIME_EXTENSIONS.get((mime_type or "").lower(), DEFAULT_EXTENSION)


def normalize_filename(filename: Optional[str], extension: str) -> str:
    """Safe characters only, extension replaced by the one derived from the MIME type."""
    base = (filename or "").strip().replace("\\", "/").split("/")[-1]
    if "." in base:
        base = base.rsplit(".", 1)[0]
    base = UNSAFE_FILENAME_CHARS.sub("-", base).strip("-.") or "image"
    return f"{base[:80]}.{extension}"


def parse_data_url(data_url: str) -> Tuple[str, bytes]:
    """Returns (mime_type, raw bytes). Raises UploadFailed(invalid_payload)."""
    match = DATA_URL_RE.match(data_url or "")
    if not match:
        raise UploadFailed("Image is not a valid data URL", reason=UploadFailed.INVALID_PAYLOAD)

    mime_type = (match.group("mime") or DEFAULT_CONTENT_TYPE).lower()
    if ";base64" not in (match.group("params") or "").lower():
        raise UploadFailed("Only base64-encoded data URLs are supported", reason=UploadFailed.INVALID_PAYLOAD)

    payload = re.sub(r"\s+", "", match.group("payload"))
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise UploadFailed(f"Image payload could not be decoded: {e}", reason=UploadFailed.INVALID_PAYLOAD) from e
    if not data:
        raise UploadFailed("Image payload is empty", reason=UploadFailed.INVALID_PAYLOAD)
    return mime_type, data


class MediaIngestionService:

    def __init__(self, storage: ObjectStorage, prefix: str = "reports"):
        self.storage = storage
        self.prefix = prefix.strip("/")

    def build_path(self, filename: str) -> str:
        return f"{self.prefix}/{int(time.time() * 1000)}-{secrets.token_hex(4)}-{filename}"

    def upload(self, encoded_image: str, filename: Optional[str] = None) -> str:
        """
        Decode one data URL image and store it. Returns the public URL.

        Raises:
            UploadFailed: decode error, storage misconfiguration or storage error
        """
        mime_type, data = parse_data_url(encoded_image)
        name = normalize_filename(filename, extension_for_mime(mime_type))
        path = self.build_path(name)

        try:
            return self.storage.put(path, data, content_type=mime_type, public=True)
        except UploadFailed as e:
            e.filename = name
            raise

    def ingest(self, images: List[Dict[str, Optional[str]]]) -> List[Dict[str, Optional[str]]]:
        """
        Turn image inputs ({source, filename, local_url}) into stored entries
        ({local_url, public_url}), sequentially and in input order.

        Data URLs are uploaded. Plain URLs are kept as local_url only.
        """
        stored = []
        for index, image in enumerate(images):
            source = image["source"]
            if is_data_url(source):
                filename = image.get("filename") or f"image-{index + 1}"
                public_url = self.upload(source, filename)
                stored.append({
                    "local_url": image.get("local_url") or filename,
                    "public_url": public_url,
                })
            else:
                stored.append({"local_url": image.get("local_url") or source, "public_url": None})
        if stored:
            logger.info(f"Ingested {len(stored)} image(s)")
        return stored
