"""
Image Ingestion - turns an uploaded file or a preset sample into an image payload.

Every successful ingestion yields an IngestedImage carrying two views of the
same picture:
• data_url: base64 data URL sent to the remote models;
• preview: something st.image can render right away (raw bytes for uploads,
  the remote URL for samples).
"""

import base64
import io
import logging
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from typing import List, Dict, Optional, Union

import requests
from PIL import Image, UnidentifiedImageError

from .config import SAMPLE_IMAGES, SAMPLE_FETCH_TIMEOUT
from .errors import ImageIngestionError

logger = logging.getLogger(__name__)

NOT_AN_IMAGE_MESSAGE = "Please upload an image file."
SAMPLE_FAILED_MESSAGE = "Could not load the demo image. Please try again."

# Pillow format name -> media type
_PIL_MEDIA_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
    "BMP": "image/bmp",
}


@dataclass(frozen=True)
class IngestedImage:
    data_url: str
    preview: Union[str, bytes]
    media_type: str
    source: str  # file name or sample URL


def to_data_url(data: bytes, media_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


def strip_data_url_prefix(payload: str) -> str:
    """Drop a ``data:...;base64,`` prefix, keeping the raw base64 only."""
    if not payload:
        return payload
    s = payload.strip()
    if s.startswith("data:") and "," in s:
        return s.split(",", 1)[1].strip()
    return s


def decode_data_url(data_url: str) -> bytes:
    """Raw bytes behind a base64 data URL (st.image wants bytes, not data URLs)."""
    return base64.b64decode(strip_data_url_prefix(data_url))


def sniff_media_type(data: bytes) -> Optional[str]:
    """Return the media type Pillow detects for ``data``, or None."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = (img.format or "").upper()
    except (UnidentifiedImageError, OSError):
        return None
    return _PIL_MEDIA_TYPES.get(fmt, f"image/{fmt.lower()}" if fmt else None)


def ingest_upload(name: str, media_type: Optional[str], data: bytes) -> IngestedImage:
    """
    Validate an uploaded file and encode it.

    Args:
        name: Original file name (only used for logging / source)
        media_type: Media type declared by the browser
        data: File contents

    Returns:
        IngestedImage whose preview is the uploaded bytes

    Raises:
        ImageIngestionError: if the file is not declared as an image or is empty
    """
    declared = (media_type or "").lower()
    if not declared.startswith("image/"):
        logger.info(f"Rejected upload {name!r}: media type {media_type!r} is not an image")
        raise ImageIngestionError(NOT_AN_IMAGE_MESSAGE)
    if not data:
        logger.info(f"Rejected upload {name!r}: empty file")
        raise ImageIngestionError(NOT_AN_IMAGE_MESSAGE)

    logger.info(f"✅ Ingested upload {name!r} ({declared}, {len(data)} bytes)")
    return IngestedImage(
        data_url=to_data_url(data, declared),
        preview=data,
        media_type=declared,
        source=name,
    )


def fetch_sample_image(url: str, timeout: float = SAMPLE_FETCH_TIMEOUT) -> IngestedImage:
    """Download a sample room photo and encode it. Preview is the URL itself."""
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Error loading demo image {url}: {e}", exc_info=True)
        raise ImageIngestionError(SAMPLE_FAILED_MESSAGE) from e

    data = response.content
    media_type = (response.headers.get("Content-Type") or "").split(";")[0].strip().lower()
    if not media_type.startswith("image/"):
        media_type = sniff_media_type(data) or ""
    if not data or not media_type.startswith("image/"):
        logger.error(f"Demo image {url} did not return image content")
        raise ImageIngestionError(SAMPLE_FAILED_MESSAGE)

    logger.info(f"✅ Loaded demo image {url} ({media_type}, {len(data)} bytes)")
    return IngestedImage(
        data_url=to_data_url(data, media_type),
        preview=url,
        media_type=media_type,
        source=url,
    )


class SampleLoader:
    """
    Single "currently loading index" slot shared by all sample buttons.

    ``start()`` claims the slot and runs the download on an executor; the slot
    stays held across page reruns until ``collect()`` picks up the finished
    download. While it is held the uploader and sample buttons are disabled.
    """

    def __init__(self, samples: Optional[List[Dict[str, str]]] = None, fetch=fetch_sample_image):
        self.samples = samples if samples is not None else SAMPLE_IMAGES
        self._fetch = fetch
        self._future: Optional[Future] = None
        self.loading_index: Optional[int] = None

    @property
    def is_loading(self) -> bool:
        return self.loading_index is not None

    def start(self, index: int, executor: Executor) -> bool:
        """Begin downloading sample ``index``. False if another sample is loading."""
        if not 0 <= index < len(self.samples):
            raise IndexError(f"No sample image at index {index}")
        if self.is_loading:
            logger.info(f"Sample {index} ignored, sample {self.loading_index} is still loading")
            return False
        self.loading_index = index
        self._future = executor.submit(self._fetch, self.samples[index]["url"])
        return True

    def collect(self) -> Optional[IngestedImage]:
        """
        Finished download, or None while it is still running (or nothing was started).

        Raises:
            ImageIngestionError: if the download failed (slot is released)
        """
        if self._future is None or not self._future.done():
            return None
        future = self._future
        self._future = None
        self.loading_index = None
        try:
            return future.result()
        except ImageIngestionError:
            raise
        except Exception as e:
            logger.error(f"Error loading demo image: {e}", exc_info=True)
            raise ImageIngestionError(SAMPLE_FAILED_MESSAGE) from e
