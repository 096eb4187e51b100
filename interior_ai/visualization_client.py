"""
Visualization Client - renders the analysed room with the recommended items added.

Sends the original photo plus an edit instruction to an image-editing model
and returns the first inline image of the reply as a data URL.
"""

import base64
import binascii
import logging
from typing import List, Optional, Sequence

from openai import OpenAI

from .config import VISUALIZATION_MODEL
from .errors import VisualizationError
from .image_ingestion import strip_data_url_prefix
from .openai_client import get_client

logger = logging.getLogger(__name__)

NO_IMAGE_MESSAGE = "No image generated"

_EXTENSIONS = {"image/jpeg": "jpg", "image/jpg": "jpg", "image/png": "png", "image/webp": "webp"}


def build_visualization_prompt(style: str, items: Sequence[str]) -> str:
    """Natural-language edit instruction for the image model."""
    item_text = ", ".join(item for item in items if item) or "a few complementary decor pieces"
    return (
        f"Redesign this room in a {style} interior design style. "
        "Keep the room's structure exactly as it is: walls, windows, doors, floor and overall layout must not change. "
        f"Add the following items to the room, styled to fit the {style} look: {item_text}. "
        "Match the original photo's lighting, camera angle and perspective so the result looks like a real photograph "
        "of the same room."
    )


def _first_inline_image(parts) -> Optional[str]:
    """Base64 payload of the first part carrying inline image data."""
    for part in parts or []:
        b64 = getattr(part, "b64_json", None)
        if b64:
            return b64
    return None


def generate_room_visualization(image_b64: str, style: str, items: List[str],
                                mime_type: str = "image/jpeg",
                                client: Optional[OpenAI] = None) -> str:
    """
    Ask the image model for a redesigned version of the room.

    Args:
        image_b64: Original image, with or without data URL prefix
        style: Design style identified by the analysis
        items: Item names from the shopping list
        mime_type: Media type of the original image
        client: OpenAI client to use (defaults to the shared one)

    Returns:
        ``data:image/<fmt>;base64,...`` URL of the generated image

    Raises:
        VisualizationError: if the call fails or no image part comes back
    """
    client = client or get_client()

    try:
        image_bytes = base64.b64decode(strip_data_url_prefix(image_b64), validate=True)
    except (binascii.Error, ValueError) as e:
        raise VisualizationError("Invalid source image payload") from e

    prompt = build_visualization_prompt(style, items)
    filename = f"room.{_EXTENSIONS.get(mime_type, 'png')}"

    try:
        response = client.images.edit(
            model=VISUALIZATION_MODEL,
            image=(filename, image_bytes, mime_type),
            prompt=prompt,
        )
    except Exception as e:
        logger.warning(f"Visualization request failed: {e}", exc_info=True)
        raise VisualizationError(str(e)) from e

    b64 = _first_inline_image(getattr(response, "data", None))
    if not b64:
        logger.warning("Visualization response contained no image data")
        raise VisualizationError(NO_IMAGE_MESSAGE)

    output_format = getattr(response, "output_format", None) or "png"
    logger.info(f"✅ Redesign image generated ({style}, {len(items)} items)")
    return f"data:image/{output_format};base64,{b64}"
