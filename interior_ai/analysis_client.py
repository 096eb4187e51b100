"""
Analysis Client - asks a vision model for the room's style and a shopping list.

The model is constrained to ANALYSIS_RESPONSE_SCHEMA via a strict JSON schema
response format. Whatever goes wrong (network, empty reply, bad JSON, schema
mismatch) the caller only ever sees a single AnalysisError with a message that
is safe to put on screen; the real cause goes to the log.
"""

import logging
from typing import Optional

from openai import OpenAI

from .config import ANALYSIS_MODEL, ANALYSIS_TEMPERATURE
from .errors import AnalysisError
from .image_ingestion import strip_data_url_prefix
from .models import AnalysisResult, ANALYSIS_RESPONSE_SCHEMA
from .openai_client import get_client

logger = logging.getLogger(__name__)

ANALYSIS_FAILED_MESSAGE = "Failed to analyze the image. Please try again."

ANALYSIS_PROMPT = """Analyze this interior design image.
1. Identify the specific Design Style (e.g., Scandinavian, Industrial, Mid-Century Modern, etc.).
2. Provide a brief, engaging description of the style elements present in the room (max 2 sentences).
3. Generate a 'Shopping List' of 5-8 items that are either visible in the photo or would perfectly complement this specific style. Include estimated prices in USD.

Return the result in strictly structured JSON."""


def _clean_response_text(text: str) -> str:
    txt = text.strip()
    # Some replies still come wrapped in ```json ... ```
    if txt.startswith("```"):
        txt = txt.strip("`").strip()
        if txt.lower().startswith("json"):
            txt = txt[4:].strip()
    return txt


def _request_analysis(client: OpenAI, image_b64: str, mime_type: str) -> str:
    extra = {}
    if ANALYSIS_TEMPERATURE is not None:
        extra["temperature"] = ANALYSIS_TEMPERATURE
    response = client.chat.completions.create(
        model=ANALYSIS_MODEL,
        messages=[
            {
                "role": "user",
                "content": [
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{mime_type};base64,{image_b64}"},
                    },
                    {"type": "text", "text": ANALYSIS_PROMPT},
                ],
            }
        ],
        response_format={
            "type": "json_schema",
            "json_schema": {
                "name": "interior_analysis",
                "schema": ANALYSIS_RESPONSE_SCHEMA,
                "strict": True,
            },
        },
        **extra,
    )
    if not response.choices:
        return ""
    return response.choices[0].message.content or ""


def analyze_interior_image(image_b64: str, mime_type: str = "image/jpeg",
                           client: Optional[OpenAI] = None) -> AnalysisResult:
    """
    Classify the room's design style and propose shopping items.

    Args:
        image_b64: Base64 image, with or without a data URL prefix
        mime_type: Media type of the image
        client: OpenAI client to use (defaults to the shared one)

    Returns:
        Validated AnalysisResult

    Raises:
        AnalysisError: on any failure, with a generic message
    """
    try:
        clean_b64 = strip_data_url_prefix(image_b64)
        if not clean_b64:
            raise ValueError("Empty image payload")

        text = _request_analysis(client or get_client(), clean_b64, mime_type)
        if not text.strip():
            raise ValueError("No response text received from the analysis model.")

        result = AnalysisResult.model_validate_json(_clean_response_text(text))
        logger.info(f"✅ Analysis complete: {result.design_style} with {len(result.shopping_list)} items")
        return result

    except Exception as e:
        logger.error(f"Error analyzing image: {e}", exc_info=True)
        raise AnalysisError(ANALYSIS_FAILED_MESSAGE) from e
