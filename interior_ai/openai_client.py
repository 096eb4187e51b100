import logging
from typing import Optional

from openai import OpenAI

from .config import get_api_key, REMOTE_CALL_TIMEOUT
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

_client: Optional[OpenAI] = None


def get_client() -> OpenAI:
    """Singleton OpenAI client with API key check."""
    global _client
    if _client is None:
        api_key = get_api_key()
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY is not set")
        _client = OpenAI(api_key=api_key, timeout=REMOTE_CALL_TIMEOUT)
        logger.info("✅ OpenAI client initialised")
    return _client


def reset_client():
    """Forget the cached client (e.g. after the key changed)."""
    global _client
    _client = None
