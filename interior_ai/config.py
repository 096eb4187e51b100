import os
from dotenv import load_dotenv, find_dotenv
from pathlib import Path
import logging
from typing import Optional

# Initialize logging for this module
logger = logging.getLogger(__name__)

# Determine the package directory dynamically
# This assumes config.py is in interior_ai/
PROJECT_ROOT = Path(__file__).resolve().parent
# Primary env paths to check (trying both with and without dot)
dotenv_path_primary = PROJECT_ROOT / ".env"
env_path_without_dot = PROJECT_ROOT / "env"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ["on", "true", "1", "yes"]


def _env_float(name: str) -> Optional[float]:
    value = os.getenv(name, "").strip()
    return float(value) if value else None


def load_environment() -> bool:
    """Load the .env file (package dir first, then parent directories).

    Returns True if some env file was loaded.
    """
    logger.info(f"Attempting to load .env file from primary path: {dotenv_path_primary}")
    loaded = load_dotenv(dotenv_path=dotenv_path_primary, override=True, encoding='utf-8')

    # If .env not found, try env (without dot)
    if not loaded and env_path_without_dot.exists():
        logger.info(f"Trying env file without dot: {env_path_without_dot}")
        loaded = load_dotenv(dotenv_path=env_path_without_dot, override=True, encoding='utf-8')

    if loaded:
        return True

    # find_dotenv searches from CWD upwards.
    dotenv_path_found = find_dotenv(filename='.env', usecwd=True, raise_error_if_not_found=False)
    if dotenv_path_found and os.path.exists(dotenv_path_found):
        logger.info(f"Found .env file at: {dotenv_path_found}. Attempting to load.")
        if load_dotenv(dotenv_path=dotenv_path_found, override=True, encoding='utf-8'):
            logger.info(f"Successfully loaded .env file from: {dotenv_path_found}")
            return True
        logger.warning(f"Failed to load .env file found at: {dotenv_path_found}")
    elif not os.environ.get("IS_TEST_ENVIRONMENT"):  # Avoid warning in test environments
        logger.warning(".env file not found in the package or parent directories. Relying on system environment variables.")
    return False


load_environment()

# Essential API keys
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")

# Models
ANALYSIS_MODEL = os.getenv("ANALYSIS_MODEL", "gpt-4o-mini")
VISUALIZATION_MODEL = os.getenv("VISUALIZATION_MODEL", "gpt-image-1")

# Sampling temperature for the analysis call; unset leaves the model default
# (reasoning models reject anything else)
ANALYSIS_TEMPERATURE = _env_float("ANALYSIS_TEMPERATURE")

# Timeouts (seconds)
SAMPLE_FETCH_TIMEOUT = float(os.getenv("SAMPLE_FETCH_TIMEOUT", "15"))
REMOTE_CALL_TIMEOUT = float(os.getenv("REMOTE_CALL_TIMEOUT", "120"))
POLL_INTERVAL = float(os.getenv("POLL_INTERVAL", "1.0"))

# Feature flags
ENABLE_VISUALIZATION = _env_flag("ENABLE_VISUALIZATION", "on")

# Preset rooms offered next to the uploader
SAMPLE_IMAGES = [
    {
        "url": "https://images.unsplash.com/photo-1598928506311-c55ded91a20c?q=80&w=600&auto=format&fit=crop",
        "label": "Bohemian Living",
    },
    {
        "url": "https://images.unsplash.com/photo-1616486338812-3dadae4b4ace?q=80&w=600&auto=format&fit=crop",
        "label": "Modern Industrial",
    },
    {
        "url": "https://images.unsplash.com/photo-1556228453-efd6c1ff04f6?q=80&w=600&auto=format&fit=crop",
        "label": "Scandi Kitchen",
    },
]


def get_api_key() -> str:
    """Current OpenAI key; re-read so keys set after import are honoured."""
    return os.getenv("OPENAI_API_KEY", OPENAI_API_KEY)


def check_api_keys():
    """Check if essential API keys are loaded and provide helpful warnings."""
    missing_keys = []

    if not get_api_key():
        missing_keys.append("OPENAI_API_KEY (required for room analysis and AI redesign)")

    if missing_keys:
        logger.warning(f"Missing required API keys: {', '.join(missing_keys)}")
        logger.warning("Please add them to your .env file (e.g., in the project root or interior_ai/ directory):")
        for key in missing_keys:
            key_name = key.split(" (")[0]  # Get the base key name for the .env example
            logger.warning(f"  {key_name}=your_key_here")
        logger.warning("Note: Analysis will not work without these keys.")

    if not ENABLE_VISUALIZATION:
        logger.info("ℹ️ ENABLE_VISUALIZATION is off - AI redesign images will not be generated.")

    return not missing_keys


if __name__ == "__main__":
    # Configure basic logging for direct script execution
    logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
    logger.info("--- Configuration Check (config.py) ---")
    logger.info(f"Project Root (derived in config.py): {PROJECT_ROOT}")
    logger.info(f"Primary .env path checked: {dotenv_path_primary}")
    check_api_keys()
    logger.info(f"OpenAI API Key Loaded: {'Yes' if get_api_key() else 'No'}")
    logger.info(f"Analysis model: {ANALYSIS_MODEL}")
    logger.info(f"Visualization model: {VISUALIZATION_MODEL}")
    logger.info(f"ENABLE_VISUALIZATION flag: {ENABLE_VISUALIZATION}")
    logger.info("-------------------------------------")
