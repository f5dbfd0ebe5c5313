"""Provider/runtime configuration for the Gemini adapter.

Architectural role:
    Centralizes endpoint, model selection, and credential lookup for
    `genstudio.llm.client`, `genstudio.llm.service`, and `genstudio.image.service`.

Determinism:
    Endpoint and model values are resolved at import time from the process
    environment (after `.env` loading). Credentials are resolved at call time by
    `load_key`, so a key selected after import is still picked up.

Failure behavior:
    Missing key material is represented as `None`; `client.GeminiClient` turns
    that into `CredentialNotFoundError` before any request is sent.
"""

import os
from enum import Enum

from dotenv import load_dotenv

load_dotenv()


# Gemini REST endpoint root; model calls are `{base}/models/{model}:{method}`.
GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL",
    "https://generativelanguage.googleapis.com/v1beta",
).rstrip("/")

GEMINI_TIMEOUT_SECONDS = float(os.getenv("GEMINI_TIMEOUT_SECONDS", "120"))

GEMINI_KEY_FILE = os.getenv("GEMINI_KEY_FILE", "config/gemini.key")

# Checked in order before falling back to the key file.
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "API_KEY")


class ModelId(str, Enum):
    """Hosted model identifiers used by the adapter."""

    GEMINI_3_FLASH = "gemini-3-flash-preview"
    GEMINI_3_PRO = "gemini-3-pro-preview"
    GEMINI_3_PRO_IMAGE = "gemini-3-pro-image-preview"
    GEMINI_2_5_FLASH_IMAGE = "gemini-2.5-flash-image"


class ImageSize(str, Enum):
    """Output size tiers accepted by the image model."""

    SIZE_1K = "1K"
    SIZE_2K = "2K"
    SIZE_4K = "4K"


# Per-operation model routing.
CHAT_MODEL = os.getenv("CHAT_MODEL", ModelId.GEMINI_3_FLASH.value)
IMAGE_MODEL = os.getenv("IMAGE_MODEL", ModelId.GEMINI_3_PRO_IMAGE.value)
IMAGE_EDIT_MODEL = os.getenv("IMAGE_EDIT_MODEL", ModelId.GEMINI_2_5_FLASH_IMAGE.value)
SLIDE_MODEL = os.getenv("SLIDE_MODEL", ModelId.GEMINI_3_FLASH.value)
RESEARCH_MODEL = os.getenv("RESEARCH_MODEL", ModelId.GEMINI_3_PRO.value)

IMAGE_ASPECT_RATIO = "1:1"


def load_key(path=None):
    """Load the Gemini API key from the environment or a key file.

    Resolution order:
        1. `GEMINI_API_KEY`
        2. `API_KEY`
        3. Raw file contents at `path` (defaults to `GEMINI_KEY_FILE`).

    Args:
        path: Optional key file path override.

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - Blank environment values are skipped.
        - Missing or empty key file returns `None`.
    """
    for name in API_KEY_ENV_VARS:
        env_value = os.getenv(name)
        if env_value and env_value.strip():
            return env_value.strip()

    path = path or GEMINI_KEY_FILE
    if not path or not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip() or None
