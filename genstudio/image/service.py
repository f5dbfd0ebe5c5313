"""Image generation and editing entrypoints.

Role in pipeline:
    - Receives prompt/size (generation) or data URI + instruction (edit).
    - Builds one `generateContent` request for the image models.
    - Extracts every inline image of the first candidate as a data URI.

Key gating:
    `generate_image` uses the paid image model and calls `ensure_api_key`
    before building a client, so a declined key selection never reaches the
    network. `edit_image` is not gated.

Error handling strategy:
    - Transport/service exceptions propagate unchanged.
    - A response without image parts yields `[]`.
"""

from __future__ import annotations

import logging
from typing import Any

from genstudio.llm.client import GeminiClient
from genstudio.llm.key_selection import KeySelector, ensure_api_key
from genstudio.llm.provider_config import (
    IMAGE_ASPECT_RATIO,
    IMAGE_EDIT_MODEL,
    IMAGE_MODEL,
    ImageSize,
)
from genstudio.llm.types import GenerationResult, InlineDataPart, TextPart


logger = logging.getLogger(__name__)

DEFAULT_EDIT_MIME_TYPE = "image/jpeg"
DATA_URI_PREFIX = "data:image/png;base64,"


def extract_images(result: GenerationResult) -> list[str]:
    """Return the inline images of the first candidate as PNG data URIs."""
    images = []
    for part in result.parts:
        inline = part.get("inlineData") or {}
        if inline.get("data"):
            images.append(f"{DATA_URI_PREFIX}{inline['data']}")
    return images


def split_data_uri(image: str) -> tuple[str, str]:
    """Split a data URI into `(mime_type, base64_payload)`.

    A string without a comma is treated as bare base64. The MIME type falls
    back to `image/jpeg` when the header does not name one.
    """
    if "," not in image:
        return DEFAULT_EDIT_MIME_TYPE, image

    header, payload = image.split(",", 1)
    mime_type = DEFAULT_EDIT_MIME_TYPE
    if header.startswith("data:"):
        declared = header[len("data:"):].split(";", 1)[0].strip()
        if declared:
            mime_type = declared
    return mime_type, payload


def build_image_payload(prompt: str, size: ImageSize | str) -> dict[str, Any]:
    size_value = size.value if isinstance(size, ImageSize) else str(size)
    return {
        "contents": [{
            "role": "user",
            "parts": [TextPart(prompt).to_dict()],
        }],
        "generationConfig": {
            "imageConfig": {
                "imageSize": size_value,
                "aspectRatio": IMAGE_ASPECT_RATIO,
            },
        },
    }


def build_edit_payload(image_data_uri: str, prompt: str) -> dict[str, Any]:
    mime_type, data = split_data_uri(image_data_uri)
    return {
        "contents": [{
            "role": "user",
            "parts": [
                InlineDataPart(mime_type=mime_type, data=data).to_dict(),
                TextPart(prompt).to_dict(),
            ],
        }],
    }


async def generate_image(
    prompt: str,
    size: ImageSize | str = ImageSize.SIZE_1K,
    *,
    client: GeminiClient | None = None,
    key_selector: KeySelector | None = None,
) -> list[str]:
    """Generate square images for `prompt`.

    Args:
        prompt: Text description of the image.
        size: Output size tier (`1K`, `2K`, `4K`).
        client: Optional transport handle; a new one is built per call.
        key_selector: Overrides the installed default key selector.

    Returns:
        PNG data URIs in response order; empty when the model returned none.

    Raises:
        ApiKeySelectionRequired: Key selection was declined (no request sent).
    """
    await ensure_api_key(key_selector)

    client = client or GeminiClient()
    raw = await client.generate_content(IMAGE_MODEL, build_image_payload(prompt, size))

    images = extract_images(GenerationResult(raw))
    if not images:
        logger.info("Image model returned no inline images for size=%s", size)
    return images


async def edit_image(
    image_data_uri: str,
    prompt: str,
    *,
    client: GeminiClient | None = None,
) -> list[str]:
    """Apply an edit instruction to an existing image.

    The image part is sent before the instruction text. Returns PNG data URIs
    in response order, or `[]`.
    """
    client = client or GeminiClient()
    raw = await client.generate_content(
        IMAGE_EDIT_MODEL,
        build_edit_payload(image_data_uri, prompt),
    )
    return extract_images(GenerationResult(raw))
