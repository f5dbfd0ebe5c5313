"""Image generation adapter package.

Scope:
    Provides text-to-image and image-edit entrypoints plus extraction of inline
    image payloads from Gemini responses.

Non-goals:
    - No file ingestion; callers pass prompts and data URIs.
    - No image decoding or re-encoding. Payloads stay base64 end to end.
"""
