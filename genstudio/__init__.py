"""GenStudio client adapter for the hosted Gemini API.

Architectural role:
    Shapes application-level requests (chat turns, image generation/edit,
    structured slide outlines, grounded research reports) into Gemini REST
    payloads and unpacks the responses into plain Python values.

Package split:
    - `llm`: configuration, transport client, request/response types, errors,
      key-selection gate, and text/structured generation services.
    - `image`: image generation and editing services.
    - `prompting`: fixed prompt and schema text.
    - `api`: developer CLI and multimodal attachment preprocessing.
"""
