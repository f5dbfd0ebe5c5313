"""LLM access package.

Architectural role:
    Provides provider configuration, transport, request/response types, and the
    text-generation services used by the application layer.

Module split:
    - `provider_config`: environment-driven endpoint, model, and key configuration.
    - `client`: Gemini HTTP transport (single-shot and SSE streaming).
    - `types`: content parts, attachments, history turns, response wrapper.
    - `schemas`: structured-output models for slide outlines.
    - `errors`: adapter exception hierarchy.
    - `key_selection`: optional interactive paid-key gate.
    - `service`: chat streaming, slide outline, and stock analysis entrypoints.
"""
