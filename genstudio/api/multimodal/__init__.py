"""Multimodal preprocessing package.

Architectural role:
- Converts local files into `Attachment` values.
- Classifies attachments into inline-binary or labelled-text content parts.
"""
