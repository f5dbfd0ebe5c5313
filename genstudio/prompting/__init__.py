"""Prompting package.

Fixed prompt text and structured-output schema definitions used by the
generation services. No model invocation happens here.
"""
