"""Adapter exception hierarchy.

Failure taxonomy:
    - `ApiKeySelectionRequired`: interactive key selection did not complete.
      Raised before any network call.
    - `CredentialNotFoundError`: no API key could be resolved from the
      environment or key file. Raised before any network call.
    - `StructuredResponseError`: the service returned text that is not a valid
      structured result where one was required.

Transport and service failures are not wrapped: `httpx.HTTPStatusError` and
`httpx.RequestError` reach the caller unchanged. Empty responses are valid
"no result" outcomes (`None` or `[]`) and never raise.
"""

from __future__ import annotations


class GenStudioError(RuntimeError):
    """Base class for adapter-level failures."""


class ApiKeySelectionRequired(GenStudioError):
    """Raised when the user does not complete paid API key selection."""

    def __init__(self, message: str = "API Key selection is required for this feature.") -> None:
        super().__init__(message)


class CredentialNotFoundError(GenStudioError):
    """Raised when no Gemini API key is configured."""


class StructuredResponseError(GenStudioError):
    """Raised when structured output cannot be parsed into the expected shape."""

    def __init__(self, message: str, raw_content: str | None = None) -> None:
        super().__init__(message)
        self.raw_content = raw_content
