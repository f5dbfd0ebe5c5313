"""Optional interactive API key selection gate.

Architectural role:
    Some hosts (for example an embedding studio page) expose a dialog that lets
    the user pick a paid API key. Paid-only features call `ensure_api_key` before
    issuing any request. Hosts without that capability simply install no
    selector, and gated calls proceed unchanged.

Control flow:
    1. No selector, or one lacking either operation -> return immediately.
    2. Selector reports a key -> return.
    3. Otherwise open the dialog and re-check once.
    4. Still no key -> raise `ApiKeySelectionRequired`.
"""

from __future__ import annotations

import logging
from typing import Protocol

from genstudio.llm.errors import ApiKeySelectionRequired


logger = logging.getLogger(__name__)


class KeySelector(Protocol):
    """Host capability surface for paid key selection."""

    async def has_selected_api_key(self) -> bool:
        """Return whether the user has already selected a key."""
        ...

    async def open_select_key(self) -> None:
        """Open the host's key picker and wait for it to close."""
        ...


_DEFAULT_KEY_SELECTOR: KeySelector | None = None


def set_key_selector(selector: KeySelector | None) -> None:
    """Install or clear the process-wide default key selector.

    Passing `None` restores the no-capability behavior where gated
    operations proceed without prompting.
    """
    global _DEFAULT_KEY_SELECTOR
    _DEFAULT_KEY_SELECTOR = selector


def get_key_selector() -> KeySelector | None:
    return _DEFAULT_KEY_SELECTOR


def _supports_key_selection(selector) -> bool:
    """Return whether `selector` exposes both key-selection operations."""
    return all(
        callable(getattr(selector, name, None))
        for name in ("has_selected_api_key", "open_select_key")
    )


async def ensure_api_key(selector: KeySelector | None = None) -> None:
    """Require a selected API key when the host can provide one.

    Args:
        selector: Explicit selector; falls back to the installed default.

    Raises:
        ApiKeySelectionRequired: The dialog closed without a key selected.
    """
    selector = selector if selector is not None else _DEFAULT_KEY_SELECTOR
    if not _supports_key_selection(selector):
        return

    if await selector.has_selected_api_key():
        return

    logger.info("No API key selected; opening key selection dialog")
    await selector.open_select_key()

    if not await selector.has_selected_api_key():
        raise ApiKeySelectionRequired()
