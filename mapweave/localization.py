"""Message lookup for option and choice labels.

Schemas refer to display text through message keys. A MessageCatalog maps
those keys to text. Missing labels fall back to the key itself (and are
logged), missing descriptions simply mean "no tooltip".
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

logger = logging.getLogger(__name__)


class MessageCatalog:
    """A read-only mapping of message keys to display text."""

    def __init__(self, messages: Mapping[str, str] | None = None) -> None:
        self._messages: dict[str, str] = dict(messages or {})

    def __contains__(self, key: str) -> bool:
        return key in self._messages

    def get_message(self, key: str) -> str:
        """Return the text for key, or the key itself if it is unknown."""
        message = self._messages.get(key)
        if message is None:
            logger.debug(f"Missing message for key {key!r}")
            return key
        return message

    def try_get_message(self, key: str) -> str | None:
        """Return the text for key, or None if it is unknown."""
        return self._messages.get(key)


# Catalog used when the caller does not supply one: every label is its own key.
EMPTY_CATALOG = MessageCatalog()
