"""
Variable-length list of text entries gated by a choice field.
"""

import logging
from collections.abc import MutableMapping
from typing import Any

logger = logging.getLogger(__name__)


class DynamicList:
    """
    Owned sub-collection that mirrors itself into the form state under its key.

    While inactive the list keeps a single empty entry and is absent from the
    state. Every mutation of an active list republishes a copy of its entries.
    """

    def __init__(self, key: str, state: MutableMapping[str, Any]) -> None:
        self.key = key
        self._state = state
        self._items: list[str] = [""]
        self.active = False

    @property
    def items(self) -> list[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def append(self) -> None:
        self._items.append("")
        self._publish()

    def remove_at(self, index: int) -> None:
        if not 0 <= index < len(self._items):
            logger.debug("Ignoring remove of %s[%d], list has %d entries", self.key, index, len(self._items))
            return
        del self._items[index]
        self._publish()

    def set_at(self, index: int, value: str) -> None:
        if not 0 <= index < len(self._items):
            raise IndexError(f"{self.key} has no entry at index {index}")
        self._items[index] = value
        self._publish()

    def reset(self) -> None:
        self._items = [""]
        self._publish()

    def activate(self) -> None:
        self.active = True
        self._publish()

    def deactivate(self) -> None:
        self.active = False
        self._items = [""]
        self._state.pop(self.key, None)

    def _publish(self) -> None:
        if self.active:
            self._state[self.key] = list(self._items)
