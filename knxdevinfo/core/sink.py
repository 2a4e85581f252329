"""Result sink collecting decoded device parameters."""

from __future__ import annotations

import logging
from typing import Callable

from knxdevinfo.core.errors import DecodeError
from knxdevinfo.core.model import CategoryCursor, DeviceInfoItem, ItemCallback, ReadOutcome
from knxdevinfo.core.parameters import Parameter

LOGGER = logging.getLogger(__name__)


class ResultSink:
    """Creates items labeled with the current category and forwards them to a callback."""

    def __init__(self, on_item: ItemCallback | None = None) -> None:
        self.cursor = CategoryCursor()
        self.items: list[DeviceInfoItem] = []
        self._on_item = on_item

    def enter(self, category: str) -> None:
        self.cursor.current = category

    def put(self, parameter: Parameter, value: str, raw: bytes) -> DeviceInfoItem:
        item = DeviceInfoItem(category=self.cursor.current, parameter=parameter, value=value, raw=bytes(raw))
        if self.cursor.announce(item.category):
            LOGGER.debug("new category %s", item.category)
        self.items.append(item)
        if self._on_item is not None:
            self._on_item(item)
        return item

    def count(self, parameter: Parameter) -> int:
        return sum(1 for item in self.items if item.parameter is parameter)


def put_decoded(
    sink: ResultSink,
    parameter: Parameter,
    outcome: ReadOutcome,
    codec: Callable[[bytes], str],
) -> ReadOutcome:
    """Decode a successful read and emit it if the formatted value is not empty."""
    if not outcome.ok:
        LOGGER.debug("skip %s: %s", parameter.friendly_name, outcome.skip_reason)
        return outcome
    try:
        formatted = codec(outcome.data)
    except DecodeError as exc:
        LOGGER.warning("decoding %s: %s", parameter.friendly_name, exc)
        return outcome
    if formatted:
        sink.put(parameter, formatted, outcome.data)
    return outcome
