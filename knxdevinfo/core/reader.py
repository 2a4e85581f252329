"""Read primitives returning explicit outcomes instead of raising on KNX access errors."""

from __future__ import annotations

import logging

from knxdevinfo.clients.base import DeviceClient
from knxdevinfo.core.errors import AccessError
from knxdevinfo.core.model import ReadOutcome

LOGGER = logging.getLogger(__name__)

# object instance used for function property services
_OBJECT_INSTANCE = 1


class DeviceReader:
    """Wraps a device client; access errors become skipped outcomes, link errors propagate."""

    def __init__(self, client: DeviceClient) -> None:
        self.client = client

    def property(self, object_index: int, pid: int, start: int = 1, count: int = 1) -> ReadOutcome:
        LOGGER.debug("read %d|%d", object_index, pid)
        data = bytearray()
        try:
            # the max. APDU length is unknown, so read one element at a time
            for element in range(start, start + count):
                data += self.client.read_property(object_index, pid, element, 1)
        except AccessError as exc:
            LOGGER.debug("reading KNX property %d|%d: %s", object_index, pid, exc)
            return ReadOutcome.skipped(str(exc))
        return ReadOutcome(data=bytes(data))

    def property_block(self, object_index: int, pid: int, start: int, count: int) -> ReadOutcome:
        LOGGER.debug("read %d|%d elements %d..%d", object_index, pid, start, start + count - 1)
        try:
            return ReadOutcome(data=self.client.read_property(object_index, pid, start, count))
        except AccessError as exc:
            LOGGER.debug("reading KNX property %d|%d: %s", object_index, pid, exc)
            return ReadOutcome.skipped(str(exc))

    def elements(self, object_index: int, pid: int) -> int:
        """Current number of elements of a property, -1 if the property is not accessible."""
        outcome = self.property(object_index, pid, start=0)
        if not outcome.ok or not outcome.data or len(outcome.data) > 8:
            return -1
        return int.from_bytes(outcome.data, "big")

    def memory(self, address: int, length: int) -> ReadOutcome:
        LOGGER.debug("read 0x%04x..0x%04x", address, address + length)
        try:
            data = self.client.read_memory(address, length)
        except AccessError as exc:
            LOGGER.debug("error reading 0x%04x..0x%04x: %s", address, address + length, exc)
            return ReadOutcome.skipped(str(exc))
        if len(data) != length:
            return ReadOutcome.skipped(f"expected {length} bytes at 0x{address:04x}, got {len(data)}")
        return ReadOutcome(data=data)

    def adc(self, channel: int, repeat: int) -> ReadOutcome:
        try:
            value = self.client.read_adc(channel, repeat)
        except AccessError as exc:
            LOGGER.debug("reading A/D converter channel %d, repeat %d: %s", channel, repeat, exc)
            return ReadOutcome.skipped(str(exc))
        return ReadOutcome(data=value.to_bytes(4, "big"))

    def function_property(self, object_type: int, pid: int, service: int, info: bytes) -> ReadOutcome:
        LOGGER.debug(
            "read function property state %d(%d)|%d service %d", object_type, _OBJECT_INSTANCE, pid, service
        )
        try:
            data = self.client.read_function_property_state(object_type, _OBJECT_INSTANCE, pid, service, info)
        except AccessError as exc:
            LOGGER.debug("function property state %d|%d: %s", object_type, pid, exc)
            return ReadOutcome.skipped(str(exc))
        if not data:
            return ReadOutcome.skipped("no data")
        return ReadOutcome(data=data)
