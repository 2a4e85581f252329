"""Device access interfaces consumed by the interrogation engine."""

from __future__ import annotations

from typing import Protocol


class DeviceClient(Protocol):
    """Management and property services of one KNX device.

    KNX protocol-level failures raise ``AccessError`` subclasses, link failures raise
    ``TransportError``, and an interrupted read raises ``InterrogationCanceled``.
    """

    def read_device_descriptor(self) -> bytes | None:
        """Read device descriptor type 0, or return None if the access path has no such service."""

    def read_property(self, object_index: int, pid: int, start: int, count: int) -> bytes:
        """Read ``count`` elements of a property starting at element ``start``; start 0 reads the element count."""

    def read_memory(self, address: int, length: int) -> bytes:
        """Read ``length`` bytes of device memory."""

    def read_adc(self, channel: int, repeat: int) -> int:
        """Read the A/D converter value of ``channel``."""

    def read_function_property_state(
        self,
        object_type: int,
        object_instance: int,
        pid: int,
        service: int,
        info: bytes,
    ) -> bytes | None:
        """Read a function property state; None if the device returned no data."""
