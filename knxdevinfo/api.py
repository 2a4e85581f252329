"""Stable public API for building tooling on top of knxdevinfo.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from pathlib import Path

from knxdevinfo.clients.base import DeviceClient
from knxdevinfo.clients.snapshot import SnapshotClient
from knxdevinfo.core.classifier import Strategy, classify
from knxdevinfo.core.errors import (
    AccessError,
    DecodeError,
    DeviceDescriptorError,
    InterrogationCanceled,
    KnxDevinfoError,
    ManufacturerTableError,
    MemoryAccessError,
    PropertyAccessError,
    ServiceNotSupportedError,
    SnapshotLoadError,
    SnapshotValidationError,
    TransportError,
)
from knxdevinfo.core.manufacturers import ManufacturerTable, load_manufacturers
from knxdevinfo.core.model import DeviceDescriptor, DeviceInfoItem, InterrogationReport, ItemCallback
from knxdevinfo.core.parameters import (
    CemiParameter,
    CommonParameter,
    InternalParameter,
    KnxipParameter,
    Parameter,
    RfParameter,
    SecurityParameter,
)
from knxdevinfo.core.service import DeviceInfoService

__all__ = [
    "KnxDevinfoError",
    "AccessError",
    "DecodeError",
    "DeviceDescriptorError",
    "InterrogationCanceled",
    "ManufacturerTableError",
    "MemoryAccessError",
    "PropertyAccessError",
    "ServiceNotSupportedError",
    "SnapshotLoadError",
    "SnapshotValidationError",
    "TransportError",
    "DeviceClient",
    "SnapshotClient",
    "DeviceDescriptor",
    "DeviceInfoItem",
    "InterrogationReport",
    "Parameter",
    "CommonParameter",
    "CemiParameter",
    "KnxipParameter",
    "RfParameter",
    "SecurityParameter",
    "InternalParameter",
    "Strategy",
    "Client",
]


class Client:
    """Public client for reading KNX device information.

    A `Client` instance owns the manufacturer table and runs one interrogation
    per call against any `DeviceClient` (a live connection or a snapshot).
    """

    def __init__(self, *, manufacturers: ManufacturerTable | None = None) -> None:
        self._manufacturers = manufacturers or load_manufacturers()

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._manufacturers.warnings

    def manufacturer_name(self, manufacturer_id: int) -> str:
        return self._manufacturers.name(manufacturer_id)

    def strategy_for(self, descriptor: bytes | None) -> Strategy:
        return classify(None if descriptor is None else DeviceDescriptor.from_bytes(descriptor))

    def load_snapshot(self, path: Path) -> SnapshotClient:
        return SnapshotClient.load(path)

    def read_device_info(
        self,
        device: DeviceClient,
        *,
        descriptor: bytes | None = None,
        on_item: ItemCallback | None = None,
    ) -> InterrogationReport:
        service = DeviceInfoService(
            device,
            descriptor=descriptor,
            on_item=on_item,
            manufacturers=self._manufacturers,
        )
        return service.run()
