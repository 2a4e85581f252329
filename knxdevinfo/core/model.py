"""Core data models shared by the interrogation components, the API, and the CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from knxdevinfo.core.errors import DecodeError
from knxdevinfo.core.parameters import Parameter


@dataclass(frozen=True)
class DeviceDescriptor:
    """Device descriptor type 0 (mask version)."""

    mask_version: int

    @classmethod
    def from_bytes(cls, data: bytes) -> DeviceDescriptor:
        if len(data) < 2:
            raise DecodeError(f"device descriptor requires 2 bytes, got {len(data)}")
        return cls(mask_version=int.from_bytes(data[:2], "big"))

    @property
    def medium_type(self) -> int:
        return (self.mask_version >> 12) & 0x0F

    @property
    def firmware_type(self) -> int:
        return (self.mask_version >> 8) & 0x0F

    @property
    def firmware_version(self) -> int:
        return self.mask_version & 0xFF

    def to_bytes(self) -> bytes:
        return self.mask_version.to_bytes(2, "big")

    def __str__(self) -> str:
        return f"{self.mask_version:04X}"


@dataclass(frozen=True)
class DeviceInfoItem:
    """A single decoded device parameter."""

    category: str
    parameter: Parameter
    value: str
    raw: bytes

    def to_dict(self) -> dict[str, str]:
        return {
            "category": self.category,
            "parameter": self.parameter.name,
            "name": self.parameter.friendly_name,
            "value": self.value,
            "raw": self.raw.hex(),
        }


@dataclass(frozen=True)
class ReadOutcome:
    """Result of a single read: either the data, or the reason it was skipped."""

    data: bytes | None = None
    skip_reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.data is not None

    @classmethod
    def skipped(cls, reason: str) -> ReadOutcome:
        return cls(data=None, skip_reason=reason)


ItemCallback = Callable[[DeviceInfoItem], None]


@dataclass(frozen=True)
class InterrogationReport:
    items: tuple[DeviceInfoItem, ...]
    descriptor: DeviceDescriptor | None
    canceled: bool = False
    error: Exception | None = None


@dataclass
class CategoryCursor:
    """Labels items with the interface object currently being read."""

    current: str = "General"
    announced: set[str] = field(default_factory=set)

    def announce(self, category: str) -> bool:
        """Return True the first time a category is seen."""
        if category in self.announced:
            return False
        self.announced.add(category)
        return True
