"""Device client answering reads from a recorded YAML device snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from knxdevinfo.core.config import read_yaml, validate
from knxdevinfo.core.errors import (
    AccessError,
    MemoryAccessError,
    PropertyAccessError,
    ServiceNotSupportedError,
    SnapshotLoadError,
    SnapshotValidationError,
)

LOGGER = logging.getLogger(__name__)
_SCHEMA = "snapshot.schema.json"

FunctionPropertyKey = tuple[int, int, int, bytes]


def _normalize_hex(value: str, *, context: str) -> bytes:
    normalized = "".join(value.split()).lower()
    try:
        return bytes.fromhex(normalized)
    except ValueError as exc:
        raise SnapshotValidationError(f"{context} must contain hex byte pairs") from exc


def _int_key(key: Any, *, context: str, maximum: int) -> int:
    if isinstance(key, bool) or not isinstance(key, int) or not 0 <= key <= maximum:
        raise SnapshotValidationError(f"{context} '{key}' must be an integer 0..{maximum}")
    return key


def _elements(value: Any, *, context: str) -> list[bytes]:
    if isinstance(value, list):
        return [_normalize_hex(element, context=f"{context}[{i}]") for i, element in enumerate(value)]
    data = _normalize_hex(value["data"], context=f"{context}.data")
    size = value["size"]
    if len(data) % size != 0:
        raise SnapshotValidationError(f"{context} data length {len(data)} is not a multiple of size {size}")
    return [data[i : i + size] for i in range(0, len(data), size)]


@dataclass
class SnapshotClient:
    """A ``DeviceClient`` backed by recorded device data.

    Properties are stored per object index and property id as a list of elements,
    memory as blocks keyed by start address. Every read is recorded in ``reads``.
    """

    descriptor: bytes | None = None
    descriptor_error: str | None = None
    properties: dict[int, dict[int, list[bytes]]] = field(default_factory=dict)
    memory: dict[int, bytes] = field(default_factory=dict)
    adc: dict[int, int] = field(default_factory=dict)
    function_properties: dict[FunctionPropertyKey, bytes | None] = field(default_factory=dict)
    name: str = ""
    reads: list[tuple[Any, ...]] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, doc: dict[Any, Any], source: Path | str = "<snapshot>") -> SnapshotClient:
        validate(doc, _SCHEMA, source, validation_error=SnapshotValidationError)

        descriptor = None
        if "device_descriptor" in doc:
            descriptor = _normalize_hex(doc["device_descriptor"], context="device_descriptor")

        properties: dict[int, dict[int, list[bytes]]] = {}
        for object_index, pids in doc.get("properties", {}).items():
            index = _int_key(object_index, context="object index", maximum=255)
            properties[index] = {
                _int_key(pid, context=f"property id of object {index}", maximum=255): _elements(
                    value, context=f"properties.{index}.{pid}"
                )
                for pid, value in pids.items()
            }

        memory = {
            _int_key(address, context="memory address", maximum=0xFFFF): _normalize_hex(
                data, context=f"memory.{address}"
            )
            for address, data in doc.get("memory", {}).items()
        }
        adc = {
            _int_key(channel, context="A/D channel", maximum=255): value
            for channel, value in doc.get("adc", {}).items()
        }

        function_properties: dict[FunctionPropertyKey, bytes | None] = {}
        for i, entry in enumerate(doc.get("function_properties", [])):
            context = f"function_properties[{i}]"
            key = (
                entry["object_type"],
                entry["pid"],
                entry["service"],
                _normalize_hex(entry.get("input", ""), context=f"{context}.input"),
            )
            if key in function_properties:
                raise SnapshotValidationError(f"{context} duplicates an earlier entry")
            response = entry.get("response")
            function_properties[key] = (
                None if response is None else _normalize_hex(response, context=f"{context}.response")
            )

        return cls(
            descriptor=descriptor,
            descriptor_error=doc.get("descriptor_error"),
            properties=properties,
            memory=memory,
            adc=adc,
            function_properties=function_properties,
            name=doc.get("name", str(source)),
        )

    @classmethod
    def load(cls, path: Path) -> SnapshotClient:
        doc = read_yaml(path, load_error=SnapshotLoadError, validation_error=SnapshotValidationError)
        client = cls.from_mapping(doc, path)
        LOGGER.debug("loaded snapshot %s from %s", client.name, path)
        return client

    def read_device_descriptor(self) -> bytes | None:
        self.reads.append(("descriptor",))
        if self.descriptor_error is not None:
            raise AccessError(self.descriptor_error)
        return self.descriptor

    def read_property(self, object_index: int, pid: int, start: int, count: int) -> bytes:
        self.reads.append(("property", object_index, pid, start, count))
        try:
            elements = self.properties[object_index][pid]
        except KeyError:
            raise PropertyAccessError(f"object {object_index} has no property {pid}") from None
        if start == 0:
            return len(elements).to_bytes(2, "big")
        if start < 1 or start + count - 1 > len(elements):
            raise PropertyAccessError(
                f"property {object_index}|{pid} has {len(elements)} elements, "
                f"requested {start}..{start + count - 1}"
            )
        return b"".join(elements[start - 1 : start - 1 + count])

    def read_memory(self, address: int, length: int) -> bytes:
        self.reads.append(("memory", address, length))
        for block_start, block in self.memory.items():
            offset = address - block_start
            if 0 <= offset and offset + length <= len(block):
                return block[offset : offset + length]
        raise MemoryAccessError(f"memory 0x{address:04x}..0x{address + length:04x} not accessible")

    def read_adc(self, channel: int, repeat: int) -> int:
        self.reads.append(("adc", channel, repeat))
        if channel not in self.adc:
            raise ServiceNotSupportedError(f"A/D converter channel {channel} not available")
        return self.adc[channel]

    def read_function_property_state(
        self,
        object_type: int,
        object_instance: int,
        pid: int,
        service: int,
        info: bytes,
    ) -> bytes | None:
        self.reads.append(("function_property", object_type, object_instance, pid, service, bytes(info)))
        if not any(key[:2] == (object_type, pid) for key in self.function_properties):
            raise ServiceNotSupportedError(f"function property {object_type}|{pid} not supported")
        return self.function_properties.get((object_type, pid, service, bytes(info)))
