from __future__ import annotations

from pathlib import Path

import pytest

from knxdevinfo.clients.snapshot import SnapshotClient
from knxdevinfo.core.errors import (
    AccessError,
    MemoryAccessError,
    PropertyAccessError,
    ServiceNotSupportedError,
    SnapshotLoadError,
    SnapshotValidationError,
)

SNAPSHOT = """
name: KNX IP interface
device_descriptor: "091a"
properties:
  0:
    1: ["0000"]
    11: ["00c5 0102 0304"]
  3:
    76:
      size: 1
      data: "4b4e5820495000000000"
memory:
  0x0100: "00 00 c5 01"
adc:
  4: 128
function_properties:
  - object_type: 17
    pid: 51
    service: 0
    response: "000001"
  - object_type: 17
    pid: 55
    service: 1
    input: "00"
    response: null
"""


def _write(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_load_snapshot(tmp_path: Path) -> None:
    client = SnapshotClient.load(_write(tmp_path / "device.yaml", SNAPSHOT))

    assert client.name == "KNX IP interface"
    assert client.read_device_descriptor() == bytes.fromhex("091a")
    assert client.read_property(0, 11, 1, 1) == bytes.fromhex("00c501020304")
    assert client.read_property(3, 76, 0, 1) == (10).to_bytes(2, "big")
    assert client.read_property(3, 76, 1, 6) == b"KNX IP"
    assert client.read_memory(0x0102, 2) == bytes.fromhex("c501")
    assert client.read_adc(4, 1) == 128
    assert client.read_function_property_state(17, 1, 51, 0, b"") == bytes.fromhex("000001")
    assert client.read_function_property_state(17, 1, 55, 1, b"\x00") is None
    assert client.reads[0] == ("descriptor",)


def test_missing_data_raises_access_errors() -> None:
    client = SnapshotClient(properties={0: {1: [b"\x00\x00"]}}, memory={0x0100: b"\x01\x02"})

    with pytest.raises(PropertyAccessError):
        client.read_property(0, 71, 0, 1)
    with pytest.raises(PropertyAccessError):
        client.read_property(0, 1, 2, 1)
    with pytest.raises(MemoryAccessError):
        client.read_memory(0x0101, 2)
    with pytest.raises(ServiceNotSupportedError):
        client.read_adc(4, 1)
    with pytest.raises(ServiceNotSupportedError):
        client.read_function_property_state(17, 1, 51, 0, b"")


def test_descriptor_service_absent_or_failing() -> None:
    assert SnapshotClient().read_device_descriptor() is None
    with pytest.raises(AccessError, match="no response"):
        SnapshotClient(descriptor_error="no response").read_device_descriptor()


def test_invalid_hex_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path / "bad.yaml", 'memory:\n  0x0100: "xyz"\n')
    with pytest.raises(SnapshotValidationError, match="memory"):
        SnapshotClient.load(path)


def test_unknown_key_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path / "bad.yaml", 'descriptor: "07b0"\n')
    with pytest.raises(SnapshotValidationError, match="Schema validation failed"):
        SnapshotClient.load(path)


def test_element_size_must_divide_data(tmp_path: Path) -> None:
    path = _write(tmp_path / "bad.yaml", 'properties:\n  0:\n    71:\n      size: 2\n      data: "000000"\n')
    with pytest.raises(SnapshotValidationError, match="multiple of size"):
        SnapshotClient.load(path)


def test_duplicate_keys_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path / "bad.yaml", 'memory:\n  0x0100: "00"\n  0x0100: "01"\n')
    with pytest.raises(SnapshotValidationError, match="Duplicate key"):
        SnapshotClient.load(path)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SnapshotLoadError):
        SnapshotClient.load(tmp_path / "missing.yaml")
