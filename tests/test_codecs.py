from __future__ import annotations

import pytest

from knxdevinfo.core import codecs
from knxdevinfo.core.errors import DecodeError
from knxdevinfo.core.model import DeviceDescriptor


def test_device_descriptor_fields() -> None:
    dd = DeviceDescriptor.from_bytes(bytes.fromhex("07b0"))
    assert str(dd) == "07B0"
    assert dd.medium_type == 0
    assert dd.firmware_type == 7
    assert dd.firmware_version == 0xB0
    assert DeviceDescriptor.from_bytes(bytes.fromhex("57b0")).medium_type == 5


def test_device_descriptor_too_short() -> None:
    with pytest.raises(DecodeError):
        DeviceDescriptor.from_bytes(b"\x07")


def test_addresses() -> None:
    assert codecs.individual_address(0x1105) == "1.1.5"
    assert codecs.individual_address_from(bytes.fromhex("ffff")) == "15.15.255"
    assert codecs.group_address(0x0A03) == "1/2/3"
    assert codecs.group_address_from(bytes.fromhex("ffff")) == "31/7/255"
    with pytest.raises(DecodeError):
        codecs.group_address_from(b"\x0a")


@pytest.mark.parametrize(
    ("state", "expected"),
    [
        (0, "Unloaded"),
        (1, "Loaded"),
        (2, "Loading"),
        (3, "Error (during load process)"),
        (4, "Unloading"),
        (5, "Load Completing (Intermediate)"),
        (6, "Invalid load status 6"),
        (0xFF, "Invalid load status 255"),
    ],
)
def test_load_state(state: int, expected: str) -> None:
    assert codecs.load_state(bytes([state])) == expected


def test_run_state() -> None:
    assert codecs.run_state(b"\x01") == "Running"
    assert codecs.run_state(b"\x09") == "Invalid run state 9"


def test_actual_pei_type_from_adc() -> None:
    assert codecs.actual_pei_type(0) == 0
    assert codecs.actual_pei_type(128) == 10
    assert codecs.pei_type(10) == "FT1.2 protocol"
    assert codecs.pei_type(0xFF) == "n/a"
    assert codecs.pei_type(11) == "Reserved"


def test_bcu_status() -> None:
    assert codecs.run_error(0xFF) == "OK"
    assert codecs.run_error(0xFE) == "SYS0_ERR: buffer error"
    assert codecs.error_flags(b"\xff") == "everything OK"
    assert codecs.error_flags(b"\xfd") == "Illegal system state"
    # parity bit is ignored
    assert codecs.system_state(0xAE) == "Normal operation, Transport layer, Application layer, User program"
    assert codecs.routing_count(0x61) == "6"
    assert codecs.switch(b"\x2f") == "on"
    assert codecs.switch(b"\x2e") == "off"


def test_versions_and_serial_number() -> None:
    assert codecs.software_version(b"\x12") == "1.2"
    assert codecs.software_version(bytes.fromhex("0845")) == "[1] 1.5"
    assert codecs.serial_number(bytes.fromhex("00c501020304")) == "00c5:01020304"
    names = {0x00C5: "Weinzierl Engineering GmbH"}
    assert (
        codecs.program_version(bytes.fromhex("00c5001221"), lambda i: names.get(i, "Unknown"))
        == "Weinzierl Engineering GmbH 0012 v2.1"
    )
    assert codecs.program_version(bytes.fromhex("00c5"), lambda i: "x") == "00c5"


def test_error_class_system() -> None:
    assert codecs.error_class_system(b"\x02") == "checksum or CRC error in internal non-volatile memory"
    assert codecs.error_class_system(b"\x09") == "error class 9"


def test_service_control() -> None:
    write_enabled, services = codecs.service_control(bytes.fromhex("8104"))
    assert write_enabled == "yes"
    assert services.endswith(": 10000001")
    with pytest.raises(DecodeError):
        codecs.service_control(b"\x00")


def test_cemi_formats() -> None:
    assert codecs.media_types(bytes.fromhex("0022")) == "TP1, KNX IP"
    assert codecs.comm_mode(b"\x00") == "Data link layer"
    assert codecs.comm_mode(b"\x07") == "unknown/unspecified (7)"
    assert codecs.selected_filtering_modes(b"\x00\x00") == "all supported filters active"
    assert codecs.supported_rf_modes(b"\x01") == "BiBat slave false, BiBat master false, Async true"


def test_knxip_formats() -> None:
    assert codecs.ip_assignment(b"\x05") == "manual, DHCP"
    assert codecs.capabilities(bytes.fromhex("0007")) == "Device Management, Tunneling, Routing"
    assert codecs.ip_address(bytes([192, 168, 1, 10])) == "192.168.1.10"
    assert codecs.ip_address(bytes([192, 168, 1])) == "n/a"
    assert codecs.mac_address(bytes.fromhex("00246d0102ff")) == "00:24:6d:01:02:ff"


def test_configured_ip_values() -> None:
    assert codecs.configured_ip_assignment(b"\x04", 0x04) == ""
    assert codecs.configured_ip_assignment(b"\x01", 0x04) == "manual"
    assert codecs.configured_ip_address(bytes([192, 168, 1, 10]), bytes([192, 168, 1, 10])) == ""
    assert codecs.configured_ip_address(bytes([255, 255, 0, 0]), bytes(4)) == "255.255.0.0"
    with pytest.raises(DecodeError):
        codecs.configured_ip_assignment(b"", 0x04)


def test_first_byte_requires_data() -> None:
    assert codecs.first_byte(b"\x61\x00", "routing count") == 0x61
    with pytest.raises(DecodeError, match="routing count"):
        codecs.first_byte(b"", "routing count")


def test_friendly_name_stops_at_null_and_length() -> None:
    assert codecs.friendly_name([b"KNX IP Rou", b"ter\x00\x00\x00\x00\x00\x00\x00"]) == "KNX IP Router"
    assert codecs.friendly_name([b"a" * 10, b"b" * 10, b"c" * 10, b"d" * 10]) == "a" * 10 + "b" * 10 + "c" * 10


def test_security_formats() -> None:
    assert codecs.on_off(bytes.fromhex("000001")) == "on"
    assert codecs.yes_no(b"\x00") == "no"
    counters = bytes.fromhex("000000" "0001" "0002" "0003" "0004")
    assert codecs.security_failure_counters(counters) == "control field 1, sequence 2, cryptographic 3, access 4"


def test_latest_security_failure() -> None:
    entry = bytes.fromhex("000100" "1101" "0a03" "80" "00000000002a" "02")
    assert codecs.latest_security_failure(entry) == "1.1.1->1/2/3 seq 42: sequence error"

    to_device = bytes.fromhex("000100" "1101" "1205" "00" "000000000001" "04")
    assert codecs.latest_security_failure(to_device) == "1.1.1->1.2.5 seq 1: error against access & roles"

    with pytest.raises(DecodeError):
        codecs.latest_security_failure(entry[:-1])
    with pytest.raises(DecodeError):
        codecs.latest_security_failure(entry[:-1] + b"\x07")


def test_unsigned() -> None:
    assert codecs.unsigned(b"\x00\xfe") == "254"
    with pytest.raises(DecodeError):
        codecs.unsigned(b"")
