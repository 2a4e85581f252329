"""Formatting of raw KNX device data into human-readable values.

All functions are pure: they take the bytes (or number) read from a device and
return a display string. An empty string means "nothing worth reporting". Data
too short for its layout raises ``DecodeError``.
"""

from __future__ import annotations

import ipaddress
from typing import Callable

from knxdevinfo.core.errors import DecodeError


def _require(data: bytes, size: int, what: str) -> None:
    if len(data) < size:
        raise DecodeError(f"{what} requires {size} bytes, got {len(data)}")


def first_byte(data: bytes, what: str) -> int:
    _require(data, 1, what)
    return data[0]


def to_unsigned(data: bytes) -> int:
    if not data or len(data) > 8:
        raise DecodeError(f"cannot interpret {len(data)} bytes as unsigned value")
    return int.from_bytes(data, "big")


def unsigned(data: bytes) -> str:
    return str(to_unsigned(data))


def hex_string(data: bytes) -> str:
    return data.hex()


def prefixed_hex(data: bytes) -> str:
    return "0x" + data.hex() if data else ""


def individual_address(raw: int) -> str:
    return f"{(raw >> 12) & 0x0F}.{(raw >> 8) & 0x0F}.{raw & 0xFF}"


def group_address(raw: int) -> str:
    return f"{(raw >> 11) & 0x1F}/{(raw >> 8) & 0x07}/{raw & 0xFF}"


def individual_address_from(data: bytes) -> str:
    _require(data, 2, "individual address")
    return individual_address(int.from_bytes(data[:2], "big"))


def group_address_from(data: bytes) -> str:
    _require(data, 2, "group address")
    return group_address(int.from_bytes(data[:2], "big"))


def medium_type(medium: int) -> str:
    return {
        0: "Twisted Pair 1",
        1: "Power-line 110",
        2: "Radio Frequency",
        5: "KNX IP",
    }.get(medium, f"Type {medium}")


def firmware_type(firmware: int) -> str:
    return {
        0: "BCU 1, BCU 2, BIM M113",
        1: "Unidirectional devices",
        3: "Property based device management",
        7: "BIM M112",
        8: "IR Decoder, TP1 legacy",
        9: "Repeater, Coupler",
    }.get(firmware, f"Type {firmware}")


# DPT 22.1000, supported media bitset
_MEDIA = ((0x02, "TP1"), (0x04, "PL110"), (0x10, "RF"), (0x20, "KNX IP"))


def media_types(data: bytes) -> str:
    _require(data, 2, "media types")
    media = int.from_bytes(data[:2], "big")
    return ", ".join(name for bit, name in _MEDIA if media & bit)


_PEI_TYPES = {
    0: "No adapter",
    1: "Illegal adapter",
    2: "4 inputs, 1 output (LED)",
    4: "2 inputs / 2 outputs, 1 output (LED)",
    6: "3 inputs / 1 output, 1 output (LED)",
    8: "5 inputs",
    # type 10 is also used for the loadable serial protocol
    10: "FT1.2 protocol",
    12: "Serial sync message protocol",
    14: "Serial sync data block protocol",
    16: "Serial async message protocol",
    17: "Programmable I/O",
    19: "4 outputs, 1 output (LED)",
    20: "Download",
}


def pei_type(pei: int) -> str:
    if pei < 0 or pei == 0xFF:
        return "n/a"
    return _PEI_TYPES.get(pei, "Reserved")


def actual_pei_type(adc_value: int) -> int:
    return (10 * adc_value + 60) // 128


_RUN_ERROR_FLAGS = (
    "SYS0_ERR: buffer error",
    "SYS1_ERR: system state parity error",
    "EEPROM corrupted",
    "Stack overflow",
    "OBJ_ERR: group object/assoc. table error",
    "SYS2_ERR: transceiver error",
    "SYS3_ERR: confirm error",
)


def run_error(value: int) -> str:
    # flags are active low
    bits = ~value & 0xFF
    if bits == 0:
        return "OK"
    return ", ".join(flag for i, flag in enumerate(_RUN_ERROR_FLAGS) if bits & (1 << i))


_ERROR_FLAGS = (
    "System 1 internal system error",
    "Illegal system state",
    "Checksum / CRC error in internal non-volatile memory",
    "Stack overflow error",
    "Inconsistent system tables",
    "Physical transceiver error",
    "System 2 internal system error",
    "System 3 internal system error",
)


def error_flags(data: bytes) -> str:
    """Device object error flags, same layout as the BCU run error at 0x10d."""
    _require(data, 1, "error flags")
    flags = data[0]
    if flags == 0xFF:
        return "everything OK"
    return ", ".join(description for i, description in enumerate(_ERROR_FLAGS) if not flags & (1 << i))


_SYSTEM_STATE_BITS = (
    "Programming mode",
    "Normal operation",
    "Transport layer",
    "Application layer",
    "Serial PEI interface (msg protocol)",
    "User program",
    "Programming mode (ind. address)",
)


def system_state(value: int) -> str:
    # bit 7 is the even parity bit
    state = value & 0x7F
    return ", ".join(mode for bit, mode in enumerate(_SYSTEM_STATE_BITS) if state & (1 << bit))


def routing_count(value: int) -> str:
    return str((value >> 4) & 0x07)


def switch(data: bytes) -> str:
    _require(data, 1, "boolean")
    return "on" if data[-1] & 0x01 else "off"


_LOAD_STATES = {
    0: "Unloaded",
    1: "Loaded",
    2: "Loading",
    3: "Error (during load process)",
    4: "Unloading",
    5: "Load Completing (Intermediate)",
}

LOAD_STATE_ERROR = 3


def load_state(data: bytes) -> str:
    if not data:
        return "n/a"
    state = data[0]
    return _LOAD_STATES.get(state, f"Invalid load status {state}")


_RUN_STATES = {
    0: "Halted",
    1: "Running",
    2: "Ready",
    3: "Terminated",
    4: "Starting",
    5: "Shutting down",
}


def run_state(data: bytes) -> str:
    if not data:
        return "n/a"
    state = data[0]
    return _RUN_STATES.get(state, f"Invalid run state {state}")


# DPT 20.011 ErrorClass_System, the codes a load state error property reports most often
_ERROR_CLASS_SYSTEM = {
    0: "no fault",
    1: "general device malfunction (e.g., RAM, EEPROM, UI, watchdog, ...)",
    2: "checksum or CRC error in internal non-volatile memory",
    3: "checksum or CRC error in configuration data",
}


def error_class_system(data: bytes) -> str:
    _require(data, 1, "error class")
    code = data[0]
    return _ERROR_CLASS_SYSTEM.get(code, f"error class {code}")


def serial_number(data: bytes) -> str:
    _require(data, 3, "serial number")
    hex_digits = data.hex()
    return f"{hex_digits[:4]}:{hex_digits[4:]}"


def software_version(data: bytes) -> str:
    _require(data, 1, "version")
    if len(data) == 1:
        # BCU 1
        return f"{data[0] >> 4}.{data[0] & 0x0F}"
    magic = data[0] >> 3
    version = ((data[0] & 0x07) << 2) | ((data[1] & 0xC0) >> 6)
    revision = data[1] & 0x3F
    return f"[{magic}] {version}.{revision}"


def program_version(data: bytes, manufacturer_name: Callable[[int], str]) -> str:
    """Manufacturer (2 bytes), application type (2 bytes), version nibbles (1 byte)."""
    if len(data) != 5:
        return data.hex()
    manufacturer_id = int.from_bytes(data[:2], "big")
    return f"{manufacturer_name(manufacturer_id)} {data[2]:02x}{data[3]:02x} v{data[4] >> 4}.{data[4] & 0x0F}"


def service_control(data: bytes) -> tuple[str, str]:
    """Return (individual address write enabled, disabled EMI services)."""
    _require(data, 2, "service control")
    write_enabled = "yes" if data[1] & 0x04 else "no"
    services = (
        "Disabled services on EMI [Mgmt App TL-conn Switch TL-group Network Link User]: "
        f"{data[0]:08b}"
    )
    return write_enabled, services


def supported_comm_modes(data: bytes) -> str:
    """cEMI communication modes: bit 3 TLL, bit 2 raw, bit 1 busmonitor, bit 0 data link layer."""
    _require(data, 2, "supported communication modes")
    modes = data[1]
    return (
        f"Transport layer local {_flag(modes, 0x08)}, Data link layer modes: normal {_flag(modes, 0x01)}, "
        f"busmonitor {_flag(modes, 0x02)}, raw mode {_flag(modes, 0x04)}"
    )


def comm_mode(data: bytes) -> str:
    _require(data, 1, "communication mode")
    mode = data[0]
    return {
        0: "Data link layer",
        1: "Data link layer busmonitor",
        2: "Data link layer raw frames",
        6: "cEMI transport layer",
        0xFF: "no layer",
    }.get(mode, f"unknown/unspecified ({mode})")


def _flag(value: int, mask: int) -> str:
    return "true" if value & mask == mask else "false"


def _filters(value: int) -> str:
    return (
        f"ext. group addresses {_flag(value, 0x08)}, domain address {_flag(value, 0x04)}, "
        f"repeated frames {_flag(value, 0x02)}, own individual address {_flag(value, 0x01)}"
    )


def supported_filtering_modes(data: bytes) -> str:
    _require(data, 2, "supported filtering modes")
    return _filters(data[1])


def selected_filtering_modes(data: bytes) -> str:
    """A set bit disables the filter; by default all filters are active."""
    _require(data, 2, "selected filtering modes")
    if data[1] == 0:
        return "all supported filters active"
    return "disabled frame filters: " + _filters(data[1])


def supported_rf_modes(data: bytes) -> str:
    _require(data, 1, "supported RF modes")
    return (
        f"BiBat slave {_flag(data[0], 0x04)}, BiBat master {_flag(data[0], 0x02)}, "
        f"Async {_flag(data[0], 0x01)}"
    )


def selected_rf_mode(data: bytes) -> str:
    _require(data, 1, "selected RF mode")
    return (
        f"BiBat slave {_flag(data[0], 0x04)}, BiBat master {_flag(data[0], 0x02)}, "
        f"async {_flag(data[0], 0x01)}"
    )


_IP_ASSIGNMENT = ((0x01, "manual"), (0x02, "Bootstrap Protocol"), (0x04, "DHCP"), (0x08, "Auto IP"))

IP_ASSIGNMENT_MANUAL = 0x01
IP_ASSIGNMENT_BOOTP_OR_DHCP = 0x06


def ip_assignment(data: bytes) -> str:
    _require(data, 1, "IP assignment method")
    return ", ".join(name for bit, name in _IP_ASSIGNMENT if data[0] & bit)


def configured_ip_assignment(data: bytes, current: int) -> str:
    """Configured assignment method, or empty if it matches the current method."""
    _require(data, 1, "IP assignment method")
    if data[0] & 0x0F == current:
        return ""
    return ip_assignment(data)


_CAPABILITIES = (
    (0x01, "Device Management"),
    (0x02, "Tunneling"),
    (0x04, "Routing"),
    (0x08, "Remote Logging"),
    (0x10, "Remote Configuration and Diagnosis"),
    (0x20, "Object Server"),
)

CAPABILITY_TUNNELING = 0x02


def capabilities(data: bytes) -> str:
    _require(data, 2, "device capabilities")
    return ", ".join(name for bit, name in _CAPABILITIES if data[1] & bit)


def ip_address(data: bytes) -> str:
    if len(data) != 4:
        return "n/a"
    return str(ipaddress.IPv4Address(data))


def configured_ip_address(data: bytes, current: bytes) -> str:
    """Configured address, or empty if it equals the address currently in use."""
    return "" if data == current else ip_address(data)


def mac_address(data: bytes) -> str:
    return ":".join(f"{b:02x}" for b in data)


def friendly_name(chunks: list[bytes]) -> str:
    """Join 10-character pages of the device name, up to 30 characters or the first null."""
    name = bytearray()
    for chunk in chunks:
        for b in chunk:
            if b == 0 or len(name) >= 30:
                return name.decode("latin-1")
            name.append(b)
    return name.decode("latin-1")


def on_off(data: bytes) -> str:
    """Security mode from a function property response (return code, service, data)."""
    _require(data, 3, "security mode")
    return "on" if data[2] & 0x01 else "off"


def yes_no(data: bytes) -> str:
    _require(data, 1, "boolean")
    return "yes" if data[0] & 0x01 else "no"


def security_failure_counters(data: bytes) -> str:
    _require(data, 11, "security failure counters")
    scf, seq, crypto, access = (int.from_bytes(data[i : i + 2], "big") for i in range(3, 11, 2))
    return f"control field {scf}, sequence {seq}, cryptographic {crypto}, access {access}"


_SECURITY_ERRORS = (
    "reserved",
    "invalid SCF",
    "sequence error",
    "cryptographic error",
    "error against access & roles",
)


def latest_security_failure(data: bytes) -> str:
    """Failure log entry: source, destination, ctrl field 2, 6 byte sequence number, error type."""
    _require(data, 15, "security failure log entry")
    source = individual_address(int.from_bytes(data[3:5], "big"))
    dst_raw = int.from_bytes(data[5:7], "big")
    group = data[7] & 0x80
    destination = group_address(dst_raw) if group else individual_address(dst_raw)
    sequence = int.from_bytes(data[8:14], "big")
    error_type = data[14]
    if error_type >= len(_SECURITY_ERRORS):
        raise DecodeError(f"unknown security error type {error_type}")
    return f"{source}->{destination} seq {sequence}: {_SECURITY_ERRORS[error_type]}"
