"""Reading the group address table in its various realizations."""

from __future__ import annotations

import logging

from knxdevinfo.core import codecs, pid
from knxdevinfo.core.errors import DecodeError
from knxdevinfo.core.model import DeviceInfoItem
from knxdevinfo.core.parameters import CommonParameter
from knxdevinfo.core.reader import DeviceReader
from knxdevinfo.core.session import ADDRESS_TABLE_OBJECT, InterrogationSession

LOGGER = logging.getLogger(__name__)

# realization type 1, max. length 233
ADDR_GROUP_ADDRESS_TABLE = 0x0116
# realization type 8, length is implementation dependent
ADDR_GROUP_ADDRESS_TABLE_MASK_5705 = 0x4000
MASK_5705 = 0x5705

_RESPONDER = 0x8000


def read_group_addresses(session: InterrogationSession, reader: DeviceReader) -> DeviceInfoItem | None:
    """Emit the group addresses of the device, at most once per session."""
    if session.group_addresses_done:
        return None
    # a failed table read is not repeated later in the session
    session.group_addresses_done = True

    if session.descriptor is not None and session.descriptor.mask_version == MASK_5705:
        location = ADDR_GROUP_ADDRESS_TABLE_MASK_5705
    elif session.has_object(ADDRESS_TABLE_OBJECT):
        object_index = session.indices(ADDRESS_TABLE_OBJECT)[0]
        entries = reader.elements(object_index, pid.TABLE)
        if entries > 0:
            return _read_table_property(session, reader, object_index, entries)
        outcome = reader.property(object_index, pid.TABLE_REFERENCE)
        if not outcome.ok or not outcome.data:
            return None
        location = int.from_bytes(outcome.data, "big")
        if location <= 0:
            return None
    else:
        location = ADDR_GROUP_ADDRESS_TABLE

    return _read_table_memory(session, reader, location)


def _read_table_property(
    session: InterrogationSession,
    reader: DeviceReader,
    object_index: int,
    entries: int,
) -> DeviceInfoItem | None:
    raw = bytearray()
    addresses: list[str] = []
    for element in range(1, entries + 1):
        outcome = reader.property(object_index, pid.TABLE, element, 1)
        if not outcome.ok:
            LOGGER.debug("group address table element %d: %s", element, outcome.skip_reason)
            return None
        try:
            addresses.append(codecs.group_address_from(outcome.data))
        except DecodeError as exc:
            LOGGER.warning("decoding group address table element %d: %s", element, exc)
            return None
        raw += outcome.data
    return _done(session, ", ".join(addresses), bytes(raw))


def _read_table_memory(session: InterrogationSession, reader: DeviceReader, location: int) -> DeviceInfoItem | None:
    length_size = 2 if session.is_system_b else 1
    outcome = reader.memory(location, length_size)
    if not outcome.ok:
        return None
    entries = int.from_bytes(outcome.data, "big")
    session.sink.put(CommonParameter.GroupAddressTableEntries, str(entries), outcome.data)

    address = location + length_size
    first = 0
    if not session.is_system_b and entries > 0:
        # first entry holds the individual address of the device
        outcome = reader.memory(address, 2)
        if not outcome.ok:
            return None
        device_address = int.from_bytes(outcome.data, "big") & 0x7FFF
        session.sink.put(CommonParameter.DeviceAddress, codecs.individual_address(device_address), outcome.data)
        address += 2
        first = 1

    raw = bytearray()
    addresses: list[str] = []
    for _ in range(first, entries):
        outcome = reader.memory(address, 2)
        if not outcome.ok:
            return None
        entry = int.from_bytes(outcome.data, "big")
        group = codecs.group_address(entry & 0x7FFF)
        # device is the group responder
        addresses.append(group + "(R)" if entry & _RESPONDER else group)
        raw += outcome.data
        address += 2
    return _done(session, ", ".join(addresses), bytes(raw))


def _done(session: InterrogationSession, formatted: str, raw: bytes) -> DeviceInfoItem | None:
    if not formatted:
        return None
    return session.sink.put(CommonParameter.GroupAddresses, formatted, raw)
