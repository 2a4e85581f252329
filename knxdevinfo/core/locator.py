"""Discovery of the interface objects implemented by a device."""

from __future__ import annotations

import logging

from knxdevinfo.core import pid
from knxdevinfo.core.reader import DeviceReader
from knxdevinfo.core.session import CEMI_SERVER_OBJECT, DEVICE_OBJECT, InterrogationSession

LOGGER = logging.getLogger(__name__)

_DEVICE_OBJECT_INDEX = 0
_MAX_PROBED_OBJECTS = 100


def locate_interface_objects(session: InterrogationSession, reader: DeviceReader) -> dict[int, list[int]]:
    """Fill ``session.objects`` with object type -> object indices and return it.

    Uses the device object's interface object list if available, otherwise probes the
    object type of consecutive indices until the first read fails.
    """
    # no device object means no interface objects at all (BCU1, BCU2)
    if reader.elements(_DEVICE_OBJECT_INDEX, pid.OBJECT_TYPE) <= 0:
        LOGGER.debug("device does not implement interface objects")
        return session.objects

    objects: dict[int, list[int]] = {}
    count = reader.elements(_DEVICE_OBJECT_INDEX, pid.IO_LIST)
    if count > 0:
        outcome = reader.property(_DEVICE_OBJECT_INDEX, pid.IO_LIST, 1, count)
        if not outcome.ok:
            return session.objects
        data = outcome.data
        for index in range(len(data) // 2):
            object_type = int.from_bytes(data[2 * index : 2 * index + 2], "big")
            objects.setdefault(object_type, []).append(index)
    else:
        objects[DEVICE_OBJECT] = [_DEVICE_OBJECT_INDEX]
        for index in range(1, _MAX_PROBED_OBJECTS):
            outcome = reader.property(index, pid.OBJECT_TYPE)
            if not outcome.ok or not outcome.data:
                break
            object_type = int.from_bytes(outcome.data, "big")
            objects.setdefault(object_type, []).append(index)

        # USB interfaces often hide their cEMI server object from the probe
        if len(objects) == 1:
            objects[CEMI_SERVER_OBJECT] = [1]
            LOGGER.info("Device implements only Device Object and cEMI Object")

    session.objects.update(objects)
    LOGGER.debug("interface objects %s", session.objects)
    return session.objects
