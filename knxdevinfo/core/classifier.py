"""Device generation classification based on the device descriptor (mask version)."""

from __future__ import annotations

from enum import Enum

from knxdevinfo.core.model import DeviceDescriptor


class Strategy(Enum):
    PL110_BCU1 = "pl110-bcu1"
    TP1_BCU1 = "tp1-bcu1"
    TP1_BCU2 = "tp1-bcu2"
    PROPERTY_BASED = "property-based"
    OBJECT_DISCOVERY = "object-discovery"


# BCU1/BCU2 have fixed memory layouts; BCU2 additionally has a few interface objects
STRATEGIES: dict[int, Strategy] = {
    0x1013: Strategy.PL110_BCU1,
    0x0010: Strategy.TP1_BCU1,
    0x0011: Strategy.TP1_BCU1,
    0x0012: Strategy.TP1_BCU1,
    0x0700: Strategy.TP1_BCU1,
    0x0701: Strategy.TP1_BCU1,
    0x0020: Strategy.TP1_BCU2,
    0x0021: Strategy.TP1_BCU2,
    0x0025: Strategy.TP1_BCU2,
    0x0300: Strategy.PROPERTY_BASED,
    0x0310: Strategy.PROPERTY_BASED,
    0x0311: Strategy.PROPERTY_BASED,
    0x0705: Strategy.PROPERTY_BASED,
    0x07B0: Strategy.PROPERTY_BASED,
    0x0910: Strategy.PROPERTY_BASED,
    0x0911: Strategy.PROPERTY_BASED,
    0x0912: Strategy.PROPERTY_BASED,
    0x091A: Strategy.PROPERTY_BASED,
    0x17B0: Strategy.PROPERTY_BASED,
    0x2311: Strategy.PROPERTY_BASED,
    0x27B0: Strategy.PROPERTY_BASED,
    0x5705: Strategy.PROPERTY_BASED,
    0x57B0: Strategy.PROPERTY_BASED,
}

# System B provides a load state error code and uses a 2 byte group address table length
SYSTEM_B_MASKS = frozenset({0x07B0, 0x17B0, 0x27B0, 0x57B0})


def classify(descriptor: DeviceDescriptor | None) -> Strategy:
    if descriptor is None:
        return Strategy.OBJECT_DISCOVERY
    return STRATEGIES.get(descriptor.mask_version, Strategy.OBJECT_DISCOVERY)


def is_system_b(descriptor: DeviceDescriptor | None) -> bool:
    return descriptor is not None and descriptor.mask_version in SYSTEM_B_MASKS
