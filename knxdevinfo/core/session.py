"""Per-device interrogation state."""

from __future__ import annotations

from dataclasses import dataclass, field

from knxdevinfo.core.model import DeviceDescriptor
from knxdevinfo.core.sink import ResultSink

DEVICE_OBJECT = 0
ADDRESS_TABLE_OBJECT = 1
ASSOCIATION_TABLE_OBJECT = 2
APPLICATION_PROGRAM_OBJECT = 3
INTERFACE_PROGRAM_OBJECT = 4
CEMI_SERVER_OBJECT = 8
KNXNETIP_OBJECT = 11
SECURITY_OBJECT = 17
RF_MEDIUM_OBJECT = 19

OBJECT_TYPE_NAMES = {
    0: "Device Object",
    1: "Addresstable Object",
    2: "Associationtable Object",
    3: "Application Program Object",
    4: "Interface Program Object",
    5: "KNX-Object Associationtable Object",
    6: "Router Object",
    7: "LTE Address Routing Table Object",
    8: "cEMI Server Object",
    9: "Group Object Table Object",
    10: "Polling Master",
    11: "KNXnet/IP Parameter Object",
    12: "Reserved",
    13: "File Server Object",
    17: "Security Object",
    19: "RF Medium Object",
}


def object_type_name(object_type: int) -> str:
    return OBJECT_TYPE_NAMES.get(object_type, f"Object type {object_type}")


@dataclass
class InterrogationSession:
    """State owned by a single interrogation run, passed explicitly through all components."""

    sink: ResultSink
    descriptor: DeviceDescriptor | None = None
    objects: dict[int, list[int]] = field(default_factory=dict)
    is_system_b: bool = False
    group_addresses_done: bool = False

    def indices(self, object_type: int) -> list[int]:
        return self.objects.get(object_type, [])

    def has_object(self, object_type: int) -> bool:
        return object_type in self.objects

    def object_name(self, object_index: int) -> str:
        for object_type, indices in self.objects.items():
            if object_index in indices:
                return object_type_name(object_type)
        return ""
