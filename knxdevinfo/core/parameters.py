"""Device parameters that can be reported by an interrogation."""

from __future__ import annotations

import re
from enum import Enum

_CAPITAL_RE = re.compile(r"([A-Z])")


class Parameter:
    """Mixin for parameter enums; members are identified by their CamelCase name."""

    @property
    def group(self) -> str:
        return _GROUPS[type(self)]

    @property
    def friendly_name(self) -> str:
        # insert spaces before capitals, keep "IP" in one piece
        return _CAPITAL_RE.sub(r" \1", self.name).replace("I P", "IP").strip()


class CommonParameter(Parameter, Enum):
    DeviceDescriptor = "DeviceDescriptor"
    KnxMedium = "KnxMedium"
    FirmwareType = "FirmwareType"
    FirmwareVersion = "FirmwareVersion"
    HardwareType = "HardwareType"
    SerialNumber = "SerialNumber"
    DomainAddress = "DomainAddress"
    MaxApduLength = "MaxApduLength"
    Manufacturer = "Manufacturer"
    ManufacturerData = "ManufacturerData"
    DeviceTypeNumber = "DeviceTypeNumber"
    SoftwareVersion = "SoftwareVersion"
    # determined by reading the A/D converter, or the currently connected type in the device object
    ActualPeiType = "ActualPeiType"
    # required by the application, from the application program object or BCU memory
    RequiredPeiType = "RequiredPeiType"
    FirmwareRevision = "FirmwareRevision"
    RunError = "RunError"
    ProgrammingMode = "ProgrammingMode"
    SystemState = "SystemState"
    RoutingCount = "RoutingCount"
    GroupObjTableLocation = "GroupObjTableLocation"
    GroupAddressTableEntries = "GroupAddressTableEntries"
    DeviceAddress = "DeviceAddress"
    GroupAddresses = "GroupAddresses"
    ProgramVersion = "ProgramVersion"
    LoadStateControl = "LoadStateControl"
    LoadStateError = "LoadStateError"
    RunStateControl = "RunStateControl"
    OrderInfo = "OrderInfo"


class CemiParameter(Parameter, Enum):
    MediumType = "MediumType"
    SupportedCommModes = "SupportedCommModes"
    SelectedCommMode = "SelectedCommMode"
    ClientAddress = "ClientAddress"
    SupportedRfModes = "SupportedRfModes"
    SelectedRfMode = "SelectedRfMode"
    SupportedFilteringModes = "SupportedFilteringModes"
    SelectedFilteringModes = "SelectedFilteringModes"


class KnxipParameter(Parameter, Enum):
    DeviceName = "DeviceName"
    Capabilities = "Capabilities"
    MacAddress = "MacAddress"
    IPAddress = "IPAddress"
    SubnetMask = "SubnetMask"
    DefaultGateway = "DefaultGateway"
    CurrentIPAddress = "CurrentIPAddress"
    CurrentSubnetMask = "CurrentSubnetMask"
    CurrentDefaultGateway = "CurrentDefaultGateway"
    IPAssignment = "IPAssignment"
    ConfiguredIPAssignment = "ConfiguredIPAssignment"
    DhcpServer = "DhcpServer"
    CurrentIPAssignment = "CurrentIPAssignment"
    RoutingMulticast = "RoutingMulticast"
    TimeToLive = "TimeToLive"
    TransmitToIP = "TransmitToIP"
    AdditionalIndividualAddresses = "AdditionalIndividualAddresses"


class RfParameter(Parameter, Enum):
    DomainAddress = "DomainAddress"


class SecurityParameter(Parameter, Enum):
    SecurityMode = "SecurityMode"
    SecurityFailure = "SecurityFailure"
    SecurityFailureCounters = "SecurityFailureCounters"
    LastSecurityFailure = "LastSecurityFailure"


class InternalParameter(Parameter, Enum):
    """Parameters not shown in a category of their own yet."""

    IndividualAddressWriteEnabled = "IndividualAddressWriteEnabled"
    ServiceControl = "ServiceControl"
    AdditionalProfile = "AdditionalProfile"
    ErrorFlags = "ErrorFlags"


_GROUPS: dict[type, str] = {
    CommonParameter: "Common",
    CemiParameter: "cEMI",
    KnxipParameter: "KNX IP",
    RfParameter: "RF",
    SecurityParameter: "Security",
    InternalParameter: "Internal",
}
