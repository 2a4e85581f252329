"""Service layer reading and decoding the information of one KNX device."""

from __future__ import annotations

import logging
from collections.abc import Callable

from knxdevinfo.clients.base import DeviceClient
from knxdevinfo.core import codecs, pid
from knxdevinfo.core.classifier import Strategy, classify, is_system_b
from knxdevinfo.core.errors import (
    AccessError,
    DecodeError,
    DeviceDescriptorError,
    InterrogationCanceled,
    KnxDevinfoError,
    TransportError,
)
from knxdevinfo.core.group_table import read_group_addresses
from knxdevinfo.core.locator import locate_interface_objects
from knxdevinfo.core.manufacturers import ManufacturerTable, default_manufacturers
from knxdevinfo.core.model import DeviceDescriptor, InterrogationReport, ItemCallback, ReadOutcome
from knxdevinfo.core.parameters import (
    CemiParameter,
    CommonParameter,
    InternalParameter,
    KnxipParameter,
    Parameter,
    RfParameter,
    SecurityParameter,
)
from knxdevinfo.core.reader import DeviceReader
from knxdevinfo.core.session import (
    ADDRESS_TABLE_OBJECT,
    APPLICATION_PROGRAM_OBJECT,
    ASSOCIATION_TABLE_OBJECT,
    CEMI_SERVER_OBJECT,
    DEVICE_OBJECT,
    INTERFACE_PROGRAM_OBJECT,
    KNXNETIP_OBJECT,
    RF_MEDIUM_OBJECT,
    SECURITY_OBJECT,
    InterrogationSession,
)
from knxdevinfo.core.sink import ResultSink, put_decoded

LOGGER = logging.getLogger(__name__)

# BCU memory layout
ADDR_SYSTEM_STATE = 0x0060
ADDR_MANUFACTURER_DATA = 0x0101
ADDR_PL110_DOMAIN_ADDRESS = 0x0102
ADDR_BCU2_APP_ID = 0x0103
ADDR_MANUFACTURER = 0x0104
ADDR_DEVICE_TYPE = 0x0105
ADDR_VERSION = 0x0107
ADDR_PEI_TYPE = 0x0109
ADDR_RUN_ERROR = 0x010D
ADDR_ROUTING_COUNT = 0x010E
ADDR_GROUP_OBJECT_TABLE_PTR = 0x0112

_PEI_ADC_CHANNEL = 4
_PEI_ADC_REPEAT = 1
_FRIENDLY_NAME_PAGE = 10
_FRIENDLY_NAME_LENGTH = 30
_SECURITY_FAILURE_LOG_ENTRIES = 5

Codec = Callable[[bytes], str]


def _byte(codec: Callable[[int], str], what: str) -> Codec:
    return lambda data: codec(codecs.first_byte(data, what))


class DeviceInfoService:
    """Reads all accessible information of a single KNX device.

    An instance is bound to one device and one run; create a new service per device.
    Items are streamed to ``on_item`` as soon as they are decoded.
    """

    def __init__(
        self,
        client: DeviceClient,
        *,
        descriptor: bytes | None = None,
        on_item: ItemCallback | None = None,
        manufacturers: ManufacturerTable | None = None,
    ) -> None:
        self.reader = DeviceReader(client)
        self.manufacturers = manufacturers or default_manufacturers()
        self.session = InterrogationSession(sink=ResultSink(on_item))
        self._descriptor = descriptor

    @property
    def sink(self) -> ResultSink:
        return self.session.sink

    def run(self) -> InterrogationReport:
        """Run the interrogation and return everything read so far.

        Cancellation is reported through ``InterrogationReport.canceled``. A missing device
        descriptor raises ``DeviceDescriptorError`` and a failed link raises ``TransportError``.
        """
        try:
            self.read_device_info()
        except InterrogationCanceled as exc:
            LOGGER.info("reading device info canceled")
            return self._report(canceled=True, error=exc)
        except DeviceDescriptorError as exc:
            LOGGER.error("reading device info failed: %s", exc)
            raise
        return self._report()

    def _report(self, *, canceled: bool = False, error: Exception | None = None) -> InterrogationReport:
        return InterrogationReport(
            items=tuple(self.sink.items),
            descriptor=self.session.descriptor,
            canceled=canceled,
            error=error,
        )

    def read_device_info(self) -> None:
        """Run all interrogation phases; raises on fatal errors and cancellation."""
        session = self.session
        self._resolve_descriptor()

        strategy = classify(session.descriptor)
        LOGGER.info("device descriptor %s, using %s strategy", session.descriptor, strategy.value)
        self._phase("memory layout", self._read_memory_layout, strategy)
        session.is_system_b = is_system_b(session.descriptor)

        if session.has_object(DEVICE_OBJECT):
            self._phase("device object", self._read_device_object, session.indices(DEVICE_OBJECT)[0])

        self._phase("actual PEI type", self._read_actual_pei_type)
        self._phase("programming mode", self._read_programming_mode)

        self._iterate(APPLICATION_PROGRAM_OBJECT, self._read_application_program)
        self._iterate(INTERFACE_PROGRAM_OBJECT, self._read_program)

        self._iterate(ADDRESS_TABLE_OBJECT, self._read_load_state)
        self._iterate(ASSOCIATION_TABLE_OBJECT, self._read_load_state)
        if not session.group_addresses_done:
            self._phase("group addresses", read_group_addresses, session, self.reader)

        self._iterate(CEMI_SERVER_OBJECT, self._read_cemi_server_object)
        self._iterate(RF_MEDIUM_OBJECT, self._read_rf_medium_object)
        self._iterate(KNXNETIP_OBJECT, self._read_knxip_object)
        self._iterate(SECURITY_OBJECT, self._read_security_object)

    def _phase(self, name: str, func: Callable[..., object], *args: object) -> None:
        try:
            func(*args)
        except (InterrogationCanceled, TransportError, DeviceDescriptorError):
            raise
        except KnxDevinfoError as exc:
            LOGGER.warning("reading %s: %s", name, exc)

    def _iterate(self, object_type: int, read: Callable[[int], None]) -> None:
        for n, object_index in enumerate(self.session.indices(object_type), start=1):
            name = self.session.object_name(object_index)
            self.sink.enter(name if n == 1 else f"{name} {n}")
            self._phase(name, read, object_index)

    # device descriptor

    def _resolve_descriptor(self) -> None:
        if self._descriptor is not None:
            try:
                supplied = DeviceDescriptor.from_bytes(self._descriptor)
            except DecodeError as exc:
                LOGGER.warning("supplied device descriptor %s: %s", self._descriptor.hex(), exc)
            else:
                self._put_descriptor(supplied)
                return
        try:
            data = self.reader.client.read_device_descriptor()
        except AccessError as exc:
            raise DeviceDescriptorError(f"reading device descriptor: {exc}") from exc
        if data is None:
            LOGGER.info("device descriptor not available, discovering interface objects")
            return
        try:
            descriptor = DeviceDescriptor.from_bytes(data)
        except DecodeError as exc:
            raise DeviceDescriptorError(str(exc)) from exc
        self._put_descriptor(descriptor)

    def _put_descriptor(self, dd: DeviceDescriptor) -> None:
        self.session.descriptor = dd
        put = self.sink.put
        put(CommonParameter.DeviceDescriptor, str(dd), dd.to_bytes())
        put(CommonParameter.KnxMedium, codecs.medium_type(dd.medium_type), bytes([dd.medium_type]))
        put(CommonParameter.FirmwareType, codecs.firmware_type(dd.firmware_type), bytes([dd.firmware_type]))
        put(CommonParameter.FirmwareVersion, str(dd.firmware_version), bytes([dd.firmware_version]))

    # read and decode helpers

    def _read(self, parameter: Parameter, object_index: int, property_id: int, codec: Codec) -> ReadOutcome:
        LOGGER.debug("read %d|%d %s", object_index, property_id, parameter.friendly_name)
        return put_decoded(self.sink, parameter, self.reader.property(object_index, property_id), codec)

    def _read_unsigned(self, parameter: Parameter, object_index: int, property_id: int) -> ReadOutcome:
        return self._read(parameter, object_index, property_id, codecs.unsigned)

    def _read_hex(self, parameter: Parameter, object_index: int, property_id: int) -> ReadOutcome:
        return self._read(parameter, object_index, property_id, codecs.hex_string)

    def _read_memory(self, parameter: Parameter, address: int, length: int, codec: Codec) -> ReadOutcome:
        LOGGER.debug("read 0x%04x..0x%04x %s", address, address + length, parameter.friendly_name)
        return put_decoded(self.sink, parameter, self.reader.memory(address, length), codec)

    def _read_function_property(
        self,
        parameter: Parameter,
        property_id: int,
        service: int,
        info: bytes,
        codec: Codec,
    ) -> ReadOutcome:
        outcome = self.reader.function_property(SECURITY_OBJECT, property_id, service, info)
        return put_decoded(self.sink, parameter, outcome, codec)

    def _manufacturer(self, data: bytes) -> str:
        return self.manufacturers.name(codecs.to_unsigned(data))

    # BCU memory layouts

    def _read_memory_layout(self, strategy: Strategy) -> None:
        readers: dict[Strategy, Callable[[], object]] = {
            Strategy.PL110_BCU1: self._read_pl110_bcu1,
            Strategy.TP1_BCU1: self._read_tp1_bcu1,
            Strategy.TP1_BCU2: self._read_tp1_bcu2,
        }
        read = readers.get(strategy, self._locate_objects)
        read()

    def _locate_objects(self) -> None:
        locate_interface_objects(self.session, self.reader)

    def _read_pl110_bcu1(self) -> None:
        self._read_memory(CommonParameter.DomainAddress, ADDR_PL110_DOMAIN_ADDRESS, 2, codecs.hex_string)
        self._read_bcu_info(bcu1=True)

    def _read_tp1_bcu1(self) -> None:
        self._read_memory(CommonParameter.ManufacturerData, ADDR_MANUFACTURER_DATA, 3, codecs.hex_string)
        self._read_bcu_info(bcu1=True)

    def _read_tp1_bcu2(self) -> None:
        self._read_memory(CommonParameter.Manufacturer, ADDR_MANUFACTURER_DATA, 2, self._manufacturer)
        # app manufacturer differs from the product manufacturer if a compatible program was downloaded
        outcome = self.reader.memory(ADDR_BCU2_APP_ID, 5)
        if outcome.ok and len(outcome.data) == 5:
            app_id = outcome.data
            LOGGER.info(
                "appId 0x%s - app manufacturer: %s, SW dev type %d, SW version %d",
                app_id.hex(),
                self.manufacturers.name(int.from_bytes(app_id[:2], "big")),
                int.from_bytes(app_id[2:4], "big"),
                app_id[4],
            )
        self._read_bcu_info(bcu1=False)
        # Device Object, Address table object, Assoc table object, App program object
        self._locate_objects()

    def _read_bcu_info(self, *, bcu1: bool) -> None:
        if bcu1:
            self._read_memory(CommonParameter.Manufacturer, ADDR_MANUFACTURER, 1, self._manufacturer)
            self._read_memory(CommonParameter.DeviceTypeNumber, ADDR_DEVICE_TYPE, 2, codecs.hex_string)
        self._read_memory(CommonParameter.SoftwareVersion, ADDR_VERSION, 1, codecs.software_version)
        # mechanical PEI type required by the application
        self._read_memory(CommonParameter.RequiredPeiType, ADDR_PEI_TYPE, 1, _byte(codecs.pei_type, "PEI type"))
        self._read_memory(CommonParameter.RunError, ADDR_RUN_ERROR, 1, _byte(codecs.run_error, "run error"))
        self._read_memory(CommonParameter.SystemState, ADDR_SYSTEM_STATE, 1, _byte(codecs.system_state, "system state"))
        self._read_memory(
            CommonParameter.RoutingCount, ADDR_ROUTING_COUNT, 1, _byte(codecs.routing_count, "routing count")
        )
        self._read_memory(
            CommonParameter.GroupObjTableLocation, ADDR_GROUP_OBJECT_TABLE_PTR, 1, codecs.hex_string
        )
        read_group_addresses(self.session, self.reader)

    # device object

    def _read_device_object(self, object_index: int) -> None:
        self._read(CommonParameter.Manufacturer, object_index, pid.MANUFACTURER_ID, self._manufacturer)
        self._read_hex(CommonParameter.OrderInfo, object_index, pid.ORDER_INFO)
        self._read(CommonParameter.SerialNumber, object_index, pid.SERIAL_NUMBER, codecs.serial_number)
        # physical PEI type, i.e., the currently connected PEI type
        self._read_unsigned(CommonParameter.ActualPeiType, object_index, pid.PEI_TYPE)
        # 6 bytes, most significant byte always 0
        self._read_hex(CommonParameter.HardwareType, object_index, pid.HARDWARE_TYPE)
        self._read_unsigned(CommonParameter.FirmwareRevision, object_index, pid.FIRMWARE_REVISION)

        self._read_additional_profile(object_index)

        self._read_service_control(object_index)
        # mandatory if the cEMI server supports RF; some devices store it only here
        self._read(CommonParameter.DomainAddress, object_index, pid.RF_DOMAIN_ADDRESS, codecs.hex_string)
        self._read(CommonParameter.SoftwareVersion, object_index, pid.VERSION, codecs.software_version)
        self._read_unsigned(CommonParameter.MaxApduLength, object_index, pid.MAX_APDU_LENGTH)
        self._read(InternalParameter.ErrorFlags, object_index, pid.ERROR_FLAGS, codecs.error_flags)

    def _read_additional_profile(self, object_index: int) -> None:
        # a device descriptor different from ours indicates a device combined with another profile,
        # which then has its own individual address
        outcome = self.reader.property(object_index, pid.DEVICE_DESCRIPTOR)
        if outcome.ok:
            try:
                profile = DeviceDescriptor.from_bytes(outcome.data)
            except DecodeError as exc:
                LOGGER.warning("decoding %s: %s", CommonParameter.DeviceDescriptor.friendly_name, exc)
            else:
                if self.session.descriptor is None:
                    self._put_descriptor(profile)
                elif profile != self.session.descriptor:
                    self.sink.put(InternalParameter.AdditionalProfile, str(profile), outcome.data)

        subnet = self.reader.property(object_index, pid.SUBNET_ADDRESS)
        device = self.reader.property(object_index, pid.DEVICE_ADDRESS)
        if subnet.ok and device.ok and subnet.data and device.data:
            raw = bytes([subnet.data[0], device.data[0]])
            address = codecs.individual_address_from(raw)
            self.sink.put(CommonParameter.DeviceAddress, f"Additional profile address {address}", raw)

    def _read_service_control(self, object_index: int) -> None:
        outcome = self.reader.property(object_index, pid.SERVICE_CONTROL)
        if not outcome.ok:
            return
        try:
            write_enabled, services = codecs.service_control(outcome.data)
        except DecodeError as exc:
            LOGGER.warning("decoding %s: %s", InternalParameter.ServiceControl.friendly_name, exc)
            return
        self.sink.put(InternalParameter.IndividualAddressWriteEnabled, write_enabled, bytes([outcome.data[1] & 0x04]))
        self.sink.put(InternalParameter.ServiceControl, services, outcome.data[:1])

    def _read_actual_pei_type(self) -> None:
        outcome = self.reader.adc(_PEI_ADC_CHANNEL, _PEI_ADC_REPEAT)
        if not outcome.ok:
            LOGGER.debug(
                "reading actual PEI type (A/D converter channel %d, repeat %d): %s",
                _PEI_ADC_CHANNEL,
                _PEI_ADC_REPEAT,
                outcome.skip_reason,
            )
            return
        pei = codecs.actual_pei_type(int.from_bytes(outcome.data, "big"))
        self.sink.put(CommonParameter.ActualPeiType, codecs.pei_type(pei), outcome.data)

    def _read_programming_mode(self) -> None:
        if self.session.has_object(DEVICE_OBJECT):
            outcome = self.reader.property(self.session.indices(DEVICE_OBJECT)[0], pid.PROGMODE)
            if outcome.ok:
                put_decoded(self.sink, CommonParameter.ProgrammingMode, outcome, codecs.switch)
                return
        # fall back to the memory location of the system state
        self._read_memory(CommonParameter.ProgrammingMode, ADDR_SYSTEM_STATE, 1, codecs.switch)

    # application and interface programs

    def _read_application_program(self, object_index: int) -> None:
        self._read(
            CommonParameter.RequiredPeiType,
            object_index,
            pid.PEI_TYPE,
            codecs.unsigned,
        )
        self._read_program(object_index)

    def _read_program(self, object_index: int) -> None:
        self._read(
            CommonParameter.ProgramVersion,
            object_index,
            pid.PROGRAM_VERSION,
            lambda d: codecs.program_version(d, self.manufacturers.name),
        )
        self._read_load_state(object_index)
        self._read(CommonParameter.RunStateControl, object_index, pid.RUN_STATE_CONTROL, codecs.run_state)

    def _read_load_state(self, object_index: int) -> None:
        outcome = self._read(CommonParameter.LoadStateControl, object_index, pid.LOAD_STATE_CONTROL, codecs.load_state)
        # System B provides an error code for load state "Error"
        if self.session.is_system_b and outcome.ok and outcome.data[:1] == bytes([codecs.LOAD_STATE_ERROR]):
            self._read(CommonParameter.LoadStateError, object_index, pid.ERROR_CODE, codecs.error_class_system)

    # cEMI server and RF medium

    def _read_cemi_server_object(self, object_index: int) -> None:
        self._read(CemiParameter.MediumType, object_index, pid.MEDIUM_TYPE, codecs.media_types)
        # data link layer mode is mandatory for any cEMI server
        self._read(CemiParameter.SupportedCommModes, object_index, pid.COMM_MODES_SUPPORTED, codecs.supported_comm_modes)
        self._read(CemiParameter.SelectedCommMode, object_index, pid.COMM_MODE, codecs.comm_mode)

        # a USB interface combined with another profile keeps its own address in the cEMI server object
        device = self.reader.property(object_index, pid.CLIENT_DEVICE_ADDRESS)
        subnet = self.reader.property(object_index, pid.CLIENT_SNA)
        if device.ok and subnet.ok and device.data and subnet.data:
            raw = bytes([subnet.data[0], device.data[0]])
            address = codecs.individual_address_from(raw)
            self.sink.put(CemiParameter.ClientAddress, f"USB cEMI client address {address}", raw)

        for support, select in (
            (pid.FILTERING_MODE_SUPPORT, pid.FILTERING_MODE_SELECT),
            (pid.LEGACY_FILTERING_MODE_SUPPORT, pid.LEGACY_FILTERING_MODE_SELECT),
        ):
            self._read(CemiParameter.SupportedFilteringModes, object_index, support, codecs.supported_filtering_modes)
            self._read(CemiParameter.SelectedFilteringModes, object_index, select, codecs.selected_filtering_modes)

        self._read(CemiParameter.SupportedRfModes, object_index, pid.RF_MODE_SUPPORT, codecs.supported_rf_modes)
        self._read(CemiParameter.SelectedRfMode, object_index, pid.RF_MODE_SELECT, codecs.selected_rf_mode)

    def _read_rf_medium_object(self, object_index: int) -> None:
        self._read(RfParameter.DomainAddress, object_index, pid.RF_MEDIUM_DOMAIN_ADDRESS, codecs.prefixed_hex)

    # KNXnet/IP

    def _read_knxip_object(self, object_index: int) -> None:
        try:
            self._read_knxip_parameters(object_index)
        except (InterrogationCanceled, TransportError):
            raise
        except (KnxDevinfoError, ValueError, IndexError) as exc:
            LOGGER.warning("reading KNXnet/IP parameters of object %d: %s", object_index, exc, exc_info=True)

    def _read_knxip_parameters(self, object_index: int) -> None:
        self._read_friendly_name(object_index)

        outcome = self._read(
            KnxipParameter.Capabilities, object_index, pid.KNXNETIP_DEVICE_CAPABILITIES, codecs.capabilities
        )
        capabilities = outcome.data if outcome.ok and len(outcome.data) >= 2 else bytes(2)
        supports_tunneling = bool(capabilities[1] & codecs.CAPABILITY_TUNNELING)

        self._read(KnxipParameter.MacAddress, object_index, pid.MAC_ADDRESS, codecs.mac_address)

        outcome = self._read(
            KnxipParameter.CurrentIPAssignment, object_index, pid.CURRENT_IP_ASSIGNMENT_METHOD, codecs.ip_assignment
        )
        current_assignment = outcome.data[0] & 0x0F if outcome.ok and outcome.data else 0

        current_ip = self._read_ip(KnxipParameter.CurrentIPAddress, object_index, pid.CURRENT_IP_ADDRESS)
        current_mask = self._read_ip(KnxipParameter.CurrentSubnetMask, object_index, pid.CURRENT_SUBNET_MASK)
        current_gateway = self._read_ip(KnxipParameter.CurrentDefaultGateway, object_index, pid.CURRENT_DEFAULT_GATEWAY)
        if current_assignment & codecs.IP_ASSIGNMENT_BOOTP_OR_DHCP:
            self._read_ip(KnxipParameter.DhcpServer, object_index, pid.DHCP_BOOTP_SERVER)

        # configured method is only of interest if it differs from the current one
        outcome = self._read(
            KnxipParameter.ConfiguredIPAssignment,
            object_index,
            pid.IP_ASSIGNMENT_METHOD,
            lambda d: codecs.configured_ip_assignment(d, current_assignment),
        )
        manual = outcome.ok and bool(outcome.data) and bool(outcome.data[0] & codecs.IP_ASSIGNMENT_MANUAL)
        if manual:
            for parameter, property_id, current in (
                (KnxipParameter.IPAddress, pid.IP_ADDRESS, current_ip),
                (KnxipParameter.SubnetMask, pid.SUBNET_MASK, current_mask),
                (KnxipParameter.DefaultGateway, pid.DEFAULT_GATEWAY, current_gateway),
            ):
                self._read(
                    parameter,
                    object_index,
                    property_id,
                    lambda d, current=current: codecs.configured_ip_address(d, current),
                )

        self._read_ip(KnxipParameter.RoutingMulticast, object_index, pid.ROUTING_MULTICAST_ADDRESS)
        self._read_unsigned(KnxipParameter.TimeToLive, object_index, pid.TTL)
        self._read_unsigned(KnxipParameter.TransmitToIP, object_index, pid.MSG_TRANSMIT_TO_IP)

        if supports_tunneling:
            self._read_additional_addresses(object_index)

    def _read_ip(self, parameter: Parameter, object_index: int, property_id: int) -> bytes:
        outcome = self._read(parameter, object_index, property_id, codecs.ip_address)
        return outcome.data if outcome.ok else bytes(4)

    def _read_friendly_name(self, object_index: int) -> None:
        LOGGER.debug("read %s ...", KnxipParameter.DeviceName.friendly_name)
        chunks: list[bytes] = []
        for start in range(1, _FRIENDLY_NAME_LENGTH + 1, _FRIENDLY_NAME_PAGE):
            outcome = self.reader.property_block(object_index, pid.FRIENDLY_NAME, start, _FRIENDLY_NAME_PAGE)
            if not outcome.ok:
                LOGGER.debug("reading %s: %s", KnxipParameter.DeviceName, outcome.skip_reason)
                return
            chunks.append(outcome.data)
            if len(outcome.data) < _FRIENDLY_NAME_PAGE or 0 in outcome.data:
                break
        name = codecs.friendly_name(chunks)
        if name:
            self.sink.put(KnxipParameter.DeviceName, name, b"".join(chunks))

    def _read_additional_addresses(self, object_index: int) -> None:
        entries = self.reader.elements(object_index, pid.ADDITIONAL_INDIVIDUAL_ADDRESSES)
        if entries <= 0:
            return
        outcome = self.reader.property(object_index, pid.ADDITIONAL_INDIVIDUAL_ADDRESSES, 1, entries)
        put_decoded(
            self.sink,
            KnxipParameter.AdditionalIndividualAddresses,
            outcome,
            lambda d: " ".join(codecs.individual_address_from(d[i : i + 2]) for i in range(0, len(d) - 1, 2)),
        )

    # KNX Data Security

    def _read_security_object(self, object_index: int) -> None:
        self._read_function_property(SecurityParameter.SecurityMode, pid.SECURITY_MODE, 0, b"", codecs.on_off)
        self._read(SecurityParameter.SecurityFailure, object_index, pid.SECURITY_REPORT, codecs.yes_no)
        self._read_function_property(
            SecurityParameter.SecurityFailureCounters,
            pid.SECURITY_FAILURES_LOG,
            0,
            b"\x00",
            codecs.security_failure_counters,
        )
        for index in range(_SECURITY_FAILURE_LOG_ENTRIES):
            outcome = self._read_function_property(
                SecurityParameter.LastSecurityFailure,
                pid.SECURITY_FAILURES_LOG,
                1,
                bytes([index]),
                codecs.latest_security_failure,
            )
            if not outcome.ok:
                break

