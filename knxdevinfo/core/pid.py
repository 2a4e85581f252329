"""KNX interface object property identifiers used by the interrogation."""

# properties common to all interface objects
OBJECT_TYPE = 1
LOAD_STATE_CONTROL = 5
RUN_STATE_CONTROL = 6
TABLE_REFERENCE = 7
SERVICE_CONTROL = 8
FIRMWARE_REVISION = 9
SERIAL_NUMBER = 11
MANUFACTURER_ID = 12
PROGRAM_VERSION = 13
ORDER_INFO = 15
PEI_TYPE = 16
TABLE = 23
VERSION = 25
ERROR_CODE = 28

# device object
ERROR_FLAGS = 53
PROGMODE = 54
MAX_APDU_LENGTH = 56
SUBNET_ADDRESS = 57
DEVICE_ADDRESS = 58
IO_LIST = 71
HARDWARE_TYPE = 78
RF_DOMAIN_ADDRESS = 82
DEVICE_DESCRIPTOR = 83

# cEMI server object
MEDIUM_TYPE = 51
COMM_MODE = 52
CLIENT_SNA = 57
CLIENT_DEVICE_ADDRESS = 58
RF_MODE_SELECT = 60
RF_MODE_SUPPORT = 61
LEGACY_FILTERING_MODE_SELECT = 62
LEGACY_FILTERING_MODE_SUPPORT = 63
COMM_MODES_SUPPORTED = 64
FILTERING_MODE_SUPPORT = 65
FILTERING_MODE_SELECT = 66

# RF medium object, not the same id as the device object RF domain address
RF_MEDIUM_DOMAIN_ADDRESS = 56

# KNXnet/IP parameter object
ADDITIONAL_INDIVIDUAL_ADDRESSES = 53
CURRENT_IP_ASSIGNMENT_METHOD = 54
IP_ASSIGNMENT_METHOD = 55
CURRENT_IP_ADDRESS = 57
CURRENT_SUBNET_MASK = 58
CURRENT_DEFAULT_GATEWAY = 59
IP_ADDRESS = 60
SUBNET_MASK = 61
DEFAULT_GATEWAY = 62
DHCP_BOOTP_SERVER = 63
MAC_ADDRESS = 64
ROUTING_MULTICAST_ADDRESS = 66
TTL = 67
KNXNETIP_DEVICE_CAPABILITIES = 68
MSG_TRANSMIT_TO_IP = 74
FRIENDLY_NAME = 76

# security object
SECURITY_MODE = 51
SECURITY_FAILURES_LOG = 55
SECURITY_REPORT = 57
