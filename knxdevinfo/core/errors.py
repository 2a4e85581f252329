"""Domain-specific errors for knxdevinfo."""


class KnxDevinfoError(Exception):
    """Base error for knxdevinfo."""


class DeviceDescriptorError(KnxDevinfoError):
    """Raised when the device descriptor cannot be obtained; aborts the session."""


class AccessError(KnxDevinfoError):
    """Base error for a rejected or failed KNX read; never fatal to a session."""


class PropertyAccessError(AccessError):
    """Raised when an interface object property cannot be read."""


class MemoryAccessError(AccessError):
    """Raised when a device memory range cannot be read."""


class ServiceNotSupportedError(AccessError):
    """Raised when the access path does not offer a management service."""


class DecodeError(KnxDevinfoError):
    """Raised when raw data does not match the expected layout."""


class TransportError(KnxDevinfoError):
    """Raised when the underlying link fails; aborts the session."""


class InterrogationCanceled(KnxDevinfoError):
    """Raised when reading device information got interrupted."""


class SnapshotLoadError(KnxDevinfoError):
    """Raised when a device snapshot file cannot be read."""


class SnapshotValidationError(KnxDevinfoError):
    """Raised when a device snapshot does not conform to schema or semantics."""


class ManufacturerTableError(KnxDevinfoError):
    """Raised when a manufacturer table is invalid."""
