"""Exception hierarchy for OLT queries."""


class OLTError(Exception):
    """Base exception for all OLT query errors."""


class OLTConnectionError(OLTError):
    """TCP connection refused, timed out or closed by the device."""


class AuthenticationError(OLTError):
    """An expected prompt never appeared during login or enable."""

    def __init__(self, message: str, step: str | None = None):
        self.step = step
        super().__init__(message)


class ContextError(OLTError):
    """Interface context selection landed somewhere unexpected."""

    def __init__(self, message: str, port: str | None = None):
        self.port = port
        super().__init__(message)


class ParseError(OLTError):
    """A key:value block contained none of its defining labels."""


class DeviceUnreachableError(OLTError):
    """Connection or authentication failed; the device cannot be queried."""

    def __init__(self, message: str, device: str | None = None):
        self.device = device
        super().__init__(message)
