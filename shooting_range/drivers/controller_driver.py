"""Common interfaces and exceptions for target controller drivers."""


class ControllerDriverError(RuntimeError):
    """Base class for faults raised by the target controller drivers."""


class ConnectError(ControllerDriverError):
    """Raised when the serial port cannot be opened (missing, busy, no permission)."""

    def __init__(self, port: str, reason: str):
        super().__init__(f"Failed to open port {port}: {reason}")
        self.port = port
        self.reason = reason


class WriteError(ControllerDriverError):
    """Raised when a write to an open port fails or is cut short."""


class LockError(ControllerDriverError):
    """Raised when the shared device lock cannot be acquired or is poisoned."""


class PortEnumerationError(ControllerDriverError):
    """Raised when the host refuses to list its serial ports."""


class ControllerDriver:
    """Abstract interface for target rig backends.

    Concrete drivers hold at most one device connection and expose the basic
    lifecycle used by the control handle.
    """

    def open(self):  # pragma: no cover - interface placeholder
        raise NotImplementedError

    def close(self):  # pragma: no cover - interface placeholder
        raise NotImplementedError

    def write(self, payload: bytes):  # pragma: no cover - interface placeholder
        raise NotImplementedError

    def is_open(self) -> bool:  # pragma: no cover - interface placeholder
        raise NotImplementedError
