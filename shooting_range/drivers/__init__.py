"""Target rig drivers for the shooting range controller."""

from .controller_driver import (
    ConnectError,
    ControllerDriver,
    ControllerDriverError,
    LockError,
    PortEnumerationError,
    WriteError,
)
from .control import ConnectionState, ControlHandle
from .ports import list_serial_ports
from .serial_channel import DeviceChannel, SendOutcome
from .wire import encode_command

__all__ = [
    "ConnectError",
    "ConnectionState",
    "ControlHandle",
    "ControllerDriver",
    "ControllerDriverError",
    "DeviceChannel",
    "LockError",
    "PortEnumerationError",
    "SendOutcome",
    "WriteError",
    "encode_command",
    "list_serial_ports",
]
