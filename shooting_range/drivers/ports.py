# ports.py - host serial port enumeration
from serial.tools import list_ports

from .controller_driver import PortEnumerationError


def list_serial_ports() -> list[str]:
    """Return the device names of the serial ports present on this host."""
    try:
        ports = list(list_ports.comports())
    except OSError as e:
        raise PortEnumerationError(f"Failed to list serial ports: {e}") from e
    return [info.device for info in ports]
