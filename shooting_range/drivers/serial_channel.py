# serial_channel.py - single-port pyserial channel with simulated fallback
import enum
from typing import Optional

import serial

from shooting_range.core.logger import APP_LOGGER
from .controller_driver import ConnectError, ControllerDriver, WriteError

DEFAULT_BAUD = 115200
DEFAULT_TIMEOUT_S = 1.0


class SendOutcome(enum.Enum):
    """Result of a successful write."""

    SENT = "sent"
    SIMULATED = "simulated"


class DeviceChannel(ControllerDriver):
    """
    Owns zero or one open serial handle plus the last configured port name.

    Writing while no handle is open is a successful no-op reported as
    ``SendOutcome.SIMULATED`` so the range stays usable without hardware.
    The channel is not thread-safe; ``ControlHandle`` serializes access.
    """

    def __init__(self, port: Optional[str] = None, baudrate: int = DEFAULT_BAUD,
                 timeout: float = DEFAULT_TIMEOUT_S):
        self.ser: Optional[serial.SerialBase] = None
        self._port = port
        self._baudrate = baudrate
        self._timeout = timeout

    @property
    def port_name(self) -> Optional[str]:
        return self._port

    def configure(self, port: str):
        """Record the port to use on the next ``open``. Opens nothing."""
        self._port = port

    def open(self):
        """Open the configured port, dropping any handle that is already open."""
        self.close()
        if self._port is None:
            raise ConnectError("<unset>", "no port configured")
        try:
            self.ser = serial.serial_for_url(
                self._port,
                baudrate=self._baudrate,
                timeout=self._timeout,
                write_timeout=self._timeout,
            )
        except (serial.SerialException, OSError, ValueError) as e:
            self.ser = None
            raise ConnectError(self._port, str(e)) from e
        APP_LOGGER.info(f"Connected to {self._port} at {self._baudrate} baud")

    def close(self):
        if self.ser is None:
            return
        ser, self.ser = self.ser, None
        try:
            ser.close()
        except (serial.SerialException, OSError) as e:
            # The handle is gone either way; an unplugged device often fails here.
            APP_LOGGER.warning(f"Error while closing {self._port}: {e}")
        APP_LOGGER.info(f"Disconnected from {self._port}")

    def is_open(self) -> bool:
        return self.ser is not None

    def write(self, payload: bytes) -> SendOutcome:
        if self.ser is None:
            return SendOutcome.SIMULATED
        try:
            written = self.ser.write(payload)
        except (serial.SerialException, OSError) as e:
            raise WriteError(f"Failed to write to {self._port}: {e}") from e
        if written is not None and written != len(payload):
            raise WriteError(
                f"Short write to {self._port}: {written} of {len(payload)} bytes"
            )
        return SendOutcome.SENT
