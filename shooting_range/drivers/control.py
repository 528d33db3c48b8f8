"""Thread-safe control handle over the device channel.

Every public operation holds one exclusive lock for its whole duration, so an
encode+write or a close+open never interleaves with another operation. The
raw serial handle is never handed out.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

from shooting_range.core.logger import APP_LOGGER
from .controller_driver import ConnectError, LockError, WriteError
from .serial_channel import DeviceChannel, SendOutcome
from .wire import encode_command

LOCK_TIMEOUT_S = 5.0


@dataclass(frozen=True)
class ConnectionState:
    connected: bool
    port: Optional[str] = None

    @classmethod
    def disconnected(cls) -> "ConnectionState":
        return cls(connected=False, port=None)


class ControlHandle:
    def __init__(self, channel: Optional[DeviceChannel] = None,
                 lock_timeout_s: float = LOCK_TIMEOUT_S):
        self._channel = channel if channel is not None else DeviceChannel()
        self._lock = threading.Lock()
        self._lock_timeout_s = lock_timeout_s
        self._poisoned = False

    @contextmanager
    def _exclusive(self, op: str):
        if not self._lock.acquire(timeout=self._lock_timeout_s):
            raise LockError(f"{op}: timed out waiting for the device lock")
        try:
            if self._poisoned:
                raise LockError(f"{op}: device state is poisoned by an earlier failure")
            try:
                yield self._channel
            except (ConnectError, WriteError, LockError):
                raise
            except Exception:
                self._poisoned = True
                APP_LOGGER.error(f"{op} failed unexpectedly; device lock poisoned", exc_info=True)
                raise
        finally:
            self._lock.release()

    def connect(self, port: str) -> None:
        """Close any open port, then open ``port``. Raises ConnectError on failure."""
        with self._exclusive("connect") as channel:
            channel.close()
            channel.configure(port)
            channel.open()

    def disconnect(self) -> None:
        with self._exclusive("disconnect") as channel:
            channel.close()

    def send(self, node_id: int, state: bool) -> SendOutcome:
        """Send one activation command; returns SENT or SIMULATED, raises WriteError."""
        payload = encode_command(node_id, state)
        with self._exclusive("send") as channel:
            outcome = channel.write(payload)
        if outcome is SendOutcome.SIMULATED:
            APP_LOGGER.info(f"Simulated send: node_id={node_id}, state={state}")
        else:
            APP_LOGGER.debug(f"Sent: {payload.decode('ascii').strip()}")
        return outcome

    def is_connected(self) -> bool:
        with self._exclusive("is_connected") as channel:
            return channel.is_open()

    def state(self) -> ConnectionState:
        with self._exclusive("state") as channel:
            if channel.is_open():
                return ConnectionState(connected=True, port=channel.port_name)
            return ConnectionState.disconnected()

    @property
    def poisoned(self) -> bool:
        return self._poisoned

    def reset_poison(self) -> None:
        """Clear the poisoned flag after the caller has inspected the failure."""
        with self._lock:
            self._poisoned = False
