import threading
import time
from unittest.mock import MagicMock

import pytest

from shooting_range.drivers.control import ConnectionState, ControlHandle
from shooting_range.drivers.controller_driver import ConnectError, LockError, WriteError
from shooting_range.drivers.serial_channel import DeviceChannel, SendOutcome


class SlowPort:
    """Fake serial handle that writes one byte at a time, yielding between bytes."""

    def __init__(self):
        self.stream = bytearray()

    def write(self, data):
        for b in data:
            self.stream.append(b)
            time.sleep(0)
        return len(data)

    def close(self):
        pass


def test_device_absent_falls_back_to_simulated():
    handle = ControlHandle()
    with pytest.raises(ConnectError):
        handle.connect("COM-NONE")
    assert handle.is_connected() is False
    assert handle.state() == ConnectionState.disconnected()
    assert handle.send(3, True) is SendOutcome.SIMULATED

def test_loopback_session():
    channel = DeviceChannel()
    handle = ControlHandle(channel)
    handle.connect("loop://")
    assert handle.is_connected()
    assert handle.state() == ConnectionState(connected=True, port="loop://")

    assert handle.send(7, False) is SendOutcome.SENT
    assert channel.ser.read(8) == b"7,false\n"

    handle.disconnect()
    assert not handle.is_connected()
    assert handle.send(7, False) is SendOutcome.SIMULATED

def test_disconnect_is_idempotent():
    handle = ControlHandle()
    handle.disconnect()
    handle.disconnect()
    assert not handle.is_connected()

    handle.connect("loop://")
    handle.disconnect()
    handle.disconnect()
    assert not handle.is_connected()

def test_reconnect_closes_previous_port():
    channel = DeviceChannel()
    handle = ControlHandle(channel)
    handle.connect("loop://")
    first = channel.ser

    handle.connect("loop://")
    assert channel.ser is not first
    assert first.is_open is False
    assert handle.is_connected()

def test_failed_reconnect_leaves_disconnected():
    channel = DeviceChannel()
    handle = ControlHandle(channel)
    handle.connect("loop://")
    first = channel.ser

    with pytest.raises(ConnectError):
        handle.connect("COM-NONE")
    assert first.is_open is False
    assert handle.is_connected() is False
    assert handle.send(1, True) is SendOutcome.SIMULATED

def test_write_error_propagates_without_disconnect():
    channel = DeviceChannel("/dev/ttyACM0")
    mock_ser = MagicMock()
    mock_ser.write.side_effect = OSError(5, "Input/output error")
    channel.ser = mock_ser
    handle = ControlHandle(channel)

    with pytest.raises(WriteError):
        handle.send(2, True)
    assert handle.is_connected()
    assert not handle.poisoned

def test_concurrent_sends_do_not_interleave():
    channel = DeviceChannel("fake")
    port = SlowPort()
    channel.ser = port
    handle = ControlHandle(channel)

    def worker(node_id):
        for i in range(20):
            handle.send(node_id, i % 2 == 0)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(10, 18)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    lines = bytes(port.stream).split(b"\n")
    assert lines[-1] == b""
    lines = lines[:-1]
    assert len(lines) == 8 * 20
    for line in lines:
        node, state = line.split(b",")
        assert 10 <= int(node) < 18
        assert state in (b"true", b"false")

def test_lock_timeout_raises_lock_error():
    handle = ControlHandle(lock_timeout_s=0.05)
    handle._lock.acquire()
    try:
        with pytest.raises(LockError):
            handle.send(1, True)
    finally:
        handle._lock.release()
    assert handle.send(1, True) is SendOutcome.SIMULATED

def test_unexpected_failure_poisons_handle():
    channel = DeviceChannel("/dev/ttyACM0")
    mock_ser = MagicMock()
    mock_ser.write.side_effect = RuntimeError("driver bug")
    channel.ser = mock_ser
    handle = ControlHandle(channel)

    with pytest.raises(RuntimeError):
        handle.send(1, True)
    assert handle.poisoned
    with pytest.raises(LockError):
        handle.is_connected()
    with pytest.raises(LockError):
        handle.disconnect()

    handle.reset_poison()
    handle.disconnect()
    assert not handle.is_connected()
