from types import SimpleNamespace

import pytest
from serial.tools import list_ports

from shooting_range.drivers.controller_driver import PortEnumerationError
from shooting_range.drivers.ports import list_serial_ports

def test_list_serial_ports_returns_device_names(monkeypatch):
    fake = [SimpleNamespace(device="/dev/ttyACM0"), SimpleNamespace(device="/dev/ttyUSB1")]
    monkeypatch.setattr(list_ports, "comports", lambda: fake)
    assert list_serial_ports() == ["/dev/ttyACM0", "/dev/ttyUSB1"]

def test_list_serial_ports_may_be_empty(monkeypatch):
    monkeypatch.setattr(list_ports, "comports", lambda: [])
    assert list_serial_ports() == []

def test_list_serial_ports_error(monkeypatch):
    def boom():
        raise OSError("no sysfs")
    monkeypatch.setattr(list_ports, "comports", boom)
    with pytest.raises(PortEnumerationError):
        list_serial_ports()
