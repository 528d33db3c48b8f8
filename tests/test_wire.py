import pytest
from shooting_range.drivers.wire import encode_command

@pytest.mark.parametrize("node_id,state,expected", [
    (0, True, b"0,true\n"),
    (3, True, b"3,true\n"),
    (7, False, b"7,false\n"),
    (1024, False, b"1024,false\n"),
    (-2, True, b"-2,true\n"),
])
def test_encode_command(node_id, state, expected):
    assert encode_command(node_id, state) == expected

def test_encode_command_is_ascii_line():
    payload = encode_command(12, True)
    assert isinstance(payload, bytes)
    assert payload.endswith(b"\n")
    assert payload.count(b"\n") == 1

@pytest.mark.parametrize("bad", [3.7, "3", None])
def test_encode_command_rejects_non_integer_ids(bad):
    with pytest.raises(TypeError):
        encode_command(bad, True)
