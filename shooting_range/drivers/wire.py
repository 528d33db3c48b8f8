# wire.py - ASCII command encoding for target nodes
import operator

STATE_ON = "true"
STATE_OFF = "false"
FIELD_SEPARATOR = ","
LINE_TERMINATOR = "\n"


def encode_command(node_id: int, state: bool) -> bytes:
    """Return the line the rig expects, e.g. ``b"7,false\\n"``.

    ``node_id`` must be an integer; floats and strings raise TypeError.
    """
    node = operator.index(node_id)
    token = STATE_ON if state else STATE_OFF
    return f"{node}{FIELD_SEPARATOR}{token}{LINE_TERMINATOR}".encode("ascii")
