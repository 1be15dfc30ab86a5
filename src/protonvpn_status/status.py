"""Connection states, status output parsing and the state-to-indicator mapping."""

from enum import Enum
from typing import NamedTuple, Optional

from protonvpn_status.constants import (
    ICON_ACQUIRING,
    ICON_VPN,
    LABEL_CONNECT,
    LABEL_DISCONNECT,
    STATUS_MARKER,
)


class ConnectionState(str, Enum):
    """VPN connection state. The value is the name shown to the user."""

    DISCONNECTED = "Disconnected"
    CONNECTING = "Connecting"
    CONNECTED = "Connected"
    DISCONNECTING = "Disconnecting"
    WAITING = "Waiting"

    def __str__(self) -> str:
        return self.value


class IndicatorView(NamedTuple):
    """What the tray indicator shows for a given state."""

    visible: bool
    icon_name: str
    label: str


# Values the status command reports verbatim
_REPORTED_STATES = {
    ConnectionState.CONNECTED.value: ConnectionState.CONNECTED,
    ConnectionState.DISCONNECTED.value: ConnectionState.DISCONNECTED,
}


def parse_status(output: Optional[str]) -> ConnectionState:
    """Extract the connection state from the output of the status command.

    The first line containing ``Status:`` is used; the text after the marker
    is stripped and matched case-sensitively. Anything unexpected means the
    client is in an unknown state, reported as WAITING until the next poll.

    Args:
        output: Raw multi-line output of the status command

    Returns:
        CONNECTED, DISCONNECTED or WAITING
    """
    if not output:
        return ConnectionState.WAITING

    for line in output.splitlines():
        if STATUS_MARKER in line:
            value = line.split(STATUS_MARKER, 1)[1].strip()
            return _REPORTED_STATES.get(value, ConnectionState.WAITING)

    return ConnectionState.WAITING


def indicator_view(state: ConnectionState) -> IndicatorView:
    """Map a connection state to indicator visibility, icon and action label."""
    if state == ConnectionState.CONNECTED:
        return IndicatorView(True, ICON_VPN, LABEL_DISCONNECT)
    if state == ConnectionState.DISCONNECTED:
        return IndicatorView(False, ICON_VPN, LABEL_CONNECT)
    # Transition states
    return IndicatorView(True, ICON_ACQUIRING, state.value)
