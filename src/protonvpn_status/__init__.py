"""ProtonVPN Status - tray indicator for the ProtonVPN command-line client."""

from .constants import VERSION as __version__
from .status import ConnectionState, IndicatorView, indicator_view, parse_status

__all__ = [
    "__version__",
    "ConnectionState",
    "IndicatorView",
    "indicator_view",
    "parse_status",
]
