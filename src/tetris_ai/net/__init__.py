"""Remote planner protocol: JSON lines over one TCP connection per request."""

from .protocol import OpMove, ProtocolError, PureGame
from .client import RemotePlanner, RemotePlannerError, TetrisClient
from .server import PlannerServer

__all__ = [
    "OpMove",
    "ProtocolError",
    "PureGame",
    "RemotePlanner",
    "RemotePlannerError",
    "TetrisClient",
    "PlannerServer",
]
