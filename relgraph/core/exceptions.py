"""
RELGRAPH Exceptions
"""


class RelgraphError(Exception):
    """Base class for all RELGRAPH errors."""


class GatewayConnectionError(RelgraphError):
    """Raised when the statistics source cannot be reached at all."""

    def __init__(self, message: str, target: str = ""):
        super().__init__(message)
        self.target = target
