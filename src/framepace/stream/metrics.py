"""
Stream Metrics
==============

Process-wide counters for the /metrics endpoint.

All connections share one StreamMetrics instance. Counters are only
touched from the event loop thread.
"""


class StreamMetrics:
    """Metrics for streaming observability."""

    __slots__ = (
        "connections_opened",
        "active_connections",
        "frames_sent",
        "commands_applied",
        "commands_dropped",
        "commands_ignored",
        "pool_builds",
        "pool_build_failures",
    )

    def __init__(self) -> None:
        self.connections_opened: int = 0
        self.active_connections: int = 0
        self.frames_sent: int = 0
        self.commands_applied: int = 0
        self.commands_dropped: int = 0
        self.commands_ignored: int = 0
        self.pool_builds: int = 0
        self.pool_build_failures: int = 0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "connections_opened": self.connections_opened,
            "active_connections": self.active_connections,
            "frames_sent": self.frames_sent,
            "commands_applied": self.commands_applied,
            "commands_dropped": self.commands_dropped,
            "commands_ignored": self.commands_ignored,
            "pool_builds": self.pool_builds,
            "pool_build_failures": self.pool_build_failures,
        }
