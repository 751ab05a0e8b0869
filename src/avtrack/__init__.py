"""
AVTRACK: Atrioventricular conduction tracking

Heart-block classification engine, CLI and MCP server for wave events
extracted from ECG strips.
"""

from typing import Any

__all__ = ["server"]


def __getattr__(name: str) -> Any:
    """Lazy load server to avoid circular imports at module level."""
    if name == "server":
        from avtrack.server import server

        return server
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
