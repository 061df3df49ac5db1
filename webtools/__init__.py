"""WebTools relay: tool catalog and request forwarding to the tool backend."""

__version__ = "0.1.0"
