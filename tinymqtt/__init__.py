"""A small, blocking MQTT v3.1.1 client with a pluggable network layer."""

__version__ = "0.6"

__all__ = [
    "client",
    "codec",
    "dispatch",
    "errors",
    "packets",
    "protocol",
    "transport",
]