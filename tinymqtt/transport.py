"""Network access for the client: raw connections and whole-packet I/O."""

from __future__ import annotations

import socket
from typing import Callable

from .codec import decode_remaining_length
from .errors import (
    BadArgumentError,
    MalformedDataError,
    MqttError,
    MqttTimeoutError,
    NetworkError,
)
from .protocol import PACKET_MAX_HEADER_SIZE

__all__ = [
    "DEFAULT_PORT",
    "SECURE_PORT",
    "Network",
    "Transport",
    "read_packet",
    "write_packet",
]

DEFAULT_PORT = 1883
SECURE_PORT = 8883

# A fixed header is at least a type byte and one length byte.
_MIN_HEADER_SIZE = 2


def _seconds(timeout_ms: int) -> float | None:
    """Convert a millisecond timeout; zero or less means wait without limit."""
    if timeout_ms is None or timeout_ms <= 0:
        return None
    return timeout_ms / 1000.0


class Network:
    """A plain TCP connection to a broker.

    ``read`` returns an empty byte string when nothing arrives in time and
    ``write`` returns 0 in that case; failures raise ``OSError``.  Any object
    with the same four methods can stand in for this class.
    """

    def __init__(self) -> None:
        self._sock: socket.socket | None = None

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def _require_socket(self) -> socket.socket:
        if self._sock is None:
            raise ConnectionError("network is not connected")
        return self._sock

    def connect(self, host: str, port: int, timeout_ms: int) -> None:
        """Open a TCP connection to ``host``:``port``."""
        if self._sock is not None:
            self.disconnect()
        self._sock = socket.create_connection((host, port), timeout=_seconds(timeout_ms))

    def read(self, length: int, timeout_ms: int) -> bytes:
        """Receive up to ``length`` bytes; empty on timeout."""
        sock = self._require_socket()
        sock.settimeout(_seconds(timeout_ms))
        try:
            data = sock.recv(length)
        except TimeoutError:
            return b""
        if not data:
            raise ConnectionResetError("connection closed by peer")
        return data

    def write(self, data: bytes, timeout_ms: int) -> int:
        """Send ``data``; return the number of bytes sent, 0 on timeout."""
        sock = self._require_socket()
        sock.settimeout(_seconds(timeout_ms))
        try:
            return sock.send(data)
        except TimeoutError:
            return 0

    def disconnect(self) -> None:
        """Close the connection if it is open."""
        sock, self._sock = self._sock, None
        if sock is not None:
            sock.close()


class Transport:
    """Connection state on top of a network, with errors turned into MqttError.

    TLS is not built into this transport: ``use_tls`` only selects the
    secure default port and the TLS callback is not called.
    """

    def __init__(self, network) -> None:
        required = ("connect", "read", "write", "disconnect")
        if network is None or not all(callable(getattr(network, name, None)) for name in required):
            raise BadArgumentError("network must provide connect, read, write and disconnect")
        self.network = network
        self.is_connected = False
        self.is_tls = False

    def connect(
        self,
        host: str,
        port: int = 0,
        timeout_ms: int = 0,
        use_tls: bool = False,
        tls_callback: Callable | None = None,
    ) -> int:
        """Connect the network and return the port number in use; 0 selects the standard one."""
        if not port:
            port = SECURE_PORT if use_tls else DEFAULT_PORT
        try:
            self.network.connect(host, port, timeout_ms)
        except MqttError:
            raise
        except OSError as exc:
            raise NetworkError(f"connect to {host}:{port} failed: {exc}") from exc
        self.is_connected = True
        return port

    def disconnect(self) -> None:
        """Close the network connection."""
        self.is_tls = False
        try:
            self.network.disconnect()
        except MqttError:
            raise
        except OSError as exc:
            raise NetworkError(f"disconnect failed: {exc}") from exc
        finally:
            self.is_connected = False

    def write(self, data: bytes, timeout_ms: int) -> int:
        """Hand ``data`` to the network once; return the bytes it accepted."""
        if not data:
            raise BadArgumentError("nothing to write")
        try:
            count = self.network.write(bytes(data), timeout_ms)
        except MqttError:
            raise
        except OSError as exc:
            raise NetworkError(f"write failed: {exc}") from exc
        if count is None or count < 0:
            raise NetworkError("write failed")
        return count

    def read(self, length: int, timeout_ms: int) -> bytes:
        """Read exactly ``length`` bytes."""
        if length <= 0:
            raise BadArgumentError("read length must be positive")
        received = bytearray()
        while len(received) < length:
            try:
                chunk = self.network.read(length - len(received), timeout_ms)
            except MqttError:
                raise
            except OSError as exc:
                raise NetworkError(f"read failed: {exc}") from exc
            if not chunk:
                raise MqttTimeoutError()
            received += chunk[: length - len(received)]
        return bytes(received)


def write_packet(transport: Transport, data: bytes, timeout_ms: int) -> int:
    """Write a whole encoded packet; return its length."""
    count = transport.write(data, timeout_ms)
    if count == 0:
        raise MqttTimeoutError()
    if count != len(data):
        raise NetworkError(f"only {count} of {len(data)} bytes written")
    return count


def read_packet(transport: Transport, rx_buf_len: int, timeout_ms: int) -> bytes:
    """Read one packet, keeping at most ``rx_buf_len`` bytes of it.

    Bytes beyond ``rx_buf_len`` are left unread on the network for the
    caller to fetch.
    """
    if rx_buf_len <= 0:
        raise BadArgumentError("receive buffer length must be positive")
    packet = bytearray(transport.read(_MIN_HEADER_SIZE, timeout_ms))
    while True:
        decoded = decode_remaining_length(packet)
        if decoded is not None:
            header_len, remain_len = decoded
            break
        if len(packet) >= PACKET_MAX_HEADER_SIZE:
            raise MalformedDataError()
        packet += transport.read(1, timeout_ms)

    remain_len = max(0, min(remain_len, rx_buf_len - header_len))
    if remain_len > 0:
        packet += transport.read(remain_len, timeout_ms)
    return bytes(packet)