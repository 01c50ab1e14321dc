"""A blocking MQTT client built on a pluggable network."""

from __future__ import annotations

from typing import Callable, Optional

from .dispatch import wait_for_packet
from .errors import BadArgumentError
from .packets import (
    encode_connect,
    encode_disconnect,
    encode_ping,
    encode_publish,
    encode_subscribe,
    encode_unsubscribe,
)
from .protocol import (
    Connect,
    ConnectAck,
    Message,
    PacketType,
    PublishResponse,
    QoS,
    Subscribe,
    SubscribeAck,
    UnsubscribeAck,
)
from .transport import Transport, write_packet

__all__ = ["MqttClient"]

DEFAULT_BUFFER_LEN = 1024
DEFAULT_CMD_TIMEOUT_MS = 1000


class MqttClient:
    """Sends MQTT requests over a network and waits for their responses.

    ``on_message(client, message, msg_new, msg_done)`` receives incoming
    PUBLISH payloads, chunk by chunk when they exceed ``rx_buf_len``.  It
    returns None or 0 to carry on; any other response code is raised.
    """

    def __init__(
        self,
        network,
        on_message: Optional[Callable] = None,
        tx_buf_len: int = DEFAULT_BUFFER_LEN,
        rx_buf_len: int = DEFAULT_BUFFER_LEN,
        cmd_timeout_ms: int = DEFAULT_CMD_TIMEOUT_MS,
    ) -> None:
        if tx_buf_len <= 0 or rx_buf_len <= 0:
            raise BadArgumentError("buffer lengths must be positive")
        self.on_message = on_message
        self.tx_buf_len = tx_buf_len
        self.rx_buf_len = rx_buf_len
        self.cmd_timeout_ms = cmd_timeout_ms
        self.transport = Transport(network)

    def _dispatch_message(self, message, msg_new, msg_done):
        if self.on_message is None:
            return None
        return self.on_message(self, message, msg_new, msg_done)

    def _wait(self, timeout_ms, wait_type, wait_packet_id=0):
        return wait_for_packet(
            self.transport,
            self.rx_buf_len,
            self.tx_buf_len,
            timeout_ms,
            wait_type,
            wait_packet_id,
            self._dispatch_message,
        )

    def _send(self, packet: bytes) -> None:
        write_packet(self.transport, packet, self.cmd_timeout_ms)

    def connect(self, connect: Connect) -> ConnectAck:
        """Send CONNECT and wait for CONNACK, which is also stored in ``connect.ack``."""
        if connect is None:
            raise BadArgumentError("connect is required")
        self._send(encode_connect(self.tx_buf_len, connect))
        ack = self._wait(self.cmd_timeout_ms, PacketType.CONNECT_ACK)
        connect.ack = ack
        return ack

    def publish(self, publish: Message) -> PublishResponse | None:
        """Send PUBLISH with its whole payload; for QoS > 0 wait for the final response."""
        if publish is None:
            raise BadArgumentError("publish is required")
        packet = encode_publish(self.tx_buf_len, publish)
        while True:
            self._send(packet)
            publish.buffer_pos += publish.buffer_len
            publish.buffer_len = 0
            if publish.buffer_pos >= publish.total_len:
                break
            length = min(publish.total_len - publish.buffer_pos, self.tx_buf_len)
            publish.buffer_len = length
            packet = publish.buffer[publish.buffer_pos:publish.buffer_pos + length]

        if publish.qos > QoS.AT_MOST_ONCE:
            wait_type = (
                PacketType.PUBLISH_ACK if publish.qos == QoS.AT_LEAST_ONCE else PacketType.PUBLISH_COMP
            )
            return self._wait(self.cmd_timeout_ms, wait_type, publish.packet_id)
        return None

    def subscribe(self, subscribe: Subscribe) -> SubscribeAck:
        """Send SUBSCRIBE, wait for SUBACK and store each topic's return code."""
        if subscribe is None:
            raise BadArgumentError("subscribe is required")
        self._send(encode_subscribe(self.tx_buf_len, subscribe))
        ack = self._wait(self.cmd_timeout_ms, PacketType.SUBSCRIBE_ACK, subscribe.packet_id)
        for topic, code in zip(subscribe.topics, ack.return_codes):
            topic.return_code = code
        return ack

    def unsubscribe(self, unsubscribe: Subscribe) -> UnsubscribeAck:
        """Send UNSUBSCRIBE and wait for UNSUBACK."""
        if unsubscribe is None:
            raise BadArgumentError("unsubscribe is required")
        self._send(encode_unsubscribe(self.tx_buf_len, unsubscribe))
        return self._wait(self.cmd_timeout_ms, PacketType.UNSUBSCRIBE_ACK, unsubscribe.packet_id)

    def ping(self) -> int:
        """Send PINGREQ and wait for PINGRESP; return the response's length."""
        self._send(encode_ping(self.tx_buf_len))
        return self._wait(self.cmd_timeout_ms, PacketType.PING_RESP)

    def disconnect(self) -> None:
        """Send DISCONNECT; the broker sends no response."""
        self._send(encode_disconnect(self.tx_buf_len))

    def wait_message(self, timeout_ms: int):
        """Wait for and handle the next incoming packet; return its contents."""
        return self._wait(timeout_ms, PacketType.MAX)

    def net_connect(
        self,
        host: str,
        port: int = 0,
        timeout_ms: int = DEFAULT_CMD_TIMEOUT_MS,
        use_tls: bool = False,
        tls_callback: Optional[Callable] = None,
    ) -> int:
        """Open the network connection; return the port used."""
        return self.transport.connect(host, port, timeout_ms, use_tls, tls_callback)

    def net_disconnect(self) -> None:
        """Close the network connection."""
        self.transport.disconnect()