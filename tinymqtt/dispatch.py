"""Receiving packets and answering them until an awaited packet arrives."""

from __future__ import annotations

from typing import Callable, Optional

from .errors import ResponseCode, error_for_code
from .packets import (
    decode_connect_ack,
    decode_ping,
    decode_publish,
    decode_publish_response,
    decode_subscribe_ack,
    decode_unsubscribe_ack,
    encode_publish_response,
)
from .protocol import Message, PacketType, PublishResponse, QoS, packet_type_of
from .transport import Transport, read_packet, write_packet

__all__ = ["MessageCallback", "wait_for_packet"]

MessageCallback = Callable[[Message, bool, bool], Optional[int]]

_PUBLISH_RESPONSES = (
    PacketType.PUBLISH_ACK,
    PacketType.PUBLISH_REC,
    PacketType.PUBLISH_REL,
    PacketType.PUBLISH_COMP,
)


def _send_publish_response(transport, tx_buf_len, timeout_ms, packet_type, packet_id) -> None:
    packet = encode_publish_response(tx_buf_len, packet_type, PublishResponse(packet_id=packet_id))
    write_packet(transport, packet, timeout_ms)


def _check_callback_result(result) -> None:
    if result is None or result == ResponseCode.SUCCESS:
        return
    raise error_for_code(int(result))


def _receive_publish(transport, data, rx_buf_len, tx_buf_len, timeout_ms, on_message) -> Message:
    msg = decode_publish(data)
    msg_new = True
    while True:
        msg_done = msg.is_complete
        if on_message is not None:
            if not msg_new:
                # The topic is only reported with the first chunk.
                msg.topic_name = None
            _check_callback_result(on_message(msg, msg_new, msg_done))
        if msg_done:
            break
        msg.buffer_pos += msg.buffer_len
        msg.buffer_len = 0
        length = min(msg.total_len - msg.buffer_pos, rx_buf_len)
        msg.buffer = transport.read(length, timeout_ms)
        msg.buffer_len = length
        msg_new = False

    if msg.qos > QoS.AT_MOST_ONCE:
        reply = PacketType.PUBLISH_ACK if msg.qos == QoS.AT_LEAST_ONCE else PacketType.PUBLISH_REC
        _send_publish_response(transport, tx_buf_len, timeout_ms, reply, msg.packet_id)
    return msg


def wait_for_packet(
    transport: Transport,
    rx_buf_len: int,
    tx_buf_len: int,
    timeout_ms: int,
    wait_type=PacketType.MAX,
    wait_packet_id: int = 0,
    on_message: MessageCallback | None = None,
):
    """Read and handle packets until one of ``wait_type`` arrives.

    A ``wait_type`` of ``PacketType.MAX`` returns after the first packet.
    A ``wait_packet_id`` of 0 accepts any packet id.  Incoming PUBLISH
    packets are handed to ``on_message(message, msg_new, msg_done)`` chunk
    by chunk and acknowledged as their QoS requires; PUBREC and PUBREL are
    answered with PUBREL and PUBCOMP.  Returns the decoded contents of the
    last packet handled (None for packet types the client ignores).
    """
    while True:
        data = read_packet(transport, rx_buf_len, timeout_ms)
        msg_type = packet_type_of(data[0])
        packet_id = 0
        decoded = None

        if msg_type == PacketType.CONNECT_ACK:
            decoded = decode_connect_ack(data)
        elif msg_type == PacketType.PUBLISH:
            decoded = _receive_publish(transport, data, rx_buf_len, tx_buf_len, timeout_ms, on_message)
            packet_id = decoded.packet_id
        elif msg_type in _PUBLISH_RESPONSES:
            decoded = decode_publish_response(data, msg_type)
            packet_id = decoded.packet_id
            if msg_type in (PacketType.PUBLISH_REC, PacketType.PUBLISH_REL):
                _send_publish_response(
                    transport, tx_buf_len, timeout_ms, PacketType(msg_type + 1), packet_id
                )
        elif msg_type == PacketType.SUBSCRIBE_ACK:
            decoded = decode_subscribe_ack(data)
            packet_id = decoded.packet_id
        elif msg_type == PacketType.UNSUBSCRIBE_ACK:
            decoded = decode_unsubscribe_ack(data)
            packet_id = decoded.packet_id
        elif msg_type == PacketType.PING_RESP:
            decoded = decode_ping(data)

        if wait_type >= PacketType.MAX:
            return decoded
        if msg_type == wait_type and (wait_packet_id == 0 or wait_packet_id == packet_id):
            return decoded