"""Encoders and decoders for whole MQTT control packets."""

from __future__ import annotations

from .codec import (
    decode_fixed_header,
    decode_num,
    decode_string,
    encode_data,
    encode_fixed_header,
    encode_num,
    encode_string,
)
from .errors import BadArgumentError, MalformedDataError, OutOfBufferError, PacketIdError
from .protocol import (
    CONNECT_FLAG_WILL_QOS_MASK,
    CONNECT_FLAG_WILL_QOS_SHIFT,
    CONNECT_PROTOCOL_LEVEL,
    CONNECT_PROTOCOL_NAME,
    DATA_LEN_SIZE,
    Connect,
    ConnectAck,
    ConnectFlag,
    Message,
    PacketType,
    PublishResponse,
    QoS,
    Subscribe,
    SubscribeAck,
    UnsubscribeAck,
)

__all__ = [
    "encode_connect",
    "decode_connect_ack",
    "encode_publish",
    "decode_publish",
    "encode_publish_response",
    "decode_publish_response",
    "encode_subscribe",
    "decode_subscribe_ack",
    "encode_unsubscribe",
    "decode_unsubscribe_ack",
    "encode_ping",
    "decode_ping",
    "encode_disconnect",
]


def _assemble(tx_buf_len: int, packet_type: PacketType, body: bytes, qos=QoS.AT_MOST_ONCE) -> bytes:
    header = encode_fixed_header(tx_buf_len, len(body), packet_type, False, qos, False)
    packet = header + body
    if len(packet) > tx_buf_len:
        raise OutOfBufferError(f"{packet_type.name} packet needs {len(packet)} bytes")
    return packet


def encode_connect(tx_buf_len: int, connect: Connect) -> bytes:
    """Encode a CONNECT packet."""
    if connect is None or connect.client_id is None:
        raise BadArgumentError("client id is required")

    flags = 0
    lwt = connect.lwt_msg
    if connect.enable_lwt:
        if lwt is None or lwt.topic_name is None or not lwt.buffer or lwt.total_len <= 0:
            raise BadArgumentError("last will needs a topic and a payload")
    if connect.clean_session:
        flags |= ConnectFlag.CLEAN_SESSION
    if connect.enable_lwt:
        flags |= ConnectFlag.WILL_FLAG
        if lwt.qos:
            flags |= (int(lwt.qos) << CONNECT_FLAG_WILL_QOS_SHIFT) & CONNECT_FLAG_WILL_QOS_MASK
        if lwt.retain:
            flags |= ConnectFlag.WILL_RETAIN
    if connect.username is not None:
        flags |= ConnectFlag.USERNAME
    if connect.password is not None:
        flags |= ConnectFlag.PASSWORD

    body = bytearray(encode_string(CONNECT_PROTOCOL_NAME))
    body.append(CONNECT_PROTOCOL_LEVEL)
    body.append(int(flags))
    body += encode_num(connect.keep_alive_sec)
    body += encode_string(connect.client_id)
    if connect.enable_lwt:
        body += encode_string(lwt.topic_name)
        body += encode_data(lwt.buffer[: lwt.total_len])
    if connect.username is not None:
        body += encode_string(connect.username)
    if connect.password is not None:
        body += encode_string(connect.password)
    return _assemble(tx_buf_len, PacketType.CONNECT, bytes(body))


def decode_connect_ack(data) -> ConnectAck:
    """Decode a CONNACK packet."""
    header = decode_fixed_header(data, PacketType.CONNECT_ACK)
    body = data[header.header_len:header.header_len + 2]
    if len(body) < 2:
        raise MalformedDataError("truncated CONNACK")
    return ConnectAck(flags=body[0], return_code=body[1])


def encode_publish(tx_buf_len: int, publish: Message) -> bytes:
    """Encode a PUBLISH packet with as much payload as fits in the buffer.

    Sets ``publish.buffer_pos`` to 0 and ``publish.buffer_len`` to the number
    of payload bytes placed in the packet.
    """
    if publish is None or publish.topic_name is None:
        raise BadArgumentError("topic name is required")

    variable = encode_string(publish.topic_name)
    if publish.qos > QoS.AT_MOST_ONCE:
        if publish.packet_id == 0:
            raise PacketIdError()
        variable += encode_num(publish.packet_id)

    payload_len = publish.total_len if publish.buffer and publish.total_len > 0 else 0
    header = encode_fixed_header(
        tx_buf_len,
        len(variable) + payload_len,
        PacketType.PUBLISH,
        publish.retain,
        publish.qos,
        publish.duplicate,
    )
    room = tx_buf_len - (len(header) + len(variable))
    if room < 0:
        raise OutOfBufferError("PUBLISH header does not fit in the buffer")
    chunk = publish.buffer[: min(payload_len, room)]
    publish.buffer_pos = 0
    publish.buffer_len = len(chunk)
    return header + variable + chunk


def decode_publish(data) -> Message:
    """Decode a PUBLISH packet; the payload held is what ``data`` contains."""
    header = decode_fixed_header(data, PacketType.PUBLISH)
    pos = header.header_len
    topic_name, variable_len = decode_string(data[pos:])
    packet_id = 0
    if header.qos > QoS.AT_MOST_ONCE:
        packet_id = decode_num(data[pos + variable_len:])
        variable_len += DATA_LEN_SIZE
    payload_len = header.remain_len - variable_len
    if payload_len < 0:
        raise MalformedDataError("PUBLISH remaining length too short")
    start = pos + variable_len
    buffer = bytes(data[start:start + payload_len])
    return Message(
        topic_name=topic_name,
        buffer=buffer,
        qos=header.qos,
        packet_id=packet_id,
        retain=header.retain,
        duplicate=header.duplicate,
        total_len=payload_len,
        buffer_len=len(buffer),
        buffer_pos=0,
    )


def encode_publish_response(tx_buf_len: int, packet_type, response: PublishResponse) -> bytes:
    """Encode a PUBACK, PUBREC, PUBREL or PUBCOMP packet."""
    if response is None:
        raise BadArgumentError("response is required")
    packet_type = PacketType(packet_type)
    qos = QoS.AT_LEAST_ONCE if packet_type == PacketType.PUBLISH_REL else QoS.AT_MOST_ONCE
    return _assemble(tx_buf_len, packet_type, encode_num(response.packet_id), qos)


def decode_publish_response(data, packet_type) -> PublishResponse:
    """Decode a PUBACK, PUBREC, PUBREL or PUBCOMP packet."""
    header = decode_fixed_header(data, packet_type)
    return PublishResponse(packet_id=decode_num(data[header.header_len:]))


def encode_subscribe(tx_buf_len: int, subscribe: Subscribe) -> bytes:
    """Encode a SUBSCRIBE packet."""
    if subscribe is None:
        raise BadArgumentError("subscribe is required")
    body = bytearray(encode_num(subscribe.packet_id))
    for topic in subscribe.topics:
        body += encode_string(topic.topic_filter)
        body.append(int(topic.qos))
    return _assemble(tx_buf_len, PacketType.SUBSCRIBE, bytes(body), QoS.AT_LEAST_ONCE)


def decode_subscribe_ack(data) -> SubscribeAck:
    """Decode a SUBACK packet."""
    header = decode_fixed_header(data, PacketType.SUBSCRIBE_ACK)
    pos = header.header_len
    packet_id = decode_num(data[pos:])
    return_codes = bytes(data[pos + DATA_LEN_SIZE:pos + header.remain_len])
    return SubscribeAck(packet_id=packet_id, return_codes=return_codes)


def encode_unsubscribe(tx_buf_len: int, unsubscribe: Subscribe) -> bytes:
    """Encode an UNSUBSCRIBE packet."""
    if unsubscribe is None:
        raise BadArgumentError("unsubscribe is required")
    body = bytearray(encode_num(unsubscribe.packet_id))
    for topic in unsubscribe.topics:
        body += encode_string(topic.topic_filter)
    return _assemble(tx_buf_len, PacketType.UNSUBSCRIBE, bytes(body), QoS.AT_LEAST_ONCE)


def decode_unsubscribe_ack(data) -> UnsubscribeAck:
    """Decode an UNSUBACK packet."""
    header = decode_fixed_header(data, PacketType.UNSUBSCRIBE_ACK)
    return UnsubscribeAck(packet_id=decode_num(data[header.header_len:]))


def encode_ping(tx_buf_len: int) -> bytes:
    """Encode a PINGREQ packet."""
    return _assemble(tx_buf_len, PacketType.PING_REQ, b"")


def decode_ping(data) -> int:
    """Decode a PINGRESP packet; return its total length."""
    header = decode_fixed_header(data, PacketType.PING_RESP)
    return header.header_len + header.remain_len


def encode_disconnect(tx_buf_len: int) -> bytes:
    """Encode a DISCONNECT packet."""
    return _assemble(tx_buf_len, PacketType.DISCONNECT, b"")