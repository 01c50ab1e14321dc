import pytest

from tinymqtt import protocol
from tinymqtt.protocol import (
    Connect,
    ConnectAck,
    ConnectAckReturnCode,
    Message,
    PacketFlag,
    PacketType,
    QoS,
    Subscribe,
    SubscribeAck,
    Topic,
    UnsubscribeAck,
    PublishResponse,
    packet_type_of,
    qos_of,
)


@pytest.mark.parametrize("packet_type", list(PacketType))
@pytest.mark.parametrize("flags", range(16))
def test_packet_type_of_round_trip(packet_type, flags):
    assert packet_type_of((packet_type << 4) | flags) is packet_type


@pytest.mark.parametrize("qos", list(QoS))
@pytest.mark.parametrize("packet_type", [PacketType.PUBLISH, PacketType.SUBSCRIBE])
def test_qos_of_round_trip(qos, packet_type):
    flags = (packet_type << 4) | (qos << protocol.PACKET_FLAG_QOS_SHIFT)
    assert qos_of(flags) is qos
    assert qos_of(flags | PacketFlag.RETAIN | PacketFlag.DUPLICATE) is qos


def test_qos_of_ignores_type_bits():
    assert qos_of(0xF0) is QoS.AT_MOST_ONCE


def test_retain_and_duplicate_flags_do_not_affect_qos():
    assert qos_of(PacketFlag.RETAIN | PacketFlag.DUPLICATE) is QoS.AT_MOST_ONCE
    assert qos_of(PacketFlag.QOS_MASK) is QoS(3)


@pytest.mark.parametrize(
    "first_byte, expected",
    [
        (0x10, PacketType.CONNECT),
        (0x20, PacketType.CONNECT_ACK),
        (0x30, PacketType.PUBLISH),
        (0x82, PacketType.SUBSCRIBE),
        (0x90, PacketType.SUBSCRIBE_ACK),
        (0xC0, PacketType.PING_REQ),
        (0xD0, PacketType.PING_RESP),
        (0xE0, PacketType.DISCONNECT),
    ],
)
def test_packet_type_of_wire_bytes(first_byte, expected):
    assert packet_type_of(first_byte) is expected


def test_message_total_len_defaults_to_buffer_length():
    msg = Message(topic_name="a/b", buffer=b"hello")
    assert msg.total_len == len(b"hello")
    assert msg.topic_name_len == len("a/b")
    assert msg.qos is QoS.AT_MOST_ONCE


def test_message_explicit_total_len_and_completion():
    msg = Message(topic_name="t", buffer=b"abc", total_len=10, buffer_len=3)
    assert msg.total_len == 10
    assert not msg.is_complete
    msg.buffer_pos = 7
    assert msg.is_complete


def test_message_without_topic_has_zero_topic_length():
    assert Message().topic_name_len == 0


def test_message_topic_length_counts_utf8_bytes():
    msg = Message(topic_name="é")
    assert msg.topic_name_len == len("é".encode("utf-8"))


def test_message_coerces_qos():
    assert Message(qos=2).qos is QoS.EXACTLY_ONCE
    with pytest.raises(ValueError):
        Message(qos=7)


def test_topic_defaults_and_coercion():
    topic = Topic("sensors/#", qos=1)
    assert topic.qos is QoS.AT_LEAST_ONCE
    assert topic.return_code == 0


def test_connect_defaults():
    connect = Connect(client_id="device-one")
    assert connect.username is None
    assert connect.password is None
    assert connect.enable_lwt is False
    assert connect.ack == ConnectAck()
    other = Connect(client_id="device-two")
    assert connect.ack is not other.ack


def test_connect_ack_properties():
    ack = ConnectAck(flags=0x01, return_code=ConnectAckReturnCode.ACCEPTED)
    assert ack.session_present
    assert ack.accepted
    refused = ConnectAck(return_code=ConnectAckReturnCode.REFUSED_ID)
    assert not refused.session_present
    assert not refused.accepted


def test_connect_ack_not_authorised_is_refused():
    assert not ConnectAck(return_code=5).accepted


def test_subscribe_topic_count():
    sub = Subscribe(packet_id=7, topics=[Topic("a"), Topic("b")])
    assert sub.topic_count == 2
    assert Subscribe().topic_count == 0
    assert protocol.Unsubscribe is Subscribe


def test_ack_structures_default_to_zero_ids():
    assert SubscribeAck().packet_id == 0
    assert SubscribeAck().return_codes == b""
    assert UnsubscribeAck().packet_id == 0
    assert PublishResponse().packet_id == 0
    assert protocol.Publish is Message