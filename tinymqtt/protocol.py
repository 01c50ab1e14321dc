"""MQTT v3.1.1 protocol constants, enumerations and message structures."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

__all__ = [
    "VERSION_STRING",
    "VERSION_HEX",
    "DATA_LEN_SIZE",
    "PACKET_MAX_LEN_BYTES",
    "PACKET_LEN_ENCODE_MASK",
    "PACKET_MAX_HEADER_SIZE",
    "PACKET_FLAG_QOS_SHIFT",
    "CONNECT_FLAG_WILL_QOS_SHIFT",
    "CONNECT_FLAG_WILL_QOS_MASK",
    "CONNECT_PROTOCOL_NAME",
    "CONNECT_PROTOCOL_NAME_LEN",
    "CONNECT_PROTOCOL_LEVEL",
    "TOPIC_LEVEL_SEPARATOR",
    "TOPIC_LEVEL_SINGLE",
    "TOPIC_LEVEL_MULTI",
    "QoS",
    "PacketType",
    "PacketFlag",
    "ConnectFlag",
    "ConnectAckReturnCode",
    "SubscribeAckReturnCode",
    "Message",
    "Publish",
    "Topic",
    "ConnectAck",
    "Connect",
    "PublishResponse",
    "Subscribe",
    "Unsubscribe",
    "SubscribeAck",
    "UnsubscribeAck",
    "packet_type_of",
    "qos_of",
]

VERSION_STRING = "0.6"
VERSION_HEX = 0x00006000

# Size of a length prefix (numbers and strings) on the wire.
DATA_LEN_SIZE = 2

# Fixed header: one type/flags byte and 1-4 remaining-length bytes.
PACKET_MAX_LEN_BYTES = 4
PACKET_LEN_ENCODE_MASK = 0x80
PACKET_MAX_HEADER_SIZE = 1 + PACKET_MAX_LEN_BYTES

PACKET_FLAG_QOS_SHIFT = 1

CONNECT_FLAG_WILL_QOS_SHIFT = 3
CONNECT_FLAG_WILL_QOS_MASK = 0x18

CONNECT_PROTOCOL_NAME = "MQTT"
CONNECT_PROTOCOL_NAME_LEN = 4
CONNECT_PROTOCOL_LEVEL = 4

TOPIC_LEVEL_SEPARATOR = "/"
TOPIC_LEVEL_SINGLE = "+"
TOPIC_LEVEL_MULTI = "#"


class QoS(enum.IntEnum):
    """Delivery guarantee of a message."""

    AT_MOST_ONCE = 0
    AT_LEAST_ONCE = 1
    EXACTLY_ONCE = 2
    RESERVED = 3


class PacketType(enum.IntEnum):
    """Control packet type, held in bits 4-7 of the first header byte."""

    RESERVED = 0
    CONNECT = 1
    CONNECT_ACK = 2
    PUBLISH = 3
    PUBLISH_ACK = 4
    PUBLISH_REC = 5
    PUBLISH_REL = 6
    PUBLISH_COMP = 7
    SUBSCRIBE = 8
    SUBSCRIBE_ACK = 9
    UNSUBSCRIBE = 10
    UNSUBSCRIBE_ACK = 11
    PING_REQ = 12
    PING_RESP = 13
    DISCONNECT = 14
    MAX = 15


class PacketFlag(enum.IntFlag):
    """Header flag bits, held in bits 0-3 of the first header byte."""

    RETAIN = 0x1
    QOS_MASK = 0x6
    DUPLICATE = 0x8


class ConnectFlag(enum.IntFlag):
    """Flag bits of the CONNECT variable header."""

    RESERVED = 0x01
    CLEAN_SESSION = 0x02
    WILL_FLAG = 0x04
    WILL_QOS_MASK = CONNECT_FLAG_WILL_QOS_MASK
    WILL_RETAIN = 0x20
    PASSWORD = 0x40
    USERNAME = 0x80


class ConnectAckReturnCode(enum.IntEnum):
    """Return codes carried by a CONNACK packet."""

    ACCEPTED = 0
    REFUSED_PROTO = 1
    REFUSED_ID = 2
    REFUSED_UNAVAIL = 3
    REFUSED_BAD_USER_PWD = 4
    REFUSED_NOT_AUTH = 5


CONNECT_ACK_FLAG_SESSION_PRESENT = 0x01


class SubscribeAckReturnCode(enum.IntEnum):
    """Per-topic return codes carried by a SUBACK packet."""

    SUCCESS_MAX_QOS0 = 0
    SUCCESS_MAX_QOS1 = 1
    SUCCESS_MAX_QOS2 = 2
    FAILURE = 0x80


@dataclass
class Message:
    """A published message, outgoing or incoming.

    ``buffer`` holds the payload bytes at hand; ``total_len`` is the length
    of the whole payload, which defaults to the length of ``buffer``.
    ``buffer_pos`` and ``buffer_len`` track the chunk being transferred.
    """

    topic_name: str | None = None
    buffer: bytes = b""
    qos: QoS = QoS.AT_MOST_ONCE
    packet_id: int = 0
    retain: bool = False
    duplicate: bool = False
    total_len: int | None = None
    buffer_len: int = 0
    buffer_pos: int = 0

    def __post_init__(self) -> None:
        self.qos = QoS(self.qos)
        self.buffer = bytes(self.buffer)
        if self.total_len is None:
            self.total_len = len(self.buffer)

    @property
    def topic_name_len(self) -> int:
        """Length in bytes of the UTF-8 encoded topic name."""
        if self.topic_name is None:
            return 0
        return len(self.topic_name.encode("utf-8"))

    @property
    def is_complete(self) -> bool:
        """True when the current chunk reaches the end of the payload."""
        return self.buffer_pos + self.buffer_len >= self.total_len


Publish = Message


@dataclass
class Topic:
    """A topic filter with the requested QoS and the broker's return code."""

    topic_filter: str
    qos: QoS = QoS.AT_MOST_ONCE
    return_code: int = 0

    def __post_init__(self) -> None:
        self.qos = QoS(self.qos)


@dataclass
class ConnectAck:
    """Contents of a CONNACK packet."""

    flags: int = 0
    return_code: int = ConnectAckReturnCode.ACCEPTED

    @property
    def session_present(self) -> bool:
        return bool(self.flags & CONNECT_ACK_FLAG_SESSION_PRESENT)

    @property
    def accepted(self) -> bool:
        return self.return_code == ConnectAckReturnCode.ACCEPTED


@dataclass
class Connect:
    """Parameters of a CONNECT request and the acknowledgement it received."""

    client_id: str
    keep_alive_sec: int = 0
    clean_session: bool = False
    enable_lwt: bool = False
    lwt_msg: Message | None = None
    username: str | None = None
    password: str | None = None
    ack: ConnectAck = field(default_factory=ConnectAck)


@dataclass
class PublishResponse:
    """Contents of PUBACK, PUBREC, PUBREL and PUBCOMP packets."""

    packet_id: int = 0


@dataclass
class Subscribe:
    """A SUBSCRIBE (or UNSUBSCRIBE) request: packet id and topic list."""

    packet_id: int = 0
    topics: list[Topic] = field(default_factory=list)

    @property
    def topic_count(self) -> int:
        return len(self.topics)


Unsubscribe = Subscribe


@dataclass
class SubscribeAck:
    """Contents of a SUBACK packet."""

    packet_id: int = 0
    return_codes: bytes = b""


@dataclass
class UnsubscribeAck:
    """Contents of an UNSUBACK packet."""

    packet_id: int = 0


def packet_type_of(type_flags: int) -> PacketType:
    """Return the packet type held in a fixed header's first byte."""
    return PacketType((type_flags >> 4) & 0xF)


def qos_of(type_flags: int) -> QoS:
    """Return the QoS held in a fixed header's first byte."""
    return QoS(((type_flags & 0xF) & PacketFlag.QOS_MASK) >> PACKET_FLAG_QOS_SHIFT)