"""Encoding and decoding of the basic MQTT wire elements."""

from __future__ import annotations

from typing import NamedTuple

from .errors import BadArgumentError, MalformedDataError, OutOfBufferError, PacketTypeError
from .protocol import (
    DATA_LEN_SIZE,
    PACKET_FLAG_QOS_SHIFT,
    PACKET_LEN_ENCODE_MASK,
    PACKET_MAX_LEN_BYTES,
    PacketFlag,
    PacketType,
    QoS,
    packet_type_of,
    qos_of,
)

__all__ = [
    "FixedHeader",
    "encode_remaining_length",
    "decode_remaining_length",
    "encode_num",
    "decode_num",
    "encode_string",
    "decode_string",
    "encode_data",
    "encode_fixed_header",
    "decode_fixed_header",
]

_MAX_NUM = 0xFFFF


class FixedHeader(NamedTuple):
    """A decoded fixed header."""

    header_len: int
    remain_len: int
    qos: QoS
    retain: bool
    duplicate: bool


def encode_remaining_length(remain_len: int, buf_len: int) -> bytes:
    """Encode a remaining length as 1-4 variable-length bytes.

    ``buf_len`` is the size of the whole packet buffer, type byte included.
    """
    if remain_len < 0:
        raise BadArgumentError("remaining length must not be negative")
    out = bytearray()
    while True:
        if len(out) + 1 >= buf_len:
            raise OutOfBufferError("buffer too small for the remaining length")
        if len(out) >= PACKET_MAX_LEN_BYTES:
            raise MalformedDataError("remaining length does not fit in four bytes")
        remain_len, digit = divmod(remain_len, PACKET_LEN_ENCODE_MASK)
        if remain_len > 0:
            digit |= PACKET_LEN_ENCODE_MASK
        out.append(digit)
        if remain_len == 0:
            return bytes(out)


def decode_remaining_length(data) -> tuple[int, int] | None:
    """Decode the remaining length of a packet starting with its type byte.

    Returns ``(header_len, remain_len)``, or None when more bytes are needed.
    """
    if not data:
        raise BadArgumentError("no data to decode")
    remain_len = 0
    multiplier = 1
    count = 0
    while True:
        if count + 1 >= len(data):
            return None
        if count >= PACKET_MAX_LEN_BYTES:
            raise MalformedDataError()
        value = data[count + 1]
        count += 1
        remain_len += (value & ~PACKET_LEN_ENCODE_MASK & 0xFF) * multiplier
        multiplier *= PACKET_LEN_ENCODE_MASK
        if not value & PACKET_LEN_ENCODE_MASK:
            return count + 1, remain_len


def encode_num(value: int) -> bytes:
    """Encode a 16-bit number, most significant byte first."""
    if not 0 <= value <= _MAX_NUM:
        raise BadArgumentError(f"{value} does not fit in 16 bits")
    return value.to_bytes(DATA_LEN_SIZE, "big")


def decode_num(data) -> int:
    """Decode the 16-bit number at the start of ``data``."""
    if len(data) < DATA_LEN_SIZE:
        raise MalformedDataError("truncated 16-bit number")
    return int.from_bytes(bytes(data[:DATA_LEN_SIZE]), "big")


def encode_string(text: str) -> bytes:
    """Encode a length-prefixed UTF-8 string."""
    return encode_data(text.encode("utf-8"))


def decode_string(data) -> tuple[str, int]:
    """Decode a length-prefixed UTF-8 string; return it and the bytes used."""
    length = decode_num(data)
    raw = bytes(data[DATA_LEN_SIZE:DATA_LEN_SIZE + length])
    if len(raw) < length:
        raise MalformedDataError("truncated string")
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedDataError("string is not valid UTF-8") from exc
    return text, DATA_LEN_SIZE + length


def encode_data(data: bytes) -> bytes:
    """Encode length-prefixed binary data."""
    return encode_num(len(data)) + bytes(data)


def encode_fixed_header(buf_len, remain_len, packet_type, retain, qos, duplicate) -> bytes:
    """Encode the type/flags byte followed by the remaining length."""
    type_flags = (int(packet_type) & 0xF) << 4
    if retain:
        type_flags |= PacketFlag.RETAIN
    if qos:
        type_flags |= (int(qos) << PACKET_FLAG_QOS_SHIFT) & PacketFlag.QOS_MASK
    if duplicate:
        type_flags |= PacketFlag.DUPLICATE
    return bytes([type_flags]) + encode_remaining_length(remain_len, buf_len)


def decode_fixed_header(data, packet_type) -> FixedHeader:
    """Decode a fixed header and check that it is of ``packet_type``."""
    if not data:
        raise BadArgumentError("no data to decode")
    decoded = decode_remaining_length(data)
    if decoded is None:
        raise OutOfBufferError("incomplete fixed header")
    header_len, remain_len = decoded
    type_flags = data[0]
    if packet_type_of(type_flags) != PacketType(packet_type):
        raise PacketTypeError()
    return FixedHeader(
        header_len=header_len,
        remain_len=remain_len,
        qos=qos_of(type_flags),
        retain=bool(type_flags & PacketFlag.RETAIN),
        duplicate=bool(type_flags & PacketFlag.DUPLICATE),
    )