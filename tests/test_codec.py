import pytest

from tinymqtt.codec import (
    decode_fixed_header,
    decode_num,
    decode_remaining_length,
    decode_string,
    encode_data,
    encode_fixed_header,
    encode_num,
    encode_remaining_length,
    encode_string,
)
from tinymqtt.errors import (
    BadArgumentError,
    MalformedDataError,
    OutOfBufferError,
    PacketTypeError,
)
from tinymqtt.protocol import PacketType, QoS, packet_type_of, qos_of


def test_zero_remaining_length_is_single_zero_byte():
    assert encode_remaining_length(0, 10) == b"\x00"


@pytest.mark.parametrize(
    "value", [0, 1, 127, 128, 16383, 16384, 2097151, 2097152, 268435455]
)
def test_remaining_length_round_trip(value):
    encoded = encode_remaining_length(value, 100)
    assert decode_remaining_length(b"\x30" + encoded) == (1 + len(encoded), value)


def test_remaining_length_grows_at_boundary():
    assert len(encode_remaining_length(127, 100)) < len(encode_remaining_length(128, 100))
    assert len(encode_remaining_length(268435455, 100)) == 4


def test_remaining_length_too_large():
    with pytest.raises(MalformedDataError):
        encode_remaining_length(268435456, 100)


def test_remaining_length_negative():
    with pytest.raises(BadArgumentError):
        encode_remaining_length(-1, 100)


def test_remaining_length_buffer_too_small():
    with pytest.raises(OutOfBufferError):
        encode_remaining_length(200, 2)


def test_decode_incomplete_returns_none():
    assert decode_remaining_length(b"\x30\x80") is None
    assert decode_remaining_length(b"\x30") is None


def test_decode_malformed_length():
    with pytest.raises(MalformedDataError):
        decode_remaining_length(b"\x30" + b"\xff" * 5)


def test_decode_empty():
    with pytest.raises(BadArgumentError):
        decode_remaining_length(b"")


@pytest.mark.parametrize("value", [0, 1, 255, 256, 65535])
def test_num_round_trip(value):
    encoded = encode_num(value)
    assert len(encoded) == 2
    assert decode_num(encoded) == value


def test_num_is_big_endian():
    assert encode_num(0x1234) == b"\x12\x34"


def test_num_out_of_range():
    with pytest.raises(BadArgumentError):
        encode_num(65536)


def test_decode_num_truncated():
    with pytest.raises(MalformedDataError):
        decode_num(b"\x01")


@pytest.mark.parametrize("text", ["a/b", "", "höhe/temp"])
def test_string_round_trip(text):
    encoded = encode_string(text)
    assert decode_string(encoded + b"zz") == (text, len(encoded))


def test_string_truncated():
    encoded = encode_string("hello")
    with pytest.raises(MalformedDataError):
        decode_string(encoded[:-1])


def test_encode_data_prefix():
    encoded = encode_data(b"xyz")
    assert decode_num(encoded) == 3
    assert encoded[2:] == b"xyz"


def test_fixed_header_flags_round_trip():
    header = encode_fixed_header(10, 0, PacketType.PUBLISH, True, QoS.EXACTLY_ONCE, True)
    assert packet_type_of(header[0]) == PacketType.PUBLISH
    assert qos_of(header[0]) == QoS.EXACTLY_ONCE
    decoded = decode_fixed_header(header, PacketType.PUBLISH)
    assert decoded.header_len == len(header)
    assert decoded.remain_len == 0
    assert decoded.retain is True
    assert decoded.duplicate is True
    assert decoded.qos == QoS.EXACTLY_ONCE


def test_fixed_header_without_flags():
    header = encode_fixed_header(10, 5, PacketType.PUBLISH, False, QoS.AT_MOST_ONCE, False)
    decoded = decode_fixed_header(header + b"\x00" * 5, PacketType.PUBLISH)
    assert decoded.remain_len == 5
    assert decoded.retain is False
    assert decoded.duplicate is False
    assert decoded.qos == QoS.AT_MOST_ONCE


def test_ping_request_header_bytes():
    assert encode_fixed_header(10, 0, PacketType.PING_REQ, False, 0, False) == b"\xc0\x00"


def test_fixed_header_wrong_type():
    header = encode_fixed_header(10, 0, PacketType.PING_RESP, False, 0, False)
    with pytest.raises(PacketTypeError):
        decode_fixed_header(header, PacketType.CONNECT_ACK)


def test_fixed_header_incomplete():
    with pytest.raises(OutOfBufferError):
        decode_fixed_header(b"\x30", PacketType.PUBLISH)