import pytest

from tinymqtt.errors import (
    BadArgumentError,
    MalformedDataError,
    MqttError,
    MqttTimeoutError,
    NetworkError,
    OutOfBufferError,
    PacketIdError,
    PacketTypeError,
    ResponseCode,
    TlsConnectError,
    error_for_code,
    return_code_to_string,
)


@pytest.mark.parametrize(
    "code, text",
    [
        (0, "Success"),
        (-1, "Error (Bad argument)"),
        (-2, "Error (Out of buffer)"),
        (-3, "Error (Malformed Remaining Length)"),
        (-4, "Error (Packet Type Mismatch)"),
        (-5, "Error (Packet Id Mismatch)"),
        (-6, "Error (TLS Connect)"),
        (-7, "Error (Timeout)"),
        (-8, "Error (Network)"),
    ],
)
def test_return_code_to_string_known(code, text):
    assert return_code_to_string(code) == text


@pytest.mark.parametrize("code", [1, -9, 100, None, "x"])
def test_return_code_to_string_unknown(code):
    assert return_code_to_string(code) == "Unknown"


def test_enum_accepts_plain_ints():
    assert return_code_to_string(ResponseCode.ERROR_TIMEOUT) == return_code_to_string(-7)
    assert ResponseCode(-8) is ResponseCode.ERROR_NETWORK


@pytest.mark.parametrize(
    "code, cls",
    [
        (-1, BadArgumentError),
        (-2, OutOfBufferError),
        (-3, MalformedDataError),
        (-4, PacketTypeError),
        (-5, PacketIdError),
        (-6, TlsConnectError),
        (-7, MqttTimeoutError),
        (-8, NetworkError),
    ],
)
def test_error_for_code_maps_to_class(code, cls):
    err = error_for_code(code)
    assert type(err) is cls
    assert isinstance(err, MqttError)
    assert err.code == code
    assert str(err) == return_code_to_string(code)


def test_error_for_unknown_code_keeps_code():
    err = error_for_code(-42)
    assert type(err) is MqttError
    assert err.code == -42
    assert str(err) == "Unknown"


def test_error_for_success_rejected():
    with pytest.raises(ValueError):
        error_for_code(ResponseCode.SUCCESS)


def test_custom_message_overrides_description():
    err = NetworkError("link down")
    assert str(err) == "link down"
    assert err.code == ResponseCode.ERROR_NETWORK


def test_errors_can_be_raised_and_caught_as_base():
    err = error_for_code(ResponseCode.ERROR_PACKET_ID)
    try:
        raise err
    except MqttError as caught:
        assert caught is err
        assert caught.code == ResponseCode.ERROR_PACKET_ID
        assert str(caught) == "Error (Packet Id Mismatch)"