"""Response codes and the exceptions raised for them."""

from __future__ import annotations

import enum

__all__ = [
    "ResponseCode",
    "MqttError",
    "BadArgumentError",
    "OutOfBufferError",
    "MalformedDataError",
    "PacketTypeError",
    "PacketIdError",
    "TlsConnectError",
    "MqttTimeoutError",
    "NetworkError",
    "return_code_to_string",
    "error_for_code",
]


class ResponseCode(enum.IntEnum):
    """Result codes of client operations; errors are negative."""

    SUCCESS = 0
    ERROR_BAD_ARG = -1
    ERROR_OUT_OF_BUFFER = -2
    ERROR_MALFORMED_DATA = -3
    ERROR_PACKET_TYPE = -4
    ERROR_PACKET_ID = -5
    ERROR_TLS_CONNECT = -6
    ERROR_TIMEOUT = -7
    ERROR_NETWORK = -8


_DESCRIPTIONS: dict[int, str] = {
    ResponseCode.SUCCESS: "Success",
    ResponseCode.ERROR_BAD_ARG: "Error (Bad argument)",
    ResponseCode.ERROR_OUT_OF_BUFFER: "Error (Out of buffer)",
    ResponseCode.ERROR_MALFORMED_DATA: "Error (Malformed Remaining Length)",
    ResponseCode.ERROR_PACKET_TYPE: "Error (Packet Type Mismatch)",
    ResponseCode.ERROR_PACKET_ID: "Error (Packet Id Mismatch)",
    ResponseCode.ERROR_TLS_CONNECT: "Error (TLS Connect)",
    ResponseCode.ERROR_TIMEOUT: "Error (Timeout)",
    ResponseCode.ERROR_NETWORK: "Error (Network)",
}


def return_code_to_string(code) -> str:
    """Return the human-readable description of a response code."""
    try:
        return _DESCRIPTIONS.get(code, "Unknown")
    except TypeError:
        return "Unknown"


class MqttError(Exception):
    """Base class of every error raised by the client."""

    code: int | None = None

    def __init__(self, message: str | None = None, code: int | None = None):
        if code is not None:
            self.code = code
        if message is None:
            message = return_code_to_string(self.code)
        super().__init__(message)


class BadArgumentError(MqttError):
    """An argument was missing or out of range."""

    code = ResponseCode.ERROR_BAD_ARG


class OutOfBufferError(MqttError):
    """A buffer was too small for the data."""

    code = ResponseCode.ERROR_OUT_OF_BUFFER


class MalformedDataError(MqttError):
    """Received data, such as a remaining length, could not be decoded."""

    code = ResponseCode.ERROR_MALFORMED_DATA


class PacketTypeError(MqttError):
    """A packet was not of the expected type."""

    code = ResponseCode.ERROR_PACKET_TYPE


class PacketIdError(MqttError):
    """A packet id was missing or did not match."""

    code = ResponseCode.ERROR_PACKET_ID


class TlsConnectError(MqttError):
    """The TLS session could not be established."""

    code = ResponseCode.ERROR_TLS_CONNECT


class MqttTimeoutError(MqttError):
    """The network did not deliver data in time."""

    code = ResponseCode.ERROR_TIMEOUT


class NetworkError(MqttError):
    """The underlying network reported a failure."""

    code = ResponseCode.ERROR_NETWORK


_ERROR_CLASSES: dict[int, type[MqttError]] = {
    cls.code: cls
    for cls in (
        BadArgumentError,
        OutOfBufferError,
        MalformedDataError,
        PacketTypeError,
        PacketIdError,
        TlsConnectError,
        MqttTimeoutError,
        NetworkError,
    )
}


def error_for_code(code: int) -> MqttError:
    """Build the exception that stands for a non-success response code.

    Unknown codes give a plain MqttError carrying the code.
    """
    if code == ResponseCode.SUCCESS:
        raise ValueError("success is not an error code")
    cls = _ERROR_CLASSES.get(code)
    if cls is None:
        return MqttError(code=code)
    return cls()