"""Exceptions raised while pinging a Bedrock server."""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Stable numeric codes attached to every PingError."""

    UNKNOWN = 0
    BIND_FAILED = 1
    SEND_FAILED = 2
    TOO_FEW_FIELDS = 3
    BAD_PROTOCOL_VERSION = 4
    BAD_PLAYER_COUNT = 5
    BAD_MAX_PLAYER_COUNT = 6
    BAD_GAMEMODE_NUMERIC = 7
    BAD_PORT_V4 = 8
    BAD_PORT_V6 = 9
    TIMEOUT = 10
    RECEIVE_FAILED = 11
    TRUNCATED = 12
    INVALID_LENGTH = 13
    MAGIC_MISMATCH = 14


class PingError(Exception):
    """Base exception for unconnected ping errors."""

    code = ErrorCode.UNKNOWN


# --- Transport ---


class TransportError(PingError):
    """Raised when the datagram exchange itself fails."""


class BindError(TransportError):
    """Raised when the local UDP endpoint cannot be created or bound."""

    code = ErrorCode.BIND_FAILED


class SendError(TransportError):
    """Raised when the address is invalid or the ping cannot be sent."""

    code = ErrorCode.SEND_FAILED


class PingTimeoutError(TransportError):
    """Raised when no reply arrives before the timeout."""

    code = ErrorCode.TIMEOUT


class ReceiveError(TransportError):
    """Raised when reading the reply fails for a reason other than a timeout."""

    code = ErrorCode.RECEIVE_FAILED


# --- Pong header ---


class ProtocolError(PingError):
    """Raised when the pong header cannot be decoded."""


class TruncatedError(ProtocolError):
    """Raised when the reply is shorter than the header or declared string."""

    code = ErrorCode.TRUNCATED


class InvalidLengthError(ProtocolError):
    """Raised when the declared server id string length is negative."""

    code = ErrorCode.INVALID_LENGTH


class MagicMismatchError(ProtocolError):
    """Raised by strict decoding when the reply carries the wrong magic."""

    code = ErrorCode.MAGIC_MISMATCH


# --- Server id string ---


class StatusParseError(PingError):
    """Raised when the server id string cannot be parsed."""


class TooFewFieldsError(StatusParseError):
    """Raised when the server id string has fewer than the 4 required fields."""

    code = ErrorCode.TOO_FEW_FIELDS


class FieldParseError(StatusParseError):
    """A field is present in the server id string but is not a valid value."""

    def __init__(self, field: str, token: str) -> None:
        self.field = field
        self.token = token
        super().__init__(
            f"Couldn't parse {field} field from server id string: {token!r}"
        )


class ProtocolVersionError(FieldParseError):
    """protocol_version is not a signed 16-bit integer."""

    code = ErrorCode.BAD_PROTOCOL_VERSION


class PlayerCountError(FieldParseError):
    """player_count is not a signed 32-bit integer."""

    code = ErrorCode.BAD_PLAYER_COUNT


class MaxPlayerCountError(FieldParseError):
    """max_player_count is not a signed 32-bit integer."""

    code = ErrorCode.BAD_MAX_PLAYER_COUNT


class GameModeNumError(FieldParseError):
    """gamemode_numeric is not an unsigned 8-bit integer."""

    code = ErrorCode.BAD_GAMEMODE_NUMERIC


class PortV4Error(FieldParseError):
    """port_v4 is not an unsigned 16-bit port number."""

    code = ErrorCode.BAD_PORT_V4


class PortV6Error(FieldParseError):
    """port_v6 is not an unsigned 16-bit port number."""

    code = ErrorCode.BAD_PORT_V6
