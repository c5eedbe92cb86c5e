"""RakNet unconnected ping/pong encoding and decoding."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

from bedrockping.errors import InvalidLengthError, MagicMismatchError, TruncatedError
from bedrockping.status import StatusInfo, parse_status


class PacketId(IntEnum):
    """RakNet offline packet ids."""

    UNCONNECTED_PING = 0x01
    UNCONNECTED_PONG = 0x1C


# 16-byte offline message id that marks RakNet offline packets
MAGIC = bytes.fromhex("00ffff00fefefefefdfdfdfd12345678")

# id(1) + timestamp(8) + magic(16) + client_guid(8)
PING_SIZE = 33
# id(1) + uptime(8) + server_guid(8) + magic(16) + string length(2)
PONG_HEADER_SIZE = 35

_PING_FORMAT = ">Bq16sq"
_PONG_HEADER_FORMAT = ">Bqq16sh"


@dataclass(frozen=True)
class UnconnectedPing:
    """An unconnected ping request.

    Wire format: [id:u8][timestamp:i64][magic:16][client_guid:i64], big-endian.
    """

    timestamp: int = 0
    client_guid: int = 0

    def encode(self) -> bytes:
        """Encode the ping into bytes for transmission."""
        return struct.pack(
            _PING_FORMAT,
            PacketId.UNCONNECTED_PING,
            self.timestamp,
            MAGIC,
            self.client_guid,
        )


@dataclass(frozen=True)
class UnconnectedPong:
    """A decoded unconnected pong reply.

    Wire format: [id:u8][uptime:i64][server_guid:i64][magic:16][len:i16][server id string],
    big-endian. Anything after the server id string is ignored.
    """

    packet_id: int
    uptime_ms: int
    server_guid: int
    magic: bytes
    status_length: int
    status_raw: str
    status_parsed_ok: bool
    status: StatusInfo

    @classmethod
    def decode(cls, data: bytes, *, validate_magic: bool = False) -> UnconnectedPong:
        """Decode a pong from the raw reply datagram.

        The packet id is not checked. Unless validate_magic is set, the magic
        bytes of the reply are not compared and the result carries MAGIC.

        Raises:
            TruncatedError: If the reply is shorter than the header or the
                declared server id string.
            InvalidLengthError: If the declared string length is negative.
            MagicMismatchError: If validate_magic is set and the magic differs.
            StatusParseError: If the server id string is rejected.
        """
        if len(data) < PONG_HEADER_SIZE:
            msg = f"Pong is {len(data)} bytes, header needs {PONG_HEADER_SIZE}"
            raise TruncatedError(msg)

        packet_id, uptime_ms, server_guid, magic, status_length = struct.unpack_from(
            _PONG_HEADER_FORMAT, data, 0
        )

        if validate_magic and magic != MAGIC:
            msg = f"Unexpected magic in pong: {magic.hex()}"
            raise MagicMismatchError(msg)

        if status_length < 0:
            msg = f"Negative server id string length: {status_length}"
            raise InvalidLengthError(msg)

        end = PONG_HEADER_SIZE + status_length
        if len(data) < end:
            msg = (
                f"Server id string declares {status_length} bytes, "
                f"only {len(data) - PONG_HEADER_SIZE} received"
            )
            raise TruncatedError(msg)

        status_raw = data[PONG_HEADER_SIZE:end].decode("utf-8", errors="replace")
        status, parsed_ok = parse_status(status_raw)
        return cls(
            packet_id=packet_id,
            uptime_ms=uptime_ms,
            server_guid=server_guid,
            magic=MAGIC,
            status_length=status_length,
            status_raw=status_raw,
            status_parsed_ok=parsed_ok,
            status=status,
        )
