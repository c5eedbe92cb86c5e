"""Send one unconnected ping over UDP and decode the pong."""

from __future__ import annotations

import logging
import socket

from bedrockping.errors import (
    BindError,
    PingTimeoutError,
    ReceiveError,
    SendError,
)
from bedrockping.protocol import UnconnectedPing, UnconnectedPong
from bedrockping.status import DEFAULT_PORT, StatusInfo

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
# Largest possible UDP payload, so a reply is never cut short by the buffer
MAX_DATAGRAM = 65535


def _parse_port(port_str: str, address: str) -> int:
    if not port_str.isascii() or not port_str.isdigit():
        msg = f"Invalid port in address {address!r}"
        raise SendError(msg)
    port = int(port_str)
    if not 1 <= port <= 65535:
        msg = f"Port out of range in address {address!r}"
        raise SendError(msg)
    return port


def parse_address(address: str, default_port: int = DEFAULT_PORT) -> tuple[str, int]:
    """Split an address into (host, port).

    Accepts host, host:port, [ipv6], [ipv6]:port and bare IPv6 literals.

    Raises:
        SendError: If the host is empty or the port is not a valid port number.
    """
    text = address.strip()
    port_str: str | None = None

    if text.startswith("["):
        host, closed, rest = text[1:].partition("]")
        if not closed or (rest and not rest.startswith(":")):
            msg = f"Malformed bracketed address {address!r}"
            raise SendError(msg)
        if rest:
            port_str = rest[1:]
    elif text.count(":") == 1:
        host, port_str = text.split(":")
    else:
        # Plain hostname, or an IPv6 literal without brackets
        host = text

    if not host:
        msg = f"No host in address {address!r}"
        raise SendError(msg)

    port = default_port if port_str is None else _parse_port(port_str, address)
    return host, port


class PingClient:
    """Queries a Bedrock server with a single unconnected ping."""

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        timeout: float | None = DEFAULT_TIMEOUT,
        buffer_size: int = MAX_DATAGRAM,
        *,
        validate_magic: bool = False,
    ) -> None:
        # 0 would make the socket non-blocking instead of bounding the wait
        if timeout is not None and timeout <= 0:
            msg = f"Timeout must be positive or None, got {timeout}"
            raise ValueError(msg)
        self.host = host
        self.port = port
        self.timeout = timeout
        self.buffer_size = buffer_size
        self.validate_magic = validate_magic

    def ping(self) -> UnconnectedPong:
        """Send a ping and decode the reply."""
        data = self.query()
        return UnconnectedPong.decode(data, validate_magic=self.validate_magic)

    def query(self) -> bytes:
        """Send one ping datagram and return the raw reply.

        A timeout of None waits for the reply indefinitely.
        """
        family, sockaddr = self._resolve()
        sock = self._open(family)
        try:
            sock.settimeout(self.timeout)
            self._send(sock, sockaddr)
            return self._recv(sock)
        finally:
            sock.close()

    def _resolve(self) -> tuple[int, tuple]:
        """Resolve the target to a socket family and address."""
        try:
            infos = socket.getaddrinfo(
                self.host, self.port, type=socket.SOCK_DGRAM
            )
        except (OSError, UnicodeError) as e:
            msg = f"Failed to resolve {self.host}:{self.port}: {e}"
            raise SendError(msg) from e

        if not infos:
            msg = f"No addresses found for {self.host}:{self.port}"
            raise SendError(msg)

        family, _type, _proto, _canonname, sockaddr = infos[0]
        log.debug("Resolved %s:%d to %s", self.host, self.port, sockaddr[0])
        return family, sockaddr

    def _open(self, family: int) -> socket.socket:
        """Create a UDP socket bound to an ephemeral port on all interfaces."""
        wildcard = "::" if family == socket.AF_INET6 else "0.0.0.0"  # noqa: S104
        try:
            sock = socket.socket(family, socket.SOCK_DGRAM)
        except OSError as e:
            msg = f"Failed to create UDP socket: {e}"
            raise BindError(msg) from e

        try:
            sock.bind((wildcard, 0))
        except OSError as e:
            sock.close()
            msg = f"Couldn't bind to {wildcard} on an ephemeral port: {e}"
            raise BindError(msg) from e
        return sock

    def _send(self, sock: socket.socket, sockaddr: tuple) -> None:
        """Send the ping datagram."""
        packet = UnconnectedPing().encode()
        try:
            sock.sendto(packet, sockaddr)
        except OSError as e:
            msg = f"Failed to send ping to {self.host}:{self.port}: {e}"
            raise SendError(msg) from e
        log.debug("Sent %d byte ping to %s", len(packet), sockaddr[0])

    def _recv(self, sock: socket.socket) -> bytes:
        """Receive a single reply datagram."""
        try:
            data, sender = sock.recvfrom(self.buffer_size)
        except TimeoutError as e:
            msg = f"No reply from {self.host}:{self.port} within {self.timeout}s"
            raise PingTimeoutError(msg) from e
        except OSError as e:
            msg = f"Failed to receive reply from {self.host}:{self.port}: {e}"
            raise ReceiveError(msg) from e

        log.debug("Received %d bytes from %s", len(data), sender[0])
        if len(data) >= self.buffer_size:
            log.warning(
                "Reply from %s filled the %d byte buffer and may be truncated",
                sender[0],
                self.buffer_size,
            )
        return data


def fetch_pong(
    address: str,
    *,
    timeout: float | None = DEFAULT_TIMEOUT,
    validate_magic: bool = False,
) -> UnconnectedPong:
    """Ping the server at address (host[:port]) and return the decoded pong.

    Raises:
        TransportError: If the datagram exchange fails.
        ProtocolError: If the reply header is malformed.
        StatusParseError: If the server id string is rejected.
    """
    host, port = parse_address(address)
    client = PingClient(host, port, timeout=timeout, validate_magic=validate_magic)
    return client.ping()


def fetch_status_string(
    address: str,
    *,
    timeout: float | None = DEFAULT_TIMEOUT,
    validate_magic: bool = False,
) -> StatusInfo:
    """Ping the server at address and return only the parsed server id string.

    Missing optional fields are filled with defaults; use fetch_pong to find
    out whether that happened.
    """
    pong = fetch_pong(address, timeout=timeout, validate_magic=validate_magic)
    return pong.status
