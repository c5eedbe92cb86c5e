"""Parse the semicolon-delimited server id string carried by a pong.

The server id string looks like::

    MCPE;Dedicated Server;618;1.20.40;0;10;1180213954357427574;Bedrock level;Survival;1;19132;19133;

Only the first four fields are mandatory. Servers in the wild frequently
send fewer fields; missing trailing fields are replaced with the values the
game client assumes, and the parse is reported as incomplete. A field that is
present but malformed is always an error.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, NamedTuple

from bedrockping.errors import (
    FieldParseError,
    GameModeNumError,
    MaxPlayerCountError,
    PlayerCountError,
    PortV4Error,
    PortV6Error,
    ProtocolVersionError,
    TooFewFieldsError,
)
from bedrockping.formatting import strip_formatting

log = logging.getLogger(__name__)

DEFAULT_PORT = 19132
DEFAULT_GAMEMODE = "Survival"
REQUIRED_FIELDS = 4

_RE_SIGNED = re.compile(r"[+-]?[0-9]+")
_RE_UNSIGNED = re.compile(r"\+?[0-9]+")


@dataclass(frozen=True)
class StatusInfo:
    """Fields of a parsed server id string."""

    edition: str
    motd: str
    protocol_version: int
    version_name: str
    player_count: int = -1
    max_player_count: int = -1
    server_unique_id: str = ""
    level_name: str = ""
    gamemode: str = DEFAULT_GAMEMODE
    gamemode_numeric: int = 0
    port_v4: int = DEFAULT_PORT
    port_v6: int = DEFAULT_PORT

    @property
    def plain_motd(self) -> str:
        """The MOTD with formatting codes removed."""
        return strip_formatting(self.motd)

    @property
    def plain_level_name(self) -> str:
        """The level name with formatting codes removed."""
        return strip_formatting(self.level_name)


def _int_parser(bits: int, *, signed: bool) -> Callable[[str], int | None]:
    """Build a strict integer parser for a fixed-width integer type.

    Returns None for anything that is not a plain decimal number in range.
    """
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        pattern = _RE_SIGNED
    else:
        low, high = 0, (1 << bits) - 1
        pattern = _RE_UNSIGNED

    def parse(token: str) -> int | None:
        if not pattern.fullmatch(token):
            return None
        value = int(token)
        if not low <= value <= high:
            return None
        return value

    return parse


def _text(token: str) -> str:
    return token


class _Field(NamedTuple):
    name: str
    parse: Callable[[str], Any]
    error: type[FieldParseError] | None
    default: Any = None
    # Whether substituting the default marks the parse as incomplete
    flags_incomplete: bool = False


# Positional layout of the server id string. The first REQUIRED_FIELDS
# entries have no default.
_FIELDS: tuple[_Field, ...] = (
    _Field("edition", _text, None),
    _Field("motd", _text, None),
    _Field("protocol_version", _int_parser(16, signed=True), ProtocolVersionError),
    _Field("version_name", _text, None),
    _Field("player_count", _int_parser(32, signed=True), PlayerCountError, -1, True),
    _Field(
        "max_player_count",
        _int_parser(32, signed=True),
        MaxPlayerCountError,
        -1,
        True,
    ),
    _Field("server_unique_id", _text, None, ""),
    _Field("level_name", _text, None, ""),
    _Field("gamemode", _text, None, DEFAULT_GAMEMODE),
    _Field("gamemode_numeric", _int_parser(8, signed=False), GameModeNumError, 0, True),
    _Field("port_v4", _int_parser(16, signed=False), PortV4Error, DEFAULT_PORT, True),
    _Field("port_v6", _int_parser(16, signed=False), PortV6Error, DEFAULT_PORT, True),
)


def split_fields(text: str) -> list[str]:
    """Split a server id string on ';' and drop empty tokens."""
    return [token for token in text.split(";") if token]


def parse_status(text: str) -> tuple[StatusInfo, bool]:
    """Parse a server id string.

    Returns (status, parsed_ok). parsed_ok is False when at least one
    optional numeric field was missing and replaced by its default.

    Raises:
        TooFewFieldsError: If fewer than 4 non-empty fields are present.
        FieldParseError: If a present field is not a valid value for its type.
            The concrete subclass names the field.
    """
    tokens = split_fields(text)
    if len(tokens) < REQUIRED_FIELDS:
        msg = (
            f"Server id string has {len(tokens)} fields, "
            f"at least {REQUIRED_FIELDS} are required"
        )
        raise TooFewFieldsError(msg)

    values: dict[str, Any] = {}
    parsed_ok = True
    for index, entry in enumerate(_FIELDS):
        if index >= len(tokens):
            values[entry.name] = entry.default
            if entry.flags_incomplete:
                parsed_ok = False
            continue

        token = tokens[index]
        value = entry.parse(token)
        if value is None:
            # Only numeric parsers reject tokens, and all of them name an error
            raise entry.error(entry.name, token)
        values[entry.name] = value

    if len(tokens) > len(_FIELDS):
        log.debug("Ignoring %d extra server id fields", len(tokens) - len(_FIELDS))
    if not parsed_ok:
        log.debug(
            "Server id string has %d of %d fields, defaults substituted",
            len(tokens),
            len(_FIELDS),
        )

    return StatusInfo(**values), parsed_ok
