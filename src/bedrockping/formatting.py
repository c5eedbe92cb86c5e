"""Strip or convert Bedrock formatting codes in MOTD and level names."""

from __future__ import annotations

import re

# Bedrock has no §x RGB sequence, every code is a single character
_BE_FORMAT_PATTERN = re.compile(r"§.?", re.DOTALL)
# C0 controls (ESC included) and DEL, except tab and newline
_CONTROL_PATTERN = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")

_ANSI_RESET = "\033[0m"

# Material colors (§g and §h-§v) have no 16-color equivalent
_MATERIAL_RGB: dict[str, tuple[int, int, int]] = {
    "g": (0xDD, 0xD6, 0x05),  # Minecoin Gold
    "h": (0xE3, 0xD4, 0xD1),  # Quartz
    "i": (0xCE, 0xCA, 0xCA),  # Iron
    "j": (0x44, 0x3A, 0x3B),  # Netherite
    "m": (0x97, 0x16, 0x07),  # Redstone
    "n": (0xB4, 0x68, 0x4D),  # Copper
    "p": (0xDE, 0xB1, 0x2D),  # Gold
    "q": (0x47, 0xA0, 0x36),  # Emerald
    "s": (0x2C, 0xBA, 0xA8),  # Diamond
    "t": (0x21, 0x49, 0x7B),  # Lapis
    "u": (0x9A, 0x5C, 0xC6),  # Amethyst
    "v": (0xEB, 0x71, 0x14),  # Resin
}

_BE_TO_ANSI: dict[str, str] = {
    "0": "\033[30m",  # Black
    "1": "\033[34m",  # Dark Blue
    "2": "\033[32m",  # Dark Green
    "3": "\033[36m",  # Dark Aqua
    "4": "\033[31m",  # Dark Red
    "5": "\033[35m",  # Dark Purple
    "6": "\033[33m",  # Gold
    "7": "\033[37m",  # Gray
    "8": "\033[90m",  # Dark Gray
    "9": "\033[94m",  # Blue
    "a": "\033[92m",  # Green
    "b": "\033[96m",  # Aqua
    "c": "\033[91m",  # Red
    "d": "\033[95m",  # Light Purple
    "e": "\033[93m",  # Yellow
    "f": "\033[97m",  # White
    "l": "\033[1m",  # Bold
    "o": "\033[3m",  # Italic
    "r": _ANSI_RESET,
    **{code: f"\033[38;2;{r};{g};{b}m" for code, (r, g, b) in _MATERIAL_RGB.items()},
}


def strip_formatting(text: str) -> str:
    """Remove every § formatting code from text.

    A dangling § at the end of the string is removed as well, and so are
    control characters such as ESC.
    """
    return _BE_FORMAT_PATTERN.sub("", _CONTROL_PATTERN.sub("", text))


def convert_formatting(text: str) -> str:
    """Convert Bedrock formatting codes to ANSI escape sequences.

    Material colors become 24-bit sequences. §k (obfuscated) and unknown
    codes are dropped, as are control characters sent by the server. A reset
    is appended when anything was converted.
    """
    has_formatting = False

    def _replace(match: re.Match[str]) -> str:
        nonlocal has_formatting
        code = match.group(0)[1:].lower()
        ansi = _BE_TO_ANSI.get(code)
        if ansi is None:
            return ""
        has_formatting = True
        return ansi

    result = _BE_FORMAT_PATTERN.sub(_replace, _CONTROL_PATTERN.sub("", text))
    if has_formatting:
        result += _ANSI_RESET
    return result


def format_text(text: str, *, color: bool = True) -> str:
    """Format server-supplied text for terminal display.

    Args:
        text: MOTD or level name as sent by the server.
        color: If True, convert formatting codes to ANSI sequences.
            If False, strip all formatting codes.

    Returns:
        Text ready for printing.
    """
    if color:
        return convert_formatting(text)
    return strip_formatting(text)
