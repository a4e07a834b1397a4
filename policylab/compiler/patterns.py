from __future__ import annotations
from typing import Optional
import re

# /pattern/flags ; pattern is greedy so the last slash separates the flags
_LITERAL_RX = re.compile(r"^/(.+)/([a-z]*)$", re.I | re.S)

# regex-literal flag -> python `re` flag
FLAG_MAP: dict[str, int] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": re.UNICODE,
}

# literal flags with no `re` equivalent (global, sticky, indices, unicode-sets)
UNSUPPORTED_FLAGS = frozenset("gydv")


class UnsupportedFlagError(ValueError):
    def __init__(self, flag: str) -> None:
        super().__init__(f"unsupported regex flag {flag!r}")
        self.flag = flag


def format_literal(pattern: str, flags: Optional[str]) -> str:
    return f"/{pattern}/{flags or ''}"


def split_literal(raw: str) -> Optional[tuple[str, str]]:
    """Return (pattern, flags) for a `/pattern/flags` literal, or None."""
    m = _LITERAL_RX.match(raw)
    if not m:
        return None
    return m.group(1), m.group(2)


def flags_to_re(flags: Optional[str]) -> int:
    """
    Map literal flags onto `re` flags one-to-one.
    Raises UnsupportedFlagError for flags `re` cannot express and ValueError
    for unknown or repeated letters.
    """
    out = 0
    seen: set[str] = set()
    for ch in flags or "":
        if ch in seen:
            raise ValueError(f"repeated regex flag {ch!r}")
        seen.add(ch)
        if ch in UNSUPPORTED_FLAGS:
            raise UnsupportedFlagError(ch)
        bit = FLAG_MAP.get(ch)
        if bit is None:
            raise ValueError(f"unknown regex flag {ch!r}")
        out |= bit
    return out


def compile_pattern(pattern: str, flags: Optional[str]) -> re.Pattern[str]:
    """Build the native pattern for a pattern/flags pair (ValueError on failure)."""
    bits = flags_to_re(flags)
    try:
        return re.compile(pattern, bits)
    except re.error as e:
        raise ValueError(f"invalid pattern {format_literal(pattern, flags)}: {e}") from e
