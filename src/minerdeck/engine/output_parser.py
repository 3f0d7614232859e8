"""Parser for miner console output (xmrig-style status lines)."""

from __future__ import annotations

import re
from dataclasses import dataclass

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

# "speed 10s/60s/15m 523.4 510.2 n/a H/s max 600.1 H/s"
_SPEED_RE = re.compile(
    r"speed\s+\S+\s+"
    r"(?P<values>(?:(?:[\d.]+|n/a)\s+)+)"
    r"(?P<unit>[kMG]?H/s)",
    re.IGNORECASE,
)
# "new job from pool:3333 diff 120007 algo rx/0 height 3001"
_ALGO_RE = re.compile(r"\balgo\s+(?P<algo>[\w./-]+)", re.IGNORECASE)

_UNIT_SCALE = {
    "h/s": 1.0,
    "kh/s": 1_000.0,
    "mh/s": 1_000_000.0,
    "gh/s": 1_000_000_000.0,
}


@dataclass(frozen=True)
class ParsedLine:
    """Metrics extracted from one output line; fields are None when absent."""
    hashrate: float | None = None
    algorithm: str | None = None

    @property
    def empty(self) -> bool:
        return self.hashrate is None and self.algorithm is None


def strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


def parse_speed(line: str) -> float | None:
    """Return the shortest-window hashrate in H/s, skipping ``n/a`` columns."""
    m = _SPEED_RE.search(line)
    if not m:
        return None
    scale = _UNIT_SCALE.get(m.group("unit").lower(), 1.0)
    for token in m.group("values").split():
        if token.lower() == "n/a":
            continue
        try:
            return float(token) * scale
        except ValueError:
            continue
    return None


def parse_algorithm(line: str) -> str | None:
    m = _ALGO_RE.search(line)
    if not m:
        return None
    return m.group("algo")


def parse_line(line: str) -> ParsedLine:
    """Extract hashrate and algorithm from a single line of miner output."""
    clean = strip_ansi(line)
    return ParsedLine(hashrate=parse_speed(clean), algorithm=parse_algorithm(clean))
