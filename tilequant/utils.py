# tilequant/utils.py
from __future__ import annotations

"""
Logging and formatting helpers.

Everything goes through print(): plain lines for progress, '[debug]' lines for
stage details, '[warn]' for recoverable surprises and '[error]' on stderr.
StageTimer collects the per-stage durations that the pipeline reports in
debug mode.
"""

import sys
import time
from typing import Any, Iterable, List, Tuple


# Durations


def format_seconds_compact(seconds: float) -> str:
    """'12.3ms', '4.567s' or '2m 5.0s'."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f}ms"
    if seconds < 60.0:
        return f"{seconds:.3f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds - 60 * minutes:.1f}s"


def format_total_duration_compact(seconds: float) -> str:
    """Coarser than format_seconds_compact; used for the end-of-run line."""
    if seconds >= 60.0:
        minutes = int(seconds // 60)
        return f"{minutes}m {int(round(seconds - 60 * minutes))}s"
    if seconds >= 1.0:
        return f"{seconds:.1f}s"
    return f"{seconds * 1000.0:.1f}ms"


class StageTimer:
    """Wall-clock time between successive mark() calls."""

    def __init__(self) -> None:
        self._start = self._last = time.perf_counter()
        self.stages: List[Tuple[str, float]] = []

    def mark(self, name: str) -> float:
        now = time.perf_counter()
        elapsed = now - self._last
        self.stages.append((name, elapsed))
        self._last = now
        return elapsed

    @property
    def total(self) -> float:
        return self._last - self._start

    def pairs(self) -> List[Tuple[str, str]]:
        return [(name, format_seconds_compact(sec)) for name, sec in self.stages]


# Values


def format_bool_on_off(value: bool) -> str:
    return "on" if value else "off"


def format_number_compact(value: Any) -> str:
    """Ints with thousands separators, floats to at most 3 decimals."""
    if isinstance(value, bool):
        return format_bool_on_off(value)
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        return f"{value:.3f}".rstrip("0").rstrip(".")
    return str(value)


def key_value_pairs_to_string(
    pairs: Iterable[Tuple[str, Any]], sep: str = "  ", eq: str = ": "
) -> str:
    """[('Tiles', 1024), ('Dithering', True)] -> 'Tiles: 1,024  Dithering: on'."""
    return sep.join(f"{name}{eq}{format_number_compact(value)}" for name, value in pairs)


# Output


def log(message: str) -> None:
    print(message, flush=True)


def debug_log(message: str) -> None:
    print(f"[debug] {message}", flush=True)


def warn(message: str) -> None:
    print(f"[warn] {message}", flush=True)


def error(message: str) -> None:
    print(f"[error] {message}", file=sys.stderr, flush=True)


def print_banner(title: str) -> None:
    print(f"\n=== {title} ===", flush=True)


def print_config_line(
    section: str, pairs: Iterable[Tuple[str, Any]], debug: bool
) -> None:
    """
    One '[section] Key: value  Key: value' line, e.g.
      [run] Input: in.png  Tile: 8x8  Tilemap: 32x32  Palettes: 32  Dithering: on
    Goes to debug_log() when debug is set, else log().
    """
    line = f"[{section}] {key_value_pairs_to_string(pairs)}"
    if debug:
        debug_log(line)
    else:
        log(line)


def enable_line_buffered_stdout() -> None:
    """Flush stdout per line when the stream allows it (no-op otherwise)."""
    reconfigure = getattr(sys.stdout, "reconfigure", None)
    if not callable(reconfigure):
        return
    try:
        reconfigure(line_buffering=True, write_through=True)
    except (OSError, ValueError):
        pass


__all__ = [
    "format_seconds_compact",
    "format_total_duration_compact",
    "StageTimer",
    "format_bool_on_off",
    "format_number_compact",
    "key_value_pairs_to_string",
    "log",
    "debug_log",
    "warn",
    "error",
    "print_banner",
    "print_config_line",
    "enable_line_buffered_stdout",
]
