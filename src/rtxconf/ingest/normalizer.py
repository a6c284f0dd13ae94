"""Line normalizer: raw configuration text to an ordered list of Lines."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from rtxconf.models import Line

DEFAULT_COMMENT_MARKERS = ("#",)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass
class NormalizedText:
    """Result of normalizing one configuration blob."""

    lines: list[Line] = field(default_factory=list)
    source_lines: int = 0
    line_count: int = 0
    comment_count: int = 0


def measure_depth(raw: str) -> int:
    """Count the leading spaces and tabs of an untrimmed line."""
    depth = 0
    for ch in raw:
        if ch not in " \t":
            break
        depth += 1
    return depth


def normalize(text: str,
              comment_markers: Iterable[str] = DEFAULT_COMMENT_MARKERS) -> NormalizedText:
    """Split text into Lines, dropping blank and comment lines.

    Every physical line consumes a source ordinal, including the ones that
    are dropped. ``line_count`` counts non-blank lines, comments included.
    """
    markers = tuple(comment_markers)
    result = NormalizedText()
    if not text:
        return result

    physical = _LINE_BREAK.split(text)
    # A trailing line break does not start another line.
    if physical and physical[-1] == "":
        physical.pop()

    for number, raw in enumerate(physical, 1):
        result.source_lines = number
        stripped = raw.strip()
        if not stripped:
            continue
        result.line_count += 1
        if markers and stripped.startswith(markers):
            result.comment_count += 1
            continue
        result.lines.append(Line(text=stripped, number=number, depth=measure_depth(raw)))

    return result
