"""Crash log segmentation.

Splits a raw Buffout4 / NetScriptFramework / Crash Logger dump into typed
blocks (header, call stack, registers, modules, plugins) that the FormID
extractor and the plugin list parser consume.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .constants import CRASH_LOG_PATTERNS, GAME_CONTENT_HINTS

# Lines below this index that match no marker belong to the header
HEADER_LINE_LIMIT = 20

GENERATOR_PATTERN = re.compile(
    r'(Buffout\s?4|NetScriptFramework|Crash Logger)\s*(?:v?(\d+\.\d+(?:\.\d+)?))?',
    re.IGNORECASE
)

REGISTER_LINE_PATTERN = re.compile(r'^[re][abcd]x\s*:', re.IGNORECASE)

_LINE_SPLIT = re.compile(r'\r?\n')


class SegmentType(Enum):
    """Kinds of blocks found in a crash log."""
    HEADER = "header"
    CALLSTACK = "callstack"
    REGISTERS = "registers"
    MODULES = "modules"
    PLUGINS = "plugins"
    MEMORY = "memory"
    UNKNOWN = "unknown"


@dataclass
class LogSegment:
    """A contiguous block of crash log lines sharing one type."""
    type: SegmentType
    start_line: int
    end_line: int
    lines: List[str] = field(default_factory=list)


@dataclass
class ParsedCrashLog:
    """Segmented crash log."""
    game: str
    generator: Optional[str] = None
    generator_version: Optional[str] = None
    segments: List[LogSegment] = field(default_factory=list)
    total_lines: int = 0


def detect_game(content: str, file_name: Optional[str] = None) -> Optional[str]:
    """Guess the game a crash log belongs to.

    File name patterns win over content; returns None when nothing matches.
    """
    if file_name:
        for game, patterns in CRASH_LOG_PATTERNS.items():
            for pattern in patterns:
                if pattern.search(file_name):
                    return game

    content_lower = content.lower()
    for game, hints in GAME_CONTENT_HINTS.items():
        if any(hint in content_lower for hint in hints):
            return game

    return None


def classify_line(line: str, index: int) -> SegmentType:
    """Classify a single line for segment transitions."""
    lower = line.lower()

    if 'call stack' in lower or 'callstack' in lower:
        return SegmentType.CALLSTACK
    if 'register' in lower or REGISTER_LINE_PATTERN.search(line):
        return SegmentType.REGISTERS
    if 'modules:' in lower or 'loaded modules' in lower:
        return SegmentType.MODULES
    if 'plugins:' in lower or 'plugin list' in lower:
        return SegmentType.PLUGINS
    if index < HEADER_LINE_LIMIT:
        return SegmentType.HEADER
    return SegmentType.UNKNOWN


def parse_log_segments(content: str, game: str) -> ParsedCrashLog:
    """Parse a crash log into typed segments.

    A new segment opens only on a recognised marker whose type differs from
    the open segment. Unrecognised lines are absorbed into whatever segment
    is open, so every line after the first marker lands in exactly one
    segment.

    Args:
        content: Raw crash log text
        game: Target game tag

    Returns:
        ParsedCrashLog with segments, generator info and the raw line count
    """
    lines = _LINE_SPLIT.split(content)
    parsed = ParsedCrashLog(game=game, total_lines=len(lines))

    header_match = GENERATOR_PATTERN.search(content)
    if header_match:
        parsed.generator = header_match.group(1)
        parsed.generator_version = header_match.group(2)

    current: Optional[LogSegment] = None

    for i, line in enumerate(lines):
        segment_type = classify_line(line, i)

        if segment_type is not SegmentType.UNKNOWN and (current is None or segment_type is not current.type):
            if current is not None:
                current.end_line = i - 1
                parsed.segments.append(current)
            current = LogSegment(type=segment_type, start_line=i, end_line=i, lines=[line])
        elif current is not None:
            current.lines.append(line)
            current.end_line = i

    if current is not None:
        parsed.segments.append(current)

    return parsed


def find_segment(parsed: ParsedCrashLog, segment_type: SegmentType) -> Optional[LogSegment]:
    """Return the first segment of the given type, if any."""
    for segment in parsed.segments:
        if segment.type is segment_type:
            return segment
    return None


def segment_lines(parsed: ParsedCrashLog, segment_type: SegmentType) -> List[str]:
    """Concatenate the lines of every segment of the given type."""
    lines: List[str] = []
    for segment in parsed.segments:
        if segment.type is segment_type:
            lines.extend(segment.lines)
    return lines
