"""Configuration parser: raw text to a scope-tagged command stream."""

from __future__ import annotations

import logging
from pathlib import Path

from rtxconf.ingest.normalizer import normalize
from rtxconf.ingest.stream import CommandStream
from rtxconf.ingest.tracker import ContextTracker
from rtxconf.models import ParsedConfig
from rtxconf.settings import ParserSettings

logger = logging.getLogger(__name__)


def build_stream(text: str, settings: ParserSettings | None = None) -> CommandStream:
    """Normalize text and tag every command with its enclosing scope."""
    settings = settings or ParserSettings()
    normalized = normalize(text, settings.comment_markers)
    tracker = ContextTracker()
    commands = tracker.track(normalized.lines)
    return CommandStream(
        commands=tuple(commands),
        scopes=tuple(tracker.scopes),
        line_count=normalized.line_count,
        source_lines=normalized.source_lines,
    )


class ConfigParser:
    """Router configuration parser.

    Turns a ``show config`` dump, or a hand-written file in the same
    syntax, into a ParsedConfig holding the command stream.
    """

    def __init__(self, settings: ParserSettings | None = None) -> None:
        self.settings = settings or ParserSettings()

    def parse_file(self, filepath: str | Path) -> ParsedConfig:
        """Parse a configuration file."""
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"Config file not found: {filepath}")

        raw = filepath.read_text(encoding="utf-8", errors="replace")
        config = self.parse_text(raw, device_name=filepath.stem)
        config.source_file = str(filepath)
        return config

    def parse_text(self, text: str, device_name: str = "unknown") -> ParsedConfig:
        """Parse configuration text directly."""
        stream = build_stream(text, self.settings)
        logger.debug("Parsed %s: %d commands, %d scopes",
                     device_name, stream.command_count, len(stream.scopes))
        return ParsedConfig(device_name=device_name, raw_config=text, stream=stream)
