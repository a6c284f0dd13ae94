"""YAML settings loader for the parser and extractors."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from rtxconf.errors import SettingsError

logger = logging.getLogger(__name__)


@dataclass
class ParserSettings:
    """Tunable parser behaviour.

    An empty ``extractors`` list means every registered extractor runs.
    """

    comment_markers: list[str] = field(default_factory=lambda: ["#"])
    extractors: list[str] = field(default_factory=list)
    workers: int = 1
    redact_secrets: bool = True


def load_settings(filepath: str | Path) -> ParserSettings:
    """Load parser settings from a YAML file."""
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Settings file not found: {filepath}")

    with open(filepath) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SettingsError(f"Invalid YAML in {filepath}: {e}") from e

    if not data:
        logger.warning("No settings found in %s, using defaults", filepath)
        return ParserSettings()
    if not isinstance(data, dict):
        raise SettingsError(f"Settings in {filepath} must be a mapping")

    settings = settings_from_dict(data)
    logger.info("Loaded settings from %s", filepath.name)
    return settings


def settings_from_dict(data: dict[str, Any]) -> ParserSettings:
    """Validate a raw mapping and build settings from it."""
    known = {f.name for f in fields(ParserSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise SettingsError(f"Unknown settings: {', '.join(unknown)}")

    settings = ParserSettings()

    markers = data.get("comment_markers", settings.comment_markers)
    if isinstance(markers, str):
        markers = [markers]
    if not isinstance(markers, list) or not markers:
        raise SettingsError("comment_markers must be a non-empty list")
    if not all(isinstance(m, str) and m.strip() for m in markers):
        raise SettingsError("comment_markers entries must be non-blank strings")
    settings.comment_markers = [m.strip() for m in markers]

    extractors = data.get("extractors") or []
    if not isinstance(extractors, list) or not all(isinstance(e, str) for e in extractors):
        raise SettingsError("extractors must be a list of names")
    from rtxconf.extract.registry import extractor_names
    available = set(extractor_names())
    missing = [name for name in extractors if name not in available]
    if missing:
        raise SettingsError(f"Unknown extractors: {', '.join(missing)}")
    settings.extractors = list(extractors)

    workers = data.get("workers", settings.workers)
    if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
        raise SettingsError("workers must be a positive integer")
    settings.workers = workers

    redact = data.get("redact_secrets", settings.redact_secrets)
    if not isinstance(redact, bool):
        raise SettingsError("redact_secrets must be true or false")
    settings.redact_secrets = redact

    return settings
