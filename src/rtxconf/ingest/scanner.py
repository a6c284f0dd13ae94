"""Find and parse every router configuration dump under a directory."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

from rtxconf.ingest.parser import ConfigParser
from rtxconf.models import ParsedConfig

logger = logging.getLogger(__name__)

CONFIG_EXTENSIONS = {".conf", ".cfg", ".config", ".rtx"}
SKIPPED_DIRS = {".git", ".hg", ".svn", "__pycache__"}
MAX_CONFIG_BYTES = 4 * 1024 * 1024
SNIFF_CHARS = 2000

# Banner written by "show config", or a command only RTX dumps carry.
_DUMP_BANNER = re.compile(r"^#\s*(RTX|NVR|FWX|vRX)\S*\s+Rev\.", re.MULTILINE)
_DUMP_COMMANDS = re.compile(
    r"^\s*(ip route \S+ gateway|pp select|tunnel select|ip lan\d+ address|"
    r"dhcp scope \d|nat descriptor type|login user)\b",
    re.MULTILINE,
)


def looks_like_dump(head: str) -> bool:
    """True when the first lines of a file read like an RTX config dump."""
    return bool(_DUMP_BANNER.search(head) or _DUMP_COMMANDS.search(head))


class DirectoryScanner:
    """Parse every configuration dump found below a directory.

    Files are picked by extension, or by sniffing the first few lines for a
    config banner when the extension says nothing. Results are ordered by
    path so repeated scans are stable.
    """

    def __init__(self, parser: ConfigParser | None = None,
                 max_bytes: int = MAX_CONFIG_BYTES) -> None:
        self.parser = parser or ConfigParser()
        self.max_bytes = max_bytes

    def scan(self, directory: str | Path, recursive: bool = True) -> list[ParsedConfig]:
        """Parse every config file below ``directory``."""
        return list(self.iter_configs(directory, recursive))

    def iter_configs(self, directory: str | Path,
                     recursive: bool = True) -> Iterator[ParsedConfig]:
        directory = Path(directory)
        if not directory.is_dir():
            raise NotADirectoryError(f"Not a directory: {directory}")

        for filepath in self.find_dumps(directory, recursive):
            try:
                config = self.parser.parse_file(filepath)
            except OSError as e:
                logger.warning("Failed to read %s: %s", filepath, e)
                continue
            logger.info("Parsed: %s (%d commands, %d scopes)", filepath.name,
                        config.stream.command_count, len(config.stream.scopes))
            yield config

    def find_dumps(self, directory: Path, recursive: bool = True) -> list[Path]:
        """Candidate config files, sorted by path."""
        candidates = directory.rglob("*") if recursive else directory.iterdir()
        found = []
        for path in candidates:
            if not path.is_file() or SKIPPED_DIRS.intersection(path.relative_to(directory).parts):
                continue
            if path.suffix.lower() in CONFIG_EXTENSIONS or self._sniff(path):
                found.append(path)
        return sorted(found)

    def _sniff(self, path: Path) -> bool:
        try:
            if path.stat().st_size > self.max_bytes:
                return False
            with open(path, encoding="utf-8", errors="replace") as f:
                head = f.read(SNIFF_CHARS)
        except OSError:
            return False
        return looks_like_dump(head)
