"""Config ingestion: normalizer, context tracker, command stream."""

from rtxconf.ingest.normalizer import NormalizedText, normalize
from rtxconf.ingest.parser import ConfigParser, build_stream
from rtxconf.ingest.scanner import DirectoryScanner
from rtxconf.ingest.stream import CommandStream
from rtxconf.ingest.tracker import ContextTracker

__all__ = [
    "CommandStream",
    "ConfigParser",
    "ContextTracker",
    "DirectoryScanner",
    "NormalizedText",
    "build_stream",
    "normalize",
]
