"""Resource extractors and the positional field classifier."""

from rtxconf.extract.base import Extractor
from rtxconf.extract.registry import EXTRACTORS, extract_all, extractor_names, get_extractor

__all__ = [
    "EXTRACTORS",
    "Extractor",
    "extract_all",
    "extractor_names",
    "get_extractor",
]
