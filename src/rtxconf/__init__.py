"""rtxconf: context-aware parsing and resource extraction for router configs."""

__version__ = "1.0.0"
