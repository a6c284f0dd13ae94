"""Export of extracted records."""

from rtxconf.report.generator import RecordExporter, to_plain

__all__ = ["RecordExporter", "to_plain"]
