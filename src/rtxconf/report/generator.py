"""Record exporter: JSON, YAML, text and CSV."""

from __future__ import annotations

import csv
import enum
import io
import json
import logging
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any

import yaml

from rtxconf.ingest.stream import CommandStream
from rtxconf.models import ParsedConfig
from rtxconf.sanitize import REDACTED, sanitize_line

logger = logging.getLogger(__name__)

# Record fields that hold secrets.
SECRET_FIELDS = {"secret", "password", "pre_shared_key", "tunnel_auth_secret"}


def to_plain(value: Any, redact: bool = False) -> Any:
    """Convert records into JSON/YAML-safe builtins."""
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    if isinstance(value, dict):
        return {
            k: (REDACTED if redact and k in SECRET_FIELDS and v else to_plain(v, redact))
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [to_plain(v, redact) for v in value]
    if isinstance(value, enum.Enum):
        return value.value
    return value


class RecordExporter:
    """Export extracted records in multiple formats.

    Supports:
    - JSON export for integration
    - YAML export for review and diffing
    - Plain text summary
    - CSV dump of the tagged command stream
    """

    def __init__(self, redact_secrets: bool = True) -> None:
        self.redact_secrets = redact_secrets

    def build_document(self, config: ParsedConfig,
                       records: dict[str, list[Any]]) -> dict[str, Any]:
        """Assemble the export document for one parsed config."""
        return {
            "device": config.device_name,
            "source_file": config.source_file,
            "parsed_at": config.parsed_at.isoformat(),
            "summary": {
                "lines": config.stream.line_count,
                "commands": config.stream.command_count,
                "scopes": len(config.stream.scopes),
            },
            "records": {name: to_plain(items, self.redact_secrets)
                        for name, items in records.items()},
        }

    def generate_json(self, config: ParsedConfig, records: dict[str, list[Any]],
                      output_path: str | Path | None = None) -> str:
        """Generate a JSON export."""
        json_str = json.dumps(self.build_document(config, records), indent=2)
        if output_path:
            Path(output_path).write_text(json_str)
            logger.info("JSON export generated: %s", output_path)
        return json_str

    def generate_yaml(self, config: ParsedConfig, records: dict[str, list[Any]],
                      output_path: str | Path | None = None) -> str:
        """Generate a YAML export."""
        yaml_str = yaml.safe_dump(self.build_document(config, records),
                                  sort_keys=False, default_flow_style=False)
        if output_path:
            Path(output_path).write_text(yaml_str)
            logger.info("YAML export generated: %s", output_path)
        return yaml_str

    def generate_text(self, config: ParsedConfig, records: dict[str, list[Any]],
                      output_path: str | Path | None = None) -> str:
        """Generate a plain text summary."""
        stream = config.stream
        lines = [
            "=" * 70,
            "RTXCONF EXTRACTION REPORT",
            "=" * 70,
            f"Device:    {config.device_name}",
            f"Parsed:    {config.parsed_at.strftime('%Y-%m-%d %H:%M UTC')}",
            f"Lines:     {stream.line_count}",
            f"Commands:  {stream.command_count}",
            f"Scopes:    {len(stream.scopes)}",
            "",
        ]

        for name, items in records.items():
            lines.append("-" * 70)
            lines.append(f"{name.upper()} ({len(items)})")
            lines.append("-" * 70)
            for item in items:
                plain = to_plain(item, self.redact_secrets)
                lines.append("  " + ", ".join(
                    f"{k}={v}" for k, v in plain.items() if v not in ("", None, [], False)
                ))

        lines.append("")
        lines.append("=" * 70)
        lines.append("End of Report")
        lines.append("=" * 70)

        text = "\n".join(lines)
        if output_path:
            Path(output_path).write_text(text)
            logger.info("Text report generated: %s", output_path)
        return text

    def generate_csv(self, stream: CommandStream,
                     output_path: str | Path | None = None) -> str:
        """Generate a CSV dump of the tagged command stream."""
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(["Line", "Depth", "Scope", "Command"])
        for cmd in stream:
            text = sanitize_line(cmd.text) if self.redact_secrets else cmd.text
            writer.writerow([cmd.number, cmd.depth, cmd.scope.label, text])

        data = buffer.getvalue()
        if output_path:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(data, newline="")
            logger.info("CSV export generated: %s", output_path)
        return data
