"""NAT descriptor extractors (masquerade and static)."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from rtxconf.extract.base import Extractor
from rtxconf.ingest.stream import CommandStream
from rtxconf.models import (
    MasqueradeStaticEntry,
    NATMasquerade,
    NATStatic,
    NATStaticEntry,
)

logger = logging.getLogger(__name__)

DESCRIPTOR_TYPE = re.compile(r"^nat\s+descriptor\s+type\s+(\d+)\s+(\S+)$")
DESCRIPTOR_ADDRESS = re.compile(r"^nat\s+descriptor\s+address\s+(outer|inner)\s+(\d+)\s+(\S+)$")
MASQUERADE_STATIC = re.compile(
    r"^nat\s+descriptor\s+masquerade\s+static\s+(\d+)\s+(\d+)\s+"
    r"([^:\s]+):(\d+)=([^:\s]+):(\d+)(?:\s+(\S+))?$"
)
STATIC_PORT = re.compile(
    r"^nat\s+descriptor\s+static\s+(\d+)\s+([0-9.]+):(\d+)=([0-9.]+):(\d+)\s+(tcp|udp)$",
    re.IGNORECASE,
)
STATIC_ONE_TO_ONE = re.compile(r"^nat\s+descriptor\s+static\s+(\d+)\s+([0-9.]+)=([0-9.]+)(?:\s+\d+)?$")


@dataclass
class _Descriptor:
    descriptor_id: int
    kind: str = ""
    outer: str = ""
    inner: str = ""
    masquerade_entries: list[MasqueradeStaticEntry] = field(default_factory=list)
    static_entries: list[NATStaticEntry] = field(default_factory=list)


def scan_descriptors(stream: CommandStream) -> dict[int, _Descriptor]:
    """Collect every ``nat descriptor`` line into per-id descriptors."""
    descriptors: dict[int, _Descriptor] = {}

    def get(ident: str) -> _Descriptor:
        key = int(ident)
        return descriptors.setdefault(key, _Descriptor(descriptor_id=key))

    for cmd in stream.global_commands():
        text = cmd.text
        if not text.startswith("nat descriptor "):
            continue

        m = DESCRIPTOR_TYPE.match(text)
        if m:
            get(m.group(1)).kind = m.group(2)
            continue

        m = DESCRIPTOR_ADDRESS.match(text)
        if m:
            desc = get(m.group(2))
            if m.group(1) == "outer":
                desc.outer = m.group(3)
            else:
                desc.inner = m.group(3)
            continue

        m = MASQUERADE_STATIC.match(text)
        if m:
            get(m.group(1)).masquerade_entries.append(MasqueradeStaticEntry(
                entry_number=int(m.group(2)),
                outer_address=m.group(3),
                outer_port=int(m.group(4)),
                inner_address=m.group(5),
                inner_port=int(m.group(6)),
                protocol=(m.group(7) or "").lower(),
            ))
            continue

        m = STATIC_PORT.match(text)
        if m:
            get(m.group(1)).static_entries.append(NATStaticEntry(
                outer_address=m.group(2),
                outer_port=int(m.group(3)),
                inner_address=m.group(4),
                inner_port=int(m.group(5)),
                protocol=m.group(6).lower(),
            ))
            continue

        m = STATIC_ONE_TO_ONE.match(text)
        if m:
            get(m.group(1)).static_entries.append(NATStaticEntry(
                outer_address=m.group(2),
                inner_address=m.group(3),
            ))

    return descriptors


class NATMasqueradeExtractor(Extractor):
    """Extract masquerade (NAPT) descriptors."""

    name = "nat_masquerade"
    description = "NAT descriptors of type masquerade"

    def extract(self, stream: CommandStream) -> list[NATMasquerade]:
        result = []
        for key, desc in sorted(scan_descriptors(stream).items()):
            wanted = desc.kind == "masquerade" or (not desc.kind and desc.masquerade_entries)
            if not wanted:
                continue
            entries = sorted(desc.masquerade_entries, key=lambda e: e.entry_number)
            result.append(NATMasquerade(
                descriptor_id=key,
                outer_address=desc.outer,
                inner_network=desc.inner,
                static_entries=entries,
            ))
        logger.debug("nat_masquerade: %d descriptors", len(result))
        return result


class NATStaticExtractor(Extractor):
    """Extract one-to-one static NAT descriptors."""

    name = "nat_static"
    description = "NAT descriptors of type static"

    def extract(self, stream: CommandStream) -> list[NATStatic]:
        result = []
        for key, desc in sorted(scan_descriptors(stream).items()):
            wanted = desc.kind == "static" or (not desc.kind and desc.static_entries)
            if not wanted:
                continue
            result.append(NATStatic(
                descriptor_id=key,
                outer_address=desc.outer,
                inner_network=desc.inner,
                entries=list(desc.static_entries),
            ))
        logger.debug("nat_static: %d descriptors", len(result))
        return result
