"""IP filter extractors (static and dynamic, IPv4 and IPv6)."""

from __future__ import annotations

import logging
import re

from rtxconf.extract import classifier
from rtxconf.extract.base import Extractor
from rtxconf.ingest.stream import CommandStream
from rtxconf.models import IPFilter, IPFilterDynamic

logger = logging.getLogger(__name__)

IP_FILTER = re.compile(r"^ip\s+filter\s+(\d+)\s+(.+)$")
IP_FILTER_DYNAMIC = re.compile(r"^ip\s+filter\s+dynamic\s+(\d+)\s+(\S+)\s+(\S+)\s+(\S+)(?:\s+(.*))?$")
IPV6_FILTER = re.compile(r"^ipv6\s+filter\s+(\d+)\s+(.+)$")
IPV6_FILTER_DYNAMIC = re.compile(r"^ipv6\s+filter\s+dynamic\s+(\d+)\s+(\S+)\s+(\S+)\s+(\S+)(?:\s+(.*))?$")
SYSLOG_ON = re.compile(r"\bsyslog\s+on\b")

ACTIONS = ("pass", "pass-log", "pass-nolog", "reject", "reject-log", "reject-nolog",
           "restrict", "restrict-log", "restrict-nolog")


def _positional(token: str) -> bool:
    return token != "established"


FILTER_SLOTS = (
    classifier.choice("action", ACTIONS),
    classifier.required("source"),
    classifier.optional("destination", _positional, default="*"),
    classifier.optional("protocol", _positional, default="*"),
    classifier.optional("source_port", _positional, default="*"),
    classifier.optional("destination_port", _positional, default="*"),
    classifier.flag("established", {"established": True}),
)


class IPFilterExtractor(Extractor):
    """Extract static ``ip filter N`` rules.

    Fields after the source are optional; an omitted field means ``*``.
    """

    name = "ip_filters"
    description = "Static IP filters (ip filter N)"
    pattern = IP_FILTER

    def extract(self, stream: CommandStream) -> list[IPFilter]:
        filters: dict[int, IPFilter] = {}
        for cmd in stream.global_commands():
            m = self.pattern.match(cmd.text)
            if not m:
                continue
            number = int(m.group(1))
            parsed = classifier.classify(FILTER_SLOTS, m.group(2).split())
            if not parsed["action"] or not parsed.complete:
                logger.warning("%s: incomplete filter %d at line %d", self.name, number, cmd.number)
                continue
            if parsed.extra:
                logger.debug("%s: ignoring %s on filter %d", self.name, parsed.extra, number)
            filters[number] = IPFilter(number=number, **parsed.values)

        result = [filters[k] for k in sorted(filters)]
        logger.debug("%s: %d filters", self.name, len(result))
        return result


class IPFilterDynamicExtractor(Extractor):
    """Extract stateful ``ip filter dynamic N`` rules."""

    name = "ip_filters_dynamic"
    description = "Dynamic IP filters (ip filter dynamic N)"
    pattern = IP_FILTER_DYNAMIC

    def extract(self, stream: CommandStream) -> list[IPFilterDynamic]:
        filters: dict[int, IPFilterDynamic] = {}
        for cmd in stream.global_commands():
            m = self.pattern.match(cmd.text)
            if not m:
                continue
            number = int(m.group(1))
            filters[number] = IPFilterDynamic(
                number=number,
                source=m.group(2),
                destination=m.group(3),
                protocol=m.group(4),
                syslog=bool(m.group(5) and SYSLOG_ON.search(m.group(5))),
            )

        result = [filters[k] for k in sorted(filters)]
        logger.debug("%s: %d filters", self.name, len(result))
        return result


class IPv6FilterExtractor(IPFilterExtractor):
    """Extract static ``ipv6 filter N`` rules; same fields as ``ip filter``."""

    name = "ipv6_filters"
    description = "Static IPv6 filters (ipv6 filter N)"
    pattern = IPV6_FILTER


class IPv6FilterDynamicExtractor(IPFilterDynamicExtractor):
    name = "ipv6_filters_dynamic"
    description = "Dynamic IPv6 filters (ipv6 filter dynamic N)"
    pattern = IPV6_FILTER_DYNAMIC
