"""DNS extractors: default servers, static hosts and server selectors."""

from __future__ import annotations

import logging
import re

from rtxconf.extract import classifier
from rtxconf.extract.base import Extractor, is_address, is_network
from rtxconf.ingest.stream import CommandStream
from rtxconf.models import Command, DNSHost, DNSServerSelect, NameServer

logger = logging.getLogger(__name__)

DNS_SERVER_SELECT = re.compile(r"^dns\s+server\s+select\s+(\d+)\s+(.+)$")
DNS_SERVER = re.compile(r"^dns\s+server\s+(.+)$")
DNS_STATIC = re.compile(r"^dns\s+static\s+(?:(a|aaaa|ptr|mx|ns|cname)\s+)?(\S+)\s+(\S+)")

RECORD_TYPES = ("a", "aaaa", "ptr", "mx", "ns", "cname", "any")
MAX_SELECT_SERVERS = 2

SERVER_SELECT_SLOTS = (
    classifier.repeat("servers", is_address, maximum=MAX_SELECT_SERVERS,
                      trailer=classifier.flag("server_edns", {"edns=on": True, "edns=off": False})),
    classifier.choice("record_type", RECORD_TYPES),
    classifier.required("query_pattern"),
    classifier.optional("original_sender", is_network),
    classifier.suffix("restrict_pp", ("restrict", "pp")),
)


def dns_lines(stream: CommandStream) -> list[tuple[Command, str]]:
    """Global ``dns`` commands with wrapped continuation lines rejoined.

    Long lines are wrapped by the device so that a line starting with
    ``=`` continues the previous one (``edns`` / ``=on``).
    """
    joined: list[tuple[Command, str]] = []
    continues_dns = False
    for cmd in stream.global_commands():
        if cmd.text.startswith("=") and continues_dns:
            first, text = joined[-1]
            joined[-1] = (first, text + cmd.text)
            continue
        continues_dns = cmd.text.startswith("dns ")
        if continues_dns:
            joined.append((cmd, cmd.text))
    return joined


def classify_server_select(text: str) -> classifier.Classification:
    """Classify the token tail of ``dns server select N``.

    ``edns=on`` binds to the server written just before it, so the
    trailing form ``a b edns=on`` sets it on ``b`` only.
    """
    parsed = classifier.classify(SERVER_SELECT_SLOTS, text.split())
    parsed.values["edns"] = any(parsed["server_edns"])
    return parsed


def render_server_select(selector: DNSServerSelect) -> str:
    """Render a selector back to its ``dns server select`` command."""
    server_edns = selector.server_edns
    if not server_edns and selector.edns and selector.servers:
        server_edns = [False] * (len(selector.servers) - 1) + [True]
    values = {
        "servers": selector.servers,
        "server_edns": server_edns,
        "record_type": selector.record_type,
        "query_pattern": selector.query_pattern,
        "original_sender": selector.original_sender,
        "restrict_pp": selector.restrict_pp,
    }
    tail = classifier.render(SERVER_SELECT_SLOTS, values)
    return f"dns server select {selector.selector_id} " + " ".join(tail)


class DNSServerSelectExtractor(Extractor):
    """Extract ``dns server select`` entries through the positional classifier."""

    name = "dns_server_select"
    description = "Domain-based DNS server selectors (dns server select N)"

    def extract(self, stream: CommandStream) -> list[DNSServerSelect]:
        selectors: dict[int, DNSServerSelect] = {}
        for cmd, text in dns_lines(stream):
            m = DNS_SERVER_SELECT.match(text)
            if not m:
                continue
            selector_id = int(m.group(1))
            parsed = classify_server_select(m.group(2))
            if not parsed.complete or not parsed["servers"]:
                logger.warning("dns_server_select: incomplete selector %d at line %d",
                               selector_id, cmd.number)
                continue
            if parsed.extra:
                logger.debug("dns_server_select: ignoring %s on selector %d",
                             parsed.extra, selector_id)
            selectors[selector_id] = DNSServerSelect(selector_id=selector_id, **parsed.values)

        result = [selectors[k] for k in sorted(selectors)]
        logger.debug("dns_server_select: %d selectors", len(result))
        return result


class DNSServerExtractor(Extractor):
    """Extract the default ``dns server`` list in declaration order."""

    name = "dns_servers"
    description = "Default DNS servers (dns server)"

    def extract(self, stream: CommandStream) -> list[NameServer]:
        servers: dict[str, NameServer] = {}
        for _, text in dns_lines(stream):
            if DNS_SERVER_SELECT.match(text):
                continue
            m = DNS_SERVER.match(text)
            if not m:
                continue
            for token in m.group(1).split():
                if is_address(token) and token not in servers:
                    servers[token] = NameServer(address=token, position=len(servers) + 1)

        result = sorted(servers.values(), key=lambda s: s.position)
        logger.debug("dns_servers: %d servers", len(result))
        return result


class DNSHostExtractor(Extractor):
    """Extract ``dns static`` host entries."""

    name = "dns_hosts"
    description = "Static DNS host entries (dns static)"

    def extract(self, stream: CommandStream) -> list[DNSHost]:
        hosts: dict[tuple[str, str], DNSHost] = {}
        for _, text in dns_lines(stream):
            m = DNS_STATIC.match(text)
            if not m:
                continue
            record_type = m.group(1) or "a"
            hosts[(m.group(2), record_type)] = DNSHost(name=m.group(2), address=m.group(3),
                                                      record_type=record_type)

        result = [hosts[k] for k in sorted(hosts)]
        logger.debug("dns_hosts: %d hosts", len(result))
        return result
