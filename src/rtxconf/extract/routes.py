"""Static route extractor."""

from __future__ import annotations

import ipaddress
import logging
import re

from rtxconf.extract.base import Extractor, is_address
from rtxconf.ingest.stream import CommandStream
from rtxconf.models import Command, NextHop, StaticRoute

logger = logging.getLogger(__name__)

ROUTE = re.compile(r"^ip\s+route\s+(\S+)\s+gateway\s+(.+)$")
GATEWAY_SPLIT = re.compile(r"\s+gateway\s+")

_HOP_KEYWORDS = {"weight", "filter", "hide", "keepalive", "name"}
_NAMED_INTERFACES = {"pp", "tunnel", "dhcp"}


def _route_key(route: StaticRoute) -> tuple[int, int]:
    return (int(ipaddress.ip_address(route.prefix)), int(ipaddress.ip_address(route.mask)))


class StaticRouteExtractor(Extractor):
    """Extract ``ip route`` commands into routes keyed by prefix and mask.

    Several ``gateway`` clauses on one line, or several lines for the same
    destination, add next hops to the same route (ECMP).
    """

    name = "static_routes"
    description = "Static and ECMP routes (ip route)"

    def extract(self, stream: CommandStream) -> list[StaticRoute]:
        routes: dict[tuple[str, str], StaticRoute] = {}
        for cmd in stream.global_commands():
            m = ROUTE.match(cmd.text)
            if not m:
                continue
            prefix, mask = self._parse_destination(cmd, m.group(1))
            route = routes.setdefault((prefix, mask), StaticRoute(prefix=prefix, mask=mask))
            for clause in GATEWAY_SPLIT.split(m.group(2)):
                route.next_hops.append(self._parse_hop(clause.split()))

        result = sorted(routes.values(), key=_route_key)
        logger.debug("static_routes: %d routes", len(result))
        return result

    def _parse_destination(self, cmd: Command, token: str) -> tuple[str, str]:
        if token == "default":
            return "0.0.0.0", "0.0.0.0"
        address, _, mask = token.partition("/")
        if not is_address(address):
            raise self.malformed(cmd, token, "destination is not an IP address")
        if not mask:
            mask = "32"
        try:
            network = ipaddress.IPv4Network(f"{address}/{mask}", strict=False)
        except ValueError as e:
            raise self.malformed(cmd, token, str(e)) from e
        return address, str(network.netmask)

    def _parse_hop(self, tokens: list[str]) -> NextHop:
        hop = NextHop()
        if not tokens:
            return hop

        i = 0
        head = tokens[0]
        if head in _NAMED_INTERFACES and len(tokens) > 1:
            hop.interface = f"{head} {tokens[1]}"
            i = 2
        elif is_address(head):
            hop.gateway = head
            i = 1
        else:
            # null, loopback, or a bare interface name
            hop.interface = head
            i = 1

        while i < len(tokens):
            token = tokens[i]
            i += 1
            if token == "weight" and i < len(tokens) and tokens[i].isdigit():
                hop.weight = int(tokens[i])
                i += 1
            elif token == "filter":
                while i < len(tokens) and tokens[i].isdigit():
                    hop.filters.append(int(tokens[i]))
                    i += 1
            elif token == "hide":
                hop.hide = True
            elif token == "keepalive":
                hop.keepalive = True
                if i < len(tokens) and tokens[i].isdigit():
                    i += 1
            elif token == "name":
                words = []
                while i < len(tokens) and tokens[i] not in _HOP_KEYWORDS:
                    words.append(tokens[i])
                    i += 1
                hop.name = " ".join(words)
        return hop
