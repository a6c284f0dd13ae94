"""DHCP scope and static binding extractors."""

from __future__ import annotations

import ipaddress
import logging
import re

from rtxconf.extract.base import Extractor, is_address, is_hhmm, normalize_mac
from rtxconf.ingest.stream import CommandStream
from rtxconf.models import Command, DHCPBinding, DHCPScope

logger = logging.getLogger(__name__)

SCOPE = re.compile(r"^dhcp\s+scope\s+(\d+)\s+(\S+)(?:\s+(.*))?$")
SCOPE_OPTION = re.compile(r"^dhcp\s+scope\s+option\s+(\d+)\s+(.+)$")
SCOPE_BIND = re.compile(r"^dhcp\s+scope\s+bind\s+(\d+)\s+(\S+)\s+(.+)$")

# "ma" is a bare marker some firmware appends after expire.
_OPTION_KEYWORDS = {"gateway", "dns", "lease", "expire", "maxexpire", "domain", "ma"}


class DHCPScopeExtractor(Extractor):
    """Extract ``dhcp scope`` definitions, merged with ``dhcp scope option``.

    Values on the scope line win; option lines only fill fields the scope
    line left empty.
    """

    name = "dhcp_scopes"
    description = "DHCP server scopes (dhcp scope, dhcp scope option)"

    def extract(self, stream: CommandStream) -> list[DHCPScope]:
        scopes: dict[int, DHCPScope] = {}
        options: list[tuple[Command, int, str]] = []

        for cmd in stream.global_commands():
            m = SCOPE_OPTION.match(cmd.text)
            if m:
                options.append((cmd, int(m.group(1)), m.group(2)))
                continue
            m = SCOPE.match(cmd.text)
            if not m:
                continue
            scope_id = int(m.group(1))
            scope = scopes.setdefault(scope_id, DHCPScope(scope_id=scope_id))
            self._parse_range(cmd, scope, m.group(2))
            if m.group(3):
                self._parse_options(cmd, scope, m.group(3).split())

        for cmd, scope_id, text in options:
            scope = scopes.setdefault(scope_id, DHCPScope(scope_id=scope_id))
            self._merge_option_line(cmd, scope, text)

        result = [scopes[k] for k in sorted(scopes)]
        logger.debug("dhcp_scopes: %d scopes", len(result))
        return result

    def _parse_range(self, cmd: Command, scope: DHCPScope, token: str) -> None:
        span, sep, prefix = token.partition("/")
        if not sep or not prefix.isdigit() or int(prefix) > 32:
            raise self.malformed(cmd, token, "expected START-END/PREFIX")
        start, dash, end = span.partition("-")
        if not dash or not is_address(start) or not is_address(end):
            raise self.malformed(cmd, token, "invalid address range")
        scope.range_start = start
        scope.range_end = end
        scope.prefix = int(prefix)

    def _parse_options(self, cmd: Command, scope: DHCPScope, tokens: list[str]) -> None:
        i = 0
        while i < len(tokens):
            keyword = tokens[i]
            i += 1
            if keyword == "gateway" and i < len(tokens):
                scope.gateway = self._address(cmd, tokens[i])
                i += 1
            elif keyword == "dns":
                while i < len(tokens) and tokens[i] not in _OPTION_KEYWORDS:
                    scope.dns_servers.append(self._address(cmd, tokens[i]))
                    i += 1
            elif keyword in ("expire", "maxexpire") and i < len(tokens):
                value = tokens[i]
                i += 1
                if value != "infinity" and not is_hhmm(value) and not value.isdigit():
                    raise self.malformed(cmd, value, "expected hh:mm or minutes")
                if keyword == "expire":
                    scope.expire = value
                else:
                    scope.max_expire = value
            elif keyword == "lease" and i < len(tokens):
                value = tokens[i]
                i += 1
                if not value.isdigit():
                    raise self.malformed(cmd, value, "expected a non-negative number")
                scope.lease = int(value)
            elif keyword == "domain" and i < len(tokens):
                scope.domain_name = tokens[i]
                i += 1
            elif keyword == "ma":
                continue
            else:
                logger.debug("dhcp_scopes: ignoring option %r at line %d", keyword, cmd.number)

    def _merge_option_line(self, cmd: Command, scope: DHCPScope, text: str) -> None:
        for item in text.split():
            key, _, value = item.partition("=")
            if not value:
                continue
            if key == "dns" and not scope.dns_servers:
                scope.dns_servers = [self._address(cmd, v) for v in value.split(",") if v]
            elif key == "router" and not scope.gateway:
                scope.gateway = self._address(cmd, value.split(",")[0])
            elif key == "domain" and not scope.domain_name:
                scope.domain_name = value

    def _address(self, cmd: Command, token: str) -> str:
        if not is_address(token):
            raise self.malformed(cmd, token, "invalid IP address")
        return token


class DHCPBindingExtractor(Extractor):
    """Extract ``dhcp scope bind`` reservations with canonical MAC addresses.

    Accepted forms::

        dhcp scope bind 1 192.168.1.20 00:a0:de:01:02:03
        dhcp scope bind 1 192.168.1.20 ethernet 00:a0:de:01:02:03
        dhcp scope bind 1 192.168.1.20 01 00 a0 de 01 02 03
    """

    name = "dhcp_bindings"
    description = "Static DHCP reservations (dhcp scope bind)"

    def extract(self, stream: CommandStream) -> list[DHCPBinding]:
        bindings: dict[tuple[int, int], DHCPBinding] = {}
        for cmd in stream.global_commands():
            m = SCOPE_BIND.match(cmd.text)
            if not m:
                continue
            scope_id = int(m.group(1))
            ip = m.group(2)
            if not is_address(ip):
                raise self.malformed(cmd, ip, "invalid IP address")

            rest = m.group(3).split()
            client_id = False
            if rest[0] == "ethernet":
                rest = rest[1:]
            elif rest[0] == "01" and len(rest) > 1:
                client_id = True
                rest = rest[1:]
            raw_mac = " ".join(rest)
            mac = normalize_mac(raw_mac)
            if mac is None:
                raise self.malformed(cmd, raw_mac, "MAC address must be 12 hex digits")

            key = (scope_id, int(ipaddress.ip_address(ip)))
            bindings[key] = DHCPBinding(scope_id=scope_id, ip_address=ip,
                                        mac_address=mac, use_client_identifier=client_id)

        result = [bindings[k] for k in sorted(bindings)]
        logger.debug("dhcp_bindings: %d bindings", len(result))
        return result
