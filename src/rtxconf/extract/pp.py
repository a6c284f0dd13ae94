"""PP interface extractor."""

from __future__ import annotations

import logging
import re

from rtxconf.extract.base import Extractor, secure_filters
from rtxconf.ingest.stream import CommandStream
from rtxconf.models import Command, PPInterface, Scope, ScopeKind

logger = logging.getLogger(__name__)

PP_ENABLE = re.compile(r"^pp\s+enable\s+(\d+|anonymous)$")
DESCRIPTION = re.compile(r"^description\s+(?:pp\s+)?(.+)$")
PP_BIND = re.compile(r"^pp\s+bind\s+(\S+)$")
PPPOE_USE = re.compile(r"^pppoe\s+use\s+(\S+)$")
AUTH_ACCEPT = re.compile(r"^pp\s+auth\s+accept\s+(.+)$")
AUTH_REQUEST = re.compile(r"^pp\s+auth\s+request\s+(\S+)")
AUTH_MYNAME = re.compile(r"^pp\s+auth\s+myname\s+(\S+)\s+(\S+)$")
ALWAYS_ON = re.compile(r"^pp\s+always-on\s+(on|off)$")
DISCONNECT_TIME = re.compile(r"^pp\s+disconnect\s+time\s+(off|\d+)$")
IP_ADDRESS = re.compile(r"^ip\s+pp\s+address\s+(\S+)$")
MTU = re.compile(r"^ip\s+pp\s+mtu\s+(\d+)$")
NAT_DESCRIPTOR = re.compile(r"^ip\s+pp\s+nat\s+descriptor\s+(\d+)$")
SECURE_FILTER = re.compile(r"^ip\s+pp\s+secure\s+filter\s+(in|out)\s+(.+)$")


def _key(scope: Scope) -> tuple[int, str]:
    return (scope.id, scope.name)


class PPInterfaceExtractor(Extractor):
    """Extract ``pp select`` blocks into PP interfaces.

    ``pp enable`` is read wherever it appears, since the device emits it
    after the block at the global level.
    """

    name = "pp_interfaces"
    description = "PP interfaces (pp select N, pp select anonymous)"

    def extract(self, stream: CommandStream) -> list[PPInterface]:
        interfaces: dict[tuple[int, str], PPInterface] = {}
        for scope in stream.unique_scopes(ScopeKind.PP):
            interfaces[_key(scope)] = PPInterface(pp_id=scope.id, name=scope.name)

        for cmd in stream:
            m = PP_ENABLE.match(cmd.text)
            if m:
                ident = m.group(1)
                key = (0, "anonymous") if ident == "anonymous" else (int(ident), "")
                if key in interfaces:
                    interfaces[key].enabled = True
                continue
            if cmd.scope.kind == ScopeKind.PP:
                self._apply(interfaces[_key(cmd.scope)], cmd)

        result = [interfaces[k] for k in sorted(interfaces)]
        logger.debug("pp_interfaces: %d interfaces", len(result))
        return result

    def _apply(self, pp: PPInterface, cmd: Command) -> None:
        text = cmd.text

        m = DESCRIPTION.match(text)
        if m:
            pp.description = m.group(1)
            return
        m = PP_BIND.match(text)
        if m:
            pp.bind = m.group(1)
            return
        m = PPPOE_USE.match(text)
        if m:
            pp.pppoe_interface = m.group(1)
            return
        m = AUTH_ACCEPT.match(text)
        if m:
            pp.auth_accept = m.group(1).split()
            return
        m = AUTH_REQUEST.match(text)
        if m:
            pp.auth_request = m.group(1)
            return
        m = AUTH_MYNAME.match(text)
        if m:
            pp.username, pp.password = m.group(1), m.group(2)
            return
        m = ALWAYS_ON.match(text)
        if m:
            pp.always_on = m.group(1) == "on"
            return
        m = DISCONNECT_TIME.match(text)
        if m:
            pp.disconnect_time = m.group(1)
            return
        m = IP_ADDRESS.match(text)
        if m:
            pp.ip_address = m.group(1)
            return
        m = MTU.match(text)
        if m:
            pp.mtu = int(m.group(1))
            return
        m = NAT_DESCRIPTOR.match(text)
        if m:
            pp.nat_descriptor = int(m.group(1))
            return
        m = SECURE_FILTER.match(text)
        if m:
            static, dynamic = secure_filters(m.group(2).split())
            if m.group(1) == "in":
                pp.secure_filter_in, pp.dynamic_filter_in = static, dynamic
            else:
                pp.secure_filter_out, pp.dynamic_filter_out = static, dynamic
