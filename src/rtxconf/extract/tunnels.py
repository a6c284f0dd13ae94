"""Tunnel extractor with tunnel / anonymous-PP correlation, and L2TP service.

A tunnel is described in up to three places: its own ``tunnel select``
block (with a nested ``ipsec tunnel`` block), global ``tunnel enable`` and
``ipsec ike`` lines, and, for an L2TP network server, the ``pp select
anonymous`` block that binds to it. The anonymous PP is scanned into a
separate candidate record and merged after both scans by an explicit
field precedence table, so the result does not depend on which block
comes first in the text.
"""

from __future__ import annotations

import logging
import re
from dataclasses import fields

from rtxconf.extract.base import Extractor, secure_filters
from rtxconf.ingest.stream import CommandStream
from rtxconf.models import (
    Command,
    L2TPAuth,
    L2TPIPPool,
    L2TPService,
    Scope,
    ScopeKind,
    Tunnel,
    TunnelIPsec,
    TunnelL2TP,
)

logger = logging.getLogger(__name__)

ANONYMOUS_PP = Scope(ScopeKind.PP, 0, "anonymous")

TUNNEL_ENCAPSULATION = re.compile(r"^tunnel\s+encapsulation\s+(\S+)$")
TUNNEL_ENABLE = re.compile(r"^tunnel\s+enable\s+(\d+)$")
TUNNEL_ENDPOINT_ADDRESS = re.compile(r"^tunnel\s+endpoint\s+address\s+(\S+)(?:\s+(\S+))?$")
TUNNEL_ENDPOINT_NAME = re.compile(r"^tunnel\s+endpoint\s+name\s+(\S+)(?:\s+(?:fqdn|ip))?$")
DESCRIPTION = re.compile(r"^description\s+(.+)$")

IPSEC_TUNNEL = re.compile(r"^ipsec\s+tunnel\s+(\d+)$")
IPSEC_SA_POLICY = re.compile(r"^ipsec\s+sa\s+policy\s+(\d+\s+\d+\s+.+)$")
IKE_LOCAL_ADDRESS = re.compile(r"^ipsec\s+ike\s+local\s+address\s+(\d+)\s+(\S+)$")
IKE_REMOTE_ADDRESS = re.compile(r"^ipsec\s+ike\s+remote\s+address\s+(\d+)\s+(\S+)$")
IKE_PRE_SHARED_KEY = re.compile(r"^ipsec\s+ike\s+pre-shared-key\s+(\d+)\s+text\s+(\S+)$")
IKE_ENCRYPTION = re.compile(r"^ipsec\s+ike\s+encryption\s+(\d+)\s+(.+)$")
IKE_HASH = re.compile(r"^ipsec\s+ike\s+hash\s+(\d+)\s+(.+)$")
IKE_GROUP = re.compile(r"^ipsec\s+ike\s+group\s+(\d+)\s+(.+)$")
IKE_KEEPALIVE = re.compile(r"^ipsec\s+ike\s+keepalive\s+use\s+(\d+)\s+on\s+((?:dpd|heartbeat)\b.*)$")
TUNNEL_SECURE_FILTER = re.compile(r"^ip\s+tunnel\s+secure\s+filter\s+(in|out)\s+(.+)$")
TUNNEL_TCP_MSS = re.compile(r"^ip\s+tunnel\s+tcp\s+mss\s+limit\s+(\S+)$")

L2TP_HOSTNAME = re.compile(r"^l2tp\s+hostname\s+(\S+)$")
L2TP_LOCAL_ROUTER_ID = re.compile(r"^l2tp\s+local\s+router-id\s+(\S+)$")
L2TP_REMOTE_ROUTER_ID = re.compile(r"^l2tp\s+remote\s+router-id\s+(\S+)$")
L2TP_REMOTE_END_ID = re.compile(r"^l2tp\s+remote\s+end-id\s+(\S+)$")
L2TP_ALWAYS_ON = re.compile(r"^l2tp\s+always-on\s+(on|off)$")
L2TP_TUNNEL_AUTH = re.compile(r"^l2tp\s+tunnel\s+auth\s+(on|off)(?:\s+(\S+))?$")
L2TP_KEEPALIVE = re.compile(r"^l2tp\s+keepalive\s+use\s+on\s+(\d+)\s+(\d+)$")
L2TP_DISCONNECT_TIME = re.compile(r"^l2tp\s+tunnel\s+disconnect\s+time\s+(off|\d+)$")
L2TP_SYSLOG = re.compile(r"^l2tp\s+syslog\s+(on|off)$")

PP_BIND_TUNNEL = re.compile(r"^pp\s+bind\s+tunnel(\d+)$")
PP_AUTH_ACCEPT = re.compile(r"^pp\s+auth\s+accept\s+(.+)$")
PP_AUTH_MYNAME = re.compile(r"^pp\s+auth\s+myname\s+(\S+)\s+(\S+)$")
PP_REMOTE_POOL = re.compile(r"^ip\s+pp\s+remote\s+address\s+pool\s+([0-9.]+)-([0-9.]+)$")
PP_ENABLE_ANONYMOUS = re.compile(r"^pp\s+enable\s+anonymous$")

L2TP_SERVICE = re.compile(r"^l2tp\s+service\s+(on|off)(?:\s+(.+))?$")

TUNNEL_SIDE = "tunnel"
PP_SIDE = "pp"

# Which side's value wins for each field of a correlated tunnel. The first
# side with a non-empty value provides it; the other side never overwrites.
# Fields not listed default to the tunnel side.
MERGE_PRECEDENCE: dict[str, tuple[str, str]] = {
    "encapsulation": (TUNNEL_SIDE, PP_SIDE),
    "enabled": (TUNNEL_SIDE, PP_SIDE),
    "description": (TUNNEL_SIDE, PP_SIDE),
    "mode": (TUNNEL_SIDE, PP_SIDE),
    "ipsec": (TUNNEL_SIDE, PP_SIDE),
    "l2tp.authentication": (PP_SIDE, TUNNEL_SIDE),
    "l2tp.ip_pool": (PP_SIDE, TUNNEL_SIDE),
}

_TOP_LEVEL_FIELDS = ("encapsulation", "enabled", "description", "mode", "ipsec")


def _ipsec(tunnel: Tunnel) -> TunnelIPsec:
    if tunnel.ipsec is None:
        tunnel.ipsec = TunnelIPsec()
    return tunnel.ipsec


def _l2tp(tunnel: Tunnel) -> TunnelL2TP:
    if tunnel.l2tp is None:
        tunnel.l2tp = TunnelL2TP()
    return tunnel.l2tp


def _ike_gateway(tunnel: Tunnel) -> int:
    """IKE gateway id a tunnel's global ``ipsec ike`` lines refer to."""
    if tunnel.ipsec and tunnel.ipsec.sa_policy:
        return int(tunnel.ipsec.sa_policy.split()[1])
    return tunnel.tunnel_id


def _pick(path: str, sides: dict[str, Tunnel | None]):
    order = MERGE_PRECEDENCE.get(path, (TUNNEL_SIDE, PP_SIDE))
    for side in order:
        value = sides[side]
        for attr in path.split("."):
            value = getattr(value, attr, None) if value is not None else None
        if value:
            return value
    return None


def merge_correlated(tunnel: Tunnel | None, candidate: Tunnel) -> Tunnel:
    """Merge a tunnel record with an anonymous-PP candidate of the same id."""
    sides = {TUNNEL_SIDE: tunnel, PP_SIDE: candidate}
    merged = Tunnel(tunnel_id=candidate.tunnel_id)
    for name in _TOP_LEVEL_FIELDS:
        value = _pick(name, sides)
        if value is not None:
            setattr(merged, name, value)

    l2tp = TunnelL2TP()
    for f in fields(TunnelL2TP):
        value = _pick(f"l2tp.{f.name}", sides)
        if value is not None:
            setattr(l2tp, f.name, value)
    merged.l2tp = l2tp
    return merged


class TunnelExtractor(Extractor):
    """Extract tunnels, merging L2TP server settings from ``pp select anonymous``."""

    name = "tunnels"
    description = "Tunnel interfaces with IPsec, L2TPv3 and L2TP server settings"

    def extract(self, stream: CommandStream) -> list[Tunnel]:
        tunnels: dict[int, Tunnel] = {}
        enabled: set[int] = set()
        global_ike: list[Command] = []

        for cmd in stream:
            scope = cmd.scope
            if scope.kind == ScopeKind.IPSEC_TUNNEL and scope.parent is not None:
                owner = scope.parent
            elif scope.kind == ScopeKind.TUNNEL:
                owner = scope
            else:
                owner = None

            if owner is not None:
                tunnel = tunnels.setdefault(owner.id, Tunnel(tunnel_id=owner.id))
                if scope.kind == ScopeKind.IPSEC_TUNNEL:
                    _ipsec(tunnel).ipsec_tunnel_id = scope.id
                self._apply(tunnel, cmd)
            elif scope.is_global:
                m = TUNNEL_ENABLE.match(cmd.text)
                if m:
                    enabled.add(int(m.group(1)))
                elif cmd.text.startswith("ipsec ike "):
                    global_ike.append(cmd)

        for tunnel_id in enabled:
            if tunnel_id in tunnels:
                tunnels[tunnel_id].enabled = True
        self._apply_global_ike(tunnels, global_ike)

        candidate = self._anonymous_candidate(stream)
        if candidate is not None:
            key = candidate.tunnel_id
            tunnels[key] = merge_correlated(tunnels.get(key), candidate)

        result = [tunnels[k] for k in sorted(tunnels)]
        logger.debug("tunnels: %d tunnels", len(result))
        return result

    def _apply(self, tunnel: Tunnel, cmd: Command) -> None:
        text = cmd.text

        m = TUNNEL_ENCAPSULATION.match(text)
        if m:
            tunnel.encapsulation = m.group(1)
            if m.group(1) == "l2tpv3":
                tunnel.mode = "l2vpn"
            return
        m = TUNNEL_ENABLE.match(text)
        if m:
            tunnel.enabled = True
            return
        m = DESCRIPTION.match(text)
        if m:
            tunnel.description = m.group(1)
            return
        m = TUNNEL_ENDPOINT_ADDRESS.match(text)
        if m:
            l2tp = _l2tp(tunnel)
            if m.group(2):
                l2tp.endpoint_local, l2tp.endpoint_remote = m.group(1), m.group(2)
            else:
                l2tp.endpoint_remote = m.group(1)
            return
        m = TUNNEL_ENDPOINT_NAME.match(text)
        if m:
            _l2tp(tunnel).endpoint_name = m.group(1)
            return
        m = IPSEC_TUNNEL.match(text)
        if m:
            _ipsec(tunnel).ipsec_tunnel_id = int(m.group(1))
            return
        if text.startswith(("ipsec ", "ip tunnel ")):
            self._apply_ipsec(_ipsec(tunnel), text)
            return
        if text.startswith("l2tp "):
            self._apply_l2tp(_l2tp(tunnel), text)

    def _apply_ipsec(self, ipsec: TunnelIPsec, text: str) -> None:
        m = IPSEC_SA_POLICY.match(text)
        if m:
            ipsec.sa_policy = m.group(1)
            return
        m = TUNNEL_SECURE_FILTER.match(text)
        if m:
            static, dynamic = secure_filters(m.group(2).split())
            if m.group(1) == "in":
                ipsec.secure_filter_in, ipsec.dynamic_filter_in = static, dynamic
            else:
                ipsec.secure_filter_out, ipsec.dynamic_filter_out = static, dynamic
            return
        m = TUNNEL_TCP_MSS.match(text)
        if m:
            ipsec.tcp_mss = m.group(1)
            return
        self._apply_ike(ipsec, text)

    def _apply_ike(self, ipsec: TunnelIPsec, text: str) -> bool:
        m = IKE_LOCAL_ADDRESS.match(text)
        if m:
            ipsec.local_address = m.group(2)
            return True
        m = IKE_REMOTE_ADDRESS.match(text)
        if m:
            ipsec.remote_address = m.group(2)
            return True
        m = IKE_PRE_SHARED_KEY.match(text)
        if m:
            ipsec.pre_shared_key = m.group(2)
            return True
        m = IKE_ENCRYPTION.match(text)
        if m:
            ipsec.encryption = m.group(2)
            return True
        m = IKE_HASH.match(text)
        if m:
            ipsec.hash = m.group(2)
            return True
        m = IKE_GROUP.match(text)
        if m:
            ipsec.group = m.group(2)
            return True
        m = IKE_KEEPALIVE.match(text)
        if m:
            ipsec.keepalive = m.group(2)
            return True
        return False

    def _apply_global_ike(self, tunnels: dict[int, Tunnel], commands: list[Command]) -> None:
        by_gateway = {_ike_gateway(t): t for t in tunnels.values() if t.ipsec is not None}
        for cmd in commands:
            parts = cmd.text.split()
            gateway = next((int(p) for p in parts[2:] if p.isdigit()), None)
            tunnel = by_gateway.get(gateway)
            if tunnel is None:
                continue
            if not self._apply_ike(_ipsec(tunnel), cmd.text):
                logger.debug("tunnels: unhandled ike line %d", cmd.number)

    def _apply_l2tp(self, l2tp: TunnelL2TP, text: str) -> None:
        m = L2TP_HOSTNAME.match(text)
        if m:
            l2tp.hostname = m.group(1)
            return
        m = L2TP_LOCAL_ROUTER_ID.match(text)
        if m:
            l2tp.local_router_id = m.group(1)
            return
        m = L2TP_REMOTE_ROUTER_ID.match(text)
        if m:
            l2tp.remote_router_id = m.group(1)
            return
        m = L2TP_REMOTE_END_ID.match(text)
        if m:
            l2tp.remote_end_id = m.group(1)
            return
        m = L2TP_ALWAYS_ON.match(text)
        if m:
            l2tp.always_on = m.group(1) == "on"
            return
        m = L2TP_TUNNEL_AUTH.match(text)
        if m:
            l2tp.tunnel_auth = m.group(1) == "on"
            l2tp.tunnel_auth_secret = m.group(2) or ""
            return
        m = L2TP_KEEPALIVE.match(text)
        if m:
            l2tp.keepalive_interval = int(m.group(1))
            l2tp.keepalive_retry = int(m.group(2))
            return
        m = L2TP_DISCONNECT_TIME.match(text)
        if m:
            l2tp.disconnect_time = m.group(1)
            return
        m = L2TP_SYSLOG.match(text)
        if m:
            l2tp.syslog = m.group(1) == "on"

    def _anonymous_candidate(self, stream: CommandStream) -> Tunnel | None:
        """Build the L2TP server candidate from the anonymous PP, if it has one."""
        bound = 0
        auth = L2TPAuth()
        pool = None
        relevant = False

        for cmd in stream.in_scope(ANONYMOUS_PP):
            m = PP_BIND_TUNNEL.match(cmd.text)
            if m:
                bound = int(m.group(1))
                relevant = True
                continue
            m = PP_AUTH_ACCEPT.match(cmd.text)
            if m:
                auth.method = m.group(1)
                relevant = True
                continue
            m = PP_AUTH_MYNAME.match(cmd.text)
            if m:
                auth.username, auth.password = m.group(1), m.group(2)
                relevant = True
                continue
            m = PP_REMOTE_POOL.match(cmd.text)
            if m:
                pool = L2TPIPPool(start=m.group(1), end=m.group(2))
                relevant = True

        if not relevant:
            return None

        enabled = any(PP_ENABLE_ANONYMOUS.match(cmd.text) for cmd in stream)
        has_auth = bool(auth.method or auth.username)
        return Tunnel(
            tunnel_id=bound,
            encapsulation="l2tp",
            enabled=enabled,
            mode="lns",
            l2tp=TunnelL2TP(authentication=auth if has_auth else None, ip_pool=pool),
        )


class L2TPServiceExtractor(Extractor):
    """Extract the global ``l2tp service`` switch (zero or one record)."""

    name = "l2tp_service"
    description = "Global L2TP service switch (l2tp service)"

    def extract(self, stream: CommandStream) -> list[L2TPService]:
        service = None
        for cmd in stream.global_commands():
            m = L2TP_SERVICE.match(cmd.text)
            if m:
                protocols = m.group(2).split() if m.group(2) else []
                service = L2TPService(enabled=m.group(1) == "on", protocols=protocols)
        return [service] if service is not None else []
