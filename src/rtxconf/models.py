"""Core data models for rtxconf."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rtxconf.ingest.stream import CommandStream


class ScopeKind(enum.Enum):
    """Kinds of configuration scope."""

    GLOBAL = "global"
    PP = "pp"
    TUNNEL = "tunnel"
    IPSEC_TUNNEL = "ipsec_tunnel"


@dataclass(frozen=True)
class Line:
    """A normalized configuration line."""

    text: str
    number: int
    depth: int = 0


@dataclass(frozen=True)
class Scope:
    """A nested region of configuration opened by a select keyword.

    Equality and hashing use the kind and identifier only, so two separate
    openings of ``tunnel select 1`` compare equal while remaining distinct
    instances in the command stream.
    """

    kind: ScopeKind
    id: int = 0
    name: str = ""
    depth: int = field(default=0, compare=False)
    line_number: int = field(default=0, compare=False)
    parent: Scope | None = field(default=None, compare=False, repr=False)

    @property
    def is_global(self) -> bool:
        return self.kind == ScopeKind.GLOBAL

    @property
    def label(self) -> str:
        """Human-readable label, e.g. ``tunnel 1`` or ``pp anonymous``."""
        if self.kind == ScopeKind.GLOBAL:
            return "global"
        ident = self.name or str(self.id)
        if self.kind == ScopeKind.IPSEC_TUNNEL:
            return f"ipsec tunnel {ident}"
        return f"{self.kind.value} {ident}"

    @classmethod
    def from_label(cls, text: str) -> Scope:
        """Build a scope from ``kind:id`` or ``kind id`` text.

        Accepts ``global``, ``pp:1``, ``pp:anonymous``, ``tunnel:2`` and
        ``ipsec_tunnel:101``.
        """
        parts = text.replace(":", " ").split()
        if not parts:
            raise ValueError("Empty scope label")
        try:
            kind = ScopeKind(parts[0].lower())
        except ValueError:
            raise ValueError(f"Unknown scope kind: {parts[0]}") from None
        if kind == ScopeKind.GLOBAL:
            return GLOBAL
        if len(parts) != 2:
            raise ValueError(f"Scope {kind.value} needs an identifier: {text!r}")
        ident = parts[1]
        if kind == ScopeKind.PP and ident == "anonymous":
            return cls(kind, 0, "anonymous")
        if not ident.isdigit():
            raise ValueError(f"Scope identifier must be numeric: {ident!r}")
        return cls(kind, int(ident))


GLOBAL = Scope(ScopeKind.GLOBAL)


@dataclass(frozen=True)
class Command:
    """A normalized line tagged with the scope active when it was read."""

    line: Line
    scope: Scope = GLOBAL

    @property
    def text(self) -> str:
        return self.line.text

    @property
    def number(self) -> int:
        return self.line.number

    @property
    def depth(self) -> int:
        return self.line.depth

    def tokens(self) -> list[str]:
        return self.line.text.split()


@dataclass
class ParsedConfig:
    """A fully parsed router configuration."""

    device_name: str
    raw_config: str
    stream: CommandStream
    source_file: str = ""
    parsed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict[str, Any] = field(default_factory=dict)


# Resource records


@dataclass
class NextHop:
    """One next hop of a static route."""

    gateway: str = ""
    interface: str = ""
    weight: int = 1
    filters: list[int] = field(default_factory=list)
    keepalive: bool = False
    hide: bool = False
    name: str = ""


@dataclass
class StaticRoute:
    """A static route keyed by destination prefix and mask."""

    prefix: str
    mask: str
    next_hops: list[NextHop] = field(default_factory=list)


@dataclass
class DHCPScope:
    """A DHCP server address scope."""

    scope_id: int
    range_start: str = ""
    range_end: str = ""
    prefix: int = 0
    gateway: str = ""
    dns_servers: list[str] = field(default_factory=list)
    domain_name: str = ""
    expire: str = ""
    max_expire: str = ""
    lease: int | None = None


@dataclass
class DHCPBinding:
    """A static DHCP reservation."""

    scope_id: int
    ip_address: str
    mac_address: str
    use_client_identifier: bool = False


@dataclass
class MasqueradeStaticEntry:
    """A static port mapping inside a masquerade descriptor."""

    entry_number: int
    outer_address: str
    outer_port: int
    inner_address: str
    inner_port: int
    protocol: str = ""


@dataclass
class NATMasquerade:
    """A NAT descriptor of type masquerade."""

    descriptor_id: int
    outer_address: str = ""
    inner_network: str = ""
    static_entries: list[MasqueradeStaticEntry] = field(default_factory=list)


@dataclass
class NATStaticEntry:
    """A one-to-one static NAT mapping."""

    outer_address: str
    inner_address: str
    outer_port: int | None = None
    inner_port: int | None = None
    protocol: str = ""


@dataclass
class NATStatic:
    """A NAT descriptor of type static."""

    descriptor_id: int
    outer_address: str = ""
    inner_network: str = ""
    entries: list[NATStaticEntry] = field(default_factory=list)


@dataclass
class IPFilter:
    """A static IP filter rule."""

    number: int
    action: str
    source: str
    destination: str = "*"
    protocol: str = "*"
    source_port: str = "*"
    destination_port: str = "*"
    established: bool = False


@dataclass
class IPFilterDynamic:
    """A dynamic (stateful) IP filter rule."""

    number: int
    source: str
    destination: str
    protocol: str
    syslog: bool = False


class CredentialKind(enum.Enum):
    """Where a secret was declared."""

    LOGIN = "login"
    ADMINISTRATOR = "administrator"
    USER = "user"
    IPSEC_PSK = "ipsec_psk"
    L2TP_TUNNEL = "l2tp_tunnel"
    PP_AUTH = "pp_auth"
    PP_MYNAME = "pp_myname"


@dataclass
class Credential:
    """A secret found in the configuration."""

    kind: CredentialKind
    identifier: str
    secret: str = ""
    username: str = ""
    encrypted: bool = False
    line_number: int = 0


@dataclass
class TunnelIPsec:
    """IPsec settings of a tunnel interface."""

    ipsec_tunnel_id: int = 0
    sa_policy: str = ""
    local_address: str = ""
    remote_address: str = ""
    pre_shared_key: str = ""
    encryption: str = ""
    hash: str = ""
    group: str = ""
    keepalive: str = ""
    secure_filter_in: list[int] = field(default_factory=list)
    secure_filter_out: list[int] = field(default_factory=list)
    dynamic_filter_in: list[int] = field(default_factory=list)
    dynamic_filter_out: list[int] = field(default_factory=list)
    tcp_mss: str = ""


@dataclass
class L2TPAuth:
    """PPP authentication accepted by an L2TP network server."""

    method: str = ""
    username: str = ""
    password: str = ""


@dataclass
class L2TPIPPool:
    """Remote address pool handed to L2TP clients."""

    start: str
    end: str


@dataclass
class TunnelL2TP:
    """L2TP settings of a tunnel, optionally merged with the anonymous PP."""

    hostname: str = ""
    local_router_id: str = ""
    remote_router_id: str = ""
    remote_end_id: str = ""
    always_on: bool = False
    tunnel_auth: bool = False
    tunnel_auth_secret: str = ""
    keepalive_interval: int | None = None
    keepalive_retry: int | None = None
    disconnect_time: str = ""
    syslog: bool = False
    endpoint_local: str = ""
    endpoint_remote: str = ""
    endpoint_name: str = ""
    authentication: L2TPAuth | None = None
    ip_pool: L2TPIPPool | None = None


@dataclass
class Tunnel:
    """A tunnel interface, correlated across tunnel and anonymous PP scopes."""

    tunnel_id: int
    encapsulation: str = ""
    enabled: bool = False
    description: str = ""
    mode: str = ""
    ipsec: TunnelIPsec | None = None
    l2tp: TunnelL2TP | None = None


@dataclass
class L2TPService:
    """Global L2TP service switch."""

    enabled: bool
    protocols: list[str] = field(default_factory=list)


@dataclass
class PPInterface:
    """A PP (point-to-point) interface."""

    pp_id: int
    name: str = ""
    description: str = ""
    bind: str = ""
    pppoe_interface: str = ""
    auth_accept: list[str] = field(default_factory=list)
    auth_request: str = ""
    username: str = ""
    password: str = ""
    ip_address: str = ""
    mtu: int | None = None
    nat_descriptor: int | None = None
    secure_filter_in: list[int] = field(default_factory=list)
    secure_filter_out: list[int] = field(default_factory=list)
    dynamic_filter_in: list[int] = field(default_factory=list)
    dynamic_filter_out: list[int] = field(default_factory=list)
    always_on: bool = False
    disconnect_time: str = ""
    enabled: bool = False


@dataclass
class DNSServerSelect:
    """A domain-based DNS server selector.

    ``server_edns`` holds the EDNS switch written after each server;
    ``edns`` is true when any server has it on.
    """

    selector_id: int
    servers: list[str] = field(default_factory=list)
    server_edns: list[bool] = field(default_factory=list)
    edns: bool = False
    record_type: str = ""
    query_pattern: str = ""
    original_sender: str = ""
    restrict_pp: int = 0


@dataclass
class NameServer:
    """A default upstream DNS server."""

    address: str
    position: int


@dataclass
class DNSHost:
    """A static DNS host entry."""

    name: str
    address: str
    record_type: str = "a"


@dataclass
class ServiceConfig:
    """A management service (httpd, sshd, sftpd, telnetd)."""

    name: str
    enabled: bool | None = None
    hosts: list[str] = field(default_factory=list)
    auth_method: str = ""
