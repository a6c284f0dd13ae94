"""Credential extractor: every secret declared in the configuration."""

from __future__ import annotations

import logging
import re

from rtxconf.extract.base import Extractor
from rtxconf.ingest.stream import CommandStream
from rtxconf.models import Command, Credential, CredentialKind, ScopeKind

logger = logging.getLogger(__name__)

LOGIN_PASSWORD = re.compile(r"^login\s+password\s+(?:(encrypted)\s+)?(\S.*)$")
ADMIN_PASSWORD = re.compile(r"^administrator\s+password\s+(?:(encrypted)\s+)?(\S.*)$")
LOGIN_USER_ENCRYPTED = re.compile(r"^login\s+user\s+(\S+)\s+encrypted\s+(\S+)$")
LOGIN_USER = re.compile(r"^login\s+user\s+(\S+)\s+(\S.*)$")
IPSEC_PSK = re.compile(r"^ipsec\s+ike\s+pre-shared-key\s+(\d+)\s+text\s+(\S+)$")
L2TP_TUNNEL_AUTH = re.compile(r"^l2tp\s+tunnel\s+auth\s+on\s+(\S+)$")
PP_AUTH_USERNAME = re.compile(r"^pp\s+auth\s+username\s+(\S+)\s+(\S+)")
PP_AUTH_MYNAME = re.compile(r"^pp\s+auth\s+myname\s+(\S+)\s+(\S+)$")


class CredentialExtractor(Extractor):
    """Collect passwords, pre-shared keys and PPP/L2TP secrets.

    Global-only commands (``login``, ``administrator``) are ignored inside a
    scope. ``l2tp tunnel auth`` is attributed to its enclosing tunnel, and
    ``pp auth`` commands only count inside a PP scope.
    """

    name = "credentials"
    description = "Login, administrator, IPsec, L2TP and PPP secrets"

    def extract(self, stream: CommandStream) -> list[Credential]:
        found: dict[tuple[str, str], Credential] = {}
        for cmd in stream:
            cred = self._match(cmd)
            if cred is not None:
                found[(cred.kind.value, cred.identifier)] = cred

        result = [found[k] for k in sorted(found)]
        logger.debug("credentials: %d secrets", len(result))
        return result

    def _match(self, cmd: Command) -> Credential | None:
        text = cmd.text
        scope = cmd.scope

        if scope.is_global:
            m = LOGIN_PASSWORD.match(text)
            if m:
                return Credential(CredentialKind.LOGIN, "login", secret=m.group(2),
                                  encrypted=bool(m.group(1)), line_number=cmd.number)
            m = ADMIN_PASSWORD.match(text)
            if m:
                return Credential(CredentialKind.ADMINISTRATOR, "administrator",
                                  secret=m.group(2), encrypted=bool(m.group(1)),
                                  line_number=cmd.number)
            m = LOGIN_USER_ENCRYPTED.match(text)
            if m:
                return Credential(CredentialKind.USER, m.group(1), secret=m.group(2),
                                  username=m.group(1), encrypted=True, line_number=cmd.number)
            m = LOGIN_USER.match(text)
            if m:
                return Credential(CredentialKind.USER, m.group(1), secret=m.group(2),
                                  username=m.group(1), line_number=cmd.number)

        m = IPSEC_PSK.match(text)
        if m:
            return Credential(CredentialKind.IPSEC_PSK, m.group(1), secret=m.group(2),
                              line_number=cmd.number)

        m = L2TP_TUNNEL_AUTH.match(text)
        if m:
            tunnel = scope
            if tunnel.kind == ScopeKind.IPSEC_TUNNEL and tunnel.parent is not None:
                tunnel = tunnel.parent
            if tunnel.kind != ScopeKind.TUNNEL:
                return None
            return Credential(CredentialKind.L2TP_TUNNEL, f"tunnel {tunnel.id}",
                              secret=m.group(1), line_number=cmd.number)

        if scope.kind == ScopeKind.PP:
            m = PP_AUTH_USERNAME.match(text)
            if m:
                return Credential(CredentialKind.PP_AUTH, f"{scope.label}/{m.group(1)}",
                                  secret=m.group(2), username=m.group(1), line_number=cmd.number)
            m = PP_AUTH_MYNAME.match(text)
            if m:
                return Credential(CredentialKind.PP_MYNAME, scope.label, secret=m.group(2),
                                  username=m.group(1), line_number=cmd.number)
        return None
