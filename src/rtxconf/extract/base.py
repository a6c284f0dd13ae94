"""Extractor base class and shared token helpers."""

from __future__ import annotations

import ipaddress
import logging
import re
from typing import Any, ClassVar

from rtxconf.errors import MalformedTokenError
from rtxconf.ingest.stream import CommandStream
from rtxconf.models import Command

logger = logging.getLogger(__name__)

_MAC_SEPARATORS = re.compile(r"[\s:.\-]")
_HEX12 = re.compile(r"^[0-9a-f]{12}$")
_HHMM = re.compile(r"^(\d{1,3}):([0-5]\d)$")


class Extractor:
    """Turn a command stream into one typed record collection.

    Subclasses set ``name`` and implement :meth:`extract`. Extractors keep
    no state between calls and never mutate the stream, so one instance
    may serve several threads.
    """

    name: ClassVar[str] = ""
    description: ClassVar[str] = ""

    def extract(self, stream: CommandStream) -> list[Any]:
        raise NotImplementedError

    def malformed(self, command: Command, token: str, reason: str = "") -> MalformedTokenError:
        """Build the error for a token that failed to parse."""
        return MalformedTokenError(self.name, token, command.number, reason)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


def is_address(token: str) -> bool:
    """True for a bare IPv4 or IPv6 address."""
    try:
        ipaddress.ip_address(token)
    except ValueError:
        return False
    return True


def is_network(token: str) -> bool:
    """True for an address, a CIDR network, or an ``a-b`` address range."""
    if is_address(token):
        return True
    if "/" in token:
        try:
            ipaddress.ip_network(token, strict=False)
        except ValueError:
            return False
        return True
    if "-" in token:
        start, _, end = token.partition("-")
        return is_address(start) and is_address(end)
    return False


def normalize_mac(raw: str) -> str | None:
    """Canonicalize a MAC address to ``aa:bb:cc:dd:ee:ff``.

    Accepts colon, hyphen, dot or space separated forms and bare hex.
    Returns None when the input is not 12 hex digits.
    """
    cleaned = _MAC_SEPARATORS.sub("", raw).lower()
    if not _HEX12.match(cleaned):
        return None
    return ":".join(cleaned[i:i + 2] for i in range(0, 12, 2))


def is_hhmm(token: str) -> bool:
    return bool(_HHMM.match(token))


def to_int(token: str) -> int | None:
    return int(token) if token.isdigit() else None


def secure_filters(tokens: list[str]) -> tuple[list[int], list[int]]:
    """Split a ``secure filter`` id list into static and dynamic ids.

    Ids after the ``dynamic`` keyword name dynamic filters.
    """
    static: list[int] = []
    dynamic: list[int] = []
    target = static
    for token in tokens:
        if token == "dynamic":
            target = dynamic
        elif token.isdigit():
            target.append(int(token))
    return static, dynamic


def on_off(token: str) -> bool:
    return token == "on"
