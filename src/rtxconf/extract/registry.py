"""Extractor registry and batch extraction."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable

from rtxconf.errors import UnknownExtractorError
from rtxconf.extract.base import Extractor
from rtxconf.extract.credentials import CredentialExtractor
from rtxconf.extract.dhcp import DHCPBindingExtractor, DHCPScopeExtractor
from rtxconf.extract.dns import DNSHostExtractor, DNSServerExtractor, DNSServerSelectExtractor
from rtxconf.extract.filters import (
    IPFilterDynamicExtractor,
    IPFilterExtractor,
    IPv6FilterDynamicExtractor,
    IPv6FilterExtractor,
)
from rtxconf.extract.nat import NATMasqueradeExtractor, NATStaticExtractor
from rtxconf.extract.pp import PPInterfaceExtractor
from rtxconf.extract.routes import StaticRouteExtractor
from rtxconf.extract.services import ServiceExtractor
from rtxconf.extract.tunnels import L2TPServiceExtractor, TunnelExtractor
from rtxconf.ingest.stream import CommandStream

logger = logging.getLogger(__name__)

EXTRACTORS: dict[str, Extractor] = {
    e.name: e
    for e in (
        StaticRouteExtractor(),
        DHCPScopeExtractor(),
        DHCPBindingExtractor(),
        NATMasqueradeExtractor(),
        NATStaticExtractor(),
        IPFilterExtractor(),
        IPFilterDynamicExtractor(),
        IPv6FilterExtractor(),
        IPv6FilterDynamicExtractor(),
        CredentialExtractor(),
        TunnelExtractor(),
        L2TPServiceExtractor(),
        PPInterfaceExtractor(),
        DNSServerExtractor(),
        DNSHostExtractor(),
        DNSServerSelectExtractor(),
        ServiceExtractor(),
    )
}


def extractor_names() -> list[str]:
    return list(EXTRACTORS)


def get_extractor(name: str) -> Extractor:
    """Look up a registered extractor by name."""
    try:
        return EXTRACTORS[name]
    except KeyError:
        raise UnknownExtractorError(name) from None


def extract_all(stream: CommandStream, names: Iterable[str] | None = None,
                workers: int = 1) -> dict[str, list[Any]]:
    """Run extractors against one stream, keyed by extractor name.

    Results come back in registry order. With ``workers > 1`` the
    extractors run in a thread pool; the stream is immutable, so the
    output is the same as a serial run. The first extractor error is
    raised and no partial result is returned.
    """
    selected = [get_extractor(n) for n in names] if names else list(EXTRACTORS.values())
    selected.sort(key=lambda e: list(EXTRACTORS).index(e.name))

    if workers <= 1 or len(selected) <= 1:
        results = {e.name: e.extract(stream) for e in selected}
    else:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="extract") as pool:
            futures = {e.name: pool.submit(e.extract, stream) for e in selected}
            results = {name: future.result() for name, future in futures.items()}

    logger.debug("Extracted %d collections, %d records",
                 len(results), sum(len(v) for v in results.values()))
    return results
