"""Management service extractor (httpd, sshd, sftpd, telnetd)."""

from __future__ import annotations

import logging
import re

from rtxconf.extract.base import Extractor
from rtxconf.ingest.stream import CommandStream
from rtxconf.models import ServiceConfig

logger = logging.getLogger(__name__)

SERVICES = ("httpd", "sshd", "sftpd", "telnetd")

SERVICE_SWITCH = re.compile(r"^(sshd|telnetd)\s+service\s+(on|off)$")
SERVICE_HOST = re.compile(r"^(httpd|sshd|sftpd|telnetd)\s+host\s+(?!key\b)(.+)$")
SSHD_AUTH_METHOD = re.compile(r"^sshd\s+auth\s+method\s+(\S+)$")


class ServiceExtractor(Extractor):
    """Extract management service access settings.

    A service appears in the output only if the configuration mentions it.
    ``enabled`` stays None for services without an on/off switch.
    """

    name = "services"
    description = "Management services (httpd, sshd, sftpd, telnetd)"

    def extract(self, stream: CommandStream) -> list[ServiceConfig]:
        services: dict[str, ServiceConfig] = {}

        def get(name: str) -> ServiceConfig:
            return services.setdefault(name, ServiceConfig(name=name))

        for cmd in stream.global_commands():
            m = SERVICE_SWITCH.match(cmd.text)
            if m:
                get(m.group(1)).enabled = m.group(2) == "on"
                continue
            m = SERVICE_HOST.match(cmd.text)
            if m:
                get(m.group(1)).hosts = m.group(2).split()
                continue
            m = SSHD_AUTH_METHOD.match(cmd.text)
            if m:
                get("sshd").auth_method = m.group(1)

        result = [services[name] for name in SERVICES if name in services]
        logger.debug("services: %d services", len(result))
        return result
