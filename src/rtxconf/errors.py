"""Exception hierarchy for rtxconf."""

from __future__ import annotations


class RtxConfError(Exception):
    """Base class for all rtxconf errors."""


class ExtractionError(RtxConfError):
    """An extractor could not turn its commands into records."""


class MalformedTokenError(ExtractionError, ValueError):
    """A token that must parse into a canonical form did not.

    Raised by the extractor that needed the token. The whole extraction
    call fails; no partial record list is returned.
    """

    def __init__(self, extractor: str, token: str, line_number: int = 0,
                 reason: str = "") -> None:
        self.extractor = extractor
        self.token = token
        self.line_number = line_number
        self.reason = reason
        location = f" at line {line_number}" if line_number else ""
        detail = f": {reason}" if reason else ""
        super().__init__(f"{extractor}: malformed token {token!r}{location}{detail}")


class SettingsError(RtxConfError, ValueError):
    """A settings file has an unknown key or an invalid value."""


class UnknownExtractorError(RtxConfError, KeyError):
    """No extractor is registered under the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown extractor: {self.name}"
