"""Context stack tracker: tags each line with its enclosing scope."""

from __future__ import annotations

import logging
import re
from typing import Iterable

from rtxconf.models import GLOBAL, Command, Line, Scope, ScopeKind

logger = logging.getLogger(__name__)

PP_SELECT = re.compile(r"^pp\s+select\s+(\d+|anonymous)$")
TUNNEL_SELECT = re.compile(r"^tunnel\s+select\s+(\d+)$")
IPSEC_TUNNEL = re.compile(r"^ipsec\s+tunnel\s+(\d+)$")


class ContextTracker:
    """Rebuild scope nesting from select keywords and indentation.

    The configuration format has no explicit end marker, so a scope closes
    when a later line is at or above the depth at which it was opened.
    ``pp select`` and ``tunnel select`` open top-level scopes; ``ipsec
    tunnel`` opens a nested scope only when directly inside a deeper
    ``tunnel select`` block. Any other line is tagged with the scope on top
    of the stack.

    A tracker is single-use per input; call :meth:`track` once per blob.
    """

    def __init__(self) -> None:
        self._stack: list[Scope] = [GLOBAL]
        self.scopes: list[Scope] = []

    @property
    def current(self) -> Scope:
        return self._stack[-1]

    def track(self, lines: Iterable[Line]) -> list[Command]:
        """Tag every line with the scope active after it is read."""
        return [self.feed(line) for line in lines]

    def feed(self, line: Line) -> Command:
        """Process a single line and return it as a tagged Command."""
        self._pop_closed(line)
        opened = self._classify(line)
        if opened is not None:
            self._push(opened)
        return Command(line=line, scope=self.current)

    def _pop_closed(self, line: Line) -> None:
        while not self.current.is_global and self.current.depth >= line.depth:
            closed = self._stack.pop()
            logger.debug("line %d: close %s", line.number, closed.label)

    def _classify(self, line: Line) -> Scope | None:
        text = line.text
        m = PP_SELECT.match(text)
        if m:
            ident = m.group(1)
            if ident == "anonymous":
                return self._top_level(line, ScopeKind.PP, 0, "anonymous")
            return self._top_level(line, ScopeKind.PP, int(ident))

        m = TUNNEL_SELECT.match(text)
        if m:
            return self._top_level(line, ScopeKind.TUNNEL, int(m.group(1)))

        m = IPSEC_TUNNEL.match(text)
        if m and self.current.kind == ScopeKind.TUNNEL and line.depth > self.current.depth:
            return Scope(ScopeKind.IPSEC_TUNNEL, int(m.group(1)),
                         depth=line.depth, line_number=line.number, parent=self.current)
        return None

    def _top_level(self, line: Line, kind: ScopeKind, ident: int, name: str = "") -> Scope:
        # Selecting a new context ends whatever context was open.
        while not self.current.is_global:
            closed = self._stack.pop()
            logger.debug("line %d: %s replaces %s", line.number, kind.value, closed.label)
        return Scope(kind, ident, name, depth=line.depth, line_number=line.number)

    def _push(self, scope: Scope) -> None:
        self._stack.append(scope)
        self.scopes.append(scope)
        logger.debug("line %d: open %s at depth %d", scope.line_number, scope.label, scope.depth)
