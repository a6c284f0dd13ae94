"""Command stream: the tagged command sequence extractors consume."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from rtxconf.models import Command, Scope, ScopeKind


@dataclass(frozen=True)
class CommandStream:
    """Immutable, queryable sequence of scope-tagged commands."""

    commands: tuple[Command, ...] = ()
    scopes: tuple[Scope, ...] = ()
    line_count: int = 0
    source_lines: int = field(default=0, compare=False)

    @property
    def command_count(self) -> int:
        return len(self.commands)

    def __iter__(self) -> Iterator[Command]:
        return iter(self.commands)

    def __len__(self) -> int:
        return len(self.commands)

    def in_scope(self, scope: Scope) -> list[Command]:
        """Commands tagged with a scope of the same kind and identifier."""
        return [c for c in self.commands if c.scope == scope]

    def in_instance(self, scope: Scope) -> list[Command]:
        """Commands tagged with exactly this scope instance."""
        return [c for c in self.commands if c.scope is scope]

    def global_commands(self) -> list[Command]:
        return [c for c in self.commands if c.scope.is_global]

    def of_kind(self, kind: ScopeKind) -> list[Command]:
        return [c for c in self.commands if c.scope.kind == kind]

    def unique_scopes(self, kind: ScopeKind | None = None) -> list[Scope]:
        """First instance of each distinct scope, in order of appearance."""
        seen: set[Scope] = set()
        unique = []
        for scope in self.scopes:
            if kind is not None and scope.kind != kind:
                continue
            if scope not in seen:
                seen.add(scope)
                unique.append(scope)
        return unique

    def children_of(self, scope: Scope) -> list[Scope]:
        """Scope instances whose parent matches ``scope`` by kind and identifier."""
        return [s for s in self.scopes if s.parent is not None and s.parent == scope]
