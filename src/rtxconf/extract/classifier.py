"""Positional field classifier for variable trailing token lists.

Several commands end with optional fields whose presence can only be told
apart by their shape, not their position. A command family describes its
tail as an ordered tuple of slots; :func:`classify` walks the tokens left
to right and fills each slot greedily, never revisiting an earlier one.
:func:`render` is the inverse and emits fields in the same slot order.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence


class SlotKind(enum.Enum):
    """How a slot consumes tokens."""

    REPEAT = "repeat"
    FLAG = "flag"
    CHOICE = "choice"
    REQUIRED = "required"
    OPTIONAL = "optional"
    SUFFIX = "suffix"


@dataclass(frozen=True)
class Slot:
    """One named field in a classified token tail."""

    name: str
    kind: SlotKind
    predicate: Callable[[str], bool] | None = None
    literals: Mapping[str, Any] = field(default_factory=dict)
    choices: frozenset[str] = frozenset()
    keywords: tuple[str, ...] = ()
    convert: Callable[[str], Any] = str
    default: Any = None
    maximum: int | None = None
    trailer: Slot | None = None

    def accepts(self, token: str) -> bool:
        if self.kind == SlotKind.FLAG:
            return token in self.literals
        if self.kind == SlotKind.CHOICE:
            return token in self.choices
        if self.predicate is not None:
            return self.predicate(token)
        return True


def repeat(name: str, predicate: Callable[[str], bool], maximum: int | None = None,
           trailer: Slot | None = None) -> Slot:
    """Consume tokens while ``predicate`` holds.

    A ``trailer`` flag may follow each consumed token. Its values are
    stored under the trailer's own name, one per item.
    """
    return Slot(name, SlotKind.REPEAT, predicate=predicate, maximum=maximum, default=(),
                trailer=trailer)


def flag(name: str, literals: Mapping[str, Any], default: Any = False) -> Slot:
    """Consume one literal token and map it to a value."""
    return Slot(name, SlotKind.FLAG, literals=dict(literals), default=default)


def choice(name: str, choices: Sequence[str], default: str = "") -> Slot:
    """Consume one token from a closed enumeration."""
    return Slot(name, SlotKind.CHOICE, choices=frozenset(choices), default=default)


def required(name: str, default: str = "") -> Slot:
    """Always consume the next token."""
    return Slot(name, SlotKind.REQUIRED, default=default)


def optional(name: str, predicate: Callable[[str], bool], default: str = "") -> Slot:
    """Consume the next token when ``predicate`` holds."""
    return Slot(name, SlotKind.OPTIONAL, predicate=predicate, default=default)


def suffix(name: str, keywords: Sequence[str], convert: Callable[[str], Any] = int,
           predicate: Callable[[str], bool] = str.isdigit, default: Any = 0) -> Slot:
    """Consume a keyword sequence followed by one converted value."""
    return Slot(name, SlotKind.SUFFIX, keywords=tuple(keywords), convert=convert,
                predicate=predicate, default=default)


@dataclass
class Classification:
    """Outcome of classifying a token tail."""

    values: dict[str, Any] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)
    extra: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.missing

    def __getitem__(self, name: str) -> Any:
        return self.values[name]


def classify(slots: Sequence[Slot], tokens: Sequence[str]) -> Classification:
    """Assign tokens to slots left to right.

    Total for every input: unfilled slots take their default, unfilled
    required slots are listed in ``missing``, and leftover tokens are
    returned in ``extra``.
    """
    result = Classification()
    i = 0
    n = len(tokens)

    for slot in slots:
        value = slot.default
        if slot.kind == SlotKind.REPEAT:
            taken = []
            marks = []
            while i < n and slot.accepts(tokens[i]):
                if slot.maximum is not None and len(taken) >= slot.maximum:
                    break
                taken.append(slot.convert(tokens[i]))
                i += 1
                if slot.trailer is not None:
                    mark = slot.trailer.default
                    if i < n and slot.trailer.accepts(tokens[i]):
                        mark = slot.trailer.literals[tokens[i]]
                        i += 1
                    marks.append(mark)
            value = taken
            if slot.trailer is not None:
                result.values[slot.trailer.name] = marks
        elif slot.kind == SlotKind.FLAG:
            if i < n and slot.accepts(tokens[i]):
                value = slot.literals[tokens[i]]
                i += 1
        elif slot.kind in (SlotKind.CHOICE, SlotKind.OPTIONAL):
            if i < n and slot.accepts(tokens[i]):
                value = slot.convert(tokens[i])
                i += 1
        elif slot.kind == SlotKind.REQUIRED:
            if i < n:
                value = slot.convert(tokens[i])
                i += 1
            else:
                result.missing.append(slot.name)
        elif slot.kind == SlotKind.SUFFIX:
            width = len(slot.keywords)
            if (i + width < n
                    and tuple(tokens[i:i + width]) == slot.keywords
                    and slot.accepts(tokens[i + width])):
                value = slot.convert(tokens[i + width])
                i += width + 1
        result.values[slot.name] = value

    result.extra = list(tokens[i:])
    return result


def render(slots: Sequence[Slot], values: Mapping[str, Any]) -> list[str]:
    """Emit tokens for ``values`` in slot order, omitting defaults."""
    tokens: list[str] = []
    for slot in slots:
        value = values.get(slot.name, slot.default)
        if slot.kind == SlotKind.REPEAT:
            marks = values.get(slot.trailer.name, ()) if slot.trailer else ()
            for j, item in enumerate(value):
                tokens.append(str(item))
                if j < len(marks):
                    tokens.extend(_flag_tokens(slot.trailer, marks[j]))
        elif slot.kind == SlotKind.FLAG:
            tokens.extend(_flag_tokens(slot, value))
        elif slot.kind == SlotKind.REQUIRED:
            if value != slot.default or slot.default:
                tokens.append(str(value))
        elif slot.kind == SlotKind.SUFFIX:
            if value != slot.default:
                tokens.extend(slot.keywords)
                tokens.append(str(value))
        elif value != slot.default:
            tokens.append(str(value))
    return tokens


def _flag_tokens(slot: Slot, value: Any) -> list[str]:
    if value == slot.default:
        return []
    for literal, mapped in slot.literals.items():
        if mapped == value:
            return [literal]
    return []
