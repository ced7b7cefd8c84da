"""Glob-style key patterns as used by KEYS."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class _Kind(Enum):
    NORMAL = auto()
    ALL = auto()  # *
    ANY = auto()  # ?
    SET = auto()  # [abc]
    RANGE = auto()  # [a-c]
    NEG = auto()  # [^a]


@dataclass(frozen=True)
class _Item:
    kind: _Kind
    char: int = 0
    members: frozenset[int] = frozenset()

    def _contains(self, c: int) -> bool:
        if self.kind is _Kind.SET:
            return c in self.members
        if self.kind is _Kind.RANGE:
            if c in self.members:
                return True
            if not self.members:
                return False
            return min(self.members) <= c <= max(self.members)
        return c not in self.members

    def matches(self, c: int) -> bool:
        if self.kind is _Kind.ANY:
            return True
        if self.kind is _Kind.NORMAL:
            return c == self.char
        return self._contains(c)


@dataclass(frozen=True)
class Pattern:
    """A compiled wildcard pattern."""

    items: tuple[_Item, ...]

    def is_match(self, s: str | bytes) -> bool:
        """Return whether the whole of ``s`` matches the pattern."""
        data = s.encode() if isinstance(s, str) else bytes(s)
        if not self.items:
            return not data

        prev = [True]
        for item in self.items:
            prev.append(prev[-1] and item.kind is _Kind.ALL)

        for c in data:
            cur = [False]
            for j, item in enumerate(self.items):
                if item.kind is _Kind.ALL:
                    cur.append(prev[j + 1] or cur[j])
                else:
                    cur.append(prev[j] and item.matches(c))
            prev = cur
        return prev[-1]


def compile_pattern(src: str) -> Pattern:
    """Compile a wildcard string into a Pattern."""
    items: list[_Item] = []
    escape = False
    members: set[int] | None = None
    for ch in src:
        c = ord(ch) & 0xFF
        if escape:
            items.append(_Item(_Kind.NORMAL, char=c))
            escape = False
        elif c == ord("*"):
            items.append(_Item(_Kind.ALL))
        elif c == ord("?"):
            items.append(_Item(_Kind.ANY))
        elif c == ord("\\"):
            escape = True
        elif c == ord("["):
            if members is None:
                members = set()
            else:
                members.add(c)
        elif c == ord("]"):
            if members is not None:
                kind = _Kind.SET
                if ord("-") in members:
                    kind = _Kind.RANGE
                    members.discard(ord("-"))
                if ord("^") in members:
                    kind = _Kind.NEG
                    members.discard(ord("^"))
                items.append(_Item(kind, members=frozenset(members)))
                members = None
            else:
                items.append(_Item(_Kind.NORMAL, char=c))
        elif members is not None:
            members.add(c)
        else:
            items.append(_Item(_Kind.NORMAL, char=c))
    return Pattern(tuple(items))