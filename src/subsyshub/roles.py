"""Role catalog: canonical IDs for free-text functional role descriptions."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any


_COMMENT_RE = re.compile(r"\s+[#!].*$")
_ENUMERATION_RE = re.compile(r"\s*\((?:EC|TC)\s+[^)]*\)", re.IGNORECASE)
_SPACE_RE = re.compile(r"\s+")
_SPLIT_RE = re.compile(r"\s+[/@]\s+|;\s+")
_WORD_RE = re.compile(r"[a-z0-9]+")

ID_WORDS = 5
ID_WORD_LENGTH = 4


def strip_comment(function: str) -> str:
    """Remove a trailing ``# comment`` or ``! comment`` from a function string."""

    return _COMMENT_RE.sub("", function)


def normalize_role(description: str | None) -> str:
    """Reduce a role description to its comparison key.

    EC and TC numbers, trailing comments, case and redundant whitespace do not
    distinguish roles.
    """

    if description is None:
        return ""

    text = strip_comment(str(description))
    text = _ENUMERATION_RE.sub("", text)
    text = _SPACE_RE.sub(" ", text).strip().rstrip(".").strip()
    return text.lower()


def role_key(description: str | None) -> str:
    """Return the catalog key for a role description.

    Descriptions that normalize to nothing, such as a bare EC number, are
    keyed on their own lowercased text instead. Only blank text has no key.
    """

    key = normalize_role(description)
    if key or description is None:
        return key
    return _SPACE_RE.sub(" ", strip_comment(str(description))).strip().lower()


def split_function(function: str | None) -> list[str]:
    """Split a multi-role function assignment into its role descriptions."""

    if not function:
        return []

    text = strip_comment(str(function)).strip()
    return [part.strip() for part in _SPLIT_RE.split(text) if part.strip()]


@dataclass(frozen=True)
class RoleSet:
    """Immutable set of role IDs that jointly describe a feature or a cell."""

    ids: frozenset[str] = field(default_factory=frozenset)

    def contains(self, other: "RoleSet") -> bool:
        """Return True if every role of ``other`` is also in this set."""

        return other.ids <= self.ids

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.ids))

    def __len__(self) -> int:
        return len(self.ids)

    def __bool__(self) -> bool:
        return bool(self.ids)


class RoleCatalog:
    """Map role descriptions to canonical IDs and remember every spelling seen.

    The catalog only grows. Descriptions that normalize to the same key share
    a role ID, and each ID keeps the set of original descriptions mapped to it.
    """

    def __init__(self) -> None:
        self._ids_by_key: dict[str, str] = {}
        self._descriptions: dict[str, set[str]] = {}

    def find(self, description: str) -> str | None:
        """Return the ID for a description, or None if the role is unknown."""

        return self._ids_by_key.get(role_key(description))

    def find_or_insert(self, description: str) -> str:
        """Return the ID for a description, creating a new role if needed.

        Raises ``ValueError`` for blank text, which names no role.
        """

        key = role_key(description)
        if not key:
            raise ValueError("Role description cannot be blank")

        role_id = self._ids_by_key.get(key)
        if role_id is None:
            role_id = self._allocate_id(key)
            self._ids_by_key[key] = role_id
            self._descriptions[role_id] = set()
        self._descriptions[role_id].add(str(description).strip())
        return role_id

    def ids_for(self, function: str | None, *, insert: bool = True) -> RoleSet:
        """Return the roles performed by a feature with the given function.

        With ``insert=False`` the catalog is left untouched and roles it does
        not know are left out of the result.
        """

        ids: set[str] = set()
        for description in split_function(function):
            if not role_key(description):
                continue
            if insert:
                ids.add(self.find_or_insert(description))
            else:
                role_id = self.find(description)
                if role_id is not None:
                    ids.add(role_id)
        return RoleSet(frozenset(ids))

    def add(self, role_id: str, descriptions: Iterable[str]) -> None:
        """Register a role under a known ID, as read back from a saved catalog."""

        for description in descriptions:
            key = role_key(description)
            if not key:
                continue
            self._ids_by_key.setdefault(key, role_id)
            self._descriptions.setdefault(role_id, set()).add(str(description).strip())

    def descriptions(self, role_id: str) -> frozenset[str]:
        return frozenset(self._descriptions.get(role_id, ()))

    def groupings(self) -> frozenset[frozenset[str]]:
        """Return the description groups, independent of the IDs assigned."""

        return frozenset(frozenset(members) for members in self._descriptions.values())

    def role_ids(self) -> list[str]:
        return sorted(self._descriptions)

    def to_records(self) -> list[dict[str, Any]]:
        return [
            {"id": role_id, "descriptions": sorted(self._descriptions[role_id])}
            for role_id in self.role_ids()
        ]

    def __len__(self) -> int:
        return len(self._descriptions)

    def __contains__(self, role_id: object) -> bool:
        return role_id in self._descriptions

    def _allocate_id(self, key: str) -> str:
        words = _WORD_RE.findall(key)[:ID_WORDS]
        base = "".join(word[:ID_WORD_LENGTH].capitalize() for word in words) or "Role"
        candidate = base
        suffix = 1
        while candidate in self._descriptions:
            suffix += 1
            candidate = f"{base}{suffix}"
        return candidate
