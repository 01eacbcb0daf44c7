"""Subsystem schemas and the spreadsheet header parser."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from subsyshub.config import END_MARKER, SubsystemLayout
from subsyshub.errors import SpreadsheetFormatError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubsystemSchema:
    """Role columns and classification of one subsystem.

    Equality and hashing use the name only, so a schema can key maps of
    per-subsystem state. Use ``to_record`` for a full structural comparison.
    """

    name: str
    superclass: str = field(default="", compare=False)
    klass: str = field(default="", compare=False)
    subclass: str = field(default="", compare=False)
    roles: tuple[str, ...] = field(default=(), compare=False)

    @property
    def classifications(self) -> tuple[str, str, str]:
        return (self.superclass, self.klass, self.subclass)

    @property
    def role_count(self) -> int:
        return len(self.roles)

    def role(self, column: int) -> str:
        return self.roles[column]

    def to_record(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "classifications": list(self.classifications),
            "roles": list(self.roles),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "SubsystemSchema":
        superclass, klass, subclass = (list(record.get("classifications", [])) + ["", "", ""])[:3]
        return cls(
            name=str(record["name"]),
            superclass=str(superclass),
            klass=str(klass),
            subclass=str(subclass),
            roles=tuple(str(role) for role in record.get("roles", [])),
        )

    def __str__(self) -> str:
        return self.name


def directory_to_name(directory_name: str) -> str:
    """Subsystem directories use underscores where the name has spaces."""

    return directory_name.replace("_", " ")


def parse_classification(text: str | None) -> tuple[str, str, str]:
    """Split tab-delimited classification text into exactly three parts."""

    parts = ["", "", ""]
    if not text:
        return parts[0], parts[1], parts[2]

    cleaned = text.rstrip("\r\n")
    for position, value in enumerate(cleaned.split("\t")[:3]):
        parts[position] = value.strip()
    return parts[0], parts[1], parts[2]


def exclusion_reason(
    *,
    exchangeable: bool,
    classification: str | None,
    layout: SubsystemLayout | None = None,
) -> str | None:
    """Return why curators keep a subsystem out of projection, or None.

    Subsystems without the exchangeable marker are private; subsystems whose
    classification mentions an excluded token (``experimental``) are unstable.
    """

    layout = layout or SubsystemLayout()
    if not exchangeable:
        return "private"

    lowered = (classification or "").lower()
    for token in layout.excluded_tokens:
        if token.lower() in lowered:
            return token.lower()
    return None


def parse_header(lines: Iterable[str]) -> tuple[list[str], Iterator[str]]:
    """Read the role section and skip the metadata section of a spreadsheet.

    Returns the ordered role list and an iterator positioned at the first
    data row. Role lines are ``abbreviation<TAB>role``; both header sections
    end with the ``//`` marker line.
    """

    stream = iter(lines)
    roles: list[str] = []
    markers = 0

    for raw in stream:
        line = raw.rstrip("\r\n")
        if line == END_MARKER:
            markers += 1
            if markers == 2:
                break
            continue
        if markers == 0:
            _, tab, role = line.partition("\t")
            roles.append(role.strip() if tab else line.strip())

    if markers < 2:
        raise SpreadsheetFormatError(
            f"Spreadsheet header ended after {markers} of 2 '{END_MARKER}' markers"
        )

    return roles, stream


def build_schema(name: str, classification: str | None, roles: Iterable[str]) -> SubsystemSchema:
    """Assemble a schema from a subsystem name, classification text and roles."""

    superclass, klass, subclass = parse_classification(classification)
    schema = SubsystemSchema(
        name=name,
        superclass=superclass,
        klass=klass,
        subclass=subclass,
        roles=tuple(roles),
    )
    logger.info(
        "Saving subsystem %s: %s; %s; %s.",
        schema.name,
        schema.superclass,
        schema.klass,
        schema.subclass,
    )
    return schema
