"""Global registry of shareable resource definitions for one resource kind."""

from __future__ import annotations

import copy
from typing import Dict, Iterator, Optional

from .models import Definition, IntegrityWarning, ResourceKind

CONFLICT_KEY = "conflict"


class ResourceRegistry:
    """Maps resource identifiers to definitions and accumulates usage counts.

    Definitions are copied on insert so the running totals never leak back
    into the per-file records they came from.
    """

    def __init__(self, kind: ResourceKind) -> None:
        self.kind = kind
        self._definitions: Dict[str, Definition] = {}
        self._origins: Dict[str, str] = {}

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def get(self, identifier: str) -> Optional[Definition]:
        return self._definitions.get(identifier)

    def origin(self, identifier: str) -> Optional[str]:
        return self._origins.get(identifier)

    def insert(
        self, identifier: str, definition: Definition, *, source: str
    ) -> Optional[IntegrityWarning]:
        """Record ``definition`` under ``identifier``.

        Returns ``None`` for a first definition. When the identifier is already
        registered the later definition replaces the earlier one, the stored
        record carries a ``conflict`` note and a warning naming both sources is
        returned.
        """
        record = copy.deepcopy(dict(definition))
        record.pop("count", None)
        record.pop(CONFLICT_KEY, None)

        previous = self._definitions.get(identifier)
        previous_source = self._origins.get(identifier)
        self._definitions[identifier] = record
        self._origins[identifier] = source
        if previous is None:
            return None

        previous = {key: value for key, value in previous.items() if key != CONFLICT_KEY}
        code = "duplicate-definition" if previous == record else "conflicting-definition"
        record[CONFLICT_KEY] = {"code": code, "replaces": previous_source}
        return IntegrityWarning(
            code=code,
            kind=self.kind,
            identifier=identifier,
            source=source,
            detail=f"replaces definition from {previous_source}",
        )

    def add_count(self, identifier: str, amount: int) -> bool:
        """Add ``amount`` to the identifier's running total.

        Returns ``False`` when the identifier has no definition to attach to.
        """
        definition = self._definitions.get(identifier)
        if definition is None:
            return False
        definition["count"] = definition.get("count", 0) + amount
        return True

    def to_dict(self) -> Dict[str, Definition]:
        return {identifier: self._definitions[identifier] for identifier in sorted(self._definitions)}


__all__ = ["CONFLICT_KEY", "ResourceRegistry"]
