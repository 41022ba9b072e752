"""Core types for optisync."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Operation(Enum):
    """The operation an entry is waiting on, if any."""

    NONE = "none"
    LOADING = "loading"
    CREATING = "creating"
    UPDATING = "updating"
    DELETING = "deleting"


# Full payload of an entity. Mutations always replace it as a whole.
Fields = Mapping[str, Any]

# Duration type alias
Duration = str | int  # "30s", "250ms", "5m" or milliseconds


@dataclass(frozen=True, slots=True)
class Entity:
    """A server-durable record identified by an id."""

    id: str
    fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], *, id_key: str = "id") -> Entity:
        """Build an entity from its wire shape (id beside the fields)."""
        if id_key not in raw:
            raise ValueError(f"Entity payload is missing {id_key!r}")
        fields = {k: v for k, v in raw.items() if k != id_key}
        return cls(id=str(raw[id_key]), fields=fields)

    def to_dict(self, *, id_key: str = "id") -> dict[str, Any]:
        """Wire shape of this entity."""
        return {id_key: self.id, **self.fields}

    def with_fields(self, fields: Fields) -> Entity:
        """Replace the whole payload, keeping the id."""
        return Entity(id=self.id, fields=dict(fields))
