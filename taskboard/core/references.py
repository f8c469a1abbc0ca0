"""
Entity references that are either a bare id or an expanded snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union
from uuid import UUID

T = TypeVar("T")


@dataclass(frozen=True)
class IdRef(Generic[T]):
    id: UUID


@dataclass(frozen=True)
class Expanded(Generic[T]):
    value: T


Reference = Union[IdRef[T], Expanded[T]]


def reference_id(ref: Reference) -> UUID:
    """Return the referenced id whichever variant is present."""
    if isinstance(ref, IdRef):
        return ref.id
    if isinstance(ref, Expanded):
        return ref.value.id
    raise TypeError(f"Not a reference: {ref!r}")


def expanded_value(ref: Reference[T]) -> Optional[T]:
    """Return the expanded snapshot, or None for a bare id."""
    if isinstance(ref, Expanded):
        return ref.value
    return None


def parse_id(value) -> Optional[UUID]:
    """Coerce a UUID or its string form; None when malformed."""
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return UUID(value.strip())
    except ValueError:
        return None
