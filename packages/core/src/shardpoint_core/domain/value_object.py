"""Immutable Value Object base class."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict

V = TypeVar("V", bound="ValueObject")


class ValueObject(BaseModel):
    """Base class for Value Objects.

    Value objects are immutable and defined by their attributes.
    Equality is structural (all fields compared), so two instances built
    independently from the same data are interchangeable in sets and dicts.
    Fields must therefore hold hashable values.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    def replace(self: V, **changes: Any) -> V:
        """Return a new instance with *changes* applied and re-validated.

        Unlike ``model_copy(update=...)`` the result goes through every
        validator, so a derived value can never break an invariant.
        """
        return type(self).model_validate({**self.model_dump(), **changes})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self.model_dump() == other.model_dump()

    def __hash__(self) -> int:
        return hash((type(self).__name__, tuple(sorted(self.model_dump().items()))))
