"""
Validated data components.

Components hold the mutable state that engines and boxes share (the
dialogue mode, a reveal cursor). They carry no behaviour beyond validation,
so any handler may change a field and every reader sees a checked value on
its next tick.
"""

from __future__ import annotations

from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict


class Component(BaseModel):
    """
    Base for shared state containers.

    Assignments are validated like construction, and unknown field names
    are rejected rather than silently stored.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra='forbid',
    )

    def dump_fields(self, names: Iterable[str]) -> dict[str, Any]:
        """Plain values of the named fields."""
        return self.model_dump(include=set(names))

    def assign_fields(self, values: dict[str, Any], names: Iterable[str]) -> None:
        """
        Copy the named fields that are present in ``values``.

        Other keys are ignored. A value that fails validation raises
        pydantic's ValidationError and leaves that field unchanged.
        """
        for name in names:
            if name in values:
                setattr(self, name, values[name])

    def clone(self) -> Component:
        return self.model_copy(deep=True)
