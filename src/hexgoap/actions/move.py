"""Movement action templates."""

from __future__ import annotations

from typing import TYPE_CHECKING

from hexgoap.core.models import ActionTemplate

if TYPE_CHECKING:
    from hexgoap.core.models import FactValue


def move_template(origin: FactValue, destination: FactValue, cost: float = 1.0) -> ActionTemplate:
    """Return a template moving the acting unit from ``origin`` to ``destination``."""
    return ActionTemplate(
        name=f"Move:{origin}->{destination}",
        preconditions=(("At", origin),),
        effects=(("At", destination),),
        cost=cost,
    )
