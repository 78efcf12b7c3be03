"""Utilities for explaining action plans to users."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import ActionInstance, FactPair, Plan


@dataclass(frozen=True, slots=True)
class StepExplanation:
    """Human readable explanation for a single step within a plan."""

    position: int
    index: int
    action: ActionInstance
    reason: str
    cost: float
    cumulative_cost: float


def _describe(pairs: Sequence[FactPair]) -> str:
    return ", ".join(f"{key}={value}" for key, value in pairs)


def _reason(action: ActionInstance) -> str:
    requires = _describe(action.preconditions) if action.preconditions else "nothing"
    sets = _describe(action.effects) if action.effects else "nothing"
    owner = f" for {action.agent}" if action.agent is not None else ""
    return f"requires {requires}; sets {sets}{owner}"


def explain_plan(actions: Sequence[ActionInstance], steps: Plan) -> list[StepExplanation]:
    """Generate explanations for each step of ``steps``.

    Args:
        actions: The instance list the plan indices refer to.
        steps: The plan to explain.

    Returns:
        A list of :class:`StepExplanation` entries mirroring the order of
        ``steps``.

    """
    explanations: list[StepExplanation] = []
    running = 0.0
    for position, index in enumerate(steps, start=1):
        action = actions[index]
        running += action.cost
        explanations.append(
            StepExplanation(
                position=position,
                index=index,
                action=action,
                reason=_reason(action),
                cost=action.cost,
                cumulative_cost=running,
            ),
        )
    return explanations


__all__ = ["StepExplanation", "explain_plan"]
