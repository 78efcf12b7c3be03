"""Sequential planning for a team of agents sharing one world state."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .planner import plan_instances

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Mapping, Sequence

    from hexgoap.io.logging import StructuredLogger

    from .models import ActionInstance, Goal, Plan, WorldState


def visible_actions(actions: Sequence[ActionInstance], agent: str) -> list[ActionInstance]:
    """Return the untagged instances and those tagged for ``agent``, in order."""
    return [action for action in actions if action.visible_to(agent)]


def plan_for_team(
    start: WorldState,
    actions: Sequence[ActionInstance],
    goals_per_agent: Mapping[str, Sequence[Goal]],
    agent_order: Sequence[str],
    max_nodes_per_agent: int,
    *,
    logger: StructuredLogger | None = None,
) -> dict[str, Plan]:
    """Plan for each agent in ``agent_order``, committing effects as it goes.

    Each agent sees :func:`visible_actions` of ``actions`` and the returned
    indices refer to that filtered list. Goals are tried in order and the
    first one with a plan wins. The winning plan's effects are applied to a
    running copy of ``start`` before the next agent plans, so later agents see
    the consequences of earlier choices. Agents without a solvable goal, or
    without a goal list at all, receive an empty plan.
    """
    current = start.clone()
    result: dict[str, Plan] = {}

    for agent in agent_order:
        agent_actions = visible_actions(actions, agent)
        chosen: Plan | None = None
        for goal in goals_per_agent.get(agent, ()):
            chosen = plan_instances(current, agent_actions, goal, max_nodes_per_agent, logger=logger)
            if chosen is not None:
                if logger is not None:
                    logger.info("agent plan accepted", agent=agent, goal=str(goal), steps=len(chosen))
                break

        if chosen is None:
            if logger is not None:
                logger.info("agent has no solvable goal", agent=agent)
            result[agent] = []
            continue

        for index in chosen:
            current.apply_effects(agent_actions[index].effects)
        result[agent] = chosen

    return result


__all__ = ["plan_for_team", "visible_actions"]
