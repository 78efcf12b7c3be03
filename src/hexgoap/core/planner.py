"""Forward state-space planner for hexgoap."""

from __future__ import annotations

from dataclasses import dataclass, field
import heapq
from itertools import count
from typing import TYPE_CHECKING, Protocol

from .models import ActionInstance, ActionTemplate, Goal, Plan, WorldState, ground_action_from_template

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Sequence

    from hexgoap.io.logging import StructuredLogger


class Heuristic(Protocol):
    """Estimate of the remaining cost from ``state`` to ``goal``."""

    def __call__(self, state: WorldState, goal: Goal, actions: Sequence[ActionInstance]) -> float:
        """Return a non-negative estimate; must be admissible and consistent."""
        ...


def zero_heuristic(state: WorldState, goal: Goal, actions: Sequence[ActionInstance]) -> float:
    """Return ``0.0`` for every state, reducing the search to uniform-cost search."""
    del state, goal, actions
    return 0.0


@dataclass(slots=True)
class _SearchNode:
    state: WorldState
    g: float
    path: list[int] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class SearchResult:
    """Outcome of a single search run."""

    plan: Plan | None
    cost: float | None
    expanded: int

    @property
    def found(self) -> bool:
        return self.plan is not None


def search(
    start: WorldState,
    actions: Sequence[ActionInstance],
    goal: Goal,
    max_nodes: int,
    *,
    heuristic: Heuristic = zero_heuristic,
    logger: StructuredLogger | None = None,
) -> SearchResult:
    """Run a best-first search from ``start`` towards ``goal``.

    Nodes are popped by lowest ``f = g + h``, then lowest ``g``, then insertion
    order. Every expansion counts against ``max_nodes``; exceeding the budget
    and exhausting the open set both end in a result without a plan. With the
    default :func:`zero_heuristic` this is uniform-cost search, so the first
    goal state popped carries a minimum-cost path among the states reached
    within the budget.

    Args:
        start: State to plan from. Never mutated.
        actions: Grounded instances; plan indices refer to this sequence.
        goal: Single fact to reach.
        max_nodes: Maximum number of node expansions.
        heuristic: Admissible, consistent estimate of the remaining cost.
        logger: Optional logger receiving debug events.

    Returns:
        A :class:`SearchResult` with the plan, its cost and the number of
        nodes popped.

    """
    tiebreak = count()
    open_set: list[tuple[float, float, int, _SearchNode]] = []
    root = _SearchNode(state=start.clone(), g=0.0)
    heapq.heappush(open_set, (heuristic(root.state, goal, actions), 0.0, next(tiebreak), root))
    best_g = {root.state.canonical_key(): 0.0}

    expanded = 0
    while open_set:
        _, _, _, node = heapq.heappop(open_set)
        expanded += 1
        if expanded > max_nodes:
            break

        if goal.is_satisfied(node.state):
            if logger is not None:
                logger.debug(
                    "plan found",
                    goal=str(goal),
                    steps=len(node.path),
                    cost=node.g,
                    expanded=expanded,
                )
            return SearchResult(plan=node.path, cost=node.g, expanded=expanded)

        for index, action in enumerate(actions):
            if not action.is_applicable(node.state):
                continue
            successor = node.state.clone()
            successor.apply_effects(action.effects)
            g = node.g + action.cost
            key = successor.canonical_key()
            recorded = best_g.get(key)
            if recorded is not None and g >= recorded:
                continue
            best_g[key] = g
            child = _SearchNode(state=successor, g=g, path=[*node.path, index])
            f = g + heuristic(successor, goal, actions)
            heapq.heappush(open_set, (f, g, next(tiebreak), child))

    if logger is not None:
        logger.debug(
            "no plan found",
            goal=str(goal),
            expanded=min(expanded, max_nodes),
            max_nodes=max_nodes,
        )
    return SearchResult(plan=None, cost=None, expanded=min(expanded, max_nodes))


def plan_instances(
    start: WorldState,
    actions: Sequence[ActionInstance],
    goal: Goal,
    max_nodes: int,
    *,
    heuristic: Heuristic = zero_heuristic,
    logger: StructuredLogger | None = None,
) -> Plan | None:
    """Plan over already-grounded instances, returning indices into ``actions``."""
    return search(start, actions, goal, max_nodes, heuristic=heuristic, logger=logger).plan


def plan(
    start: WorldState,
    templates: Sequence[ActionTemplate],
    goal: Goal,
    max_nodes: int,
    *,
    heuristic: Heuristic = zero_heuristic,
    logger: StructuredLogger | None = None,
) -> Plan | None:
    """Lift ``templates`` to untagged instances and plan over them."""
    instances = [ground_action_from_template(template) for template in templates]
    return plan_instances(start, instances, goal, max_nodes, heuristic=heuristic, logger=logger)


def plan_cost(actions: Sequence[ActionInstance | ActionTemplate], steps: Plan) -> float:
    """Return the summed cost of the actions referenced by ``steps``."""
    return sum(actions[index].cost for index in steps)


def apply_plan(
    start: WorldState,
    actions: Sequence[ActionInstance | ActionTemplate],
    steps: Plan,
) -> WorldState:
    """Return a copy of ``start`` with the effects of ``steps`` applied in order."""
    state = start.clone()
    for index in steps:
        state.apply_effects(actions[index].effects)
    return state


__all__ = [
    "Heuristic",
    "SearchResult",
    "apply_plan",
    "plan",
    "plan_cost",
    "plan_instances",
    "search",
    "zero_heuristic",
]
