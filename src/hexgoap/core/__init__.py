"""Core GOAP components for hexgoap."""

from .executor import ActionExecutor, ExecutionListener, InstantAction, RuntimeAction, TimedAction, run_plan
from .models import (
    ActionInstance,
    ActionTemplate,
    Config,
    FactValue,
    Goal,
    HexCoord,
    Plan,
    WorldState,
    ground_action_from_template,
)
from .planner import SearchResult, apply_plan, plan, plan_cost, plan_instances, search, zero_heuristic
from .team import plan_for_team, visible_actions

__all__ = [
    "ActionExecutor",
    "ActionInstance",
    "ActionTemplate",
    "Config",
    "ExecutionListener",
    "FactValue",
    "Goal",
    "HexCoord",
    "InstantAction",
    "Plan",
    "RuntimeAction",
    "SearchResult",
    "TimedAction",
    "WorldState",
    "apply_plan",
    "ground_action_from_template",
    "plan",
    "plan_cost",
    "plan_for_team",
    "plan_instances",
    "run_plan",
    "search",
    "visible_actions",
    "zero_heuristic",
]
