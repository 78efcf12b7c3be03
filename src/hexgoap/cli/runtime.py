"""Helpers shared across CLI commands for planning and execution."""

from __future__ import annotations

import io
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from hexgoap.core.models import Config
from hexgoap.core.planner import SearchResult, search
from hexgoap.core.team import plan_for_team, visible_actions
from hexgoap.io import StructuredLogger, load_config, load_scenario

if TYPE_CHECKING:
    from pathlib import Path

    from hexgoap.core.models import ActionInstance, Goal, Plan, WorldState
    from hexgoap.io.scenario import Scenario


class ScenarioError(ValueError):
    """Raised when a scenario cannot answer the requested command."""


@dataclass(slots=True)
class WorkflowContext:
    """Container bundling CLI dependencies for planning and execution."""

    config: Config
    scenario: Scenario
    logger: StructuredLogger
    actions: list[ActionInstance]

    def start_state(self) -> WorldState:
        return self.scenario.world_state()

    def require_goal(self) -> Goal:
        """Return the scenario goal or raise :class:`ScenarioError`."""
        if self.scenario.goal is None:
            msg = "Scenario does not declare a [goal] section."
            raise ScenarioError(msg)
        return self.scenario.goal

    def search(self, max_nodes: int | None = None) -> SearchResult:
        """Plan the scenario goal over every grounded action."""
        budget = self.config.planner.max_nodes if max_nodes is None else max_nodes
        self.logger.info("planning", goal=str(self.require_goal()), actions=len(self.actions), max_nodes=budget)
        return search(self.start_state(), self.actions, self.require_goal(), budget, logger=self.logger)

    def plan_team(self) -> dict[str, Plan]:
        """Plan every declared agent in declaration order."""
        if not self.scenario.agents:
            msg = "Scenario does not declare any [[agents]]."
            raise ScenarioError(msg)
        return plan_for_team(
            self.start_state(),
            self.actions,
            self.scenario.goals_per_agent(),
            self.scenario.agent_order(),
            self.config.planner.max_nodes_per_agent,
            logger=self.logger,
        )


def load_cli_config(config_path: Path | None) -> Config:
    """Load configuration from ``config_path`` or fall back to defaults."""
    if config_path is None:
        return Config()
    return load_config(path=config_path)


def build_workflow_context(
    scenario_path: Path,
    config: Config,
    *,
    json_logs: bool,
    silence_logs: bool,
) -> WorkflowContext:
    """Assemble the context required by CLI commands."""
    stream = io.StringIO() if silence_logs else sys.stderr
    logger = StructuredLogger(
        name="hexgoap.cli",
        json_mode=json_logs or config.logging.json_mode,
        stream=stream,
        level=config.logging.level,
    )
    scenario = load_scenario(path=scenario_path)
    actions = scenario.ground_actions(config.attack)
    logger.debug("scenario loaded", path=str(scenario_path), facts=len(scenario.facts), actions=len(actions))
    return WorkflowContext(config=config, scenario=scenario, logger=logger, actions=actions)


def action_to_payload(action: ActionInstance) -> dict[str, Any]:
    """Convert an action instance to a JSON-friendly dictionary."""
    return action.model_dump(mode="json")


def team_to_payload(context: WorkflowContext, plans: dict[str, Plan]) -> dict[str, Any]:
    """Resolve each agent's plan indices to the actions it can see."""
    agents: dict[str, Any] = {}
    for agent in context.scenario.agent_order():
        steps = plans.get(agent, [])
        visible = visible_actions(context.actions, agent)
        agents[agent] = {
            "plan": list(steps),
            "actions": [visible[index].name for index in steps],
            "cost": sum(visible[index].cost for index in steps),
        }
    return agents


__all__ = [
    "ScenarioError",
    "WorkflowContext",
    "action_to_payload",
    "build_workflow_context",
    "load_cli_config",
    "team_to_payload",
]
