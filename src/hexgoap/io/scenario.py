"""Scenario files describing a planning problem in TOML."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from hexgoap.actions import AttackTemplate
from hexgoap.core.goals import LongTermGoal, parse_long_term_goal, select_goal
from hexgoap.core.models import ActionInstance, AttackSettings, FactValue, Goal, WorldState

from .config import read_toml

if TYPE_CHECKING:
    from pathlib import Path


class AgentSpec(BaseModel):
    """An agent taking part in team planning.

    ``goals`` are tried in order. ``long_term_goals`` hold strategic goals,
    written either as tables with a ``kind`` or in their compact string form
    (``"ReachArea:10,0:scout"``); the one selected for the current state adds
    its next step after the explicit goals.
    """

    id: str
    goals: list[Goal] = Field(default_factory=list)
    long_term_goals: list[Annotated[LongTermGoal, Field(discriminator="kind")]] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("long_term_goals", mode="before")
    @classmethod
    def _parse_compact_goals(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        parsed: list[Any] = []
        for item in value:
            if isinstance(item, str):
                goal = parse_long_term_goal(item)
                if goal is None:
                    msg = f"malformed long-term goal: {item}"
                    raise ValueError(msg)
                parsed.append(goal.model_dump())
            else:
                parsed.append(item)
        return parsed


class AttackSpec(BaseModel):
    """Request to ground the attack family against the scenario facts."""

    agent: str | None = None
    name_base: str | None = None
    damage: int | None = None
    cost: float | None = Field(default=None, ge=0.0)

    model_config = ConfigDict(frozen=True, extra="forbid")

    def template(self, defaults: AttackSettings) -> AttackTemplate:
        """Return an attack template filling unset fields from ``defaults``."""
        return AttackTemplate(
            name_base=self.name_base if self.name_base is not None else defaults.name_base,
            damage=self.damage if self.damage is not None else defaults.damage,
            cost=self.cost if self.cost is not None else defaults.cost,
        )


class Scenario(BaseModel):
    """A world snapshot, the actions available in it and what to achieve."""

    facts: dict[str, FactValue] = Field(default_factory=dict)
    actions: list[ActionInstance] = Field(default_factory=list)
    goal: Goal | None = None
    agents: list[AgentSpec] = Field(default_factory=list)
    attacks: list[AttackSpec] = Field(default_factory=list)
    durations: dict[str, float] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _check_agents(self) -> Scenario:
        seen: set[str] = set()
        for agent in self.agents:
            if agent.id in seen:
                msg = f"duplicate agent id: {agent.id}"
                raise ValueError(msg)
            seen.add(agent.id)
        negative = [name for name, seconds in self.durations.items() if seconds < 0]
        if negative:
            msg = f"durations must be non-negative: {', '.join(sorted(negative))}"
            raise ValueError(msg)
        return self

    def world_state(self) -> WorldState:
        """Return a fresh world state holding the scenario facts."""
        return WorldState.from_facts(self.facts)

    def ground_actions(self, defaults: AttackSettings) -> list[ActionInstance]:
        """Return declared actions followed by the grounded attacks."""
        state = self.world_state()
        instances = list(self.actions)
        for attack in self.attacks:
            instances.extend(attack.template(defaults).ground_for_state(state, attack.agent))
        return instances

    def goals_per_agent(self) -> dict[str, list[Goal]]:
        """Return each agent's goals followed by its strategic step for this turn."""
        state = self.world_state()
        goals: dict[str, list[Goal]] = {}
        for agent in self.agents:
            candidates = list(agent.goals)
            selected = select_goal(list(agent.long_term_goals), state, agent.id)
            if selected is not None:
                candidates.append(selected[1])
            goals[agent.id] = candidates
        return goals

    def agent_order(self) -> list[str]:
        return [agent.id for agent in self.agents]


def load_scenario(
    *,
    path: Path | str | None = None,
    data: str | bytes | None = None,
) -> Scenario:
    """Load and validate a scenario from TOML.

    Hex coordinates are written as inline tables (``{ q = 1, r = 0 }``);
    precondition and effect tables keep their declaration order.
    """
    return Scenario.model_validate(read_toml(path=path, data=data))


__all__ = ["AgentSpec", "AttackSpec", "Scenario", "load_scenario"]
