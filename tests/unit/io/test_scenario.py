from __future__ import annotations

import pathlib

import pytest
from pydantic import ValidationError

from hexgoap.core.models import AttackSettings, Goal, HexCoord
from hexgoap.io.scenario import load_scenario


SCENARIO_TOML = """
[facts]
At = { q = 0, r = 0 }
"EnemyAt:e1" = { q = 1, r = 0 }
"EnemyAlive:e1" = true
"EnemyHealth:e1" = 3
Mood = "calm"

[goal]
key = "EnemyAlive:e1"
value = false

[[actions]]
name = "Step"
cost = 1.0
agent = "hero"
preconditions = { At = { q = 0, r = 0 } }
effects = { At = { q = 1, r = 0 } }

[[attacks]]
agent = "hero"
damage = 2

[[agents]]
id = "hero"
goals = [{ key = "EnemyAlive:e1", value = false }]

[[agents]]
id = "bard"

[durations]
Step = 0.5
"""


def test_load_scenario_from_path(tmp_path: pathlib.Path) -> None:
    """Scenario files decode facts, actions, goals and agents."""
    scenario_path = tmp_path / "scenario.toml"
    scenario_path.write_text(SCENARIO_TOML)

    scenario = load_scenario(path=scenario_path)

    state = scenario.world_state()
    assert state.get("At") == HexCoord(q=0, r=0)
    assert state.get("EnemyAlive:e1") is True
    assert state.get("EnemyHealth:e1") == 3
    assert state.get("Mood") == "calm"
    assert scenario.goal == Goal(key="EnemyAlive:e1", value=False)
    (step,) = scenario.actions
    assert step.agent == "hero"
    assert step.preconditions == (("At", HexCoord(q=0, r=0)),)
    assert scenario.durations == {"Step": 0.5}
    assert scenario.agent_order() == ["hero", "bard"]
    assert scenario.goals_per_agent() == {"hero": [Goal(key="EnemyAlive:e1", value=False)], "bard": []}


def test_ground_actions_appends_attacks() -> None:
    """Attack requests are grounded after the declared actions using config defaults."""
    scenario = load_scenario(data=SCENARIO_TOML)

    actions = scenario.ground_actions(AttackSettings(name_base="Hit", damage=1, cost=2.0))

    assert [action.name for action in actions] == ["Step", "Hit:e1@(1,0)"]
    attack = actions[1]
    assert attack.agent == "hero"
    assert attack.cost == 2.0
    assert attack.effects == (("EnemyHealth:e1", 1),)


def test_world_state_is_fresh_each_time() -> None:
    """Mutating one world state does not leak into the scenario."""
    scenario = load_scenario(data=SCENARIO_TOML)

    first = scenario.world_state()
    first.insert("Mood", "angry")

    assert scenario.world_state().get("Mood") == "calm"


def test_duplicate_agents_are_rejected() -> None:
    """Agent ids must be unique."""
    data = '[[agents]]\nid = "a"\n\n[[agents]]\nid = "a"\n'
    with pytest.raises(ValidationError, match="duplicate agent id"):
        load_scenario(data=data)


def test_negative_durations_are_rejected() -> None:
    """Durations cannot be negative."""
    with pytest.raises(ValidationError, match="non-negative"):
        load_scenario(data="[durations]\nStep = -1.0\n")


@pytest.mark.parametrize(
    "data",
    [
        "[facts]\nWhen = 1979-05-27\n",
        '[[actions]]\nname = "Bad"\ncost = -1.0\n',
        "unexpected = 1\n",
    ],
)
def test_invalid_scenarios_raise_validation_error(data: str) -> None:
    """Unsupported fact types, negative costs and unknown keys are rejected."""
    with pytest.raises(ValidationError):
        load_scenario(data=data)


def test_missing_scenario_file(tmp_path: pathlib.Path) -> None:
    """A missing scenario surfaces as FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_scenario(path=tmp_path / "absent.toml")


STRATEGIC_TOML = """
[facts]
"Unit:scout:At" = "0,0"
"Unit:guard:At" = { q = 4, r = 4 }
"Unit:guard:NearbyEnemies" = 2

[[agents]]
id = "scout"
goals = [{ key = "Unit:scout:Rested", value = true }]
long_term_goals = ["ReachArea:10,0:explore"]

[[agents]]
id = "guard"
long_term_goals = [
    { kind = "reach_area", area_centers = [{ q = 20, r = 20 }], reason = "patrol" },
    { kind = "kill_all_enemies" },
]
"""


def test_long_term_goals_add_a_step_after_explicit_goals() -> None:
    """The selected strategic goal contributes its next step as a fallback goal."""
    scenario = load_scenario(data=STRATEGIC_TOML)

    goals = scenario.goals_per_agent()

    assert goals["scout"] == [
        Goal(key="Unit:scout:Rested", value=True),
        Goal(key="Unit:scout:At", value="3,0"),
    ]
    # Killing enemies outranks patrolling.
    assert goals["guard"] == [Goal(key="Unit:guard:InCombat", value=True)]


def test_malformed_long_term_goal_is_rejected() -> None:
    """Compact goal strings that do not parse are validation errors."""
    data = '[[agents]]\nid = "a"\nlong_term_goals = ["Dance:now"]\n'
    with pytest.raises(ValidationError, match="malformed long-term goal"):
        load_scenario(data=data)
