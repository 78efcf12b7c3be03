"""End-to-end scenario coverage for hexgoap CLI commands."""

from __future__ import annotations

import json
import textwrap
from typing import TYPE_CHECKING

from typer.testing import CliRunner

from hexgoap.cli.main import app

if TYPE_CHECKING:
    from pathlib import Path


runner = CliRunner()

SKIRMISH = textwrap.dedent(
    """
    [facts]
    At = { q = 0, r = 0 }
    "EnemyAt:e1" = { q = 2, r = 0 }
    "EnemyAlive:e1" = true
    "EnemyHealth:e1" = 2

    [goal]
    key = "EnemyAlive:e1"
    value = false

    [[actions]]
    name = "Step1"
    preconditions = { At = { q = 0, r = 0 } }
    effects = { At = { q = 1, r = 0 } }

    [[actions]]
    name = "Step2"
    preconditions = { At = { q = 1, r = 0 } }
    effects = { At = { q = 2, r = 0 } }

    [[attacks]]

    [durations]
    Step1 = 0.25
    Step2 = 0.25
    """,
)

STRONG_ATTACKS = textwrap.dedent(
    """
    [attack]
    damage = 2

    [executor]
    tick = 0.1
    """,
)


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_skirmish_plans_walk_then_attack(tmp_path: Path) -> None:
    """The agent walks next to the enemy and attacks once the damage suffices."""
    scenario = _write(tmp_path, "skirmish.toml", SKIRMISH)
    config = _write(tmp_path, "hexgoap.toml", STRONG_ATTACKS)

    result = runner.invoke(app, ["plan", "-s", str(scenario), "--config", str(config), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["plan"] == [0, 1, 2]
    assert [action["name"] for action in payload["actions"]] == ["Step1", "Step2", "Attack:e1@(2,0)"]
    assert payload["cost"] == 3.0


def test_weak_attacks_cannot_kill(tmp_path: Path) -> None:
    """With the default damage the predicted health never reaches zero."""
    scenario = _write(tmp_path, "skirmish.toml", SKIRMISH)

    result = runner.invoke(app, ["plan", "-s", str(scenario)])

    assert result.exit_code == 1
    assert "No plan found" in result.stdout


def test_skirmish_simulation_reaches_goal(tmp_path: Path) -> None:
    """Timed steps and the instant attack run to completion."""
    scenario = _write(tmp_path, "skirmish.toml", SKIRMISH)
    config = _write(tmp_path, "hexgoap.toml", STRONG_ATTACKS)

    result = runner.invoke(app, ["simulate", "-s", str(scenario), "--config", str(config)])

    assert result.exit_code == 0, result.output
    assert "Completed actions: 3" in result.stdout
    assert "  - Attack:e1@(2,0)" in result.stdout
    assert "Goal reached: yes" in result.stdout
    assert "At = 2,0" in result.stdout
    assert "EnemyHealth:e1 = 0" in result.stdout


SCOUTING = textwrap.dedent(
    """
    [facts]
    "Unit:scout:At" = "0,0"

    [[actions]]
    name = "Scout1"
    agent = "scout"
    preconditions = { "Unit:scout:At" = "0,0" }
    effects = { "Unit:scout:At" = "1,0" }

    [[actions]]
    name = "Scout2"
    agent = "scout"
    preconditions = { "Unit:scout:At" = "1,0" }
    effects = { "Unit:scout:At" = "2,0" }

    [[actions]]
    name = "Scout3"
    agent = "scout"
    preconditions = { "Unit:scout:At" = "2,0" }
    effects = { "Unit:scout:At" = "3,0" }

    [[agents]]
    id = "scout"
    long_term_goals = ["ReachArea:5,0:explore"]
    """,
)


def test_team_follows_long_term_goal(tmp_path: Path) -> None:
    """An agent with only a strategic goal plans this turn's step towards it."""
    scenario = _write(tmp_path, "scouting.toml", SCOUTING)

    result = runner.invoke(app, ["team", "-s", str(scenario), "--json"])

    assert result.exit_code == 0, result.output
    scout = json.loads(result.stdout)["agents"]["scout"]
    assert scout["actions"] == ["Scout1", "Scout2", "Scout3"]
    assert scout["cost"] == 3.0
