"""CLI entry point for hexgoap built with Typer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import click
import typer
from pydantic import ValidationError

from hexgoap.cli.runtime import (
    ScenarioError,
    WorkflowContext,
    action_to_payload,
    build_workflow_context,
    load_cli_config,
    team_to_payload,
)
from hexgoap.core.executor import ActionExecutor, run_plan
from hexgoap.core.explain import explain_plan
from hexgoap.io.logging import sanitize_text

if TYPE_CHECKING:
    from collections.abc import Sequence

    from hexgoap.core.models import ActionInstance


app = typer.Typer(add_completion=False, no_args_is_help=True)


def _emit_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False))


def _format_validation_error(prefix: str, error: ValidationError) -> str:
    lines = [prefix]
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "<root>"
        lines.append(f"  {location}: {detail['msg']}")
    return "\n".join(lines)


def _prepare_context(
    scenario: Path,
    config_path: Path | None,
    *,
    json_logs: bool,
    silence_logs: bool,
) -> WorkflowContext:
    try:
        config = load_cli_config(config_path)
    except FileNotFoundError as exc:
        typer.echo(f"Configuration file not found: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    except ValidationError as exc:
        typer.echo(_format_validation_error("Invalid configuration:", exc), err=True)
        raise typer.Exit(code=2) from exc
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc

    try:
        return build_workflow_context(
            scenario,
            config,
            json_logs=json_logs,
            silence_logs=silence_logs,
        )
    except FileNotFoundError as exc:
        typer.echo(f"Scenario file not found: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    except ValidationError as exc:
        typer.echo(_format_validation_error("Invalid scenario:", exc), err=True)
        raise typer.Exit(code=2) from exc
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc


def _fail_scenario(exc: ScenarioError) -> typer.Exit:
    typer.echo(str(exc), err=True)
    return typer.Exit(code=2)


def _no_plan(json_output: bool, expanded: int) -> typer.Exit:
    if json_output:
        _emit_json({"plan": None, "expanded": expanded})
    else:
        typer.echo(f"No plan found (expanded {expanded} nodes).")
    return typer.Exit(code=1)


def _step_lines(actions: Sequence[ActionInstance], steps: Sequence[int]) -> list[str]:
    return [
        f"  {position}. {sanitize_text(actions[index].name)} (cost={actions[index].cost:.2f})"
        for position, index in enumerate(steps, start=1)
    ]


@app.callback()
def cli_root() -> None:
    """Top-level CLI group for hexgoap."""


ScenarioOption = Annotated[
    Path,
    typer.Option("--scenario", "-s", help="Path to a scenario TOML."),
]
ConfigOption = Annotated[Path | None, typer.Option(help="Path to a configuration TOML.")]
JsonFlag = Annotated[
    bool,
    typer.Option("--json", "--json-output", help="Emit JSON instead of text."),
]
MaxNodesOption = Annotated[
    int | None,
    typer.Option(min=0, help="Override the node budget from the configuration."),
]


@app.command("plan")
def plan_command(
    scenario: ScenarioOption,
    config: ConfigOption = None,
    max_nodes: MaxNodesOption = None,
    json_output: JsonFlag = False,
) -> None:
    """Plan the scenario goal and print the chosen actions."""
    context = _prepare_context(scenario, config, json_logs=json_output, silence_logs=json_output)
    try:
        result = context.search(max_nodes)
    except ScenarioError as exc:
        raise _fail_scenario(exc) from exc

    if result.plan is None:
        raise _no_plan(json_output, result.expanded)

    if json_output:
        _emit_json(
            {
                "goal": context.require_goal().model_dump(mode="json"),
                "plan": result.plan,
                "actions": [action_to_payload(context.actions[index]) for index in result.plan],
                "cost": result.cost,
                "expanded": result.expanded,
            },
        )
        return

    lines = [
        f"Goal: {sanitize_text(str(context.require_goal()))}",
        f"Total cost: {result.cost:.2f}",
        f"Expanded nodes: {result.expanded}",
        "Actions:",
    ]
    if not result.plan:
        lines.append("  (goal already satisfied)")
    lines.extend(_step_lines(context.actions, result.plan))
    typer.echo("\n".join(lines))


@app.command("team")
def team_command(
    scenario: ScenarioOption,
    config: ConfigOption = None,
    json_output: JsonFlag = False,
) -> None:
    """Plan every scenario agent in order over a shared world state."""
    context = _prepare_context(scenario, config, json_logs=json_output, silence_logs=json_output)
    try:
        plans = context.plan_team()
    except ScenarioError as exc:
        raise _fail_scenario(exc) from exc
    payload = team_to_payload(context, plans)

    if json_output:
        _emit_json({"agents": payload})
        return

    lines: list[str] = []
    for agent, entry in payload.items():
        lines.append(f"{sanitize_text(agent)} (cost={entry['cost']:.2f}):")
        if not entry["actions"]:
            lines.append("  (empty)")
        lines.extend(
            f"  {position}. {sanitize_text(name)}" for position, name in enumerate(entry["actions"], start=1)
        )
    typer.echo("\n".join(lines))


@app.command("explain")
def explain_command(
    scenario: ScenarioOption,
    config: ConfigOption = None,
    json_output: JsonFlag = False,
) -> None:
    """Explain each action in the computed plan."""
    context = _prepare_context(scenario, config, json_logs=json_output, silence_logs=json_output)
    try:
        result = context.search()
    except ScenarioError as exc:
        raise _fail_scenario(exc) from exc
    if result.plan is None:
        raise _no_plan(json_output, result.expanded)

    explanations = explain_plan(context.actions, result.plan)
    if json_output:
        _emit_json(
            {
                "plan": result.plan,
                "explanations": [
                    {
                        "action": action_to_payload(explanation.action),
                        "reason": explanation.reason,
                        "cost": explanation.cost,
                        "cumulative_cost": explanation.cumulative_cost,
                    }
                    for explanation in explanations
                ],
            },
        )
        return

    lines = [f"Plan cost: {result.cost:.2f}", "Explanations:"]
    for explanation in explanations:
        lines.append(
            f"  {explanation.position}. {sanitize_text(explanation.action.name)} "
            f"(cost={explanation.cost:.2f}, total={explanation.cumulative_cost:.2f})",
        )
        lines.append(f"     reason: {sanitize_text(explanation.reason)}")
    typer.echo("\n".join(lines))


@app.command("simulate")
def simulate_command(
    scenario: ScenarioOption,
    config: ConfigOption = None,
    json_output: JsonFlag = False,
) -> None:
    """Plan the scenario goal and drive the plan through the executor."""
    context = _prepare_context(scenario, config, json_logs=json_output, silence_logs=json_output)
    try:
        result = context.search()
    except ScenarioError as exc:
        raise _fail_scenario(exc) from exc
    if result.plan is None:
        raise _no_plan(json_output, result.expanded)

    started: list[str] = []
    executor = ActionExecutor(
        on_start=lambda instance: started.append(instance.name),
        logger=context.logger.child("executor"),
    )
    world = context.start_state()
    completed = run_plan(
        executor,
        context.actions,
        result.plan,
        world,
        dt=context.config.executor.tick,
        durations=context.scenario.durations,
        default_duration=context.config.executor.default_duration,
    )
    goal_reached = context.require_goal().is_satisfied(world)

    if json_output:
        _emit_json(
            {
                "started": started,
                "completed": [instance.name for instance in completed],
                "goal_reached": goal_reached,
                "world": world.model_dump(mode="json")["facts"],
            },
        )
        return

    lines = [f"Completed actions: {len(completed)}"]
    lines.extend(f"  - {sanitize_text(instance.name)}" for instance in completed)
    lines.append(f"Goal reached: {'yes' if goal_reached else 'no'}")
    lines.append("World:")
    lines.extend(f"  {sanitize_text(key)} = {sanitize_text(str(value))}" for key, value in sorted(world.items()))
    typer.echo("\n".join(lines))


def main(argv: Sequence[str] | None = None) -> int:
    """Execute the hexgoap CLI and return the exit status."""
    command = typer.main.get_command(app)
    # ``None`` lets click read ``sys.argv`` when run as a console script.
    args = list(argv) if argv is not None else None
    try:
        result = command.main(args=args, prog_name="hexgoap", standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except SystemExit as exc:  # pragma: no cover - Typer propagates exit codes via SystemExit
        return int(exc.code or 0)
    # Without standalone mode click returns the exit code of ``typer.Exit``.
    return result if isinstance(result, int) else 0


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
