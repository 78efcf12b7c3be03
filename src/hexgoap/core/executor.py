"""Runtime executor applying planned actions to a live world state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from collections.abc import Mapping, Sequence

    from hexgoap.io.logging import StructuredLogger

    from .models import ActionInstance, Plan, WorldState


class ActionCallback(Protocol):
    """Callable protocol notified with the affected action instance."""

    def __call__(self, instance: ActionInstance) -> None:
        """Handle a lifecycle event for ``instance``."""
        ...


class ExecutionListener(Protocol):
    """Object receiving both start and completion notifications."""

    def on_start(self, instance: ActionInstance) -> None:
        """Handle an action being started."""
        ...

    def on_complete(self, instance: ActionInstance) -> None:
        """Handle an action completing with its effects applied."""
        ...


@dataclass(frozen=True, slots=True)
class InstantAction:
    """Action completing on the first update after it starts."""

    instance: ActionInstance


@dataclass(slots=True)
class TimedAction:
    """Action completing once accumulated time reaches ``duration``."""

    instance: ActionInstance
    duration: float
    elapsed: float = 0.0

    def __post_init__(self) -> None:
        if self.duration < 0:
            msg = "duration must be non-negative"
            raise ValueError(msg)


RuntimeAction = InstantAction | TimedAction


class ActionExecutor:
    """Drive a single in-flight action to completion across update ticks."""

    def __init__(
        self,
        *,
        on_start: ActionCallback | None = None,
        on_complete: ActionCallback | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        """Create an idle executor with optional lifecycle callbacks."""
        self._current: RuntimeAction | None = None
        self._on_start = on_start
        self._on_complete = on_complete
        self._logger = logger

    @property
    def current(self) -> RuntimeAction | None:
        """Return the in-flight action, if any."""
        return self._current

    @property
    def idle(self) -> bool:
        return self._current is None

    def set_on_start(self, callback: ActionCallback | None) -> None:
        self._on_start = callback

    def set_on_complete(self, callback: ActionCallback | None) -> None:
        self._on_complete = callback

    def attach(self, listener: ExecutionListener) -> None:
        """Register both callbacks from ``listener``."""
        self._on_start = listener.on_start
        self._on_complete = listener.on_complete

    def start(self, action: RuntimeAction) -> None:
        """Replace any current action with ``action`` and fire the start callback.

        A displaced action is dropped without effects or completion callback.
        """
        if self._current is not None and self._logger is not None:
            self._logger.debug("displacing running action", action=self._current.instance.name)
        self._current = action
        if self._logger is not None:
            self._logger.debug("action started", action=action.instance.name)
        if self._on_start is not None:
            self._on_start(action.instance)

    def update(self, dt: float, world: WorldState) -> bool:
        """Advance the current action by ``dt``; return ``True`` when it completed.

        On completion the effects are applied and the executor is idle again
        before ``on_complete`` fires, so the callback may ``start`` the next
        action without it being cleared afterwards.
        """
        if dt < 0:
            msg = "dt must be non-negative"
            raise ValueError(msg)
        action = self._current
        if action is None:
            return False

        if isinstance(action, TimedAction):
            action.elapsed += dt
            if action.elapsed < action.duration:
                return False

        world.apply_effects(action.instance.effects)
        self._current = None
        if self._logger is not None:
            self._logger.debug("action completed", action=action.instance.name)
        if self._on_complete is not None:
            self._on_complete(action.instance)
        return True

    def abort(self) -> None:
        """Drop the current action without applying its effects."""
        if self._current is not None and self._logger is not None:
            self._logger.debug("action aborted", action=self._current.instance.name)
        self._current = None


def run_plan(
    executor: ActionExecutor,
    actions: Sequence[ActionInstance],
    steps: Plan,
    world: WorldState,
    *,
    dt: float,
    durations: Mapping[str, float] | None = None,
    default_duration: float = 0.0,
) -> list[ActionInstance]:
    """Feed ``steps`` through ``executor`` one after another, ticking by ``dt``.

    Actions with a positive duration (looked up by name, falling back to
    ``default_duration``) run as :class:`TimedAction`, the rest as
    :class:`InstantAction`. Returns the completed instances in order; the run
    stops early when a callback aborts or displaces the running action.
    """
    if dt <= 0:
        msg = "dt must be positive"
        raise ValueError(msg)
    timings = durations or {}
    completed: list[ActionInstance] = []
    for index in steps:
        instance = actions[index]
        duration = timings.get(instance.name, default_duration)
        runtime: RuntimeAction
        if duration > 0:
            runtime = TimedAction(instance=instance, duration=duration)
        else:
            runtime = InstantAction(instance=instance)
        executor.start(runtime)

        finished = False
        while not finished and executor.current is runtime:
            finished = executor.update(dt, world)
        if not finished:
            break
        completed.append(instance)
    return completed


__all__ = [
    "ActionCallback",
    "ActionExecutor",
    "ExecutionListener",
    "InstantAction",
    "RuntimeAction",
    "TimedAction",
    "run_plan",
]
