"""Shared fixtures for the hexgoap test suite."""

from __future__ import annotations

import io

import pytest

from hexgoap.core.models import ActionTemplate, Goal, WorldState
from hexgoap.io.logging import StructuredLogger


@pytest.fixture
def box_world() -> WorldState:
    """Return the agent/box world used by the move-then-pickup scenario."""
    return WorldState.from_facts({"AgentAt": "A", "BoxAt": "B"})


@pytest.fixture
def box_templates() -> list[ActionTemplate]:
    """Provide the move and pickup templates for the box scenario."""
    return [
        ActionTemplate(
            name="Move",
            preconditions={"AgentAt": "A"},
            effects={"AgentAt": "B"},
            cost=1.0,
        ),
        ActionTemplate(
            name="Pickup",
            preconditions={"AgentAt": "B", "BoxAt": "B"},
            effects={"Carried": True},
            cost=1.0,
        ),
    ]


@pytest.fixture
def carried_goal() -> Goal:
    """Return the goal of carrying the box."""
    return Goal(key="Carried", value=True)


@pytest.fixture
def log_buffer() -> io.StringIO:
    """Return an in-memory stream for captured log output."""
    return io.StringIO()


@pytest.fixture
def json_logger(log_buffer: io.StringIO) -> StructuredLogger:
    """Return a JSON-mode logger writing to ``log_buffer``."""
    return StructuredLogger(name="hexgoap.test", json_mode=True, stream=log_buffer)
