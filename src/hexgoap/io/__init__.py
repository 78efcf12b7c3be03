"""Input/output helpers for hexgoap."""

from .config import load_config
from .logging import StructuredLogger
from .scenario import Scenario, load_scenario

__all__ = ["Scenario", "StructuredLogger", "load_config", "load_scenario"]
