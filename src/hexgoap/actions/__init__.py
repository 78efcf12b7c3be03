"""Action templates and grounding helpers for planning."""

from .attack import AttackTemplate
from .move import move_template

__all__ = ["AttackTemplate", "move_template"]
