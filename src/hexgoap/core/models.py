"""Core data models for hexgoap."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from operator import itemgetter
import re
import typing

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Signed ASCII integers without digit separators.
_INTEGER = re.compile(r"[+-]?[0-9]+")


class HexCoord(BaseModel):
    """Axial hex-grid coordinate used as a fact value."""

    q: int
    r: int

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        return f"{self.q},{self.r}"

    @classmethod
    def parse(cls, text: str) -> HexCoord | None:
        """Parse the ``"q,r"`` form, returning ``None`` for malformed text."""
        q_text, sep, r_text = text.partition(",")
        if not sep:
            return None
        q_text, r_text = q_text.strip(), r_text.strip()
        if not (_INTEGER.fullmatch(q_text) and _INTEGER.fullmatch(r_text)):
            return None
        return cls(q=int(q_text), r=int(r_text))

    def distance(self, other: HexCoord) -> int:
        """Return the axial hex distance to ``other``."""
        dq = self.q - other.q
        dr = self.r - other.r
        return (abs(dq) + abs(dq + dr) + abs(dr)) // 2


FactValue = bool | int | str | HexCoord
FactPair = tuple[str, FactValue]

_FACT_TAGS: dict[type, str] = {bool: "bool", int: "int", str: "str", HexCoord: "hex"}


def fact_tag(value: object) -> str:
    """Return the tag of a fact value, raising ``TypeError`` for foreign types."""
    tag = _FACT_TAGS.get(type(value))
    if tag is None:
        msg = f"unsupported fact value type: {type(value).__name__}"
        raise TypeError(msg)
    return tag


def facts_equal(left: FactValue | None, right: FactValue | None) -> bool:
    """Compare two fact values by tag and payload.

    ``True == 1`` holds in Python, but a boolean fact never satisfies an
    integer one.
    """
    return type(left) is type(right) and left == right


def _fact_token(value: FactValue) -> tuple[str, typing.Hashable]:
    if isinstance(value, HexCoord):
        return ("hex", (value.q, value.r))
    return (fact_tag(value), value)


def _coerce_pairs(value: typing.Any) -> typing.Any:
    # TOML tables and plain dicts arrive as mappings; insertion order is kept.
    if isinstance(value, Mapping):
        return tuple(value.items())
    return value


CanonicalKey = tuple[tuple[str, tuple[str, typing.Hashable]], ...]


class WorldState(BaseModel):
    """Mutable mapping from fact names to typed fact values."""

    facts: dict[str, FactValue] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_facts(cls, facts: Mapping[str, FactValue] | None = None) -> WorldState:
        """Build a validated state from a plain mapping."""
        return cls.model_validate({"facts": dict(facts or {})})

    def get(self, key: str) -> FactValue | None:
        return self.facts.get(key)

    def insert(self, key: str, value: FactValue) -> None:
        """Overwrite or create ``key``."""
        fact_tag(value)
        self.facts[key] = value

    def satisfies(self, key: str, value: FactValue) -> bool:
        """Return ``True`` when ``key`` is present and exactly equals ``value``."""
        if key not in self.facts:
            return False
        return facts_equal(self.facts[key], value)

    def apply_effects(self, effects: Iterable[FactPair]) -> None:
        """Apply effect pairs in order; later pairs for the same key win."""
        for key, value in effects:
            self.insert(key, value)

    def clone(self) -> WorldState:
        """Return an independent copy of this state."""
        return type(self).model_construct(facts=dict(self.facts))

    def canonical_key(self) -> CanonicalKey:
        """Return a hashable snapshot independent of insertion history."""
        pairs = ((key, _fact_token(value)) for key, value in self.facts.items())
        return tuple(sorted(pairs, key=itemgetter(0)))

    def items(self) -> Iterator[FactPair]:
        return iter(self.facts.items())

    def __contains__(self, key: object) -> bool:
        return key in self.facts

    def __len__(self) -> int:
        return len(self.facts)


class Goal(BaseModel):
    """Single fact target for the planner."""

    key: str
    value: FactValue

    model_config = ConfigDict(frozen=True, extra="forbid")

    def is_satisfied(self, state: WorldState) -> bool:
        return state.satisfies(self.key, self.value)

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


class _ActionBase(BaseModel):
    name: str
    preconditions: tuple[FactPair, ...] = ()
    effects: tuple[FactPair, ...] = ()
    cost: float = Field(default=1.0, ge=0.0)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("preconditions", "effects", mode="before")
    @classmethod
    def _accept_mappings(cls, value: typing.Any) -> typing.Any:
        return _coerce_pairs(value)

    def is_applicable(self, state: WorldState) -> bool:
        """Return ``True`` when every precondition holds in ``state``."""
        return all(state.satisfies(key, value) for key, value in self.preconditions)


class ActionTemplate(_ActionBase):
    """Reusable action definition not yet tied to a run or agent."""


class ActionInstance(_ActionBase):
    """Grounded action, optionally reserved for a single agent."""

    agent: str | None = None

    def visible_to(self, agent: str) -> bool:
        """Return ``True`` when ``agent`` may use this instance."""
        return self.agent is None or self.agent == agent


def ground_action_from_template(
    template: ActionTemplate,
    agent: str | None = None,
) -> ActionInstance:
    """Lift ``template`` into an instance without inspecting any state."""
    return ActionInstance.model_construct(
        name=template.name,
        preconditions=template.preconditions,
        effects=template.effects,
        cost=template.cost,
        agent=agent,
    )


Plan = list[int]


class PlannerSettings(BaseModel):
    """Search budgets used when callers do not pass their own."""

    max_nodes: int = Field(default=1000, ge=0)
    max_nodes_per_agent: int = Field(default=500, ge=0)

    model_config = ConfigDict(extra="forbid")


class AttackSettings(BaseModel):
    """Parameters for the attack grounder."""

    name_base: str = "Attack"
    damage: int = 1
    cost: float = Field(default=1.0, ge=0.0)

    model_config = ConfigDict(extra="forbid")


class ExecutorSettings(BaseModel):
    """Timing parameters for driving plans through the executor."""

    tick: float = Field(default=0.1, gt=0.0)
    default_duration: float = Field(default=0.0, ge=0.0)

    model_config = ConfigDict(extra="forbid")


class LoggingSettings(BaseModel):
    """Structured logging options."""

    json_mode: bool = False
    level: typing.Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    model_config = ConfigDict(extra="forbid")


class Config(BaseModel):
    """Top level configuration schema validated from TOML files."""

    planner: PlannerSettings = Field(default_factory=PlannerSettings)
    attack: AttackSettings = Field(default_factory=AttackSettings)
    executor: ExecutorSettings = Field(default_factory=ExecutorSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = ConfigDict(extra="forbid")


__all__ = [
    "ActionInstance",
    "ActionTemplate",
    "AttackSettings",
    "CanonicalKey",
    "Config",
    "ExecutorSettings",
    "FactPair",
    "FactValue",
    "Goal",
    "HexCoord",
    "LoggingSettings",
    "Plan",
    "PlannerSettings",
    "WorldState",
    "fact_tag",
    "facts_equal",
    "ground_action_from_template",
]
