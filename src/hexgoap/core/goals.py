"""Long-term strategic goals decomposed into single-fact planner goals."""

from __future__ import annotations

from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict

from .models import _INTEGER, FactValue, Goal, HexCoord, WorldState

_STEP_LIMIT = 3
_AREA_RADIUS = 3
_SIEGE_RANGE = 2


def _position_key(unit_id: str) -> str:
    return f"Unit:{unit_id}:At"


def _read_position(state: WorldState, key: str) -> HexCoord | None:
    value = state.get(key)
    if isinstance(value, HexCoord):
        return value
    if isinstance(value, str):
        return HexCoord.parse(value)
    return None


def _position_value(reference: FactValue | None, target: HexCoord) -> FactValue:
    # Goals must match the encoding already used for the unit's position fact.
    if isinstance(reference, HexCoord):
        return target
    return str(target)


def _nearby_enemies(state: WorldState, unit_id: str) -> int | None:
    value = state.get(f"Unit:{unit_id}:NearbyEnemies")
    return value if type(value) is int else None


def _combat_goal(unit_id: str) -> Goal:
    return Goal(key=f"Unit:{unit_id}:InCombat", value=True)


def _step_towards(current: HexCoord, target: HexCoord) -> HexCoord:
    dq = target.q - current.q
    dr = target.r - current.r
    if abs(dq) > _STEP_LIMIT:
        dq = _STEP_LIMIT if dq > 0 else -_STEP_LIMIT
    if abs(dr) > _STEP_LIMIT:
        dr = _STEP_LIMIT if dr > 0 else -_STEP_LIMIT
    return HexCoord(q=current.q + dq, r=current.r + dr)


def _reach_position(state: WorldState, unit_id: str, target: HexCoord) -> Goal | None:
    key = _position_key(unit_id)
    current = _read_position(state, key)
    if current is None:
        return None
    waypoint = target if current.distance(target) <= _STEP_LIMIT else _step_towards(current, target)
    return Goal(key=key, value=_position_value(state.get(key), waypoint))


def _format_coords(coords: tuple[HexCoord, ...]) -> str:
    return ";".join(str(coord) for coord in coords)


def _parse_coords(text: str) -> tuple[HexCoord, ...] | None:
    coords: list[HexCoord] = []
    for chunk in text.split(";"):
        coord = HexCoord.parse(chunk)
        if coord is None:
            return None
        coords.append(coord)
    return tuple(coords)


class KillAllEnemies(BaseModel):
    """Engage until no enemies remain near the unit."""

    kind: Literal["kill_all_enemies"] = "kill_all_enemies"
    search_radius: int | None = None

    priority: ClassVar[float] = 65.0
    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        radius = "unlimited" if self.search_radius is None else str(self.search_radius)
        return f"KillAllEnemies:{radius}"

    def decompose(self, state: WorldState, unit_id: str) -> Goal | None:
        enemies = _nearby_enemies(state, unit_id)
        if enemies is not None and enemies > 0:
            return _combat_goal(unit_id)
        return None

    def is_achieved(self, state: WorldState, unit_id: str) -> bool:
        enemies = _nearby_enemies(state, unit_id)
        return enemies is None or enemies == 0


class Protect(BaseModel):
    """Hold one of several positions and fight enemies that come close."""

    kind: Literal["protect"] = "protect"
    targets: tuple[HexCoord, ...]
    reason: str

    priority: ClassVar[float] = 50.0
    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        return f"Protect:{_format_coords(self.targets)}:{self.reason}"

    def decompose(self, state: WorldState, unit_id: str) -> Goal | None:
        if not self.targets:
            return None
        key = _position_key(unit_id)
        current = _read_position(state, key)
        if current is None:
            return None

        closest = min(self.targets, key=current.distance)
        if current.distance(closest) > 0:
            return _reach_position(state, unit_id, closest)

        enemies = _nearby_enemies(state, unit_id)
        if enemies is not None and enemies > 0:
            return _combat_goal(unit_id)

        held = state.get(key)
        return Goal(key=key, value=held if held is not None else current)

    def is_achieved(self, state: WorldState, unit_id: str) -> bool:
        current = _read_position(state, _position_key(unit_id))
        if current is None:
            return False
        return any(current.distance(target) == 0 for target in self.targets)


class ReachArea(BaseModel):
    """Move within a few hexes of any of the given area centres."""

    kind: Literal["reach_area"] = "reach_area"
    area_centers: tuple[HexCoord, ...]
    reason: str

    priority: ClassVar[float] = 30.0
    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        return f"ReachArea:{_format_coords(self.area_centers)}:{self.reason}"

    def decompose(self, state: WorldState, unit_id: str) -> Goal | None:
        if not self.area_centers:
            return None
        current = _read_position(state, _position_key(unit_id))
        if current is None:
            return None
        closest = min(self.area_centers, key=current.distance)
        return _reach_position(state, unit_id, closest)

    def is_achieved(self, state: WorldState, unit_id: str) -> bool:
        current = _read_position(state, _position_key(unit_id))
        if current is None:
            return False
        return any(current.distance(center) <= _AREA_RADIUS for center in self.area_centers)


class SiegeCastle(BaseModel):
    """Approach a castle, put it under siege and bring its HP to zero."""

    kind: Literal["siege_castle"] = "siege_castle"
    castle_id: str

    priority: ClassVar[float] = 55.0
    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        return f"SiegeCastle:{self.castle_id}"

    def decompose(self, state: WorldState, unit_id: str) -> Goal | None:
        castle = _read_position(state, f"Castle:{self.castle_id}:At")
        current = _read_position(state, _position_key(unit_id))
        if castle is None or current is None:
            return None

        siege_key = f"Castle:{self.castle_id}:UnderSiege"
        under_siege = state.satisfies(siege_key, True)
        if under_siege:
            hp_key = f"Castle:{self.castle_id}:HP"
            hp = state.get(hp_key)
            if type(hp) is int and hp > 0:
                return Goal(key=hp_key, value=0)
            return None
        if current.distance(castle) <= _SIEGE_RANGE:
            return Goal(key=siege_key, value=True)
        return _reach_position(state, unit_id, castle)

    def is_achieved(self, state: WorldState, unit_id: str) -> bool:
        del unit_id
        hp = state.get(f"Castle:{self.castle_id}:HP")
        if type(hp) is int and hp <= 0:
            return True
        return state.satisfies(f"Castle:{self.castle_id}:Captured", True)


LongTermGoal = KillAllEnemies | Protect | ReachArea | SiegeCastle


def _parse_located(text: str) -> tuple[tuple[HexCoord, ...], str] | None:
    coords_text, sep, reason = text.partition(":")
    if not sep:
        return None
    coords = _parse_coords(coords_text)
    if coords is None:
        return None
    return coords, reason


def parse_long_term_goal(text: str) -> LongTermGoal | None:
    """Parse the string form produced by ``str(goal)``; ``None`` when malformed."""
    kind, sep, payload = text.partition(":")
    if not sep:
        return None

    if kind == "KillAllEnemies":
        if payload == "unlimited":
            return KillAllEnemies()
        if not _INTEGER.fullmatch(payload):
            return None
        return KillAllEnemies(search_radius=int(payload))
    if kind in {"Protect", "ReachArea"}:
        located = _parse_located(payload)
        if located is None:
            return None
        coords, reason = located
        if kind == "Protect":
            return Protect(targets=coords, reason=reason)
        return ReachArea(area_centers=coords, reason=reason)
    if kind == "SiegeCastle":
        return SiegeCastle(castle_id=payload)
    return None


def select_goal(
    goals: list[LongTermGoal],
    state: WorldState,
    unit_id: str,
) -> tuple[LongTermGoal, Goal] | None:
    """Return the highest-priority unachieved goal that decomposes this turn."""
    for candidate in sorted(goals, key=lambda goal: goal.priority, reverse=True):
        if candidate.is_achieved(state, unit_id):
            continue
        short_term = candidate.decompose(state, unit_id)
        if short_term is not None:
            return candidate, short_term
    return None


__all__ = [
    "KillAllEnemies",
    "LongTermGoal",
    "Protect",
    "ReachArea",
    "SiegeCastle",
    "parse_long_term_goal",
    "select_goal",
]
