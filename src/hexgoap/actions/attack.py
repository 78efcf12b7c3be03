"""Context-sensitive grounding of the attack action family."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from hexgoap.core.models import ActionInstance, HexCoord

if TYPE_CHECKING:
    from hexgoap.core.models import FactPair, FactValue, WorldState
    from hexgoap.io.logging import StructuredLogger


ENEMY_AT = "EnemyAt"
ENEMY_ALIVE = "EnemyAlive"
ENEMY_HEALTH = "EnemyHealth"
POSITION_KEY = "At"


def _scoped(base: str, entity_id: str | None) -> str:
    return base if entity_id is None else f"{base}:{entity_id}"


def _entity_id(key: str, base: str) -> tuple[bool, str | None]:
    """Return whether ``key`` belongs to ``base`` and the identifier suffix."""
    if key == base:
        return True, None
    prefix = f"{base}:"
    if key.startswith(prefix):
        return True, key[len(prefix):]
    return False, None


def _as_location(value: FactValue) -> HexCoord | None:
    if isinstance(value, HexCoord):
        return value
    if isinstance(value, str):
        return HexCoord.parse(value)
    return None


@dataclass(frozen=True, slots=True)
class AttackTemplate:
    """Attack definition grounded once per known enemy location.

    Entity identity comes from the fact key suffix: ``EnemyAt:<id>`` pairs
    with ``EnemyAlive:<id>`` and ``EnemyHealth:<id>``, while the bare
    ``EnemyAt`` pairs with the bare alive and health facts.
    """

    name_base: str = "Attack"
    damage: int = 1
    cost: float = 1.0

    def ground_for_state(
        self,
        state: WorldState,
        agent: str | None = None,
        *,
        logger: StructuredLogger | None = None,
    ) -> list[ActionInstance]:
        """Return one attack instance per live enemy location in ``state``."""
        instances: list[ActionInstance] = []
        for key, value in sorted(state.items()):
            matched, entity_id = _entity_id(key, ENEMY_AT)
            if not matched:
                continue
            location = _as_location(value)
            if location is None:
                if logger is not None:
                    logger.debug("skipping enemy fact without location", fact=key)
                continue

            alive_key = _scoped(ENEMY_ALIVE, entity_id)
            if state.satisfies(alive_key, False):
                continue

            instances.append(
                ActionInstance(
                    name=self._instance_name(entity_id, location),
                    preconditions=self._preconditions(state, location, alive_key),
                    effects=self._effects(state, entity_id, alive_key),
                    cost=self.cost,
                    agent=agent,
                ),
            )

        if logger is not None:
            logger.debug("grounded attacks", agent=agent, count=len(instances))
        return instances

    def _instance_name(self, entity_id: str | None, location: HexCoord) -> str:
        if entity_id is None:
            return f"{self.name_base}@({location})"
        return f"{self.name_base}:{entity_id}@({location})"

    def _preconditions(
        self,
        state: WorldState,
        location: HexCoord,
        alive_key: str,
    ) -> tuple[FactPair, ...]:
        preconditions: list[FactPair] = [(POSITION_KEY, location)]
        if state.satisfies(alive_key, True):
            preconditions.append((alive_key, True))
        return tuple(preconditions)

    def _effects(
        self,
        state: WorldState,
        entity_id: str | None,
        alive_key: str,
    ) -> tuple[FactPair, ...]:
        health_key = _scoped(ENEMY_HEALTH, entity_id)
        health = state.get(health_key)
        if type(health) is int:
            predicted = max(health - self.damage, 0)
            effects: list[FactPair] = [(health_key, predicted)]
            if predicted <= 0:
                effects.append((alive_key, False))
            return tuple(effects)
        if alive_key in state:
            return ((alive_key, False),)
        return ()


__all__ = ["AttackTemplate"]
