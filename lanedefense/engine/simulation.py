"""Simulation: the authoritative tick engine and owner of every component.

Phase cycle of ``tick(delta_seconds)``:
  1. Waves     advance wave/spawn timers, spawn into a free row
  2. Obstacles refresh the battle band from living defenders
  3. Movement  step every active attacker (engaged ones hold and face)
  4. Targeting resolve locks for every active entity
  5. Combat    fire elapsed timers, apply damage
  6. Sweep     pay rewards, emit removal events, free arena slots

Nothing is removed before the sweep, so an entity killed in phase 5 can
still be read by every later step of the same tick.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lanedefense.actions.combat import CombatScheduler
from lanedefense.ai.movement import MovementController
from lanedefense.ai.pathfinding import Pathfinder
from lanedefense.ai.targeting import TargetAcquisition
from lanedefense.config import SimulationConfig
from lanedefense.core.enums import Side
from lanedefense.core.grid import GridMap
from lanedefense.core.models import Cell
from lanedefense.core.snapshot import Snapshot
from lanedefense.core.world_state import WorldState
from lanedefense.systems.economy import GoldBank
from lanedefense.systems.generator import apply_level, build_attacker, build_defender
from lanedefense.systems.rng import DeterministicRNG
from lanedefense.systems.waves import WaveDirector
from lanedefense.utils.event_log import SimEvent

if TYPE_CHECKING:
    from lanedefense.actions.combat import FireEvent, HitNotice
    from lanedefense.core.arena import EntityHandle
    from lanedefense.core.enums import Archetype
    from lanedefense.core.models import Entity
    from lanedefense.systems.economy import EconomyPort

logger = logging.getLogger(__name__)


class Simulation:
    """One self-contained run: config, grid, arena, RNG, economy, components.

    Single writer: only ``tick`` and the placement entry points mutate
    state. Hosts that call from several threads must serialise them.
    """

    __slots__ = (
        "_config",
        "_world",
        "_economy",
        "_rng",
        "_pathfinder",
        "_movement",
        "_targeting",
        "_combat",
        "_waves",
        "_tick_events",
        "_outbox",
    )

    def __init__(
        self,
        config: SimulationConfig | None = None,
        economy: EconomyPort | None = None,
    ) -> None:
        cfg = (config or SimulationConfig()).validate()
        self._config = cfg
        self._rng = DeterministicRNG(cfg.world_seed)
        self._economy = economy if economy is not None else GoldBank(cfg.initial_gold)

        grid = GridMap(
            cfg.grid_width, cfg.grid_height,
            battle_start_row=cfg.battle_start_row,
            battle_rows=cfg.battle_rows,
            cell_size=cfg.cell_size,
        )
        self._waves = WaveDirector(cfg, self._rng)
        self._world = WorldState(seed=cfg.world_seed, grid=grid, wave=self._waves.state)

        self._pathfinder = Pathfinder.from_config(grid, cfg)
        self._movement = MovementController(cfg, self._pathfinder)
        self._targeting = TargetAcquisition(cfg, grid, self._world.arena)
        self._combat = CombatScheduler(on_hit=self._on_hit)

        self._tick_events: list[SimEvent] = []
        self._outbox: list[SimEvent] = []

    # -- accessors --

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def world(self) -> WorldState:
        return self._world

    @property
    def grid(self) -> GridMap:
        return self._world.grid

    @property
    def economy(self) -> EconomyPort:
        return self._economy

    @property
    def pathfinder(self) -> Pathfinder:
        return self._pathfinder

    @property
    def movement(self) -> MovementController:
        return self._movement

    @property
    def targeting(self) -> TargetAcquisition:
        return self._targeting

    @property
    def waves(self) -> WaveDirector:
        return self._waves

    @property
    def tick_events(self) -> list[SimEvent]:
        """Events emitted during the most recent tick."""
        return self._tick_events

    def get(self, handle: EntityHandle | None) -> Entity | None:
        return self._world.arena.get(handle)

    def snapshot(self) -> Snapshot:
        return Snapshot.from_world(self._world, gold=self._economy.balance())

    # -- tick --

    def tick(self, delta_seconds: float) -> list[SimEvent]:
        """Advance the world by *delta_seconds* and return the events of this tick."""
        world = self._world
        delta_ms = delta_seconds * 1000.0
        world.tick += 1
        world.elapsed_ms += delta_ms

        # Placement events raised between ticks lead this tick's feed
        self._tick_events = self._outbox
        self._outbox = []

        self._phase_waves(delta_ms)
        world.grid.set_obstacles(world.defender_cells(), reset_battle_rows_first=True)
        self._phase_movement(delta_seconds)
        targets = self._phase_targeting(delta_ms)
        self._phase_combat(targets, delta_ms)
        self._phase_sweep()
        return self._tick_events

    def run(self, seconds: float, dt: float = 0.05) -> list[SimEvent]:
        """Tick fixed *dt* steps until *seconds* of simulated time have passed."""
        if dt <= 0:
            raise ValueError("dt must be positive")
        events: list[SimEvent] = []
        steps = max(1, round(seconds / dt))
        logger.info("=== Simulation started (seed=%d, %d ticks of %.3fs) ===", self._world.seed, steps, dt)
        for _ in range(steps):
            events.extend(self.tick(dt))
            if self._world.tick % 200 == 0:
                logger.info(
                    "Tick %d: wave %d, %d attackers, %d defenders",
                    self._world.tick, self._waves.level,
                    len(self._world.arena.attackers()), len(self._world.arena.defenders()),
                )
        logger.info("=== Simulation finished at tick %d ===", self._world.tick)
        return events

    def _phase_waves(self, delta_ms: float) -> None:
        level_before = self._waves.level
        spawn_due = self._waves.tick(delta_ms)
        if self._waves.level != level_before:
            state = self._waves.state
            self._emit(
                "wave", f"Wave {state.level} begins",
                metadata={
                    "level": state.level,
                    "spawn_interval_ms": state.spawn_interval_ms,
                    "hp_bonus": state.hp_bonus,
                },
            )
        if spawn_due:
            entity = self._waves.choose_spawn(self._world.arena.attackers(), self._world.grid)
            if entity is not None:
                self._register_attacker(entity)

    def _phase_movement(self, dt: float) -> None:
        for entity in self._world.arena.attackers():
            if not entity.active:
                continue
            self._movement.advance(entity, dt, self._targeting.engaged_target(entity))

    def _phase_targeting(self, delta_ms: float) -> dict[EntityHandle, Entity]:
        arena = self._world.arena
        pools = {Side.ATTACKER: arena.attackers(), Side.DEFENDER: arena.defenders()}
        targets: dict[EntityHandle, Entity] = {}
        for entity in arena:
            if not entity.active:
                continue
            target = self._targeting.resolve(entity, pools[entity.side.opponent], delta_ms)
            if target is not None:
                targets[entity.handle] = target
        return targets

    def _phase_combat(self, targets: dict[EntityHandle, Entity], delta_ms: float) -> None:
        for entity in self._world.arena:
            target = targets.get(entity.handle)
            if target is not None:
                self._combat.tick(entity, target, delta_ms)

    def _phase_sweep(self) -> None:
        world = self._world
        for entity in list(world.arena):
            if entity.alive and not entity.escaped:
                continue
            key = entity.handle.key
            if entity.escaped:
                world.total_escaped += 1
                logger.debug("Tick %d: attacker %r escaped", world.tick, entity.handle)
                self._emit("escaped", f"{entity.kind.name} #{key} escaped", entity_ids=(key,))
            elif entity.is_attacker:
                world.total_killed += 1
                self._economy.add_gold(entity.reward)
                logger.debug("Tick %d: attacker %r killed (+%d gold)", world.tick, entity.handle, entity.reward)
                self._emit(
                    "killed", f"{entity.kind.name} #{key} destroyed",
                    entity_ids=(key,),
                    metadata={"reward": entity.reward, "x": entity.world_position.x, "y": entity.world_position.y},
                )
            else:
                world.defenders_lost += 1
                world.grid.set_walkable(entity.grid_position.col, entity.grid_position.row, True)
                logger.debug("Tick %d: defender %r destroyed", world.tick, entity.handle)
                self._emit(
                    "destroyed", f"{entity.kind.name} #{key} destroyed",
                    entity_ids=(key,),
                    metadata={"col": entity.grid_position.col, "row": entity.grid_position.row},
                )
            world.arena.remove(entity.handle)

    def _on_hit(self, event: FireEvent, notice: HitNotice) -> None:
        ids = (event.source.key, event.target.key)
        self._emit(
            "fire", f"#{ids[0]} hit #{ids[1]} for {event.damage:g}",
            entity_ids=ids,
            metadata={"damage": event.damage, "effect": event.effect},
        )
        self._emit(
            "hit_spark", "hit",
            entity_ids=(event.source.key,),
            metadata={"x": notice.x, "y": notice.y, "color": notice.color, "killed": notice.killed},
        )

    def _emit(
        self,
        category: str,
        message: str,
        entity_ids: tuple[int, ...] = (),
        metadata: dict | None = None,
        outbox: bool = False,
    ) -> None:
        event = SimEvent(
            tick=self._world.tick,
            category=category,
            message=message,
            entity_ids=entity_ids,
            metadata=metadata or {},
        )
        (self._outbox if outbox else self._tick_events).append(event)

    # -- spawning --

    def _register_attacker(self, entity: Entity) -> Entity:
        handle = self._world.arena.insert(entity)
        self._world.total_spawned += 1
        self._movement.refresh_route(entity)
        logger.debug(
            "Tick %d: spawned %s %r at %s (hp %.0f)",
            self._world.tick, entity.kind.name, handle, entity.grid_position, entity.hp,
        )
        self._emit(
            "spawned", f"{entity.kind.name} #{handle.key} entered row {entity.grid_position.row}",
            entity_ids=(handle.key,),
            metadata={"kind": entity.kind.name, "row": entity.grid_position.row, "hp": entity.hp},
        )
        return entity

    def spawn_attacker(self, kind: Archetype, row: int, col: int | None = None) -> Entity:
        """Put an attacker on the field directly, bypassing the wave timers.

        The current wave's hp bonus applies. Raises ValueError for a
        defender archetype.
        """
        spec = self._config.archetype(kind)
        if spec.side is not Side.ATTACKER:
            raise ValueError(f"{kind.name} is not an attacker archetype")
        cell = Cell(self._config.spawn_col if col is None else col, row)
        entity = build_attacker(spec, cell, self._world.grid, self._waves.state.hp_bonus)
        return self._register_attacker(entity)

    # -- placement --

    def is_occupied(self, col: int, row: int) -> bool:
        """True if a living defender stands on ``(col, row)``."""
        return self._world.defender_at(col, row) is not None

    def add_defender(self, kind: Archetype, col: int, row: int) -> Entity | None:
        """Place a defender and return it, or None if the request is refused."""
        grid = self._world.grid
        try:
            spec = self._config.archetype(kind)
        except KeyError:
            logger.warning("Placement refused: no archetype %s", kind)
            return None
        if spec.side is not Side.DEFENDER:
            logger.warning("Placement refused: %s is not a defender", kind.name)
            return None
        if not grid.in_bounds(col, row) or not grid.in_battle_band(row):
            logger.debug("Placement refused: (%d, %d) outside the battle band", col, row)
            return None
        if self.is_occupied(col, row):
            logger.debug("Placement refused: (%d, %d) occupied", col, row)
            return None
        if not self._economy.affordable(spec.cost) or not self._economy.spend(spec.cost):
            logger.debug("Placement refused: cannot afford %s (%d)", kind.name, spec.cost)
            return None

        cell = Cell(col, row)
        entity = build_defender(spec, cell, grid)
        handle = self._world.arena.insert(entity)
        grid.set_walkable(col, row, False)
        logger.info("Placed %s %r at %s for %d gold", kind.name, handle, cell, spec.cost)
        self._emit(
            "placed", f"{kind.name} #{handle.key} placed at {cell}",
            entity_ids=(handle.key,),
            metadata={"kind": kind.name, "col": col, "row": row, "cost": spec.cost},
            outbox=True,
        )
        return entity

    def place_defender(self, kind: Archetype, col: int, row: int) -> bool:
        return self.add_defender(kind, col, row) is not None

    def remove_defender(self, handle: EntityHandle) -> bool:
        """Take a defender off the field and free its cell. No refund."""
        entity = self._world.arena.get(handle)
        if entity is None or entity.side is not Side.DEFENDER:
            return False
        self._world.arena.remove(handle)
        self._world.grid.set_walkable(entity.grid_position.col, entity.grid_position.row, True)
        return True

    def sell_defender(self, handle: EntityHandle) -> bool:
        """Remove a defender and refund ``level * sell_gain``."""
        entity = self._world.arena.get(handle)
        if entity is None or entity.side is not Side.DEFENDER or not entity.active:
            return False
        refund = entity.level * self._config.archetype(entity.kind).sell_gain
        self.remove_defender(handle)
        self._economy.add_gold(refund)
        logger.info("Sold %s %r for %d gold", entity.kind.name, handle, refund)
        self._emit(
            "sold", f"{entity.kind.name} #{handle.key} sold",
            entity_ids=(handle.key,),
            metadata={"refund": refund, "col": entity.grid_position.col, "row": entity.grid_position.row},
            outbox=True,
        )
        return True

    def upgrade_defender(self, handle: EntityHandle) -> bool:
        """Raise a defender one level for ``level * upgrade_cost``."""
        entity = self._world.arena.get(handle)
        if entity is None or entity.side is not Side.DEFENDER or not entity.active:
            return False
        if entity.level >= self._config.max_defender_level:
            return False
        spec = self._config.archetype(entity.kind)
        cost = entity.level * spec.upgrade_cost
        if not self._economy.affordable(cost) or not self._economy.spend(cost):
            return False
        apply_level(entity, spec, entity.level + 1)
        logger.info("Upgraded %s %r to level %d for %d gold", entity.kind.name, handle, entity.level, cost)
        self._emit(
            "upgraded", f"{entity.kind.name} #{handle.key} reached level {entity.level}",
            entity_ids=(handle.key,),
            metadata={"level": entity.level, "cost": cost},
            outbox=True,
        )
        return True
