"""EngineManager: hosts one Simulation behind the HTTP API.

The engine thread is the only caller of ``Simulation.tick``. Placement
requests arrive on API threads and run under the same ``_sim_lock``, so
they always land between two ticks. Readers never touch the Simulation:
they get the latest immutable ``Snapshot``, swapped in after every tick
and every placement.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Callable, TypeVar

from lanedefense.core.arena import EntityHandle
from lanedefense.engine.simulation import Simulation
from lanedefense.systems.economy import GoldBank
from lanedefense.utils.event_log import EventLog

if TYPE_CHECKING:
    from lanedefense.config import SimulationConfig
    from lanedefense.core.enums import Archetype
    from lanedefense.core.models import Entity
    from lanedefense.core.snapshot import Snapshot
    from lanedefense.utils.event_log import SimEvent

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_TICK_RATE = 0.01
MAX_TICK_RATE = 2.0


class EngineManager:
    """Lifecycle (start / pause / resume / step / stop / reset) and placement for one run."""

    def __init__(self, config: SimulationConfig) -> None:
        self.config = config
        self._tick_rate: float = config.tick_rate_seconds

        self._sim: Simulation | None = None
        self._sim_lock = threading.Lock()
        self._snapshot: Snapshot | None = None
        self._event_log = EventLog()

        self._thread: threading.Thread | None = None
        self._running = threading.Event()
        self._paused = threading.Event()
        self._stop_requested = threading.Event()
        # Set to interrupt the loop's wait: on step, resume or stop
        self._wake = threading.Event()
        self._pending_steps = 0

        self._last_tick_ms = 0.0

        self._build()

    # -- properties --

    @property
    def running(self) -> bool:
        return self._running.is_set()

    @property
    def paused(self) -> bool:
        return self._paused.is_set()

    @property
    def tick_rate(self) -> float:
        """Wall-clock seconds between ticks; also the simulated dt of each tick."""
        return self._tick_rate

    @tick_rate.setter
    def tick_rate(self, value: float) -> None:
        self._tick_rate = max(MIN_TICK_RATE, min(value, MAX_TICK_RATE))

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def last_tick_ms(self) -> float:
        """Wall-clock cost of the most recent tick."""
        return self._last_tick_ms

    def get_snapshot(self) -> Snapshot | None:
        return self._snapshot

    # -- lifecycle --

    def start(self) -> None:
        if self._running.is_set():
            return
        self._stop_requested.clear()
        self._paused.clear()
        self._running.set()
        self._thread = threading.Thread(target=self._run_loop, name="lanedefense-engine", daemon=True)
        self._thread.start()
        logger.info("Engine started (dt=%.3fs)", self._tick_rate)

    def pause(self) -> None:
        self._paused.set()
        logger.info("Engine paused at tick %d", self._current_tick())

    def resume(self) -> None:
        self._paused.clear()
        self._wake.set()
        logger.info("Engine resumed at tick %d", self._current_tick())

    def step(self) -> None:
        """Queue one tick on the engine thread, pausing it first."""
        if not self._paused.is_set():
            self.pause()
        with self._sim_lock:
            self._pending_steps += 1
        self._wake.set()

    def stop(self) -> None:
        self._stop_requested.set()
        self._wake.set()
        thread = self._thread
        if thread is not None and thread.is_alive():
            thread.join(timeout=5.0)
        self._thread = None
        self._running.clear()
        self._paused.clear()
        logger.info("Engine stopped at tick %d", self._current_tick())

    def reset(self) -> None:
        """Stop and rebuild from config. Gold, defenders and events are discarded."""
        self.stop()
        self._event_log.clear()
        self._build()
        logger.info("Engine reset (seed=%d)", self.config.world_seed)

    def tick_now(self) -> list[SimEvent]:
        """Run one tick on the calling thread and publish it."""
        started = time.perf_counter()
        events = self._mutate(lambda sim: sim.tick(self._tick_rate))
        self._last_tick_ms = (time.perf_counter() - started) * 1000.0
        self._event_log.extend(events)
        return events

    # -- placement --

    def place_defender(self, kind: Archetype, col: int, row: int) -> Entity | None:
        return self._mutate(lambda sim: sim.add_defender(kind, col, row))

    def upgrade_defender(self, key: int) -> bool:
        return self._mutate(lambda sim: sim.upgrade_defender(EntityHandle.from_key(key)))

    def sell_defender(self, key: int) -> bool:
        return self._mutate(lambda sim: sim.sell_defender(EntityHandle.from_key(key)))

    # -- internals --

    def _mutate(self, action: Callable[[Simulation], T]) -> T:
        """Apply *action* between ticks, then publish a fresh snapshot."""
        with self._sim_lock:
            result = action(self._sim)
            self._snapshot = self._sim.snapshot()
        return result

    def _build(self) -> None:
        sim = Simulation(self.config, economy=GoldBank(self.config.initial_gold))
        with self._sim_lock:
            self._sim = sim
            self._pending_steps = 0
            self._snapshot = sim.snapshot()
        self._last_tick_ms = 0.0

    def _take_step(self) -> bool:
        with self._sim_lock:
            if self._pending_steps == 0:
                return False
            self._pending_steps -= 1
            return True

    def _run_loop(self) -> None:
        logger.debug("Engine thread running.")
        while not self._stop_requested.is_set():
            if self._paused.is_set():
                if not self._take_step():
                    self._wake.wait(timeout=0.1)
                    self._wake.clear()
                    continue
                self.tick_now()
                continue

            self.tick_now()
            # Sleep off the rest of the interval, but wake early on stop
            remaining = self._tick_rate - self._last_tick_ms / 1000.0
            if remaining > 0 and self._wake.wait(timeout=remaining):
                self._wake.clear()

        self._running.clear()
        logger.debug("Engine thread exited.")

    def _current_tick(self) -> int:
        snap = self._snapshot
        return snap.tick if snap else 0
