import logging
import random
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional
from citysignal.domain.models import (
    Signal, SignalDefinition, LightState, OverrideAction, Weather, TrafficSnapshot
)
from citysignal.domain.state import SimulationState
from citysignal.domain.graph import SignalNetwork
from citysignal.domain.errors import UnknownSignalError
from citysignal.domain.fixtures import load_signal_definitions
from citysignal.domain import config
from citysignal.kernel.commands import Command
from citysignal.kernel.command_queue import CommandQueue
from citysignal.kernel.snapshot_builder import SnapshotBuilder
from citysignal.systems.flux_system import FluxSystem, congestion_for, clamp
from citysignal.systems.signal_system import SignalSystem

logger = logging.getLogger(__name__)

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

class SimulationKernel:
    """Owns the signal collection and weather; advances them one tick at a time.

    Randomness and time both come from injected sources so a seeded run is
    reproducible. Commands queued from the transport are applied once per
    tick, after the signals advance, so they show up in that tick's snapshot.
    """

    def __init__(self, rng: Optional[random.Random] = None, clock: Callable[[], datetime] = utc_now,
                 flux: Optional[FluxSystem] = None, signals: Optional[SignalSystem] = None):
        self.state = SimulationState()
        self.rng = rng or random.Random()
        self.clock = clock
        self.flux = flux or FluxSystem(self.rng)
        self.signal_system = signals or SignalSystem()
        self.command_queue = CommandQueue()
        self.snapshot_builder = SnapshotBuilder()
        self.latest_snapshot: Optional[TrafficSnapshot] = None
        self.initialized = False

    def initialize(self, definitions: Optional[Iterable[SignalDefinition]] = None, seed: Optional[int] = None):
        if seed is not None:
            self.rng.seed(seed)
        if definitions is None:
            definitions = load_signal_definitions()
        definitions = list(definitions)

        self.state.tick_id = 0
        self.state.weather = Weather.CLEAR
        self.state.signals = {}
        for definition in definitions:
            self.state.signals[definition.id] = self._create_signal(definition)
        self.state.signal_network = SignalNetwork.from_definitions(definitions)

        self.initialized = True
        self.latest_snapshot = self.snapshot_builder.build(self.state, self.clock())
        logger.info("Kernel initialized with %d signals (seed: %s)", len(self.state.signals), seed)

    def _create_signal(self, definition: SignalDefinition) -> Signal:
        vehicles = clamp(definition.vehicles, config.MIN_VEHICLES, config.MAX_VEHICLES)
        return Signal(
            id=definition.id,
            name=definition.name,
            location=definition.location,
            vehicles=vehicles,
            trend=1 if self.rng.random() > 0.5 else -1,
            currentLight=LightState.RED,
            timer=0,
            phaseDuration=config.INITIAL_PHASE_DURATION,
            congestion=congestion_for(vehicles),
            avgSpeed=round(max(config.MIN_SPEED, config.BASE_SPEED - vehicles * config.SPEED_PER_VEHICLE), 1),
            aqi=clamp(round(config.BASE_AQI + vehicles * config.AQI_PER_VEHICLE), config.MIN_AQI, config.MAX_AQI),
            lastUpdated=self.clock()
        )

    def queue_command(self, command: Command):
        self.command_queue.add(command)

    def step_signal(self, signal: Signal) -> Signal:
        """Next state of one signal. The input is left untouched."""
        next_signal = signal.model_copy(deep=True)
        self.flux.advance(next_signal, self.state.weather)
        self.signal_system.update(next_signal)
        next_signal.lastUpdated = self.clock()
        return next_signal

    def run_tick(self) -> TrafficSnapshot:
        if not self.initialized:
            self.initialize()

        # 1. Advance every signal; a failing signal keeps its previous state
        for signal_id, signal in list(self.state.signals.items()):
            try:
                self.state.signals[signal_id] = self.step_signal(signal)
            except Exception:
                logger.exception("Tick %d: update failed for signal %s, skipping", self.state.tick_id + 1, signal_id)

        # 2. Consume Commands
        commands = self.command_queue.pop_all()
        while commands:
            cmd = commands.popleft()
            try:
                cmd.execute(self)
            except Exception:
                logger.exception("Tick %d: command %s failed", self.state.tick_id + 1, type(cmd).__name__)

        # 3. Advance Time & Snapshot
        self.state.tick_id += 1
        self.latest_snapshot = self.snapshot_builder.build(self.state, self.clock())
        return self.latest_snapshot

    # Control operations

    def _get_signal(self, signal_id: str) -> Signal:
        signal = self.state.signals.get(signal_id)
        if signal is None:
            raise UnknownSignalError(signal_id)
        return signal

    def apply_override(self, signal_id: str, action: OverrideAction, duration: Optional[int] = None) -> bool:
        try:
            signal = self._get_signal(signal_id)
        except UnknownSignalError as e:
            logger.warning("Override %s ignored: %s", action, e)
            return False
        self.signal_system.apply_override(signal, action, duration)
        logger.info("Override %s applied to %s for %ss", OverrideAction(action).value, signal_id, signal.timer)
        return True

    def activate_green_wave(self, signal_ids: Iterable[str], duration: Optional[int] = None) -> List[str]:
        activated = []
        for signal_id in signal_ids:
            try:
                signal = self._get_signal(signal_id)
            except UnknownSignalError as e:
                logger.warning("Green wave target ignored: %s", e)
                continue
            self.signal_system.apply_green_wave(signal, duration)
            activated.append(signal_id)
        logger.info("Green wave activated for %s", activated)
        return activated

    def set_weather(self, weather: Weather) -> bool:
        weather = Weather(weather)
        changed = weather != self.state.weather
        self.state.weather = weather
        if changed:
            logger.info("Weather changed to %s", weather.value)
        return changed

    def corridor_for_route(self, route, radius: float = config.CORRIDOR_RADIUS) -> List[str]:
        if not self.initialized:
            self.initialize()
        return self.state.signal_network.corridor(route, radius)

    # Getters for API

    def get_snapshot(self) -> TrafficSnapshot:
        if not self.initialized:
            self.initialize()
        return self.latest_snapshot

    def get_signal(self, signal_id: str) -> Optional[Signal]:
        return self.get_snapshot().get_signal(signal_id)
