from typing import Optional
from citysignal.domain.models import Signal, LightState, CongestionLevel, OverrideAction
from citysignal.domain import config

OVERRIDE_TARGETS = {
    OverrideAction.FORCE_GREEN: (LightState.GREEN, config.OVERRIDE_GREEN_TIME),
    OverrideAction.FORCE_YELLOW: (LightState.YELLOW, config.OVERRIDE_YELLOW_TIME),
    OverrideAction.FORCE_RED: (LightState.RED, config.OVERRIDE_RED_TIME),
}

def green_duration(congestion: CongestionLevel) -> int:
    level = congestion.value if isinstance(congestion, CongestionLevel) else congestion
    return config.GREEN_TIME_BY_CONGESTION.get(level, config.DEFAULT_GREEN_TIME)

class SignalSystem:
    def update(self, signal: Signal) -> Signal:
        if signal.timer > 0:
            signal.timer -= 1
        else:
            self._switch_signal_phase(signal)
        return signal

    def _switch_signal_phase(self, signal: Signal):
        # Cycle: RED -> GREEN -> YELLOW -> RED
        if signal.currentLight == LightState.RED:
            signal.currentLight = LightState.GREEN
            signal.timer = green_duration(signal.congestion)
        elif signal.currentLight == LightState.GREEN:
            signal.currentLight = LightState.YELLOW
            signal.timer = config.YELLOW_TIME
        elif signal.currentLight == LightState.YELLOW:
            signal.currentLight = LightState.RED
            signal.timer = config.RED_TIME
        signal.phaseDuration = signal.timer

    def apply_override(self, signal: Signal, action: OverrideAction, duration: Optional[int] = None) -> Signal:
        light, default_duration = OVERRIDE_TARGETS[OverrideAction(action)]
        # A zero duration falls back to the default, same as an omitted one
        signal.currentLight = light
        signal.timer = duration or default_duration
        signal.phaseDuration = signal.timer
        return signal

    def apply_green_wave(self, signal: Signal, duration: Optional[int] = None) -> Signal:
        signal.currentLight = LightState.GREEN
        signal.timer = duration or config.GREEN_WAVE_TIME
        signal.phaseDuration = signal.timer
        signal.congestion = CongestionLevel.LOW
        signal.vehicles = max(config.GREEN_WAVE_MIN_VEHICLES, signal.vehicles * config.GREEN_WAVE_RETAIN_PERCENT // 100)
        return signal
