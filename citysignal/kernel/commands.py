from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional
from citysignal.domain.models import OverrideAction, Weather

class Command(ABC):
    @abstractmethod
    def execute(self, kernel: Any):
        pass

class OverrideSignalCommand(Command):
    def __init__(self, signal_id: str, action: OverrideAction, duration: Optional[int] = None):
        self.signal_id = signal_id
        self.action = action
        self.duration = duration

    def execute(self, kernel: Any):
        return kernel.apply_override(self.signal_id, self.action, self.duration)

class SetWeatherCommand(Command):
    def __init__(self, weather: Weather):
        self.weather = weather

    def execute(self, kernel: Any):
        return kernel.set_weather(self.weather)

class ActivateGreenWaveCommand(Command):
    def __init__(self, signal_ids: Iterable[str], duration: Optional[int] = None):
        self.signal_ids = list(signal_ids)
        self.duration = duration

    def execute(self, kernel: Any):
        return kernel.activate_green_wave(self.signal_ids, self.duration)
