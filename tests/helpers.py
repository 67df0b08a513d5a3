import random
from datetime import datetime, timezone
from citysignal.domain.models import Coordinate, Route, SignalDefinition
from citysignal.kernel.simulation_kernel import SimulationKernel

FIXED_TIME = datetime(2026, 3, 1, 8, 30, tzinfo=timezone.utc)

def make_definitions():
    return [
        SignalDefinition(id="S1", name="Alpha Crossing", location=Coordinate(lat=22.5500, lng=88.3500), vehicles=150),
        SignalDefinition(id="S2", name="Beta Junction", location=Coordinate(lat=22.5600, lng=88.3600), vehicles=100),
        SignalDefinition(id="S3", name="Gamma Circle", location=Coordinate(lat=22.5700, lng=88.3700), vehicles=20),
    ]

def make_kernel(seed=42, definitions=None, **kwargs) -> SimulationKernel:
    kernel = SimulationKernel(rng=random.Random(seed), clock=lambda: FIXED_TIME, **kwargs)
    kernel.initialize(definitions if definitions is not None else make_definitions(), seed=seed)
    return kernel

def make_route(points, duration=600.0, distance=5000.0) -> Route:
    return Route(coordinates=points, duration=duration, distance=distance)

# Passes ~300m south of Alpha Crossing (88.35, 22.55)
NEAR_ALPHA = [(88.3400, 22.5473), (88.3600, 22.5473)]
# ~2km north of every test signal
FAR_AWAY = [(88.3400, 22.5900), (88.3600, 22.5900)]

class ScriptedRandom:
    """Stand-in for random.Random that replays fixed draws."""

    def __init__(self, floats=None, ints=None):
        self.floats = list(floats or [])
        self.ints = list(ints or [])
        self.randint_calls = []

    def random(self):
        return self.floats.pop(0) if self.floats else 0.99

    def randint(self, a, b):
        self.randint_calls.append((a, b))
        return self.ints.pop(0) if self.ints else 0

    def seed(self, value):
        pass
