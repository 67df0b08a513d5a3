import json
import logging
import random
import sys
import time
from collections import Counter
from typing import Any, Dict, List
from citysignal.domain.models import Weather
from citysignal.kernel.simulation_kernel import SimulationKernel

logger = logging.getLogger(__name__)

def summarize(snapshot) -> Dict[str, Any]:
    signals = snapshot.signals
    count = max(1, len(signals))
    return {
        "tick": snapshot.tick,
        "weather": snapshot.weather.value,
        "congestion": dict(Counter(s.congestion.value for s in signals)),
        "lights": dict(Counter(s.currentLight.value for s in signals)),
        "mean_vehicles": round(sum(s.vehicles for s in signals) / count, 2),
        "mean_speed": round(sum(s.avgSpeed for s in signals) / count, 2),
        "mean_aqi": round(sum(s.aqi for s in signals) / count, 2)
    }

def run_headless_experiment(output_path: str, duration_ticks: int = 100, seed: int = 42,
                            weather: Weather = Weather.CLEAR) -> List[Dict[str, Any]]:
    kernel = SimulationKernel(rng=random.Random(seed))
    kernel.initialize(seed=seed)
    kernel.set_weather(weather)

    results = []

    start_time = time.time()
    for _ in range(duration_ticks):
        snapshot = kernel.run_tick()
        results.append(summarize(snapshot))

    end_time = time.time()
    logger.info("Experiment finished in %.4fs", end_time - start_time)

    with open(output_path, 'w') as f:
        json.dump(results, f, indent=2)
    return results

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) > 1:
        ticks = int(sys.argv[2]) if len(sys.argv) > 2 else 100
        weather = Weather(sys.argv[3].upper()) if len(sys.argv) > 3 else Weather.CLEAR
        run_headless_experiment(sys.argv[1], ticks, weather=weather)
    else:
        print("Usage: python -m citysignal.experiments.run_experiment <output> [ticks] [weather]")
