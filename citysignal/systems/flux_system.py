import random
from typing import Optional
from citysignal.domain.models import Signal, CongestionLevel, Weather
from citysignal.domain import config

def congestion_for(vehicles: int) -> CongestionLevel:
    if vehicles < config.LOW_CONGESTION_LIMIT:
        return CongestionLevel.LOW
    if vehicles < config.MEDIUM_CONGESTION_LIMIT:
        return CongestionLevel.MEDIUM
    return CongestionLevel.HIGH

def speed_multiplier(weather: Weather) -> float:
    return config.WEATHER_SPEED_MULTIPLIER.get(Weather(weather).value, 1.0)

def clamp(value, low, high):
    return max(low, min(high, value))

class FluxSystem:
    """Trend-biased random walk of the queued vehicle count at each signal."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def advance(self, signal: Signal, weather: Weather = Weather.CLEAR) -> Signal:
        if self.rng.random() < config.TREND_FLIP_CHANCE:
            signal.trend *= -1

        low, high = config.RISING_DELTA if signal.trend == 1 else config.FALLING_DELTA
        change = self.rng.randint(low, high)
        signal.vehicles = clamp(signal.vehicles + change, config.MIN_VEHICLES, config.MAX_VEHICLES)
        signal.congestion = congestion_for(signal.vehicles)

        # Speed falls with queue length; weather scales the result
        speed = config.BASE_SPEED - signal.vehicles * config.SPEED_PER_VEHICLE + self.rng.randint(*config.METRIC_NOISE)
        signal.avgSpeed = round(max(config.MIN_SPEED, speed * speed_multiplier(weather)), 1)

        aqi = config.BASE_AQI + signal.vehicles * config.AQI_PER_VEHICLE + self.rng.randint(*config.METRIC_NOISE)
        signal.aqi = clamp(round(aqi), config.MIN_AQI, config.MAX_AQI)
        return signal
