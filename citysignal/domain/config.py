# Simulation Configuration

# Vehicle Flux
MIN_VEHICLES = 2
MAX_VEHICLES = 200
TREND_FLIP_CHANCE = 0.05
RISING_DELTA = (-5, 15)
FALLING_DELTA = (-15, 5)
METRIC_NOISE = (-10, 10)

# Congestion thresholds (vehicles)
LOW_CONGESTION_LIMIT = 60
MEDIUM_CONGESTION_LIMIT = 130

# Derived metrics
BASE_SPEED = 70.0        # km/h with an empty approach
SPEED_PER_VEHICLE = 0.45
MIN_SPEED = 2.0
BASE_AQI = 70
AQI_PER_VEHICLE = 0.6
MIN_AQI = 70
MAX_AQI = 190

WEATHER_SPEED_MULTIPLIER = {
    "CLEAR": 1.0,
    "RAIN": 0.8,
    "FOG": 0.6,
}

# Signal Timings (seconds)
GREEN_TIME_BY_CONGESTION = {
    "HIGH": 40,
    "MEDIUM": 20,
    "LOW": 10,
}
DEFAULT_GREEN_TIME = 15
YELLOW_TIME = 5
RED_TIME = 20
INITIAL_PHASE_DURATION = 10

# Override defaults (seconds)
OVERRIDE_GREEN_TIME = 30
OVERRIDE_RED_TIME = 30
OVERRIDE_YELLOW_TIME = 5

# Green wave
GREEN_WAVE_TIME = 45
GREEN_WAVE_RETAIN_PERCENT = 30  # share of queued vehicles left after clearing
GREEN_WAVE_MIN_VEHICLES = 5
CORRIDOR_RADIUS = 0.001  # degrees, ~110m

# Route scoring
SIGNAL_RADIUS = 0.005    # degrees, ~500m
INCIDENT_RADIUS = 0.004  # degrees, ~440m
HIGH_CONGESTION_PENALTY = 50
MEDIUM_CONGESTION_PENALTY = 20
INCIDENT_PENALTY = 5000
INCIDENT_PENALTY_FLOOR = 400     # penalty at or above this means an incident was hit
SHORTEST_INCIDENT_PENALTY = 10000  # seconds, ordering only
REASONING_NAME_LIMIT = 2

# Incidents
INCIDENT_WINDOW_HOURS = 24

# Loop
TICK_INTERVAL = 1.0
