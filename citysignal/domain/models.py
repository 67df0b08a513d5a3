from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

class LightState(str, Enum):
    RED = "RED"
    YELLOW = "YELLOW"
    GREEN = "GREEN"

class CongestionLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

class Weather(str, Enum):
    CLEAR = "CLEAR"
    RAIN = "RAIN"
    FOG = "FOG"

class OverrideAction(str, Enum):
    FORCE_GREEN = "forceGreen"
    FORCE_YELLOW = "forceYellow"
    FORCE_RED = "forceRed"

class IncidentStatus(str, Enum):
    PENDING = "PENDING"
    UNDER_INVESTIGATION = "UNDER_INVESTIGATION"
    RESOLVED = "RESOLVED"

class RouteMode(str, Enum):
    OPTIMAL = "optimal"
    SHORTEST = "shortest"

class Coordinate(BaseModel):
    lat: float
    lng: float

class SignalDefinition(BaseModel):
    id: str  # e.g., "SIG-001"
    name: str
    location: Coordinate
    vehicles: int = 0

class Signal(BaseModel):
    id: str
    name: str
    location: Coordinate
    vehicles: int
    trend: int = 1  # +1 rising, -1 falling
    currentLight: LightState = LightState.RED
    timer: int = 0
    phaseDuration: int = 10
    congestion: CongestionLevel = CongestionLevel.LOW
    avgSpeed: float = 0.0
    aqi: int = 0
    lastUpdated: Optional[datetime] = None

class TrafficSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    tick: int
    weather: Weather
    timestamp: datetime
    signals: Tuple[Signal, ...]

    def get_signal(self, signal_id: str) -> Optional[Signal]:
        for signal in self.signals:
            if signal.id == signal_id:
                return signal
        return None

class Incident(BaseModel):
    id: str
    type: str
    status: IncidentStatus = IncidentStatus.PENDING
    createdAt: datetime
    location: Optional[Coordinate] = None

# Routing

class RouteStep(BaseModel):
    instruction: str
    name: str = ""
    distance: float = 0.0
    duration: float = 0.0

class Route(BaseModel):
    coordinates: List[Tuple[float, float]]  # (lng, lat)
    duration: float  # seconds
    distance: float  # meters
    steps: List[RouteStep] = []
    summary: str = ""

class ScoredRoute(Route):
    congestionPenalty: int = 0
    congestionDetails: List[str] = []
    aiScore: float = 0.0
    formattedDuration: str = ""  # minutes
    formattedDistance: str = ""  # kilometers

# API/Request Models

class OverrideRequest(BaseModel):
    action: OverrideAction
    duration: Optional[int] = Field(default=None, ge=0)

class WeatherUpdate(BaseModel):
    weather: Weather

class WeatherStatus(BaseModel):
    weather: Weather
    speedMultiplier: float

class GreenWaveRequest(BaseModel):
    signalIds: List[str]
    duration: Optional[int] = Field(default=None, ge=0)

class CorridorRequest(BaseModel):
    route: List[Tuple[float, float]]  # (lng, lat)
    duration: Optional[int] = Field(default=None, ge=0)

class CorridorActivation(BaseModel):
    signalIds: List[str]
    duration: int
    status: str

class CommandAccepted(BaseModel):
    status: str
    target: Optional[str] = None

class RouteRequest(BaseModel):
    start: Optional[Coordinate] = None
    end: Optional[Coordinate] = None
    type: RouteMode = RouteMode.OPTIMAL

    @field_validator("start", "end", mode="before")
    @classmethod
    def incomplete_as_missing(cls, value):
        # A partial or malformed point counts as no point at all
        try:
            return Coordinate.model_validate(value) if value is not None else None
        except ValidationError:
            return None

class RouteOptimizationResult(BaseModel):
    routes: List[ScoredRoute]
    bestRouteIndex: int = 0
    aiReasoning: str
