from datetime import datetime
from typing import Any, Dict
from citysignal.domain.models import TrafficSnapshot
from citysignal.domain.state import SimulationState

class SnapshotBuilder:
    def build(self, state: SimulationState, timestamp: datetime) -> TrafficSnapshot:
        # Deep copies so a later tick cannot mutate a snapshot someone is reading
        return TrafficSnapshot(
            tick=state.tick_id,
            weather=state.weather,
            timestamp=timestamp,
            signals=tuple(s.model_copy(deep=True) for s in state.signals.values())
        )

    def traffic_payload(self, snapshot: TrafficSnapshot) -> Dict[str, Any]:
        return {
            "type": "trafficUpdate",
            "tick": snapshot.tick,
            "weather": snapshot.weather.value,
            "timestamp": snapshot.timestamp.isoformat(),
            "signals": [
                {
                    "id": s.id,
                    "name": s.name,
                    "location": {"lat": s.location.lat, "lng": s.location.lng},
                    "vehicles": s.vehicles,
                    "congestion": s.congestion.value,
                    "currentLight": s.currentLight.value,
                    "timer": s.timer,
                    "phaseDuration": s.phaseDuration,
                    "avgSpeed": s.avgSpeed,
                    "aqi": s.aqi,
                    "lastUpdated": s.lastUpdated.isoformat() if s.lastUpdated else None
                }
                for s in snapshot.signals
            ]
        }

    def weather_payload(self, snapshot: TrafficSnapshot) -> Dict[str, Any]:
        return {"type": "weatherUpdate", "weather": snapshot.weather.value}
