from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict
from citysignal.domain.models import Signal, Weather
from citysignal.domain.graph import SignalNetwork

class SimulationState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    tick_id: int = 0
    signals: Dict[str, Signal] = {}
    weather: Weather = Weather.CLEAR

    # Graph of signal locations, used for corridor lookups
    signal_network: Optional[SignalNetwork] = None
