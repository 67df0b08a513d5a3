import json
from pathlib import Path
from typing import Any, List, Optional, Union
from citysignal.domain.models import Incident, SignalDefinition

DEFAULT_SIGNALS_FILE = Path(__file__).resolve().parent.parent / "data" / "signals.json"

def _read_json(path: Union[str, Path]) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)

def load_signal_definitions(path: Optional[Union[str, Path]] = None) -> List[SignalDefinition]:
    """Reads the static signal fixture (id, name, location, starting vehicles)."""
    return [SignalDefinition(**entry) for entry in _read_json(path or DEFAULT_SIGNALS_FILE)]

def load_incidents(path: Union[str, Path]) -> List[Incident]:
    """Reads reported incidents (id, type, status, createdAt, location) from a JSON list."""
    return [Incident(**entry) for entry in _read_json(path)]
