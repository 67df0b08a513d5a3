from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Protocol, Union
from citysignal.domain.models import Incident, IncidentStatus
from citysignal.domain.fixtures import load_incidents
from citysignal.domain import config

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

class IncidentRepository(Protocol):
    async def active_incidents(self) -> List[Incident]:
        ...

def is_active(incident: Incident, now: datetime, window: timedelta) -> bool:
    if incident.status == IncidentStatus.RESOLVED:
        return False
    created = incident.createdAt
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created >= now - window

class InMemoryIncidentRepository:
    """Incidents held in process memory, filtered to the active window on read."""

    def __init__(self, incidents: Optional[Iterable[Incident]] = None,
                 clock: Callable[[], datetime] = utc_now,
                 window_hours: float = config.INCIDENT_WINDOW_HOURS):
        self.incidents: List[Incident] = list(incidents or [])
        self.clock = clock
        self.window = timedelta(hours=window_hours)

    def add(self, incident: Incident):
        self.incidents.append(incident)

    async def active_incidents(self) -> List[Incident]:
        now = self.clock()
        return [i for i in self.incidents if is_active(i, now, self.window)]

class JsonFileIncidentRepository:
    """Read-only view of an incident feed exported as a JSON file.

    The file is re-read on every lookup so an external writer can update it
    while the service runs.
    """

    def __init__(self, path: Union[str, Path], clock: Callable[[], datetime] = utc_now,
                 window_hours: float = config.INCIDENT_WINDOW_HOURS):
        self.path = Path(path)
        self.clock = clock
        self.window = timedelta(hours=window_hours)

    async def active_incidents(self) -> List[Incident]:
        now = self.clock()
        return [i for i in load_incidents(self.path) if is_active(i, now, self.window)]
