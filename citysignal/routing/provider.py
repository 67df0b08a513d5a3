import logging
from typing import Any, Dict, List, Optional, Protocol
import httpx
from citysignal.domain.errors import EmptyResultError, UpstreamUnavailableError
from citysignal.domain.models import Coordinate, Route, RouteStep

logger = logging.getLogger(__name__)

# OSRM answers 400 with one of these codes when the request was valid but
# no route exists between the points
NO_ROUTE_CODES = {"NoRoute", "NoSegment"}

class RoutingProvider(Protocol):
    async def fetch_routes(self, start: Coordinate, end: Coordinate) -> List[Route]:
        ...

def parse_step(step: Dict[str, Any]) -> RouteStep:
    maneuver = step.get("maneuver") or {}
    name = step.get("name") or ""
    instruction = " ".join(p for p in (maneuver.get("type"), maneuver.get("modifier")) if p)
    if name:
        instruction = f"{instruction} onto {name}" if instruction else name
    return RouteStep(
        instruction=instruction,
        name=name,
        distance=float(step.get("distance", 0.0)),
        duration=float(step.get("duration", 0.0))
    )

def parse_route(raw: Dict[str, Any]) -> Route:
    legs = raw.get("legs") or [{}]
    first_leg = legs[0]
    return Route(
        coordinates=[(float(lng), float(lat)) for lng, lat in raw["geometry"]["coordinates"]],
        duration=float(raw["duration"]),
        distance=float(raw["distance"]),
        steps=[parse_step(step) for step in first_leg.get("steps", [])],
        summary=first_leg.get("summary", "")
    )

class OsrmRoutingProvider:
    """Fetches driving alternatives from OSRM.

    Transport errors, timeouts, HTTP errors and unreadable payloads raise
    UpstreamUnavailableError. An answer without routes raises EmptyResultError.
    """

    def __init__(self, base_url: str = "https://router.project-osrm.org", timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def route_url(self, start: Coordinate, end: Coordinate) -> str:
        return f"{self.base_url}/route/v1/driving/{start.lng},{start.lat};{end.lng},{end.lat}"

    async def fetch_routes(self, start: Coordinate, end: Coordinate) -> List[Route]:
        url = self.route_url(start, end)
        params = {"alternatives": "true", "steps": "true", "overview": "full", "geometries": "geojson"}
        logger.info("Fetching OSRM: %s", url)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url, params=params)
        except httpx.TimeoutException as e:
            logger.warning("OSRM request timed out after %ss: %s", self.timeout, e)
            raise UpstreamUnavailableError("Routing provider timed out")
        except httpx.HTTPError as e:
            logger.warning("OSRM request failed: %s", e)
            raise UpstreamUnavailableError(f"Routing provider request failed: {e}")

        try:
            data = response.json()
        except ValueError:
            logger.warning("OSRM returned unreadable body (HTTP %s)", response.status_code)
            raise UpstreamUnavailableError("Routing provider returned an invalid response")

        if not isinstance(data, dict):
            raise UpstreamUnavailableError("Routing provider returned an invalid response")

        code = data.get("code")
        logger.info("OSRM Response Code: %s", code)
        if code in NO_ROUTE_CODES:
            raise EmptyResultError()
        if response.is_error:
            raise UpstreamUnavailableError(f"Routing provider answered HTTP {response.status_code}")

        raw_routes = data.get("routes")
        if not raw_routes:
            logger.info("OSRM No Routes: %s", data)
            raise EmptyResultError()

        try:
            return [parse_route(raw) for raw in raw_routes]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("OSRM route payload malformed: %s", e)
            raise UpstreamUnavailableError("Routing provider returned malformed routes")
