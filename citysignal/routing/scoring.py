import logging
from typing import List, Optional, Sequence
from citysignal.domain import config
from citysignal.domain.errors import EmptyResultError
from citysignal.domain.models import (
    CongestionLevel, Incident, IncidentStatus, Route, RouteMode,
    RouteOptimizationResult, ScoredRoute, Signal,
)
from citysignal.routing.geometry import DistanceStrategy, PlanarDistance

logger = logging.getLogger(__name__)

def incident_label(incident: Incident) -> str:
    return f"Incident: {incident.type}"

class RouteScorer:
    """Scores and orders routes.

    Signals and incidents near a route segment add penalties; the penalty plus
    the travel time in minutes gives ``aiScore``.

    ``dedupe_medium`` controls whether a MEDIUM-congestion signal is counted
    once per route, like HIGH ones, or once per segment that passes it. The
    per-segment behaviour is the default.
    """

    def __init__(self, distance: Optional[DistanceStrategy] = None,
                 signal_radius: float = config.SIGNAL_RADIUS,
                 incident_radius: float = config.INCIDENT_RADIUS,
                 dedupe_medium: bool = False):
        self.distance = distance or PlanarDistance()
        self.signal_radius = signal_radius
        self.incident_radius = incident_radius
        self.dedupe_medium = dedupe_medium

    def score_route(self, route: Route, signals: Sequence[Signal], incidents: Sequence[Incident]) -> ScoredRoute:
        penalty = 0
        details: List[str] = []
        medium_seen = set()

        coords = route.coordinates
        for start, end in zip(coords, coords[1:]):
            for signal in signals:
                point = (signal.location.lng, signal.location.lat)
                if self.distance.point_to_segment(point, start, end) >= self.signal_radius:
                    continue
                if signal.name in details:
                    continue
                if signal.congestion == CongestionLevel.HIGH:
                    penalty += config.HIGH_CONGESTION_PENALTY
                    details.append(signal.name)
                elif signal.congestion == CongestionLevel.MEDIUM:
                    if self.dedupe_medium:
                        if signal.name in medium_seen:
                            continue
                        medium_seen.add(signal.name)
                    penalty += config.MEDIUM_CONGESTION_PENALTY

            for incident in incidents:
                if incident.status == IncidentStatus.RESOLVED or incident.location is None:
                    continue
                point = (incident.location.lng, incident.location.lat)
                if self.distance.point_to_segment(point, start, end) < self.incident_radius:
                    label = incident_label(incident)
                    if label not in details:
                        penalty += config.INCIDENT_PENALTY
                        details.append(label)

        duration_mins = route.duration / 60
        return ScoredRoute(
            **route.model_dump(),
            congestionPenalty=penalty,
            congestionDetails=details,
            aiScore=duration_mins + penalty,
            formattedDuration=f"{duration_mins:.1f}",
            formattedDistance=f"{route.distance / 1000:.2f}"
        )

    def rank(self, scored: List[ScoredRoute], mode: RouteMode) -> List[ScoredRoute]:
        if RouteMode(mode) == RouteMode.SHORTEST:
            # Incident routes stay in the list but drop behind clean ones
            def effective_duration(route: ScoredRoute) -> float:
                extra = config.SHORTEST_INCIDENT_PENALTY if route.congestionPenalty >= config.INCIDENT_PENALTY_FLOOR else 0
                return route.duration + extra
            return sorted(scored, key=effective_duration)
        return sorted(scored, key=lambda route: route.aiScore)

    def reasoning(self, ranked: List[ScoredRoute], mode: RouteMode) -> str:
        best = ranked[0]

        if RouteMode(mode) == RouteMode.SHORTEST:
            if best.congestionPenalty >= config.INCIDENT_PENALTY_FLOOR:
                return "Even the shortest route has a reported incident. Use caution."
            return "We selected the route with the absolute shortest travel time, regardless of potential congestion."

        if len(ranked) > 1:
            alternative = ranked[1]
            if best.congestionPenalty < alternative.congestionPenalty:
                places = ", ".join(alternative.congestionDetails[:config.REASONING_NAME_LIMIT]) or "key intersections"
                return f"AI recommended this route to avoid heavy congestion detected at {places}."
            if best.duration < alternative.duration:
                return "Traffic conditions are stable, so the shortest route is also the optimal one."
        elif best.congestionPenalty > 0:
            places = ", ".join(best.congestionDetails[:config.REASONING_NAME_LIMIT])
            return f"Heavy traffic detected at {places}, but this remains the most efficient option."

        return "This is the best balance of speed and traffic avoidance."

    def optimize(self, routes: Sequence[Route], signals: Sequence[Signal], incidents: Sequence[Incident],
                 mode: RouteMode = RouteMode.OPTIMAL) -> RouteOptimizationResult:
        if not routes:
            raise EmptyResultError()

        scored = [self.score_route(route, signals, incidents) for route in routes]
        ranked = self.rank(scored, mode)
        reasoning = self.reasoning(ranked, mode)
        logger.debug("Ranked %d routes (%s): best aiScore %.1f", len(ranked), RouteMode(mode).value, ranked[0].aiScore)
        return RouteOptimizationResult(routes=ranked, bestRouteIndex=0, aiReasoning=reasoning)
