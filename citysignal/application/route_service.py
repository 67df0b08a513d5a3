import logging
from typing import Optional
from citysignal.domain.errors import InvalidRequestError
from citysignal.domain.models import Coordinate, RouteMode, RouteOptimizationResult
from citysignal.kernel.simulation_kernel import SimulationKernel
from citysignal.routing.incidents import IncidentRepository
from citysignal.routing.provider import RoutingProvider
from citysignal.routing.scoring import RouteScorer

logger = logging.getLogger(__name__)

class RouteOptimizationService:
    """Fetches candidate routes and ranks them against live traffic."""

    def __init__(self, kernel: SimulationKernel, provider: RoutingProvider,
                 incidents: IncidentRepository, scorer: Optional[RouteScorer] = None):
        self.kernel = kernel
        self.provider = provider
        self.incidents = incidents
        self.scorer = scorer or RouteScorer()

    async def optimize_route(self, start: Optional[Coordinate], end: Optional[Coordinate],
                             mode: RouteMode = RouteMode.OPTIMAL) -> RouteOptimizationResult:
        if start is None or end is None:
            raise InvalidRequestError()

        routes = await self.provider.fetch_routes(start, end)
        active_incidents = await self.incidents.active_incidents()
        logger.info("Active Incidents Found: %d", len(active_incidents))

        # Scoring is synchronous, so the tick task cannot interleave with it
        snapshot = self.kernel.get_snapshot()
        return self.scorer.optimize(routes, snapshot.signals, active_incidents, mode)
