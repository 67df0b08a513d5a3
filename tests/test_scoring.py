import unittest
from datetime import datetime, timezone
from citysignal.domain.errors import EmptyResultError
from citysignal.domain.models import (
    Coordinate, CongestionLevel, Incident, IncidentStatus, RouteMode, Signal
)
from citysignal.routing.geometry import HaversineDistance, PlanarDistance
from citysignal.routing.scoring import RouteScorer
from helpers import FAR_AWAY, NEAR_ALPHA, make_route

CREATED = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)

def make_signal(name="Alpha Crossing", lat=22.55, lng=88.35, vehicles=150, congestion=CongestionLevel.HIGH) -> Signal:
    return Signal(id=name[:3].upper(), name=name, location=Coordinate(lat=lat, lng=lng), vehicles=vehicles, congestion=congestion)

def make_incident(lat=22.55, lng=88.35, kind="Accident", status=IncidentStatus.PENDING, incident_id="INC-1") -> Incident:
    return Incident(id=incident_id, type=kind, status=status, createdAt=CREATED, location=Coordinate(lat=lat, lng=lng))

class TestPlanarDistance(unittest.TestCase):
    def test_projection_onto_segment(self):
        d = PlanarDistance().point_to_segment((1.0, 1.0), (0.0, 0.0), (2.0, 0.0))
        self.assertAlmostEqual(d, 1.0)

    def test_clamps_to_endpoints(self):
        d = PlanarDistance().point_to_segment((5.0, 4.0), (0.0, 0.0), (2.0, 0.0))
        self.assertAlmostEqual(d, 5.0)

    def test_degenerate_segment(self):
        d = PlanarDistance().point_to_segment((3.0, 4.0), (0.0, 0.0), (0.0, 0.0))
        self.assertAlmostEqual(d, 5.0)

    def test_haversine_is_metric(self):
        d = HaversineDistance().point_to_segment((88.35, 22.55), (88.34, 22.5473), (88.36, 22.5473))
        self.assertTrue(280 < d < 320, d)

class TestSignalPenalties(unittest.TestCase):
    def setUp(self):
        self.scorer = RouteScorer()

    def test_high_congestion_scenario(self):
        signals = [make_signal()]
        route_a = make_route(NEAR_ALPHA, duration=600)
        route_b = make_route(FAR_AWAY, duration=600)

        result = self.scorer.optimize([route_a, route_b], signals, [], RouteMode.OPTIMAL)

        best, other = result.routes
        self.assertEqual(result.bestRouteIndex, 0)
        self.assertEqual(best.coordinates, FAR_AWAY)
        self.assertEqual(best.congestionPenalty, 0)
        self.assertAlmostEqual(best.aiScore, 10.0)
        self.assertEqual(other.congestionPenalty, 50)
        self.assertAlmostEqual(other.aiScore, 60.0)
        self.assertEqual(other.congestionDetails, ["Alpha Crossing"])
        self.assertIn("Alpha Crossing", result.aiReasoning)
        self.assertIn("avoid heavy congestion", result.aiReasoning)

    def test_high_signal_counted_once_per_route(self):
        route = make_route([(88.3450, 22.5480), (88.3500, 22.5480), (88.3550, 22.5480)])
        scored = self.scorer.score_route(route, [make_signal()], [])
        self.assertEqual(scored.congestionPenalty, 50)
        self.assertEqual(scored.congestionDetails, ["Alpha Crossing"])

    def test_medium_signal_counted_per_segment(self):
        route = make_route([(88.3450, 22.5480), (88.3500, 22.5480), (88.3550, 22.5480)])
        medium = make_signal(vehicles=100, congestion=CongestionLevel.MEDIUM)

        scored = self.scorer.score_route(route, [medium], [])
        self.assertEqual(scored.congestionPenalty, 40)
        self.assertEqual(scored.congestionDetails, [])

        deduped = RouteScorer(dedupe_medium=True).score_route(route, [medium], [])
        self.assertEqual(deduped.congestionPenalty, 20)

    def test_low_and_distant_signals_ignored(self):
        low = make_signal(vehicles=20, congestion=CongestionLevel.LOW)
        far = make_signal(name="Far Away Junction", lat=22.60)
        scored = self.scorer.score_route(make_route(NEAR_ALPHA), [low, far], [])
        self.assertEqual(scored.congestionPenalty, 0)

    def test_display_fields(self):
        scored = self.scorer.score_route(make_route(FAR_AWAY, duration=754, distance=2500), [], [])
        self.assertEqual(scored.formattedDuration, "12.6")
        self.assertEqual(scored.formattedDistance, "2.50")

    def test_haversine_strategy_swaps_in(self):
        scorer = RouteScorer(distance=HaversineDistance(), signal_radius=500, incident_radius=440)
        near = scorer.score_route(make_route(NEAR_ALPHA), [make_signal()], [])
        far = scorer.score_route(make_route(FAR_AWAY), [make_signal()], [])
        self.assertEqual(near.congestionPenalty, 50)
        self.assertEqual(far.congestionPenalty, 0)

class TestIncidentPenalties(unittest.TestCase):
    def setUp(self):
        self.scorer = RouteScorer()

    def test_incident_penalty_in_both_modes(self):
        route_c = make_route(NEAR_ALPHA, duration=300)
        route_d = make_route(FAR_AWAY, duration=900)
        incidents = [make_incident()]

        for mode in (RouteMode.OPTIMAL, RouteMode.SHORTEST):
            result = self.scorer.optimize([route_c, route_d], [], incidents, mode)
            self.assertEqual(len(result.routes), 2)
            self.assertEqual(result.routes[0].coordinates, FAR_AWAY)
            self.assertEqual(result.routes[1].coordinates, NEAR_ALPHA)
            self.assertGreaterEqual(result.routes[1].congestionPenalty, 5000)
            self.assertEqual(result.routes[1].congestionDetails, ["Incident: Accident"])

    def test_shortest_mode_ignores_congestion(self):
        congested = make_route(NEAR_ALPHA, duration=300)
        clear = make_route(FAR_AWAY, duration=900)
        result = self.scorer.optimize([clear, congested], [make_signal()], [], RouteMode.SHORTEST)
        self.assertEqual(result.routes[0].coordinates, NEAR_ALPHA)
        self.assertEqual(result.routes[0].congestionPenalty, 50)
        self.assertIn("absolute shortest travel time", result.aiReasoning)

    def test_incident_label_dedup(self):
        incidents = [make_incident(incident_id="INC-1"), make_incident(lng=88.352, incident_id="INC-2"),
                     make_incident(kind="Roadwork", incident_id="INC-3")]
        scored = self.scorer.score_route(make_route(NEAR_ALPHA), [], incidents)
        self.assertEqual(scored.congestionPenalty, 10000)
        self.assertEqual(scored.congestionDetails, ["Incident: Accident", "Incident: Roadwork"])

    def test_resolved_and_unlocated_incidents_ignored(self):
        resolved = make_incident(status=IncidentStatus.RESOLVED)
        unlocated = Incident(id="INC-9", type="Fire", createdAt=CREATED)
        scored = self.scorer.score_route(make_route(NEAR_ALPHA), [], [resolved, unlocated])
        self.assertEqual(scored.congestionPenalty, 0)

    def test_incident_radius(self):
        # ~0.0045 deg away: inside the signal radius but outside the incident radius
        scored = self.scorer.score_route(make_route([(88.34, 22.5455), (88.36, 22.5455)]), [], [make_incident()])
        self.assertEqual(scored.congestionPenalty, 0)

class TestReasoning(unittest.TestCase):
    def setUp(self):
        self.scorer = RouteScorer()

    def test_shortest_with_incident_everywhere(self):
        result = self.scorer.optimize([make_route(NEAR_ALPHA)], [], [make_incident()], RouteMode.SHORTEST)
        self.assertEqual(result.aiReasoning, "Even the shortest route has a reported incident. Use caution.")

    def test_stable_traffic(self):
        result = self.scorer.optimize(
            [make_route(FAR_AWAY, duration=900), make_route(FAR_AWAY, duration=600)], [], [], RouteMode.OPTIMAL)
        self.assertEqual(result.routes[0].duration, 600)
        self.assertEqual(result.aiReasoning, "Traffic conditions are stable, so the shortest route is also the optimal one.")

    def test_single_congested_route(self):
        result = self.scorer.optimize([make_route(NEAR_ALPHA)], [make_signal()], [], RouteMode.OPTIMAL)
        self.assertEqual(result.aiReasoning,
                         "Heavy traffic detected at Alpha Crossing, but this remains the most efficient option.")

    def test_runner_up_without_named_details(self):
        medium = make_signal(vehicles=100, congestion=CongestionLevel.MEDIUM)
        result = self.scorer.optimize(
            [make_route(NEAR_ALPHA, duration=600), make_route(FAR_AWAY, duration=600)], [medium], [], RouteMode.OPTIMAL)
        self.assertEqual(result.aiReasoning,
                         "AI recommended this route to avoid heavy congestion detected at key intersections.")

    def test_names_limited_to_two(self):
        signals = [
            make_signal(name="Alpha Crossing", lng=88.342),
            make_signal(name="Beta Junction", lng=88.350),
            make_signal(name="Gamma Circle", lng=88.358),
        ]
        result = self.scorer.optimize(
            [make_route(NEAR_ALPHA), make_route(FAR_AWAY)], signals, [], RouteMode.OPTIMAL)
        self.assertEqual(result.routes[1].congestionDetails, ["Alpha Crossing", "Beta Junction", "Gamma Circle"])
        self.assertIn("Alpha Crossing, Beta Junction.", result.aiReasoning)
        self.assertNotIn("Gamma Circle", result.aiReasoning)

    def test_balanced_default(self):
        result = self.scorer.optimize(
            [make_route(FAR_AWAY), make_route(FAR_AWAY)], [], [], RouteMode.OPTIMAL)
        self.assertEqual(result.aiReasoning, "This is the best balance of speed and traffic avoidance.")

    def test_empty_routes(self):
        with self.assertRaises(EmptyResultError):
            self.scorer.optimize([], [make_signal()], [], RouteMode.OPTIMAL)

if __name__ == '__main__':
    unittest.main()
