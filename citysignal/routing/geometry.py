import math
from abc import ABC, abstractmethod
from typing import Tuple

Point = Tuple[float, float]

EARTH_RADIUS_M = 6371000.0

class DistanceStrategy(ABC):
    """Distance from a (lng, lat) point to a segment, in the unit its callers' radii use."""

    @abstractmethod
    def point_to_segment(self, p: Point, v: Point, w: Point) -> float:
        pass

class PlanarDistance(DistanceStrategy):
    """Euclidean distance in degree space. Good enough at city scale."""

    def point_to_segment(self, p: Point, v: Point, w: Point) -> float:
        l2 = (w[0] - v[0]) ** 2 + (w[1] - v[1]) ** 2
        if l2 == 0:
            return math.hypot(p[0] - v[0], p[1] - v[1])
        t = ((p[0] - v[0]) * (w[0] - v[0]) + (p[1] - v[1]) * (w[1] - v[1])) / l2
        t = max(0.0, min(1.0, t))
        proj = (v[0] + t * (w[0] - v[0]), v[1] + t * (w[1] - v[1]))
        return math.hypot(p[0] - proj[0], p[1] - proj[1])

class HaversineDistance(DistanceStrategy):
    """Great-circle distance in meters.

    The segment is projected onto a local equirectangular plane around the
    point to find the closest location, then the haversine formula gives the
    distance to it.
    """

    def point_to_segment(self, p: Point, v: Point, w: Point) -> float:
        scale = math.cos(math.radians(p[1]))
        px, py = p[0] * scale, p[1]
        vx, vy = v[0] * scale, v[1]
        wx, wy = w[0] * scale, w[1]
        l2 = (wx - vx) ** 2 + (wy - vy) ** 2
        t = 0.0
        if l2 > 0:
            t = max(0.0, min(1.0, ((px - vx) * (wx - vx) + (py - vy) * (wy - vy)) / l2))
        closest = (v[0] + t * (w[0] - v[0]), v[1] + t * (w[1] - v[1]))
        return self.haversine(p, closest)

    @staticmethod
    def haversine(a: Point, b: Point) -> float:
        lat1, lat2 = math.radians(a[1]), math.radians(b[1])
        d_lat = lat2 - lat1
        d_lng = math.radians(b[0] - a[0])
        h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
        return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))
