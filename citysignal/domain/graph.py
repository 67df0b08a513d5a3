import math
import networkx as nx
from typing import Iterable, List, Optional, Sequence, Tuple
from citysignal.domain.models import SignalDefinition
from citysignal.routing.geometry import DistanceStrategy, PlanarDistance

class SignalNetwork:
    def __init__(self, distance: Optional[DistanceStrategy] = None):
        self.graph = nx.Graph()
        self.distance = distance or PlanarDistance()

    @classmethod
    def from_definitions(cls, definitions: Iterable[SignalDefinition]) -> "SignalNetwork":
        network = cls()
        for definition in definitions:
            network.add_signal(definition.id, (definition.location.lng, definition.location.lat), name=definition.name)
        return network

    def add_signal(self, signal_id: str, pos: Tuple[float, float], name: str = ""):
        self.graph.add_node(signal_id, pos=pos, name=name, type="signal")

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def corridor(self, route: Sequence[Tuple[float, float]], radius: float) -> List[str]:
        """Signals within ``radius`` of the (lng, lat) polyline, in route order."""
        if not route:
            return []
        segments = list(zip(route, route[1:])) or [(route[0], route[0])]

        hits = []
        for signal_id, pos in self.graph.nodes(data='pos'):
            for index, (start, end) in enumerate(segments):
                if self.distance.point_to_segment(pos, start, end) < radius:
                    hits.append((index, math.hypot(pos[0] - start[0], pos[1] - start[1]), signal_id))
                    break

        # Route order: segment first, then distance from the segment start
        hits.sort(key=lambda hit: (hit[0], hit[1]))
        return [signal_id for _, _, signal_id in hits]
