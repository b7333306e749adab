"""
Edge extraction

Turns a closed parcel ring into ordered boundary edges
"""

from typing import List, Sequence

from .utils import distance_meters, midpoint
from ..models import Edge, Position


def extract_edges(ring: Sequence[Position]) -> List[Edge]:
    """
    Build one edge per consecutive vertex pair

    The closing vertex is not re-emitted, so a ring of N points yields N-1
    edges. Rings with fewer than two points yield no edges.
    """
    if len(ring) < 2:
        return []

    edges = []
    for i in range(len(ring) - 1):
        start = (float(ring[i][0]), float(ring[i][1]))
        end = (float(ring[i + 1][0]), float(ring[i + 1][1]))
        edges.append(Edge(
            index=i,
            start=start,
            end=end,
            midpoint=midpoint(start, end),
            length_m=distance_meters(start, end),
        ))

    return edges
