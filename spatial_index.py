# spatial_index.py

import numpy as np
import logging
import numba
from config_validation import ConfigurationError, SPATIAL_INDEX_STRATEGIES
from quadtree import QuadTree, squared_distance

logger = logging.getLogger("particle_life")

@numba.jit(nopython=True)
def scan_radius_jit(px, py, radius, positions, out_indices, out_distances):
    """
    O(n) exact scan over every particle. Same output layout and overflow
    behaviour as query_radius_jit.
    """
    radius_sq = radius * radius
    found = 0
    for p_idx in range(positions.shape[0]):
        dist_sq = squared_distance(px, py, positions[p_idx, 0], positions[p_idx, 1])
        if dist_sq <= radius_sq:
            if found < out_indices.shape[0]:
                out_indices[found] = p_idx
                out_distances[found] = np.sqrt(dist_sq)
            found += 1
    return found

class BruteForceIndex:
    """
    Radius queries by scanning every particle. O(n) per query, O(n^2) per tick.
    Adequate for a few thousand particles and used as the reference the
    QuadTree is checked against.
    """
    strategy = "brute_force"

    def __init__(self):
        self.positions = np.empty((0, 2), dtype=np.float64)

    def build(self, positions: np.ndarray):
        self.positions = np.ascontiguousarray(positions, dtype=np.float64)
        return self

    def query(self, point, radius: float):
        """Returns (distances, indices), unordered, self-inclusion allowed."""
        num_particles = len(self.positions)
        out_indices = np.empty(num_particles, dtype=np.int64)
        out_distances = np.empty(num_particles, dtype=np.float64)
        found = scan_radius_jit(
            float(point[0]), float(point[1]), float(radius), self.positions,
            out_indices, out_distances
        )
        return out_distances[:found], out_indices[:found]

def build_spatial_index(positions: np.ndarray, strategy: str = "quadtree",
                        leaf_capacity: int = 8, max_depth: int = 20):
    """
    Builds a fresh index over `positions` with the named strategy.

    Data Contract:
    - Inputs:
        - positions (np.ndarray): (n, 2) particle positions. Row i is particle i.
        - strategy (str): One of SPATIAL_INDEX_STRATEGIES.
        - leaf_capacity, max_depth (int): QuadTree tuning, ignored by brute force.
    - Outputs: A BruteForceIndex or QuadTree whose queries report row indices
      into `positions`.
    - Invariants: The index is only valid for the positions it was built from.
    """
    if strategy == "quadtree":
        return QuadTree(leaf_capacity=leaf_capacity, max_depth=max_depth).build(positions)
    if strategy == "brute_force":
        return BruteForceIndex().build(positions)
    raise ConfigurationError(
        f"Unknown spatial index '{strategy}'. Expected one of: {', '.join(SPATIAL_INDEX_STRATEGIES)}"
    )
