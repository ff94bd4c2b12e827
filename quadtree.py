# quadtree.py

import numpy as np
from collections import namedtuple
import logging
import numba

logger = logging.getLogger("particle_life")

# Closed bounding box of a QuadTree node, stored as its two corners.
BoundingBox = namedtuple('BoundingBox', ['min_x', 'min_y', 'max_x', 'max_y'])

@numba.jit(nopython=True)
def squared_distance(ax, ay, bx, by):
    """Shared by every spatial index so all strategies agree on boundary cases."""
    dx = bx - ax
    dy = by - ay
    return dx * dx + dy * dy

@numba.jit(nopython=True)
def _get_quadrant(px, py, center_x, center_y):
    """Determine which of the four quadrants a point belongs to."""
    if px < center_x:
        return 0 if py < center_y else 2 # NW or SW
    else:
        return 1 if py < center_y else 3 # NE or SE

@numba.jit(nopython=True)
def _build_tree_jit(positions, leaf_capacity, max_depth, node_boundaries, node_children,
                    node_start, node_count, node_depth, order, quadrants, scratch):
    """
    Top-down bucket quadtree construction over flat, preallocated arrays.

    Each node owns the contiguous slice order[start:start + count]. Nodes are
    processed in creation order (breadth-first), so no explicit stack is needed.
    A node splits only while it holds more than leaf_capacity particles and is
    shallower than max_depth, which bounds the work for coincident particles.
    """
    num_particles = positions.shape[0]
    for i in range(num_particles):
        order[i] = i

    node_start[0] = 0
    node_count[0] = num_particles
    node_depth[0] = 0
    next_node_idx = 1

    node_idx = 0
    while node_idx < next_node_idx:
        count = node_count[node_idx]
        if count <= leaf_capacity or node_depth[node_idx] >= max_depth:
            node_idx += 1
            continue

        min_x = node_boundaries[node_idx, 0]
        min_y = node_boundaries[node_idx, 1]
        max_x = node_boundaries[node_idx, 2]
        max_y = node_boundaries[node_idx, 3]
        center_x = 0.5 * (min_x + max_x)
        center_y = 0.5 * (min_y + max_y)
        start = node_start[node_idx]

        # 1. Classify every particle of this node
        counts = np.zeros(4, dtype=np.int64)
        for k in range(start, start + count):
            p_idx = order[k]
            q = _get_quadrant(positions[p_idx, 0], positions[p_idx, 1], center_x, center_y)
            quadrants[k] = q
            counts[q] += 1

        # 2. Counting sort the slice so each child owns a contiguous range
        offsets = np.empty(4, dtype=np.int64)
        offsets[0] = start
        for q in range(1, 4):
            offsets[q] = offsets[q - 1] + counts[q - 1]
        cursor = offsets.copy()
        for k in range(start, start + count):
            q = quadrants[k]
            scratch[cursor[q]] = order[k]
            cursor[q] += 1
        for k in range(start, start + count):
            order[k] = scratch[k]

        # 3. Allocate the four children from the pool. Children share the
        # parent's corners and the center exactly, so every particle stays
        # inside its leaf's closed box.
        for q in range(4):
            child_idx = next_node_idx
            next_node_idx += 1
            node_children[node_idx, q] = child_idx
            east = q == 1 or q == 3
            south = q >= 2
            node_boundaries[child_idx, 0] = center_x if east else min_x
            node_boundaries[child_idx, 1] = center_y if south else min_y
            node_boundaries[child_idx, 2] = max_x if east else center_x
            node_boundaries[child_idx, 3] = max_y if south else center_y
            node_start[child_idx] = offsets[q]
            node_count[child_idx] = counts[q]
            node_depth[child_idx] = node_depth[node_idx] + 1

        node_idx += 1

    return next_node_idx

@numba.jit(nopython=True)
def query_radius_jit(px, py, radius, positions, node_boundaries, node_children, node_start,
                     node_count, order, stack, out_indices, out_distances):
    """
    Collects every particle within `radius` of (px, py), boundary inclusive.
    Writes into the caller's buffers and returns the number of hits, so the
    parallel force kernel can reuse one set of buffers per worker. Hits past
    the end of the buffers are counted but not stored; a return value larger
    than the buffers means the caller must grow them and query again.
    """
    radius_sq = radius * radius
    found = 0
    stack[0] = 0
    top = 1
    while top > 0:
        top -= 1
        node_idx = stack[top]
        count = node_count[node_idx]
        if count == 0:
            continue

        # Distance from the point to the node's closed bounding box. Never
        # larger than the distance to any particle inside the box.
        min_x = node_boundaries[node_idx, 0]
        min_y = node_boundaries[node_idx, 1]
        max_x = node_boundaries[node_idx, 2]
        max_y = node_boundaries[node_idx, 3]
        dx = 0.0
        if px < min_x:
            dx = min_x - px
        elif px > max_x:
            dx = px - max_x
        dy = 0.0
        if py < min_y:
            dy = min_y - py
        elif py > max_y:
            dy = py - max_y
        if dx * dx + dy * dy > radius_sq:
            continue

        if node_children[node_idx, 0] == -1:
            start = node_start[node_idx]
            for k in range(start, start + count):
                p_idx = order[k]
                dist_sq = squared_distance(px, py, positions[p_idx, 0], positions[p_idx, 1])
                if dist_sq <= radius_sq:
                    if found < out_indices.shape[0]:
                        out_indices[found] = p_idx
                        out_distances[found] = np.sqrt(dist_sq)
                    found += 1
        else:
            for q in range(4):
                stack[top] = node_children[node_idx, q]
                top += 1
    return found

class QuadTree:
    """
    Bucket quadtree over the particle positions of a single tick.

    The tree is built directly into flattened NumPy arrays so the force kernel
    can traverse it in nopython mode. It is never updated incrementally: a new
    tree is built from each tick's positions, an accepted O(n log n) cost per
    tick in exchange for never holding stale indices.
    """
    strategy = "quadtree"

    def __init__(self, leaf_capacity: int = 8, max_depth: int = 20):
        self.leaf_capacity = leaf_capacity
        self.max_depth = max_depth
        self.boundary = BoundingBox(0.0, 0.0, 0.0, 0.0)
        self.positions = np.empty((0, 2), dtype=np.float64)
        self.node_boundaries = np.empty((0, 4), dtype=np.float64)
        self.node_children = np.empty((0, 4), dtype=np.int64)
        self.node_start = np.empty(0, dtype=np.int64)
        self.node_count = np.empty(0, dtype=np.int64)
        self.order = np.empty(0, dtype=np.int64)
        self.num_active_nodes = 0

    def _max_nodes(self, num_particles):
        # Internal nodes on one level hold disjoint sets of more than
        # leaf_capacity particles, and each split allocates four children.
        per_level = max(1, num_particles // (self.leaf_capacity + 1))
        return 1 + 4 * self.max_depth * per_level

    def build(self, positions: np.ndarray):
        positions = np.ascontiguousarray(positions, dtype=np.float64)
        num_particles = len(positions)
        self.positions = positions

        # The root covers the data itself, so every point lies inside its node's box.
        if num_particles > 0:
            min_x, min_y = positions.min(axis=0)
            max_x, max_y = positions.max(axis=0)
            self.boundary = BoundingBox(min_x, min_y, max_x, max_y)

        max_nodes = self._max_nodes(num_particles)
        self.node_boundaries = np.zeros((max_nodes, 4), dtype=np.float64)
        self.node_children = np.full((max_nodes, 4), -1, dtype=np.int64)
        self.node_start = np.zeros(max_nodes, dtype=np.int64)
        self.node_count = np.zeros(max_nodes, dtype=np.int64)
        node_depth = np.zeros(max_nodes, dtype=np.int64)
        self.order = np.empty(num_particles, dtype=np.int64)
        self.node_boundaries[0] = self.boundary

        self.num_active_nodes = _build_tree_jit(
            positions, self.leaf_capacity, self.max_depth,
            self.node_boundaries, self.node_children, self.node_start, self.node_count,
            node_depth, self.order,
            np.empty(num_particles, dtype=np.int64),
            np.empty(num_particles, dtype=np.int64)
        )
        logger.debug(f"QuadTree built: {num_particles} particles, {self.num_active_nodes} nodes.")
        return self

    def stack_size(self) -> int:
        return 4 * (self.max_depth + 2)

    def query(self, point, radius: float):
        """
        Returns (distances, indices) for every particle within `radius` of `point`.
        The result is unordered and may include a particle located at `point` itself.
        """
        num_particles = len(self.positions)
        out_indices = np.empty(num_particles, dtype=np.int64)
        out_distances = np.empty(num_particles, dtype=np.float64)
        if num_particles == 0:
            return out_distances, out_indices
        found = query_radius_jit(
            float(point[0]), float(point[1]), float(radius), self.positions,
            self.node_boundaries, self.node_children, self.node_start, self.node_count,
            self.order, np.empty(self.stack_size(), dtype=np.int64),
            out_indices, out_distances
        )
        return out_distances[:found], out_indices[:found]
