# integrator.py

import numpy as np
import logging
import numba
from collections import namedtuple
from numba import prange
from force_law import force
from quadtree import query_radius_jit
from spatial_index import scan_radius_jit

logger = logging.getLogger("particle_life")

# An external impulse pulling every particle toward `target` for one tick.
PointerStimulus = namedtuple('PointerStimulus', ['target', 'magnitude'])

# --- JIT-Compiled Force Kernels ---
# Both kernels fan out over chunks of particles. Each chunk owns its neighbor
# buffers, reads only the tick's read-only positions and index, and writes only
# its own rows of `forces`, so no locking is needed.

@numba.jit(nopython=True, fastmath=True)
def _sum_pair_forces_jit(i, positions, colors, attractions, cutoff, beta, neighbor_indices, neighbor_distances, count):
    """
    Net interaction force on particle i from its queried neighbors, scaled by
    the cutoff radius. Neighbors are excluded by index, never by value.
    """
    p_pos_x = positions[i, 0]
    p_pos_y = positions[i, 1]
    color_i = colors[i]
    total_x = 0.0
    total_y = 0.0
    for k in range(count):
        j = neighbor_indices[k]
        if j == i:
            continue
        distance = neighbor_distances[k]
        # Coincident particles have no direction; they contribute nothing.
        if distance == 0.0:
            continue
        f = force(distance / cutoff, attractions[color_i, colors[j]], beta)
        total_x += (positions[j, 0] - p_pos_x) / distance * f
        total_y += (positions[j, 1] - p_pos_y) / distance * f
    return total_x * cutoff, total_y * cutoff

@numba.jit(nopython=True, parallel=True, fastmath=True)
def _compute_forces_quadtree_jit(positions, colors, attractions, cutoff, beta, num_chunks, buffer_size,
                                 node_boundaries, node_children, node_start, node_count, order,
                                 stack_size, forces):
    num_particles = positions.shape[0]
    chunk_size = (num_particles + num_chunks - 1) // num_chunks
    for c in prange(num_chunks):
        neighbor_indices = np.empty(buffer_size, dtype=np.int64)
        neighbor_distances = np.empty(buffer_size, dtype=np.float64)
        stack = np.empty(stack_size, dtype=np.int64)
        start = c * chunk_size
        end = min(num_particles, start + chunk_size)
        for i in range(start, end):
            count = query_radius_jit(
                positions[i, 0], positions[i, 1], cutoff, positions,
                node_boundaries, node_children, node_start, node_count, order,
                stack, neighbor_indices, neighbor_distances
            )
            # Dense neighborhood: grow this worker's buffers and query again
            if count > neighbor_indices.shape[0]:
                neighbor_indices = np.empty(2 * count, dtype=np.int64)
                neighbor_distances = np.empty(2 * count, dtype=np.float64)
                count = query_radius_jit(
                    positions[i, 0], positions[i, 1], cutoff, positions,
                    node_boundaries, node_children, node_start, node_count, order,
                    stack, neighbor_indices, neighbor_distances
                )
            fx, fy = _sum_pair_forces_jit(i, positions, colors, attractions, cutoff, beta,
                                          neighbor_indices, neighbor_distances, count)
            forces[i, 0] = fx
            forces[i, 1] = fy

@numba.jit(nopython=True, parallel=True, fastmath=True)
def _compute_forces_brute_force_jit(positions, colors, attractions, cutoff, beta, num_chunks, buffer_size, forces):
    num_particles = positions.shape[0]
    chunk_size = (num_particles + num_chunks - 1) // num_chunks
    for c in prange(num_chunks):
        neighbor_indices = np.empty(buffer_size, dtype=np.int64)
        neighbor_distances = np.empty(buffer_size, dtype=np.float64)
        start = c * chunk_size
        end = min(num_particles, start + chunk_size)
        for i in range(start, end):
            count = scan_radius_jit(positions[i, 0], positions[i, 1], cutoff, positions,
                                    neighbor_indices, neighbor_distances)
            if count > neighbor_indices.shape[0]:
                neighbor_indices = np.empty(2 * count, dtype=np.int64)
                neighbor_distances = np.empty(2 * count, dtype=np.float64)
                count = scan_radius_jit(positions[i, 0], positions[i, 1], cutoff, positions,
                                        neighbor_indices, neighbor_distances)
            fx, fy = _sum_pair_forces_jit(i, positions, colors, attractions, cutoff, beta,
                                          neighbor_indices, neighbor_distances, count)
            forces[i, 0] = fx
            forces[i, 1] = fy


def _safe_normalize(vectors: np.ndarray) -> np.ndarray:
    """Row-wise unit vectors; zero-length rows map to zero instead of NaN."""
    lengths = np.sqrt(np.sum(vectors**2, axis=1, keepdims=True))
    unit = np.zeros_like(vectors)
    np.divide(vectors, lengths, out=unit, where=lengths > 0)
    return unit


class Integrator:
    """
    Advances a Population by one fixed time step.

    Data Contract:
    - Inputs:
        - cutoff_radius (float): Maximum interaction distance.
        - beta (float): Repulsion-core fraction of the force law.
        - friction_half_life (float): Time for an unforced velocity to halve.
        - neighbor_buffer_size (int): Starting size of each worker's neighbor
          buffers. They grow when a neighborhood does not fit.
    - Outputs: None.
    - Invariants: step() never modifies its inputs. Results do not depend on
      how particles are split across worker threads or on the buffer size.
    """
    def __init__(self, cutoff_radius: float, beta: float, friction_half_life: float,
                 neighbor_buffer_size: int = 64):
        self.cutoff_radius = cutoff_radius
        self.beta = beta
        self.friction_half_life = friction_half_life
        self.neighbor_buffer_size = neighbor_buffer_size

    def friction_factor(self, dt: float) -> float:
        return 0.5 ** (dt / self.friction_half_life)

    def compute_forces(self, population, index, matrix) -> np.ndarray:
        """
        Net force on every particle, (n, 2). The index must have been built
        from this population's positions.
        """
        num_particles = len(population)
        forces = np.zeros((num_particles, 2), dtype=np.float64)
        if num_particles == 0:
            return forces

        num_chunks = min(num_particles, numba.get_num_threads() * 4)
        buffer_size = max(1, min(num_particles, self.neighbor_buffer_size))
        positions = population.positions
        if index.strategy == "quadtree":
            _compute_forces_quadtree_jit(
                positions, population.colors, matrix.values,
                self.cutoff_radius, self.beta, num_chunks, buffer_size,
                index.node_boundaries, index.node_children, index.node_start,
                index.node_count, index.order, index.stack_size(), forces
            )
        else:
            _compute_forces_brute_force_jit(
                positions, population.colors, matrix.values,
                self.cutoff_radius, self.beta, num_chunks, buffer_size, forces
            )
        return forces

    def step(self, population, index, matrix, dt: float, pointer_stimulus=None):
        """
        Semi-implicit Euler step:
            v' = v * friction + F * dt
            x' = x + v' * dt
        followed by the optional pointer impulse v' -= normalize(x' - target) * magnitude.
        """
        forces = self.compute_forces(population, index, matrix)

        velocities = population.velocities * self.friction_factor(dt) + forces * dt
        positions = population.positions + velocities * dt

        if pointer_stimulus is not None:
            target = np.asarray(pointer_stimulus.target, dtype=np.float64)
            velocities -= _safe_normalize(positions - target) * pointer_stimulus.magnitude

        return population.with_state(positions, velocities)
