# population.py

import logging
import numpy as np
from particle import Particle

logger = logging.getLogger("particle_life")


def _frozen(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


class Population:
    """
    Fixed-size, index-addressable set of particles stored as a Structure of
    Arrays.

    Data Contract:
    - Inputs:
        - colors (array-like): (n,) integer color indices.
        - positions (array-like): (n, 2) float positions.
        - velocities (array-like): (n, 2) float velocities.
        - num_colors (int): Size of the color palette.
    - Outputs: None.
    - Invariants: All arrays have length n and are read-only once built.
      0 <= color < num_colors for every particle. A tick never edits a
      Population; it produces a new one that replaces the old one whole.
    """
    def __init__(self, colors, positions, velocities, num_colors: int):
        colors = np.array(colors, dtype=np.int64)
        positions = np.array(positions, dtype=np.float64).reshape(-1, 2)
        velocities = np.array(velocities, dtype=np.float64).reshape(-1, 2)

        if colors.ndim != 1 or not (len(colors) == len(positions) == len(velocities)):
            raise ValueError(
                f"Population arrays disagree in length: colors={colors.shape}, "
                f"positions={positions.shape}, velocities={velocities.shape}"
            )
        if len(colors) and (colors.min() < 0 or colors.max() >= num_colors):
            raise ValueError(f"Particle colors must lie in [0, {num_colors}).")

        self.num_colors = num_colors
        self.colors = _frozen(colors)
        self.positions = _frozen(positions)
        self.velocities = _frozen(velocities)

    @classmethod
    def generate(cls, num_particles: int, num_colors: int, rng: np.random.Generator):
        """
        Random colors, positions uniform in the unit square, and zero velocity.
        """
        colors = rng.integers(0, num_colors, num_particles)
        positions = rng.random((num_particles, 2))
        velocities = np.zeros((num_particles, 2), dtype=float)
        logger.info(f"Generated population of {num_particles} particles over {num_colors} colors.")
        return cls(colors, positions, velocities, num_colors)

    def with_state(self, positions: np.ndarray, velocities: np.ndarray):
        """Next-tick population: same colors and order, new kinematics."""
        return Population(self.colors, positions, velocities, self.num_colors)

    def snapshot(self):
        return PopulationSnapshot(self)

    def __len__(self):
        return len(self.colors)

    def __getitem__(self, index: int) -> Particle:
        return Particle(
            int(self.colors[index]),
            tuple(self.positions[index].tolist()),
            tuple(self.velocities[index].tolist()),
        )

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]


class PopulationSnapshot:
    """
    Immutable view of a Population after a tick, for the renderer.
    Shares the Population's read-only arrays rather than copying them.
    """
    def __init__(self, population: Population):
        self._population = population

    @property
    def colors(self) -> np.ndarray:
        return self._population.colors

    @property
    def positions(self) -> np.ndarray:
        return self._population.positions

    @property
    def velocities(self) -> np.ndarray:
        return self._population.velocities

    def __len__(self):
        return len(self._population)

    def __getitem__(self, index: int) -> Particle:
        return self._population[index]

    def __iter__(self):
        return iter(self._population)
