# attraction_matrix.py

import logging
import numpy as np

logger = logging.getLogger("particle_life")


class AttractionMatrix:
    """
    Square table of per-color-pair interaction coefficients.

    Entry (i, j) is the force multiplier felt by a particle of color i due to a
    particle of color j. The table is not symmetric.

    Data Contract:
    - Inputs: values (array-like) - A (num_colors, num_colors) table in [-1, 1].
    - Invariants: The stored table is read-only. A new matrix is created on
      every reset rather than mutating this one.
    """
    def __init__(self, values):
        values = np.array(values, dtype=np.float64)
        if values.ndim != 2 or values.shape[0] != values.shape[1] or values.shape[0] == 0:
            raise ValueError(f"Attraction matrix must be a non-empty square table, got shape {values.shape}.")
        if np.any(~np.isfinite(values)) or np.any(np.abs(values) > 1.0):
            raise ValueError("Attraction matrix entries must lie in [-1, 1].")
        values.flags.writeable = False
        self.values = values

    @classmethod
    def build(cls, num_colors: int, rng):
        """
        Fills num_colors² entries independently from a uniform [-1, 1) distribution.
        `rng` may be an integer seed or a np.random.Generator.
        """
        rng = np.random.default_rng(rng)
        return cls(rng.uniform(-1.0, 1.0, (num_colors, num_colors)))

    @property
    def num_colors(self) -> int:
        return self.values.shape[0]

    @property
    def flat_values(self) -> np.ndarray:
        """Row-major view, entry (a, b) at a * num_colors + b."""
        return self.values.ravel()

    def reset(self, rng, requested: bool = True):
        """
        Returns a freshly generated matrix with the same color count when a
        reset was requested, otherwise returns this matrix unchanged.
        """
        if not requested:
            return self
        new_matrix = AttractionMatrix.build(self.num_colors, rng)
        logger.info(f"Attraction matrix reset ({self.num_colors}x{self.num_colors}).")
        logger.debug(f"New attraction matrix:\n{np.array2string(new_matrix.values, precision=2)}")
        return new_matrix

    def lookup(self, color_a: int, color_b: int) -> float:
        num_colors = self.num_colors
        if not (0 <= color_a < num_colors and 0 <= color_b < num_colors):
            raise IndexError(
                f"Color pair ({color_a}, {color_b}) is outside a {num_colors}-color matrix."
            )
        return float(self.flat_values[color_a * num_colors + color_b])

    def __eq__(self, other):
        if not isinstance(other, AttractionMatrix):
            return NotImplemented
        return np.array_equal(self.values, other.values)

    def __repr__(self):
        return f"AttractionMatrix(num_colors={self.num_colors})"
