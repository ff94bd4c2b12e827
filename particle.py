# particle.py

from typing import NamedTuple, Tuple


class Particle(NamedTuple):
    """
    Read-only view of a single particle, as handed to the renderer.

    A particle's identity is its row in the Population, never its value: two
    particles may share color, position and velocity.
    """
    color: int
    position: Tuple[float, float]
    velocity: Tuple[float, float]
