# force_law.py

import numba


@numba.jit(nopython=True)
def force(r, a, beta):
    """
    Scalar interaction force between two particles.

    Data Contract:
    - Inputs:
        - r (float): Distance divided by the interaction cutoff radius.
        - a (float): Attraction coefficient for the ordered color pair, in [-1, 1].
        - beta (float): Repulsion-core fraction, in (0, 1).
    - Outputs: float. Negative values push the particles apart.
    - Invariants: Continuous everywhere. Both pieces evaluate to 0 at r == beta
      and the triangle returns to 0 at r == 1.
    """
    # Universal short-range repulsion, independent of color affinity.
    if r < beta:
        return r / beta - 1.0
    # Triangular band peaking at magnitude a halfway between beta and 1.
    elif r < 1.0:
        return a * (1.0 - abs(2.0 * r - 1.0 - beta) / (1.0 - beta))
    else:
        return 0.0
