import numpy as np
import pytest

from particle import Particle
from population import Population


def test_generate_respects_color_count_and_unit_square(rng):
    population = Population.generate(1000, 5, rng)
    assert len(population) == 1000
    assert population.colors.min() >= 0
    assert population.colors.max() < 5
    assert np.all((population.positions >= 0.0) & (population.positions < 1.0))
    assert not np.any(population.velocities)


def test_out_of_range_color_rejected():
    with pytest.raises(ValueError):
        Population([0, 3], [[0, 0], [1, 1]], [[0, 0], [0, 0]], num_colors=3)


def test_mismatched_lengths_rejected():
    with pytest.raises(ValueError):
        Population([0, 1], [[0, 0]], [[0, 0], [0, 0]], num_colors=2)


def test_arrays_are_read_only(rng):
    population = Population.generate(10, 2, rng)
    with pytest.raises(ValueError):
        population.positions[0, 0] = 5.0
    with pytest.raises(ValueError):
        population.colors[0] = 1


def test_with_state_keeps_colors_and_leaves_original_untouched(rng):
    population = Population.generate(10, 3, rng)
    moved = population.with_state(population.positions + 1.0, population.velocities + 2.0)
    np.testing.assert_array_equal(moved.colors, population.colors)
    np.testing.assert_allclose(moved.positions, population.positions + 1.0)
    assert np.all(population.velocities == 0.0)


def test_snapshot_exposes_particles_by_index():
    population = Population([1, 1], [[0.5, 0.5], [0.5, 0.5]], [[0, 0], [0, 0]], num_colors=2)
    snapshot = population.snapshot()
    assert len(snapshot) == 2
    assert snapshot[0] == Particle(1, (0.5, 0.5), (0.0, 0.0))
    # Identical values, still two distinct particles
    assert list(snapshot) == [snapshot[0], snapshot[1]]
    with pytest.raises(ValueError):
        snapshot.positions[1, 0] = 0.0
