import numpy as np
import pytest

from config_validation import ConfigurationError
from quadtree import QuadTree, squared_distance
from spatial_index import BruteForceIndex, build_spatial_index


def _neighbor_set(index, point, radius):
    distances, indices = index.query(point, radius)
    assert len(set(indices.tolist())) == len(indices)
    return set(indices.tolist())


def test_brute_force_and_quadtree_agree_on_random_configurations():
    rng = np.random.default_rng(1234)
    for _ in range(100):
        num_particles = int(rng.integers(1, 400))
        positions = rng.random((num_particles, 2)) * rng.uniform(0.1, 10.0)
        # Some exact duplicates to exercise coincident particles
        duplicates = rng.integers(0, num_particles, num_particles // 10)
        positions = np.vstack([positions, positions[duplicates]])
        radius = float(rng.uniform(0.0, 0.5)) * positions.max()

        brute = BruteForceIndex().build(positions)
        tree = QuadTree(leaf_capacity=int(rng.integers(1, 10)), max_depth=12).build(positions)

        query_points = np.vstack([positions[rng.integers(0, len(positions), 5)], rng.random((3, 2))])
        for point in query_points:
            assert _neighbor_set(brute, point, radius) == _neighbor_set(tree, point, radius)


def _random_boxes(rng, num_sets, num_particles):
    """Point sets over offset, scaled bounding boxes, so split centers round unevenly."""
    for _ in range(num_sets):
        offset = rng.uniform(-5.0, 5.0, 2)
        scale = rng.uniform(0.01, 10.0)
        yield offset + rng.random((num_particles, 2)) * scale


def test_zero_radius_query_finds_the_particle_itself():
    rng = np.random.default_rng(99)
    for positions in _random_boxes(rng, 200, 50):
        brute = BruteForceIndex().build(positions)
        tree = QuadTree(leaf_capacity=1, max_depth=12).build(positions)
        for i, point in enumerate(positions):
            tree_hits = _neighbor_set(tree, point, 0.0)
            assert i in tree_hits
            assert tree_hits == _neighbor_set(brute, point, 0.0)


def test_radius_equal_to_pair_distance_agrees_across_strategies():
    rng = np.random.default_rng(2024)
    for positions in _random_boxes(rng, 100, 50):
        brute = BruteForceIndex().build(positions)
        tree = QuadTree(leaf_capacity=1, max_depth=12).build(positions)
        for a, b in rng.integers(0, len(positions), (10, 2)):
            radius = np.sqrt(squared_distance(positions[a, 0], positions[a, 1], positions[b, 0], positions[b, 1]))
            assert _neighbor_set(tree, positions[a], radius) == _neighbor_set(brute, positions[a], radius)


def test_particle_exactly_on_radius_is_included_after_offset():
    # 3-4-5 triangles on a dyadic lattice: every distance and square is exact.
    base = np.array([1024.0, -512.0])
    positions = base + 0.5 * np.array([[0, 0], [3, 4], [-4, 3], [6, 8], [1, 1]], dtype=float)
    for index in (BruteForceIndex().build(positions), QuadTree(leaf_capacity=1).build(positions)):
        assert _neighbor_set(index, positions[0], 2.5) == {0, 1, 2, 4}
        assert _neighbor_set(index, positions[3], 2.5) == {1, 3}


def test_query_boundary_is_inclusive():
    positions = np.array([[0.0, 0.0], [0.5, 0.0], [0.0, 0.75]])
    for index in (BruteForceIndex().build(positions), QuadTree(leaf_capacity=1).build(positions)):
        assert _neighbor_set(index, (0.0, 0.0), 0.5) == {0, 1}
        assert _neighbor_set(index, (0.0, 0.0), 0.75) == {0, 1, 2}


def test_query_reports_distances():
    positions = np.array([[0.0, 0.0], [3.0, 4.0]])
    distances, indices = QuadTree().build(positions).query((0.0, 0.0), 10.0)
    found = dict(zip(indices.tolist(), distances.tolist()))
    assert found == {0: 0.0, 1: pytest.approx(5.0)}


def test_coincident_particles_do_not_split_forever():
    positions = np.full((500, 2), 0.25)
    tree = QuadTree(leaf_capacity=4, max_depth=10).build(positions)
    assert tree.num_active_nodes <= 1 + 4 * 10
    assert _neighbor_set(tree, (0.25, 0.25), 0.0) == set(range(500))


def test_empty_index_returns_nothing():
    empty = np.empty((0, 2))
    for strategy in ("quadtree", "brute_force"):
        distances, indices = build_spatial_index(empty, strategy).query((0.0, 0.0), 1.0)
        assert len(distances) == len(indices) == 0


def test_factory_selects_strategy():
    positions = np.random.default_rng(0).random((10, 2))
    assert isinstance(build_spatial_index(positions, "quadtree"), QuadTree)
    assert isinstance(build_spatial_index(positions, "brute_force"), BruteForceIndex)
    with pytest.raises(ConfigurationError):
        build_spatial_index(positions, "octree")
