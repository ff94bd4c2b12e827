import numpy as np
import pytest


@pytest.fixture
def sim_config():
    return {
        'particle_count': 200,
        'color_count': 5,
        'cutoff_radius': 0.05,
        'force_beta': 0.3,
        'time_step': 0.02,
        'friction_half_life': 0.04,
        'pointer_strength': 0.1,
        'spatial_index': "quadtree",
        'quadtree_leaf_capacity': 8,
        'quadtree_max_depth': 20,
    }


@pytest.fixture
def rng():
    return np.random.default_rng(50)
