import pytest

from config_validation import ConfigurationError, validate_config


def test_defaults_filled_in(sim_config):
    for key in ('pointer_strength', 'spatial_index', 'quadtree_leaf_capacity', 'quadtree_max_depth'):
        del sim_config[key]
    validated = validate_config(sim_config)
    assert validated['pointer_strength'] == 0.1
    assert validated['spatial_index'] == "quadtree"
    assert validated['quadtree_leaf_capacity'] == 8
    assert validated['quadtree_max_depth'] == 20


def test_input_dict_not_modified(sim_config):
    del sim_config['spatial_index']
    validate_config(sim_config)
    assert 'spatial_index' not in sim_config


@pytest.mark.parametrize("key, value", [
    ('particle_count', 0),
    ('particle_count', -5),
    ('particle_count', 2.5),
    ('particle_count', True),
    ('color_count', 0),
    ('color_count', "5"),
    ('force_beta', 0.0),
    ('force_beta', 1.0),
    ('force_beta', 1.3),
    ('force_beta', float('nan')),
    ('cutoff_radius', 0.0),
    ('time_step', -0.02),
    ('friction_half_life', 0),
    ('pointer_strength', -0.1),
    ('spatial_index', "octree"),
    ('quadtree_leaf_capacity', 0),
    ('quadtree_max_depth', 1.5),
])
def test_invalid_values_rejected(sim_config, key, value):
    sim_config[key] = value
    with pytest.raises(ConfigurationError):
        validate_config(sim_config)


def test_missing_required_key_rejected(sim_config):
    del sim_config['time_step']
    with pytest.raises(ConfigurationError, match="time_step"):
        validate_config(sim_config)


def test_configuration_error_is_a_value_error():
    assert issubclass(ConfigurationError, ValueError)
