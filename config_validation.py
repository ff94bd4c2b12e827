# config_validation.py

"""
Startup validation for the 'simulation' section of the config file.

Data Contract:
- Inputs: A dict of simulation parameters.
- Outputs: A new dict with defaults filled in for the optional keys.
- Side Effects: None.
- Invariants: Any violation raises ConfigurationError. Validation only happens
  once, before the engine is built; nothing is re-checked mid-run.
"""

import numbers

SPATIAL_INDEX_STRATEGIES = ("quadtree", "brute_force")

REQUIRED_KEYS = (
    'particle_count',
    'color_count',
    'cutoff_radius',
    'force_beta',
    'time_step',
    'friction_half_life',
)

DEFAULTS = {
    'pointer_strength': 0.1,
    'spatial_index': "quadtree",
    'quadtree_leaf_capacity': 8,
    'quadtree_max_depth': 20,
}


class ConfigurationError(ValueError):
    """Raised when the simulation cannot start with the supplied parameters."""


def _is_positive_int(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool) and value > 0


def _is_real(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def validate_config(config: dict) -> dict:
    missing = [key for key in REQUIRED_KEYS if key not in config]
    if missing:
        raise ConfigurationError(f"Missing simulation parameters: {', '.join(missing)}")

    validated = dict(DEFAULTS)
    validated.update(config)

    for key in ('particle_count', 'color_count', 'quadtree_leaf_capacity', 'quadtree_max_depth'):
        if not _is_positive_int(validated[key]):
            raise ConfigurationError(f"'{key}' must be a positive integer, got {validated[key]!r}")

    beta = validated['force_beta']
    if not _is_real(beta) or not 0.0 < beta < 1.0:
        raise ConfigurationError(f"'force_beta' must lie strictly between 0 and 1, got {beta!r}")

    for key in ('cutoff_radius', 'time_step', 'friction_half_life'):
        value = validated[key]
        if not _is_real(value) or not value > 0.0:
            raise ConfigurationError(f"'{key}' must be a positive number, got {value!r}")

    strength = validated['pointer_strength']
    if not _is_real(strength) or not strength >= 0.0:
        raise ConfigurationError(f"'pointer_strength' must be non-negative, got {strength!r}")

    if validated['spatial_index'] not in SPATIAL_INDEX_STRATEGIES:
        raise ConfigurationError(
            f"Unknown spatial index '{validated['spatial_index']}'. "
            f"Expected one of: {', '.join(SPATIAL_INDEX_STRATEGIES)}"
        )

    return validated
