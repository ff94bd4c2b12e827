import numpy as np
import pytest

from attraction_matrix import AttractionMatrix


def test_build_shape_and_range():
    matrix = AttractionMatrix.build(5, 50)
    assert matrix.values.shape == (5, 5)
    assert matrix.num_colors == 5
    assert np.all(matrix.values >= -1.0)
    assert np.all(matrix.values < 1.0)


def test_build_is_deterministic_for_a_seed():
    assert AttractionMatrix.build(4, 7) == AttractionMatrix.build(4, 7)
    assert AttractionMatrix.build(4, 7) != AttractionMatrix.build(4, 8)


def test_build_accepts_generator(rng):
    matrix = AttractionMatrix.build(3, rng)
    assert matrix.values.shape == (3, 3)


def test_reset_without_request_is_a_no_op(rng):
    matrix = AttractionMatrix.build(5, rng)
    before = matrix.values.copy()
    assert matrix.reset(rng, requested=False) is matrix
    np.testing.assert_array_equal(matrix.values, before)


def test_reset_on_request_regenerates_same_size(rng):
    matrix = AttractionMatrix.build(5, rng)
    fresh = matrix.reset(rng, requested=True)
    assert fresh is not matrix
    assert fresh.num_colors == 5
    assert fresh != matrix


def test_lookup_is_row_major_and_asymmetric():
    matrix = AttractionMatrix([[0.1, 0.2], [-0.3, 0.4]])
    assert matrix.lookup(0, 1) == pytest.approx(0.2)
    assert matrix.lookup(1, 0) == pytest.approx(-0.3)
    assert matrix.flat_values[1 * 2 + 0] == pytest.approx(-0.3)


@pytest.mark.parametrize("pair", [(2, 0), (0, 2), (-1, 0)])
def test_lookup_out_of_range_is_an_error(pair):
    matrix = AttractionMatrix.build(2, 1)
    with pytest.raises(IndexError):
        matrix.lookup(*pair)


def test_values_are_read_only():
    matrix = AttractionMatrix.build(2, 1)
    with pytest.raises(ValueError):
        matrix.values[0, 0] = 0.5


@pytest.mark.parametrize("values", [
    [[0.1, 0.2]],
    [[1.5]],
    [[float('nan')]],
    [],
])
def test_invalid_values_rejected(values):
    with pytest.raises(ValueError):
        AttractionMatrix(values)
