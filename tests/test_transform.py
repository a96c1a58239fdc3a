"""
Tests for the axis conversion helpers
"""
import numpy as np
import pytest

from roselib.transform import (
    compose_matrix, quaternion_to_matrix, rotate_vector,
    transform_position, transform_positions, transform_rotation, transform_rotations,
)


class TestAxisSwap:
    """Test Z-up to Y-up conversion"""

    def test_up_vector(self):
        """Test the source up axis becomes the target up axis"""
        assert transform_position((0.0, 0.0, 1.0)) == (0.0, 1.0, 0.0)

    def test_position(self):
        assert transform_position((1.0, 2.0, 3.0)) == (1.0, 3.0, 2.0)

    def test_rotation_negates_w(self):
        assert transform_rotation((0.1, 0.2, 0.3, 0.9)) == (0.1, 0.3, 0.2, -0.9)

    def test_vectorised_forms_match(self):
        points = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]], dtype=np.float32)
        quats = np.array([[0.1, 0.2, 0.3, 0.9]], dtype=np.float32)

        assert transform_positions(points).tolist() == [[1.0, 3.0, 2.0], [4.0, 6.0, 5.0]]
        assert transform_rotations(quats)[0].tolist() == pytest.approx([0.1, 0.3, 0.2, -0.9])
        # Inputs are left untouched
        assert quats[0, 3] == pytest.approx(0.9)


class TestRotationMath:
    """Test quaternion helpers"""

    def test_quarter_turn_about_z(self):
        s = np.sqrt(0.5)
        q = (0.0, 0.0, s, s)
        assert rotate_vector(q, (1.0, 0.0, 0.0)) == pytest.approx((0.0, 1.0, 0.0))
        assert quaternion_to_matrix(q) @ np.array([1.0, 0.0, 0.0]) == pytest.approx([0.0, 1.0, 0.0])

    def test_compose_matrix(self):
        matrix = compose_matrix((0.0, 0.0, 0.0, 1.0), (1.0, 2.0, 3.0))
        assert matrix[:3, 3].tolist() == [1.0, 2.0, 3.0]
        assert np.allclose(matrix[:3, :3], np.identity(3))
