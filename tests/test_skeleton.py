"""
Tests for skeleton reconstruction
"""
import numpy as np
import pytest

from builders import create_zmd
from roselib.errors import MalformedSkeletonError
from roselib.formats import read_zmd
from roselib.io import BinaryCursor
from roselib.skeleton import SkeletonBuilder

IDENTITY_WXYZ = (1.0, 0.0, 0.0, 0.0)


def build(bones, dummies=(), **kwargs):
    return SkeletonBuilder().build(read_zmd(BinaryCursor(create_zmd(bones, dummies))), **kwargs)


class TestHierarchy:
    """Test parent validation"""

    def test_parent_after_bone_is_rejected(self):
        """Test a parent index that does not precede its bone"""
        bones = [
            (0, 'root', (0.0, 0.0, 0.0), IDENTITY_WXYZ),
            (0, 'A', (0.0, 0.0, 0.0), IDENTITY_WXYZ),
            (5, 'B', (0.0, 0.0, 0.0), IDENTITY_WXYZ),
        ]
        with pytest.raises(MalformedSkeletonError):
            build(bones)

    def test_self_parent_is_rejected(self):
        bones = [
            (0, 'root', (0.0, 0.0, 0.0), IDENTITY_WXYZ),
            (1, 'A', (0.0, 0.0, 0.0), IDENTITY_WXYZ),
        ]
        with pytest.raises(MalformedSkeletonError):
            build(bones)

    def test_root_has_no_parent(self):
        skeleton = build([
            (-1, 'root', (0.0, 0.0, 0.0), IDENTITY_WXYZ),
            (0, 'spine', (0.0, 0.0, 1.0), IDENTITY_WXYZ),
        ])
        assert skeleton.bones[0].parent is None
        assert skeleton.bones[1].parent == 0
        assert skeleton.find('spine') == 1
        assert skeleton.find('tail') is None

    def test_dummies_follow_bones(self):
        skeleton = build(
            [(0, 'root', (0.0, 0.0, 0.0), IDENTITY_WXYZ)],
            [('weapon', 0, (0.0, 1.0, 0.0), IDENTITY_WXYZ)],
        )
        assert len(skeleton) == 2
        assert skeleton.bones[1].is_dummy
        assert skeleton.bones[1].parent == 0

        without = build(
            [(0, 'root', (0.0, 0.0, 0.0), IDENTITY_WXYZ)],
            [('weapon', 0, (0.0, 1.0, 0.0), IDENTITY_WXYZ)],
            include_dummies=False,
        )
        assert len(without) == 1

    def test_dummy_with_missing_parent(self):
        with pytest.raises(MalformedSkeletonError):
            build(
                [(0, 'root', (0.0, 0.0, 0.0), IDENTITY_WXYZ)],
                [('weapon', 3, (0.0, 0.0, 0.0), IDENTITY_WXYZ)],
            )


class TestRestTransforms:
    """Test rest poses are converted to target axes"""

    def test_rest_transform_is_converted(self):
        skeleton = build([
            (0, 'root', (1.0, 2.0, 3.0), (0.5, 0.1, 0.2, 0.3)),
        ])
        rest = skeleton.bones[0].rest
        assert rest.translation == (1.0, 3.0, 2.0)
        assert rest.rotation == pytest.approx((0.1, 0.3, 0.2, -0.5))

    def test_global_matrix_composes_parents(self):
        """Test global translation sums parent offsets for identity rotations"""
        skeleton = build([
            (0, 'root', (1.0, 0.0, 0.0), IDENTITY_WXYZ),
            (0, 'spine', (0.0, 0.0, 2.0), IDENTITY_WXYZ),
            (1, 'head', (0.0, 0.0, 1.0), IDENTITY_WXYZ),
        ])
        matrix = skeleton.global_matrix(2)
        assert np.allclose(matrix[:3, 3], [1.0, 3.0, 0.0])
        assert np.allclose(matrix[:3, :3], np.identity(3))
