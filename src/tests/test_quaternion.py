"""
===============================================================================
ORRERY - Quaternion Test Suite
===============================================================================
Tests for the Quaternion class: identity, normalization, conjugate,
multiplication order, vector rotation, DCM conversion, elementary rotations
and finite-difference angular velocity.

All floating-point comparisons use numpy.testing.assert_allclose with
explicit tolerances appropriate for double-precision arithmetic.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
from numpy.testing import assert_allclose

from orrery.core.quaternion import Quaternion


def axis_angle(axis, angle):
    """Rotation by angle (rad) about an arbitrary axis."""
    n = np.asarray(axis, dtype=float)
    n = n / np.linalg.norm(n)
    s = np.sin(angle / 2.0)
    return Quaternion(np.cos(angle / 2.0), s * n[0], s * n[1], s * n[2])


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def identity_quat():
    """Return the identity quaternion [1, 0, 0, 0]."""
    return Quaternion.identity()


@pytest.fixture
def quat_90z():
    """Return a quaternion representing 90-degree rotation about Z axis."""
    return axis_angle(np.array([0.0, 0.0, 1.0]), np.pi / 2)


@pytest.fixture
def general_quat():
    """A fixed, non-trivial rotation."""
    return axis_angle(np.array([0.3, -0.5, 0.8]), 1.234)


# =============================================================================
# Test: Identity and normalization
# =============================================================================

class TestIdentity:

    def test_identity(self, identity_quat):
        assert_allclose(identity_quat.components, [1.0, 0.0, 0.0, 0.0], atol=1e-15)

    def test_identity_leaves_vectors_unchanged(self, identity_quat):
        v = np.array([0.3, -1.2, 4.0])
        assert_allclose(identity_quat.rotate_vector(v), v, atol=1e-15)


class TestNormalize:

    def test_normalize(self):
        """An unnormalized quaternion should be automatically normalized."""
        q = Quaternion(2.0, 0.0, 0.0, 0.0)
        assert_allclose(q.components, [1.0, 0.0, 0.0, 0.0], atol=1e-15)

    @pytest.mark.parametrize("w,x,y,z", [
        (3.0, 4.0, 0.0, 0.0),
        (0.0, 0.0, 1.0, 1.0),
        (1.0, 2.0, 3.0, 4.0),
    ])
    def test_normalize_parametrized(self, w, x, y, z):
        q = Quaternion(w, x, y, z)
        assert_allclose(np.linalg.norm(q.components), 1.0, atol=1e-14)

    def test_negative_scalar_flipped(self):
        """The constructor picks the w >= 0 representative."""
        q = Quaternion(-0.5, 0.5, 0.5, 0.5)
        assert q.w > 0.0
        assert_allclose(q.components, [0.5, -0.5, -0.5, -0.5], atol=1e-15)

    def test_zero_quaternion_raises(self):
        with pytest.raises(ValueError):
            Quaternion(0.0, 0.0, 0.0, 0.0)


# =============================================================================
# Test: Conjugate and products
# =============================================================================

class TestConjugate:

    def test_conjugate(self, quat_90z):
        qc = quat_90z.conjugate()
        assert_allclose(qc.w, quat_90z.w, atol=1e-15)
        assert_allclose(qc.vector, -quat_90z.vector, atol=1e-15)

    def test_conjugate_undoes_rotation(self, general_quat):
        v = np.array([1.0, -2.0, 0.5])
        back = general_quat.conjugate().rotate_vector(general_quat.rotate_vector(v))
        assert_allclose(back, v, atol=1e-14)


class TestMultiply:

    def test_multiply_identity(self, quat_90z, identity_quat):
        assert_allclose(quat_90z.multiply(identity_quat).components,
                        quat_90z.components, atol=1e-14)

    def test_multiply_conjugate(self, general_quat):
        result = general_quat * general_quat.conjugate()
        assert_allclose(result.components, [1.0, 0.0, 0.0, 0.0], atol=1e-14)

    def test_product_applies_right_operand_first(self, quat_90z):
        """(a * b).rotate(v) == a.rotate(b.rotate(v))."""
        qx = Quaternion.x_rotation(np.pi / 2)
        v = np.array([1.0, 0.0, 0.0])
        assert_allclose((qx * quat_90z).rotate_vector(v),
                        qx.rotate_vector(quat_90z.rotate_vector(v)), atol=1e-14)
        # z first takes x to y, then x takes y to z
        assert_allclose((qx * quat_90z).rotate_vector(v), [0.0, 0.0, 1.0], atol=1e-14)

    def test_multiply_by_scalar_not_supported(self, quat_90z):
        with pytest.raises(TypeError):
            quat_90z * 2.0


# =============================================================================
# Test: Rotate vector
# =============================================================================

class TestRotateVector:

    def test_rotate_vector_90z(self, quat_90z):
        result = quat_90z.rotate_vector(np.array([1.0, 0.0, 0.0]))
        assert_allclose(result, [0.0, 1.0, 0.0], atol=1e-14)

    def test_rotate_preserves_magnitude(self, general_quat):
        v = np.array([3.0, -4.0, 5.0])
        assert_allclose(np.linalg.norm(general_quat.rotate_vector(v)),
                        np.linalg.norm(v), atol=1e-13)

    @pytest.mark.parametrize("axis,angle,v_in,v_expected", [
        ([0, 0, 1], np.pi, [1, 0, 0], [-1, 0, 0]),
        ([0, 1, 0], np.pi / 2, [1, 0, 0], [0, 0, -1]),
        ([1, 0, 0], np.pi / 2, [0, 1, 0], [0, 0, 1]),
    ])
    def test_rotate_parametrized(self, axis, angle, v_in, v_expected):
        q = axis_angle(np.array(axis, dtype=float), angle)
        assert_allclose(q.rotate_vector(np.array(v_in, dtype=float)),
                        v_expected, atol=1e-14)


# =============================================================================
# Test: Elementary rotations
# =============================================================================

class TestElementaryRotations:

    @pytest.mark.parametrize("factory,axis", [
        (Quaternion.x_rotation, [1.0, 0.0, 0.0]),
        (Quaternion.z_rotation, [0.0, 0.0, 1.0]),
    ])
    def test_matches_axis_angle(self, factory, axis):
        angle = 0.7
        assert factory(angle) == axis_angle(np.array(axis), angle)

    def test_large_angle_same_rotation(self):
        """Angles past pi flip the sign of the quaternion, not the rotation."""
        q = Quaternion.z_rotation(1.5 * np.pi)
        assert_allclose(q.rotate_vector(np.array([1.0, 0.0, 0.0])),
                        [0.0, -1.0, 0.0], atol=1e-14)


# =============================================================================
# Test: DCM conversion
# =============================================================================

class TestDCM:

    def test_dcm_matches_rotate_vector(self, general_quat):
        v = np.array([0.2, 0.4, -1.0])
        assert_allclose(general_quat.to_dcm() @ v, general_quat.rotate_vector(v), atol=1e-14)

    def test_dcm_orthogonality(self, general_quat):
        R = general_quat.to_dcm()
        assert_allclose(R.T @ R, np.eye(3), atol=1e-14)
        assert_allclose(np.linalg.det(R), 1.0, atol=1e-14)


# =============================================================================
# Test: Equality
# =============================================================================

class TestEquality:

    def test_negated_quaternion_equal(self, general_quat):
        negated = Quaternion(-general_quat.w, -general_quat.x, -general_quat.y,
                             -general_quat.z, normalize=False)
        assert negated == general_quat

    def test_different_rotations_not_equal(self, quat_90z, identity_quat):
        assert quat_90z != identity_quat


# =============================================================================
# Test: Angular velocity from two orientations
# =============================================================================

class TestAngularVelocity:

    def test_rotating_frame_rate(self):
        """A frame turning +rate about Z has orientation z_rotation(-rate*t)."""
        rate = 0.3
        dt = 1e-4
        q0 = Quaternion.z_rotation(-rate * 1.0)
        q1 = Quaternion.z_rotation(-rate * (1.0 + dt))
        assert_allclose(q0.angular_velocity_to(q1, dt), [0.0, 0.0, rate], rtol=1e-8)

    def test_tilted_axis(self):
        axis = np.array([1.0, 1.0, 0.0]) / np.sqrt(2.0)
        rate = 2.0
        dt = 1e-5
        q0 = Quaternion.identity()
        q1 = axis_angle(axis, -rate * dt)
        assert_allclose(q0.angular_velocity_to(q1, dt), axis * rate, rtol=1e-8)

    def test_static_orientation(self, general_quat):
        assert_allclose(general_quat.angular_velocity_to(general_quat, 1e-3),
                        np.zeros(3), atol=1e-15)
