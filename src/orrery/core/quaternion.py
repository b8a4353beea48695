"""
===============================================================================
ORRERY - Quaternion Mathematics for Frame Orientations
===============================================================================

Unit quaternions describe the orientation of every reference frame and body.
They compose cheaply, renormalize trivially and never hit gimbal lock, which
matters when orientations are chained through several nested frames.

Convention
----------
Scalar-first:

    q = [q_w, q_x, q_y, q_z] = q_w + q_x*i + q_y*j + q_z*k

An orientation quaternion q of a frame F maps vectors expressed in the
universal (J2000 ecliptic) frame into F:

    v_F = q * v_U * q_conjugate            (rotate_vector)

so the conjugate brings a frame-local vector back out to universal axes:

    v_U = q.conjugate().rotate_vector(v_F)

Composition follows the Hamilton product: (a * b).rotate_vector(v) equals
a.rotate_vector(b.rotate_vector(v)), i.e. b is applied first. A body's
orientation is therefore rotation_model * body_frame.

Unit quaternion constraint: |q| = 1. q and -q describe the same rotation; the
constructor picks w >= 0.

References
----------
    [1] Markley & Crassidis, "Fundamentals of Spacecraft Attitude
        Determination and Control", Springer, 2014.
    [2] Kuipers, "Quaternions and Rotation Sequences", Princeton, 1999.
===============================================================================
"""

import numpy as np
from typing import Union


class Quaternion:
    """
    Unit quaternion class for 3D rotation representation.

    A unit quaternion q = [w, x, y, z] parameterizes a rotation by angle theta
    about unit axis n as:

        q = [cos(theta/2), sin(theta/2) * n_x, sin(theta/2) * n_y, sin(theta/2) * n_z]

    Attributes
    ----------
    w : float
        Scalar (real) component of the quaternion.
    x, y, z : float
        Imaginary components.

    Examples
    --------
    >>> q = Quaternion.identity()
    >>> q_rot = Quaternion.z_rotation(np.pi / 2)
    >>> v_rotated = q_rot.rotate_vector(np.array([1.0, 0.0, 0.0]))
    """

    _NORM_TOLERANCE = 1e-12
    _COMPARISON_TOLERANCE = 1e-9

    def __init__(self, w: float, x: float, y: float, z: float,
                 normalize: bool = True) -> None:
        """
        Initialize a quaternion with scalar-first convention.

        Parameters
        ----------
        w : float
            Scalar part (cos(theta/2) for a rotation by angle theta).
        x, y, z : float
            Vector part.
        normalize : bool, optional
            If True (default), normalize to unit magnitude and enforce
            w >= 0. Pass False only when the input is known to be unit-length.
        """
        self._q = np.array([w, x, y, z], dtype=np.float64)

        if normalize:
            self._normalize_in_place()

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def w(self) -> float:
        """Scalar (real) part of the quaternion."""
        return float(self._q[0])

    @property
    def x(self) -> float:
        return float(self._q[1])

    @property
    def y(self) -> float:
        return float(self._q[2])

    @property
    def z(self) -> float:
        return float(self._q[3])

    @property
    def vector(self) -> np.ndarray:
        """Vector (imaginary) part [x, y, z] as a copy."""
        return self._q[1:4].copy()

    @property
    def components(self) -> np.ndarray:
        """Full quaternion [w, x, y, z] as a copy."""
        return self._q.copy()

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    def _normalize_in_place(self) -> None:
        """
        Normalize to unit magnitude and pick the w >= 0 representative.

        Raises
        ------
        ValueError
            If the quaternion has near-zero norm.
        """
        n = np.linalg.norm(self._q)

        if n < self._NORM_TOLERANCE:
            raise ValueError(
                f"Cannot normalize near-zero quaternion (norm = {n:.2e})."
            )

        self._q /= n

        if self._q[0] < 0.0:
            self._q = -self._q

    # =========================================================================
    # STATIC FACTORY METHODS
    # =========================================================================

    @staticmethod
    def identity() -> 'Quaternion':
        """The identity quaternion [1, 0, 0, 0] (no rotation)."""
        return Quaternion(1.0, 0.0, 0.0, 0.0, normalize=False)

    @staticmethod
    def x_rotation(angle: float) -> 'Quaternion':
        """Rotation by angle (rad) about the X axis."""
        return Quaternion(np.cos(angle / 2.0), np.sin(angle / 2.0), 0.0, 0.0)

    @staticmethod
    def z_rotation(angle: float) -> 'Quaternion':
        """Rotation by angle (rad) about the Z axis."""
        return Quaternion(np.cos(angle / 2.0), 0.0, 0.0, np.sin(angle / 2.0))

    # =========================================================================
    # QUATERNION ARITHMETIC
    # =========================================================================

    def conjugate(self) -> 'Quaternion':
        """
        Return the quaternion conjugate [w, -x, -y, -z].

        For an orientation quaternion this is the reverse rotation: frame
        axes back to universal axes.
        """
        return Quaternion(self.w, -self.x, -self.y, -self.z, normalize=False)

    def multiply(self, other: 'Quaternion') -> 'Quaternion':
        """
        Hamilton product self * other.

        The product rotates a vector first by 'other' and then by 'self':

            (a1 + b1*i + c1*j + d1*k) * (a2 + b2*i + c2*j + d2*k) =

            (a1*a2 - b1*b2 - c1*c2 - d1*d2) +
            (a1*b2 + b1*a2 + c1*d2 - d1*c2) i +
            (a1*c2 - b1*d2 + c1*a2 + d1*b2) j +
            (a1*d2 + b1*c2 - c1*b2 + d1*a2) k
        """
        a1, b1, c1, d1 = self.w, self.x, self.y, self.z
        a2, b2, c2, d2 = other.w, other.x, other.y, other.z

        w = a1 * a2 - b1 * b2 - c1 * c2 - d1 * d2
        x = a1 * b2 + b1 * a2 + c1 * d2 - d1 * c2
        y = a1 * c2 - b1 * d2 + c1 * a2 + d1 * b2
        z = a1 * d2 + b1 * c2 - c1 * b2 + d1 * a2

        return Quaternion(w, x, y, z)

    # =========================================================================
    # ROTATION OPERATIONS
    # =========================================================================

    def rotate_vector(self, v: np.ndarray) -> np.ndarray:
        """
        Rotate a 3D vector by this quaternion.

        Uses the Rodrigues form of the sandwich product q * v * q*:

            v' = v + 2*w*(u x v) + 2*(u x (u x v))

        with u the vector part of q (Markley & Crassidis, Eq. 2.89).

        Parameters
        ----------
        v : np.ndarray
            3-element vector to rotate.

        Returns
        -------
        np.ndarray
            Rotated 3-element vector.
        """
        v = np.asarray(v, dtype=np.float64)
        u = self._q[1:4]

        t = 2.0 * np.cross(u, v)
        return v + self._q[0] * t + np.cross(u, t)

    def to_dcm(self) -> np.ndarray:
        """
        Convert to a Direction Cosine Matrix.

        R @ v equals rotate_vector(v):

            R = | 1-2(y^2+z^2)    2(xy-wz)      2(xz+wy)   |
                | 2(xy+wz)      1-2(x^2+z^2)    2(yz-wx)   |
                | 2(xz-wy)      2(yz+wx)      1-2(x^2+y^2) |
        """
        w, x, y, z = self.w, self.x, self.y, self.z

        xx = x * x
        yy = y * y
        zz = z * z
        xy = x * y
        xz = x * z
        yz = y * z
        wx = w * x
        wy = w * y
        wz = w * z

        return np.array([
            [1.0 - 2.0 * (yy + zz),  2.0 * (xy - wz),        2.0 * (xz + wy)],
            [2.0 * (xy + wz),         1.0 - 2.0 * (xx + zz),  2.0 * (yz - wx)],
            [2.0 * (xz - wy),         2.0 * (yz + wx),         1.0 - 2.0 * (xx + yy)]
        ], dtype=np.float64)

    def angular_velocity_to(self, later: 'Quaternion', dt: float) -> np.ndarray:
        """
        Angular velocity of a frame whose orientation moves from self to later.

        Both quaternions are orientations (universal -> frame) sampled dt
        apart. The returned vector is expressed in universal axes:

            dq    = later^* * self
            omega = axis(dq) * angle(dq) / dt

        Returns zero when the two samples are indistinguishable.
        """
        dq = later.conjugate().multiply(self)
        vec = dq.vector
        s = np.linalg.norm(vec)
        if s < 1e-15:
            return np.zeros(3)
        # atan2 keeps small angles accurate where arccos(w) would not
        angle = 2.0 * np.arctan2(s, dq.w)
        return vec / s * (angle / dt)

    # =========================================================================
    # OPERATOR OVERLOADS
    # =========================================================================

    def __mul__(self, other: Union['Quaternion', float, int]) -> 'Quaternion':
        """Quaternion * Quaternion -> Hamilton product."""
        if isinstance(other, Quaternion):
            return self.multiply(other)
        return NotImplemented

    def __eq__(self, other: object) -> bool:
        """
        Equality with tolerance, treating q and -q as the same rotation.
        """
        if not isinstance(other, Quaternion):
            return NotImplemented

        diff_pos = np.linalg.norm(self._q - other._q)
        diff_neg = np.linalg.norm(self._q + other._q)
        return min(diff_pos, diff_neg) < self._COMPARISON_TOLERANCE

    def __hash__(self) -> int:
        return hash(tuple(np.round(self._q, decimals=8)))

    def __repr__(self) -> str:
        return (f"Quaternion(w={self.w:+.8f}, x={self.x:+.8f}, "
                f"y={self.y:+.8f}, z={self.z:+.8f})")
