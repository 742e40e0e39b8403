"""
Rotation Utilities

Conversions between glTF quaternions and XYZ Euler angles.
"""

import math

import numpy as np
from pyrr import quaternion


def normalize_quaternion(quat) -> np.ndarray:
    """Return a unit quaternion (x, y, z, w); a zero quaternion becomes identity."""
    quat = np.asarray(quat, dtype=np.float64)
    length = np.linalg.norm(quat)
    if length < 1e-12:
        return np.array([0.0, 0.0, 0.0, 1.0])
    return quat / length


def quaternion_to_euler_xyz(quat) -> np.ndarray:
    """
    Convert a quaternion to Euler angles in XYZ order.

    The matrix is composed as Rx @ Ry @ Rz, so y is recovered from m13
    and x/z from the remaining row/column. Near gimbal lock (|m13| ~ 1)
    z is pinned to zero.

    Args:
        quat: Quaternion as (x, y, z, w), glTF component order

    Returns:
        Array of (x, y, z) angles in radians
    """
    x, y, z, w = normalize_quaternion(quat)

    m11 = 1.0 - 2.0 * (y * y + z * z)
    m12 = 2.0 * (x * y - w * z)
    m13 = 2.0 * (x * z + w * y)
    m22 = 1.0 - 2.0 * (x * x + z * z)
    m23 = 2.0 * (y * z - w * x)
    m32 = 2.0 * (y * z + w * x)
    m33 = 1.0 - 2.0 * (x * x + y * y)

    ey = math.asin(min(max(m13, -1.0), 1.0))

    if abs(m13) < 0.9999999:
        ex = math.atan2(-m23, m33)
        ez = math.atan2(-m12, m11)
    else:
        ex = math.atan2(m32, m22)
        ez = 0.0

    return np.array([ex, ey, ez])


def euler_xyz_to_quaternion(euler) -> np.ndarray:
    """
    Convert XYZ Euler angles to a quaternion (x, y, z, w).

    Inverse of quaternion_to_euler_xyz.
    """
    ex, ey, ez = (float(v) for v in euler)
    qx = np.array([math.sin(ex / 2.0), 0.0, 0.0, math.cos(ex / 2.0)])
    qy = np.array([0.0, math.sin(ey / 2.0), 0.0, math.cos(ey / 2.0)])
    qz = np.array([0.0, 0.0, math.sin(ez / 2.0), math.cos(ez / 2.0)])
    # q = qx * qy * qz
    return normalize_quaternion(_multiply(_multiply(qx, qy), qz))


def slerp(q0, q1, t: float) -> np.ndarray:
    """Spherical interpolation between two (x, y, z, w) quaternions."""
    return normalize_quaternion(quaternion.slerp(normalize_quaternion(q0), normalize_quaternion(q1), t))


def _multiply(a, b) -> np.ndarray:
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return np.array([
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    ])


def decompose_matrix(matrix):
    """
    Split a glTF node matrix into translation, rotation and scale.

    Args:
        matrix: 16 floats in glTF column-major order

    Returns:
        (translation, quaternion (x, y, z, w), scale) arrays
    """
    m = np.asarray(matrix, dtype=np.float64).reshape(4, 4).T
    translation = m[:3, 3].copy()
    basis = m[:3, :3]
    scale = np.linalg.norm(basis, axis=0)
    if np.linalg.det(basis) < 0:
        scale[0] = -scale[0]
    safe = np.where(np.abs(scale) < 1e-12, 1.0, scale)
    return translation, matrix_to_quaternion(basis / safe), scale


def matrix_to_quaternion(rot) -> np.ndarray:
    """Quaternion (x, y, z, w) from a 3x3 rotation matrix (column vectors)."""
    r = np.asarray(rot, dtype=np.float64)
    trace = r[0, 0] + r[1, 1] + r[2, 2]
    if trace > 0.0:
        s = 0.5 / math.sqrt(trace + 1.0)
        quat = [(r[2, 1] - r[1, 2]) * s, (r[0, 2] - r[2, 0]) * s, (r[1, 0] - r[0, 1]) * s, 0.25 / s]
    elif r[0, 0] > r[1, 1] and r[0, 0] > r[2, 2]:
        s = 2.0 * math.sqrt(1.0 + r[0, 0] - r[1, 1] - r[2, 2])
        quat = [0.25 * s, (r[0, 1] + r[1, 0]) / s, (r[0, 2] + r[2, 0]) / s, (r[2, 1] - r[1, 2]) / s]
    elif r[1, 1] > r[2, 2]:
        s = 2.0 * math.sqrt(1.0 + r[1, 1] - r[0, 0] - r[2, 2])
        quat = [(r[0, 1] + r[1, 0]) / s, 0.25 * s, (r[1, 2] + r[2, 1]) / s, (r[0, 2] - r[2, 0]) / s]
    else:
        s = 2.0 * math.sqrt(1.0 + r[2, 2] - r[0, 0] - r[1, 1])
        quat = [(r[0, 2] + r[2, 0]) / s, (r[1, 2] + r[2, 1]) / s, 0.25 * s, (r[1, 0] - r[0, 1]) / s]
    return normalize_quaternion(quat)
