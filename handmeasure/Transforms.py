import math
from typing import Optional, Sequence

import numpy as np
from scipy.spatial.transform import Rotation


# ---------- units ----------
def cm(value: float) -> float:
    return value * 0.01


def mm(value: float) -> float:
    return value * 0.001


def radians_from_degrees(value: float) -> float:
    return value / 180.0 * math.pi


def degrees_from_radians(value: float) -> float:
    return 180.0 * value / math.pi


# ---------- 4x4 rigid transforms ----------
def make_transform(rotation=None, translation: Optional[Sequence[float]] = None) -> np.ndarray:
    """
    Build a 4x4 rigid transform.
    rotation: 3x3 matrix or scipy Rotation (identity when omitted).
    translation: 3 values (zero when omitted).
    """
    m = np.eye(4)
    if rotation is not None:
        if isinstance(rotation, Rotation):
            rotation = rotation.as_matrix()
        m[:3, :3] = np.asarray(rotation, dtype=float)
    if translation is not None:
        m[:3, 3] = np.asarray(translation, dtype=float)
    return m


def rotation_of(m) -> np.ndarray:
    return np.asarray(m, dtype=float)[:3, :3]


def translation_of(m) -> np.ndarray:
    """Translation column (xyz of the 4th column)."""
    return np.asarray(m, dtype=float)[:3, 3].copy()


def rotation_angle(m) -> float:
    """Rotation magnitude in radians, in [0, pi], of the rotational part of m (shortest arc)."""
    return float(Rotation.from_matrix(rotation_of(m)).magnitude())


def compose(*transforms) -> np.ndarray:
    """Left-to-right matrix product, e.g. compose(origin_from_anchor, anchor_from_joint)."""
    result = np.eye(4)
    for m in transforms:
        result = result @ np.asarray(m, dtype=float)
    return result


def distance(a, b) -> float:
    """Euclidean distance between two 3D points."""
    return float(np.linalg.norm(np.asarray(a, dtype=float) - np.asarray(b, dtype=float)))
