import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from handmeasure.HandData import Chirality, HandAnchor
from handmeasure.Joints import NEUTRAL_BONE_OFFSETS, HandSkeleton
from handmeasure.Transforms import make_transform


def bent_skeleton(angles=None, tracked=None):
    """
    Neutral hand with some joints rotated about z.
    angles: JointName -> radians applied to that joint's parent-relative transform.
    """
    angles = angles or {}
    local = {}
    for name, offset in NEUTRAL_BONE_OFFSETS.items():
        rot = Rotation.from_euler("z", angles.get(name, 0.0))
        local[name] = make_transform(rotation=rot, translation=offset)
    return HandSkeleton.from_local_transforms(local, tracked=tracked)


def anchor_for(skeleton, chirality=Chirality.RIGHT, translation=(0.0, 0.0, 0.0), is_tracked=True):
    return HandAnchor(
        chirality=chirality,
        origin_from_anchor=make_transform(translation=translation),
        is_tracked=is_tracked,
        skeleton=skeleton,
    )


@pytest.fixture
def neutral_skeleton():
    return HandSkeleton.neutral_pose()


@pytest.fixture
def identity():
    return np.eye(4)
