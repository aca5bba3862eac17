"""
Skeletal joint vocabulary and per-frame skeleton snapshot.

The joint tables (parents, leaves, per-finger joint lists) live next to the
JointName enumeration so a change to one shows up in the other.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np

from handmeasure.Transforms import cm, distance, make_transform, rotation_angle, translation_of


class JointName(str, Enum):
    WRIST = "wrist"

    THUMB_KNUCKLE = "thumbKnuckle"
    THUMB_INTERMEDIATE_BASE = "thumbIntermediateBase"
    THUMB_INTERMEDIATE_TIP = "thumbIntermediateTip"
    THUMB_TIP = "thumbTip"

    INDEX_FINGER_METACARPAL = "indexFingerMetacarpal"
    INDEX_FINGER_KNUCKLE = "indexFingerKnuckle"
    INDEX_FINGER_INTERMEDIATE_BASE = "indexFingerIntermediateBase"
    INDEX_FINGER_INTERMEDIATE_TIP = "indexFingerIntermediateTip"
    INDEX_FINGER_TIP = "indexFingerTip"

    MIDDLE_FINGER_METACARPAL = "middleFingerMetacarpal"
    MIDDLE_FINGER_KNUCKLE = "middleFingerKnuckle"
    MIDDLE_FINGER_INTERMEDIATE_BASE = "middleFingerIntermediateBase"
    MIDDLE_FINGER_INTERMEDIATE_TIP = "middleFingerIntermediateTip"
    MIDDLE_FINGER_TIP = "middleFingerTip"

    RING_FINGER_METACARPAL = "ringFingerMetacarpal"
    RING_FINGER_KNUCKLE = "ringFingerKnuckle"
    RING_FINGER_INTERMEDIATE_BASE = "ringFingerIntermediateBase"
    RING_FINGER_INTERMEDIATE_TIP = "ringFingerIntermediateTip"
    RING_FINGER_TIP = "ringFingerTip"

    LITTLE_FINGER_METACARPAL = "littleFingerMetacarpal"
    LITTLE_FINGER_KNUCKLE = "littleFingerKnuckle"
    LITTLE_FINGER_INTERMEDIATE_BASE = "littleFingerIntermediateBase"
    LITTLE_FINGER_INTERMEDIATE_TIP = "littleFingerIntermediateTip"
    LITTLE_FINGER_TIP = "littleFingerTip"

    FOREARM_WRIST = "forearmWrist"
    FOREARM_ARM = "forearmArm"


class FingerName(str, Enum):
    THUMB = "thumb"
    INDEX_FINGER = "indexFinger"
    MIDDLE_FINGER = "middleFinger"
    RING_FINGER = "ringFinger"
    LITTLE_FINGER = "littleFinger"


J = JointName

# Each entry is joint -> parent; the wrist is the only root.
JOINT_PARENTS: Dict[JointName, Optional[JointName]] = {
    J.WRIST: None,
    J.THUMB_KNUCKLE: J.WRIST,
    J.THUMB_INTERMEDIATE_BASE: J.THUMB_KNUCKLE,
    J.THUMB_INTERMEDIATE_TIP: J.THUMB_INTERMEDIATE_BASE,
    J.THUMB_TIP: J.THUMB_INTERMEDIATE_TIP,
    J.INDEX_FINGER_METACARPAL: J.WRIST,
    J.INDEX_FINGER_KNUCKLE: J.INDEX_FINGER_METACARPAL,
    J.INDEX_FINGER_INTERMEDIATE_BASE: J.INDEX_FINGER_KNUCKLE,
    J.INDEX_FINGER_INTERMEDIATE_TIP: J.INDEX_FINGER_INTERMEDIATE_BASE,
    J.INDEX_FINGER_TIP: J.INDEX_FINGER_INTERMEDIATE_TIP,
    J.MIDDLE_FINGER_METACARPAL: J.WRIST,
    J.MIDDLE_FINGER_KNUCKLE: J.MIDDLE_FINGER_METACARPAL,
    J.MIDDLE_FINGER_INTERMEDIATE_BASE: J.MIDDLE_FINGER_KNUCKLE,
    J.MIDDLE_FINGER_INTERMEDIATE_TIP: J.MIDDLE_FINGER_INTERMEDIATE_BASE,
    J.MIDDLE_FINGER_TIP: J.MIDDLE_FINGER_INTERMEDIATE_TIP,
    J.RING_FINGER_METACARPAL: J.WRIST,
    J.RING_FINGER_KNUCKLE: J.RING_FINGER_METACARPAL,
    J.RING_FINGER_INTERMEDIATE_BASE: J.RING_FINGER_KNUCKLE,
    J.RING_FINGER_INTERMEDIATE_TIP: J.RING_FINGER_INTERMEDIATE_BASE,
    J.RING_FINGER_TIP: J.RING_FINGER_INTERMEDIATE_TIP,
    J.LITTLE_FINGER_METACARPAL: J.WRIST,
    J.LITTLE_FINGER_KNUCKLE: J.LITTLE_FINGER_METACARPAL,
    J.LITTLE_FINGER_INTERMEDIATE_BASE: J.LITTLE_FINGER_KNUCKLE,
    J.LITTLE_FINGER_INTERMEDIATE_TIP: J.LITTLE_FINGER_INTERMEDIATE_BASE,
    J.LITTLE_FINGER_TIP: J.LITTLE_FINGER_INTERMEDIATE_TIP,
    J.FOREARM_WRIST: J.WRIST,
    J.FOREARM_ARM: J.FOREARM_WRIST,
}

LEAF_JOINT_NAMES = frozenset(
    {
        J.THUMB_TIP,
        J.INDEX_FINGER_TIP,
        J.MIDDLE_FINGER_TIP,
        J.RING_FINGER_TIP,
        J.LITTLE_FINGER_TIP,
        J.FOREARM_ARM,
    }
)

# Tip first, knuckle last. The thumb has no knuckle entry.
FINGER_JOINT_NAMES: Dict[FingerName, Tuple[JointName, ...]] = {
    FingerName.THUMB: (J.THUMB_TIP, J.THUMB_INTERMEDIATE_TIP, J.THUMB_INTERMEDIATE_BASE),
    FingerName.INDEX_FINGER: (
        J.INDEX_FINGER_TIP,
        J.INDEX_FINGER_INTERMEDIATE_TIP,
        J.INDEX_FINGER_INTERMEDIATE_BASE,
        J.INDEX_FINGER_KNUCKLE,
    ),
    FingerName.MIDDLE_FINGER: (
        J.MIDDLE_FINGER_TIP,
        J.MIDDLE_FINGER_INTERMEDIATE_TIP,
        J.MIDDLE_FINGER_INTERMEDIATE_BASE,
        J.MIDDLE_FINGER_KNUCKLE,
    ),
    FingerName.RING_FINGER: (
        J.RING_FINGER_TIP,
        J.RING_FINGER_INTERMEDIATE_TIP,
        J.RING_FINGER_INTERMEDIATE_BASE,
        J.RING_FINGER_KNUCKLE,
    ),
    FingerName.LITTLE_FINGER: (
        J.LITTLE_FINGER_TIP,
        J.LITTLE_FINGER_INTERMEDIATE_TIP,
        J.LITTLE_FINGER_INTERMEDIATE_BASE,
        J.LITTLE_FINGER_KNUCKLE,
    ),
}

def _neutral_bone_offsets() -> Dict[JointName, Tuple[float, float, float]]:
    # +x points from the wrist towards the finger tips, +y towards the thumb side.
    offsets = {
        J.WRIST: (0.0, 0.0, 0.0),
        J.THUMB_KNUCKLE: (cm(2.5), cm(3.5), 0.0),
        J.THUMB_INTERMEDIATE_BASE: (cm(3.5), 0.0, 0.0),
        J.THUMB_INTERMEDIATE_TIP: (cm(3.0), 0.0, 0.0),
        J.THUMB_TIP: (cm(2.5), 0.0, 0.0),
        J.FOREARM_WRIST: (cm(-0.5), 0.0, 0.0),
        J.FOREARM_ARM: (cm(-20.0), 0.0, 0.0),
    }
    lateral = {
        FingerName.INDEX_FINGER: 2.0,
        FingerName.MIDDLE_FINGER: 0.5,
        FingerName.RING_FINGER: -1.0,
        FingerName.LITTLE_FINGER: -2.5,
    }
    for finger, y in lateral.items():
        tip, inter_tip, inter_base, knuckle = FINGER_JOINT_NAMES[finger]
        offsets[JOINT_PARENTS[knuckle]] = (cm(1.0), cm(y), 0.0)
        offsets[knuckle] = (cm(6.0), 0.0, 0.0)
        offsets[inter_base] = (cm(4.0), 0.0, 0.0)
        offsets[inter_tip] = (cm(2.5), 0.0, 0.0)
        offsets[tip] = (cm(2.0), 0.0, 0.0)
    return offsets


# Parent-relative bone offsets of a flat, open hand.
NEUTRAL_BONE_OFFSETS: Dict[JointName, Tuple[float, float, float]] = _neutral_bone_offsets()


class SkeletonError(ValueError):
    """Raised when joints do not form a single tree rooted at one joint."""


def _frozen_matrix(m) -> np.ndarray:
    arr = np.array(m, dtype=float)
    if arr.shape != (4, 4):
        raise ValueError(f"Expected a 4x4 transform, got shape {arr.shape}")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Joint:
    """
    One tracked joint at one instant.
    local_transform is parent-from-joint, root_transform is anchor-from-joint.
    """

    name: JointName
    parent: Optional[JointName]
    local_transform: np.ndarray = field(repr=False)
    root_transform: np.ndarray = field(repr=False)
    is_tracked: bool = True

    def __post_init__(self):
        object.__setattr__(self, "local_transform", _frozen_matrix(self.local_transform))
        object.__setattr__(self, "root_transform", _frozen_matrix(self.root_transform))

    @property
    def angle(self) -> float:
        """Rotation magnitude (radians) of the parent-relative transform."""
        return rotation_angle(self.local_transform)

    @property
    def position(self) -> np.ndarray:
        """Anchor-space position."""
        return translation_of(self.root_transform)

    def distance_to(self, other: "Joint") -> float:
        return distance(self.position, other.position)


class HandSkeleton:
    """
    Immutable set of joints for a single tracking update.
    Joints must form one tree: a single parentless root, every parent present, no cycles.
    """

    def __init__(self, joints: Union[Mapping[JointName, Joint], Iterable[Joint]]):
        if isinstance(joints, Mapping):
            joints = joints.values()
        by_name = {j.name: j for j in joints}
        # keep the vocabulary's declaration order regardless of input order
        self._joints: Dict[JointName, Joint] = {
            name: by_name[name] for name in JointName if name in by_name
        }
        self._validate_tree()

    def _validate_tree(self) -> None:
        roots = [j.name for j in self._joints.values() if j.parent is None]
        if len(roots) != 1:
            raise SkeletonError(f"Expected exactly one root joint, found {len(roots)}: {roots}")

        for joint in self._joints.values():
            seen = {joint.name}
            parent = joint.parent
            while parent is not None:
                if parent not in self._joints:
                    raise SkeletonError(f"Joint '{joint.name.value}' has missing ancestor '{parent.value}'")
                if parent in seen:
                    raise SkeletonError(f"Cycle through joint '{parent.value}'")
                seen.add(parent)
                parent = self._joints[parent].parent

    # ---------- construction ----------
    @classmethod
    def from_local_transforms(
        cls,
        local_transforms: Mapping[JointName, np.ndarray],
        tracked: Optional[Mapping[JointName, bool]] = None,
        parents: Mapping[JointName, Optional[JointName]] = JOINT_PARENTS,
    ) -> "HandSkeleton":
        """
        Build a skeleton from parent-relative transforms only.
        Anchor-relative transforms are composed down each joint's parent chain.
        """
        tracked = tracked or {}
        for name in local_transforms:
            parent = parents.get(name)
            if parent is not None and parent not in local_transforms:
                raise SkeletonError(f"Joint '{name.value}' has missing parent '{parent.value}'")

        root_transforms: Dict[JointName, np.ndarray] = {}

        def anchor_from(name: JointName, visiting: frozenset) -> np.ndarray:
            if name in root_transforms:
                return root_transforms[name]
            if name in visiting:
                raise SkeletonError(f"Cycle through joint '{name.value}'")
            local = np.asarray(local_transforms[name], dtype=float)
            parent = parents.get(name)
            if parent is None:
                m = local
            else:
                m = anchor_from(parent, visiting | {name}) @ local
            root_transforms[name] = m
            return m

        joints = []
        for name in local_transforms:
            joints.append(
                Joint(
                    name=name,
                    parent=parents.get(name),
                    local_transform=local_transforms[name],
                    root_transform=anchor_from(name, frozenset()),
                    is_tracked=tracked.get(name, True),
                )
            )
        return cls(joints)

    @classmethod
    def neutral_pose(cls) -> "HandSkeleton":
        """Flat open hand: identity rotations, fixed bone offsets."""
        local = {name: make_transform(translation=offset) for name, offset in NEUTRAL_BONE_OFFSETS.items()}
        return cls.from_local_transforms(local)

    # ---------- queries ----------
    def joint(self, name: JointName) -> Optional[Joint]:
        return self._joints.get(name)

    def __contains__(self, name) -> bool:
        return name in self._joints

    def __len__(self) -> int:
        return len(self._joints)

    @property
    def all_joints(self) -> List[Joint]:
        return list(self._joints.values())

    @property
    def root_joint(self) -> Joint:
        return next(j for j in self._joints.values() if j.parent is None)

    @property
    def leaf_joints(self) -> List[Joint]:
        return [j for j in self._joints.values() if j.name in LEAF_JOINT_NAMES]

    def finger_joints(self, finger: FingerName) -> List[Joint]:
        """Ordered joints of one finger, tip first."""
        joints = [self._joints[n] for n in FINGER_JOINT_NAMES[finger] if n in self._joints]
        assert len(joints) >= 3, f"finger '{finger.value}' resolved only {len(joints)} joints"
        return joints
