from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from handmeasure.Joints import FingerName, HandSkeleton, Joint, JointName
from handmeasure.Transforms import compose, distance, translation_of


@dataclass(frozen=True, eq=False)
class HandJoint:
    """World-space snapshot of a skeleton joint."""

    name: JointName
    position: np.ndarray = field(repr=False)
    angle: float
    is_tracked: bool

    @classmethod
    def from_joint(cls, joint: Joint, origin_from_anchor) -> "HandJoint":
        position = translation_of(compose(origin_from_anchor, joint.root_transform))
        position.setflags(write=False)
        return cls(
            name=joint.name,
            position=position,
            angle=joint.angle,
            is_tracked=joint.is_tracked,
        )

    def distance_to(self, other: "HandJoint") -> float:
        return distance(self.position, other.position)


@dataclass(frozen=True)
class Finger:
    """
    Ordered joints of one finger, tip first and knuckle last.

    bend is the mean angle of the interior joints (tip and knuckle excluded),
    angle is the knuckle's own angle.
    """

    name: FingerName
    joints: Tuple[HandJoint, ...]

    def __post_init__(self):
        object.__setattr__(self, "joints", tuple(self.joints))

    @classmethod
    def from_skeleton(cls, name: FingerName, skeleton: HandSkeleton, origin_from_anchor) -> "Finger":
        joints = skeleton.finger_joints(name)
        return cls(name=name, joints=tuple(HandJoint.from_joint(j, origin_from_anchor) for j in joints))

    @property
    def tip(self) -> HandJoint:
        return self.joints[0]

    @property
    def knuckle(self) -> HandJoint:
        return self.joints[-1]

    @property
    def interior_joints(self) -> Tuple[HandJoint, ...]:
        return self.joints[1:-1]

    @property
    def bend(self) -> float:
        interior = self.interior_joints
        if not interior:
            return 0.0
        return sum(j.angle for j in interior) / len(interior)

    @property
    def angle(self) -> float:
        return self.knuckle.angle

    @property
    def is_tracked(self) -> bool:
        return any(j.is_tracked for j in self.joints)

    @property
    def is_tracked_completely(self) -> bool:
        return all(j.is_tracked for j in self.joints)

    @property
    def is_thumb(self) -> bool:
        return self.name == FingerName.THUMB
