from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional

import numpy as np

from handmeasure.Fingers import Finger
from handmeasure.Joints import FingerName, HandSkeleton, Joint, JointName
from handmeasure.Transforms import compose, translation_of


class Chirality(str, Enum):
    LEFT = "left"
    RIGHT = "right"


def _frozen(m) -> np.ndarray:
    arr = np.array(m, dtype=float)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class HandAnchor:
    """
    What the tracking source hands over for one hand per update.
    skeleton is None when tracking of the joints is lost.
    """

    chirality: Chirality
    origin_from_anchor: np.ndarray = field(repr=False)
    is_tracked: bool = True
    skeleton: Optional[HandSkeleton] = field(default=None, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "origin_from_anchor", _frozen(self.origin_from_anchor))

    def world_position(self, joint: Joint) -> np.ndarray:
        return translation_of(compose(self.origin_from_anchor, joint.root_transform))

    def index_finger_tip_joint(self) -> Optional[Joint]:
        """Index tip joint, only when the anchor, the skeleton and the joint are all tracked."""
        if not self.is_tracked or self.skeleton is None:
            return None
        joint = self.skeleton.joint(JointName.INDEX_FINGER_TIP)
        if joint is None or not joint.is_tracked:
            return None
        return joint

    def parse(self) -> Optional["Hand"]:
        return build_hand(self.skeleton, self.chirality, self.origin_from_anchor, self.is_tracked)


@dataclass(frozen=True, eq=False)
class Hand:
    """One hand at one tracking update, with all five fingers."""

    chirality: Chirality
    fingers: Mapping[FingerName, Finger]
    origin_from_anchor: np.ndarray = field(repr=False)
    is_tracked: bool

    def __post_init__(self):
        object.__setattr__(self, "fingers", MappingProxyType(dict(self.fingers)))
        object.__setattr__(self, "origin_from_anchor", _frozen(self.origin_from_anchor))

    def finger(self, name: FingerName) -> Finger:
        return self.fingers[name]

    def to_dict(self) -> Dict:
        return {
            "chirality": self.chirality.value,
            "is_tracked": self.is_tracked,
            "origin_from_anchor": self.origin_from_anchor.tolist(),
            "fingers": {
                name.value: {
                    "bend": finger.bend,
                    "angle": finger.angle,
                    "is_tracked": finger.is_tracked,
                    "is_tracked_completely": finger.is_tracked_completely,
                    "joints": [
                        {
                            "name": j.name.value,
                            "position": j.position.tolist(),
                            "angle": j.angle,
                            "is_tracked": j.is_tracked,
                        }
                        for j in finger.joints
                    ],
                }
                for name, finger in self.fingers.items()
            },
        }


def build_hand(
    skeleton: Optional[HandSkeleton],
    chirality: Chirality,
    origin_from_anchor,
    is_tracked: bool,
) -> Optional[Hand]:
    """Assemble the five fingers of a skeleton, or None when there is no skeleton."""
    if skeleton is None:
        return None

    fingers = {name: Finger.from_skeleton(name, skeleton, origin_from_anchor) for name in FingerName}
    return Hand(
        chirality=chirality,
        fingers=fingers,
        origin_from_anchor=origin_from_anchor,
        is_tracked=is_tracked,
    )
