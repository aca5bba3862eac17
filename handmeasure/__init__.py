"""Per-finger bend measurements and finger-state classification from tracked hand skeletons."""

from handmeasure.Configuration import ConfigError, ConfigWatcher, Configuration, load_config
from handmeasure.Fingers import Finger, HandJoint
from handmeasure.HandData import Chirality, Hand, HandAnchor, build_hand
from handmeasure.HandShapeRecognizer import (
    FingerReading,
    FingerState,
    HandShapeRecognizer,
    RecognitionResult,
    classify_bend,
)
from handmeasure.Joints import (
    FINGER_JOINT_NAMES,
    JOINT_PARENTS,
    LEAF_JOINT_NAMES,
    FingerName,
    HandSkeleton,
    Joint,
    JointName,
    SkeletonError,
)
from handmeasure.Pipeline import HandPipeline, HandReading

__all__ = [
    "Chirality",
    "ConfigError",
    "ConfigWatcher",
    "Configuration",
    "FINGER_JOINT_NAMES",
    "Finger",
    "FingerName",
    "FingerReading",
    "FingerState",
    "Hand",
    "HandAnchor",
    "HandJoint",
    "HandPipeline",
    "HandReading",
    "HandShapeRecognizer",
    "HandSkeleton",
    "JOINT_PARENTS",
    "Joint",
    "JointName",
    "LEAF_JOINT_NAMES",
    "RecognitionResult",
    "SkeletonError",
    "build_hand",
    "classify_bend",
    "load_config",
]
