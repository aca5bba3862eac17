import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from handmeasure.Configuration import Configuration
from handmeasure.Fingers import Finger
from handmeasure.HandData import Chirality, Hand
from handmeasure.Joints import FingerName

logger = logging.getLogger(__name__)


class FingerState(str, Enum):
    RELAXED = "relaxed"
    CURLED = "curled"
    STRAIGHT = "straight"
    UNKNOWN = "unknown"


def classify_bend(bend: float, bend_min: float, bend_max: float) -> FingerState:
    """Three-way threshold rule. Both bounds belong to the relaxed band."""
    if bend < bend_min:
        return FingerState.STRAIGHT
    if bend > bend_max:
        return FingerState.CURLED
    return FingerState.RELAXED


@dataclass(frozen=True)
class FingerReading:
    state: FingerState
    bend: float
    angle: float


@dataclass(frozen=True, eq=False)
class RecognitionResult:
    chirality: Chirality
    fingers: Mapping[FingerName, FingerReading] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "fingers", MappingProxyType(dict(self.fingers)))

    def state_of(self, name: FingerName) -> FingerState:
        reading = self.fingers.get(name)
        return reading.state if reading is not None else FingerState.UNKNOWN

    @property
    def states(self) -> Dict[FingerName, FingerState]:
        return {name: r.state for name, r in self.fingers.items()}

    def to_dict(self) -> Dict:
        return {
            "chirality": self.chirality.value,
            "fingers": {
                name.value: {"state": r.state.value, "bend": r.bend, "angle": r.angle}
                for name, r in self.fingers.items()
            },
        }


class HandShapeRecognizer:
    """
    Maps each finger's bend to a FingerState using the thresholds of a Configuration.
    Holds no per-frame state, so one instance can serve any number of hands.
    """

    def __init__(self, config: Optional[Configuration] = None):
        self.config = config if config is not None else Configuration.standard()

    def state(self, finger: Finger, angle: Optional[float] = None, bend: Optional[float] = None) -> FingerState:
        """
        angle is accepted alongside bend but not used by the threshold rule yet.
        A finger with no tracked joint reads as UNKNOWN.
        """
        if not finger.is_tracked:
            return FingerState.UNKNOWN
        if bend is None:
            bend = finger.bend
        bend_min, bend_max = self.config.bend_min_max_of(finger.name)
        return classify_bend(bend, bend_min, bend_max)

    def recognize(self, hand: Hand) -> RecognitionResult:
        readings = {}
        for name, finger in hand.fingers.items():
            bend = finger.bend
            angle = finger.angle
            readings[name] = FingerReading(state=self.state(finger, angle=angle, bend=bend), bend=bend, angle=angle)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "%s hand: %s",
                hand.chirality.value,
                ", ".join(f"{n.value}={r.state.value}({r.bend:.2f})" for n, r in readings.items()),
            )
        return RecognitionResult(chirality=hand.chirality, fingers=readings)
