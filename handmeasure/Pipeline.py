import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from handmeasure.Configuration import Configuration, ConfigWatcher
from handmeasure.HandData import Hand, HandAnchor
from handmeasure.HandShapeRecognizer import HandShapeRecognizer, RecognitionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class HandReading:
    hand: Hand
    result: RecognitionResult

    def to_dict(self):
        d = self.hand.to_dict()
        for name, reading in self.result.to_dict()["fingers"].items():
            d["fingers"][name]["state"] = reading["state"]
        return d


class HandPipeline:
    """
    Per-update driver: anchors in, hand snapshots plus finger states out.

    With config_path set the JSON config is polled once per frame and the
    recognizer is rebuilt when the thresholds change; nothing else carries
    over between frames. A valid config file takes precedence over config,
    which is used while the file is missing or invalid.
    """

    def __init__(
        self,
        config: Optional[Configuration] = None,
        config_path: Optional[str] = None,
        min_check_interval: float = 0.5,
    ):
        if config_path:
            self._watcher = ConfigWatcher(config_path, min_check_interval, default=config)
            config = self._watcher.get_config()
        else:
            self._watcher = None
            if config is None:
                config = Configuration.standard()
        self.recognizer = HandShapeRecognizer(config)

    @property
    def config(self) -> Configuration:
        return self.recognizer.config

    def _refresh_config(self) -> None:
        if self._watcher is None:
            return
        new_config = self._watcher.check_reload()
        if new_config != self.recognizer.config:
            logger.info("Finger thresholds changed, rebuilding recognizer")
            self.recognizer = HandShapeRecognizer(new_config)

    def process(self, anchor: HandAnchor) -> Optional[HandReading]:
        hand = anchor.parse()
        if hand is None:
            logger.debug("%s hand has no skeleton, skipping", anchor.chirality.value)
            return None
        return HandReading(hand=hand, result=self.recognizer.recognize(hand))

    def process_frame(self, anchors: Iterable[HandAnchor]) -> List[HandReading]:
        self._refresh_config()
        readings = []
        for anchor in anchors:
            reading = self.process(anchor)
            if reading is not None:
                readings.append(reading)
        return readings
