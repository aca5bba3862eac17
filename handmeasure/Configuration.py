import json
import logging
import os
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from handmeasure.Joints import FingerName

logger = logging.getLogger(__name__)

BendMinMax = Tuple[float, float]

DEFAULT_BEND_MIN_MAX: BendMinMax = (0.3, 2.0)


class ConfigError(ValueError):
    """Raised for configuration values that cannot be used as thresholds."""


def _bend_pair(value, where: str) -> BendMinMax:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or len(value) != 2:
        raise ConfigError(f"{where}: expected [min, max], got {value!r}")
    try:
        lo, hi = float(value[0]), float(value[1])
    except (TypeError, ValueError):
        raise ConfigError(f"{where}: thresholds must be numbers, got {value!r}") from None
    if lo > hi:
        raise ConfigError(f"{where}: min {lo} is greater than max {hi}")
    return lo, hi


@dataclass(frozen=True)
class Configuration:
    """
    Bend thresholds (radians) per finger, with a shared default pair.
    Bends below min read as straight, above max as curled.
    """

    bend_min_max: Mapping[FingerName, BendMinMax] = field(default_factory=dict)
    default_bend_min_max: BendMinMax = DEFAULT_BEND_MIN_MAX

    def __post_init__(self):
        pairs = {
            FingerName(name): _bend_pair(pair, f"bend_min_max[{FingerName(name).value}]")
            for name, pair in dict(self.bend_min_max).items()
        }
        object.__setattr__(self, "bend_min_max", MappingProxyType(pairs))
        object.__setattr__(
            self, "default_bend_min_max", _bend_pair(self.default_bend_min_max, "default_bend_min_max")
        )

    def __eq__(self, other):
        if not isinstance(other, Configuration):
            return NotImplemented
        return (
            dict(self.bend_min_max) == dict(other.bend_min_max)
            and self.default_bend_min_max == other.default_bend_min_max
        )

    def __hash__(self):
        return hash((tuple(sorted(self.bend_min_max.items())), self.default_bend_min_max))

    def bend_min_max_of(self, finger: FingerName) -> BendMinMax:
        return self.bend_min_max.get(finger, self.default_bend_min_max)

    @classmethod
    def standard(cls) -> "Configuration":
        return cls(bend_min_max={}, default_bend_min_max=DEFAULT_BEND_MIN_MAX)

    @classmethod
    def from_dict(cls, cfg: Optional[Mapping[str, Any]]) -> "Configuration":
        """
        Read the "classifier" section of a config document:
            {"classifier": {"default_bend_min_max": [0.3, 2.0],
                            "bend_min_max": {"indexFinger": [0.2, 1.8]}}}
        Missing keys fall back to the standard values.
        """
        cfg = _section(cfg, "config document")
        c = _section(cfg.get("classifier"), "classifier")
        overrides: Dict[FingerName, BendMinMax] = {}
        for name, pair in _section(c.get("bend_min_max"), "bend_min_max").items():
            try:
                finger = FingerName(name)
            except ValueError:
                raise ConfigError(f"bend_min_max: unknown finger '{name}'") from None
            overrides[finger] = pair
        return cls(
            bend_min_max=overrides,
            default_bend_min_max=c.get("default_bend_min_max", DEFAULT_BEND_MIN_MAX),
        )


def _section(value, where: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{where}: expected an object, got {type(value).__name__}")
    return value


def _read_json(path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_config(path="config.json") -> Dict[str, Any]:
    if not os.path.exists(path):
        logger.warning("config '%s' not found, using defaults.", path)
        return {}
    try:
        return _read_json(path)
    except (OSError, ValueError) as e:
        logger.warning("Failed to load config '%s': %s", path, e)
        return {}


class ConfigWatcher:
    """
    Watches a JSON config file and rebuilds the Configuration when the file changes.
    Usage:
        watcher = ConfigWatcher("config.json")
        config = watcher.get_config()       # initial load
        # later, once per frame:
        config = watcher.check_reload()     # new Configuration or the same one

    default is used until the file yields a valid Configuration. A file that
    is missing, unreadable or invalid keeps the last good configuration and
    is retried on the next check.
    """

    def __init__(
        self,
        path="config.json",
        min_check_interval: float = 0.5,
        default: Optional[Configuration] = None,
    ):
        self.path = path
        self._config = default if default is not None else Configuration.standard()
        self._mtime = None
        self._last_checked = 0.0
        self._min_check_interval = min_check_interval
        self._load()

    def _load(self) -> None:
        if not os.path.exists(self.path):
            return
        try:
            mtime = os.path.getmtime(self.path)
            config = Configuration.from_dict(_read_json(self.path))
        except (OSError, ValueError) as e:
            # ConfigError is a ValueError, as is a JSON decode error
            logger.warning("Ignoring invalid config '%s': %s", self.path, e)
            return
        self._config = config
        self._mtime = mtime

    def get_config(self) -> Configuration:
        return self._config

    def check_reload(self) -> Configuration:
        """
        Cheap enough to call every frame; the file is only stat'ed every min_check_interval seconds.
        A file that goes missing keeps the current configuration.
        """
        now = time.monotonic()
        if now - self._last_checked < self._min_check_interval:
            return self._config
        self._last_checked = now

        if not os.path.exists(self.path):
            return self._config
        if os.path.getmtime(self.path) != self._mtime:
            logger.info("Detected change in '%s', reloading", self.path)
            self._load()
        return self._config
