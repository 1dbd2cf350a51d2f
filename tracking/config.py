"""
Tracking configuration profiles.

The dead-reckoning pipeline has two tuning values:

- noise_threshold: dead-zone half width for raw acceleration (m/s²). Readings
  below it are treated as noise and zeroed.
- friction: fraction of velocity RETAINED on each sample whose filtered
  acceleration is zero. It is not a resistance: 0.0 stops the axis instantly,
  values near 1.0 let the device coast almost without loss.

Profiles:
- ar_camera:   camera overlay tuning (threshold 0.1, friction 0.2)
- motion_test: raw readout tuning, velocity zeroed as soon as motion stops
- coasting:    near-frictionless, useful to visualize drift
"""

from dataclasses import dataclass, asdict
from typing import Dict, Optional, Tuple
import json
import logging
import math

from tracking.errors import ConfigError

logger = logging.getLogger(__name__)


# =============================================================================
# Dataclass for Tracking Parameters
# =============================================================================

@dataclass(frozen=True)
class TrackingConfig:
    """
    Tuning values for one tracking session.

    axis_thresholds overrides noise_threshold per axis (x, y, z) when given.
    """
    noise_threshold: float = 0.1   # m/s²
    friction: float = 0.2          # retained fraction per zero-reading sample
    axis_thresholds: Optional[Tuple[float, float, float]] = None
    frame_rate_hz: float = 60.0    # render loop rate
    notes: str = ""

    def __post_init__(self):
        if not math.isfinite(self.noise_threshold) or self.noise_threshold < 0:
            raise ConfigError(f"noise_threshold must be >= 0, got {self.noise_threshold}")
        if not 0.0 <= self.friction <= 1.0:
            raise ConfigError(f"friction must be within [0, 1], got {self.friction}")
        if self.axis_thresholds is not None:
            if len(self.axis_thresholds) != 3:
                raise ConfigError("axis_thresholds must have 3 values: (x, y, z)")
            if any(t < 0 for t in self.axis_thresholds):
                raise ConfigError(f"axis_thresholds must be >= 0, got {self.axis_thresholds}")
            # Frozen dataclass: normalize lists from JSON to a tuple
            object.__setattr__(self, "axis_thresholds", tuple(float(t) for t in self.axis_thresholds))
        if self.frame_rate_hz <= 0:
            raise ConfigError(f"frame_rate_hz must be > 0, got {self.frame_rate_hz}")

    @property
    def thresholds(self) -> Tuple[float, float, float]:
        """Effective per-axis thresholds (x, y, z)."""
        if self.axis_thresholds is not None:
            return self.axis_thresholds
        return (self.noise_threshold,) * 3

    def with_overrides(self, **overrides) -> 'TrackingConfig':
        """
        Copy with the given non-None fields replaced.
        Overriding noise_threshold alone drops the profile's axis_thresholds,
        so the new value applies to all three axes.
        """
        values = asdict(self)
        overrides = {k: v for k, v in overrides.items() if v is not None}
        if 'noise_threshold' in overrides and 'axis_thresholds' not in overrides:
            values['axis_thresholds'] = None
        values.update(overrides)
        return TrackingConfig(**values)


# =============================================================================
# Built-in Profiles
# =============================================================================

BUILTIN_PROFILES: Dict[str, TrackingConfig] = {
    "ar_camera": TrackingConfig(
        noise_threshold=0.1,
        friction=0.2,
        notes="Camera overlay: damped so the camera settles after a push",
    ),
    "motion_test": TrackingConfig(
        noise_threshold=0.1,
        friction=0.0,
        notes="Telemetry readout: velocity dropped as soon as acceleration is gated",
    ),
    "coasting": TrackingConfig(
        noise_threshold=0.1,
        friction=0.9,
        notes="Near-frictionless, shows integration drift",
    ),
}

DEFAULT_PROFILE = "ar_camera"


# =============================================================================
# Profile Database Class
# =============================================================================

class ProfileDatabase:
    """
    Named tracking profiles with fallback to the default profile.

    Usage:
        from tracking.config import profile_db

        config = profile_db.get_config("motion_test")
        print(f"Threshold: {config.noise_threshold} m/s², friction: {config.friction}")
    """

    def __init__(self, profiles: Optional[Dict[str, TrackingConfig]] = None):
        self._profiles: Dict[str, TrackingConfig] = dict(profiles or BUILTIN_PROFILES)

    def _normalize_key(self, name: str) -> str:
        return name.lower().replace(" ", "_").replace("-", "_")

    def get_config(self, name: Optional[str] = None) -> TrackingConfig:
        """
        Look up a profile by name.
        Unknown names fall back to the default profile.
        """
        key = self._normalize_key(name or DEFAULT_PROFILE)
        if key not in self._profiles:
            logger.warning("Unknown tracking profile %r, using %r", name, DEFAULT_PROFILE)
            key = DEFAULT_PROFILE
        return self._profiles[key]

    def register(self, name: str, config: TrackingConfig) -> None:
        self._profiles[self._normalize_key(name)] = config

    def load_json(self, path: str) -> None:
        """
        Add profiles from a JSON file of the form
        {"profile_name": {"noise_threshold": 0.1, "friction": 0.2}, ...}
        """
        try:
            with open(path, 'r') as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not read profiles from {path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigError(f"Profile file {path} must contain a JSON object")

        for name, values in raw.items():
            try:
                self.register(name, TrackingConfig(**values))
            except TypeError as e:
                raise ConfigError(f"Invalid profile {name!r} in {path}: {e}") from e
        logger.info("Loaded %d tracking profiles from %s", len(raw), path)

    def list_profiles(self) -> Dict[str, str]:
        return {k: v.notes for k, v in self._profiles.items()}


# =============================================================================
# Global Instance
# =============================================================================

profile_db = ProfileDatabase()


def get_config(name: Optional[str] = None) -> TrackingConfig:
    """Quick access to a tracking profile."""
    return profile_db.get_config(name)
