"""
Dead-reckoning integrator.

Integrates gated linear acceleration twice (explicit Euler) to get velocity and
position. No drift correction: position is only meaningful over short pushes.

Per axis, with filtered acceleration v and step dt (seconds):
    v == 0:  vel' = vel * friction     (friction = fraction of velocity retained)
    v != 0:  vel' = vel + v * dt
    always:  pos' = pos + vel' * dt    (uses the UPDATED velocity)

Usage:
    integrator = Integrator(config)
    filtered = integrator.update(sample, pose)
"""

from dataclasses import dataclass, field
from typing import Optional
import logging
import numpy as np

from tracking.config import TrackingConfig
from tracking.errors import NonMonotonicTimestamp, SensorPayloadMissing
from tracking.pose_state import PoseState
from tracking.signal_filter import filter_acceleration
from tracking.types import MotionSample, Vector3

logger = logging.getLogger(__name__)


@dataclass
class IntegratorState:
    last_timestamp_ms: Optional[float] = None
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))

    @property
    def is_anchored(self) -> bool:
        return self.last_timestamp_ms is not None


class Integrator:
    """
    Converts a stream of timestamped acceleration samples into velocity and position.

    The first accepted sample of a run only anchors the clock. Every later sample
    advances the state by the elapsed time since the previous accepted sample.
    """

    def __init__(self, config: Optional[TrackingConfig] = None):
        self.config = config or TrackingConfig()
        self.thresholds = np.array(self.config.thresholds, dtype=float)
        self.friction = self.config.friction
        self.state = IntegratorState()

    def update(self, sample: MotionSample, pose: Optional[PoseState] = None) -> np.ndarray:
        """
        Integrate one sample.

        Args:
            sample: Raw motion sample
            pose: Shared pose record to publish velocity/position/acceleration into

        Returns:
            Filtered acceleration (x, y, z) for this sample

        Raises:
            SensorPayloadMissing: No acceleration payload. Nothing changes, the
                anchor is NOT advanced, so the next sample integrates across the gap.
            NonMonotonicTimestamp: Sample older than the anchor. Nothing changes.
        """
        if not sample.has_acceleration:
            raise SensorPayloadMissing(f"Motion sample at {sample.timestamp_ms}ms has no acceleration")

        state = self.state
        if state.is_anchored and sample.timestamp_ms < state.last_timestamp_ms:
            raise NonMonotonicTimestamp(sample.timestamp_ms, state.last_timestamp_ms)

        filtered = filter_acceleration(sample.acceleration, self.thresholds)

        if state.is_anchored:
            dt = (sample.timestamp_ms - state.last_timestamp_ms) / 1000.0
            gated = filtered == 0.0
            state.velocity = np.where(gated, state.velocity * self.friction, state.velocity + filtered * dt)
            state.position = state.position + state.velocity * dt
        else:
            logger.debug("Integration anchored at %.1fms", sample.timestamp_ms)

        state.last_timestamp_ms = sample.timestamp_ms

        if pose is not None:
            pose.last_acceleration = Vector3.from_numpy(filtered)
            pose.velocity = Vector3.from_numpy(state.velocity)
            pose.position = Vector3.from_numpy(state.position)

        return filtered

    @property
    def velocity(self) -> Vector3:
        return Vector3.from_numpy(self.state.velocity)

    @property
    def position(self) -> Vector3:
        return Vector3.from_numpy(self.state.position)

    def reset(self):
        """Discard the run: no anchor, zero velocity and position."""
        self.state = IntegratorState()
