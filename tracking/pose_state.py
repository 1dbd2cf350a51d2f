from dataclasses import dataclass, field
from typing import Dict, NamedTuple, Tuple
import numpy as np
from scipy.spatial.transform import Rotation as R

from tracking.types import Vector3


class PoseSnapshot(NamedTuple):
    position: np.ndarray  # 3 (x, y, z) m
    rotation: R


@dataclass
class PoseState:
    """
    Latest tracking outputs, read once per rendered frame.

    Integrator writes velocity/position/last_acceleration, OrientationEstimator
    writes rotation/last_orientation. Each write replaces a whole field, and all
    writers run on the same event loop, so a reader never sees a half-updated field.
    """
    position: Vector3 = field(default_factory=Vector3)
    velocity: Vector3 = field(default_factory=Vector3)
    last_acceleration: Vector3 = field(default_factory=Vector3)
    rotation: R = field(default_factory=R.identity)
    last_orientation: Tuple[float, float, float] = (0.0, 0.0, 0.0)  # alpha, beta, gamma deg

    def snapshot(self) -> PoseSnapshot:
        return PoseSnapshot(position=self.position.to_numpy(), rotation=self.rotation)

    def telemetry(self) -> Dict[str, Tuple[float, float, float]]:
        """Diagnostic readout, linear quantities to 3 decimals and angles to 1."""
        alpha, beta, gamma = self.last_orientation
        return {
            'acceleration': self.last_acceleration.rounded(3),
            'velocity': self.velocity.rounded(3),
            'position': self.position.rounded(3),
            'orientation': (round(alpha, 1), round(beta, 1), round(gamma, 1)),
        }

    def format_telemetry(self) -> str:
        def fmt(v: Vector3) -> str:
            return f"x: {v.x:.3f}, y: {v.y:.3f}, z: {v.z:.3f}"

        alpha, beta, gamma = self.last_orientation
        return "\n".join([
            f"Acceleration (m/s²): {fmt(self.last_acceleration)}",
            f"Velocity (m/s):      {fmt(self.velocity)}",
            f"Position (m):        {fmt(self.position)}",
            f"Alpha (Z): {alpha:.1f}  Beta (X): {beta:.1f}  Gamma (Y): {gamma:.1f}",
        ])
