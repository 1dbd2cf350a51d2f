"""
Sample and vector types shared by the tracking pipeline.

Units:
- Acceleration: m/s² (linear, gravity already removed by the platform)
- Velocity: m/s
- Position: m
- Timestamps: milliseconds, platform monotonic clock
- Orientation angles: degrees
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import numpy as np


@dataclass
class Vector3:
    """Three independent scalar channels (no cross-axis coupling)."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def to_numpy(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    @classmethod
    def from_numpy(cls, data: np.ndarray) -> 'Vector3':
        if len(data) != 3:
            raise ValueError("Data array must have 3 elements: [x, y, z]")
        return cls(x=float(data[0]), y=float(data[1]), z=float(data[2]))

    def rounded(self, digits: int = 3) -> Tuple[float, float, float]:
        return (round(self.x, digits), round(self.y, digits), round(self.z, digits))


# Per-axis reading as delivered by the platform; None means the axis was not reported.
AxisReadings = Tuple[Optional[float], Optional[float], Optional[float]]


@dataclass(frozen=True)
class MotionSample:
    """
    A single inertial reading.

    `acceleration` is None when the event carried no acceleration payload at all.
    Individual components may be None when the platform did not report that axis.
    """
    timestamp_ms: float
    acceleration: Optional[AxisReadings] = None

    @property
    def has_acceleration(self) -> bool:
        return self.acceleration is not None


@dataclass(frozen=True)
class OrientationSample:
    """Heading (alpha), front-back tilt (beta) and left-right tilt (gamma) in degrees."""
    alpha_deg: Optional[float] = None
    beta_deg: Optional[float] = None
    gamma_deg: Optional[float] = None
    timestamp_ms: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return self.alpha_deg is None and self.beta_deg is None and self.gamma_deg is None

    def angles(self) -> Tuple[float, float, float]:
        """Angles with absent components resolved to 0."""
        return (
            self.alpha_deg if self.alpha_deg is not None else 0.0,
            self.beta_deg if self.beta_deg is not None else 0.0,
            self.gamma_deg if self.gamma_deg is not None else 0.0,
        )
