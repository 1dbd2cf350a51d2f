"""
Device orientation angles to camera rotation.

The platform reports alpha (heading, about Z), beta (front-back tilt, about X)
and gamma (left-right tilt, about Y) in degrees. They are composed as intrinsic
Tait-Bryan angles in Z-X-Y order:

    R = Rz(alpha) @ Rx(beta) @ Ry(gamma)

Any other axis order misaligns the camera with the physical device.
"""

from typing import Optional
import numpy as np
from scipy.spatial.transform import Rotation as R

from tracking.errors import SensorPayloadMissing
from tracking.pose_state import PoseState
from tracking.types import OrientationSample

EULER_ORDER = 'ZXY'  # intrinsic (uppercase in scipy)


def estimate(
    alpha_deg: Optional[float],
    beta_deg: Optional[float],
    gamma_deg: Optional[float]
) -> R:
    """
    Build the camera rotation for one orientation reading.
    Absent angles are treated as 0.
    """
    angles_deg = [a if a is not None else 0.0 for a in (alpha_deg, beta_deg, gamma_deg)]
    alpha, beta, gamma = np.radians(angles_deg)
    return R.from_euler(EULER_ORDER, [alpha, beta, gamma])


def as_wxyz(rotation: R) -> np.ndarray:
    """Scalar-first quaternion (w, x, y, z). scipy uses (x, y, z, w)."""
    q = rotation.as_quat()
    return q[..., [3, 0, 1, 2]]


class OrientationEstimator:
    """Stateless; publishes each estimate into a PoseState."""

    def update(self, sample: OrientationSample, pose: PoseState) -> R:
        if sample.is_empty:
            raise SensorPayloadMissing("Orientation sample has no alpha/beta/gamma")
        rotation = estimate(sample.alpha_deg, sample.beta_deg, sample.gamma_deg)
        pose.rotation = rotation
        pose.last_orientation = sample.angles()
        return rotation
