import unittest
import os
import sys
import numpy as np
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from tracking.orientation import estimate
from tracking.pose_state import PoseState
from tracking.types import Vector3


class TestPoseState(unittest.TestCase):
    def test_default_pose(self):
        pose = PoseState()
        snap = pose.snapshot()
        np.testing.assert_array_equal(snap.position, np.zeros(3))
        np.testing.assert_allclose(snap.rotation.as_matrix(), np.eye(3))

    def test_telemetry_rounding(self):
        pose = PoseState()
        pose.last_acceleration = Vector3(0.12345, -0.5, 0.0)
        pose.velocity = Vector3(0.0104999, 0.0, 0.0)
        pose.position = Vector3(1.23456, 2.0, -0.0004)
        pose.last_orientation = (12.345, -45.06, 0.0)

        telemetry = pose.telemetry()
        self.assertEqual(telemetry['acceleration'], (0.123, -0.5, 0.0))
        self.assertEqual(telemetry['velocity'], (0.01, 0.0, 0.0))
        self.assertEqual(telemetry['position'][0], 1.235)
        self.assertEqual(telemetry['orientation'][:2], (12.3, -45.1))

        text = pose.format_telemetry()
        self.assertIn("x: 1.235, y: 2.000", text)
        self.assertIn("Alpha (Z): 12.3", text)

    def test_snapshot_reflects_latest_writes(self):
        pose = PoseState()
        pose.position = Vector3(1.0, 2.0, 3.0)
        pose.rotation = estimate(90, 0, 0)
        snap = pose.snapshot()
        np.testing.assert_array_equal(snap.position, [1.0, 2.0, 3.0])
        np.testing.assert_allclose(snap.rotation.as_rotvec(), [0, 0, np.pi / 2], atol=1e-12)


if __name__ == '__main__':
    unittest.main()
