import unittest
import os
import sys
import numpy as np
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from tracking.config import TrackingConfig
from tracking.errors import NonMonotonicTimestamp, SensorPayloadMissing
from tracking.integrator import Integrator
from tracking.pose_state import PoseState
from tracking.types import MotionSample


def accel_x(t_ms, ax):
    return MotionSample(timestamp_ms=t_ms, acceleration=(ax, 0.0, 0.0))


class TestIntegrator(unittest.TestCase):
    def test_worked_scenario(self):
        integrator = Integrator(TrackingConfig(noise_threshold=0.1, friction=0.2))
        pose = PoseState()

        integrator.update(accel_x(0, 0.5), pose)
        self.assertEqual(pose.velocity.x, 0.0)
        self.assertEqual(pose.position.x, 0.0)

        integrator.update(accel_x(100, 0.5), pose)
        self.assertAlmostEqual(pose.velocity.x, 0.05)
        self.assertAlmostEqual(pose.position.x, 0.005)
        self.assertAlmostEqual(pose.last_acceleration.x, 0.5)

        integrator.update(accel_x(200, 0.05), pose)
        self.assertEqual(pose.last_acceleration.x, 0.0)
        self.assertAlmostEqual(pose.velocity.x, 0.01)
        self.assertAlmostEqual(pose.position.x, 0.006)

    def test_first_sample_only_anchors(self):
        integrator = Integrator()
        pose = PoseState()
        integrator.update(MotionSample(5000, (3.0, -2.0, 9.0)), pose)

        self.assertEqual(integrator.state.last_timestamp_ms, 5000)
        np.testing.assert_array_equal(integrator.state.velocity, np.zeros(3))
        np.testing.assert_array_equal(integrator.state.position, np.zeros(3))
        self.assertEqual(pose.position.rounded(), (0.0, 0.0, 0.0))

    def test_zero_friction_is_absorbing(self):
        integrator = Integrator(TrackingConfig(noise_threshold=0.1, friction=0.0))
        integrator.update(accel_x(0, 1.0))
        integrator.update(accel_x(100, 1.0))
        self.assertGreater(integrator.velocity.x, 0.0)

        integrator.update(accel_x(200, 0.0))
        self.assertEqual(integrator.velocity.x, 0.0)
        position = integrator.position.x

        for k in range(3, 10):
            integrator.update(accel_x(k * 100, 0.01))
            self.assertEqual(integrator.velocity.x, 0.0)
        self.assertEqual(integrator.position.x, position)

    def test_constant_acceleration_accumulates(self):
        a, dt_ms, n = 0.7, 20, 25
        dt = dt_ms / 1000.0
        integrator = Integrator(TrackingConfig(noise_threshold=0.1, friction=0.5))
        integrator.update(accel_x(0, a))
        for k in range(1, n + 1):
            integrator.update(accel_x(k * dt_ms, a))
            self.assertAlmostEqual(integrator.velocity.x, a * dt * k, places=12)
        self.assertAlmostEqual(integrator.position.x, a * dt ** 2 * n * (n + 1) / 2, places=12)

    def test_axes_are_independent(self):
        integrator = Integrator(TrackingConfig(noise_threshold=0.1, friction=0.0))
        integrator.update(MotionSample(0, (1.0, None, -2.0)))
        integrator.update(MotionSample(100, (1.0, None, -2.0)))
        v = integrator.velocity
        self.assertAlmostEqual(v.x, 0.1)
        self.assertEqual(v.y, 0.0)
        self.assertAlmostEqual(v.z, -0.2)

    def test_missing_payload_skipped_without_advancing_anchor(self):
        integrator = Integrator(TrackingConfig(noise_threshold=0.1, friction=0.2))
        integrator.update(accel_x(0, 0.5))
        integrator.update(accel_x(100, 0.5))
        before_v, before_p = integrator.velocity, integrator.position

        with self.assertRaises(SensorPayloadMissing):
            integrator.update(MotionSample(timestamp_ms=200, acceleration=None))
        self.assertEqual(integrator.state.last_timestamp_ms, 100)
        self.assertEqual(integrator.velocity, before_v)
        self.assertEqual(integrator.position, before_p)

        # Next accepted sample integrates across the combined 200ms gap
        integrator.update(accel_x(300, 0.5))
        self.assertAlmostEqual(integrator.velocity.x, 0.05 + 0.5 * 0.2)
        self.assertAlmostEqual(integrator.position.x, 0.005 + 0.15 * 0.2)

    def test_missing_payload_before_anchor(self):
        integrator = Integrator()
        with self.assertRaises(SensorPayloadMissing):
            integrator.update(MotionSample(timestamp_ms=0))
        self.assertFalse(integrator.state.is_anchored)

    def test_out_of_order_sample_is_discarded(self):
        integrator = Integrator(TrackingConfig(noise_threshold=0.1, friction=0.2))
        integrator.update(accel_x(100, 0.5))
        integrator.update(accel_x(200, 0.5))
        with self.assertRaises(NonMonotonicTimestamp):
            integrator.update(accel_x(150, 5.0))
        self.assertEqual(integrator.state.last_timestamp_ms, 200)
        self.assertAlmostEqual(integrator.velocity.x, 0.05)

    def test_duplicate_timestamp_is_accepted(self):
        integrator = Integrator(TrackingConfig(noise_threshold=0.1, friction=0.2))
        integrator.update(accel_x(0, 0.5))
        integrator.update(accel_x(100, 0.5))
        integrator.update(accel_x(100, 0.5))
        self.assertAlmostEqual(integrator.velocity.x, 0.05)
        self.assertAlmostEqual(integrator.position.x, 0.005)

    def test_reset_starts_fresh_run(self):
        integrator = Integrator()
        integrator.update(accel_x(0, 1.0))
        integrator.update(accel_x(100, 1.0))
        integrator.reset()
        self.assertFalse(integrator.state.is_anchored)

        integrator.update(accel_x(10_000, 1.0))
        self.assertEqual(integrator.velocity.x, 0.0)
        self.assertEqual(integrator.position.x, 0.0)


if __name__ == '__main__':
    unittest.main()
