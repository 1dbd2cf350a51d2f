import unittest
import os
import sys
import tempfile
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from data_loader import DataLoader, write_log
from tracking.errors import LogFormatError
from tracking.types import MotionSample, OrientationSample

SAMPLE_LOG = (
    "# recorded on device\n"
    "0\tACC\t0.5\t0.0\t0.0\n"
    "0\tORI\t10.0\t80.0\t-2.5\n"
    "16\tACC\n"
    "33\tACC\t0.25\t\t-0.3\n"
    "33\tGYR\t0.1\t0.2\t0.3\n"
    "40\tORI\t\t81.0\t\n"
    "not-a-number\tACC\t1\t2\t3\n"
)


class TestDataLoader(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "sensorLog.txt")
        with open(self.path, 'w') as f:
            f.write(SAMPLE_LOG)

    def tearDown(self):
        self.tmp.cleanup()

    def test_load_sample_log(self):
        log = DataLoader().load_data(self.path)
        self.assertEqual(len(log.motion), 3, "Malformed and unknown lines should be skipped")
        self.assertEqual(len(log.orientation), 2)
        self.assertAlmostEqual(log.duration_s, 0.04)

    def test_motion_samples(self):
        samples = list(DataLoader().load_data(self.path).motion_samples())
        self.assertEqual(samples[0], MotionSample(0.0, (0.5, 0.0, 0.0)))
        self.assertIsNone(samples[1].acceleration, "Bare ACC line has no payload")
        self.assertEqual(samples[2].acceleration, (0.25, None, -0.3))

    def test_orientation_samples(self):
        samples = list(DataLoader().load_data(self.path).orientation_samples())
        self.assertEqual(samples[0].angles(), (10.0, 80.0, -2.5))
        self.assertIsNone(samples[1].alpha_deg)
        self.assertEqual(samples[1].beta_deg, 81.0)

    def test_events_in_delivery_order(self):
        events = DataLoader().load_data(self.path).events()
        stamps = [e.timestamp_ms for e in events]
        self.assertEqual(stamps, sorted(stamps))
        self.assertIsInstance(events[0], MotionSample)
        self.assertIsInstance(events[1], OrientationSample)

    def test_events_keep_file_order(self):
        path = os.path.join(self.tmp.name, "late.txt")
        with open(path, 'w') as f:
            f.write("0\tACC\t1.0\t0.0\t0.0\n"
                    "200\tACC\t1.0\t0.0\t0.0\n"
                    "150\tORI\t10.0\t0.0\t0.0\n"
                    "100\tACC\t5.0\t0.0\t0.0\n"
                    "300\tACC\t1.0\t0.0\t0.0\n")
        events = DataLoader().load_data(path).events()
        self.assertEqual([e.timestamp_ms for e in events], [0.0, 200.0, 150.0, 100.0, 300.0])
        self.assertIsInstance(events[2], OrientationSample)

    def test_write_then_load(self):
        samples = [
            MotionSample(0.0, (0.1, None, 0.3)),
            OrientationSample(1.0, None, 3.0, timestamp_ms=5.0),
            MotionSample(10.0, None),
        ]
        path = os.path.join(self.tmp.name, "written.txt")
        self.assertEqual(write_log(path, samples), 3)
        self.assertEqual(DataLoader().load_data(path).events(), samples)

    def test_empty_log(self):
        path = os.path.join(self.tmp.name, "empty.txt")
        with open(path, 'w') as f:
            f.write("# nothing here\n12\tMAG\t1\t2\t3\n")
        with self.assertRaises(LogFormatError):
            DataLoader().load_data(path)


class TestSimulatedLog(unittest.TestCase):
    def test_simulated_push_comes_to_rest(self):
        sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'scripts')))
        from simulate_log import simulate
        from tracking.config import TrackingConfig
        from tracking.integrator import Integrator

        samples = simulate(duration_s=2.0, noise_sigma=0.0)
        integrator = Integrator(TrackingConfig(noise_threshold=0.1, friction=0.2))
        for s in samples:
            if isinstance(s, MotionSample):
                integrator.update(s)
        self.assertAlmostEqual(integrator.velocity.x, 0.0, places=6)
        self.assertGreater(integrator.position.x, 0.0)
        self.assertEqual(integrator.position.y, 0.0)


if __name__ == '__main__':
    unittest.main()
