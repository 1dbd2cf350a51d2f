"""
Replay of recorded sensor samples through the live event interface.

Motion and orientation samples are emitted on two EventSources in the order
given, which is the order the platform delivered them. An optional
frame callback is driven by a virtual animation clock on log time, so a fast
replay still produces one render frame per 1/frame_rate of recorded time.
"""

from typing import Callable, Iterable, List, Optional, Union
import asyncio
import logging

from sensors.base_source import EventSource
from tracking.errors import AcquisitionFailure
from tracking.types import MotionSample, OrientationSample

logger = logging.getLogger(__name__)

Sample = Union[MotionSample, OrientationSample]
FrameCallback = Callable[[float], None]  # log time in seconds


class ReplaySource(EventSource):
    """EventSource that fails acquisition when the recording has no data for it."""

    def __init__(self, name: str, sample_count: int):
        super().__init__(name)
        self.sample_count = sample_count

    async def start(self) -> None:
        if self.sample_count == 0:
            raise AcquisitionFailure(f"No {self.name} samples in recording")


def _timestamp(sample: Sample) -> float:
    return sample.timestamp_ms if sample.timestamp_ms is not None else 0.0


class LogReplayer:
    """
    Usage:
        replayer = LogReplayer(sensor_log.events())
        session = TrackingSession(replayer.motion, replayer.orientation)
        await session.start()
        await replayer.run(on_frame=recorder.on_frame)
    """

    def __init__(self, events: Iterable[Sample], realtime: bool = False, speed: float = 1.0,
                 frame_rate_hz: float = 60.0):
        self.events: List[Sample] = list(events)
        self.realtime = realtime
        self.speed = speed
        self.frame_interval_ms = 1000.0 / frame_rate_hz

        n_motion = sum(1 for e in self.events if isinstance(e, MotionSample))
        self.motion = ReplaySource("motion", n_motion)
        self.orientation = ReplaySource("orientation", len(self.events) - n_motion)

    async def run(self, on_frame: Optional[FrameCallback] = None,
                  progress: Optional[Callable[[int], None]] = None) -> int:
        """
        Emit every sample, yielding to the event loop between samples.

        Args:
            on_frame: Called with the log time (s) at every virtual frame boundary
            progress: Called with 1 after each emitted sample (e.g. tqdm.update)

        Returns:
            Number of samples emitted
        """
        if not self.events:
            return 0

        t0 = _timestamp(self.events[0])
        next_frame_ms = t0
        prev_ms = t0

        for sample in self.events:
            t = _timestamp(sample)

            # Frames due before this sample see the state left by earlier samples
            if on_frame is not None:
                while next_frame_ms <= t:
                    on_frame((next_frame_ms - t0) / 1000.0)
                    next_frame_ms += self.frame_interval_ms

            if self.realtime and t > prev_ms:
                await asyncio.sleep((t - prev_ms) / 1000.0 / self.speed)
            else:
                await asyncio.sleep(0)
            prev_ms = max(prev_ms, t)

            if isinstance(sample, MotionSample):
                self.motion.emit(sample)
            else:
                self.orientation.emit(sample)

            if progress is not None:
                progress(1)

        # Final frame shows the state after the last sample
        if on_frame is not None:
            on_frame((next_frame_ms - t0) / 1000.0)

        logger.info("Replayed %d samples (%.2fs of recording)", len(self.events), (prev_ms - t0) / 1000.0)
        return len(self.events)
