"""
Tracking session: wires sensor sources to the pipeline.

    permission gate(s) --granted--> subscribe(motion)      -> Integrator           -> PoseState
                                    subscribe(orientation) -> OrientationEstimator -> PoseState
    render loop (per frame) ------------------------------------------------------> reads PoseState

Everything runs on one asyncio event loop. Handlers are plain synchronous
callbacks that run to completion, so no locking is needed around PoseState.

Failure policy:
- Permission denied or the request itself failing: logged, start() returns False,
  nothing is subscribed and the pose stays at its default.
- A source failing to start: logged, that stream is left out, the rest keeps running.
- A rejected sample (missing payload, out-of-order timestamp): logged at debug and skipped.
"""

from typing import Any, Awaitable, Callable, List, Optional, Sequence
import asyncio
import logging

from sensors.base_source import SensorSource, Subscription
from sensors.permission import AlwaysGranted, PermissionGate
from tracking.config import TrackingConfig
from tracking.errors import AcquisitionFailure, PermissionDenied, SampleRejected
from tracking.integrator import Integrator
from tracking.orientation import OrientationEstimator
from tracking.pose_state import PoseState
from tracking.types import MotionSample, OrientationSample

logger = logging.getLogger(__name__)


class TrackingSession:
    def __init__(
        self,
        motion_source: SensorSource,
        orientation_source: SensorSource,
        config: Optional[TrackingConfig] = None,
        permissions: Optional[Sequence[PermissionGate]] = None,
        camera: Optional[Callable[[], Awaitable[Any]]] = None
    ):
        """
        Args:
            motion_source: Source of MotionSample events
            orientation_source: Source of OrientationSample events
            config: Threshold/friction tuning (defaults to TrackingConfig())
            permissions: Gates that must all grant before subscribing
                         (orientation first, then motion). Defaults to no prompt.
            camera: Optional async acquisition of the video background
        """
        self.config = config or TrackingConfig()
        self.motion_source = motion_source
        self.orientation_source = orientation_source
        self.permissions: List[PermissionGate] = list(permissions) if permissions is not None else [AlwaysGranted()]
        self.camera = camera

        self.pose = PoseState()
        self.integrator = Integrator(self.config)
        self.orientation = OrientationEstimator()

        self.video: Any = None
        self.tracking = False
        self.rejected_samples = 0
        self._subscriptions: List[Subscription] = []

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> bool:
        """
        Request permission and install the sensor subscriptions.

        Returns:
            True if at least one sensor stream is being tracked
        """
        if self.tracking:
            return True

        try:
            for gate in self.permissions:
                await gate.require()
        except PermissionDenied as e:
            logger.warning("Sensor permission denied, tracking disabled: %s", e)
            return False

        self.integrator.reset()
        await self._install(self.orientation_source, self.on_orientation)
        await self._install(self.motion_source, self.on_motion)
        self.tracking = bool(self._subscriptions)

        if self.camera is not None:
            await self._start_camera()

        logger.info("Tracking session started with %d sensor stream(s)", len(self._subscriptions))
        return self.tracking

    async def _install(self, source: SensorSource, handler: Callable) -> None:
        try:
            await source.start()
        except AcquisitionFailure as e:
            logger.warning("Sensor acquisition failed: %s", e)
            return
        self._subscriptions.append(source.subscribe(handler))

    async def _start_camera(self) -> None:
        try:
            self.video = await self.camera()
        except Exception as e:
            # Video background is optional; the overlay still tracks without it
            logger.warning("Camera acquisition failed: %s", e)
            self.video = None

    def stop(self) -> None:
        """Unsubscribe both streams and discard the dead-reckoning run."""
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
        self.integrator.reset()
        self.tracking = False
        logger.info("Tracking session stopped")

    async def __aenter__(self) -> 'TrackingSession':
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # =========================================================================
    # Sensor Callbacks
    # =========================================================================

    def on_motion(self, sample: MotionSample) -> None:
        if not self.tracking:
            return
        try:
            self.integrator.update(sample, self.pose)
        except SampleRejected as e:
            self.rejected_samples += 1
            logger.debug("Skipped motion sample: %s", e)

    def on_orientation(self, sample: OrientationSample) -> None:
        if not self.tracking:
            return
        try:
            self.orientation.update(sample, self.pose)
        except SampleRejected as e:
            self.rejected_samples += 1
            logger.debug("Skipped orientation sample: %s", e)

    # =========================================================================
    # Render Loop
    # =========================================================================

    async def render_loop(self, on_frame: Callable[[float], None],
                          frame_rate_hz: Optional[float] = None) -> int:
        """
        Call on_frame(elapsed_seconds) once per frame while the session is tracking.
        The callback reads self.pose; it must not block.

        Returns:
            Number of frames rendered
        """
        interval = 1.0 / (frame_rate_hz or self.config.frame_rate_hz)
        loop = asyncio.get_running_loop()
        t0 = loop.time()
        frames = 0
        while self.tracking:
            on_frame(loop.time() - t0)
            frames += 1
            await asyncio.sleep(interval)
        return frames
