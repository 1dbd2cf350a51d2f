"""
Error taxonomy for the tracking pipeline.

Per-sample problems (SampleRejected and subclasses) are recovered by skipping the
sample. Permission and acquisition failures are caught at the session boundary.
"""


class TrackingError(Exception):
    """Base class for all tracking errors."""


class PermissionDenied(TrackingError):
    """The sensor permission gate resolved to anything other than granted."""


class AcquisitionFailure(TrackingError):
    """Starting a sensor or camera source failed."""


class SampleRejected(TrackingError):
    """A single sample could not be used and was skipped without touching state."""


class SensorPayloadMissing(SampleRejected):
    """The event carried no usable acceleration or orientation data."""


class NonMonotonicTimestamp(SampleRejected):
    """The sample is older than the integration anchor."""

    def __init__(self, timestamp_ms: float, anchor_ms: float):
        super().__init__(f"Sample at {timestamp_ms}ms precedes anchor at {anchor_ms}ms")
        self.timestamp_ms = timestamp_ms
        self.anchor_ms = anchor_ms


class ConfigError(TrackingError, ValueError):
    """Invalid tracking configuration."""


class LogFormatError(ValueError):
    """A sensor log contained no usable samples."""
