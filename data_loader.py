import pandas as pd
import numpy as np
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Union
import logging

from tracking.errors import LogFormatError
from tracking.types import MotionSample, OrientationSample

logger = logging.getLogger(__name__)

Sample = Union[MotionSample, OrientationSample]

MOTION_TYPE = 'ACC'
ORIENTATION_TYPE = 'ORI'


def _opt(value) -> Optional[float]:
    """NaN (absent in the log) -> None."""
    if value is None or pd.isna(value):
        return None
    return float(value)


@dataclass
class SensorLog:
    """
    Parsed sensor recording.

    motion:      line, timestamp_ms, x, y, z (m/s², NaN = axis not reported), has_payload
    orientation: line, timestamp_ms, alpha, beta, gamma (deg, NaN = not reported)
    Rows stay in file order; `line` is the line number in the log.
    """
    motion: pd.DataFrame
    orientation: pd.DataFrame

    def motion_samples(self) -> Iterator[MotionSample]:
        for row in self.motion.itertuples(index=False):
            accel = (_opt(row.x), _opt(row.y), _opt(row.z)) if row.has_payload else None
            yield MotionSample(timestamp_ms=float(row.timestamp_ms), acceleration=accel)

    def orientation_samples(self) -> Iterator[OrientationSample]:
        for row in self.orientation.itertuples(index=False):
            yield OrientationSample(
                alpha_deg=_opt(row.alpha),
                beta_deg=_opt(row.beta),
                gamma_deg=_opt(row.gamma),
                timestamp_ms=float(row.timestamp_ms)
            )

    def events(self) -> List[Sample]:
        """Both streams merged in delivery (file) order. Timestamps are not re-sorted."""
        lines = list(self.motion['line']) + list(self.orientation['line'])
        samples: List[Sample] = list(self.motion_samples()) + list(self.orientation_samples())
        return [s for _, s in sorted(zip(lines, samples), key=lambda pair: pair[0])]

    @property
    def duration_s(self) -> float:
        stamps = pd.concat([self.motion['timestamp_ms'], self.orientation['timestamp_ms']])
        if stamps.empty:
            return 0.0
        return (stamps.max() - stamps.min()) / 1000.0


class DataLoader:
    """
    Loads tab-separated sensor logs:

        <timestamp_ms>\tACC\t<x>\t<y>\t<z>          linear acceleration, m/s²
        <timestamp_ms>\tACC                          event without acceleration payload
        <timestamp_ms>\tORI\t<alpha>\t<beta>\t<gamma>  orientation, degrees

    Empty fields mean the platform did not report that axis. Lines starting with
    '#' and lines of other types are ignored.
    """

    def load_data(self, sensor_log_path: str) -> SensorLog:
        df_raw = self._parse_log_file(sensor_log_path)

        if df_raw.empty:
            raise LogFormatError(f"No valid data found in sensor log {sensor_log_path}.")

        acc_df = df_raw[df_raw['type'] == MOTION_TYPE]
        ori_df = df_raw[df_raw['type'] == ORIENTATION_TYPE]

        motion = pd.DataFrame({
            'line': acc_df['line'].values,
            'timestamp_ms': acc_df['timestamp_ms'].values,
            'x': acc_df['a'].values,
            'y': acc_df['b'].values,
            'z': acc_df['c'].values,
            'has_payload': acc_df['has_payload'].values.astype(bool),
        })
        orientation = pd.DataFrame({
            'line': ori_df['line'].values,
            'timestamp_ms': ori_df['timestamp_ms'].values,
            'alpha': ori_df['a'].values,
            'beta': ori_df['b'].values,
            'gamma': ori_df['c'].values,
        })

        logger.info("Loaded %d motion and %d orientation samples from %s",
                    len(motion), len(orientation), sensor_log_path)
        return SensorLog(motion=motion, orientation=orientation)

    def _parse_log_file(self, path: str) -> pd.DataFrame:
        data_records = []
        columns = ['line', 'timestamp_ms', 'type', 'a', 'b', 'c', 'has_payload']

        with open(path, 'r') as f:
            for line_no, line in enumerate(f, start=1):
                line = line.rstrip('\r\n')
                if not line.strip() or line.startswith('#'):
                    continue
                parts = line.split('\t')
                if len(parts) < 2:
                    continue
                try:
                    timestamp_ms = float(parts[0])
                    msg_type = parts[1].strip()

                    if msg_type not in (MOTION_TYPE, ORIENTATION_TYPE):
                        continue

                    fields = [p.strip() for p in parts[2:5]]
                    has_payload = len(fields) > 0
                    fields += [''] * (3 - len(fields))
                    a, b, c = (float(v) if v else np.nan for v in fields)
                    data_records.append((line_no, timestamp_ms, msg_type, a, b, c, has_payload))
                except ValueError:
                    logger.debug("Skipping malformed line %d in %s", line_no, path)
                    continue

        return pd.DataFrame(data_records, columns=columns)


def write_log(path: str, samples: Iterable[Sample]) -> int:
    """Write samples in the format read by DataLoader. Returns number of lines written."""
    def fmt(v: Optional[float]) -> str:
        return '' if v is None else repr(float(v))

    count = 0
    with open(path, 'w') as f:
        f.write("# timestamp_ms\ttype\tx|alpha\ty|beta\tz|gamma\n")
        for s in samples:
            if isinstance(s, MotionSample):
                if s.acceleration is None:
                    f.write(f"{float(s.timestamp_ms)!r}\t{MOTION_TYPE}\n")
                else:
                    f.write(f"{float(s.timestamp_ms)!r}\t{MOTION_TYPE}\t" + "\t".join(fmt(v) for v in s.acceleration) + "\n")
            else:
                ts = float(s.timestamp_ms) if s.timestamp_ms is not None else 0.0
                f.write(f"{ts!r}\t{ORIENTATION_TYPE}\t"
                        + "\t".join(fmt(v) for v in (s.alpha_deg, s.beta_deg, s.gamma_deg)) + "\n")
            count += 1
    return count
