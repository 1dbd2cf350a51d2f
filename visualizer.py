import plotly.graph_objects as go
from plotly.subplots import make_subplots
import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from typing import List
from scipy.spatial.transform import Rotation as R
import tqdm

from tracking.orientation import as_wxyz
from tracking.pose_state import PoseState

# Device box (m). Screen faces +Z, long side along +Y.
DEVICE_SIZE = (0.07, 0.15, 0.01)


@dataclass
class PoseRecording:
    timestamps: List[float] = field(default_factory=list)      # s
    positions: List[np.ndarray] = field(default_factory=list)  # 3, m
    quaternions: List[np.ndarray] = field(default_factory=list)  # 4 (w, x, y, z)
    velocities: List[np.ndarray] = field(default_factory=list)  # 3, m/s
    accelerations: List[np.ndarray] = field(default_factory=list)  # 3, m/s²

    def __len__(self):
        return len(self.timestamps)

    def to_dataframe(self) -> pd.DataFrame:
        cols = {'t': self.timestamps}
        for name, rows in (('pos', self.positions), ('vel', self.velocities), ('acc', self.accelerations)):
            arr = np.array(rows).reshape(-1, 3)
            for i, axis in enumerate('xyz'):
                cols[f'{name}_{axis}'] = arr[:, i]
        quats = np.array(self.quaternions).reshape(-1, 4)
        for i, c in enumerate('wxyz'):
            cols[f'q{c}'] = quats[:, i]
        return pd.DataFrame(cols)


class PoseRecorder:
    """
    Render callback: reads the shared PoseState once per frame and keeps the pose.
    Pass `recorder.on_frame` to TrackingSession.render_loop or LogReplayer.run.
    """

    def __init__(self, pose: PoseState):
        self.pose = pose
        self.recording = PoseRecording()

    def on_frame(self, t: float) -> None:
        snap = self.pose.snapshot()
        rec = self.recording
        rec.timestamps.append(t)
        rec.positions.append(snap.position)
        rec.quaternions.append(as_wxyz(snap.rotation))
        rec.velocities.append(self.pose.velocity.to_numpy())
        rec.accelerations.append(self.pose.last_acceleration.to_numpy())


def get_device_mesh(q, position) -> List[go.Mesh3d]:
    """
    Returns plotly traces for the device at orientation q (w, x, y, z), placed at position.
    """
    width, height, depth = DEVICE_SIZE
    x = np.array([-1, 1, 1, -1, -1, 1, 1, -1]) * (width / 2)
    y = np.array([-1, -1, 1, 1, -1, -1, 1, 1]) * (height / 2)
    z = np.array([1, 1, 1, 1, -1, -1, -1, -1]) * (depth / 2)
    # scipy expects (x, y, z, w)
    r = R.from_quat([q[1], q[2], q[3], q[0]])
    verts = r.apply(np.stack([x, y, z], axis=1)) + np.asarray(position)

    trace_body = go.Mesh3d(
        x=verts[:, 0], y=verts[:, 1], z=verts[:, 2],
        i=[7, 0, 0, 0, 4, 4, 6, 6, 4, 0, 3, 2],
        j=[3, 4, 1, 2, 5, 6, 5, 2, 0, 1, 6, 3],
        k=[0, 7, 2, 3, 6, 7, 1, 1, 5, 5, 7, 6],
        color='#333333', name='Device', showscale=False,
        lighting=dict(ambient=0.6, diffuse=0.5, specular=0.2)
    )

    # Screen, lifted slightly off the +Z face
    offset = r.apply(np.array([0, 0, 1])) * depth * 0.2
    s = verts[[0, 1, 2, 3]] + offset
    trace_screen = go.Mesh3d(
        x=s[:, 0], y=s[:, 1], z=s[:, 2],
        i=[0, 0], j=[1, 2], k=[2, 3],
        color='#00AAFF', opacity=0.9, name='Screen', showscale=False
    )
    return [trace_body, trace_screen]


class Visualizer:
    """Offline render of a recorded session: animated device pose plus telemetry plots."""

    def __init__(self, recording: PoseRecording, max_frames: int = 500):
        if len(recording) == 0:
            raise ValueError("Recording has no frames to visualize")
        self.recording = recording
        self.ts = np.asarray(recording.timestamps)
        self.pos = np.array(recording.positions).reshape(-1, 3)
        self.vel = np.array(recording.velocities).reshape(-1, 3)
        self.acc = np.array(recording.accelerations).reshape(-1, 3)
        self.quats = np.array(recording.quaternions).reshape(-1, 4)
        step = 1 if len(self.ts) <= max_frames else int(np.ceil(len(self.ts) / max_frames))
        self.indices = list(range(0, len(self.ts), step))

    def _scene_range(self):
        span = float(np.max(np.abs(self.pos))) + 0.2
        return [-span, span]

    def build_figure(self) -> go.Figure:
        fig = make_subplots(
            rows=3, cols=2,
            specs=[
                [{"type": "scene", "rowspan": 3}, {"type": "xy"}],
                [None,                            {"type": "xy"}],
                [None,                            {"type": "xy"}]
            ],
            column_widths=[0.55, 0.45],
            subplot_titles=("Camera Pose", "Position (m)", "Velocity (m/s)", "Acceleration (m/s²)")
        )

        # Traces 0-1: device mesh (animated)
        for t in get_device_mesh(self.quats[0], self.pos[0]):
            fig.add_trace(t, row=1, col=1)

        # Trace 2: full trajectory
        fig.add_trace(go.Scatter3d(
            x=self.pos[:, 0], y=self.pos[:, 1], z=self.pos[:, 2],
            mode='lines', line=dict(color='orange', width=4), name='Trajectory'
        ), row=1, col=1)

        colors = ['red', 'green', 'blue']
        for row, (series, label) in enumerate(((self.pos, 'pos'), (self.vel, 'vel'), (self.acc, 'acc')), start=1):
            for i, axis in enumerate('xyz'):
                fig.add_trace(go.Scatter(
                    x=self.ts, y=series[:, i], mode='lines',
                    line=dict(color=colors[i]), name=axis, legendgroup=axis,
                    showlegend=(row == 1)
                ), row=row, col=2)

        # Time markers (animated), one per telemetry row
        marker_start = len(fig.data)
        for row, series in enumerate((self.pos, self.vel, self.acc), start=1):
            lo, hi = float(np.min(series)), float(np.max(series))
            fig.add_trace(go.Scatter(
                x=[self.ts[0], self.ts[0]], y=[lo, hi], mode='lines',
                line=dict(color='black', width=2), showlegend=False
            ), row=row, col=2)

        animated = [0, 1, marker_start, marker_start + 1, marker_start + 2]
        frames = []
        for k in tqdm.tqdm(self.indices, desc="Frames"):
            t_curr = self.ts[k]
            data = get_device_mesh(self.quats[k], self.pos[k])
            for series in (self.pos, self.vel, self.acc):
                data.append(go.Scatter(x=[t_curr, t_curr], y=[float(np.min(series)), float(np.max(series))]))
            frames.append(go.Frame(data=data, traces=animated, name=f"fr{k}"))
        fig.frames = frames

        rng = self._scene_range()
        fig.update_layout(
            scene=dict(
                aspectmode='cube',
                xaxis=dict(range=rng), yaxis=dict(range=rng), zaxis=dict(range=rng)
            ),
            updatemenus=[{
                "buttons": [
                    {"args": [None, {"frame": {"duration": 33, "redraw": True}, "fromcurrent": True}],
                     "label": "Play", "method": "animate"},
                    {"args": [[None], {"frame": {"duration": 0, "redraw": True}, "mode": "immediate"}],
                     "label": "Pause", "method": "animate"}
                ],
                "type": "buttons"
            }],
            sliders=[{
                "steps": [
                    {"args": [[f"fr{k}"], {"frame": {"duration": 0, "redraw": True}, "mode": "immediate"}],
                     "label": f"{self.ts[k]:.2f}", "method": "animate"}
                    for k in self.indices
                ]
            }],
            margin=dict(l=10, r=10, b=10, t=40)
        )
        return fig

    def save_html(self, output_path: str = "pose_replay.html") -> str:
        print(f"Generating HTML: {output_path}...")
        fig = self.build_figure()
        fig.write_html(output_path)
        print("HTML saved.")
        return output_path
