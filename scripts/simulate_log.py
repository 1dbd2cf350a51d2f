"""
Write a synthetic sensor log: the device is pushed along +X, brought to rest,
and slowly panned in heading, with Gaussian sensor noise on every channel.
"""

import sys
import os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import argparse
import numpy as np

from data_loader import write_log
from tracking.types import MotionSample, OrientationSample


def simulate(duration_s=4.0, rate_hz=60.0, accel=0.8, noise_sigma=0.03, dropout=0.0, seed=0):
    """
    Accelerate at +accel for the first 0.5s, decelerate at -accel for the next
    0.5s, then stay still. Heading pans 0 -> 45 deg over the whole run.

    dropout: fraction of motion events emitted without an acceleration payload
    """
    rng = np.random.default_rng(seed)
    n = int(duration_s * rate_hz)
    t_ms = np.arange(n) * 1000.0 / rate_hz
    t_s = t_ms / 1000.0

    ax = np.where(t_s < 0.5, accel, np.where(t_s < 1.0, -accel, 0.0))
    acc = np.stack([ax, np.zeros(n), np.zeros(n)], axis=1) + rng.normal(0, noise_sigma, (n, 3))
    alpha = np.linspace(0.0, 45.0, n) + rng.normal(0, 0.2, n)
    beta = 90.0 + rng.normal(0, 0.2, n)  # held upright
    gamma = rng.normal(0, 0.2, n)
    dropped = rng.random(n) < dropout

    samples = []
    for i in range(n):
        payload = None if dropped[i] else tuple(float(v) for v in acc[i])
        samples.append(MotionSample(timestamp_ms=float(t_ms[i]), acceleration=payload))
        samples.append(OrientationSample(float(alpha[i]), float(beta[i]), float(gamma[i]), timestamp_ms=float(t_ms[i])))
    return samples


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--out", required=True)
    parser.add_argument("--duration", type=float, default=4.0)
    parser.add_argument("--rate", type=float, default=60.0)
    parser.add_argument("--noise", type=float, default=0.03)
    parser.add_argument("--dropout", type=float, default=0.0)
    parser.add_argument("--seed", type=int, default=0)
    args = parser.parse_args()

    samples = simulate(args.duration, args.rate, noise_sigma=args.noise, dropout=args.dropout, seed=args.seed)
    count = write_log(args.out, samples)
    print(f"Wrote {count} samples to {args.out}")
