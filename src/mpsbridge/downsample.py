"""Display downsampling for long output sequences."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TypeVar

import numpy as np

SeqT = TypeVar("SeqT", Sequence, np.ndarray)


def downsample(seq: SeqT, max_points: int) -> SeqT:
    """Keep every ``step``-th element so at most *max_points* remain.

    ``step = ceil(len(seq) / max_points)``; indices ``i % step == 0`` are kept,
    so the first element always survives and order is preserved.  Sequences
    already short enough are returned as-is.

    Args:
        seq: List, tuple, range or 1-D numpy array.
        max_points: Upper bound on the result length (>= 1).

    Returns:
        A sequence of the same kind as *seq*.
    """
    if max_points < 1:
        raise ValueError(f"max_points must be >= 1, got {max_points}")
    n = len(seq)
    if n <= max_points:
        return seq
    step = math.ceil(n / max_points)
    return seq[::step]
