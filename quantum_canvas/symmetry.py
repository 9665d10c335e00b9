"""
Symmetry operators.

Symmetry is applied by *replaying* the layer procedure once per copy, each time
through a transformed :class:`~quantum_canvas.canvas.DrawingContext`. The
finished raster is never reflected or rotated, so every copy keeps crisp
primitive edges.
"""

from __future__ import annotations

import math
from typing import Callable, List

import numpy as np

from .canvas import DrawingContext, mirror_vertical_axis, rotation_about
from .config import Symmetry

Layer = Callable[[DrawingContext], None]


def symmetry_transforms(mode: Symmetry, size: int) -> List[np.ndarray]:
    """Affine frames for each copy of a layer, identity first."""

    c = size / 2.0
    if mode is Symmetry.NONE:
        return [np.eye(3)]
    if mode is Symmetry.BILATERAL:
        return [np.eye(3), mirror_vertical_axis(c)]
    if mode is Symmetry.RADIAL:
        return [rotation_about(c, c, k * math.pi / 2) for k in range(4)]
    if mode is Symmetry.KALEIDOSCOPE:
        frames = []
        for k in range(8):
            frame = rotation_about(c, c, k * math.pi / 4)
            if k % 2:
                frame = frame @ mirror_vertical_axis(c)
            frames.append(frame)
        return frames
    raise ValueError(f"Unknown symmetry mode {mode!r}")


def replay(ctx: DrawingContext, layer: Layer, mode: Symmetry) -> int:
    """Run *layer* once per symmetry copy; return the number of copies."""

    frames = symmetry_transforms(mode, ctx.size)
    for frame in frames:
        layer(ctx.transformed(frame))
    return len(frames)
