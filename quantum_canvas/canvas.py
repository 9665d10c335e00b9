"""
Draw-command recording and rasterisation.

Style generators never touch pixels. They call methods on a
:class:`DrawingContext`, which maps coordinates through its current affine
transform and appends a :class:`Primitive` to a shared command list. A
symmetry copy is just another context over the same list with a different
transform. :func:`rasterize` turns the finished list into a Pillow image.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageDraw

RGB = Tuple[int, int, int]
RGBA = Tuple[int, int, int, int]
Point = Tuple[float, float]

# decimals kept in recorded coordinates
_PRECISION = 6
GLOW_RINGS = 6


def rgba(color: Sequence[int], alpha: int = 255) -> RGBA:
    return (int(color[0]), int(color[1]), int(color[2]), max(0, min(255, int(alpha))))


def lerp_color(a: Sequence[int], b: Sequence[int], t: float) -> Tuple[int, ...]:
    return tuple(int(round(x + (y - x) * t)) for x, y in zip(a, b))


@dataclass(frozen=True)
class Primitive:
    """One recorded draw command in canvas pixel coordinates.

    ``circle`` and ``glow`` use ``points[0]`` as the centre plus ``radius``;
    ``glow`` fades through ``stops`` from the centre outwards.
    """

    kind: str
    points: Tuple[Point, ...]
    radius: float = 0.0
    fill: Optional[RGBA] = None
    outline: Optional[RGBA] = None
    width: float = 1.0
    stops: Tuple[RGBA, ...] = ()


# ----------------------------- Affine helpers -------------------------------


def rotation_about(cx: float, cy: float, angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([
        [c, -s, cx - c * cx + s * cy],
        [s, c, cy - s * cx - c * cy],
        [0.0, 0.0, 1.0],
    ])


def mirror_vertical_axis(cx: float) -> np.ndarray:
    """Reflection ``x -> 2 cx - x``."""

    return np.array([
        [-1.0, 0.0, 2 * cx],
        [0.0, 1.0, 0.0],
        [0.0, 0.0, 1.0],
    ])


class DrawingContext:
    """Records primitives through an affine coordinate frame."""

    def __init__(self, size: int, transform: Optional[np.ndarray] = None,
                 commands: Optional[List[Primitive]] = None):
        self.size = size
        self.transform = np.eye(3) if transform is None else transform
        self.commands: List[Primitive] = [] if commands is None else commands

    def transformed(self, matrix: np.ndarray) -> "DrawingContext":
        """Context drawing into the same list under ``matrix`` then this frame."""

        return DrawingContext(self.size, self.transform @ matrix, self.commands)

    def _map(self, points: Iterable[Point]) -> Tuple[Point, ...]:
        pts = np.asarray(list(points), dtype=np.float64).reshape(-1, 2)
        mapped = pts @ self.transform[:2, :2].T + self.transform[:2, 2]
        mapped = np.round(mapped, _PRECISION) + 0.0  # drop negative zeros
        return tuple((float(x), float(y)) for x, y in mapped)

    def _scale(self, r: float) -> float:
        return round(abs(float(r)) * math.sqrt(abs(np.linalg.det(self.transform[:2, :2]))), _PRECISION)

    # ------------------------------ commands ------------------------------

    def circle(self, cx: float, cy: float, r: float, fill: Optional[RGBA] = None,
               outline: Optional[RGBA] = None, width: float = 1.0) -> None:
        self.commands.append(Primitive("circle", self._map([(cx, cy)]), self._scale(r),
                                       fill, outline, width))

    def polygon(self, points: Sequence[Point], fill: Optional[RGBA] = None,
                outline: Optional[RGBA] = None, width: float = 1.0) -> None:
        self.commands.append(Primitive("polygon", self._map(points), 0.0, fill, outline, width))

    def rect(self, x0: float, y0: float, x1: float, y1: float, fill: Optional[RGBA] = None,
             outline: Optional[RGBA] = None, width: float = 1.0) -> None:
        self.polygon([(x0, y0), (x1, y0), (x1, y1), (x0, y1)], fill, outline, width)

    def polyline(self, points: Sequence[Point], color: RGBA, width: float = 1.0) -> None:
        self.commands.append(Primitive("polyline", self._map(points), 0.0, None, color, width))

    def glow(self, cx: float, cy: float, r: float, *stops: RGBA) -> None:
        self.commands.append(Primitive("glow", self._map([(cx, cy)]), self._scale(r),
                                       stops=tuple(stops)))


# ------------------------------ Rasterising ---------------------------------


def radial_gradient(size: int, inner: Sequence[int], outer: Sequence[int],
                    radius: Optional[float] = None) -> Image.Image:
    """RGBA image fading from *inner* at the centre to *outer* at *radius*.

    Colours may carry an alpha channel; RGB colours are treated as opaque.
    """

    inner = tuple(inner) + ((255,) if len(inner) == 3 else ())
    outer = tuple(outer) + ((255,) if len(outer) == 3 else ())
    radius = radius or size
    y, x = np.mgrid[0:size, 0:size].astype(np.float64)
    c = (size - 1) / 2.0
    t = np.clip(np.hypot(x - c, y - c) / radius, 0.0, 1.0)[..., None]
    arr = np.asarray(inner, dtype=np.float64) * (1 - t) + np.asarray(outer, dtype=np.float64) * t
    return Image.fromarray(np.round(arr).astype(np.uint8), "RGBA")


def _stop_at(stops: Sequence[RGBA], t: float) -> Tuple[int, ...]:
    if len(stops) == 1:
        return stops[0]
    pos = t * (len(stops) - 1)
    i = min(int(pos), len(stops) - 2)
    return lerp_color(stops[i], stops[i + 1], pos - i)


def _bbox(cx: float, cy: float, r: float) -> List[float]:
    return [cx - r, cy - r, cx + r, cy + r]


def draw_primitive(draw: ImageDraw.ImageDraw, prim: Primitive) -> None:
    width = max(1, int(round(prim.width)))
    if prim.kind == "circle":
        (cx, cy), = prim.points
        draw.ellipse(_bbox(cx, cy, prim.radius), fill=prim.fill, outline=prim.outline,
                     width=width if prim.outline else 0)
    elif prim.kind == "polygon":
        draw.polygon(list(prim.points), fill=prim.fill, outline=prim.outline,
                     width=width if prim.outline else 0)
    elif prim.kind == "polyline":
        if len(prim.points) > 1:
            draw.line(list(prim.points), fill=prim.outline, width=width, joint="curve")
    elif prim.kind == "glow":
        (cx, cy), = prim.points
        # concentric translucent discs, outermost first
        for ring in range(GLOW_RINGS):
            t = 1.0 - ring / GLOW_RINGS
            color = _stop_at(prim.stops, t)
            alpha = int(color[3] / GLOW_RINGS) if len(color) > 3 else 255 // GLOW_RINGS
            draw.ellipse(_bbox(cx, cy, prim.radius * t), fill=rgba(color, alpha))
    else:
        raise ValueError(f"Unknown primitive kind {prim.kind!r}")


def rasterize(commands: Iterable[Primitive], background: Image.Image) -> Image.Image:
    img = background.convert("RGBA").copy()
    draw = ImageDraw.Draw(img, "RGBA")
    for prim in commands:
        draw_primitive(draw, prim)
    return img
