"""
Art mapper: measurement + style parameters -> raster image.

The work is split in two so the geometry can be checked without pixels:

* :func:`plan_artwork` runs steps 1, 3 and 4 (ranking and quantum seed, style
  dispatch, symmetry replay) and returns the recorded draw commands.
* :func:`render_artwork` adds steps 2 and 5 (background gradient, additive
  glow pass, signature) and rasterises everything with Pillow.

For a fixed measurement and parameters the output is reproducible: all jitter
is drawn from a generator seeded with ``(quantum_seed, seed or 0)``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from PIL import Image, ImageChops, ImageDraw, ImageFont

from .canvas import DrawingContext, Primitive, lerp_color, radial_gradient, rasterize
from .config import StyleParameters
from .errors import RenderingError
from .measurement import MeasurementResult
from .styles import Outcome, Scene, generator_for
from .symmetry import replay

logger = logging.getLogger(__name__)

BACKGROUND_CENTER = (0x1A, 0x1A, 0x2E)
BACKGROUND_EDGE = (0x0A, 0x0A, 0x0F)


@dataclass
class ArtPlan:
    scene: Scene
    commands: List[Primitive]
    copies: int


def quantum_seed(measurement: MeasurementResult) -> int:
    """Sum of the integer values of every observed outcome."""

    return sum(int(bits, 2) for bits in measurement.values)


def build_scene(measurement: MeasurementResult, params: StyleParameters) -> Scene:
    """Step 1: rank outcomes and derive the seed-driven layout knobs."""

    total = measurement.total or 1
    outcomes = tuple(
        Outcome(bits=bits, value=int(bits, 2), weight=weight, probability=weight / total)
        for bits, weight in measurement.ranked()
    )
    qseed = quantum_seed(measurement)
    measurement_hash = qseed % 10000
    jitter_seed = hash_seed(qseed, params.seed)
    return Scene(
        size=params.size,
        colors=params.colors,
        outcomes=outcomes,
        quantum_seed=qseed,
        rotation_offset=math.radians(qseed % 360),
        scale_variation=0.7 + (measurement_hash % 100) / 100,
        jitter_seed=jitter_seed,
        complexity=params.complexity,
        entropy=params.entropy,
        harmonics=params.harmonics,
        layer_depth=params.layer_depth,
    )


def hash_seed(qseed: int, seed: Optional[int]) -> int:
    # stable across processes, unlike hash()
    return (qseed * 1_000_003 + (seed or 0)) % (2 ** 63)


def plan_artwork(measurement: MeasurementResult, params: StyleParameters) -> ArtPlan:
    """Record the draw commands for *measurement* without rasterising."""

    scene = build_scene(measurement, params)
    generator = generator_for(params.style)
    ctx = DrawingContext(params.size)

    def layer(frame: DrawingContext) -> None:
        generator(frame, scene)

    copies = replay(ctx, layer, params.symmetry)
    logger.debug("Planned %d primitives (%s, %s x%d)",
                 len(ctx.commands), params.style.value, params.symmetry.value, copies)
    return ArtPlan(scene=scene, commands=ctx.commands, copies=copies)


# ------------------------------ Compositing ---------------------------------


def paint_background(params: StyleParameters) -> Image.Image:
    """Step 2: radial gradient toward a darkened first palette colour."""

    edge = lerp_color(params.colors[0], BACKGROUND_EDGE, 0.85)
    return radial_gradient(params.size, BACKGROUND_CENTER, edge, radius=params.size)


def glow_pass(img: Image.Image, params: StyleParameters) -> Image.Image:
    """Step 5a: screen-blend a faint palette glow over the whole canvas."""

    # palette[0] at alpha 0x11 fading to palette[-1] at alpha 0x08
    inner = tuple(int(c * 0x11 / 255) for c in params.colors[0])
    outer = tuple(int(c * 0x08 / 255) for c in params.colors[-1])
    glow = radial_gradient(params.size, inner, outer, radius=params.size / 2).convert("RGB")
    return ImageChops.screen(img.convert("RGB"), glow)


def add_signature(img: Image.Image, text: str, margin: int = 24) -> Image.Image:
    """Step 5b: small text bottom-right over a translucent box."""

    base = img.convert("RGBA")
    overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    font = ImageFont.load_default()
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    tw, th = right - left, bottom - top
    x = base.width - tw - margin
    y = base.height - th - margin
    pad = 6
    draw.rounded_rectangle((x - pad, y - pad, x + tw + pad, y + th + pad), radius=pad, fill=(0, 0, 0, 100))
    draw.text((x - left, y - top), text, font=font, fill=(255, 255, 255, 200))
    return Image.alpha_composite(base, overlay).convert("RGB")


def render_artwork(
    measurement: MeasurementResult,
    params: StyleParameters,
    signature: Optional[str] = None,
) -> Tuple[Image.Image, ArtPlan]:
    """Run all five mapper steps; return ``(image, plan)``.

    Any failure while painting is raised as :class:`RenderingError`; no
    partial image is returned.
    """

    try:
        plan = plan_artwork(measurement, params)
        img = rasterize(plan.commands, paint_background(params))
        img = glow_pass(img, params)
        if signature:
            img = add_signature(img, signature)
    except (OSError, ValueError, TypeError, MemoryError) as exc:
        raise RenderingError(f"Could not paint the canvas: {exc}") from exc
    return img.convert("RGB"), plan
