"""
Per-style geometric generators.

Every generator has the same signature, ``generator(ctx, scene)``, and draws
one *layer*: it only reads the :class:`Scene` and records primitives on
``ctx``. A generator may be replayed several times under different symmetry
frames, so any jitter must come from ``scene.rng()``, which hands out a fresh
generator seeded identically on every call.

Positions, sizes, colours and rotations are functions of an outcome's rank,
its probability, its integer value and the quantum seed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

import numpy as np

from .canvas import RGB, DrawingContext, lerp_color, rgba
from .config import Style

# the canvas size the layout constants were tuned for
REFERENCE_SIZE = 1200.0


@dataclass(frozen=True)
class Outcome:
    bits: str
    value: int
    weight: float
    probability: float


@dataclass(frozen=True)
class Scene:
    size: int
    colors: Tuple[RGB, ...]
    outcomes: Tuple[Outcome, ...]  # ranked, most likely first
    quantum_seed: int
    rotation_offset: float
    scale_variation: float
    jitter_seed: int
    complexity: int = 5
    entropy: float = 0.5
    harmonics: int = 3
    layer_depth: int = 3

    @property
    def k(self) -> float:
        """Pixel scale relative to the reference canvas."""
        return self.size / REFERENCE_SIZE

    @property
    def center(self) -> float:
        return self.size / 2.0

    def color(self, index: int) -> RGB:
        return self.colors[index % len(self.colors)]

    def rng(self) -> np.random.Generator:
        return np.random.default_rng(self.jitter_seed)


Generator = Callable[[DrawingContext, Scene], None]


def _regular_polygon(cx: float, cy: float, radius: float, sides: int, rotation: float) -> List[Tuple[float, float]]:
    return [
        (cx + math.cos(rotation + i / sides * 2 * math.pi) * radius,
         cy + math.sin(rotation + i / sides * 2 * math.pi) * radius)
        for i in range(sides)
    ]


# ------------------------------ Core styles ---------------------------------


def _generate_chaotic(ctx: DrawingContext, scene: Scene) -> None:
    """Particle explosion: golden-angle bursts per outcome."""

    rng = scene.rng()
    size, c, k = scene.size, scene.center, scene.k
    for result in scene.outcomes:
        p = result.probability
        for i in range(math.ceil(p * 100)):
            angle = math.radians(result.value + i * 137.5 + math.degrees(scene.rotation_offset))
            distance = (p * 0.3 + rng.random() * 0.4) * size * scene.scale_variation
            x = c + math.cos(angle) * distance
            y = c + math.sin(angle) * distance
            ci = result.value + i
            radius = (p * 30 + 8) * (0.5 + rng.random() * 0.5) * k
            ctx.glow(x, y, radius * 3,
                     rgba(scene.color(ci), 0xEE),
                     rgba(scene.color(ci + 1), 0x88),
                     rgba(scene.color(ci + 2), 0x00))
            ctx.circle(x, y, radius * 0.4, fill=rgba(scene.color(ci), 0xFF))


def _generate_structured(ctx: DrawingContext, scene: Scene) -> None:
    """Nested regular polygons with glowing vertices."""

    size, c, k = scene.size, scene.center, scene.k
    for layer, result in enumerate(scene.outcomes[:12]):
        p = result.probability
        radius = (size * 0.08 + layer * size * 0.05) * scene.scale_variation
        sides = 3 + result.value % 8
        rotation = math.radians(result.value * 17) + scene.rotation_offset
        verts = _regular_polygon(c, c, radius, sides, rotation)
        ctx.polygon(verts, fill=rgba(scene.color(layer), 0x22),
                    outline=rgba(scene.color(layer), 0xAA), width=(p * 8 + 2) * k)
        for i, (x, y) in enumerate(verts):
            ctx.circle(x, y, (p * 15 + 5) * k, fill=rgba(scene.color(layer + i), 0xFF))
            ctx.glow(x, y, 20 * k, rgba(scene.color(layer + i), 0xAA), rgba(scene.color(layer + i), 0x00))


def _wave_y(x: float, scene: Scene, frequency: float, phase: float, amplitude: float) -> float:
    # harmonics=2 gives the classic two-term wave
    y = scene.center
    for h in range(1, scene.harmonics + 1):
        y += math.sin(x * frequency * h + phase * (1 + 0.5 * (h - 1))) * amplitude / h
    return y


def _generate_flowing(ctx: DrawingContext, scene: Scene) -> None:
    """Layered harmonic waves with particles riding the crests."""

    size, k = scene.size, scene.k
    for idx, result in enumerate(scene.outcomes[:20]):
        p = result.probability
        phase = result.value / 255 * 2 * math.pi
        amplitude = p * size * 0.3
        frequency = (0.01 + p * 0.02) / k
        points = [(float(x), _wave_y(x, scene, frequency, phase, amplitude))
                  for x in range(0, size, 3)]
        ctx.polyline(points, rgba(scene.color(idx), 0x88), width=(p * 12 + 3) * k)
        ctx.polyline(points, rgba(scene.color(idx + 1), 0x44), width=(p * 20 + 5) * k)

    for idx, result in enumerate(scene.outcomes):
        p = result.probability
        phase = result.value / 255 * 2 * math.pi
        frequency = (0.01 + p * 0.02) / k
        amplitude = p * size * 0.3
        for i in range(math.ceil(p * 30)):
            x = (result.value * 17 + i * 137.5) * k % size
            y = scene.center + math.sin(x * frequency + phase) * amplitude
            ctx.glow(x, y, 15 * k, rgba(scene.color(idx + i), 0xFF), rgba(scene.color(idx + i), 0x00))


MINIMAL_SHAPES = ("circle", "square", "triangle")


def minimal_shape(value: int) -> str:
    """Shape drawn by the minimal style for an outcome's integer value."""

    return MINIMAL_SHAPES[value % 3]


def _generate_minimal(ctx: DrawingContext, scene: Scene) -> None:
    """Up to five clean shapes arranged on a ring."""

    size, c = scene.size, scene.center
    top = scene.outcomes[:5]
    for idx, result in enumerate(top):
        shape_size = size * 0.15 * (1 + result.probability * 2)
        offset_angle = idx / len(top) * 2 * math.pi
        x = c + math.cos(offset_angle) * size * 0.25
        y = c + math.sin(offset_angle) * size * 0.25
        color = scene.color(idx)
        outline = rgba(scene.color(idx + 1), 0xFF)

        ctx.glow(x, y, shape_size * 2, rgba(color, 0x44), rgba(color, 0x00))
        shape = minimal_shape(result.value)
        if shape == "circle":
            ctx.circle(x, y, shape_size, fill=rgba(color, 0xDD), outline=outline, width=4 * scene.k)
        elif shape == "square":
            ctx.rect(x - shape_size, y - shape_size, x + shape_size, y + shape_size,
                     fill=rgba(color, 0xDD), outline=outline, width=4 * scene.k)
        else:
            ctx.polygon([(x, y - shape_size), (x + shape_size, y + shape_size), (x - shape_size, y + shape_size)],
                        fill=rgba(color, 0xDD), outline=outline, width=4 * scene.k)


def _generate_abstract(ctx: DrawingContext, scene: Scene) -> None:
    """Concentric orbit arcs, one ring per outcome, repeated per depth layer."""

    c, k = scene.center, scene.k
    outcomes = scene.outcomes[: scene.complexity * 2]
    for depth in range(scene.layer_depth):
        shrink = 1.0 - depth / (scene.layer_depth + 1)
        for rank, result in enumerate(outcomes):
            p = result.probability
            radius = (60 + rank * 38) * k * scene.scale_variation * shrink
            start = scene.rotation_offset + result.value * 0.3 + depth * 0.7
            sweep = max(p * 2 * math.pi, 0.35)
            steps = max(8, int(sweep * 24))
            arc = [(c + math.cos(start + sweep * s / steps) * radius,
                    c + math.sin(start + sweep * s / steps) * radius) for s in range(steps + 1)]
            ctx.polyline(arc, rgba(scene.color(rank + depth), 0xCC), width=(p * 14 + 2) * k)
            ex, ey = arc[-1]
            ctx.circle(ex, ey, (p * 18 + 4) * k, fill=rgba(scene.color(rank + depth + 1), 0xEE))


# ---------------------------- Painter styles --------------------------------


def _generate_dali(ctx: DrawingContext, scene: Scene) -> None:
    """Melting clock faces drooping toward the horizon."""

    rng = scene.rng()
    size, k = scene.size, scene.k
    ctx.rect(0, size * 0.72, size, size, fill=rgba(lerp_color(scene.color(0), (40, 25, 10), 0.6), 0x99))

    for rank, result in enumerate(scene.outcomes[:6]):
        p = result.probability
        cx = size * (0.2 + 0.6 * ((result.value * 0.618 + rank * 0.37) % 1.0))
        cy = size * (0.25 + 0.4 * ((scene.quantum_seed * 0.13 + rank * 0.29) % 1.0))
        rx = (70 + p * 160) * k * scene.scale_variation
        ry = rx * 0.8
        drip = p * size * 0.25 + 20 * k
        tilt = scene.rotation_offset * 0.2 + rank * 0.15
        outline = []
        for s in range(48):
            a = s / 48 * 2 * math.pi
            x, y = math.cos(a) * rx, math.sin(a) * ry
            if y > 0:
                # lower rim sags, most at the bottom
                y += drip * math.sin(a) ** 4 * (0.8 + 0.4 * rng.random())
            outline.append((cx + x * math.cos(tilt) - y * math.sin(tilt),
                            cy + x * math.sin(tilt) + y * math.cos(tilt)))
        color = scene.color(rank)
        ctx.polygon(outline, fill=rgba(color, 0xDD), outline=rgba((30, 20, 10), 0xFF), width=3 * k)
        for tick in range(12):
            a = tick / 12 * 2 * math.pi + tilt
            ctx.circle(cx + math.cos(a) * rx * 0.8, cy + math.sin(a) * ry * 0.8, 3 * k,
                       fill=rgba((30, 20, 10), 0xCC))
        hour = math.radians(result.value * 30) + tilt
        minute = math.radians(result.value * 6 + scene.quantum_seed % 60 * 6) + tilt
        ctx.polyline([(cx, cy), (cx + math.cos(hour) * rx * 0.45, cy + math.sin(hour) * ry * 0.45)],
                     rgba((20, 10, 5), 0xFF), width=5 * k)
        ctx.polyline([(cx, cy), (cx + math.cos(minute) * rx * 0.7, cy + math.sin(minute) * ry * 0.7)],
                     rgba((20, 10, 5), 0xFF), width=3 * k)


def _generate_picasso(ctx: DrawingContext, scene: Scene) -> None:
    """Cubist fragments: angular facets whose vertices follow the bits."""

    size, k = scene.size, scene.k
    cells = 3
    for rank, result in enumerate(scene.outcomes[: scene.complexity * 3]):
        p = result.probability
        cell = (result.value + rank) % (cells * cells)
        cx = size * (cell % cells + 0.5) / cells
        cy = size * (cell // cells + 0.5) / cells
        base = (90 + p * 240) * k * scene.scale_variation
        rotation = scene.rotation_offset + math.radians(result.value * 23 + rank * 41)
        verts = []
        for i, bit in enumerate(result.bits):
            a = rotation + i / len(result.bits) * 2 * math.pi
            r = base * (1.0 if bit == "1" else 0.55)
            verts.append((cx + math.cos(a) * r, cy + math.sin(a) * r))
        if len(verts) < 3:
            verts = _regular_polygon(cx, cy, base, 3, rotation)
        ctx.polygon(verts, fill=rgba(scene.color(rank), 0xBB), outline=rgba((15, 15, 15), 0xFF), width=4 * k)

    if scene.outcomes:
        top = scene.outcomes[0]
        ex = size * (0.3 + 0.4 * (top.value % 7) / 6)
        ey = size * 0.4
        ctx.polygon([(ex - 60 * k, ey), (ex, ey - 28 * k), (ex + 60 * k, ey), (ex, ey + 28 * k)],
                    fill=rgba((245, 240, 230), 0xFF), outline=rgba((15, 15, 15), 0xFF), width=4 * k)
        ctx.circle(ex, ey, 20 * k, fill=rgba(scene.color(top.value), 0xFF))
        ctx.circle(ex, ey, 8 * k, fill=rgba((10, 10, 10), 0xFF))


def _generate_kandinsky(ctx: DrawingContext, scene: Scene) -> None:
    """Circles, crossing lines and triangles chosen by value."""

    size, c, k = scene.size, scene.center, scene.k
    for rank, result in enumerate(scene.outcomes[: scene.complexity * 2]):
        p = result.probability
        angle = scene.rotation_offset + math.radians(result.value * 47 + rank * 29)
        dist = size * (0.08 + 0.35 * ((rank * 0.618) % 1.0))
        x = c + math.cos(angle) * dist
        y = c + math.sin(angle) * dist
        r = (25 + p * 140) * k * scene.scale_variation
        kind = result.value % 3
        if kind == 0:
            for ring in range(3):
                ctx.circle(x, y, r * (1 - ring * 0.3), fill=rgba(scene.color(rank + ring), 0xCC),
                           outline=rgba((20, 20, 20), 0xFF), width=2 * k)
        elif kind == 1:
            length = size * (0.3 + p)
            dx, dy = math.cos(angle * 3) * length / 2, math.sin(angle * 3) * length / 2
            ctx.polyline([(x - dx, y - dy), (x + dx, y + dy)], rgba((20, 20, 20), 0xEE), width=(2 + p * 10) * k)
            ctx.circle(x + dx, y + dy, 6 * k, fill=rgba(scene.color(rank), 0xFF))
        else:
            ctx.polygon(_regular_polygon(x, y, r, 3, angle), fill=rgba(scene.color(rank), 0xAA),
                        outline=rgba((20, 20, 20), 0xFF), width=2 * k)


def _generate_pollock(ctx: DrawingContext, scene: Scene) -> None:
    """Drip paths and splatter built from seeded random walks."""

    rng = scene.rng()
    size, k = scene.size, scene.k
    for rank, result in enumerate(scene.outcomes):
        p = result.probability
        color = scene.color(result.value + rank)
        for _ in range(math.ceil(p * 12 * scene.complexity / 5) + 1):
            x, y = rng.random() * size, rng.random() * size
            heading = rng.random() * 2 * math.pi
            points = [(x, y)]
            for _ in range(8 + int(rng.integers(0, 16))):
                heading += rng.normal(0.0, 0.6)
                step = (15 + rng.random() * 45) * k
                x += math.cos(heading) * step
                y += math.sin(heading) * step
                points.append((x, y))
            ctx.polyline(points, rgba(color, 0xCC), width=(1 + p * 10 + rng.random() * 3) * k)
            for _ in range(int(rng.integers(2, 7))):
                sx, sy = points[int(rng.integers(0, len(points)))]
                ctx.circle(sx + rng.normal(0, 12) * k, sy + rng.normal(0, 12) * k,
                           (1 + rng.random() * 5) * k, fill=rgba(color, 0xDD))


def _generate_mondrian(ctx: DrawingContext, scene: Scene) -> None:
    """Grid of black bars; lines come from outcome values, colours from rank."""

    size, k = scene.size, scene.k
    dim = 1 << max(1, len(scene.outcomes[0].bits)) if scene.outcomes else 2
    xs, ys = {0.0, float(size)}, {0.0, float(size)}
    for rank, result in enumerate(scene.outcomes[: 2 + scene.complexity]):
        pos = round(size * (result.value + 1) / (dim + 1), 3)
        (xs if rank % 2 == 0 else ys).add(pos)
    xs, ys = sorted(xs), sorted(ys)

    cell = 0
    for row in range(len(ys) - 1):
        for col in range(len(xs) - 1):
            owner = scene.outcomes[cell % len(scene.outcomes)] if scene.outcomes else None
            if owner is not None and (owner.value + row + col) % 3 == 0:
                fill = rgba(scene.color(owner.value + cell), 0xFF)
            else:
                fill = rgba((242, 240, 232), 0xFF)
            ctx.rect(xs[col], ys[row], xs[col + 1], ys[row + 1], fill=fill)
            cell += 1
    bar = 12 * k
    for x in xs[1:-1]:
        ctx.rect(x - bar / 2, 0, x + bar / 2, size, fill=rgba((10, 10, 10), 0xFF))
    for y in ys[1:-1]:
        ctx.rect(0, y - bar / 2, size, y + bar / 2, fill=rgba((10, 10, 10), 0xFF))


def _generate_van_gogh(ctx: DrawingContext, scene: Scene) -> None:
    """Flow-field brushstrokes around a few spiral swirls."""

    rng = scene.rng()
    size, k = scene.size, scene.k
    step = size / (8 + scene.complexity * 2)
    freq = scene.harmonics / size * 2 * math.pi
    y = step / 2
    row = 0
    while y < size:
        x = step / 2
        while x < size:
            a = math.sin(x * freq + scene.rotation_offset) + math.cos(y * freq) + rng.normal(0, 0.15)
            length = step * 0.8
            ctx.polyline([(x, y), (x + math.cos(a) * length, y + math.sin(a) * length)],
                         rgba(scene.color(row + int(x / step)), 0x99), width=5 * k)
            x += step
        y += step
        row += 1

    for rank, result in enumerate(scene.outcomes[:4]):
        p = result.probability
        cx = size * (0.15 + 0.7 * ((result.value * 0.381 + rank * 0.5) % 1.0))
        cy = size * (0.15 + 0.5 * ((result.value * 0.727 + rank * 0.25) % 1.0))
        turns = 2 + scene.layer_depth
        r_max = (60 + p * 200) * k * scene.scale_variation
        for stroke in range(turns * 6):
            t0 = stroke / (turns * 6)
            a0 = scene.rotation_offset + t0 * turns * 2 * math.pi
            arc = [(cx + math.cos(a0 + s * 0.08) * r_max * (t0 + s * 0.004),
                    cy + math.sin(a0 + s * 0.08) * r_max * (t0 + s * 0.004)) for s in range(6)]
            ctx.polyline(arc, rgba(scene.color(rank + stroke), 0xDD), width=(4 + p * 6) * k)


def _escher_tile(x: float, y: float, s: float, quarter_turns: int) -> List[Tuple[float, float]]:
    # square with a tab on one edge and a matching notch on the opposite edge
    h = s / 2
    local = [(-h, -h), (-h * 0.3, -h), (0, -h - s * 0.2), (h * 0.3, -h), (h, -h),
             (h, h), (h * 0.3, h), (0, h - s * 0.2), (-h * 0.3, h), (-h, h)]
    a = quarter_turns * math.pi / 2
    ca, sa = math.cos(a), math.sin(a)
    return [(x + px * ca - py * sa, y + px * sa + py * ca) for px, py in local]


def _generate_escher(ctx: DrawingContext, scene: Scene) -> None:
    """Interlocking tab-and-notch tiles, orientation chosen per outcome."""

    size = scene.size
    cols = 3 + scene.complexity // 2
    s = size / cols
    light, dark = scene.color(0), scene.color(len(scene.colors) - 1)
    for row in range(cols):
        for col in range(cols):
            owner = scene.outcomes[(row * cols + col) % len(scene.outcomes)] if scene.outcomes else None
            value = owner.value if owner else 0
            turns = (value + scene.quantum_seed) % 4
            shade = lerp_color(light, dark, ((row + col) % 2) * 0.7 + (owner.probability if owner else 0) * 0.3)
            ctx.polygon(_escher_tile((col + 0.5) * s, (row + 0.5) * s, s * 0.9, turns),
                        fill=rgba(shade, 0xEE), outline=rgba(scene.color(value + row), 0xFF), width=2 * scene.k)


STYLE_GENERATORS: Dict[Style, Generator] = {
    Style.ABSTRACT: _generate_abstract,
    Style.CHAOTIC: _generate_chaotic,
    Style.STRUCTURED: _generate_structured,
    Style.FLOWING: _generate_flowing,
    Style.MINIMAL: _generate_minimal,
    Style.DALI: _generate_dali,
    Style.PICASSO: _generate_picasso,
    Style.KANDINSKY: _generate_kandinsky,
    Style.POLLOCK: _generate_pollock,
    Style.MONDRIAN: _generate_mondrian,
    Style.VAN_GOGH: _generate_van_gogh,
    Style.ESCHER: _generate_escher,
}


def generator_for(style: Style) -> Generator:
    return STYLE_GENERATORS[style]
