"""
Configuration for one art-generation request.

A request is described by a single immutable :class:`StyleParameters` value.
The host UI (or the CLI) builds it once, either directly or from a loose
options mapping through :meth:`StyleParameters.from_options`, and hands it to
:func:`quantum_canvas.pipeline.generate_artwork`.

Numeric parameters are *clamped* into their supported range rather than
rejected; unknown enum names raise :class:`~quantum_canvas.errors.ConfigurationError`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


# --------------------------------- Enums ------------------------------------


class Style(str, Enum):
    ABSTRACT = "abstract"
    CHAOTIC = "chaotic"
    STRUCTURED = "structured"
    FLOWING = "flowing"
    MINIMAL = "minimal"
    DALI = "dali"
    PICASSO = "picasso"
    KANDINSKY = "kandinsky"
    POLLOCK = "pollock"
    MONDRIAN = "mondrian"
    VAN_GOGH = "vangogh"
    ESCHER = "escher"


class Symmetry(str, Enum):
    NONE = "none"
    BILATERAL = "bilateral"
    RADIAL = "radial"
    KALEIDOSCOPE = "kaleidoscope"


class SamplingMode(str, Enum):
    SHOTS = "shots"
    DISTRIBUTION = "distribution"


class CircuitMode(str, Enum):
    RANDOM = "random"
    PARAMETRIC = "parametric"


class QuantumMode(str, Enum):
    SIMULATION = "simulation"
    HARDWARE = "hardware"


# -------------------------------- Palettes ----------------------------------

PALETTES: Dict[str, Tuple[str, ...]] = {
    "vibrant": ("#FF006E", "#FB5607", "#FFBE0B", "#8338EC", "#3A86FF"),
    "cosmic": ("#0D1B2A", "#1B263B", "#415A77", "#778DA9", "#E0E1DD"),
    "nature": ("#2D6A4F", "#40916C", "#52B788", "#74C69D", "#B7E4C7"),
    "fire": ("#370617", "#6A040F", "#9D0208", "#D00000", "#DC2F02"),
    "aurora": ("#00F5D4", "#00BBF9", "#FEE440", "#F15BB5", "#9B5DE5", "#3A0CA3"),
    "sunset": ("#F72585", "#B5179E", "#7209B7", "#560BAD", "#480CA8", "#F8961E", "#F9C74F"),
    "monochrome": ("#F8F9FA", "#DEE2E6", "#ADB5BD", "#6C757D", "#343A40", "#212529"),
}

STYLE_DESCRIPTIONS: Dict[Style, str] = {
    Style.ABSTRACT: "Layered arcs and orbits",
    Style.CHAOTIC: "Particle explosion",
    Style.STRUCTURED: "Geometric patterns",
    Style.FLOWING: "Wave patterns",
    Style.MINIMAL: "Clean shapes",
    Style.DALI: "Melting surreal forms",
    Style.PICASSO: "Cubist fragments",
    Style.KANDINSKY: "Circles, lines and triangles",
    Style.POLLOCK: "Drip and splatter",
    Style.MONDRIAN: "Primary colour grid",
    Style.VAN_GOGH: "Swirling brushstrokes",
    Style.ESCHER: "Rotating tessellation",
}

# (low, high) per circuit mode
QUBIT_RANGES: Dict[CircuitMode, Tuple[int, int]] = {
    CircuitMode.RANDOM: (3, 5),
    CircuitMode.PARAMETRIC: (2, 8),
}

COMPLEXITY_RANGE = (1, 10)
ENTROPY_RANGE = (0.0, 1.0)
HARMONICS_RANGE = (1, 8)
LAYER_DEPTH_RANGE = (1, 6)
SHOTS_RANGE = (1, 8192)
SIZE_RANGE = (600, 1200)


def hex_to_rgb(color: str) -> Tuple[int, int, int]:
    """Convert ``#RRGGBB`` to an ``(r, g, b)`` tuple."""

    color = color.lstrip("#")
    return int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16)


def _clamp(name: str, value, low, high, cast=float):
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise ConfigurationError(f"{name} must be finite, got {value!r}")
    number = cast(number)
    clamped = min(max(number, low), high)
    if clamped != number:
        logger.debug("Clamped %s from %r to %r", name, number, clamped)
    return clamped


def _coerce_enum(enum_cls, value, what: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ConfigurationError(f"Unknown {what} {value!r} (expected one of: {allowed})") from None


# ------------------------------ Data classes --------------------------------


@dataclass(frozen=True)
class StyleParameters:
    """Everything the core needs for one request.

    ``seed`` threads through every random draw (circuit, sampling, render
    jitter). ``None`` selects *live mode*: circuit and shots use fresh entropy,
    while the art mapper stays reproducible for a given measurement.
    """

    style: Style = Style.CHAOTIC
    palette: str = "vibrant"
    symmetry: Symmetry = Symmetry.NONE
    qubit_count: int = 4
    complexity: int = 5
    entropy: float = 0.5
    harmonics: int = 3
    layer_depth: int = 3
    quantum_mode: QuantumMode = QuantumMode.SIMULATION
    circuit_mode: CircuitMode = CircuitMode.RANDOM
    sampling_mode: SamplingMode = SamplingMode.SHOTS
    shots: int = 1024
    size: int = 1200
    seed: Optional[int] = None
    reduced_gate_set: bool = False
    signature: Optional[str] = field(default="quantum canvas")

    def __post_init__(self) -> None:
        # frozen: go through object.__setattr__ for normalisation
        set_ = object.__setattr__
        set_(self, "style", _coerce_enum(Style, self.style, "style"))
        set_(self, "symmetry", _coerce_enum(Symmetry, self.symmetry, "symmetry"))
        set_(self, "quantum_mode", _coerce_enum(QuantumMode, self.quantum_mode, "quantum mode"))
        set_(self, "circuit_mode", _coerce_enum(CircuitMode, self.circuit_mode, "circuit mode"))
        set_(self, "sampling_mode", _coerce_enum(SamplingMode, self.sampling_mode, "sampling mode"))

        palette = str(self.palette).lower()
        if palette not in PALETTES:
            raise ConfigurationError(
                f"Unknown palette {self.palette!r} (expected one of: {', '.join(PALETTES)})"
            )
        set_(self, "palette", palette)

        low, high = QUBIT_RANGES[self.circuit_mode]
        set_(self, "qubit_count", _clamp("qubit_count", self.qubit_count, low, high, int))
        set_(self, "complexity", _clamp("complexity", self.complexity, *COMPLEXITY_RANGE, int))
        set_(self, "entropy", _clamp("entropy", self.entropy, *ENTROPY_RANGE))
        set_(self, "harmonics", _clamp("harmonics", self.harmonics, *HARMONICS_RANGE, int))
        set_(self, "layer_depth", _clamp("layer_depth", self.layer_depth, *LAYER_DEPTH_RANGE, int))
        set_(self, "shots", _clamp("shots", self.shots, *SHOTS_RANGE, int))
        set_(self, "size", _clamp("size", self.size, *SIZE_RANGE, int))

    @property
    def colors(self) -> Tuple[Tuple[int, int, int], ...]:
        return tuple(hex_to_rgb(c) for c in PALETTES[self.palette])

    def with_changes(self, **changes: Any) -> "StyleParameters":
        return replace(self, **changes)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "StyleParameters":
        """Build parameters from a UI options mapping.

        Accepts the camelCase names used by the host UI (``qubitCount``,
        ``layerDepth``, ``quantumMode`` ...) as well as the snake_case field
        names. Unrecognised keys raise :class:`ConfigurationError`.
        """

        aliases = {
            "qubitCount": "qubit_count",
            "layerDepth": "layer_depth",
            "quantumMode": "quantum_mode",
            "circuitMode": "circuit_mode",
            "samplingMode": "sampling_mode",
            "reducedGateSet": "reduced_gate_set",
        }
        known = set(cls.__dataclass_fields__)
        kwargs: Dict[str, Any] = {}
        for key, value in options.items():
            name = aliases.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unrecognised option {key!r}")
            kwargs[name] = value
        return cls(**kwargs)
