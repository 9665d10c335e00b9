"""
Quantum Canvas: generative art from simulated quantum circuits.

A request flows through four steps, each handled by one module:

* :mod:`quantum_canvas.circuit` builds a gate sequence for the chosen style.
* :mod:`quantum_canvas.simulator` evolves ``|0...0>`` through it.
* :mod:`quantum_canvas.measurement` samples (or exposes) outcome weights.
* :mod:`quantum_canvas.mapper` turns the weights into a Pillow image.

:func:`generate_artwork` runs all of them and returns a tagged result.
"""

from .circuit import Circuit, build_circuit
from .config import (
    PALETTES,
    CircuitMode,
    QuantumMode,
    SamplingMode,
    Style,
    StyleParameters,
    Symmetry,
)
from .errors import (
    ConfigurationError,
    InvalidTransitionError,
    QuantumCanvasError,
    RenderingError,
    SimulationError,
)
from .gates import Gate
from .mapper import plan_artwork, render_artwork
from .measurement import MeasurementResult, measure
from .pipeline import (
    ArtworkSlot,
    GenerationResult,
    GenerationState,
    RenderedArtwork,
    generate_artwork,
)
from .simulator import AmplitudeVector, StateVectorSimulator, simulate

__version__ = "0.1.0"

__all__ = [
    "AmplitudeVector",
    "ArtworkSlot",
    "Circuit",
    "CircuitMode",
    "ConfigurationError",
    "Gate",
    "GenerationResult",
    "GenerationState",
    "InvalidTransitionError",
    "MeasurementResult",
    "PALETTES",
    "QuantumCanvasError",
    "QuantumMode",
    "RenderedArtwork",
    "RenderingError",
    "SamplingMode",
    "SimulationError",
    "StateVectorSimulator",
    "Style",
    "StyleParameters",
    "Symmetry",
    "build_circuit",
    "generate_artwork",
    "measure",
    "plan_artwork",
    "render_artwork",
    "simulate",
]
