"""Error taxonomy for the generation pipeline."""

from __future__ import annotations


class QuantumCanvasError(RuntimeError):
    """Base class for every error raised by the core."""


class ConfigurationError(QuantumCanvasError, ValueError):
    """A parameter or option name the core does not support."""


class SimulationError(QuantumCanvasError):
    """The state vector could not be allocated or evolved."""


class RenderingError(QuantumCanvasError):
    """The raster surface could not be produced."""


class InvalidTransitionError(QuantumCanvasError):
    """A generation job tried to skip or repeat a pipeline step."""
