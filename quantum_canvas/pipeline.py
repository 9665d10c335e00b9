"""
One art-generation request, end to end.

``idle -> building_circuit -> simulating -> sampling -> rendering -> done``

Each step consumes only the previous step's output, so a request owns its
circuit, amplitude vector and raster outright. The only state shared between
requests is the "latest artwork" handle, kept in an :class:`ArtworkSlot` and
replaced atomically when a request completes.
"""

from __future__ import annotations

import io
import logging
import string
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
from PIL import Image

from .circuit import Circuit, build_circuit
from .config import QuantumMode, StyleParameters
from .errors import InvalidTransitionError, QuantumCanvasError
from .mapper import render_artwork
from .measurement import MeasurementResult, measure
from .simulator import StateVectorSimulator

logger = logging.getLogger(__name__)

TOP_K = 5


class GenerationState(str, Enum):
    IDLE = "idle"
    BUILDING_CIRCUIT = "building_circuit"
    SIMULATING = "simulating"
    SAMPLING = "sampling"
    RENDERING = "rendering"
    DONE = "done"
    ERROR = "error"


_NEXT = {
    GenerationState.IDLE: GenerationState.BUILDING_CIRCUIT,
    GenerationState.BUILDING_CIRCUIT: GenerationState.SIMULATING,
    GenerationState.SIMULATING: GenerationState.SAMPLING,
    GenerationState.SAMPLING: GenerationState.RENDERING,
    GenerationState.RENDERING: GenerationState.DONE,
}
TERMINAL = frozenset({GenerationState.DONE, GenerationState.ERROR})


class GenerationJob:
    """Tracks one request through the pipeline steps, in order."""

    def __init__(self, on_state: Optional[Callable[[GenerationState], None]] = None):
        self.state = GenerationState.IDLE
        self.history: List[GenerationState] = [self.state]
        self._on_state = on_state

    def _enter(self, state: GenerationState) -> None:
        logger.debug("Job state %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)
        if self._on_state:
            self._on_state(state)

    def advance(self, expected: GenerationState) -> None:
        """Move to the next step, which must be *expected*."""

        nxt = _NEXT.get(self.state)
        if nxt is None or nxt is not expected:
            raise InvalidTransitionError(f"Cannot move from {self.state.value} to {expected.value}")
        self._enter(nxt)

    def fail(self) -> None:
        if self.state in TERMINAL:
            raise InvalidTransitionError(f"Job already finished ({self.state.value})")
        self._enter(GenerationState.ERROR)

    def reset(self) -> None:
        if self.state not in TERMINAL:
            raise InvalidTransitionError(f"Cannot reset a job that is {self.state.value}")
        self.state = GenerationState.IDLE
        self.history = [self.state]


# ------------------------------ Result types --------------------------------


def new_job_id() -> str:
    """``qc-`` followed by nine base-36 characters."""

    alphabet = string.digits + string.ascii_lowercase
    n = uuid.uuid4().int
    chars = []
    for _ in range(9):
        n, r = divmod(n, 36)
        chars.append(alphabet[r])
    return "qc-" + "".join(chars)


@dataclass
class RenderedArtwork:
    image: Image.Image
    job_id: str
    timestamp: str
    top_outcomes: List[Tuple[str, float]]
    params: StyleParameters
    measurement: MeasurementResult
    circuit: Circuit
    hardware_fallback: bool = False

    def to_png(self) -> bytes:
        buf = io.BytesIO()
        self.image.save(buf, format="PNG")
        return buf.getvalue()

    def metadata(self) -> Dict[str, object]:
        p = self.params
        return {
            "job_id": self.job_id,
            "generated_utc": self.timestamp,
            "style": p.style.value,
            "palette": p.palette,
            "symmetry": p.symmetry.value,
            "qubits": self.circuit.n_qubits,
            "circuit_mode": p.circuit_mode.value,
            "gates": [str(g) for g in self.circuit],
            "sampling_mode": self.measurement.mode.value,
            "shots": self.measurement.shots,
            "quantum_mode": p.quantum_mode.value,
            "hardware_fallback": self.hardware_fallback,
            "seed": p.seed,
            "top_outcomes": [{"bitstring": b, "weight": w} for b, w in self.top_outcomes],
            "image_size": list(self.image.size),
        }


@dataclass
class GenerationResult:
    """Tagged outcome of :func:`generate_artwork`."""

    ok: bool
    artwork: Optional[RenderedArtwork] = None
    error: Optional[str] = None
    failed_state: Optional[GenerationState] = None
    states: List[GenerationState] = field(default_factory=list)


# -------------------------------- Pipeline ----------------------------------


def run_pipeline(
    params: StyleParameters,
    job: Optional[GenerationJob] = None,
) -> RenderedArtwork:
    """Run every step for *params*; raises on failure."""

    job = job or GenerationJob()
    rng = np.random.default_rng(params.seed)
    job_id = new_job_id()

    job.advance(GenerationState.BUILDING_CIRCUIT)
    circuit = build_circuit(params, rng)

    job.advance(GenerationState.SIMULATING)
    state = StateVectorSimulator(reduced_gate_set=params.reduced_gate_set).run(circuit)

    job.advance(GenerationState.SAMPLING)
    measurement = measure(state, params, rng)
    del state  # amplitude vector dies with the sampling step

    job.advance(GenerationState.RENDERING)
    signature = f"{params.signature} · {job_id}" if params.signature else None
    image, _ = render_artwork(measurement, params, signature=signature)

    artwork = RenderedArtwork(
        image=image,
        job_id=job_id,
        timestamp=datetime.now(timezone.utc).isoformat(),
        top_outcomes=measurement.top_k(TOP_K),
        params=params,
        measurement=measurement,
        circuit=circuit,
        hardware_fallback=params.quantum_mode is QuantumMode.HARDWARE,
    )
    job.advance(GenerationState.DONE)
    logger.info("Generated %s (%s, %d qubits, top %s)", job_id, params.style.value,
                circuit.n_qubits, artwork.top_outcomes[:1])
    return artwork


def generate_artwork(
    params: StyleParameters,
    on_state: Optional[Callable[[GenerationState], None]] = None,
) -> GenerationResult:
    """Run one request and return a tagged result instead of raising."""

    job = GenerationJob(on_state=on_state)
    try:
        artwork = run_pipeline(params, job)
    except QuantumCanvasError as exc:
        failed = job.state
        logger.error("Generation failed while %s: %s", failed.value, exc)
        job.fail()
        return GenerationResult(ok=False, error=str(exc), failed_state=failed, states=list(job.history))
    except Exception as exc:
        failed = job.state
        logger.exception("Unexpected error while %s", failed.value)
        if failed not in TERMINAL:
            job.fail()
        return GenerationResult(ok=False, error=f"{type(exc).__name__}: {exc}", failed_state=failed,
                                states=list(job.history))
    return GenerationResult(ok=True, artwork=artwork, states=list(job.history))


# ------------------------------ Shared output -------------------------------


class ArtworkSlot:
    """Holds the most recent completed artwork.

    Each request takes a ticket from :meth:`begin`. Only the newest ticket
    may publish; older requests are dropped, and a cancelled or failed
    request leaves the current artwork untouched.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest_ticket = 0
        self._cancelled: set = set()
        self._artwork: Optional[RenderedArtwork] = None

    @property
    def artwork(self) -> Optional[RenderedArtwork]:
        with self._lock:
            return self._artwork

    def begin(self) -> int:
        with self._lock:
            self._latest_ticket += 1
            # only the newest ticket can publish
            self._cancelled = {t for t in self._cancelled if t >= self._latest_ticket}
            return self._latest_ticket

    def cancel(self, ticket: int) -> None:
        with self._lock:
            if ticket == self._latest_ticket:
                self._cancelled.add(ticket)

    def publish(self, ticket: int, artwork: RenderedArtwork) -> bool:
        with self._lock:
            if ticket != self._latest_ticket or ticket in self._cancelled:
                logger.debug("Dropping result for stale ticket %d", ticket)
                return False
            self._artwork = artwork
            return True

    def run(self, params: StyleParameters,
            on_state: Optional[Callable[[GenerationState], None]] = None) -> GenerationResult:
        """Generate for *params* and publish the result if still current."""

        ticket = self.begin()
        result = generate_artwork(params, on_state=on_state)
        if result.ok:
            self.publish(ticket, result.artwork)
        return result
