"""
Command-line interface.

Run ``quantum-canvas --style minimal --palette vibrant -o art.png`` to
generate art without a GUI, or ``quantum-canvas --gui`` for the window.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import (
    PALETTES,
    CircuitMode,
    QuantumMode,
    SamplingMode,
    Style,
    StyleParameters,
    Symmetry,
)
from .errors import ConfigurationError
from .pipeline import RenderedArtwork, generate_artwork

logger = logging.getLogger(__name__)


def _configure_logging(verbose: int) -> None:
    level = logging.WARNING - 10 * verbose
    logging.basicConfig(
        level=max(level, logging.DEBUG),
        format="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate deterministic art from a simulated quantum circuit")
    parser.add_argument("--gui", action="store_true", help="Open the PyQt5 window instead")
    parser.add_argument("--style", choices=[s.value for s in Style], default=Style.CHAOTIC.value)
    parser.add_argument("--palette", choices=list(PALETTES), default="vibrant")
    parser.add_argument("--symmetry", choices=[s.value for s in Symmetry], default=Symmetry.NONE.value)
    parser.add_argument("--qubits", type=int, default=4, help="Qubit count (clamped per circuit mode)")
    parser.add_argument("--complexity", type=int, default=5)
    parser.add_argument("--entropy", type=float, default=0.5)
    parser.add_argument("--harmonics", type=int, default=3)
    parser.add_argument("--layer-depth", type=int, default=3)
    parser.add_argument("--circuit-mode", choices=[m.value for m in CircuitMode], default=CircuitMode.RANDOM.value)
    parser.add_argument("--sampling", choices=[m.value for m in SamplingMode], default=SamplingMode.SHOTS.value)
    parser.add_argument("--quantum-mode", choices=[m.value for m in QuantumMode], default=QuantumMode.SIMULATION.value)
    parser.add_argument("--shots", type=int, default=1024)
    parser.add_argument("--size", type=int, default=1200)
    parser.add_argument("--seed", type=int, default=None, help="Seed every random draw (blank = live mode)")
    parser.add_argument("--reduced-gate-set", action="store_true",
                        help="Treat RZ, P, CZ and SWAP as no-ops")
    parser.add_argument("--no-signature", action="store_true")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="Write the PNG here, plus a .json metadata sidecar")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser


def params_from_args(args: argparse.Namespace) -> StyleParameters:
    return StyleParameters(
        style=args.style,
        palette=args.palette,
        symmetry=args.symmetry,
        qubit_count=args.qubits,
        complexity=args.complexity,
        entropy=args.entropy,
        harmonics=args.harmonics,
        layer_depth=args.layer_depth,
        circuit_mode=args.circuit_mode,
        sampling_mode=args.sampling,
        quantum_mode=args.quantum_mode,
        shots=args.shots,
        size=args.size,
        seed=args.seed,
        reduced_gate_set=args.reduced_gate_set,
        signature=None if args.no_signature else "quantum canvas",
    )


def export(artwork: RenderedArtwork, output_path: Path) -> Path:
    """Write the PNG and its metadata sidecar."""

    output_path = Path(output_path)
    output_path.write_bytes(artwork.to_png())
    json_path = output_path.with_suffix(".json")
    json_path.write_text(json.dumps(artwork.metadata(), indent=2))
    logger.info("Art saved to %s", output_path)
    logger.info("Metadata saved to %s", json_path)
    return output_path


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        params = params_from_args(args)
    except ConfigurationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.gui:
        from .gui import run_gui

        return run_gui(params)

    result = generate_artwork(params)
    if not result.ok:
        print(f"error: generation failed while {result.failed_state.value}: {result.error}", file=sys.stderr)
        return 1

    artwork = result.artwork
    print(f"Job {artwork.job_id} at {artwork.timestamp}")
    for bits, weight in artwork.top_outcomes:
        print(f"  {bits}  {weight:g}")
    if args.output is not None:
        path = export(artwork, args.output)
        print(f"Image saved to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
