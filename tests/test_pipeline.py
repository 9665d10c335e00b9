import io
import json
import re

import pytest
from PIL import Image

from quantum_canvas import cli
from quantum_canvas.config import CircuitMode, QuantumMode, Style, StyleParameters, Symmetry
from quantum_canvas.errors import ConfigurationError, InvalidTransitionError, RenderingError
from quantum_canvas.pipeline import (
    ArtworkSlot,
    GenerationJob,
    GenerationState,
    generate_artwork,
    new_job_id,
)

STEPS = [
    GenerationState.IDLE,
    GenerationState.BUILDING_CIRCUIT,
    GenerationState.SIMULATING,
    GenerationState.SAMPLING,
    GenerationState.RENDERING,
    GenerationState.DONE,
]


def test_successful_run_visits_every_state_in_order(small_params):
    seen = []
    result = generate_artwork(small_params(), on_state=seen.append)
    assert result.ok
    assert result.states == STEPS
    assert seen == STEPS[1:]
    assert result.artwork.image.size == (600, 600)
    assert len(result.artwork.top_outcomes) <= 5


def test_rendering_failure_returns_error_result(small_params, monkeypatch):
    def broken(*args, **kwargs):
        raise RenderingError("no surface")

    monkeypatch.setattr("quantum_canvas.pipeline.render_artwork", broken)
    result = generate_artwork(small_params())
    assert not result.ok
    assert result.artwork is None
    assert result.failed_state is GenerationState.RENDERING
    assert result.states[-1] is GenerationState.ERROR
    assert "no surface" in result.error


def test_job_rejects_skipped_steps():
    job = GenerationJob()
    with pytest.raises(InvalidTransitionError):
        job.advance(GenerationState.SAMPLING)
    job.advance(GenerationState.BUILDING_CIRCUIT)
    job.fail()
    with pytest.raises(InvalidTransitionError):
        job.fail()
    job.reset()
    assert job.history == [GenerationState.IDLE]


def test_seeded_generation_is_reproducible(small_params):
    params = small_params(style=Style.VAN_GOGH, symmetry=Symmetry.BILATERAL)
    a = generate_artwork(params).artwork
    b = generate_artwork(params).artwork
    assert a.top_outcomes == b.top_outcomes
    assert a.image.tobytes() == b.image.tobytes()


def test_hardware_mode_reports_fallback(small_params):
    artwork = generate_artwork(small_params(quantum_mode=QuantumMode.HARDWARE)).artwork
    assert artwork.hardware_fallback
    assert artwork.metadata()["hardware_fallback"] is True


def test_artwork_png_and_metadata(small_params):
    artwork = generate_artwork(small_params(circuit_mode=CircuitMode.PARAMETRIC, qubit_count=6)).artwork
    png = Image.open(io.BytesIO(artwork.to_png()))
    assert png.format == "PNG"
    assert png.size == (600, 600)

    meta = artwork.metadata()
    assert meta["qubits"] == 6
    assert meta["circuit_mode"] == "parametric"
    assert meta["seed"] == 7
    assert meta["job_id"] == artwork.job_id
    json.dumps(meta)


def test_job_id_format():
    assert re.fullmatch(r"qc-[0-9a-z]{9}", new_job_id())


# ------------------------------ ArtworkSlot ---------------------------------


def test_slot_drops_stale_results(small_params):
    slot = ArtworkSlot()
    artwork = generate_artwork(small_params()).artwork
    older = slot.begin()
    newer = slot.begin()
    assert not slot.publish(older, artwork)
    assert slot.artwork is None
    assert slot.publish(newer, artwork)
    assert slot.artwork is artwork


def test_slot_cancelled_request_keeps_previous_artwork(small_params):
    slot = ArtworkSlot()
    first = slot.run(small_params()).artwork
    assert slot.artwork is first

    ticket = slot.begin()
    slot.cancel(ticket)
    second = generate_artwork(small_params(seed=8)).artwork
    assert not slot.publish(ticket, second)
    assert slot.artwork is first


# ------------------------------ Configuration -------------------------------


def test_from_options_accepts_camel_case():
    params = StyleParameters.from_options({
        "style": "Mondrian",
        "palette": "FIRE",
        "qubitCount": 9,
        "layerDepth": 4,
        "quantumMode": "hardware",
        "entropy": 3.0,
    })
    assert params.style is Style.MONDRIAN
    assert params.palette == "fire"
    assert params.qubit_count == 5
    assert params.layer_depth == 4
    assert params.quantum_mode is QuantumMode.HARDWARE
    assert params.entropy == 1.0


def test_unknown_options_are_rejected():
    with pytest.raises(ConfigurationError):
        StyleParameters.from_options({"colour": "red"})
    with pytest.raises(ConfigurationError):
        StyleParameters(style="cubism")
    with pytest.raises(ConfigurationError):
        StyleParameters(palette="pastel")


def test_numeric_parameters_are_clamped():
    params = StyleParameters(complexity=0, harmonics=99, shots=0, size=4000)
    assert (params.complexity, params.harmonics, params.shots, params.size) == (1, 8, 1, 1200)


# ---------------------------------- CLI -------------------------------------


def test_cli_writes_png_and_sidecar(tmp_path, capsys):
    out = tmp_path / "art.png"
    code = cli.main(["--style", "minimal", "--size", "600", "--seed", "3", "--no-signature", "-o", str(out)])
    assert code == 0
    assert Image.open(out).size == (600, 600)
    meta = json.loads(out.with_suffix(".json").read_text())
    assert meta["style"] == "minimal"
    assert "Image saved to" in capsys.readouterr().out


def test_cli_reports_generation_failure(monkeypatch, capsys):
    def broken(*args, **kwargs):
        raise RenderingError("disk on fire")

    monkeypatch.setattr("quantum_canvas.pipeline.render_artwork", broken)
    assert cli.main(["--size", "600", "--seed", "1"]) == 1
    assert "disk on fire" in capsys.readouterr().err


# ------------------------------ Bad input -----------------------------------


@pytest.mark.parametrize("field,value", [
    ("entropy", float("nan")),
    ("complexity", float("inf")),
    ("qubit_count", None),
    ("shots", "many"),
])
def test_unusable_numbers_raise_configuration_error(field, value):
    with pytest.raises(ConfigurationError):
        StyleParameters(**{field: value})


def test_from_options_none_qubit_count_is_configuration_error():
    with pytest.raises(ConfigurationError):
        StyleParameters.from_options({"qubitCount": None})


def test_numeric_strings_are_accepted():
    params = StyleParameters.from_options({"qubitCount": "4", "entropy": "0.25"})
    assert params.qubit_count == 4
    assert params.entropy == 0.25


def test_unexpected_step_error_returns_error_result(small_params, monkeypatch):
    def broken(*args, **kwargs):
        raise ValueError("Probability distribution has zero total mass.")

    monkeypatch.setattr("quantum_canvas.pipeline.measure", broken)
    result = generate_artwork(small_params())
    assert not result.ok
    assert result.failed_state is GenerationState.SAMPLING
    assert result.states[-1] is GenerationState.ERROR
    assert "zero total mass" in result.error


def test_unsampleable_state_is_a_simulation_error(small_params):
    import numpy as np

    from quantum_canvas.errors import SimulationError
    from quantum_canvas.measurement import measure
    from quantum_canvas.simulator import AmplitudeVector

    dead = AmplitudeVector(2, np.zeros(4, dtype=np.complex128))
    with pytest.raises(SimulationError):
        measure(dead, small_params())
    with pytest.raises(SimulationError):
        measure(dead, small_params(sampling_mode="distribution"))


def test_slot_forgets_cancellations_of_superseded_tickets():
    slot = ArtworkSlot()
    for _ in range(50):
        slot.cancel(slot.begin())
    slot.begin()
    assert slot._cancelled == set()


def test_slot_ignores_cancelling_a_stale_ticket(small_params):
    slot = ArtworkSlot()
    stale = slot.begin()
    current = slot.begin()
    slot.cancel(stale)
    assert slot._cancelled == set()
    assert slot.publish(current, generate_artwork(small_params()).artwork)
