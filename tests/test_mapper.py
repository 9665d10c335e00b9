import math

import numpy as np
import pytest

from quantum_canvas.canvas import DrawingContext, mirror_vertical_axis, rotation_about
from quantum_canvas.circuit import build_circuit
from quantum_canvas.config import SamplingMode, Style, Symmetry
from quantum_canvas.mapper import build_scene, plan_artwork, quantum_seed, render_artwork
from quantum_canvas.measurement import MeasurementResult, measure
from quantum_canvas.simulator import simulate
from quantum_canvas.styles import minimal_shape


def sample(params):
    circuit = build_circuit(params)
    return measure(simulate(circuit), params)


def fixed_measurement():
    return MeasurementResult(3, SamplingMode.SHOTS, {"000": 400, "011": 300, "101": 200, "110": 124}, shots=1024)


def test_quantum_seed_sums_outcome_values():
    assert quantum_seed(fixed_measurement()) == 0 + 3 + 5 + 6


def test_scene_ranks_outcomes(small_params):
    scene = build_scene(fixed_measurement(), small_params())
    assert [o.bits for o in scene.outcomes] == ["000", "011", "101", "110"]
    assert scene.outcomes[0].probability == pytest.approx(400 / 1024)
    assert scene.rotation_offset == pytest.approx(math.radians(14))
    assert scene.scale_variation == pytest.approx(0.84)


@pytest.mark.parametrize("style", list(Style))
def test_seeded_plan_is_reproducible(small_params, style):
    params = small_params(style=style)
    measurement = sample(params)
    assert plan_artwork(measurement, params).commands == plan_artwork(measurement, params).commands


def test_live_mode_mapper_is_still_deterministic(small_params):
    params = small_params(style=Style.POLLOCK, seed=None)
    measurement = sample(params)
    assert plan_artwork(measurement, params).commands == plan_artwork(measurement, params).commands


@pytest.mark.parametrize("mode,copies", [
    (Symmetry.NONE, 1),
    (Symmetry.BILATERAL, 2),
    (Symmetry.RADIAL, 4),
    (Symmetry.KALEIDOSCOPE, 8),
])
def test_symmetry_replays_layer_per_copy(small_params, mode, copies):
    measurement = fixed_measurement()
    base = plan_artwork(measurement, small_params(style=Style.STRUCTURED))
    plan = plan_artwork(measurement, small_params(style=Style.STRUCTURED, symmetry=mode))
    assert plan.copies == copies
    assert len(plan.commands) == copies * len(base.commands)
    assert plan.commands[: len(base.commands)] == base.commands


def test_radial_copies_are_quarter_turns_of_base(small_params):
    measurement = fixed_measurement()
    params = small_params(style=Style.CHAOTIC)
    base = plan_artwork(measurement, params).commands
    radial = plan_artwork(measurement, params.with_changes(symmetry=Symmetry.RADIAL)).commands
    c = params.size / 2
    block = len(base)
    for k in range(4):
        assert_block_is_image_of(base, radial[k * block:(k + 1) * block], rotation_about(c, c, k * math.pi / 2))


def assert_block_is_image_of(base, block, frame):
    assert len(block) == len(base)
    for ref, got in zip(base, block):
        pts = np.asarray(ref.points)
        expected = pts @ frame[:2, :2].T + frame[:2, 2]
        assert got.kind == ref.kind
        assert np.allclose(got.points, expected, atol=1e-4)
        assert got.radius == pytest.approx(ref.radius, abs=1e-5)
        assert got.fill == ref.fill


def test_kaleidoscope_copies_alternate_rotation_and_mirror(small_params):
    measurement = fixed_measurement()
    params = small_params(style=Style.KANDINSKY)
    base = plan_artwork(measurement, params).commands
    kaleido = plan_artwork(measurement, params.with_changes(symmetry=Symmetry.KALEIDOSCOPE)).commands
    c = params.size / 2
    block = len(base)
    assert len(kaleido) == 8 * block
    for k in range(8):
        frame = rotation_about(c, c, k * math.pi / 4)
        if k % 2:
            frame = frame @ mirror_vertical_axis(c)
        assert_block_is_image_of(base, kaleido[k * block:(k + 1) * block], frame)


def test_bilateral_second_copy_mirrors_whole_layer(small_params):
    measurement = fixed_measurement()
    params = small_params(style=Style.POLLOCK)
    base = plan_artwork(measurement, params).commands
    mirrored = plan_artwork(measurement, params.with_changes(symmetry=Symmetry.BILATERAL)).commands
    block = len(base)
    assert mirrored[:block] == base
    assert_block_is_image_of(base, mirrored[block:], mirror_vertical_axis(params.size / 2))


def test_mirror_frame_reflects_x_about_centre():
    ctx = DrawingContext(600)
    ctx.transformed(mirror_vertical_axis(300)).circle(100, 50, 10)
    assert ctx.commands[0].points == ((500.0, 50.0),)
    assert ctx.commands[0].radius == 10.0


@pytest.mark.parametrize("value,shape", [(0, "circle"), (1, "square"), (2, "triangle"), (6, "circle"), (7, "square")])
def test_minimal_shape_by_value(value, shape):
    assert minimal_shape(value) == shape


@pytest.mark.parametrize("style", list(Style))
def test_every_style_renders(small_params, style):
    params = small_params(style=style, palette="cosmic", signature="test")
    image, plan = render_artwork(sample(params), params, signature=params.signature)
    assert image.size == (600, 600)
    assert image.mode == "RGB"
    assert plan.commands


def test_minimal_end_to_end(small_params):
    params = small_params(style=Style.MINIMAL, palette="vibrant", qubit_count=3, shots=1024)
    circuit = build_circuit(params)
    assert circuit.n_qubits == 3
    assert len(circuit) == 9
    assert {g.name for g in circuit} <= {"X", "H", "CX"}

    measurement = measure(simulate(circuit), params)
    assert measurement.total == 1024

    plan = plan_artwork(measurement, params)
    top = plan.scene.outcomes[0]
    glow, shape = plan.commands[0], plan.commands[1]
    assert glow.kind == "glow"
    expected = minimal_shape(top.value)
    if expected == "circle":
        assert shape.kind == "circle"
    else:
        assert shape.kind == "polygon"
        assert len(shape.points) == (4 if expected == "square" else 3)
    assert plan.copies == 1


def test_render_artwork_return_annotation():
    from typing import Tuple, get_type_hints

    from PIL import Image

    from quantum_canvas.mapper import ArtPlan

    assert get_type_hints(render_artwork)["return"] == Tuple[Image.Image, ArtPlan]
