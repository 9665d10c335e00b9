"""
PyQt5 front end.

Each click on *Generate* starts an :class:`ArtWorker` in its own
``QtCore.QThread`` with a fresh ticket from the window's
:class:`~quantum_canvas.pipeline.ArtworkSlot`. A request that finishes after a
newer one was started is dropped, so only the latest completed artwork is ever
shown. Failed requests leave the previous artwork on screen.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from PyQt5 import QtCore, QtGui, QtWidgets  # type: ignore

from .config import (
    PALETTES,
    STYLE_DESCRIPTIONS,
    CircuitMode,
    QuantumMode,
    SamplingMode,
    Style,
    StyleParameters,
    Symmetry,
)
from .errors import ConfigurationError
from .pipeline import ArtworkSlot, RenderedArtwork, generate_artwork

logger = logging.getLogger(__name__)

PREVIEW_SIZE = 480


class ArtWorker(QtCore.QObject):
    """Runs one generation request off the GUI thread."""

    finished = QtCore.pyqtSignal(int, object)
    error = QtCore.pyqtSignal(int, str)
    progress = QtCore.pyqtSignal(str)

    def __init__(self, ticket: int, params: StyleParameters):
        super().__init__()
        self.ticket = ticket
        self.params = params

    @QtCore.pyqtSlot()
    def run(self) -> None:
        try:
            result = generate_artwork(self.params, on_state=lambda s: self.progress.emit(s.value))
        except Exception as exc:
            logger.exception("Error in ArtWorker")
            self.error.emit(self.ticket, str(exc))
            return
        if result.ok:
            self.finished.emit(self.ticket, result.artwork)
        else:
            self.error.emit(self.ticket, f"Failed while {result.failed_state.value}: {result.error}")


class MainWindow(QtWidgets.QWidget):
    """Main application window."""

    def __init__(self, params: Optional[StyleParameters] = None):
        super().__init__()
        self.params = params or StyleParameters()
        self.slot = ArtworkSlot()
        self._running: List[Tuple[QtCore.QThread, ArtWorker]] = []

        self.setWindowTitle("Quantum Canvas")

        self.label = QtWidgets.QLabel("Click the button to generate quantum art")
        self.label.setAlignment(QtCore.Qt.AlignCenter)

        self.image_label = QtWidgets.QLabel()
        self.image_label.setAlignment(QtCore.Qt.AlignCenter)
        self.image_label.setFixedSize(PREVIEW_SIZE, PREVIEW_SIZE)
        self.image_label.setStyleSheet("border: 2px solid gray; background-color: #1a1a2e;")

        self.style_combo = QtWidgets.QComboBox()
        for style in Style:
            self.style_combo.addItem(f"{style.value} - {STYLE_DESCRIPTIONS[style]}", style.value)
        self.style_combo.setCurrentIndex(list(Style).index(self.params.style))

        self.palette_combo = QtWidgets.QComboBox()
        self.palette_combo.addItems(list(PALETTES))
        self.palette_combo.setCurrentText(self.params.palette)

        self.symmetry_combo = QtWidgets.QComboBox()
        self.symmetry_combo.addItems([s.value for s in Symmetry])
        self.symmetry_combo.setCurrentText(self.params.symmetry.value)

        self.circuit_combo = QtWidgets.QComboBox()
        self.circuit_combo.addItems([m.value for m in CircuitMode])
        self.circuit_combo.setCurrentText(self.params.circuit_mode.value)
        self.sampling_combo = QtWidgets.QComboBox()
        self.sampling_combo.addItems([m.value for m in SamplingMode])
        self.sampling_combo.setCurrentText(self.params.sampling_mode.value)
        self.mode_combo = QtWidgets.QComboBox()
        self.mode_combo.addItems([m.value for m in QuantumMode])
        self.mode_combo.setCurrentText(self.params.quantum_mode.value)

        self.qubit_spin = self._spin(2, 8, self.params.qubit_count)
        self.comp_spin = self._spin(1, 10, self.params.complexity)
        self.harm_spin = self._spin(1, 8, self.params.harmonics)
        self.depth_spin = self._spin(1, 6, self.params.layer_depth)
        self.entropy_slider = QtWidgets.QSlider(QtCore.Qt.Horizontal)
        self.entropy_slider.setRange(0, 100)
        self.entropy_slider.setValue(int(self.params.entropy * 100))

        self.seed_edit = QtWidgets.QLineEdit()
        self.seed_edit.setPlaceholderText("Seed (blank = live mode)")
        if self.params.seed is not None:
            self.seed_edit.setText(str(self.params.seed))

        self.outcomes_label = QtWidgets.QLabel("")
        self.outcomes_label.setFont(QtGui.QFontDatabase.systemFont(QtGui.QFontDatabase.FixedFont))

        self.btn_generate = QtWidgets.QPushButton("Generate Quantum Art")
        self.btn_generate.clicked.connect(self._start_generation)
        self.btn_save = QtWidgets.QPushButton("Download Art")
        self.btn_save.setEnabled(False)
        self.btn_save.clicked.connect(self._save)

        form = QtWidgets.QFormLayout()
        form.addRow("Style", self.style_combo)
        form.addRow("Palette", self.palette_combo)
        form.addRow("Symmetry", self.symmetry_combo)
        form.addRow("Circuit", self.circuit_combo)
        form.addRow("Measurement", self.sampling_combo)
        form.addRow("Quantum mode", self.mode_combo)
        form.addRow("Qubits", self.qubit_spin)
        form.addRow("Complexity", self.comp_spin)
        form.addRow("Entropy", self.entropy_slider)
        form.addRow("Harmonics", self.harm_spin)
        form.addRow("Layer depth", self.depth_spin)
        form.addRow("Seed", self.seed_edit)

        layout = QtWidgets.QVBoxLayout()
        layout.addWidget(self.label)
        layout.addWidget(self.image_label)
        layout.addLayout(form)
        layout.addWidget(self.btn_generate)
        layout.addWidget(self.btn_save)
        layout.addWidget(self.outcomes_label)
        self.setLayout(layout)

    @staticmethod
    def _spin(low: int, high: int, value: int) -> QtWidgets.QSpinBox:
        spin = QtWidgets.QSpinBox()
        spin.setRange(low, high)
        spin.setValue(value)
        return spin

    def current_params(self) -> StyleParameters:
        seed_text = self.seed_edit.text().strip()
        return StyleParameters.from_options({
            "style": self.style_combo.currentData(),
            "palette": self.palette_combo.currentText(),
            "symmetry": self.symmetry_combo.currentText(),
            "circuitMode": self.circuit_combo.currentText(),
            "samplingMode": self.sampling_combo.currentText(),
            "quantumMode": self.mode_combo.currentText(),
            "qubitCount": self.qubit_spin.value(),
            "complexity": self.comp_spin.value(),
            "entropy": self.entropy_slider.value() / 100,
            "harmonics": self.harm_spin.value(),
            "layerDepth": self.depth_spin.value(),
            "seed": int(seed_text) if seed_text.isdigit() else None,
            "shots": self.params.shots,
            "size": self.params.size,
            "signature": self.params.signature,
            "reducedGateSet": self.params.reduced_gate_set,
        })

    # --------------------------- Generation logic ---------------------------

    def _start_generation(self) -> None:
        try:
            params = self.current_params()
        except ConfigurationError as exc:
            self._show_error(str(exc))
            return

        ticket = self.slot.begin()
        self.label.setText("Generating quantum circuit…")

        thread = QtCore.QThread()
        worker = ArtWorker(ticket, params)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        worker.progress.connect(lambda state: self.label.setText(f"{state.replace('_', ' ')}…"))
        worker.finished.connect(self._on_art_ready)
        worker.error.connect(self._on_error)
        worker.finished.connect(thread.quit)
        worker.error.connect(thread.quit)
        worker.finished.connect(worker.deleteLater)
        worker.error.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)
        thread.finished.connect(lambda: self._forget(thread))
        self._running.append((thread, worker))
        thread.start()

    def _forget(self, thread: QtCore.QThread) -> None:
        self._running = [(t, w) for t, w in self._running if t is not thread]

    @QtCore.pyqtSlot(int, object)
    def _on_art_ready(self, ticket: int, artwork: RenderedArtwork) -> None:
        if not self.slot.publish(ticket, artwork):
            return
        pixmap = QtGui.QPixmap()
        pixmap.loadFromData(artwork.to_png(), "PNG")
        self.image_label.setPixmap(pixmap.scaled(
            PREVIEW_SIZE, PREVIEW_SIZE,
            QtCore.Qt.KeepAspectRatio,
            QtCore.Qt.SmoothTransformation,
        ))
        lines = [f"Job ID: {artwork.job_id}", f"Created: {artwork.timestamp}", "Top Measurements:"]
        lines += [f"  {bits}  {weight:g}" for bits, weight in artwork.top_outcomes]
        self.outcomes_label.setText("\n".join(lines))
        self.label.setText("Quantum art generated successfully!")
        self.btn_save.setEnabled(True)

    @QtCore.pyqtSlot(int, str)
    def _on_error(self, ticket: int, message: str) -> None:
        self.slot.cancel(ticket)
        self._show_error(message)

    def _save(self) -> None:
        artwork = self.slot.artwork
        if artwork is None:
            return
        save_path, _ = QtWidgets.QFileDialog.getSaveFileName(
            self, "Save art as…", f"quantum-art-{artwork.job_id}.png", "PNG Images (*.png)",
        )
        if save_path:
            try:
                Path(save_path).write_bytes(artwork.to_png())
                logger.info("Image saved to %s", save_path)
            except OSError as exc:
                self._show_error(f"Failed to save image: {exc}")

    def _show_error(self, message: str) -> None:
        QtWidgets.QMessageBox.critical(self, "Error", message)
        self.label.setText("An error occurred, check logs.")


def run_gui(params: Optional[StyleParameters] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(sys.argv)
    window = MainWindow(params)
    window.show()
    return app.exec_()
