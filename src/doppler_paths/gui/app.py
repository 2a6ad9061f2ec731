"""PySide6/PyQtGraph GUI for editing vehicle pass-by paths."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pyqtgraph as pg
from PySide6.QtCore import QPointF, Qt, QTimer, QUrl, Signal
from PySide6.QtGui import QAction, QColor, QKeySequence, QPainter, QPalette, QPen, QPolygonF
from PySide6.QtWidgets import (
    QApplication,
    QComboBox,
    QFileDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSlider,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from ..client import SimulationClient, SimulationServiceError
from ..config import PARABOLA_A_RANGE, ParabolaPath
from ..core.trajectory import get_path_metadata, sample_path
from ..core.transform import ZOOM_RANGE
from ..exporters import export_trajectory_outputs
from ..settings import get_settings
from .canvas import HANDLE_COLORS, HandleManager, TrajectoryRenderer
from .canvas.preview_controller import PreviewController
from .controllers import ScenarioController
from .models import EditorState

logger = logging.getLogger(__name__)


# Canvas size the preview projection is fitted into.
PREVIEW_CANVAS: Tuple[float, float] = (640.0, 400.0)
ZOOM_SLIDER_STEPS = 10
CURVATURE_SLIDER_STEPS = 1000
HANDLE_RADIUS_PX = 9

# (patch key, label) per family; ``pN.x`` / ``pN.y`` address one Bézier coordinate.
FIELD_SPECS: Dict[str, List[Tuple[str, str]]] = {
    "straight": [("h", "Distance h (m)"), ("angle_deg", "Angle (°)")],
    "parabola": [("a", "Curvature a"), ("h", "Vertex h (m)")],
    "bezier": [
        (f"p{idx}.{axis}", f"P{idx + 1} {axis} (m)")
        for idx in range(4)
        for axis in ("x", "y")
    ],
}
COMMON_FIELDS: List[Tuple[str, str]] = [("speed", "Speed (m/s)"), ("duration", "Audio duration (s)")]


class DragCanvas(QWidget):
    """Editor canvas: observer at the center, draggable path handles around it."""

    params_changed = Signal()

    def __init__(self, state: EditorState, parent: QWidget | None = None):
        super().__init__(parent)
        self.state = state
        self.handles = HandleManager()
        self.setMinimumSize(420, 300)
        self.setMouseTracking(False)

    def set_state(self, state: EditorState) -> None:
        self.handles.release()
        self.state = state
        self.state.canvas.resize(self.width(), self.height())
        self.update()

    def resizeEvent(self, event) -> None:  # noqa: N802
        self.state.canvas.resize(self.width(), self.height())
        super().resizeEvent(event)

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------
    def paintEvent(self, event) -> None:  # noqa: N802
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), QColor(30, 30, 30))

        transform = self.state.canvas.transform()
        params = self.state.params
        center = transform.center

        painter.setPen(QPen(QColor(70, 70, 70), 1))
        painter.drawLine(QPointF(0, center.y), QPointF(self.width(), center.y))
        painter.drawLine(QPointF(center.x, 0), QPointF(center.x, self.height()))

        painter.setPen(QPen(QColor(150, 150, 150), 1, Qt.PenStyle.DashLine))
        for start, end in TrajectoryRenderer.guide_lines(params, transform):
            painter.drawLine(QPointF(*start), QPointF(*end))

        curve = TrajectoryRenderer.editor_curve(params, transform)
        painter.setPen(QPen(QColor(33, 150, 243), 3))
        painter.drawPolyline(QPolygonF([QPointF(float(x), float(y)) for x, y in curve]))

        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QColor(244, 67, 54))
        painter.drawEllipse(QPointF(*center), 8, 8)

        labels = get_path_metadata(params.family).handle_labels
        active = self.handles.active_handle
        for handle, position in self.handles.canvas_positions(params, transform).items():
            color = QColor(*HANDLE_COLORS[handle])
            radius = HANDLE_RADIUS_PX + (3 if handle == active else 0)
            painter.setPen(QPen(QColor(255, 255, 255), 2))
            painter.setBrush(color)
            painter.drawEllipse(QPointF(*position), radius, radius)
            painter.setPen(QColor(220, 220, 220))
            painter.drawText(QPointF(position.x + radius + 4, position.y - radius), labels.get(handle.value, handle.value))
        painter.end()

    # ------------------------------------------------------------------
    # Pointer input
    # ------------------------------------------------------------------
    def mousePressEvent(self, event) -> None:  # noqa: N802
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        pos = event.position()
        handle = self.handles.press(self.state.params, self.state.canvas.transform(), (pos.x(), pos.y()))
        if handle is not None:
            logger.debug("Drag granted on %s", handle.value)
            self.update()

    def mouseMoveEvent(self, event) -> None:  # noqa: N802
        if not self.handles.is_any_handle_active():
            super().mouseMoveEvent(event)
            return
        pos = event.position()
        patch = self.handles.move((pos.x(), pos.y()))
        if patch:
            self.state.apply_patch(patch)
            self.params_changed.emit()
            self.update()

    def mouseReleaseEvent(self, event) -> None:  # noqa: N802
        if self.handles.is_any_handle_active():
            self.handles.release()
            self.update()
        super().mouseReleaseEvent(event)


class PathEditor(QMainWindow):
    def __init__(self, initial_config: Optional[Path] = None):
        super().__init__()
        self.setWindowTitle("Doppler Paths - Path Editor")
        self.resize(1300, 760)

        settings = get_settings()
        self.state = EditorState(vehicle_type=settings.vehicle_type)
        self.scenario_controller = ScenarioController(self)
        self._scenario_path: Optional[Path] = None
        self._field_edits: Dict[str, QLineEdit] = {}
        self._updating_ui = False

        self._client: Optional[SimulationClient] = None
        self._job_id: Optional[str] = None
        self._poll_timer = QTimer(self)
        self._poll_timer.timeout.connect(self._poll_job)

        self._setup_ui()
        self._refresh_all()

        if initial_config:
            self.load_config(initial_config)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------
    def _setup_ui(self) -> None:
        self._create_file_actions()

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(self._build_controls_panel())

        self.canvas = DragCanvas(self.state)
        self.canvas.params_changed.connect(self._on_canvas_params_changed)
        splitter.addWidget(self.canvas)

        splitter.addWidget(self._build_preview_panel())
        splitter.setStretchFactor(1, 3)
        splitter.setStretchFactor(2, 2)
        self.setCentralWidget(splitter)
        self.statusBar().showMessage("Ready")

    def _create_file_actions(self) -> None:
        file_menu = self.menuBar().addMenu("&File")

        open_action = QAction("Open Scenario…", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self._open_config)
        file_menu.addAction(open_action)

        save_action = QAction("Save Scenario", self)
        save_action.setShortcut(QKeySequence.StandardKey.Save)
        save_action.triggered.connect(self._save_config)
        file_menu.addAction(save_action)

        save_as_action = QAction("Save Scenario As…", self)
        save_as_action.setShortcut(QKeySequence.StandardKey.SaveAs)
        save_as_action.triggered.connect(lambda: self._save_config(save_as=True))
        file_menu.addAction(save_as_action)

        file_menu.addSeparator()

        export_request_action = QAction("Export Simulation Request…", self)
        export_request_action.triggered.connect(self._export_request)
        file_menu.addAction(export_request_action)

        export_samples_action = QAction("Export Trajectory Samples", self)
        export_samples_action.triggered.connect(self._export_samples)
        file_menu.addAction(export_samples_action)

    def _build_controls_panel(self) -> QWidget:
        panel = QWidget()
        layout = QVBoxLayout(panel)

        path_group = QGroupBox("Path")
        path_form = QFormLayout(path_group)
        self.family_combo = QComboBox()
        for family in ("straight", "parabola", "bezier"):
            self.family_combo.addItem(get_path_metadata(family).label, family)
        self.family_combo.currentIndexChanged.connect(self._on_family_changed)
        path_form.addRow("Family", self.family_combo)
        self.family_description = QLabel()
        self.family_description.setWordWrap(True)
        path_form.addRow(self.family_description)
        self.vehicle_edit = QLineEdit()
        self.vehicle_edit.editingFinished.connect(self._on_vehicle_changed)
        path_form.addRow("Vehicle", self.vehicle_edit)
        layout.addWidget(path_group)

        self.params_group = QGroupBox("Parameters")
        self.params_form = QFormLayout(self.params_group)
        layout.addWidget(self.params_group)

        view_group = QGroupBox("View")
        view_form = QFormLayout(view_group)
        self.zoom_slider = QSlider(Qt.Orientation.Horizontal)
        self.zoom_slider.setRange(int(ZOOM_RANGE[0] * ZOOM_SLIDER_STEPS), int(ZOOM_RANGE[1] * ZOOM_SLIDER_STEPS))
        self.zoom_slider.valueChanged.connect(self._on_zoom_changed)
        self.zoom_label = QLabel()
        view_form.addRow("Zoom", self.zoom_slider)
        view_form.addRow("", self.zoom_label)
        self.curvature_slider = QSlider(Qt.Orientation.Horizontal)
        self.curvature_slider.setRange(
            int(PARABOLA_A_RANGE[0] * CURVATURE_SLIDER_STEPS),
            int(PARABOLA_A_RANGE[1] * CURVATURE_SLIDER_STEPS),
        )
        self.curvature_slider.valueChanged.connect(self._on_curvature_changed)
        self.curvature_label = QLabel("Curvature")
        view_form.addRow(self.curvature_label, self.curvature_slider)
        layout.addWidget(view_group)

        sim_group = QGroupBox("Simulation")
        sim_layout = QVBoxLayout(sim_group)
        self.submit_button = QPushButton("Simulate")
        self.submit_button.clicked.connect(self._submit_simulation)
        sim_layout.addWidget(self.submit_button)
        self.job_label = QLabel("No job")
        sim_layout.addWidget(self.job_label)
        layout.addWidget(sim_group)

        layout.addStretch(1)
        return panel

    def _build_preview_panel(self) -> QWidget:
        panel = QWidget()
        layout = QVBoxLayout(panel)

        self.preview_widget = pg.PlotWidget()
        self.preview_widget.setBackground((20, 20, 20))
        self.preview_controller = PreviewController(self.preview_widget.getPlotItem(), self)
        self.preview_controller.progress_changed.connect(self._on_preview_progress)
        self.preview_controller.finished.connect(self._on_preview_finished)
        layout.addWidget(self.preview_widget, 1)

        self.distance_label = QLabel()
        layout.addWidget(self.distance_label)

        buttons = QHBoxLayout()
        self.dry_run_button = QPushButton("Dry Run")
        self.dry_run_button.clicked.connect(self._start_dry_run)
        buttons.addWidget(self.dry_run_button)
        self.load_audio_button = QPushButton("Load Audio…")
        self.load_audio_button.clicked.connect(self._load_local_audio)
        buttons.addWidget(self.load_audio_button)
        self.play_button = QPushButton("Play")
        self.play_button.clicked.connect(self.preview_controller.play_audio)
        buttons.addWidget(self.play_button)
        self.stop_button = QPushButton("Stop")
        self.stop_button.clicked.connect(self.preview_controller.stop)
        buttons.addWidget(self.stop_button)
        layout.addLayout(buttons)
        return panel

    def _rebuild_param_fields(self) -> None:
        while self.params_form.rowCount():
            self.params_form.removeRow(0)
        self._field_edits.clear()
        for key, label in COMMON_FIELDS + FIELD_SPECS[self.state.family]:
            edit = QLineEdit()
            edit.editingFinished.connect(lambda key=key, edit=edit: self._on_field_edited(key, edit.text()))
            self.params_form.addRow(label, edit)
            self._field_edits[key] = edit

    # ------------------------------------------------------------------
    # State -> UI
    # ------------------------------------------------------------------
    def _refresh_all(self) -> None:
        self._updating_ui = True
        try:
            index = self.family_combo.findData(self.state.family)
            self.family_combo.setCurrentIndex(index)
            self.family_description.setText(get_path_metadata(self.state.family).description)
            self.vehicle_edit.setText(self.state.vehicle_type)
            self._rebuild_param_fields()
            self.zoom_slider.setValue(int(round(self.state.canvas.scale * ZOOM_SLIDER_STEPS)))
            self.zoom_label.setText(f"{self.state.canvas.scale:.1f} px/m")
        finally:
            self._updating_ui = False
        self._refresh_params()
        self.canvas.set_state(self.state)

    def _refresh_params(self) -> None:
        params = self.state.params
        self._updating_ui = True
        try:
            for key, edit in self._field_edits.items():
                edit.setText(f"{self._field_value(key):g}")
            is_parabola = isinstance(params, ParabolaPath)
            self.curvature_slider.setEnabled(is_parabola)
            self.curvature_label.setEnabled(is_parabola)
            if is_parabola:
                self.curvature_slider.setValue(int(round(params.a * CURVATURE_SLIDER_STEPS)))
        finally:
            self._updating_ui = False
        self._refresh_preview()

    def _field_value(self, key: str) -> float:
        params = self.state.params
        if "." in key:
            name, axis = key.split(".")
            return float(getattr(getattr(params, name), axis))
        return float(getattr(params, key))

    def _refresh_preview(self) -> None:
        projection = TrajectoryRenderer.preview(self.state.params, *PREVIEW_CANVAS)
        self.preview_controller.set_projection(projection)

    # ------------------------------------------------------------------
    # UI -> State
    # ------------------------------------------------------------------
    def _on_family_changed(self, index: int) -> None:
        if self._updating_ui:
            return
        family = self.family_combo.itemData(index)
        self.preview_controller.stop()
        self.state.set_family(family)
        self._refresh_all()
        self.statusBar().showMessage(f"{get_path_metadata(family).label} selected")

    def _on_vehicle_changed(self) -> None:
        text = self.vehicle_edit.text().strip()
        if text:
            self.state.vehicle_type = text

    def _on_field_edited(self, key: str, text: str) -> None:
        if self._updating_ui:
            return
        if "." in key:
            name, axis = key.split(".")
            point = getattr(self.state.params, name)
            value = (text, point.y) if axis == "x" else (point.x, text)
            self.state.apply_patch({name: value})
        else:
            self.state.set_field(key, text)
        self._refresh_params()
        self.canvas.update()

    def _on_zoom_changed(self, value: int) -> None:
        if self._updating_ui:
            return
        zoom = self.state.set_zoom(value / ZOOM_SLIDER_STEPS)
        self.zoom_label.setText(f"{zoom:.1f} px/m")
        self.canvas.update()

    def _on_curvature_changed(self, value: int) -> None:
        if self._updating_ui:
            return
        self.state.set_curvature(value / CURVATURE_SLIDER_STEPS)
        self._refresh_params()
        self.canvas.update()

    def _on_canvas_params_changed(self) -> None:
        self._refresh_params()

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------
    def _start_dry_run(self) -> None:
        self.preview_controller.start_dry_run(self.state.params.duration)

    def _load_local_audio(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "Load Simulated Audio",
            str(get_settings().output_root),
            "Audio Files (*.wav *.mp3 *.ogg)",
        )
        if not file_path:
            return
        self.preview_controller.load_audio(QUrl.fromLocalFile(file_path).toString())
        self.statusBar().showMessage(f"Loaded {Path(file_path).name}")

    def _on_preview_progress(self, progress: float, index: int, distance_m: float) -> None:
        self.distance_label.setText(f"Sample {index} · distance {distance_m:.1f} m · {progress * 100:.0f}%")

    def _on_preview_finished(self) -> None:
        self.statusBar().showMessage("Playback finished")

    # ------------------------------------------------------------------
    # Remote simulation
    # ------------------------------------------------------------------
    def _submit_simulation(self) -> None:
        if self._job_id is not None:
            return
        record = self.state.to_request()
        try:
            if self._client is None:
                self._client = SimulationClient()
            job_id = self._client.start_simulation(record)
        except (ValueError, SimulationServiceError) as exc:
            QMessageBox.critical(self, "Simulate", str(exc))
            return
        self._job_id = job_id
        self.submit_button.setEnabled(False)
        self.job_label.setText(f"Job {job_id}: submitted")
        self._poll_timer.start(int(get_settings().polling_interval_s * 1000))

    def _poll_job(self) -> None:
        if self._client is None or self._job_id is None:
            self._poll_timer.stop()
            return
        try:
            status = self._client.job_status(self._job_id)
        except SimulationServiceError as exc:
            self._end_job()
            QMessageBox.critical(self, "Simulate", str(exc))
            return

        self.job_label.setText(f"Job {status.job_id}: {status.status} ({status.progress:.0f}%)")
        if status.status == "completed":
            self._end_job()
            filename = status.result.get("filename")
            if filename:
                self.preview_controller.load_audio(self._client.download_url(filename))
                self.statusBar().showMessage(f"Simulation ready: {filename}")
        elif status.status == "failed":
            self._end_job()
            QMessageBox.critical(self, "Simulate", status.error or "Unknown error occurred")

    def _end_job(self) -> None:
        self._poll_timer.stop()
        self._job_id = None
        self.submit_button.setEnabled(True)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------
    def load_config(self, path: Path) -> None:
        state = self.scenario_controller.load_from_file(Path(path))
        if state is None:
            return
        self.preview_controller.stop()
        self.state = state
        self._scenario_path = Path(path)
        self._refresh_all()
        self.statusBar().showMessage(f"Loaded {Path(path).name}")

    def _open_config(self) -> None:
        path = self.scenario_controller.open_file_dialog()
        if path is not None:
            self.load_config(path)

    def _save_config(self, save_as: bool = False) -> None:
        target = None if save_as else self._scenario_path
        path = self.scenario_controller.save_to_file(self.state, target)
        if path is not None:
            self._scenario_path = path
            self.statusBar().showMessage(f"Saved {path.name}")

    def _export_request(self) -> None:
        path = self.scenario_controller.export_request(self.state)
        if path is not None:
            self.statusBar().showMessage(f"Request written to {path}")

    def _export_samples(self) -> None:
        params = self.state.params
        points = sample_path(params)
        projection = TrajectoryRenderer.preview(params, *PREVIEW_CANVAS)
        try:
            output_dir = export_trajectory_outputs(self.state.to_scenario(), points, projection)
        except OSError as exc:
            QMessageBox.critical(self, "Export", f"Failed to export samples: {exc}")
            return
        self.statusBar().showMessage(f"Samples exported to {output_dir}")

    def closeEvent(self, event) -> None:  # noqa: N802
        self._poll_timer.stop()
        self.preview_controller.stop()
        if self._client is not None:
            self._client.close()
        super().closeEvent(event)


def run(initial_config: Optional[Path] = None) -> None:
    app = QApplication.instance() or QApplication([])

    # Force dark mode regardless of system settings
    app.setStyle("Fusion")
    dark_palette = QPalette()
    dark_palette.setColor(QPalette.ColorRole.Window, QColor(53, 53, 53))
    dark_palette.setColor(QPalette.ColorRole.WindowText, QColor(255, 255, 255))
    dark_palette.setColor(QPalette.ColorRole.Base, QColor(35, 35, 35))
    dark_palette.setColor(QPalette.ColorRole.AlternateBase, QColor(53, 53, 53))
    dark_palette.setColor(QPalette.ColorRole.ToolTipBase, QColor(25, 25, 25))
    dark_palette.setColor(QPalette.ColorRole.ToolTipText, QColor(255, 255, 255))
    dark_palette.setColor(QPalette.ColorRole.Text, QColor(255, 255, 255))
    dark_palette.setColor(QPalette.ColorRole.Button, QColor(53, 53, 53))
    dark_palette.setColor(QPalette.ColorRole.ButtonText, QColor(255, 255, 255))
    dark_palette.setColor(QPalette.ColorRole.BrightText, QColor(255, 0, 0))
    dark_palette.setColor(QPalette.ColorRole.Link, QColor(42, 130, 218))
    dark_palette.setColor(QPalette.ColorRole.Highlight, QColor(42, 130, 218))
    dark_palette.setColor(QPalette.ColorRole.HighlightedText, QColor(35, 35, 35))
    app.setPalette(dark_palette)

    editor = PathEditor(initial_config)
    editor.show()
    app.exec()
