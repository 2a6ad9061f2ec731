"""Scenario file I/O controller."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from PySide6.QtWidgets import QFileDialog, QMessageBox, QWidget

from ...config import load_path_scenario, save_path_scenario
from ...exporters import export_simulation_request
from ...settings import output_root
from ..models import EditorState


class ScenarioController:
    """Manages loading and saving path scenarios and request records."""

    def __init__(self, parent: QWidget):
        self.parent = parent

    def open_file_dialog(self) -> Optional[Path]:
        """Show file dialog for opening a scenario, return path or None."""
        file_path, _ = QFileDialog.getOpenFileName(
            self.parent,
            "Open Path Scenario",
            str(output_root()),
            "YAML Files (*.yaml *.yml)",
        )
        return Path(file_path) if file_path else None

    def load_from_file(self, path: Path) -> Optional[EditorState]:
        """Load a scenario file and convert it to an EditorState."""
        try:
            scenario = load_path_scenario(path)
        except Exception as exc:  # noqa: BLE001
            QMessageBox.critical(
                self.parent,
                "Open",
                f"Failed to load scenario: {exc}",
            )
            return None
        return EditorState.from_scenario(scenario)

    def save_to_file(self, state: EditorState, path: Optional[Path] = None) -> Optional[Path]:
        """Save the editor state as a scenario, return path or None on failure."""
        if path is None:
            file_path, _ = QFileDialog.getSaveFileName(
                self.parent,
                "Save Path Scenario",
                str(output_root()),
                "YAML Files (*.yaml *.yml)",
            )
            if not file_path:
                return None
            path = Path(file_path)

        try:
            return save_path_scenario(state.to_scenario(), path)
        except Exception as exc:  # noqa: BLE001
            QMessageBox.critical(
                self.parent,
                "Save",
                f"Failed to save scenario: {exc}",
            )
            return None

    def export_request(self, state: EditorState) -> Optional[Path]:
        """Write the simulation request record as JSON, return path or None."""
        file_path, _ = QFileDialog.getSaveFileName(
            self.parent,
            "Export Simulation Request",
            str(output_root() / "simulation_request.json"),
            "JSON Files (*.json)",
        )
        if not file_path:
            return None
        path = Path(file_path)
        try:
            export_simulation_request(state.to_request(), path)
        except OSError as exc:
            QMessageBox.critical(self.parent, "Export", f"Failed to export request: {exc}")
            return None
        return path
