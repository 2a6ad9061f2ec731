"""Preview controller for animating the vehicle marker along a projected path."""

from __future__ import annotations

import logging
from typing import Optional

import pyqtgraph as pg
from PySide6.QtCore import QObject, Qt, QTimer, QUrl, Signal
from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer

from ...core.playback import display_index, playback_progress
from ...core.projector import ProjectedTrajectory

logger = logging.getLogger(__name__)


class PreviewController(QObject):
    """Draw the projected trajectory and move the marker as playback advances.

    Progress ticks come either from a timer-driven dry run or from a
    ``QMediaPlayer`` playing the simulated audio. The plot is Y-inverted so
    canvas pixel coordinates display the right way up.
    """

    finished = Signal()
    progress_changed = Signal(float, int, float)  # (progress, sample_index, distance_m)

    def __init__(self, plot_item: pg.PlotItem, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._plot_item = plot_item
        self._plot_item.invertY(True)
        self._plot_item.setAspectLocked(True)
        self._plot_item.hideAxis("left")
        self._plot_item.hideAxis("bottom")

        self._path_item = pg.PlotDataItem(pen=pg.mkPen((33, 150, 243), width=3))
        self._distance_item = pg.PlotDataItem(pen=pg.mkPen((255, 152, 0), width=1, style=Qt.PenStyle.DashLine))
        self._endpoints_item = pg.ScatterPlotItem(size=10)
        self._observer_item = pg.ScatterPlotItem(size=14, brush=pg.mkBrush(244, 67, 54), symbol="o")
        self._marker_item = pg.ScatterPlotItem(size=16, brush=pg.mkBrush(255, 235, 59), symbol="s")
        for item in (
            self._path_item,
            self._distance_item,
            self._endpoints_item,
            self._observer_item,
            self._marker_item,
        ):
            self._plot_item.addItem(item)

        self._timer = QTimer(self)
        self._timer.timeout.connect(self._advance_dry_run)
        self._frame_interval_ms = 40
        self._dry_run_elapsed_s = 0.0
        self._duration_s = 0.0

        self._player: Optional[QMediaPlayer] = None
        self._audio_output: Optional[QAudioOutput] = None

        self._projection: Optional[ProjectedTrajectory] = None
        self._progress = 0.0
        self._animating = False

    # ------------------------------------------------------------------
    # Scene
    # ------------------------------------------------------------------
    def set_projection(self, projection: ProjectedTrajectory) -> None:
        """Replace the drawn trajectory; keeps the current playback progress."""
        self._projection = projection
        points = projection.canvas_points
        if len(projection):
            self._path_item.setData(points[:, 0], points[:, 1])
            self._endpoints_item.setData(
                spots=[
                    {"pos": tuple(points[0]), "brush": pg.mkBrush(76, 175, 80)},
                    {"pos": tuple(points[-1]), "brush": pg.mkBrush(156, 39, 176)},
                ]
            )
        else:
            self._path_item.setData([], [])
            self._endpoints_item.setData([])
        self._observer_item.setData([projection.observer.x], [projection.observer.y])
        self._refresh_marker()

    def set_progress(self, progress: float) -> None:
        """Move the marker to the sample for ``progress`` in [0, 1]."""
        self._progress = max(0.0, min(1.0, float(progress)))
        self._refresh_marker()

    def _refresh_marker(self) -> None:
        projection = self._projection
        if projection is None or len(projection) == 0:
            self._marker_item.setData([])
            self._distance_item.setData([], [])
            return
        index = display_index(projection, self._progress, self._animating)
        marker = projection.point(index)
        self._marker_item.setData([marker.x], [marker.y])
        self._distance_item.setData(
            [projection.observer.x, marker.x],
            [projection.observer.y, marker.y],
        )
        self.progress_changed.emit(self._progress, index, projection.distance_m(index))

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def is_active(self) -> bool:
        """Return whether a preview animation is currently playing."""
        return self._animating

    def start_dry_run(self, duration_s: float) -> None:
        """Animate the marker over ``duration_s`` without audio."""
        self.stop()
        self._duration_s = max(0.0, float(duration_s))
        if self._duration_s <= 0:
            logger.info("Dry run skipped: duration is zero")
            return
        self._dry_run_elapsed_s = 0.0
        self._animating = True
        self._timer.start(self._frame_interval_ms)
        logger.debug("Dry run started (%.2fs)", self._duration_s)

    def _advance_dry_run(self) -> None:
        self._dry_run_elapsed_s += self._frame_interval_ms / 1000.0
        self.set_progress(playback_progress(self._dry_run_elapsed_s, self._duration_s))
        if self._dry_run_elapsed_s >= self._duration_s:
            self._finish()

    def load_audio(self, url: str) -> None:
        """Attach the simulated audio; its transport position drives the marker."""
        if self._player is None:
            self._player = QMediaPlayer(self)
            self._audio_output = QAudioOutput(self)
            self._player.setAudioOutput(self._audio_output)
            self._player.positionChanged.connect(self._on_audio_position)
            self._player.mediaStatusChanged.connect(self._on_media_status)
        self._player.setSource(QUrl(url))
        logger.info("Loaded audio %s", url)

    def play_audio(self) -> None:
        if self._player is None:
            return
        self._timer.stop()
        self._animating = True
        self._player.play()

    def pause(self) -> None:
        self._timer.stop()
        if self._player is not None:
            self._player.pause()

    def stop(self) -> None:
        """Stop any playback and return the marker to the closest approach."""
        self._timer.stop()
        if self._player is not None:
            self._player.stop()
        if self._animating:
            self._finish()

    def _on_audio_position(self, position_ms: int) -> None:
        if self._player is None:
            return
        duration_ms = self._player.duration()
        self.set_progress(playback_progress(position_ms / 1000.0, duration_ms / 1000.0))

    def _on_media_status(self, status: QMediaPlayer.MediaStatus) -> None:
        if status == QMediaPlayer.MediaStatus.EndOfMedia:
            self._finish()

    def _finish(self) -> None:
        self._timer.stop()
        self._animating = False
        self._progress = 0.0
        self._refresh_marker()
        self.finished.emit()
