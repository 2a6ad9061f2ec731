"""
Core package for the Doppler path editor.

Exposes the path parameter models, the geometry engine (sampling, drag
mapping, projection, playback) and the simulation request helpers. The Qt
editor lives in ``doppler_paths.gui`` and is imported on demand.
"""

from .config import (
    AnyPath,
    BezierPath,
    ParabolaPath,
    PathScenario,
    StraightPath,
    apply_patch,
    build_simulation_request,
    default_parameters,
    load_path_scenario,
    parse_path_parameters,
    save_path_scenario,
    set_curvature,
)
from .core.transform import CanvasState, CanvasTransform, Point2D
from .core.trajectory import sample_path
from .core.drag import DragSession, HandleId, map_drag
from .core.projector import ProjectedTrajectory, fit_trajectory
from .core.playback import display_index, playback_progress, progress_to_index
from .client import SimulationClient, SimulationServiceError
from .settings import get_settings, output_root, reset_settings_cache
from .exporters import (
    determine_scenario_name,
    prepare_output_directory,
    export_trajectory_csv,
    export_trajectory_json,
    export_simulation_request,
    export_trajectory_outputs,
)

__all__ = [
    "AnyPath",
    "BezierPath",
    "ParabolaPath",
    "PathScenario",
    "StraightPath",
    "apply_patch",
    "build_simulation_request",
    "default_parameters",
    "load_path_scenario",
    "parse_path_parameters",
    "save_path_scenario",
    "set_curvature",
    "CanvasState",
    "CanvasTransform",
    "Point2D",
    "sample_path",
    "DragSession",
    "HandleId",
    "map_drag",
    "ProjectedTrajectory",
    "fit_trajectory",
    "display_index",
    "playback_progress",
    "progress_to_index",
    "SimulationClient",
    "SimulationServiceError",
    "get_settings",
    "output_root",
    "reset_settings_cache",
    "determine_scenario_name",
    "prepare_output_directory",
    "export_trajectory_csv",
    "export_trajectory_json",
    "export_simulation_request",
    "export_trajectory_outputs",
]
