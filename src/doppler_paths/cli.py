"""
Command-line interface for the Doppler path editor.

Usage:
    doppler-paths validate path/to/scenario.yaml [--verbose]
    doppler-paths sample path/to/scenario.yaml [--output outputs] [--samples 100]
    doppler-paths preview path/to/scenario.yaml [--output preview.png] [--progress 0.5]
    doppler-paths request path/to/scenario.yaml [--vehicle car] [--output request.json]
    doppler-paths submit path/to/scenario.yaml [--wait]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .client import JobStatus, SimulationClient
from .config import PATH_FAMILIES, PathScenario, load_path_scenario
from .core.playback import display_index
from .core.projector import ProjectedTrajectory, fit_trajectory
from .core.trajectory import SAMPLE_COUNT, get_path_metadata, sample_path
from .exporters import export_simulation_request, export_trajectory_outputs
from .scaffold import write_stub

Logger = logging.getLogger(__name__)

# Canvas the CLI projects onto for exports and previews.
PROJECTION_CANVAS = (640.0, 400.0)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(message)s")


def add_shared_config_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "config",
        type=Path,
        help="Path to the YAML scenario file describing the vehicle path.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doppler-paths",
        description="Edit, sample and submit vehicle pass-by paths for Doppler audio simulation.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a scenario and print a summary of the path and request.",
    )
    add_shared_config_argument(validate_parser)

    # sample command
    sample_parser = subparsers.add_parser(
        "sample",
        help="Sample the trajectory and export CSV/JSON artefacts.",
    )
    add_shared_config_argument(sample_parser)
    sample_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output root directory (defaults to the configured output root).",
    )
    sample_parser.add_argument(
        "--samples",
        type=int,
        default=SAMPLE_COUNT,
        help=f"Number of samples along the path (default {SAMPLE_COUNT}).",
    )
    sample_parser.add_argument(
        "--timestamp",
        type=str,
        default=None,
        help="Override timestamp component of the output directory (mainly for testing).",
    )

    # preview command
    preview_parser = subparsers.add_parser(
        "preview",
        help="Project the path and optionally save a PNG diagram.",
    )
    add_shared_config_argument(preview_parser)
    preview_parser.add_argument("--output", type=Path, help="Optional path to save the preview PNG.")
    preview_parser.add_argument(
        "--progress",
        type=float,
        default=None,
        help="Playback progress in [0, 1] for the vehicle marker (default: closest approach).",
    )

    # request command
    request_parser = subparsers.add_parser(
        "request",
        help="Print the simulation request record for a scenario.",
    )
    add_shared_config_argument(request_parser)
    request_parser.add_argument("--vehicle", type=str, help="Override the vehicle type.")
    request_parser.add_argument("--output", type=Path, help="Write the record to a JSON file.")

    # submit command
    submit_parser = subparsers.add_parser(
        "submit",
        help="Send the simulation request to the remote service.",
    )
    add_shared_config_argument(submit_parser)
    submit_parser.add_argument("--vehicle", type=str, help="Override the vehicle type.")
    submit_parser.add_argument("--wait", action="store_true", help="Poll until the job completes.")

    # scaffold command
    scaffold_parser = subparsers.add_parser(
        "scaffold",
        help="Create a stub YAML scenario.",
    )
    scaffold_parser.add_argument("path", type=Path, help="Path where the YAML stub will be written.")
    scaffold_parser.add_argument(
        "--family",
        choices=PATH_FAMILIES,
        default="straight",
        help="Path family of the stub (default straight).",
    )
    scaffold_parser.add_argument("--vehicle", type=str, default="car", help="Vehicle type (default car).")
    scaffold_parser.add_argument("--scenario", type=str, default=None, help="Scenario name metadata.")

    # gui command
    gui_parser = subparsers.add_parser(
        "gui",
        help="Launch the path editor.",
    )
    gui_parser.add_argument(
        "config",
        type=Path,
        nargs="?",
        help="Optional scenario file to load on startup.",
    )

    return parser


def summarize_scenario(config_path: Path, scenario: Optional[PathScenario] = None) -> str:
    if scenario is None:
        scenario = load_path_scenario(config_path)
    params = scenario.path
    metadata = get_path_metadata(params.family)
    projection = _project(scenario)
    closest = projection.closest_index
    fields = ", ".join(f"{key}={value:g}" for key, value in params.request_fields().items())
    lines = [
        f"Scenario: {config_path}",
        f"  Vehicle: {scenario.vehicle_type}",
        f"  Path: {metadata.label} ({fields})",
        f"  Motion: speed {params.speed:g} m/s | audio duration {params.duration:g} s",
        f"  Canvas: {scenario.canvas.width_px:g}x{scenario.canvas.height_px:g} px @ {scenario.canvas.zoom:g} px/m",
        f"  Closest approach: sample {closest} at {projection.distance_m(closest):.2f} m",
    ]
    return "\n".join(lines)


def _project(scenario: PathScenario, samples: int = SAMPLE_COUNT) -> ProjectedTrajectory:
    return fit_trajectory(sample_path(scenario.path, samples), *PROJECTION_CANVAS)


def _load(args: argparse.Namespace) -> Optional[PathScenario]:
    config_path: Path = args.config
    if not config_path.exists():
        Logger.error("Scenario file not found: %s", config_path)
        return None
    return load_path_scenario(config_path)


def _log_failure(command: str, exc: Exception) -> None:
    Logger.error("%s failed: %s", command, exc)
    if Logger.isEnabledFor(logging.DEBUG):
        Logger.exception("Stack trace")


def validate_command(args: argparse.Namespace) -> int:
    if not args.config.exists():
        Logger.error("Scenario file not found: %s", args.config)
        return 2
    try:
        scenario = load_path_scenario(args.config)
        print(summarize_scenario(args.config, scenario=scenario))
    except Exception as exc:  # pylint: disable=broad-except
        _log_failure("Validation", exc)
        return 1
    Logger.info("Validation succeeded.")
    return 0


def sample_command(args: argparse.Namespace) -> int:
    if not args.config.exists():
        Logger.error("Scenario file not found: %s", args.config)
        return 2
    try:
        scenario = load_path_scenario(args.config)
        points = sample_path(scenario.path, args.samples)
        projection = fit_trajectory(points, *PROJECTION_CANVAS)
        output_dir = export_trajectory_outputs(
            scenario,
            points,
            projection,
            output_root=args.output,
            timestamp=args.timestamp,
        )
    except Exception as exc:  # pylint: disable=broad-except
        _log_failure("Sample", exc)
        return 1
    Logger.info("Sampling complete. Artefacts written to: %s", output_dir)
    return 0


def preview_command(args: argparse.Namespace) -> int:
    if not args.config.exists():
        Logger.error("Scenario file not found: %s", args.config)
        return 2
    try:
        scenario = load_path_scenario(args.config)
        projection = _project(scenario)
    except Exception as exc:  # noqa: BLE001
        _log_failure("Preview", exc)
        return 1

    animating = args.progress is not None
    index = display_index(projection, args.progress or 0.0, animating)
    Logger.info(
        "Preview: %d samples, scale %.2f px/m, marker at sample %d (%.2f m from observer)",
        len(projection),
        projection.scale,
        index,
        projection.distance_m(index),
    )

    if args.output:
        try:
            _write_preview_image(args.output, projection, index, get_path_metadata(scenario.path.family).label)
            Logger.info("Preview image saved to %s", args.output)
        except Exception as exc:  # noqa: BLE001
            Logger.error("Failed to write preview image: %s", exc)
            return 1
    return 0


def request_command(args: argparse.Namespace) -> int:
    try:
        scenario = _load(args)
        if scenario is None:
            return 2
        record = scenario.to_request(vehicle_type=args.vehicle)
        if args.output:
            export_simulation_request(record, args.output)
            Logger.info("Request written to %s", args.output)
        else:
            print(json.dumps(record, indent=2))
    except Exception as exc:  # noqa: BLE001
        _log_failure("Request", exc)
        return 1
    return 0


def submit_command(args: argparse.Namespace) -> int:
    try:
        scenario = _load(args)
        if scenario is None:
            return 2
        record = scenario.to_request(vehicle_type=args.vehicle)
        with SimulationClient() as client:
            job_id = client.start_simulation(record)
            print(f"job_id: {job_id}")
            if not args.wait:
                return 0
            status = client.wait_for_job(job_id, on_progress=_log_progress)
            filename = status.result.get("filename")
            if filename:
                print(f"audio: {client.download_url(filename)}")
    except Exception as exc:  # noqa: BLE001
        _log_failure("Submit", exc)
        return 1
    return 0


def _log_progress(status: JobStatus) -> None:
    Logger.info("Job %s: %s (%.0f%%)", status.job_id, status.status, status.progress)


def scaffold_command(args: argparse.Namespace) -> int:
    try:
        write_stub(
            target_path=args.path,
            family=args.family,
            vehicle_type=args.vehicle,
            scenario_name=args.scenario,
        )
    except Exception as exc:  # noqa: BLE001
        Logger.error("Scaffold failed: %s", exc)
        return 1

    Logger.info("Scenario stub written to %s", args.path)
    return 0


def run_gui_with_args(args: argparse.Namespace) -> int:
    config_path = None
    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            Logger.error("Scenario file not found: %s", config_path)
            return 2
    from .gui import run as run_gui  # Local import to avoid Qt initialization unless needed

    run_gui(config_path)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "validate":
        return validate_command(args)
    if args.command == "sample":
        return sample_command(args)
    if args.command == "preview":
        return preview_command(args)
    if args.command == "request":
        return request_command(args)
    if args.command == "submit":
        return submit_command(args)
    if args.command == "scaffold":
        return scaffold_command(args)
    if args.command == "gui":
        return run_gui_with_args(args)

    parser.print_help()
    return 1


def _write_preview_image(output_path: Path, projection: ProjectedTrajectory, marker_index: int, title: str) -> None:
    import matplotlib.pyplot as plt

    points = projection.canvas_points
    fig, ax = plt.subplots(figsize=(6, 4))
    try:
        ax.plot(points[:, 0], points[:, 1], color="tab:blue", linewidth=2, label="Path")
        ax.scatter(points[0, 0], points[0, 1], marker="o", c="green", label="Start")
        ax.scatter(points[-1, 0], points[-1, 1], marker="s", c="purple", label="End")
        ax.scatter(projection.observer.x, projection.observer.y, marker="^", c="red", s=80, label="Observer")
        marker = projection.point(marker_index)
        ax.scatter(marker.x, marker.y, marker="D", c="orange", s=60, label="Vehicle")
        ax.plot([projection.observer.x, marker.x], [projection.observer.y, marker.y], "--", color="orange", linewidth=1)
        ax.set_xlim(0, PROJECTION_CANVAS[0])
        ax.set_ylim(PROJECTION_CANVAS[1], 0)
        ax.set_aspect("equal")
        ax.legend(loc="upper right", fontsize="small")
        ax.set_title(f"{title} Preview")
        ax.set_xlabel("X (px)")
        ax.set_ylabel("Y (px)")
        fig.tight_layout()
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=150)
    finally:
        plt.close(fig)


if __name__ == "__main__":
    sys.exit(main())
