"""Controller layer for GUI business logic."""

from .scenario_controller import ScenarioController

__all__ = ["ScenarioController"]
