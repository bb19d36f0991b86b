"""
Planejamento e execução do pipeline de staging.
"""

from .engine import Engine, RunResult
from .planner import CycleDetectedError, UnknownDependencyError, plan_execution

__all__ = [
    "Engine",
    "RunResult",
    "plan_execution",
    "CycleDetectedError",
    "UnknownDependencyError",
]
