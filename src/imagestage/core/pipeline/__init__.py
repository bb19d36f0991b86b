"""
Núcleo do pipeline de staging: protocolo de etapa, contexto de execução,
tipos de resultado e registro estrutural de etapas.
"""

from .context import RunContext
from .registry import DuplicateStepIdError, StepRegistry
from .step import Step
from .types import StepKind, StepResult, StepStatus

__all__ = [
    "RunContext",
    "Step",
    "StepKind",
    "StepResult",
    "StepStatus",
    "StepRegistry",
    "DuplicateStepIdError",
]
