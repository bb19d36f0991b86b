from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from imagestage.backends.base import Backend
from imagestage.core.pipeline.context import RunContext
from imagestage.core.pipeline.types import StepKind, StepResult, StepStatus
from imagestage.core.process import CommandRunner
from imagestage.core.staging import StagingConfig, StagingPaths

from . import keys


@dataclass
class PrepareProjectStep:
    """Obtém e constrói o projeto pelo backend; pulada em modo reuse."""

    backend: Backend
    runner: CommandRunner
    id: str = "project.prepare"
    kind: StepKind = StepKind.PREPARE
    depends_on: List[str] = field(default_factory=lambda: ["paths.make_directories"])

    def run(self, ctx: RunContext) -> StepResult:
        config: StagingConfig = ctx.get_artifact(keys.CONFIG)
        paths: StagingPaths = ctx.get_artifact(keys.PATHS)

        ctx.log(step_id=self.id, level="info", message=f"Building {config.project}")
        self.backend.prepare_project(config, paths, self.runner)
        binary = self.backend.find_binary(config)
        ctx.set_artifact(keys.BINARY, binary)

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="project built",
            artifacts={"binary": binary},
        )
