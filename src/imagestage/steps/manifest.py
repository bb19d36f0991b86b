from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from imagestage.backends.base import Backend
from imagestage.core.pipeline.context import RunContext
from imagestage.core.pipeline.types import StepKind, StepResult, StepStatus
from imagestage.core.process import CommandRunner
from imagestage.core.staging import StagingConfig
from imagestage.manifest.assembler import assemble_manifest

from . import keys


@dataclass
class AssembleManifestStep:
    """Monta o manifest (nome, entrypoint, labels de plataforma e VCS)."""

    backend: Backend
    runner: CommandRunner
    id: str = "manifest.assemble"
    kind: StepKind = StepKind.ASSEMBLE
    depends_on: List[str] = field(default_factory=lambda: ["assets.copy"])

    def run(self, ctx: RunContext) -> StepResult:
        config: StagingConfig = ctx.get_artifact(keys.CONFIG)

        manifest = assemble_manifest(
            image_name=self.backend.image_name(config),
            binary_name=self.backend.binary_name(),
            exec_args=config.exec_args,
            repo_path=self.backend.repo_path(),
            source_root=self.backend.source_root(),
            runner=self.runner,
            warn=lambda message: ctx.add_warning(step_id=self.id, message=message),
        )
        ctx.set_artifact(keys.MANIFEST, manifest)

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="manifest assembled",
            metrics={"labels": len(manifest.labels)},
            payload={"name": manifest.name, "exec": list(manifest.app.exec)},
        )
