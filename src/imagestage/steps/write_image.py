from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

from imagestage.backends.base import Backend
from imagestage.core.pipeline.context import RunContext
from imagestage.core.pipeline.types import StepKind, StepResult, StepStatus
from imagestage.core.staging import StagingConfig, StagingPaths
from imagestage.writer import ImageWriter

from . import keys


@dataclass
class WriteImageStep:
    """Escreve o artefato da imagem em `<output_dir>/<nome>.aci`."""

    backend: Backend
    writer: ImageWriter
    id: str = "image.write"
    kind: StepKind = StepKind.EXPORT
    depends_on: List[str] = field(default_factory=lambda: ["manifest.assemble"])

    def run(self, ctx: RunContext) -> StepResult:
        config: StagingConfig = ctx.get_artifact(keys.CONFIG)
        paths: StagingPaths = ctx.get_artifact(keys.PATHS)
        manifest = ctx.get_artifact(keys.MANIFEST)

        output_path = os.path.join(config.output_dir, self.backend.image_file_name(config))
        written = self.writer.write(manifest, paths.image_dir, output_path)
        ctx.set_artifact(keys.OUTPUT, written)
        ctx.log(step_id=self.id, level="info", message=f"Wrote {written}")

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="image written",
            artifacts={"image": written},
        )
