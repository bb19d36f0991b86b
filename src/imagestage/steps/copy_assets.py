from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import List

from imagestage.assets.resolver import AssetResolver
from imagestage.backends.base import Backend
from imagestage.core.pipeline.context import RunContext
from imagestage.core.pipeline.types import StepKind, StepResult, StepStatus
from imagestage.core.process import CommandRunner
from imagestage.core.staging import StagingConfig, StagingPaths

from . import keys

IMAGE_BIN_DIR = "/"


@dataclass
class CopyAssetsStep:
    """Copia os assets do usuário e do backend, com o fecho de dependências, para o rootfs."""

    backend: Backend
    runner: CommandRunner
    id: str = "assets.copy"
    kind: StepKind = StepKind.STAGE
    depends_on: List[str] = field(default_factory=lambda: ["project.prepare"])

    def run(self, ctx: RunContext) -> StepResult:
        config: StagingConfig = ctx.get_artifact(keys.CONFIG)
        paths: StagingPaths = ctx.get_artifact(keys.PATHS)

        if not ctx.has_artifact(keys.BINARY):
            # reuse mode: the project was built by an earlier run
            ctx.set_artifact(keys.BINARY, self.backend.find_binary(config))

        assets = list(config.assets) + self.backend.assets(IMAGE_BIN_DIR)
        excludes = list(config.excludes) + self.backend.excludes()

        resolver = AssetResolver(
            dest_root=paths.rootfs,
            mapping=self.backend.placeholder_mapping(),
            excludes=excludes,
            runner=self.runner,
            log=partial(ctx.log, step_id=self.id),
        )
        processed = resolver.resolve(assets)
        ctx.set_artifact(keys.ASSET_COUNT, processed)

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="assets copied",
            metrics={"requested": len(assets), "processed": processed, "excludes": len(excludes)},
            artifacts={"rootfs": paths.rootfs},
        )
