# src/imagestage/steps/paths.py
"""
Etapas de layout do diretório de trabalho.

    - SetupPathsStep: escolhe a raiz de trabalho (explícita, reuse ou
      temporária nova) e deriva `aci/` e `aci/rootfs/`.
    - MakeDirectoriesStep: cria a árvore; em modo reuse apenas recria a
      subárvore de staging, preservando o build do projeto.

A raiz é publicada no RunContext assim que conhecida, para que o pipeline
possa removê-la em qualquer caminho de saída.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from dataclasses import dataclass, field
from typing import List

from imagestage.backends.base import Backend
from imagestage.core.exceptions import DirectoryCreationError
from imagestage.core.pipeline.context import RunContext
from imagestage.core.pipeline.types import StepKind, StepResult, StepStatus
from imagestage.core.staging import StagingConfig, StagingPaths

from . import keys

DIR_MODE = 0o755


@dataclass
class SetupPathsStep:
    backend: Backend
    id: str = "paths.setup"
    kind: StepKind = StepKind.SETUP
    depends_on: List[str] = field(default_factory=lambda: ["validate"])

    def _scratch_root(self, config: StagingConfig) -> str:
        if config.tmp_dir:
            return os.path.abspath(config.tmp_dir)
        if config.reuse_tmp_dir:
            return os.path.abspath(config.reuse_tmp_dir)
        try:
            return tempfile.mkdtemp(prefix=f"imagestage-{self.backend.name}-")
        except OSError as e:
            raise DirectoryCreationError(
                message=f"Failed to set up temporary directory: {e}",
                details={"path": tempfile.gettempdir()},
            ) from e

    def run(self, ctx: RunContext) -> StepResult:
        config: StagingConfig = ctx.get_artifact(keys.CONFIG)
        paths = StagingPaths.for_root(self._scratch_root(config))
        ctx.set_artifact(keys.PATHS, paths)

        self.backend.setup_paths(paths, config)
        for message in list(getattr(self.backend, "warnings", []) or []):
            ctx.add_warning(step_id=self.id, message=message)

        ctx.log(step_id=self.id, level="debug", message="scratch directory", path=paths.tmp_dir)
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="paths resolved",
            artifacts={
                "tmp_dir": paths.tmp_dir,
                "image_dir": paths.image_dir,
                "rootfs": paths.rootfs,
            },
        )


@dataclass
class MakeDirectoriesStep:
    backend: Backend
    id: str = "paths.make_directories"
    kind: StepKind = StepKind.SETUP
    depends_on: List[str] = field(default_factory=lambda: ["paths.setup"])

    def run(self, ctx: RunContext) -> StepResult:
        config: StagingConfig = ctx.get_artifact(keys.CONFIG)
        paths: StagingPaths = ctx.get_artifact(keys.PATHS)

        to_make = [paths.image_dir, paths.rootfs]
        try:
            if config.reusing:
                # only the staging subtree; the project build stays
                if os.path.lexists(paths.image_dir):
                    shutil.rmtree(paths.image_dir)
            else:
                if config.tmp_dir and not os.path.isdir(paths.tmp_dir):
                    os.makedirs(paths.tmp_dir, DIR_MODE)
                to_make.extend(self.backend.directories_to_make())
        except OSError as e:
            raise DirectoryCreationError(
                message=f"Failed to prepare directory {paths.tmp_dir!r}: {e}",
                details={"path": getattr(e, "filename", None) or paths.tmp_dir},
            ) from e

        for directory in to_make:
            try:
                os.mkdir(directory, DIR_MODE)
            except OSError as e:
                raise DirectoryCreationError(
                    message=f"Failed to make directory {directory!r}: {e.strerror or e}",
                    details={"path": directory},
                ) from e

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="directories created",
            metrics={"directories": len(to_make)},
            payload={"reused": config.reusing},
        )
