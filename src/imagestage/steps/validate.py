from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

from imagestage.backends.base import Backend
from imagestage.core.exceptions import ConfigurationError
from imagestage.core.pipeline.context import RunContext
from imagestage.core.pipeline.types import StepKind, StepResult, StepStatus
from imagestage.core.staging import StagingConfig

from . import keys


def validate_config(config: StagingConfig) -> None:
    """Regras comuns a todos os backends."""
    if not config.project:
        raise ConfigurationError(
            message="Got no project to build",
            details={"option": "project"},
            hint="Informe exatamente um projeto a construir.",
        )

    if config.tmp_dir and config.reuse_tmp_dir and config.tmp_dir != config.reuse_tmp_dir:
        raise ConfigurationError(
            message="Specified both tmp dir to reuse and a tmp dir and they are different",
            details={"tmp_dir": config.tmp_dir, "reuse_tmp_dir": config.reuse_tmp_dir},
            hint="Use apenas --tmp-dir ou apenas --reuse-tmp-dir.",
        )

    if config.reuse_tmp_dir and not os.path.isdir(config.reuse_tmp_dir):
        raise ConfigurationError(
            message=f"Invalid tmp dir to reuse: {config.reuse_tmp_dir}",
            details={"reuse_tmp_dir": config.reuse_tmp_dir},
            hint="O diretório informado em --reuse-tmp-dir precisa existir.",
        )


@dataclass
class ValidateStep:
    """Valida a configuração da run e delega validações extras ao backend."""

    backend: Backend
    id: str = "validate"
    kind: StepKind = StepKind.VALIDATE
    depends_on: List[str] = field(default_factory=list)

    def run(self, ctx: RunContext) -> StepResult:
        config: StagingConfig = ctx.get_artifact(keys.CONFIG)
        validate_config(config)
        self.backend.validate(config)
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="configuration validated",
            payload={"project": config.project, "backend": self.backend.name},
        )
