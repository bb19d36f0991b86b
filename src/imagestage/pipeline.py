# src/imagestage/pipeline.py
"""
Pipeline de staging de imagem.

Encadeia as etapas canônicas em ordem linear e as executa com o Engine
(fail-fast):

    validate → paths.setup → paths.make_directories → project.prepare →
    assets.copy → manifest.assemble → image.write

Responsabilidades próprias do pipeline (fora das etapas):
    - construir o RunContext com a configuração resolvida
    - fixar a sequência de etapas: seções `steps`/`engine` do usuário são
      ignoradas e apenas o modo reuse desabilita `project.prepare`
    - remover o diretório de trabalho ao final, com sucesso ou falha,
      exceto quando `keep_tmp_dir` está ativo
    - repropagar a exceção original da etapa que falhou, já tipada

O pipeline não imprime nada: todo progresso passa pelo `sink` de eventos.
"""

from __future__ import annotations

import copy
import shutil
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from imagestage.backends.base import Backend
from imagestage.core.engine import Engine, RunResult
from imagestage.core.pipeline import RunContext, Step, StepRegistry
from imagestage.core.pipeline.context import EventSink
from imagestage.core.process import CommandRunner
from imagestage.core.staging import StagingConfig, StagingPaths
from imagestage.steps import (
    AssembleManifestStep,
    CopyAssetsStep,
    MakeDirectoriesStep,
    PrepareProjectStep,
    SetupPathsStep,
    ValidateStep,
    WriteImageStep,
)
from imagestage.steps import keys
from imagestage.writer import ImageWriter, TarImageWriter

PIPELINE_STEP_ID = "pipeline"
PREPARE_STEP_ID = "project.prepare"
ENGINE_SECTIONS = ("engine", "steps")


class StagingPipeline:
    """Uma run de staging para um backend e uma configuração."""

    def __init__(
        self,
        *,
        backend: Backend,
        config: StagingConfig,
        runner: Optional[CommandRunner] = None,
        writer: Optional[ImageWriter] = None,
        settings: Optional[Mapping[str, Any]] = None,
        sink: Optional[EventSink] = None,
    ):
        self.backend = backend
        self.config = config
        self.writer: ImageWriter = writer or TarImageWriter()
        self.settings: Dict[str, Any] = copy.deepcopy(dict(settings or {}))
        self.ctx = RunContext(
            run_id=uuid.uuid4().hex,
            created_at=datetime.now(timezone.utc),
            config=self._engine_config(),
            meta={"backend": backend.name, "project": config.project},
            sink=sink,
        )
        self.runner = runner or CommandRunner(log=self._runner_log)

    def _runner_log(self, **event: Any) -> None:
        self.ctx.log(step_id=PIPELINE_STEP_ID, **event)

    def _engine_config(self) -> Dict[str, Any]:
        # the stage sequence is fixed; only reuse mode turns a stage off
        cfg = {k: v for k, v in self.settings.items() if k not in ENGINE_SECTIONS}
        cfg["engine"] = {"fail_fast": True}
        cfg["steps"] = {PREPARE_STEP_ID: {"enabled": False}} if self.config.reusing else {}
        return cfg

    def steps(self) -> List[Step]:
        """Etapas registradas na ordem de declaração."""
        registry = StepRegistry()
        registry.add(ValidateStep(backend=self.backend))
        registry.add(SetupPathsStep(backend=self.backend))
        registry.add(MakeDirectoriesStep(backend=self.backend))
        registry.add(PrepareProjectStep(backend=self.backend, runner=self.runner))
        registry.add(CopyAssetsStep(backend=self.backend, runner=self.runner))
        registry.add(AssembleManifestStep(backend=self.backend, runner=self.runner))
        registry.add(WriteImageStep(backend=self.backend, writer=self.writer))
        return registry.list()

    def run(self) -> RunResult:
        """
        Executa a run completa.

        Returns:
            RunResult: resultados por etapa (quando todas terminam sem erro).

        Raises:
            ImageStageException: a exceção original da primeira etapa que
            falhou, depois da limpeza do diretório de trabalho.
        """
        ignored = sorted(k for k in ENGINE_SECTIONS if k in self.settings)
        if ignored:
            self.ctx.add_warning(
                step_id=PIPELINE_STEP_ID,
                message=f"Ignoring configuration sections: {', '.join(ignored)}",
            )
        self.ctx.set_artifact(keys.CONFIG, self.config)
        try:
            result = Engine(steps=self.steps(), ctx=self.ctx).run()
        finally:
            self._cleanup()

        if result.failure is not None:
            raise result.failure
        return result

    @property
    def output_path(self) -> Optional[str]:
        if self.ctx.has_artifact(keys.OUTPUT):
            return self.ctx.get_artifact(keys.OUTPUT)
        return None

    def _cleanup(self) -> None:
        if not self.ctx.has_artifact(keys.PATHS):
            return
        paths: StagingPaths = self.ctx.get_artifact(keys.PATHS)
        if self.config.keep_tmp_dir:
            self.ctx.log(
                step_id=PIPELINE_STEP_ID,
                level="info",
                message=f"Preserving temporary directory {paths.tmp_dir!r}",
                path=paths.tmp_dir,
            )
            return
        self.ctx.log(step_id=PIPELINE_STEP_ID, level="debug", message="removing temporary directory", path=paths.tmp_dir)
        shutil.rmtree(paths.tmp_dir, ignore_errors=True)
