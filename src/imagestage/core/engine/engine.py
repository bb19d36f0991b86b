# src/imagestage/core/engine/engine.py
"""
Engine de execução do pipeline de staging.

Responsabilidades:
- Planejar a ordem das etapas (planner) e executá-las sequencialmente.
- Respeitar `steps.<id>.enabled` da configuração (etapas desabilitadas
  terminam como SKIPPED; é assim que o modo reuse pula `project.prepare`).
- Capturar falhas e converter exceções em ErrorPayload serializável,
  persistido em `StepResult.payload["error"]`.
- Interromper a run na primeira falha quando `engine.fail_fast` (padrão).

O Engine não muta StepResult in-place: qualquer enriquecimento
(warnings do RunContext) é feito via `dataclasses.replace`.

A exceção original da etapa que falhou é preservada em `RunResult.failure`
para que o chamador possa propagá-la com o tipo correto.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence

from imagestage.core.pipeline.context import RunContext
from imagestage.core.pipeline.step import Step
from imagestage.core.pipeline.types import StepKind, StepResult, StepStatus
from imagestage.core.errors import engine_configuration_error, exception_to_payload

from .planner import plan_execution


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado de uma execução de pipeline."""

    steps: Dict[str, StepResult] = field(default_factory=dict)
    failure: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return all(r.status != StepStatus.FAILED for r in self.steps.values())


class Engine:
    """Engine canônico do ImageStage (planner + executor)."""

    def __init__(self, *, steps: Sequence[Step], ctx: RunContext):
        self.steps: List[Step] = list(steps)
        self.ctx: RunContext = ctx

    def _is_enabled(self, step_id: str) -> bool:
        steps_cfg = (self.ctx.config or {}).get("steps", {}) or {}
        step_cfg = steps_cfg.get(step_id, {}) or {}
        enabled = step_cfg.get("enabled", True)
        return bool(enabled)

    def _fail_fast(self) -> bool:
        engine_cfg = (self.ctx.config or {}).get("engine", {}) or {}
        return bool(engine_cfg.get("fail_fast", True))

    def _ctx_warnings_for(self, step_id: str) -> List[str]:
        warnings_map = getattr(self.ctx, "warnings", {}) or {}
        return list(warnings_map.get(step_id, []) or [])

    def _enrich_step_result(self, *, step_id: str, step: Step, result: StepResult) -> StepResult:
        """Retorna uma NOVA instância de StepResult com os warnings do contexto mesclados."""
        desired_kind = getattr(result, "kind", None) or getattr(step, "kind", StepKind.SETUP)

        merged_w: List[str] = []
        seen = set()
        for msg in list(result.warnings or []) + self._ctx_warnings_for(step_id):
            if msg not in seen:
                merged_w.append(msg)
                seen.add(msg)

        return replace(result, step_id=step_id, kind=desired_kind, warnings=merged_w)

    def _mk_result(
        self,
        *,
        step_id: str,
        step: Step,
        status: StepStatus,
        summary: str,
        payload: Dict[str, Any] | None = None,
    ) -> StepResult:
        kind = getattr(step, "kind", StepKind.SETUP) or StepKind.SETUP
        r = StepResult(
            step_id=step_id,
            kind=kind,
            status=status,
            summary=summary,
            payload=dict(payload or {}),
        )
        return self._enrich_step_result(step_id=step_id, step=step, result=r)

    def run(self) -> RunResult:
        ordered = plan_execution(self.steps)
        results: Dict[str, StepResult] = {}
        failure: Optional[BaseException] = None

        for step in ordered:
            sid = step.id

            if not self._is_enabled(sid):
                self.ctx.log(step_id=sid, level="debug", message="step skipped by config")
                results[sid] = self._mk_result(
                    step_id=sid,
                    step=step,
                    status=StepStatus.SKIPPED,
                    summary="skipped by config",
                )
                continue

            deps = list(getattr(step, "depends_on", []) or [])
            if any(results.get(d) and results[d].status == StepStatus.FAILED for d in deps):
                results[sid] = self._mk_result(
                    step_id=sid,
                    step=step,
                    status=StepStatus.SKIPPED,
                    summary="skipped due to failed dependency",
                )
                continue

            self.ctx.log(step_id=sid, level="debug", message="step started")
            try:
                step_result = step.run(self.ctx)
                if not isinstance(step_result, StepResult):
                    raise TypeError("Step.run(ctx) must return StepResult")
                results[sid] = self._enrich_step_result(step_id=sid, step=step, result=step_result)
                self.ctx.log(step_id=sid, level="debug", message="step finished")
            except Exception as e:
                error = exception_to_payload(e, step=sid)
                if isinstance(e, TypeError) and "must return StepResult" in (str(e) or ""):
                    error = engine_configuration_error(
                        message="Step retornou tipo inválido",
                        details={"step_id": sid, "expected": "StepResult"},
                        hint="Ajuste a etapa para retornar StepResult",
                    )
                results[sid] = self._mk_result(
                    step_id=sid,
                    step=step,
                    status=StepStatus.FAILED,
                    summary=error.message,
                    payload={"error": error.to_dict()},
                )
                self.ctx.log(step_id=sid, level="debug", message="step failed", error=error.type)
                if failure is None:
                    failure = e
                if self._fail_fast():
                    break

        return RunResult(steps=results, failure=failure)
