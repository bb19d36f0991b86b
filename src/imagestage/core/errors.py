"""
ImageStage — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros serializáveis do ImageStage.
Exceções (`core.exceptions`) são convertidas em `ErrorPayload` pelo Engine
e anexadas ao `StepResult` da etapa que falhou, permitindo que a CLI e
eventuais relatórios exibam o erro sem stack trace cru.

Um payload de erro deve ser:

- explícito
- serializável
- acionável (sempre que possível, com `hint`)
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .exceptions import ImageStageException


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do ImageStage.

    Campos:
    - type: código estável do erro (nome da exceção ou código do catálogo)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"


def engine_execution_error(
    *,
    step: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique o log de eventos da run para diagnosticar a falha. Nenhum retry é aplicado automaticamente.",
) -> ErrorPayload:
    return ErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message=exc_message or "Falha inesperada durante a execução do pipeline",
        details={
            "step": step,
            "exc_type": exc_type,
        },
        hint=hint,
    )


def engine_configuration_error(
    *,
    message: str = "Configuração inválida para execução do pipeline",
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Revise a definição das etapas do pipeline antes de reexecutar.",
) -> ErrorPayload:
    return ErrorPayload(
        type=ENGINE_CONFIGURATION_ERROR,
        message=message,
        details=details or {},
        hint=hint,
    )


def exception_to_payload(exc: BaseException, *, step: Optional[str] = None) -> ErrorPayload:
    """Converte uma exceção em `ErrorPayload`.

    Regras:
    - ImageStageException: já carrega message/details/hint; o código estável
      é o nome da classe.
    - Outras exceções: encapsuladas como ENGINE_EXECUTION_ERROR.
    """
    if isinstance(exc, ImageStageException):
        return ErrorPayload(
            type=exc.__class__.__name__,
            message=exc.message or "Erro de execução",
            details=dict(exc.details or {}),
            hint=exc.hint,
        )
    return engine_execution_error(
        step=step,
        exc_type=exc.__class__.__name__,
        exc_message=str(exc) or None,
    )
