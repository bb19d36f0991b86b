# src/imagestage/core/pipeline/types.py
"""
Tipos canônicos do pipeline de staging.

Componentes principais:
    - StepStatus → enum de estados finais (SUCCESS, SKIPPED, FAILED)
    - StepKind   → enum de classificação semântica das etapas
    - StepResult → estrutura imutável de resultado de execução

Invariantes:
    - Enums possuem valores textuais canônicos
    - StepResult é imutável e seguro contra mutação acidental
    - Tipos não dependem de engine, backends ou CLI
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class StepKind(str, Enum):
    """
    Tipos semânticos das etapas do pipeline.

    Tipos definidos:
        - VALIDATE: validação de opções e pré-condições
        - SETUP: alocação de caminhos e diretórios de trabalho
        - PREPARE: obtenção e build do projeto pelo backend
        - STAGE: cópia de assets para o rootfs da imagem
        - ASSEMBLE: montagem do manifest da imagem
        - EXPORT: escrita do artefato final

    O tipo é puramente informativo; o Engine não o usa para decidir execução.
    """
    VALIDATE = "validate"
    SETUP = "setup"
    PREPARE = "prepare"
    STAGE = "stage"
    ASSEMBLE = "assemble"
    EXPORT = "export"


class StepStatus(str, Enum):
    """
    Estados finais possíveis da execução de uma etapa.

    Estados definidos:
        - SUCCESS: execução concluída com sucesso
        - SKIPPED: execução pulada por decisão explícita (ex.: reuse de tmp dir)
        - FAILED: execução interrompida por erro
    """
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """
    Resultado imutável da execução de uma etapa.

    Campos:
        - step_id: identificador único da etapa
        - kind: tipo semântico da etapa
        - status: estado final da execução
        - summary: resumo textual da execução
        - metrics: contagens produzidas pela etapa (ex.: assets copiados)
        - warnings: avisos não fatais gerados durante a execução
        - artifacts: referências a artefatos produzidos (ex.: caminhos)
        - payload: dados adicionais livres (ex.: `error` em falhas)
    """
    step_id: str
    kind: StepKind
    status: StepStatus
    summary: str
    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    artifacts: Dict[str, str] = field(default_factory=dict)
    payload: Dict[str, Any] = field(default_factory=dict)
