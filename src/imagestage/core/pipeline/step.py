# src/imagestage/core/pipeline/step.py
"""
Contrato canônico de etapa (Step) do pipeline de staging.

Um Step é a menor unidade executável do pipeline: validar opções,
preparar diretórios, copiar assets, montar o manifest, escrever a imagem.

Princípios fundamentais:
    - Steps não conhecem o Engine nem o planner
    - Steps não controlam ordem de execução (apenas declaram `depends_on`)
    - Comunicação entre Steps é mediada pelo RunContext
    - Conformidade é garantida por duck typing (@runtime_checkable)

Invariantes:
    - Cada Step possui um `id` único
    - O método `run` é chamado no máximo uma vez por execução
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable, List

from .context import RunContext
from .types import StepKind, StepResult


@runtime_checkable
class Step(Protocol):
    """
    Contrato canônico de uma etapa do pipeline.

    Atributos obrigatórios:
        - id: identificador único e estável da etapa
        - kind: classificação semântica (`StepKind`)
        - depends_on: lista de `id` das etapas das quais depende

    Falhas são sinalizadas levantando exceções; o Engine as converte
    em `StepResult` com status FAILED.
    """
    id: str
    kind: StepKind
    depends_on: List[str]

    def run(self, ctx: RunContext) -> StepResult:
        """Executa a etapa uma única vez usando exclusivamente o RunContext."""
        ...
