# src/imagestage/core/engine/planner.py
"""
Planejador de execução do pipeline de staging.

Valida a estrutura declarada pelas etapas (identificadores, dependências,
ciclos) e produz uma ordem de execução topológica determinística.

Decisões arquiteturais:
    - Ordenação topológica determinística (Kahn modificado)
    - Empates são resolvidos pela ordem de declaração das etapas
    - Erros estruturais são tratados como falhas fatais

Invariantes:
    - Nenhuma etapa é executada antes de suas dependências
    - Todas as etapas aparecem exatamente uma vez
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Set

from imagestage.core.pipeline.step import Step


class UnknownDependencyError(ValueError):
    """Uma etapa declarou em `depends_on` um `id` que não foi registrado."""


class CycleDetectedError(ValueError):
    """O grafo de dependências entre etapas contém um ciclo."""


def plan_execution(steps: Iterable[Step]) -> List[Step]:
    """
    Valida e produz uma ordem de execução topológica determinística.

    Sempre que múltiplas etapas estiverem prontas, a escolha segue a ordem
    em que foram declaradas, de modo que um pipeline linear é executado
    exatamente na ordem de registro.

    Args:
        steps (Iterable[Step]): Etapas declarativas do pipeline.

    Returns:
        List[Step]: Etapas em ordem de execução.

    Raises:
        ValueError: Se alguma etapa possuir `id` inválido ou duplicado.
        UnknownDependencyError: Se uma etapa declarar dependência inexistente.
        CycleDetectedError: Se houver ciclo no grafo de dependências.
    """
    step_list = list(steps)
    by_id: Dict[str, Step] = {}
    position: Dict[str, int] = {}
    for idx, s in enumerate(step_list):
        sid = getattr(s, "id", None)
        if not isinstance(sid, str) or not sid.strip():
            raise ValueError("step.id must be a non-empty string")
        if sid in by_id:
            raise ValueError(f"Duplicate step id: {sid}")
        by_id[sid] = s
        position[sid] = idx

    deps: Dict[str, List[str]] = {}
    for sid, s in by_id.items():
        d = list(getattr(s, "depends_on", []) or [])
        for dep in d:
            if dep not in by_id:
                raise UnknownDependencyError(f"Step '{sid}' depends on unknown step '{dep}'")
        deps[sid] = d

    # Kahn's algorithm (deterministic)
    incoming_count: Dict[str, int] = {sid: 0 for sid in by_id}
    outgoing: Dict[str, Set[str]] = {sid: set() for sid in by_id}
    for sid, dlist in deps.items():
        incoming_count[sid] = len(dlist)
        for dep in dlist:
            outgoing[dep].add(sid)

    ready: List[str] = sorted(
        [sid for sid, c in incoming_count.items() if c == 0], key=position.__getitem__
    )
    order_ids: List[str] = []

    while ready:
        sid = ready.pop(0)
        order_ids.append(sid)
        for child in outgoing[sid]:
            incoming_count[child] -= 1
            if incoming_count[child] == 0:
                ready.append(child)
        ready.sort(key=position.__getitem__)

    if len(order_ids) != len(by_id):
        raise CycleDetectedError("Cycle detected in step dependency graph")

    return [by_id[sid] for sid in order_ids]
