# src/imagestage/core/pipeline/context.py
"""
Contexto de execução compartilhado do pipeline de staging.

Este módulo define o `RunContext`, a estrutura canônica utilizada para
compartilhar estado explícito entre as etapas de uma run do ImageStage.

O RunContext atua como o único meio permitido de:
    - troca indireta de informações entre etapas (artifact store)
    - registro de eventos de log estruturados
    - coleta de warnings não fatais associados a etapas

Princípios fundamentais:
    - Isolamento por execução (cada run possui seu próprio contexto)
    - Ausência de estado global compartilhado
    - Estrutura simples e testável

Invariantes:
    - Artefatos são indexados por chave explícita
    - Logs sempre incluem `run_id` e `step_id`
    - Warnings são agrupados por `step_id`

Limites explícitos:
    - Não executa etapas
    - Não persiste dados automaticamente
    - Não formata saída para terminal (responsabilidade do `sink`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional


EventSink = Callable[[Dict[str, Any]], None]


@dataclass
class RunContext:
    """
    Contexto de execução compartilhado de uma run de staging.

    O RunContext consolida:
        - identidade da execução (run_id, created_at)
        - configuração resolvida (dict puro, como produzido pelo loader)
        - armazenamento de artefatos produzidos pelas etapas
        - eventos de log estruturados
        - warnings associados a etapas específicas

    Um `sink` opcional recebe cada evento no momento em que é registrado;
    a CLI o usa para imprimir progresso no stderr.
    """
    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    meta: Dict[str, Any] = field(default_factory=dict)
    sink: Optional[EventSink] = field(default=None, repr=False)

    _artifacts: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Artifact store
    # -----------------------------
    def set_artifact(self, key: str, value: Any) -> None:
        self._artifacts[key] = value

    def has_artifact(self, key: str) -> bool:
        return key in self._artifacts

    def get_artifact(self, key: str) -> Any:
        if key not in self._artifacts:
            raise KeyError(key)
        return self._artifacts[key]

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)
        if self.sink is not None:
            self.sink(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        if step_id not in self.warnings:
            self.warnings[step_id] = []
        self.warnings[step_id].append(message)
        self.log(step_id=step_id, level="warning", message=message)
