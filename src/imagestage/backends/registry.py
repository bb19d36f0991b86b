# src/imagestage/backends/registry.py
"""
Registro explícito de backends.

O registro é construído uma única vez no entry point
(`build_default_registry`) e passado adiante; não existe mapa global
populado em tempo de import.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from imagestage.core.exceptions import BackendNotFoundError

from .base import BackendFactory


class DuplicateBackendError(ValueError):
    """Dois backends registrados com o mesmo nome."""


@dataclass
class BackendRegistry:
    _factories: Dict[str, BackendFactory] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def add(self, factory: BackendFactory) -> None:
        name = getattr(factory, "name", None)
        if not isinstance(name, str) or not name.strip():
            raise ValueError("backend name must be a non-empty string")
        if name in self._factories:
            raise DuplicateBackendError(f"Duplicate backend: {name}")
        self._factories[name] = factory
        self._order.append(name)

    def get(self, name: str) -> BackendFactory:
        if name not in self._factories:
            raise BackendNotFoundError(
                message=f"No such command: {name!r}",
                details={"command": name, "available": list(self._order)},
                hint=f"Comandos disponíveis: {', '.join(self._order)}",
            )
        return self._factories[name]

    def names(self) -> List[str]:
        return list(self._order)


def build_default_registry() -> BackendRegistry:
    from .cmake import CmakeBackendFactory
    from .go import GoBackendFactory

    registry = BackendRegistry()
    registry.add(GoBackendFactory())
    registry.add(CmakeBackendFactory())
    return registry
