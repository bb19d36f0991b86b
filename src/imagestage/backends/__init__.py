"""
Backends de build: contrato, registro explícito, seleção de binário e
implementações por tecnologia (go, cmake).
"""

from .base import Backend, BackendFactory
from .binaries import select_binary
from .cmake import CmakeBackend, CmakeBackendFactory
from .go import GoBackend, GoBackendFactory
from .registry import BackendRegistry, DuplicateBackendError, build_default_registry

__all__ = [
    "Backend",
    "BackendFactory",
    "BackendRegistry",
    "CmakeBackend",
    "CmakeBackendFactory",
    "DuplicateBackendError",
    "GoBackend",
    "GoBackendFactory",
    "build_default_registry",
    "select_binary",
]
