# src/imagestage/backends/base.py
"""
Contrato canônico de backend de build.

Um backend sabe produzir um binário a partir de um projeto usando uma
tecnologia de build específica (go get, cmake + make, ...). O pipeline só
conversa com backends por meio deste protocolo; a conformidade é
estrutural (duck typing), sem herança obrigatória.

Ciclo de vida dentro de uma run:
    validate → setup_paths → directories_to_make → prepare_project →
    find_binary → assets/excludes → image_name/image_file_name/repo_path/source_root

Invariantes:
    - `placeholder_mapping` só é consultado depois de `setup_paths`
    - `binary_name` é vazio até `find_binary` ter sido chamado
"""

from __future__ import annotations

import argparse
from typing import Any, Dict, List, Mapping, Protocol, runtime_checkable

from imagestage.core.process import CommandRunner
from imagestage.core.staging import StagingConfig, StagingPaths


@runtime_checkable
class Backend(Protocol):
    name: str

    def placeholder_mapping(self) -> Dict[str, str]:
        ...

    def validate(self, config: StagingConfig) -> None:
        ...

    def setup_paths(self, paths: StagingPaths, config: StagingConfig) -> None:
        ...

    def directories_to_make(self) -> List[str]:
        ...

    def prepare_project(self, config: StagingConfig, paths: StagingPaths, runner: CommandRunner) -> None:
        ...

    def find_binary(self, config: StagingConfig) -> str:
        ...

    def binary_name(self) -> str:
        ...

    def repo_path(self) -> str:
        ...

    def source_root(self) -> str:
        """Diretório acima do qual a busca por repositório VCS não sobe."""
        ...

    def assets(self, image_bin_dir: str) -> List[str]:
        ...

    def excludes(self) -> List[str]:
        ...

    def image_name(self, config: StagingConfig) -> str:
        ...

    def image_file_name(self, config: StagingConfig) -> str:
        ...


@runtime_checkable
class BackendFactory(Protocol):
    """Cria backends a partir de opções e declara as opções de CLI próprias."""

    name: str

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        ...

    def options_from_args(self, args: argparse.Namespace) -> Dict[str, Any]:
        ...

    def create(self, options: Mapping[str, Any]) -> Backend:
        ...
