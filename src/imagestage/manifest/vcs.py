"""
Informação de controle de versão do código-fonte do projeto.

Procura um marcador de repositório (`.git`, `.hg`) no caminho informado ou
em um de seus ancestrais, sem subir acima da árvore de fontes do backend,
e consulta a revisão atual com a ferramenta
correspondente.
"""

from __future__ import annotations

import os
from typing import Optional, Tuple

from imagestage.core.process import CommandRunner

# (marcador, tipo, comando de revisão)
_VCS_KINDS = (
    (".git", "git", ["git", "rev-parse", "HEAD"]),
    (".hg", "hg", ["hg", "id", "-i"]),
)


def _within(path: str, root: str) -> bool:
    return os.path.commonpath([path, root]) == root


def find_vcs_root(path: str, stop_at: str = "") -> Optional[Tuple[str, str]]:
    """
    Retorna (tipo, raiz) do repositório que contém `path`, ou None.

    Com `stop_at`, a busca não sobe acima desse diretório; um `path` fora
    dele é examinado sozinho.
    """
    current = os.path.abspath(path)
    boundary = os.path.abspath(stop_at) if stop_at else ""
    if boundary and not _within(current, boundary):
        boundary = current
    while True:
        for marker, kind, _ in _VCS_KINDS:
            if os.path.exists(os.path.join(current, marker)):
                return kind, current
        parent = os.path.dirname(current)
        if parent == current or current == boundary:
            return None
        current = parent


def get_vcs_info(path: str, runner: CommandRunner, stop_at: str = "") -> Optional[Tuple[str, str]]:
    """Retorna (tipo, revisão) para `path`, ou None quando não versionado."""
    found = find_vcs_root(path, stop_at)
    if found is None:
        return None
    kind, root = found
    command = next(cmd for _, k, cmd in _VCS_KINDS if k == kind)
    result = runner.run(command, cwd=root, capture=True)
    return kind, result.stdout.strip()
