# src/imagestage/core/staging.py
"""
Estruturas de configuração e layout de uma run de staging.

    - StagingConfig → opções da run (projeto, assets, exec, diretórios)
    - StagingPaths  → layout resolvido do diretório de trabalho

Ambas pertencem ao pipeline durante uma run; etapas e o AssetResolver as
recebem por referência e nunca alteram a configuração.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from .exceptions import ConfigurationError

IMAGE_DIR_NAME = "aci"
ROOTFS_DIR_NAME = "rootfs"

_LIST_KEYS = ("exec_args", "assets", "excludes")
_STR_KEYS = ("project", "use_binary", "tmp_dir", "reuse_tmp_dir", "output_dir")


@dataclass
class StagingConfig:
    """
    Configuração de uma run de staging.

    Campos:
        - project: identificador do projeto (obrigatório para validar)
        - exec_args: argumentos extras anexados ao entrypoint
        - use_binary: seletor explícito do binário a empacotar
        - assets: asset specs adicionais informados pelo usuário
        - excludes: caminhos locais (com placeholders) a não copiar
        - keep_tmp_dir: preserva o diretório de trabalho ao final
        - tmp_dir: diretório de trabalho explícito
        - reuse_tmp_dir: diretório de trabalho existente com projeto já construído
        - output_dir: onde escrever o artefato da imagem
        - backend_options: opções livres consumidas pelo backend ativo
    """

    project: str = ""
    exec_args: List[str] = field(default_factory=list)
    use_binary: str = ""
    assets: List[str] = field(default_factory=list)
    excludes: List[str] = field(default_factory=list)
    keep_tmp_dir: bool = False
    tmp_dir: str = ""
    reuse_tmp_dir: str = ""
    output_dir: str = "."
    backend_options: Dict[str, Any] = field(default_factory=dict)

    @property
    def reusing(self) -> bool:
        return bool(self.reuse_tmp_dir)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StagingConfig":
        """Constrói a configuração a partir da seção `staging` já resolvida.

        Chaves desconhecidas são rejeitadas; valores `None` assumem o default.
        """
        known = set(_LIST_KEYS) | set(_STR_KEYS) | {"keep_tmp_dir", "backend_options"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                message=f"Unknown staging options: {', '.join(unknown)}",
                details={"unknown": unknown},
                hint="Remova as chaves desconhecidas da seção `staging` da configuração.",
            )

        kwargs: Dict[str, Any] = {}
        for key in _LIST_KEYS:
            value = data.get(key)
            if value is None:
                continue
            if not isinstance(value, list):
                raise ConfigurationError(
                    message=f"Option '{key}' must be a list",
                    details={"option": key, "received": type(value).__name__},
                )
            kwargs[key] = [str(v) for v in value]
        for key in _STR_KEYS:
            value = data.get(key)
            if value is not None:
                kwargs[key] = str(value)
        if data.get("keep_tmp_dir") is not None:
            kwargs["keep_tmp_dir"] = bool(data["keep_tmp_dir"])
        if data.get("backend_options") is not None:
            kwargs["backend_options"] = dict(data["backend_options"])
        return cls(**kwargs)


@dataclass
class StagingPaths:
    """
    Layout resolvido do diretório de trabalho de uma run.

        <tmp_dir>/               → raiz de trabalho (build do backend + staging)
        <tmp_dir>/aci/           → diretório de staging da imagem
        <tmp_dir>/aci/rootfs/    → root filesystem da imagem
    """

    tmp_dir: str
    image_dir: str
    rootfs: str

    @classmethod
    def for_root(cls, tmp_dir: str) -> "StagingPaths":
        image_dir = os.path.join(tmp_dir, IMAGE_DIR_NAME)
        return cls(
            tmp_dir=tmp_dir,
            image_dir=image_dir,
            rootfs=os.path.join(image_dir, ROOTFS_DIR_NAME),
        )
