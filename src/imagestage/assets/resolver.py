# src/imagestage/assets/resolver.py
"""
Resolução do fecho de dependências de assets e cópia para o rootfs.

Este módulo implementa o `AssetResolver`, responsável por transformar uma
lista de asset specs ("coloque este caminho local neste caminho da imagem")
no conjunto completo de arquivos necessários em runtime, copiando-os para
o root filesystem da imagem.

Algoritmo (worklist até ponto fixo):
    1. Excludes recebem substituição de placeholders uma única vez.
    2. A worklist começa com os specs de entrada; o conjunto de processados
       começa vazio.
    3. Cada spec retirado da worklist é descartado se já foi processado
       (garante término mesmo com dependências cíclicas entre bibliotecas);
       caso contrário é marcado e processado.
    4. O processamento valida o spec, copia a árvore local para o rootfs e
       devolve os assets descobertos, que voltam para a worklist.

Decisões arquiteturais:
    - A deduplicação usa o spec *bruto* (antes da substituição)
    - A travessia é pré-ordem, em profundidade, com filhos em ordem de nome
    - Symlinks são recriados com o alvo original, sem resolução
    - Apenas arquivos regulares disparam descoberta de dependências

Invariantes:
    - Cada spec bruto é processado no máximo uma vez
    - Nenhum nó excluído (nem subárvore de diretório excluído) é copiado
    - Bits de permissão de arquivos e diretórios são preservados

Limites explícitos:
    - Não altera StagingConfig
    - Não resolve dependências entre arquiteturas
    - Não tenta novamente operações que falharam
"""

from __future__ import annotations

import os
import shutil
import stat
from collections import deque
from dataclasses import replace
from typing import Callable, Deque, Iterable, List, Mapping, Optional, Set

from imagestage.core.exceptions import (
    AssetCopyError,
    AssetNotFoundError,
    ImageStageException,
    NonAbsoluteAssetPathError,
    UnsupportedNodeError,
)
from imagestage.core.process import CommandRunner

from .discovery import discover_dependencies
from .placeholders import substitute
from .spec import parse_spec

LogFn = Callable[..., None]


def _is_supported(mode: int) -> bool:
    return stat.S_ISDIR(mode) or stat.S_ISREG(mode) or stat.S_ISLNK(mode)


class AssetResolver:
    """
    Copia assets para o rootfs seguindo o fecho de dependências de runtime.

    Args:
        dest_root: root filesystem da imagem.
        mapping: placeholders do backend ativo.
        excludes: caminhos locais (com placeholders) a não copiar.
        runner: executor de comandos usado pelo `ldd`.
        log: callback opcional `log(level=..., message=..., **extra)`.
    """

    def __init__(
        self,
        *,
        dest_root: str,
        mapping: Mapping[str, str],
        excludes: Iterable[str] = (),
        runner: Optional[CommandRunner] = None,
        log: Optional[LogFn] = None,
    ):
        self.dest_root = dest_root
        self.mapping = dict(mapping)
        self.excludes: Set[str] = {substitute(ex, self.mapping) for ex in excludes}
        self.runner = runner or CommandRunner()
        self._log = log
        self.processed: Set[str] = set()

    def _debug(self, message: str, **extra) -> None:
        if self._log is not None:
            self._log(level="debug", message=message, **extra)

    # ------------------------------------------------------------------
    # Worklist
    # ------------------------------------------------------------------
    def resolve(self, specs: Iterable[str]) -> int:
        """Processa os specs até o ponto fixo; retorna quantos foram processados."""
        worklist: Deque[str] = deque(specs)
        while worklist:
            spec = worklist.popleft()
            if spec in self.processed:
                self._debug("asset already processed", asset=spec)
                continue
            self.processed.add(spec)
            self._debug("processing asset", asset=spec)
            worklist.extend(self.process_one(spec))
        return len(self.processed)

    # ------------------------------------------------------------------
    # Um asset
    # ------------------------------------------------------------------
    def process_one(self, spec: str) -> List[str]:
        asset = parse_spec(spec)
        image_path = substitute(asset.image_path, self.mapping)
        local_path = substitute(asset.local_path, self.mapping)
        self._validate(spec, image_path, local_path)

        target = os.path.join(self.dest_root, image_path.lstrip(os.sep))
        parent = os.path.dirname(target)
        try:
            os.makedirs(parent, mode=0o755, exist_ok=True)
        except OSError as e:
            raise AssetCopyError(
                message=f"Failed to create directory tree for asset {spec!r}: {e}",
                details={"spec": spec, "path": parent},
            ) from e

        discovered: List[str] = []
        try:
            self._copy_node(local_path, target, discovered)
        except ImageStageException as e:
            details = {"path": local_path, **e.details, "spec": spec}
            raise replace(e, details=details) from e
        except OSError as e:
            raise AssetCopyError(
                message=f"Failed to copy assets for {spec!r}: {e}",
                details={"spec": spec, "path": getattr(e, "filename", None) or local_path},
            ) from e
        return discovered

    def _validate(self, spec: str, image_path: str, local_path: str) -> None:
        if not os.path.isabs(image_path):
            raise NonAbsoluteAssetPathError(
                message=f"Wrong image asset: {image_path!r} - image asset has to be absolute path",
                details={"spec": spec, "path": image_path},
            )
        if not os.path.isabs(local_path):
            raise NonAbsoluteAssetPathError(
                message=f"Wrong local asset: {local_path!r} - local asset has to be absolute path",
                details={"spec": spec, "path": local_path},
            )
        try:
            st = os.lstat(local_path)
        except OSError as e:
            raise AssetNotFoundError(
                message=f"Error stating {local_path}: {e.strerror or e}",
                details={"spec": spec, "path": local_path},
            ) from e
        if not _is_supported(st.st_mode):
            raise UnsupportedNodeError(
                message=f"Can't handle local asset {local_path} - not a file, not a dir, not a symlink",
                details={"spec": spec, "path": local_path, "mode": stat.filemode(st.st_mode)},
            )

    def _copy_node(self, src: str, dest: str, discovered: List[str]) -> None:
        if src in self.excludes:
            self._debug("asset excluded", path=src)
            return

        st = os.lstat(src)
        mode = st.st_mode
        if stat.S_ISDIR(mode):
            # owner-writable until the children are in place
            os.mkdir(dest, 0o700)
            for name in sorted(os.listdir(src)):
                self._copy_node(os.path.join(src, name), os.path.join(dest, name), discovered)
            os.chmod(dest, stat.S_IMODE(mode))
        elif stat.S_ISREG(mode):
            shutil.copyfile(src, dest, follow_symlinks=False)
            os.chmod(dest, stat.S_IMODE(mode))
            discovered.extend(discover_dependencies(src, self.runner))
        elif stat.S_ISLNK(mode):
            os.symlink(os.readlink(src), dest)
        else:
            raise UnsupportedNodeError(
                message=(
                    f"Unsupported node {src!r} in assets, only regular files, "
                    "directories and symlinks are supported."
                ),
                details={"path": src, "mode": stat.filemode(mode)},
            )


def resolve_and_copy(
    specs: Iterable[str],
    dest_root: str,
    mapping: Mapping[str, str],
    excludes: Iterable[str] = (),
    *,
    runner: Optional[CommandRunner] = None,
    log: Optional[LogFn] = None,
) -> int:
    """Atalho funcional para `AssetResolver(...).resolve(specs)`."""
    resolver = AssetResolver(
        dest_root=dest_root,
        mapping=mapping,
        excludes=excludes,
        runner=runner,
        log=log,
    )
    return resolver.resolve(specs)
