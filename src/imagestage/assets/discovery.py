# src/imagestage/assets/discovery.py
"""
Descoberta de dependências de runtime de um arquivo copiado.

Para cada arquivo regular copiado para o rootfs, três heurísticas produzem
assets adicionais (sempre auto-mapeados: caminho na imagem == caminho local):

    - bibliotecas compartilhadas listadas por `ldd`
    - interpretador declarado no shebang (`#!`)
    - bibliotecas `libnss_*` vizinhas de `libc.*`, carregadas em runtime
      pela glibc e invisíveis ao `ldd`

Toda dependência encontrada passa pela perseguição de symlinks, de modo que
cada salto da cadeia também é copiado.

Erros:
    - `ldd` ausente → CommandNotFoundError (fatal)
    - `ldd` com status != 0 → nenhuma dependência (arquivo não dinâmico)
    - cadeia de symlinks acima do limite → SymlinkCycleError
"""

from __future__ import annotations

import fnmatch
import glob
import os
import re
import stat
from dataclasses import replace
from typing import List, Optional

from imagestage.core.exceptions import CommandFailedError, CommandNotFoundError, SymlinkCycleError
from imagestage.core.process import CommandRunner

from .spec import self_mapped

MAX_SYMLINK_HOPS = 100

SHEBANG = b"#!"

LDD_COMMAND = "ldd"

# tab, opcional "nome => ", caminho absoluto, endereço de carga entre parênteses
LDD_LINE = re.compile(r"^\t(?:\S+\s+=>\s+)?(/\S+)\s+\([0-9a-fA-Fx]+\)$", re.MULTILINE)

LIBC_PATTERN = "libc.*"
NSS_PATTERN = "libnss_*"


def chase_symlinks(path: str, *, max_hops: int = MAX_SYMLINK_HOPS) -> List[str]:
    """
    Retorna um asset auto-mapeado para cada salto da cadeia de symlinks.

    A cadeia termina no primeiro caminho que não é symlink ou que não existe
    (o alvo pode ser produzido por uma cópia posterior). Alvos relativos são
    resolvidos a partir do diretório do próprio link e normalizados, para que
    `a/../lib` e `lib` sejam o mesmo asset.

    Uma cadeia com N <= max_hops links produz N+1 assets.
    """
    assets: List[str] = []
    current = path
    for _ in range(max_hops + 1):
        assets.append(self_mapped(current))
        try:
            st = os.lstat(current)
        except FileNotFoundError:
            return assets
        if not stat.S_ISLNK(st.st_mode):
            return assets
        target = os.readlink(current)
        if os.path.isabs(target):
            current = target
        else:
            current = os.path.normpath(os.path.join(os.path.dirname(current), target))

    raise SymlinkCycleError(
        message=f"Too many levels of symlinks (>{max_hops})",
        details={"path": path, "max_hops": max_hops},
        hint="Verifique se a cadeia de symlinks forma um ciclo.",
    )


def parse_ldd_output(output: str) -> List[str]:
    """Extrai os caminhos absolutos de bibliotecas da tabela impressa pelo `ldd`."""
    return [m.group(1) for m in LDD_LINE.finditer(output) if m.group(1)]


def shared_library_assets(path: str, runner: CommandRunner) -> List[str]:
    try:
        result = runner.run([LDD_COMMAND, path], capture=True)
    except CommandFailedError:
        # "not a dynamic executable" e afins
        return []
    except CommandNotFoundError as e:
        raise replace(e, details={**e.details, "path": path}) from e

    assets: List[str] = []
    for lib in parse_ldd_output(result.stdout):
        assets.extend(chase_symlinks(lib))
    return assets


def read_interpreter(path: str) -> Optional[str]:
    """Caminho do interpretador declarado no shebang, ou None."""
    with open(path, "rb") as f:
        if f.read(2) != SHEBANG:
            return None
        line = f.readline()
    if not line.endswith(b"\n"):
        return None
    tokens = line.decode("utf-8", errors="surrogateescape").split()
    if not tokens:
        return None
    return tokens[0]


def interpreter_assets(path: str) -> List[str]:
    interpreter = read_interpreter(path)
    if interpreter is None:
        return []
    return chase_symlinks(interpreter)


def nss_assets(path: str) -> List[str]:
    if not fnmatch.fnmatchcase(os.path.basename(path), LIBC_PATTERN):
        return []
    pattern = os.path.join(glob.escape(os.path.dirname(path)), NSS_PATTERN)
    return [self_mapped(match) for match in sorted(glob.glob(pattern))]


def discover_dependencies(path: str, runner: CommandRunner) -> List[str]:
    """Todos os assets adicionais necessários para `path` funcionar em runtime."""
    assets = shared_library_assets(path, runner)
    assets.extend(interpreter_assets(path))
    assets.extend(nss_assets(path))
    return assets
