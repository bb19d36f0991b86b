"""
Seleção do binário a empacotar dentre os produzidos pelo build.
"""

from __future__ import annotations

import os
from typing import List

from imagestage.core.exceptions import (
    AmbiguousBinariesError,
    BinaryNotFoundError,
    NoBinariesFoundError,
)


def list_binaries(bin_dir: str) -> List[str]:
    names = []
    for name in sorted(os.listdir(bin_dir)):
        if os.path.isfile(os.path.join(bin_dir, name)):
            names.append(name)
    return names


def select_binary(bin_dir: str, use_binary: str = "") -> str:
    """
    Escolhe o binário em `bin_dir`.

    Raises:
        NoBinariesFoundError: diretório sem arquivos (ou inexistente).
        BinaryNotFoundError: `use_binary` informado mas ausente.
        AmbiguousBinariesError: vários binários e nenhum seletor.
    """
    try:
        names = list_binaries(bin_dir)
    except FileNotFoundError:
        names = []

    if not names:
        raise NoBinariesFoundError(
            message=f"No binaries found in {bin_dir}",
            details={"bin_dir": bin_dir},
            hint="Verifique se o build do projeto produziu algum executável.",
        )

    if use_binary:
        if use_binary not in names:
            raise BinaryNotFoundError(
                message=f"No such binary found in {bin_dir}: {use_binary!r}",
                details={"bin_dir": bin_dir, "use_binary": use_binary, "found": names},
                hint=f"Binários disponíveis: {', '.join(names)}",
            )
        return use_binary

    if len(names) > 1:
        raise AmbiguousBinariesError(
            message=f"Found multiple binaries in {bin_dir}",
            details={"bin_dir": bin_dir, "found": names},
            hint=f"Escolha um com --use-binary: {', '.join(names)}",
        )
    return names[0]
