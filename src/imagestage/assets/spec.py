"""
Codec de asset specs.

Um asset spec é a string `<caminho na imagem><SEP><caminho local>`, onde
`SEP` é o separador de listas de caminhos do host (`os.pathsep`).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Tuple

from imagestage.core.exceptions import MalformedAssetSpecError

SEPARATOR = os.pathsep


@dataclass(frozen=True)
class AssetSpec:
    """Par (caminho na imagem, caminho local) de um asset."""

    image_path: str
    local_path: str

    def __str__(self) -> str:
        return format_spec(self.image_path, self.local_path)


def format_spec(image_path: str, local_path: str) -> str:
    return f"{image_path}{SEPARATOR}{local_path}"


def self_mapped(path: str) -> str:
    """Asset cujo caminho na imagem é igual ao caminho local."""
    return format_spec(path, path)


def split_spec(spec: str) -> Tuple[str, str]:
    """Divide o spec em exatamente duas metades, sem tocar no filesystem."""
    parts: List[str] = spec.split(SEPARATOR) if spec else []
    if len(parts) != 2:
        raise MalformedAssetSpecError(
            message=(
                f"Malformed asset option: {spec!r} - expected two absolute paths "
                f"separated with {SEPARATOR!r}"
            ),
            details={"spec": spec, "parts": len(parts)},
            hint=f"Use o formato <caminho na imagem>{SEPARATOR}<caminho local>.",
        )
    return parts[0], parts[1]


def parse_spec(spec: str) -> AssetSpec:
    image_path, local_path = split_spec(spec)
    return AssetSpec(image_path=image_path, local_path=local_path)
