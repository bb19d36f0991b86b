# src/imagestage/manifest/schema.py
"""
Schema mínimo do manifest de imagem (formato appc ImageManifest).

Define apenas o necessário para o pipeline: nome validado, app
(entrypoint + identidade) e labels. A serialização em JSON segue as
chaves do formato appc (`acKind`, `acVersion`, `name`, `labels`, `app`).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List

AC_KIND = "ImageManifest"
AC_VERSION = "0.8.11"

ROOT_USER = "0"
ROOT_GROUP = "0"

_AC_NAME = re.compile(r"^[a-z0-9]+([-._~/][a-z0-9]+)*$")


class InvalidACNameError(ValueError):
    """Nome não satisfaz a regra de nomes do manifest."""


def validate_ac_name(name: str) -> str:
    """Retorna `name` se for um nome válido; levanta InvalidACNameError caso contrário."""
    if not isinstance(name, str) or not _AC_NAME.match(name):
        raise InvalidACNameError(
            f"{name!r} is not a valid name: must contain only lowercase "
            "alphanumerics separated by '-', '.', '_', '~' or '/'"
        )
    return name


@dataclass(frozen=True)
class Label:
    name: str
    value: str

    def __post_init__(self) -> None:
        validate_ac_name(self.name)

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class App:
    exec: List[str]
    user: str = ROOT_USER
    group: str = ROOT_GROUP

    def to_dict(self) -> Dict[str, Any]:
        return {"exec": list(self.exec), "user": self.user, "group": self.group}


@dataclass(frozen=True)
class ImageManifest:
    name: str
    app: App
    labels: List[Label] = field(default_factory=list)

    def __post_init__(self) -> None:
        validate_ac_name(self.name)

    def label(self, name: str) -> str:
        for lbl in self.labels:
            if lbl.name == name:
                return lbl.value
        raise KeyError(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "acKind": AC_KIND,
            "acVersion": AC_VERSION,
            "name": self.name,
            "labels": [lbl.to_dict() for lbl in self.labels],
            "app": self.app.to_dict(),
        }
