# src/imagestage/manifest/assembler.py
"""
Montagem do manifest da imagem.

O manifest reúne:
    - nome da imagem, derivado do identificador do projeto
    - entrypoint: `/<binário>` seguido dos argumentos extras do usuário
    - identidade fixa de superusuário (user/group "0")
    - labels `arch` e `os` do host
    - label opcional de proveniência VCS (nome = tipo do VCS, valor = revisão)

Decisões arquiteturais:
    - Nome de imagem inválido é erro fatal (ManifestError)
    - Label VCS inválida ou indisponível gera warning e é omitida
"""

from __future__ import annotations

import os
import platform
import sys
from typing import Callable, List, Optional, Sequence

from imagestage.core.exceptions import CommandFailedError, CommandNotFoundError, ManifestError
from imagestage.core.process import CommandRunner

from .schema import App, ImageManifest, InvalidACNameError, Label
from .vcs import get_vcs_info

ENTRYPOINT_DIR = "/"
IMAGE_EXTENSION = ".aci"
ANY_PACKAGE = "..."

_ARCH_NAMES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv6l": "arm",
    "armv7l": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}

WarnFn = Callable[[str], None]


def host_arch() -> str:
    machine = platform.machine().lower()
    return _ARCH_NAMES.get(machine, machine)


def host_os() -> str:
    for prefix in ("linux", "darwin", "freebsd"):
        if sys.platform.startswith(prefix):
            return prefix
    if sys.platform.startswith(("win32", "cygwin")):
        return "windows"
    return sys.platform


def derive_image_name(project: str, use_binary: str = "") -> str:
    """
    Nome da imagem a partir do projeto.

    `host/org/repo/...` denota "qualquer binário" do local; o nome usa o
    diretório pai e, quando houver seletor, acrescenta `-<binário>`.
    """
    name = project
    if os.path.basename(name) == ANY_PACKAGE:
        name = os.path.dirname(name)
        if use_binary:
            name += "-" + use_binary
    return name


def derive_image_file_name(project: str, use_binary: str = "") -> str:
    base = os.path.basename(project)
    if base == ANY_PACKAGE:
        base = os.path.basename(os.path.dirname(project))
        if use_binary:
            base += "-" + use_binary
    return base + IMAGE_EXTENSION


def build_entrypoint(binary_name: str, exec_args: Sequence[str]) -> List[str]:
    return [os.path.join(ENTRYPOINT_DIR, binary_name), *exec_args]


def vcs_label(
    repo_path: str,
    runner: CommandRunner,
    warn: Optional[WarnFn] = None,
    source_root: str = "",
) -> Optional[Label]:
    if not repo_path:
        return None
    try:
        info = get_vcs_info(repo_path, runner, stop_at=source_root)
    except (CommandNotFoundError, CommandFailedError) as e:
        if warn is not None:
            warn(f"Failed to get VCS info for {repo_path}: {e.message}")
        return None
    if info is None:
        return None
    kind, revision = info
    try:
        return Label(name=kind, value=revision)
    except InvalidACNameError as e:
        if warn is not None:
            warn(f"Invalid VCS label, omitting it: {e}")
        return None


def assemble_manifest(
    *,
    image_name: str,
    binary_name: str,
    exec_args: Sequence[str],
    repo_path: str = "",
    source_root: str = "",
    runner: Optional[CommandRunner] = None,
    warn: Optional[WarnFn] = None,
) -> ImageManifest:
    if not binary_name:
        raise ManifestError(
            message="No binary selected for the image entrypoint",
            details={"image_name": image_name},
        )

    try:
        labels = [Label("arch", host_arch()), Label("os", host_os())]
    except InvalidACNameError as e:
        raise ManifestError(message=str(e), details={"labels": ["arch", "os"]}) from e

    label = vcs_label(repo_path, runner or CommandRunner(), warn, source_root)
    if label is not None:
        labels.append(label)

    app = App(exec=build_entrypoint(binary_name, exec_args))
    try:
        return ImageManifest(name=image_name, app=app, labels=labels)
    except InvalidACNameError as e:
        raise ManifestError(
            message=f"Invalid image name: {e}",
            details={"image_name": image_name},
            hint="Use um identificador de projeto em minúsculas ou ajuste --use-binary.",
        ) from e
