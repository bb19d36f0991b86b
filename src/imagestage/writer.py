# src/imagestage/writer.py
"""
Escrita do artefato final da imagem.

O pipeline conhece apenas o protocolo `ImageWriter`: recebe o manifest e o
diretório de staging (`<tmp>/aci`, contendo `rootfs/`) e produz um único
arquivo. `TarImageWriter` é a implementação padrão: tar comprimido com
gzip contendo o arquivo `manifest` (JSON) e a árvore `rootfs/`.
"""

from __future__ import annotations

import io
import json
import os
import tarfile
from typing import Protocol, runtime_checkable

from imagestage.core.exceptions import ImageWriteError
from imagestage.manifest.schema import ImageManifest

MANIFEST_ENTRY = "manifest"


@runtime_checkable
class ImageWriter(Protocol):
    def write(self, manifest: ImageManifest, image_dir: str, output_path: str) -> str:
        """Escreve a imagem e retorna o caminho do arquivo produzido."""
        ...


class TarImageWriter:
    """Escreve `manifest` + `rootfs/` em um tar.gz."""

    def write(self, manifest: ImageManifest, image_dir: str, output_path: str) -> str:
        data = json.dumps(manifest.to_dict(), indent=2, sort_keys=True).encode("utf-8")
        try:
            with tarfile.open(output_path, "w:gz") as tar:
                info = tarfile.TarInfo(MANIFEST_ENTRY)
                info.size = len(data)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(data))
                for name in sorted(os.listdir(image_dir)):
                    if name == MANIFEST_ENTRY:
                        continue
                    tar.add(os.path.join(image_dir, name), arcname=name, filter=_root_owned)
        except OSError as e:
            raise ImageWriteError(
                message=f"Error writing image file {output_path}: {e}",
                details={"output_path": output_path, "image_dir": image_dir},
            ) from e
        return output_path


def _root_owned(info: tarfile.TarInfo) -> tarfile.TarInfo:
    # the builder's uid/gid must not leak into the image
    info.uid = info.gid = 0
    info.uname = info.gname = "root"
    return info
