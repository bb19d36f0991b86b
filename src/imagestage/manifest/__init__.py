"""
Manifest da imagem: schema, proveniência VCS e montagem.
"""

from .assembler import (
    assemble_manifest,
    derive_image_file_name,
    derive_image_name,
    host_arch,
    host_os,
)
from .schema import App, ImageManifest, InvalidACNameError, Label, validate_ac_name

__all__ = [
    "App",
    "ImageManifest",
    "InvalidACNameError",
    "Label",
    "assemble_manifest",
    "derive_image_file_name",
    "derive_image_name",
    "host_arch",
    "host_os",
    "validate_ac_name",
]
