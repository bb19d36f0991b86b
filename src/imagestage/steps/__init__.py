"""
Etapas canônicas do pipeline de staging, na ordem de execução:

    validate → paths.setup → paths.make_directories → project.prepare →
    assets.copy → manifest.assemble → image.write
"""

from .copy_assets import CopyAssetsStep
from .manifest import AssembleManifestStep
from .paths import MakeDirectoriesStep, SetupPathsStep
from .prepare import PrepareProjectStep
from .validate import ValidateStep, validate_config
from .write_image import WriteImageStep

__all__ = [
    "ValidateStep",
    "validate_config",
    "SetupPathsStep",
    "MakeDirectoriesStep",
    "PrepareProjectStep",
    "CopyAssetsStep",
    "AssembleManifestStep",
    "WriteImageStep",
]
