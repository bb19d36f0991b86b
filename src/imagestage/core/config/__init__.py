"""
Camada de configuração do ImageStage.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (base + overrides locais)
    - Resolução de configuração final via deep-merge determinístico

Princípios fundamentais:
    - Configuração não contém lógica de staging
    - Overrides são sempre explícitos
    - A mesma entrada sempre produz a mesma configuração final

A conversão do dicionário resolvido em `StagingConfig` vive em
`imagestage.core.staging`.
"""

from .errors import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigTypeConflictError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .loader import load_config
from .merge import deep_merge

__all__ = [
    "load_config",
    "deep_merge",
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigTypeConflictError",
    "InvalidConfigRootTypeError",
    "UnsupportedConfigFormatError",
]
