# src/imagestage/core/exceptions.py
"""
Exceções canônicas do ImageStage.

Toda falha de domínio do ImageStage é levantada como uma subclasse de
`ImageStageException`, carregando dados estruturados suficientes para
diagnóstico (o asset, o caminho ou o comando que falhou) e uma dica
opcional ao operador.

Princípios:
    - Mensagem curta e humana
    - Contexto sempre em `details` (nunca embutido apenas no texto)
    - Nenhuma exceção é re-tentada automaticamente

Limites explícitos:
    - Não serializa erros (ver `core.errors`)
    - Não imprime nada no terminal
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True, eq=False)
class ImageStageException(Exception):
    """Base class para exceções internas do ImageStage.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Configuração
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class ConfigurationError(ImageStageException):
    """Opções ausentes, conflitantes ou inválidas para a run."""


@dataclass(frozen=True, eq=False)
class BackendNotFoundError(ConfigurationError):
    """Nenhum backend registrado com o nome solicitado."""


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class MalformedAssetSpecError(ImageStageException):
    """Asset spec não possui exatamente dois caminhos."""


@dataclass(frozen=True, eq=False)
class NonAbsoluteAssetPathError(ImageStageException):
    """Uma das metades do asset não é absoluta após substituição."""


@dataclass(frozen=True, eq=False)
class AssetNotFoundError(ImageStageException):
    """Caminho local do asset não existe ou não pode ser lido."""


@dataclass(frozen=True, eq=False)
class UnsupportedNodeError(ImageStageException):
    """Nó do filesystem que não é diretório, arquivo regular nem symlink."""


@dataclass(frozen=True, eq=False)
class AssetCopyError(ImageStageException):
    """Falha de I/O durante a cópia de um asset."""


@dataclass(frozen=True, eq=False)
class SymlinkCycleError(ImageStageException):
    """Cadeia de symlinks excedeu o limite de saltos."""


# ---------------------------------------------------------------------------
# Filesystem / processos externos
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class DirectoryCreationError(ImageStageException):
    """Falha ao criar ou limpar diretórios de staging."""


@dataclass(frozen=True, eq=False)
class CommandNotFoundError(ImageStageException):
    """Executável externo não encontrado (erro de configuração do host)."""


@dataclass(frozen=True, eq=False)
class CommandFailedError(ImageStageException):
    """Executável externo terminou com status diferente de zero."""

    returncode: int = 1


# ---------------------------------------------------------------------------
# Seleção de binário
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class NoBinariesFoundError(ImageStageException):
    """Diretório de binários não contém nenhum executável."""


@dataclass(frozen=True, eq=False)
class AmbiguousBinariesError(ImageStageException):
    """Vários binários encontrados e nenhum seletor informado."""


@dataclass(frozen=True, eq=False)
class BinaryNotFoundError(ImageStageException):
    """Binário pedido pelo seletor não existe no diretório."""


@dataclass(frozen=True, eq=False)
class BinaryDirectoryNotFoundError(ImageStageException):
    """Nenhum diretório de binários encontrado na instalação."""


# ---------------------------------------------------------------------------
# Manifest / imagem
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class ManifestError(ImageStageException):
    """Manifest da imagem não pôde ser construído."""


@dataclass(frozen=True, eq=False)
class ImageWriteError(ImageStageException):
    """Falha ao escrever o artefato final da imagem."""
