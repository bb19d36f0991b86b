"""
Exceções canônicas da camada de configuração do ImageStage.

Estas exceções representam violações estruturais dos arquivos de
configuração (ausência, formato, tipo do root, conflitos de merge) e não
erros de staging.
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados a arquivos de configuração.

    Limites explícitos:
        - Não representa erro de staging nem de opções da run
          (ver `core.exceptions.ConfigurationError`)
    """


class ConfigFileNotFoundError(ConfigError):
    """
    Exceção levantada quando o arquivo de configuração base não existe
    no caminho especificado.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo de configuração
    não é suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz da configuração
    não é um dicionário (`dict`).
    """


class ConfigTypeConflictError(ConfigError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"staging": {"keep_tmp_dir": true}}
        - override: {"staging": "yes"}
    """
