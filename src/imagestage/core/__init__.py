"""
Core do ImageStage.

Este pacote reúne as responsabilidades independentes de backend e de CLI:

    - core.config     → carregamento e merge de arquivos de configuração
    - core.staging    → StagingConfig e StagingPaths
    - core.pipeline   → protocolo de etapa, RunContext e registro de etapas
    - core.engine     → planejamento e execução fail-fast das etapas
    - core.process    → execução de programas externos
    - core.exceptions → taxonomia de exceções tipadas
    - core.errors     → payloads de erro serializáveis
"""
