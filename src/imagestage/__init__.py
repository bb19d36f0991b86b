"""
ImageStage: constrói um projeto e monta, com suas dependências de runtime,
o root filesystem e o manifest de uma imagem de container.
"""

__version__ = "0.1.0"
