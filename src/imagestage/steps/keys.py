"""Chaves do artifact store compartilhadas pelas etapas de staging."""

CONFIG = "staging.config"
PATHS = "staging.paths"
BINARY = "project.binary"
ASSET_COUNT = "assets.processed"
MANIFEST = "image.manifest"
OUTPUT = "image.output"
