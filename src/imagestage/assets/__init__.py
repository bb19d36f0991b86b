"""
Assets: specs, placeholders, descoberta de dependências e cópia para o rootfs.
"""

from .discovery import MAX_SYMLINK_HOPS, chase_symlinks, discover_dependencies
from .placeholders import substitute
from .resolver import AssetResolver, resolve_and_copy
from .spec import SEPARATOR, AssetSpec, format_spec, parse_spec, self_mapped, split_spec

__all__ = [
    "AssetResolver",
    "AssetSpec",
    "MAX_SYMLINK_HOPS",
    "SEPARATOR",
    "chase_symlinks",
    "discover_dependencies",
    "format_spec",
    "parse_spec",
    "resolve_and_copy",
    "self_mapped",
    "split_spec",
    "substitute",
]
