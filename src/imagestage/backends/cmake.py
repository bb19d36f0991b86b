# src/imagestage/backends/cmake.py
"""
Backend `cmake`: clona, configura, compila e instala um projeto CMake.

Layout dentro do diretório de trabalho:
    <tmp>/src      → clone raso do repositório (ou `reuse_src_dir`)
    <tmp>/build    → diretório de build do cmake
    <tmp>/install  → DESTDIR do `make install`

Placeholders: `<SRCPATH>`, `<BUILDPATH>`, `<INSTALLPATH>`.
"""

from __future__ import annotations

import argparse
import os
from typing import Any, Dict, List, Mapping, Sequence

from imagestage.assets.spec import format_spec
from imagestage.core.exceptions import BinaryDirectoryNotFoundError, ConfigurationError
from imagestage.core.process import CommandRunner
from imagestage.core.staging import StagingConfig, StagingPaths
from imagestage.manifest.assembler import derive_image_file_name, derive_image_name

from .binaries import select_binary

DEFAULT_BIN_DIRS = (
    "/usr/local/sbin",
    "/usr/local/bin",
    "/usr/sbin",
    "/usr/bin",
    "/sbin",
    "/bin",
)


class CmakeBackend:
    name = "cmake"

    def __init__(
        self,
        *,
        binary_dir: str = "",
        reuse_src_dir: str = "",
        cmake_params: Sequence[str] = (),
    ):
        self.binary_dir = binary_dir
        self.reuse_src_dir = reuse_src_dir
        self.cmake_params = list(cmake_params)
        self.src = ""
        self.build = ""
        self.install = ""
        self.full_bin_path = ""

    def placeholder_mapping(self) -> Dict[str, str]:
        return {
            "<SRCPATH>": self.src,
            "<BUILDPATH>": self.build,
            "<INSTALLPATH>": self.install,
        }

    def validate(self, config: StagingConfig) -> None:
        if self.reuse_src_dir and not os.path.isdir(self.reuse_src_dir):
            raise ConfigurationError(
                message=f"Invalid source dir to reuse: {self.reuse_src_dir}",
                details={"option": "reuse_src_dir", "path": self.reuse_src_dir},
            )

    def setup_paths(self, paths: StagingPaths, config: StagingConfig) -> None:
        self.src = self.reuse_src_dir or os.path.join(paths.tmp_dir, "src")
        self.build = os.path.join(paths.tmp_dir, "build")
        self.install = os.path.join(paths.tmp_dir, "install")

    def directories_to_make(self) -> List[str]:
        dirs = [self.build, self.install]
        if not self.reuse_src_dir:
            dirs.insert(0, self.src)
        return dirs

    def prepare_project(self, config: StagingConfig, paths: StagingPaths, runner: CommandRunner) -> None:
        if not self.reuse_src_dir:
            runner.run(["git", "clone", "--depth=1", f"https://{config.project}", self.src])
        runner.run(["cmake", self.src, *self.cmake_params], cwd=self.build)
        runner.run(["make", f"-j{os.cpu_count() or 1}"], cwd=self.build)
        env = dict(os.environ)
        env["DESTDIR"] = self.install
        runner.run(["make", "install"], env=env, cwd=self.build)

    def bin_dir(self) -> str:
        if self.binary_dir:
            return os.path.join(self.install, self.binary_dir.lstrip("/"))
        for candidate in DEFAULT_BIN_DIRS:
            path = os.path.join(self.install, candidate.lstrip("/"))
            if os.path.isdir(path):
                return path
        raise BinaryDirectoryNotFoundError(
            message="Could not find any bin directory",
            details={"install": self.install, "searched": list(DEFAULT_BIN_DIRS)},
            hint="Informe o diretório dos binários com --binary-dir.",
        )

    def find_binary(self, config: StagingConfig) -> str:
        bin_dir = self.bin_dir()
        binary = select_binary(bin_dir, config.use_binary)
        self.full_bin_path = os.path.join(bin_dir, binary)
        return binary

    def binary_name(self) -> str:
        return os.path.basename(self.full_bin_path)

    def repo_path(self) -> str:
        return self.src

    def source_root(self) -> str:
        return self.src

    def assets(self, image_bin_dir: str) -> List[str]:
        return [format_spec(os.path.join(image_bin_dir, self.binary_name()), self.full_bin_path)]

    def excludes(self) -> List[str]:
        return []

    def image_name(self, config: StagingConfig) -> str:
        return derive_image_name(config.project, config.use_binary)

    def image_file_name(self, config: StagingConfig) -> str:
        return derive_image_file_name(config.project, config.use_binary)


class CmakeBackendFactory:
    name = "cmake"

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--binary-dir",
            default=None,
            help=(
                "Look for binaries in this directory (relative to install path, eg passing "
                "/usr/local/mysql/bin would look for a binary in <tmpdir>/install/usr/local/mysql/bin)"
            ),
        )
        parser.add_argument(
            "--reuse-src-dir",
            default=None,
            help="Instead of downloading a project, use this path with already downloaded sources",
        )
        parser.add_argument(
            "--cmake-param",
            action="append",
            default=None,
            dest="cmake_params",
            help="Parameters passed to cmake, can be used multiple times",
        )

    def options_from_args(self, args: argparse.Namespace) -> Dict[str, Any]:
        options: Dict[str, Any] = {}
        if args.binary_dir is not None:
            options["binary_dir"] = args.binary_dir
        if args.reuse_src_dir is not None:
            options["reuse_src_dir"] = args.reuse_src_dir
        if args.cmake_params is not None:
            options["cmake_params"] = list(args.cmake_params)
        return options

    def create(self, options: Mapping[str, Any]) -> CmakeBackend:
        return CmakeBackend(
            binary_dir=str(options.get("binary_dir") or ""),
            reuse_src_dir=str(options.get("reuse_src_dir") or ""),
            cmake_params=[str(p) for p in options.get("cmake_params") or []],
        )
