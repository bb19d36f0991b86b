# src/imagestage/backends/go.py
"""
Backend `go`: obtém e compila um projeto Go com `go get`.

Layout dentro do diretório de trabalho:
    <tmp>/gopath          → GOPATH "falso" (sempre no tmp)
    <tmp>/gopath/bin      → GOBIN, onde o binário é produzido
    <GOPATH>/src/<proj>   → código-fonte do projeto (repositório VCS)

O GOPATH real é `<tmp>/gopath` ou o valor de `go_path`. O build é estático
(`CGO_ENABLED=0`, tag `netgo`).

Placeholders: `<PROJPATH>`, `<GOPATH>`.
"""

from __future__ import annotations

import argparse
import os
import shutil
from typing import Any, Dict, List, Mapping

from imagestage.assets.spec import format_spec
from imagestage.core.exceptions import ConfigurationError
from imagestage.core.process import CommandRunner
from imagestage.core.staging import StagingConfig, StagingPaths
from imagestage.manifest.assembler import ANY_PACKAGE, derive_image_file_name, derive_image_name

from .binaries import select_binary


def project_name(project: str) -> str:
    if os.path.basename(project) != ANY_PACKAGE:
        return project
    return os.path.dirname(project)


class GoBackend:
    name = "go"

    def __init__(self, *, go_binary: str = "", go_path: str = ""):
        self.go_binary = go_binary
        self.go_path = go_path
        self.warnings: List[str] = []
        self.real_go_path = ""
        self.fake_go_path = ""
        self.go_root = ""
        self.go_bin = ""
        self.project_path = ""
        self._binary = ""

    def placeholder_mapping(self) -> Dict[str, str]:
        return {
            "<PROJPATH>": self.project_path,
            "<GOPATH>": self.real_go_path,
        }

    def validate(self, config: StagingConfig) -> None:
        if not self.go_binary:
            raise ConfigurationError(
                message="Go binary not found",
                details={"option": "go_binary"},
                hint="Instale o Go no PATH ou informe --go-binary.",
            )

    def setup_paths(self, paths: StagingPaths, config: StagingConfig) -> None:
        self.fake_go_path = os.path.join(paths.tmp_dir, "gopath")
        self.real_go_path = self.go_path or self.fake_go_path

        if os.environ.get("GOPATH"):
            self.warnings.append('GOPATH env var is ignored, use --go-path="$GOPATH" option instead')
        self.go_root = os.environ.get("GOROOT", "")
        if self.go_root:
            self.warnings.append(f"Overriding GOROOT env var to {self.go_root}")

        # project names are slash-separated regardless of the host OS
        self.project_path = os.path.join(
            self.real_go_path, "src", *project_name(config.project).split("/")
        )
        self.go_bin = os.path.join(self.fake_go_path, "bin")

    def directories_to_make(self) -> List[str]:
        return [self.fake_go_path, self.go_bin]

    def prepare_project(self, config: StagingConfig, paths: StagingPaths, runner: CommandRunner) -> None:
        args = [
            self.go_binary,
            "get",
            "-a",
            "-tags", "netgo",
            "-ldflags", "-w",
            "-installsuffix", "nocgo",
            config.project,
        ]
        env = {
            "GOPATH": self.real_go_path,
            "GOBIN": self.go_bin,
            "CGO_ENABLED": "0",
            "PATH": os.environ.get("PATH", ""),
        }
        if self.go_root:
            env["GOROOT"] = self.go_root
        runner.run(args, env=env)

    def find_binary(self, config: StagingConfig) -> str:
        self._binary = select_binary(self.go_bin, config.use_binary)
        return self._binary

    def binary_name(self) -> str:
        return self._binary

    def repo_path(self) -> str:
        return self.project_path

    def source_root(self) -> str:
        return os.path.join(self.real_go_path, "src")

    def assets(self, image_bin_dir: str) -> List[str]:
        return [
            format_spec(
                os.path.join(image_bin_dir, self._binary),
                os.path.join(self.go_bin, self._binary),
            )
        ]

    def excludes(self) -> List[str]:
        return []

    def image_name(self, config: StagingConfig) -> str:
        return derive_image_name(config.project, config.use_binary)

    def image_file_name(self, config: StagingConfig) -> str:
        return derive_image_file_name(config.project, config.use_binary)


class GoBackendFactory:
    name = "go"

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--go-binary",
            default=None,
            help="Go binary to use (default: whatever go in $PATH)",
        )
        parser.add_argument(
            "--go-path",
            default=None,
            help="Custom GOPATH (default: a temporary directory)",
        )

    def options_from_args(self, args: argparse.Namespace) -> Dict[str, Any]:
        options: Dict[str, Any] = {}
        if args.go_binary is not None:
            options["go_binary"] = args.go_binary
        if args.go_path is not None:
            options["go_path"] = args.go_path
        return options

    def create(self, options: Mapping[str, Any]) -> GoBackend:
        go_binary = options.get("go_binary") or shutil.which("go") or ""
        return GoBackend(go_binary=str(go_binary), go_path=str(options.get("go_path") or ""))
