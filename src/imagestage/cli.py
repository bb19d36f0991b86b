# src/imagestage/cli.py
"""
Entry point de linha de comando.

    imagestage <backend> [opções comuns] [opções do backend] PROJECT

A configuração efetiva de uma run é resolvida em camadas:
    1. `--config` (base) + `--local-config` (overrides), via `load_config`
    2. valores informados na linha de comando (sempre vencem)

A seção `staging` resultante vira um `StagingConfig`; as demais seções
(`steps`, `engine`) seguem para o Engine como estão.

Códigos de saída:
    0 → imagem escrita
    1 → qualquer erro do ImageStage (configuração, build, staging, escrita)
"""

from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, Optional, Sequence, TextIO

from imagestage.backends.base import BackendFactory
from imagestage.backends.registry import BackendRegistry, build_default_registry
from imagestage.core.config import ConfigError, deep_merge, load_config
from imagestage.core.exceptions import ConfigurationError, ImageStageException
from imagestage.core.pipeline.context import EventSink
from imagestage.core.staging import StagingConfig
from imagestage.pipeline import StagingPipeline

PROG = "imagestage"


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--exec",
        action="append",
        default=None,
        dest="exec_args",
        metavar="ARG",
        help="Parameters passed to app, can be used multiple times",
    )
    parser.add_argument(
        "--use-binary",
        default=None,
        help="Which executable to put in the image",
    )
    parser.add_argument(
        "--asset",
        action="append",
        default=None,
        dest="assets",
        metavar="SPEC",
        help="Additional assets, can be used multiple times; format: <path in image>"
        "<list separator><local path>; placeholders like <PROJPATH> are substituted",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        dest="excludes",
        metavar="PATH",
        help="Local path (placeholders allowed) not to copy into the image, can be used multiple times",
    )
    parser.add_argument(
        "--keep-tmp-dir",
        action="store_true",
        default=None,
        help="Do not delete temporary directory used for creating the image",
    )
    parser.add_argument("--tmp-dir", default=None, help="Use this directory for build and staging")
    parser.add_argument(
        "--reuse-tmp-dir",
        default=None,
        help="Use this already existing temporary directory with an already built project",
    )
    parser.add_argument("--output-dir", default=None, help="Where to write the image file")
    parser.add_argument("--config", default=None, help="Base configuration file (YAML or JSON)")
    parser.add_argument("--local-config", default=None, help="Local overrides for the base configuration")
    parser.add_argument("--debug", action="store_true", help="Print debug events")
    parser.add_argument("project", nargs="?", default=None, help="Project to build")


def build_parser(registry: BackendRegistry) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Build a project and stage it, with its runtime dependencies, into a container image.",
    )
    subparsers = parser.add_subparsers(dest="backend", metavar="BACKEND")
    subparsers.required = True
    for name in registry.names():
        factory = registry.get(name)
        sub = subparsers.add_parser(name, help=f"Build the project with the {name} backend")
        _add_common_arguments(sub)
        factory.add_arguments(sub)
        sub.set_defaults(print_usage=sub.print_usage)
    return parser


def staging_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Valores da seção `staging` informados explicitamente na linha de comando."""
    values = {
        "project": args.project,
        "exec_args": args.exec_args,
        "use_binary": args.use_binary,
        "assets": args.assets,
        "excludes": args.excludes,
        "keep_tmp_dir": args.keep_tmp_dir,
        "tmp_dir": args.tmp_dir,
        "reuse_tmp_dir": args.reuse_tmp_dir,
        "output_dir": args.output_dir,
    }
    return {k: v for k, v in values.items() if v is not None}


def load_settings(args: argparse.Namespace) -> Dict[str, Any]:
    defaults_path = args.config or args.local_config
    if defaults_path is None:
        return {}
    local_path = args.local_config if args.config else None
    try:
        return load_config(defaults_path=defaults_path, local_path=local_path)
    except ConfigError as e:
        raise ConfigurationError(
            message=str(e),
            details={"config": defaults_path, "local_config": local_path},
            hint="Verifique os caminhos e o formato de --config/--local-config.",
        ) from e


def resolve_staging(settings: Dict[str, Any], args: argparse.Namespace) -> StagingConfig:
    section = settings.get("staging") or {}
    if not isinstance(section, dict):
        raise ConfigurationError(
            message="Section 'staging' must be a mapping",
            details={"received": type(section).__name__},
        )
    try:
        merged = deep_merge(section, staging_from_args(args))
    except ConfigError as e:
        raise ConfigurationError(message=str(e), details={"section": "staging"}) from e
    return StagingConfig.from_dict(merged)


def make_sink(*, debug: bool = False, stream: Optional[TextIO] = None) -> EventSink:
    def sink(event: Dict[str, Any]) -> None:
        out = stream or sys.stderr
        level = event.get("level")
        if level == "warning":
            out.write(f"Warning: {event['message']}\n")
        elif level == "info":
            out.write(f"{PROG}: {event['message']}\n")
        elif debug:
            out.write(f"[{event['step_id']}] {event['message']}\n")

    return sink


def _report(exc: ImageStageException, stream: TextIO) -> None:
    stream.write(f"error: {exc.message}\n")
    if exc.hint:
        stream.write(f"hint: {exc.hint}\n")


def main(argv: Optional[Sequence[str]] = None, *, registry: Optional[BackendRegistry] = None) -> int:
    registry = registry or build_default_registry()
    parser = build_parser(registry)
    args = parser.parse_args(list(argv) if argv is not None else None)

    factory: BackendFactory = registry.get(args.backend)

    try:
        settings = load_settings(args)
        config = resolve_staging(settings, args)
        options = {**config.backend_options, **factory.options_from_args(args)}
        backend = factory.create(options)
        pipeline = StagingPipeline(
            backend=backend,
            config=config,
            settings={k: v for k, v in settings.items() if k != "staging"},
            sink=make_sink(debug=args.debug),
        )
        pipeline.run()
    except ConfigurationError as e:
        _report(e, sys.stderr)
        args.print_usage(sys.stderr)
        return 1
    except ImageStageException as e:
        _report(e, sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
