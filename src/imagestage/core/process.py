# src/imagestage/core/process.py
"""
Execução de programas externos (ldd, go, git, cmake, make).

O `CommandRunner` distingue explicitamente:
    - executável não encontrado → `CommandNotFoundError` (erro de configuração)
    - executou e terminou com status != 0 → `CommandFailedError`

Cabe ao chamador decidir se uma falha é benigna (ex.: `ldd` em um arquivo
não dinâmico) ou fatal (ex.: `make`). Não há timeout nem cancelamento:
o processo roda até terminar.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence

from .exceptions import CommandFailedError, CommandNotFoundError


@dataclass(frozen=True)
class CommandResult:
    """Resultado de um comando que terminou com sucesso."""

    args: Sequence[str]
    returncode: int
    stdout: str = ""


class CommandRunner:
    """Executa comandos externos de forma síncrona."""

    def __init__(self, *, log: Optional[Callable[..., None]] = None):
        self._log = log

    def resolve(self, program: str, env: Optional[Mapping[str, str]] = None) -> str:
        if os.sep in program:
            if os.path.isfile(program) and os.access(program, os.X_OK):
                return program
            resolved = None
        else:
            search_path = (env or os.environ).get("PATH")
            resolved = shutil.which(program, path=search_path)
        if resolved is None:
            raise CommandNotFoundError(
                message=f"Executable not found: {program}",
                details={"program": program},
                hint="Instale o programa ou ajuste o PATH antes de reexecutar.",
            )
        return resolved

    def run(
        self,
        args: Sequence[str],
        *,
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[str] = None,
        capture: bool = False,
    ) -> CommandResult:
        if not args:
            raise ValueError("No args to execute passed")

        program = self.resolve(args[0], env)
        argv = [program, *args[1:]]
        if self._log is not None:
            self._log(level="debug", message="running command", args=list(args), cwd=cwd)

        completed = subprocess.run(
            argv,
            env=dict(env) if env is not None else None,
            cwd=cwd,
            stdout=subprocess.PIPE if capture else None,
            stderr=subprocess.PIPE if capture else None,
            text=True,
            check=False,
        )
        if completed.returncode != 0:
            raise CommandFailedError(
                message=f"Command {args[0]!r} exited with status {completed.returncode}",
                details={
                    "args": list(args),
                    "cwd": cwd,
                    "stderr": (completed.stderr or "").strip() if capture else None,
                },
                returncode=completed.returncode,
            )
        return CommandResult(args=list(args), returncode=0, stdout=completed.stdout or "")
