# tests/conftest.py
"""
Fixtures compartilhados para testes do ImageStage.

Este módulo define fixtures reutilizáveis que fornecem:
- contexto de execução controlado (RunContext)
- Steps dummy para testes estruturais do engine
- um executor de comandos falso (sem `ldd`, `go`, `git` reais)
- um backend falso, apoiado em diretórios do `tmp_path`

Decisões arquiteturais:
    - Nenhum fixture executa programas externos
    - Imports do pacote são realizados de forma lazy para
      melhorar a clareza de erros durante falhas
    - Steps e backends dummy utilizam duck typing em vez de herança

Limites explícitos:
    - Não substituir testes de integração com ferramentas reais
    - Não conter lógica de domínio
"""

import os
from datetime import datetime, timezone

import pytest


# =====================================================
# Pipeline core fixtures (Step + RunContext)
# =====================================================

@pytest.fixture
def dummy_config() -> dict:
    """
    Configuração mínima, já resolvida, para exercitar o engine.

    Returns:
        dict: Configuração com `fail_fast` explicitamente habilitado.
    """
    return {
        "engine": {"fail_fast": True},
        "steps": {"validate": {"enabled": True}},
    }


@pytest.fixture
def dummy_ctx(dummy_config):
    """
    RunContext determinístico para testes.

    `run_id` e `created_at` são fixos; eventos registrados ficam
    disponíveis em `ctx.events` para inspeção.

    Returns:
        RunContext: Contexto de execução isolado e previsível.
    """
    from imagestage.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=dummy_config,
        meta={"source": "pytest"},
    )


@pytest.fixture
def DummyStep():
    """
    Fixture factory que fornece uma implementação mínima e duck-typed de um Step.

    A implementação retornada:
    - expõe os atributos obrigatórios (`id`, `kind`, `depends_on`)
    - registra um artefato `<id>.ok` no RunContext ao executar
    - sempre retorna StepResult com status SUCCESS

    Returns:
        type: Classe _DummyStep que pode ser instanciada pelos testes.
    """
    from imagestage.core.pipeline.types import StepKind, StepResult, StepStatus

    class _DummyStep:
        def __init__(self, step_id: str = "validate", kind: StepKind = StepKind.SETUP, depends_on=None):
            self.id = step_id
            self.kind = kind
            self.depends_on = depends_on or []

        def run(self, ctx):
            ctx.set_artifact(f"{self.id}.ok", True)
            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary="dummy ok",
                artifacts={"ok": f"{self.id}.ok"},
            )

    return _DummyStep


# =====================================================
# Command runner
# =====================================================

@pytest.fixture
def FakeRunner():
    """
    Fixture factory de um executor de comandos falso.

    Comportamento:
        - `ldd <path>`: devolve a saída registrada em `ldd[path]`; caminhos
          sem saída registrada falham como "not a dynamic executable"
        - demais comandos: devolvem `outputs[tuple(args)]` (ou vazio);
          programas listados em `failing` falham com status 1
        - toda chamada é registrada em `calls`

    Returns:
        type: Classe _FakeRunner.
    """
    from imagestage.core.exceptions import CommandFailedError
    from imagestage.core.process import CommandResult

    class _FakeRunner:
        def __init__(self, *, ldd=None, outputs=None, failing=()):
            self.ldd = dict(ldd or {})
            self.outputs = dict(outputs or {})
            self.failing = set(failing)
            self.calls = []

        def run(self, args, *, env=None, cwd=None, capture=False):
            args = list(args)
            self.calls.append({"args": args, "env": env, "cwd": cwd})
            program = os.path.basename(args[0])
            if program == "ldd":
                out = self.ldd.get(args[1])
                if out is None:
                    raise CommandFailedError(
                        message="Command 'ldd' exited with status 1",
                        details={"args": args},
                        returncode=1,
                    )
                return CommandResult(args=args, returncode=0, stdout=out)
            if program in self.failing:
                raise CommandFailedError(
                    message=f"Command {args[0]!r} exited with status 1",
                    details={"args": args, "cwd": cwd},
                    returncode=1,
                )
            return CommandResult(args=args, returncode=0, stdout=self.outputs.get(tuple(args), ""))

        def programs(self):
            return [os.path.basename(c["args"][0]) for c in self.calls]

    return _FakeRunner


# =====================================================
# Backend
# =====================================================

@pytest.fixture
def FakeBackend():
    """
    Fixture factory de um backend falso.

    O "build" apenas grava um script executável em `<tmp>/out/bin/<nome>`,
    sem shebang, para que nenhum interpretador seja descoberto. Cada
    chamada a `prepare_project` é contada em `builds`.

    Placeholders: `<OUTPATH>` → `<tmp>/out`.

    Returns:
        type: Classe _FakeBackend.
    """
    from imagestage.assets.spec import format_spec
    from imagestage.backends.binaries import select_binary

    class _FakeBackend:
        name = "fake"

        def __init__(self, *, binaries=("app",), project_name="example.com/app", warnings=()):
            self.binaries = list(binaries)
            self.project_name = project_name
            self.warnings = list(warnings)
            self.out = ""
            self.bin_dir = ""
            self._binary = ""
            self.builds = 0

        def placeholder_mapping(self):
            return {"<OUTPATH>": self.out}

        def validate(self, config):
            pass

        def setup_paths(self, paths, config):
            self.out = os.path.join(paths.tmp_dir, "out")
            self.bin_dir = os.path.join(self.out, "bin")

        def directories_to_make(self):
            return [self.out, self.bin_dir]

        def prepare_project(self, config, paths, runner):
            self.builds += 1
            for name in self.binaries:
                path = os.path.join(self.bin_dir, name)
                with open(path, "w", encoding="utf-8") as f:
                    f.write("binary payload\n")
                os.chmod(path, 0o755)

        def find_binary(self, config):
            self._binary = select_binary(self.bin_dir, config.use_binary)
            return self._binary

        def binary_name(self):
            return self._binary

        def repo_path(self):
            return ""

        def source_root(self):
            return ""

        def assets(self, image_bin_dir):
            return [format_spec(os.path.join(image_bin_dir, self._binary), os.path.join(self.bin_dir, self._binary))]

        def excludes(self):
            return []

        def image_name(self, config):
            return self.project_name

        def image_file_name(self, config):
            return os.path.basename(self.project_name) + ".aci"

    return _FakeBackend


# =====================================================
# Config loader fixtures
# =====================================================

@pytest.fixture
def staging_defaults_yaml() -> str:
    """
    YAML de configuração base semelhante ao uso real (`imagestage.yaml`).

    Fornecido como string; cada teste decide onde gravá-lo.

    Returns:
        str: Conteúdo YAML com as seções `engine`, `steps` e `staging`.
    """
    return """\
engine:
  fail_fast: true
steps:
  assets.copy:
    enabled: true
staging:
  output_dir: /srv/images
  keep_tmp_dir: false
  assets:
    - /etc/ssl/certs:/etc/ssl/certs
  excludes: []
"""


@pytest.fixture
def staging_local_yaml() -> str:
    """
    YAML de override local: sobrescreve escalares e substitui listas.

    Returns:
        str: Conteúdo YAML apenas com overrides.
    """
    return """\
staging:
  keep_tmp_dir: true
  excludes:
    - <PROJPATH>/testdata
"""
