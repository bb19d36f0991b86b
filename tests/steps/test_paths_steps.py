# tests/steps/test_paths_steps.py
"""
Testes das etapas de layout (`paths.setup`, `paths.make_directories`).

Invariantes:
    - A raiz de trabalho é publicada no RunContext assim que conhecida
    - Em modo reuse apenas `aci/` é recriado; o build do projeto fica
    - Warnings do backend viram warnings da etapa
"""
import os
import shutil

import pytest

try:
    from imagestage.core.exceptions import DirectoryCreationError
    from imagestage.core.staging import StagingConfig
    from imagestage.steps import MakeDirectoriesStep, SetupPathsStep
    from imagestage.steps import keys
except Exception as e:
    SetupPathsStep = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"""Missing path steps. Implement:
- src/imagestage/steps/paths.py (SetupPathsStep, MakeDirectoriesStep)
Import error: {_IMPORT_ERR}
""")


def _run_both(ctx, backend, config):
    ctx.set_artifact(keys.CONFIG, config)
    SetupPathsStep(backend=backend).run(ctx)
    MakeDirectoriesStep(backend=backend).run(ctx)
    return ctx.get_artifact(keys.PATHS)


def test_fresh_temporary_directory(dummy_ctx, FakeBackend):
    _require_imports()
    backend = FakeBackend()
    paths = _run_both(dummy_ctx, backend, StagingConfig(project="p"))
    try:
        assert os.path.basename(paths.tmp_dir).startswith("imagestage-fake-")
        assert os.path.isdir(paths.rootfs)
        assert os.path.isdir(backend.bin_dir)
    finally:
        shutil.rmtree(paths.tmp_dir)


def test_explicit_tmp_dir_is_created(tmp_path, dummy_ctx, FakeBackend):
    _require_imports()
    work = tmp_path / "nested" / "work"
    paths = _run_both(dummy_ctx, FakeBackend(), StagingConfig(project="p", tmp_dir=str(work)))
    assert paths.tmp_dir == str(work)
    assert (work / "aci" / "rootfs").is_dir()
    assert (work / "out" / "bin").is_dir()


def test_existing_staging_tree_is_an_error(tmp_path, dummy_ctx, FakeBackend):
    _require_imports()
    (tmp_path / "aci").mkdir()
    with pytest.raises(DirectoryCreationError) as exc:
        _run_both(dummy_ctx, FakeBackend(), StagingConfig(project="p", tmp_dir=str(tmp_path)))
    assert exc.value.details["path"] == str(tmp_path / "aci")
    # cleanup can still find the root
    assert dummy_ctx.get_artifact(keys.PATHS).tmp_dir == str(tmp_path)


def test_reuse_recreates_only_staging_tree(tmp_path, dummy_ctx, FakeBackend):
    _require_imports()
    (tmp_path / "out" / "bin").mkdir(parents=True)
    (tmp_path / "out" / "bin" / "app").write_text("built")
    (tmp_path / "aci" / "rootfs" / "stale").mkdir(parents=True)

    paths = _run_both(dummy_ctx, FakeBackend(), StagingConfig(project="p", reuse_tmp_dir=str(tmp_path)))

    assert (tmp_path / "out" / "bin" / "app").read_text() == "built"
    assert os.listdir(paths.rootfs) == []


def test_backend_warnings_are_reported(tmp_path, dummy_ctx, FakeBackend):
    _require_imports()
    backend = FakeBackend(warnings=["GOPATH env var is ignored"])
    _run_both(dummy_ctx, backend, StagingConfig(project="p", tmp_dir=str(tmp_path / "w")))
    assert dummy_ctx.warnings["paths.setup"] == ["GOPATH env var is ignored"]
