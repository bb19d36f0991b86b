# tests/assets/test_resolver.py
"""
Testes do AssetResolver (fecho de dependências + cópia para o rootfs).

Os testes constroem árvores reais em `tmp_path` e usam um executor de
comandos falso no lugar do `ldd`.

Invariantes validadas:
    - Cada spec bruto é processado no máximo uma vez (término com ciclos)
    - Excluir um arquivo omite só ele; excluir um diretório omite a subárvore
    - Bits de permissão de arquivos e diretórios são preservados
    - Symlinks são recriados com o alvo original
    - Specs malformados falham antes de qualquer escrita
"""
import os
import stat

import pytest

try:
    from imagestage.assets.resolver import AssetResolver, resolve_and_copy
    from imagestage.assets.spec import format_spec, self_mapped
    from imagestage.core.exceptions import (
        AssetCopyError,
        AssetNotFoundError,
        CommandNotFoundError,
        MalformedAssetSpecError,
        NonAbsoluteAssetPathError,
        UnsupportedNodeError,
    )
except Exception as e:
    AssetResolver = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"""Missing AssetResolver. Implement:
- src/imagestage/assets/resolver.py (AssetResolver, resolve_and_copy)
Import error: {_IMPORT_ERR}
""")


def _tree(root):
    """Conjunto de caminhos relativos (arquivos, diretórios e links) sob `root`."""
    out = set()
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            out.add(os.path.relpath(os.path.join(dirpath, name), root))
    return out


def _ldd_line(path):
    return f"\t{os.path.basename(path)} => {path} (0x00007f0000000000)\n"


def test_single_binary_without_dependencies(tmp_path, FakeRunner):
    _require_imports()
    src = tmp_path / "build"
    src.mkdir()
    (src / "app").write_text("binary")
    dest = tmp_path / "rootfs"

    resolver = AssetResolver(dest_root=str(dest), mapping={}, runner=FakeRunner())
    processed = resolver.resolve([format_spec("/bin/app", str(src / "app"))])

    assert processed == 1
    assert _tree(dest) == {"bin", os.path.join("bin", "app")}
    assert (dest / "bin" / "app").read_text() == "binary"


def test_placeholders_are_substituted(tmp_path, FakeRunner):
    _require_imports()
    out = tmp_path / "out"
    out.mkdir()
    (out / "app").write_text("binary")
    dest = tmp_path / "rootfs"

    resolve_and_copy(
        ["/bin/app" + os.pathsep + "<OUTPATH>/app"],
        str(dest),
        {"<OUTPATH>": str(out)},
        runner=FakeRunner(),
    )
    assert (dest / "bin" / "app").is_file()


def test_dependency_cycle_terminates(tmp_path, FakeRunner):
    _require_imports()
    lib = tmp_path / "lib"
    lib.mkdir()
    liba, libb = lib / "liba.so", lib / "libb.so"
    liba.write_text("a")
    libb.write_text("b")
    app = tmp_path / "app"
    app.write_text("app")

    runner = FakeRunner(ldd={
        str(app): _ldd_line(str(liba)),
        str(liba): _ldd_line(str(libb)),
        str(libb): _ldd_line(str(liba)),
    })
    dest = tmp_path / "rootfs"
    resolver = AssetResolver(dest_root=str(dest), mapping={}, runner=runner)

    processed = resolver.resolve([format_spec("/bin/app", str(app))])

    assert processed == 3
    assert resolver.processed == {
        format_spec("/bin/app", str(app)),
        self_mapped(str(liba)),
        self_mapped(str(libb)),
    }
    rel_lib = str(lib).lstrip(os.sep)
    assert (dest / rel_lib / "liba.so").read_text() == "a"
    assert (dest / rel_lib / "libb.so").read_text() == "b"


def test_duplicate_specs_are_processed_once(tmp_path, FakeRunner):
    _require_imports()
    (tmp_path / "app").write_text("x")
    spec = format_spec("/bin/app", str(tmp_path / "app"))
    resolver = AssetResolver(dest_root=str(tmp_path / "rootfs"), mapping={}, runner=FakeRunner())
    assert resolver.resolve([spec, spec, spec]) == 1


def test_excluding_a_file_omits_only_that_file(tmp_path, FakeRunner):
    _require_imports()
    src = tmp_path / "data"
    src.mkdir()
    (src / "keep.txt").write_text("k")
    (src / "secret.txt").write_text("s")
    dest = tmp_path / "rootfs"

    resolve_and_copy(
        [format_spec("/data", str(src))],
        str(dest),
        {"<DATA>": str(src)},
        excludes=["<DATA>/secret.txt"],
        runner=FakeRunner(),
    )
    assert _tree(dest) == {"data", os.path.join("data", "keep.txt")}


def test_excluding_a_directory_omits_its_subtree(tmp_path, FakeRunner):
    _require_imports()
    src = tmp_path / "data"
    (src / "cache" / "deep").mkdir(parents=True)
    (src / "cache" / "deep" / "blob").write_text("b")
    (src / "cache" / "index").write_text("i")
    (src / "config").write_text("c")
    dest = tmp_path / "rootfs"

    resolve_and_copy(
        [format_spec("/srv", str(src))],
        str(dest),
        {},
        excludes=[str(src / "cache")],
        runner=FakeRunner(),
    )
    assert _tree(dest) == {"srv", os.path.join("srv", "config")}


def test_permission_bits_are_preserved(tmp_path, FakeRunner):
    _require_imports()
    src = tmp_path / "tree"
    src.mkdir()
    (src / "run").write_text("r")
    os.chmod(src / "run", 0o751)
    (src / "conf").write_text("c")
    os.chmod(src / "conf", 0o640)
    os.chmod(src, 0o750)
    dest = tmp_path / "rootfs"

    resolve_and_copy([format_spec("/opt/tree", str(src))], str(dest), {}, runner=FakeRunner())

    copied = dest / "opt" / "tree"
    assert stat.S_IMODE(os.lstat(copied / "run").st_mode) == 0o751
    assert stat.S_IMODE(os.lstat(copied / "conf").st_mode) == 0o640
    assert stat.S_IMODE(os.lstat(copied).st_mode) == 0o750


def test_symlinks_are_recreated_verbatim(tmp_path, FakeRunner):
    _require_imports()
    src = tmp_path / "etc"
    src.mkdir()
    (src / "real.conf").write_text("x")
    os.symlink("real.conf", src / "app.conf")
    os.symlink("/nonexistent/elsewhere", src / "dangling")
    dest = tmp_path / "rootfs"

    resolve_and_copy([format_spec("/etc", str(src))], str(dest), {}, runner=FakeRunner())

    assert os.readlink(dest / "etc" / "app.conf") == "real.conf"
    assert os.readlink(dest / "etc" / "dangling") == "/nonexistent/elsewhere"


def test_interpreter_chain_is_copied(tmp_path, FakeRunner):
    _require_imports()
    tools = tmp_path / "tools"
    tools.mkdir()
    (tools / "busybox").write_text("bb")
    os.symlink("busybox", tools / "sh")
    script = tmp_path / "entry.sh"
    script.write_text(f"#!{tools / 'sh'}\necho ok\n")
    dest = tmp_path / "rootfs"

    resolver = AssetResolver(dest_root=str(dest), mapping={}, runner=FakeRunner())
    resolver.resolve([format_spec("/entry.sh", str(script))])

    rel_tools = dest / str(tools).lstrip(os.sep)
    assert os.readlink(rel_tools / "sh") == "busybox"
    assert (rel_tools / "busybox").read_text() == "bb"
    assert self_mapped(str(tools / "sh")) in resolver.processed


@pytest.mark.skipif(not os.path.exists("/usr/bin/env"), reason="host without /usr/bin/env")
def test_env_shebang_adds_usr_bin_env(tmp_path, FakeRunner):
    _require_imports()
    script = tmp_path / "tool.py"
    script.write_text("#!/usr/bin/env python3\nprint('hi')\n")
    dest = tmp_path / "rootfs"

    resolver = AssetResolver(dest_root=str(dest), mapping={}, runner=FakeRunner())
    resolver.resolve([format_spec("/bin/tool", str(script))])

    assert self_mapped("/usr/bin/env") in resolver.processed
    assert os.path.lexists(dest / "usr" / "bin" / "env")


def test_malformed_spec_fails_before_writing(tmp_path, FakeRunner):
    _require_imports()
    dest = tmp_path / "rootfs"
    with pytest.raises(MalformedAssetSpecError):
        resolve_and_copy(["/only/one/path"], str(dest), {}, runner=FakeRunner())
    assert not dest.exists()


def test_relative_paths_are_rejected(tmp_path, FakeRunner):
    _require_imports()
    dest = str(tmp_path / "rootfs")
    with pytest.raises(NonAbsoluteAssetPathError):
        resolve_and_copy([format_spec("bin/app", "/bin/sh")], dest, {}, runner=FakeRunner())
    with pytest.raises(NonAbsoluteAssetPathError):
        resolve_and_copy([format_spec("/bin/app", "build/app")], dest, {}, runner=FakeRunner())


def test_missing_local_path_is_reported(tmp_path, FakeRunner):
    _require_imports()
    missing = str(tmp_path / "missing")
    with pytest.raises(AssetNotFoundError) as exc:
        resolve_and_copy([format_spec("/x", missing)], str(tmp_path / "rootfs"), {}, runner=FakeRunner())
    assert exc.value.details["path"] == missing


def test_directory_collision_is_a_copy_error(tmp_path, FakeRunner):
    _require_imports()
    one, two = tmp_path / "one", tmp_path / "two"
    one.mkdir()
    two.mkdir()
    dest = str(tmp_path / "rootfs")
    with pytest.raises(AssetCopyError):
        resolve_and_copy(
            [format_spec("/data", str(one)), format_spec("/data", str(two))],
            dest,
            {},
            runner=FakeRunner(),
        )


def test_debug_events_are_forwarded(tmp_path, FakeRunner):
    _require_imports()
    (tmp_path / "app").write_text("x")
    events = []
    resolve_and_copy(
        [format_spec("/app", str(tmp_path / "app"))],
        str(tmp_path / "rootfs"),
        {},
        runner=FakeRunner(),
        log=lambda **event: events.append(event),
    )
    assert events
    assert all(e["level"] == "debug" for e in events)
    assert any(e["message"] == "processing asset" for e in events)


def test_link_through_parent_directory_is_copied_once(tmp_path, FakeRunner):
    _require_imports()
    host = tmp_path / "host"
    (host / "lib").mkdir(parents=True)
    (host / "other").mkdir()
    (host / "lib" / "interp.real").write_text("i")
    os.symlink("interp.real", host / "lib" / "interp")
    os.symlink("../lib/interp", host / "other" / "alias")
    script = tmp_path / "run.sh"
    script.write_text(f"#!{host / 'other' / 'alias'}\n")
    dest = tmp_path / "rootfs"

    resolver = AssetResolver(dest_root=str(dest), mapping={}, runner=FakeRunner())
    resolver.resolve([format_spec("/run.sh", str(script)), self_mapped(str(host / "lib" / "interp"))])

    rel = dest / str(host).lstrip(os.sep)
    assert os.readlink(rel / "other" / "alias") == "../lib/interp"
    assert os.readlink(rel / "lib" / "interp") == "interp.real"
    assert (rel / "lib" / "interp.real").read_text() == "i"
    assert not any(".." in spec for spec in resolver.processed)


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="host without named pipes")
def test_fifo_as_local_path_is_unsupported(tmp_path, FakeRunner):
    _require_imports()
    fifo = tmp_path / "pipe"
    os.mkfifo(fifo)
    dest = tmp_path / "rootfs"
    with pytest.raises(UnsupportedNodeError) as exc:
        resolve_and_copy([format_spec("/pipe", str(fifo))], str(dest), {}, runner=FakeRunner())
    assert exc.value.details["path"] == str(fifo)
    assert not dest.exists()


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="host without named pipes")
def test_fifo_inside_directory_is_unsupported(tmp_path, FakeRunner):
    _require_imports()
    data = tmp_path / "data"
    data.mkdir()
    (data / "a.txt").write_text("a")
    os.mkfifo(data / "pipe")
    spec = format_spec("/data", str(data))
    with pytest.raises(UnsupportedNodeError) as exc:
        resolve_and_copy([spec], str(tmp_path / "rootfs"), {}, runner=FakeRunner())
    assert exc.value.details["path"] == str(data / "pipe")
    assert exc.value.details["spec"] == spec


def test_missing_ldd_aborts_resolution(tmp_path):
    _require_imports()

    class _NoLddRunner:
        def run(self, args, *, env=None, cwd=None, capture=False):
            raise CommandNotFoundError(message="Executable not found: ldd", details={"program": "ldd"})

    (tmp_path / "app").write_text("x")
    (tmp_path / "lib").write_text("y")
    spec = format_spec("/app", str(tmp_path / "app"))
    resolver = AssetResolver(dest_root=str(tmp_path / "rootfs"), mapping={}, runner=_NoLddRunner())
    with pytest.raises(CommandNotFoundError) as exc:
        resolver.resolve([spec, format_spec("/lib", str(tmp_path / "lib"))])
    assert exc.value.details == {"program": "ldd", "path": str(tmp_path / "app"), "spec": spec}
    assert resolver.processed == {spec}
