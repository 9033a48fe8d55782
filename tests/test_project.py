import json
import subprocess
from pathlib import Path

import pytest

from ferrules import project as proj
from ferrules.project import Crate, RustAnalyzerProject


def test_add_path_accepts_rust_sources_only():
    project = RustAnalyzerProject()
    project.add_path("exercises/intro/intro1.rs")
    project.add_path("exercises/intro/README.md")
    project.add_path("exercises/intro")
    assert [c.root_module for c in project.crates] == ["exercises/intro/intro1.rs"]
    crate = project.crates[0]
    assert crate.edition == "2021"
    assert crate.deps == []
    assert crate.cfg == ["test"]


def test_to_json_round_trip():
    project = RustAnalyzerProject(sysroot_src="/sys", crates=[Crate("a.rs")])
    data = json.loads(project.to_json())
    assert data == {
        "sysroot_src": "/sys",
        "crates": [{"root_module": "a.rs", "edition": "2021", "deps": [], "cfg": ["test"]}],
    }
    assert " " not in project.to_json()


def test_write_to_disk(tmp_path):
    project = RustAnalyzerProject(sysroot_src="/sys")
    project.add_path("b.rs")
    target = tmp_path / "rust-project.json"
    project.write_to_disk(target)
    assert target.read_text() == project.to_json()


def test_exercises_to_json_finds_nested_sources(tmp_path):
    root = tmp_path / "exercises"
    (root / "intro").mkdir(parents=True)
    (root / "intro" / "intro1.rs").write_text("")
    (root / "intro" / "README.md").write_text("")
    (root / "quiz1.rs").write_text("")
    project = RustAnalyzerProject()
    project.exercises_to_json(str(root))
    names = sorted(Path(c.root_module).name for c in project.crates)
    assert names == ["intro1.rs", "quiz1.rs"]
    assert all(c.root_module.startswith(str(root)) for c in project.crates)


def test_exercises_to_json_empty_when_missing(tmp_path):
    project = RustAnalyzerProject()
    project.exercises_to_json(str(tmp_path / "nowhere"))
    assert project.crates == []


def test_sysroot_from_environment(monkeypatch):
    monkeypatch.setenv("RUST_SRC_PATH", "/custom/src")
    project = RustAnalyzerProject()
    project.get_sysroot_src()
    assert project.sysroot_src == "/custom/src"


def test_sysroot_from_rustc(monkeypatch, capsys):
    monkeypatch.delenv("RUST_SRC_PATH", raising=False)
    calls = []

    def fake_run(args, **kwargs):
        calls.append(list(args))
        return subprocess.CompletedProcess(args, 0, b"/opt/toolchain\n", b"")

    monkeypatch.setattr(proj.subprocess, "run", fake_run)
    project = RustAnalyzerProject()
    project.get_sysroot_src()
    assert calls == [["rustc", "--print", "sysroot"]]
    parts = Path(project.sysroot_src).parts
    assert parts[-5:] == ("lib", "rustlib", "src", "rust", "library")
    assert project.sysroot_src.startswith(str(Path("/opt/toolchain")))
    assert "Determined toolchain: /opt/toolchain" in capsys.readouterr().out


def test_sysroot_missing_rustc(monkeypatch):
    monkeypatch.delenv("RUST_SRC_PATH", raising=False)

    def fake_run(args, **kwargs):
        raise FileNotFoundError("rustc")

    monkeypatch.setattr(proj.subprocess, "run", fake_run)
    with pytest.raises(OSError):
        RustAnalyzerProject().get_sysroot_src()