import subprocess
from pathlib import Path

import pytest

from ferrules import exercise as ex
from ferrules.exercise import (
    CompileError,
    ContextLine,
    Exercise,
    ExerciseOutput,
    Mode,
    RunError,
    load_exercises,
    parse_exercises,
)

PENDING = "// fake_exercise\n\n// I AM NOT DONE\n\nfn main() {\n\n}\n"
FINISHED = "// fake_exercise\n\nfn main() {\n\n}\n"


class FakeRun:
    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def __call__(self, args, **kwargs):
        self.calls.append(list(args))
        outcome = self.results.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        code, out, err = outcome
        return subprocess.CompletedProcess(args, code, out, err)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _install(monkeypatch, *results):
    fake = FakeRun(*results)
    monkeypatch.setattr(ex.subprocess, "run", fake)
    return fake


def test_pending_state(tmp_path):
    path = tmp_path / "pending_exercise.rs"
    path.write_text(PENDING)
    exercise = Exercise("pending_exercise", path, Mode.COMPILE, "")
    assert exercise.state() == [
        ContextLine("// fake_exercise", 1, False),
        ContextLine("", 2, False),
        ContextLine("// I AM NOT DONE", 3, True),
        ContextLine("", 4, False),
        ContextLine("fn main() {", 5, False),
    ]
    assert exercise.looks_done() is False


def test_finished_exercise(tmp_path):
    path = tmp_path / "finished_exercise.rs"
    path.write_text(FINISHED)
    exercise = Exercise("finished_exercise", path, Mode.COMPILE, "")
    assert exercise.state() is None
    assert exercise.looks_done() is True


def test_context_clamped_at_start(tmp_path):
    path = tmp_path / "pending_test_exercise.rs"
    path.write_text("// I AM NOT DONE\n\n#[test]\nfn it_works() {}\n")
    state = Exercise("p", path, Mode.TEST, "").state()
    assert [line.number for line in state] == [1, 2, 3]
    assert [line.important for line in state] == [True, False, False]


def test_clean(workdir, monkeypatch):
    _install(monkeypatch, (0, b"", b""))
    exercise = Exercise("example", workdir / "pending_exercise.rs", Mode.COMPILE, "")
    with exercise.compile() as compiled:
        Path(compiled.binary).write_bytes(b"")
        assert Path(compiled.binary).exists()
    assert not Path(compiled.binary).exists()


def test_exercise_with_output(workdir, monkeypatch):
    fake = _install(monkeypatch, (0, b"", b""), (0, b"THIS TEST TOO SHALL PASS\n", b""))
    exercise = Exercise("exercise_with_output", "testSuccess.rs", Mode.TEST, "")
    with exercise.compile() as compiled:
        out = compiled.run()
    assert "THIS TEST TOO SHALL PASS" in out.stdout
    assert fake.calls[0][:3] == ["rustc", "--test", "testSuccess.rs"]
    assert fake.calls[1] == [compiled.binary, "--show-output"]


def test_compile_mode_passes_edition(workdir, monkeypatch):
    fake = _install(monkeypatch, (0, b"", b""), (0, b"hi", b""))
    exercise = Exercise("c", "compSuccess.rs", Mode.COMPILE, "")
    with exercise.compile() as compiled:
        assert compiled.run() == ExerciseOutput("hi", "")
    assert fake.calls[0][:2] == ["rustc", "compSuccess.rs"]
    assert "--edition" in fake.calls[0]
    assert fake.calls[1] == [compiled.binary, ""]


def test_compile_failure_raises_and_cleans(workdir, monkeypatch):
    _install(monkeypatch, (1, b"", b"error: boom"))
    binary = Path(ex._temp_file())
    binary.write_bytes(b"")
    exercise = Exercise("compFailure", "compFailure.rs", Mode.COMPILE, "")
    with pytest.raises(CompileError) as info:
        exercise.compile()
    assert info.value.output.stderr == "error: boom"
    assert not binary.exists()


def test_run_failure_raises(workdir, monkeypatch):
    _install(monkeypatch, (0, b"", b""), (101, b"failed\n", b"panic"))
    exercise = Exercise("t", "testNotPassed.rs", Mode.TEST, "")
    with exercise.compile() as compiled, pytest.raises(RunError) as info:
        compiled.run()
    assert info.value.output == ExerciseOutput("failed\n", "panic")


def test_build_script_run_is_empty(workdir, monkeypatch):
    (workdir / "exercises" / "tests").mkdir(parents=True)
    fake = _install(monkeypatch, (0, b"", b""))
    exercise = Exercise("build1", "exercises/tests/build1.rs", Mode.BUILD_SCRIPT, "")
    with exercise.compile() as compiled:
        assert compiled.run() == ExerciseOutput("", "")
    assert len(fake.calls) == 1
    assert fake.calls[0][:2] == ["cargo", "test"]
    manifest = (workdir / "exercises" / "tests" / "Cargo.toml").read_text()
    assert 'path = "build1.rs"' in manifest


def test_clippy_writes_manifest_and_runs_lints(workdir, monkeypatch):
    (workdir / "exercises" / "clippy").mkdir(parents=True)
    fake = _install(
        monkeypatch,
        (1, b"", b""),
        (0, b"", b""),
        (0, b"", b""),
        (0, b"lint ok", b""),
    )
    exercise = Exercise("clippy1", "exercises/clippy/clippy1.rs", Mode.CLIPPY, "")
    with exercise.compile() as compiled:
        assert compiled.run() == ExerciseOutput("lint ok", "")
    manifest = (workdir / "exercises" / "clippy" / "Cargo.toml").read_text()
    assert 'name = "clippy1"' in manifest
    assert [call[:2] for call in fake.calls[:3]] == [
        ["rustc", "exercises/clippy/clippy1.rs"],
        ["cargo", "clean"],
        ["cargo", "clippy"],
    ]
    assert fake.calls[2][-1] == "clippy::float_cmp"


def test_output_decoded_lossily(workdir, monkeypatch):
    _install(monkeypatch, (1, b"", b"\xffbad"))
    with pytest.raises(CompileError) as info:
        Exercise("x", "x.rs", Mode.COMPILE, "").compile()
    assert info.value.output.stderr == "\ufffdbad"


def test_missing_compiler_raises(workdir, monkeypatch):
    _install(monkeypatch, FileNotFoundError("rustc"))
    with pytest.raises(RuntimeError):
        Exercise("x", "x.rs", Mode.COMPILE, "").compile()


def test_str_is_path():
    assert str(Exercise("intro1", "exercises/intro1.rs", "compile", "")) == "exercises/intro1.rs"


def test_parse_exercises():
    text = (
        '[[exercises]]\nname = "intro1"\npath = "exercises/intro1.rs"\n'
        'mode = "compile"\nhint = "Hello!"\n\n'
        '[[exercises]]\nname = "build1"\npath = "exercises/tests/build1.rs"\n'
        'mode = "buildscript"\nhint = ""\n'
    )
    exercises = parse_exercises(text)
    assert [e.name for e in exercises] == ["intro1", "build1"]
    assert exercises[0].mode is Mode.COMPILE
    assert exercises[1].mode is Mode.BUILD_SCRIPT
    assert exercises[0].path == Path("exercises/intro1.rs")
    assert exercises[0].hint == "Hello!"


def test_parse_rejects_unknown_mode():
    text = '[[exercises]]\nname = "a"\npath = "a.rs"\nmode = "bogus"\nhint = ""\n'
    with pytest.raises(ValueError):
        parse_exercises(text)


def test_parse_rejects_missing_field():
    with pytest.raises(ValueError, match="hint"):
        parse_exercises('[[exercises]]\nname = "a"\npath = "a.rs"\nmode = "test"\n')


def test_load_exercises(tmp_path):
    info = tmp_path / "info.toml"
    info.write_text('[[exercises]]\nname = "a"\npath = "a.rs"\nmode = "test"\nhint = "h"\n')
    assert load_exercises(info) == [Exercise("a", Path("a.rs"), Mode.TEST, "h")]