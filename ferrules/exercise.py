"""Exercise descriptions, compilation, running and completion state."""

from __future__ import annotations

import os
import re
import subprocess
import threading
import tomllib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .ui import use_emoji

_COLOR_ARGS = ("--color", "always")
_EDITION_ARGS = ("--edition", "2021")
_NOT_DONE = re.compile(r"^\s*///?\s*I\s+AM\s+NOT\s+DONE", re.MULTILINE)
CONTEXT = 2
CLIPPY_CARGO_TOML_PATH = "./exercises/clippy/Cargo.toml"
BUILD_SCRIPT_CARGO_TOML_PATH = "./exercises/tests/Cargo.toml"
_COMPILE_FAILED = "Failed to run 'compile' command."


def _temp_file() -> str:
    """A temporary binary name unique to this process and thread."""
    return f"./temp_{os.getpid()}_{threading.get_ident()}"


def _remove(path: str) -> None:
    try:
        os.remove(path)
    except OSError:
        pass


def _execute(args: list[str], failure: str) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(args, capture_output=True)
    except OSError as exc:
        raise RuntimeError(failure) from exc


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


def _lines(text: str) -> list[str]:
    parts = text.split("\n")
    if text.endswith("\n"):
        parts.pop()
    return [part.removesuffix("\r") for part in parts]


class Mode(Enum):
    """How an exercise is built and checked."""

    COMPILE = "compile"
    TEST = "test"
    CLIPPY = "clippy"
    BUILD_SCRIPT = "buildscript"


@dataclass(frozen=True)
class ContextLine:
    """A source line shown around the pending marker."""

    line: str
    number: int
    important: bool


@dataclass(frozen=True)
class ExerciseOutput:
    """Captured output of a finished command."""

    stdout: str
    stderr: str

    @classmethod
    def _from_process(cls, result: subprocess.CompletedProcess) -> ExerciseOutput:
        return cls(stdout=_decode(result.stdout), stderr=_decode(result.stderr))


class CompileError(Exception):
    """Raised when an exercise fails to compile."""

    def __init__(self, exercise: Exercise, output: ExerciseOutput) -> None:
        super().__init__(f"compilation of {exercise} failed")
        self.exercise = exercise
        self.output = output


class RunError(Exception):
    """Raised when a compiled exercise exits unsuccessfully."""

    def __init__(self, exercise: Exercise, output: ExerciseOutput) -> None:
        super().__init__(f"running {exercise} failed")
        self.exercise = exercise
        self.output = output


class CompiledExercise:
    """A successfully compiled exercise; removes its binary when closed."""

    def __init__(self, exercise: Exercise, binary: str) -> None:
        self.exercise = exercise
        self.binary = binary
        self._closed = False

    def run(self) -> ExerciseOutput:
        """Run the compiled binary; raise RunError on failure."""
        return self.exercise._run(self.binary)

    def close(self) -> None:
        """Remove the compiled binary."""
        if not self._closed:
            self._closed = True
            _remove(self.binary)

    def __enter__(self) -> CompiledExercise:
        return self

    def __exit__(self, *args) -> None:
        self.close()


@dataclass
class Exercise:
    """An exercise as described in info.toml."""

    name: str
    path: Path
    mode: Mode
    hint: str

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.mode = Mode(self.mode)

    def __str__(self) -> str:
        return str(self.path)

    def _manifest(self) -> str:
        return (
            "[package]\n"
            f'name = "{self.name}"\n'
            'version = "0.0.1"\n'
            'edition = "2021"\n'
            "[[bin]]\n"
            f'name = "{self.name}"\n'
            f'path = "{self.name}.rs"'
        )

    def _write_manifest(self, path: str) -> None:
        message = (
            "Failed to write 📎 Clippy 📎 Cargo.toml file."
            if use_emoji()
            else "Failed to write Clippy Cargo.toml file."
        )
        try:
            Path(path).write_text(self._manifest(), encoding="utf-8")
        except OSError as exc:
            raise RuntimeError(message) from exc

    def compile(self) -> CompiledExercise:
        """Build the exercise; raise CompileError with the output on failure."""
        binary = _temp_file()
        source = str(self.path)
        rustc = ["rustc", source, "-o", binary, *_COLOR_ARGS, *_EDITION_ARGS]
        match self.mode:
            case Mode.COMPILE:
                result = _execute(rustc, _COMPILE_FAILED)
            case Mode.TEST:
                result = _execute(
                    ["rustc", "--test", source, "-o", binary, *_COLOR_ARGS, *_EDITION_ARGS],
                    _COMPILE_FAILED,
                )
            case Mode.CLIPPY:
                self._write_manifest(CLIPPY_CARGO_TOML_PATH)
                # Build a runnable binary too; clippy reports any failure below.
                _execute(rustc, "Failed to compile!")
                _execute(
                    ["cargo", "clean", "--manifest-path", CLIPPY_CARGO_TOML_PATH, *_COLOR_ARGS],
                    "Failed to run 'cargo clean'",
                )
                result = _execute(
                    [
                        "cargo", "clippy", "--manifest-path", CLIPPY_CARGO_TOML_PATH,
                        *_COLOR_ARGS, "--", "-D", "warnings", "-D", "clippy::float_cmp",
                    ],
                    _COMPILE_FAILED,
                )
            case Mode.BUILD_SCRIPT:
                self._write_manifest(BUILD_SCRIPT_CARGO_TOML_PATH)
                result = _execute(
                    ["cargo", "test", "--manifest-path", BUILD_SCRIPT_CARGO_TOML_PATH],
                    _COMPILE_FAILED,
                )
        if result.returncode == 0:
            return CompiledExercise(self, binary)
        _remove(binary)
        raise CompileError(self, ExerciseOutput._from_process(result))

    def _run(self, binary: str) -> ExerciseOutput:
        if self.mode is Mode.BUILD_SCRIPT:
            return ExerciseOutput(stdout="", stderr="")
        arg = "--show-output" if self.mode is Mode.TEST else ""
        result = _execute([binary, arg], "Failed to run 'run' command")
        output = ExerciseOutput._from_process(result)
        if result.returncode != 0:
            raise RunError(self, output)
        return output

    def state(self) -> list[ContextLine] | None:
        """Return None when done, else the lines around the pending marker."""
        source = self.path.read_text(encoding="utf-8")
        if not _NOT_DONE.search(source):
            return None
        lines = _lines(source)
        matched = next(
            (index for index, line in enumerate(lines) if _NOT_DONE.search(line)), None
        )
        if matched is None:
            raise RuntimeError("pending marker spans several lines")
        first = max(matched - CONTEXT, 0)
        return [
            ContextLine(line=line, number=index + 1, important=index == matched)
            for index, line in enumerate(lines[first : matched + CONTEXT + 1], start=first)
        ]

    def looks_done(self) -> bool:
        """True when the source no longer carries the pending marker."""
        return self.state() is None


def parse_exercises(text: str) -> list[Exercise]:
    """Parse the exercise list from info.toml text."""
    data = tomllib.loads(text)
    try:
        return [
            Exercise(
                name=entry["name"],
                path=Path(entry["path"]),
                mode=Mode(entry["mode"]),
                hint=entry["hint"],
            )
            for entry in data["exercises"]
        ]
    except KeyError as exc:
        raise ValueError(f"missing field {exc.args[0]!r}") from exc


def load_exercises(path: str | os.PathLike = "info.toml") -> list[Exercise]:
    """Read and parse an info.toml file."""
    return parse_exercises(Path(path).read_text(encoding="utf-8"))