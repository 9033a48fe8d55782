"""Checking exercises in order and reporting progress."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from enum import Enum, auto
from typing import TextIO

from .exercise import CompileError, CompiledExercise, Exercise, Mode, RunError
from .ui import blue, bold, success, use_emoji, warn

_BAR_WIDTH = 60


class ExerciseFailed(Exception):
    """Raised when an exercise does not compile, run or pass."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(f"{exercise} failed")
        self.exercise = exercise


class RunMode(Enum):
    """Whether a passing exercise still asks for the pending marker to go."""

    INTERACTIVE = auto()
    NON_INTERACTIVE = auto()


class ProgressBar:
    """A textual progress bar over a fixed number of exercises."""

    def __init__(
        self, position: int, total: int, stream: TextIO | None = None
    ) -> None:
        self.position = position
        self.total = total
        self._stream = stream

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 100.0
        return self.position / self.total * 100.0

    def render(self) -> str:
        """Return the bar as a single line."""
        if self.total == 0 or self.position >= self.total:
            bar = "#" * _BAR_WIDTH
        else:
            filled = int(_BAR_WIDTH * self.position / self.total)
            bar = "#" * filled + ">" + "-" * (_BAR_WIDTH - filled - 1)
        return (
            f"Progress: [{bar}] {self.position}/{self.total} "
            f"({self.percentage:.1f} %)"
        )

    def advance(self) -> None:
        """Move one exercise forward and redraw."""
        self.position += 1
        self._draw()

    def _draw(self) -> None:
        stream = self._stream or sys.stderr
        if stream.isatty():
            stream.write(f"\r\x1b[2K{self.render()}\n")
            stream.flush()


class _Spinner:
    """A one-line status message on an interactive stderr."""

    def __init__(self, message: str) -> None:
        self._stream = sys.stderr
        self._active = self._stream.isatty()
        self.set_message(message)

    def set_message(self, message: str) -> None:
        if self._active:
            self._stream.write(f"\r\x1b[2K{message}")
            self._stream.flush()

    def finish(self) -> None:
        if self._active:
            self._stream.write("\r\x1b[2K")
            self._stream.flush()
            self._active = False

    def __enter__(self) -> _Spinner:
        return self

    def __exit__(self, *args) -> None:
        self.finish()


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int],
    verbose: bool = False,
    success_hints: bool = False,
) -> None:
    """Check each exercise in turn; raise ExerciseFailed at the first that fails."""
    done, total = progress
    bar = ProgressBar(done, total)
    bar._draw()
    for exercise in exercises:
        match exercise.mode:
            case Mode.TEST | Mode.BUILD_SCRIPT:
                passed = _compile_and_test(
                    exercise, RunMode.INTERACTIVE, verbose, success_hints
                )
            case Mode.COMPILE:
                passed = _compile_and_run_interactively(exercise, success_hints)
            case Mode.CLIPPY:
                passed = _compile_only(exercise, success_hints)
        if not passed:
            raise ExerciseFailed(exercise)
        bar.advance()


def test(exercise: Exercise, verbose: bool = False) -> None:
    """Compile and run the exercise's tests; raise ExerciseFailed on failure."""
    if not _compile_and_test(exercise, RunMode.NON_INTERACTIVE, verbose, False):
        raise ExerciseFailed(exercise)


def _compile(exercise: Exercise, spinner: _Spinner) -> CompiledExercise | None:
    try:
        return exercise.compile()
    except CompileError as exc:
        spinner.finish()
        warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        print(exc.output.stderr)
        return None


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    with _Spinner(f"Compiling {exercise}...") as spinner:
        compiled = _compile(exercise, spinner)
        if compiled is None:
            return False
        compiled.close()
    return prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    with _Spinner(f"Compiling {exercise}...") as spinner:
        compiled = _compile(exercise, spinner)
        if compiled is None:
            return False
        with compiled:
            spinner.set_message(f"Running {exercise}...")
            try:
                output = compiled.run()
            except RunError as exc:
                spinner.finish()
                warn(f"Ran {exercise} with errors")
                print(exc.output.stdout)
                print(exc.output.stderr)
                return False
    return prompt_for_completion(exercise, output.stdout, success_hints)


def _compile_and_test(
    exercise: Exercise, run_mode: RunMode, verbose: bool, success_hints: bool
) -> bool:
    with _Spinner(f"Testing {exercise}...") as spinner:
        compiled = _compile(exercise, spinner)
        if compiled is None:
            return False
        with compiled:
            try:
                output = compiled.run()
            except RunError as exc:
                spinner.finish()
                warn(
                    f"Testing of {exercise} failed! Please try again. "
                    "Here's the output:"
                )
                print(exc.output.stdout)
                return False
    if verbose:
        print(output.stdout)
    if run_mode is RunMode.INTERACTIVE:
        return prompt_for_completion(exercise, None, success_hints)
    return True


def _separator() -> str:
    return bold("====================")


def prompt_for_completion(
    exercise: Exercise, prompt_output: str | None, success_hints: bool
) -> bool:
    """Return True if the exercise is done, else show where the marker is."""
    context = exercise.state()
    if context is None:
        return True

    match exercise.mode:
        case Mode.COMPILE:
            success(f"Successfully ran {exercise}!")
        case Mode.TEST:
            success(f"Successfully tested {exercise}!")
        case Mode.CLIPPY | Mode.BUILD_SCRIPT:
            success(f"Successfully compiled {exercise}!")

    emoji = use_emoji()
    clippy_message = (
        "The code is compiling, and 📎 Clippy 📎 is happy!"
        if emoji
        else "The code is compiling, and Clippy is happy!"
    )
    success_message = {
        Mode.COMPILE: "The code is compiling!",
        Mode.TEST: "The code is compiling, and the tests pass!",
        Mode.CLIPPY: clippy_message,
        Mode.BUILD_SCRIPT: "Build script works!",
    }[exercise.mode]

    print()
    if emoji:
        print(f"🎉 🎉  {success_message} 🎉 🎉")
    else:
        print(f"~*~ {success_message} ~*~")
    print()

    if prompt_output is not None:
        print("Output:")
        print(_separator())
        print(prompt_output)
        print(_separator())
        print()
    if success_hints:
        print("Hints:")
        print(_separator())
        print(exercise.hint)
        print(_separator())
        print()

    print("You can keep working on this exercise,")
    print(
        f"or jump into the next one by removing the {bold('`I AM NOT DONE`')} comment:"
    )
    print()
    for context_line in context:
        line = bold(context_line.line) if context_line.important else context_line.line
        print(f"{blue(bold(f'{context_line.number:>2}'))} {blue('|')}  {line}")
    return False