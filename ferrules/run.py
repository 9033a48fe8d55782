"""Running and resetting a single exercise."""

from __future__ import annotations

import subprocess

from .exercise import CompileError, Exercise, Mode, RunError
from .ui import success, warn
from .verify import ExerciseFailed, _Spinner, test


def run(exercise: Exercise, verbose: bool = False) -> None:
    """Compile and run one exercise; raise ExerciseFailed on failure."""
    match exercise.mode:
        case Mode.TEST | Mode.BUILD_SCRIPT:
            test(exercise, verbose)
        case Mode.COMPILE | Mode.CLIPPY:
            _compile_and_run(exercise)


def reset(exercise: Exercise) -> None:
    """Stash local changes to the exercise file with git.

    Raises OSError when git cannot be started.
    """
    subprocess.run(["git", "stash", "--", str(exercise.path)])


def _compile_and_run(exercise: Exercise) -> None:
    with _Spinner(f"Compiling {exercise}...") as spinner:
        try:
            compiled = exercise.compile()
        except CompileError as exc:
            spinner.finish()
            warn(f"Compilation of {exercise} failed!, Compiler error message:\n")
            print(exc.output.stderr)
            raise ExerciseFailed(exercise) from exc

        with compiled:
            spinner.set_message(f"Running {exercise}...")
            try:
                output = compiled.run()
            except RunError as exc:
                spinner.finish()
                print(exc.output.stdout)
                print(exc.output.stderr)
                warn(f"Ran {exercise} with errors")
                raise ExerciseFailed(exercise) from exc

    print(output.stdout)
    success(f"Successfully ran {exercise}")