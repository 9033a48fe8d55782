"""Command-line entry point."""

from __future__ import annotations

import argparse
import math
import os
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path

from .exercise import Exercise, load_exercises
from .project import RustAnalyzerProject
from .report import DEFAULT_RESULT_PATH, cicv_verify
from .run import reset, run
from .ui import use_emoji
from .verify import ExerciseFailed, verify
from .watch import WatchStatus, watch

VERSION = "5.5.1"
INFO_FILE = "info.toml"

WELCOME = r"""       welcome to...
   __                     _
  / _| ___ _ __ _ __ _  _| | ___  ___
 | |_ / _ \ '__| '__| | | | |/ _ \/ __|
 |  _|  __/ |  | |  | |_| | |  __/\__ \
 |_|  \___|_|  |_|   \__,_|_|\___||___/"""

DEFAULT_OUT = """Thanks for installing ferrules!

Is this your first time? Don't worry, ferrules was made for beginners! We are
going to teach you a lot of things about Rust, but before we can get
started, here's a couple of notes about how ferrules operates:

1. The central concept behind ferrules is that you solve exercises. These
   exercises usually have some sort of syntax error in them, which will cause
   them to fail compilation or testing. Sometimes there's a logic error instead
   of a syntax error. No matter what error, it's your job to find it and fix it!
   You'll know when you fixed it because then, the exercise will compile and
   ferrules will be able to move on to the next exercise.
2. If you run ferrules in watch mode (which we recommend), it'll automatically
   start with the first exercise. Don't get confused by an error message popping
   up as soon as you run ferrules! This is part of the exercise that you're
   supposed to solve, so open the exercise file in an editor and start your
   detective work!
3. If you're stuck on an exercise, there is a helpful hint you can view by typing
   'hint' (in watch mode), or running `ferrules hint exercise_name`.
4. If an exercise doesn't make sense to you, feel free to open an issue!
   We look at every issue, and sometimes, other learners do too so you can
   help each other out!
5. If you want to use `rust-analyzer` with exercises, which provides features like
   autocompletion, run the command `ferrules lsp`.

Got all that? Great! To get started, run `ferrules watch` in order to get the first
exercise. Make sure to have your editor open!"""

FINISH_LINE = r"""+----------------------------------------------------+
|          You made it to the Fe-nish line!          |
+--------------------------  ------------------------+
                          \\/
     ▒▒          ▒▒▒▒▒▒▒▒      ▒▒▒▒▒▒▒▒          ▒▒
   ▒▒▒▒  ▒▒    ▒▒        ▒▒  ▒▒        ▒▒    ▒▒  ▒▒▒▒
   ▒▒▒▒  ▒▒  ▒▒            ▒▒            ▒▒  ▒▒  ▒▒▒▒
 ░░▒▒▒▒░░▒▒  ▒▒            ▒▒            ▒▒  ▒▒░░▒▒▒▒
   ▓▓▓▓▓▓▓▓  ▓▓      ▓▓██  ▓▓  ▓▓██      ▓▓  ▓▓▓▓▓▓▓▓
     ▒▒▒▒    ▒▒      ████  ▒▒  ████      ▒▒░░  ▒▒▒▒
       ▒▒  ▒▒▒▒▒▒        ▒▒▒▒▒▒        ▒▒▒▒▒▒  ▒▒
         ▒▒▒▒▒▒▒▒▒▒▓▓▓▓▓▓▒▒▒▒▒▒▒▒▓▓▒▒▓▓▒▒▒▒▒▒▒▒
           ▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒
             ▒▒▒▒▒▒▒▒▒▒██▒▒▒▒▒▒██▒▒▒▒▒▒▒▒▒▒
           ▒▒  ▒▒▒▒▒▒▒▒▒▒██████▒▒▒▒▒▒▒▒▒▒  ▒▒
         ▒▒    ▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒    ▒▒
       ▒▒    ▒▒    ▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒▒    ▒▒    ▒▒
       ▒▒  ▒▒    ▒▒                  ▒▒    ▒▒  ▒▒
           ▒▒  ▒▒                      ▒▒  ▒▒

We hope you enjoyed learning about the various aspects of Rust!
If you noticed any issues, please don't hesitate to report them.
You can also contribute your own exercises to help the greater community!"""


class ExerciseNotFound(LookupError):
    """Raised when no exercise matches a requested name."""


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="ferrules",
        description="A collection of small exercises to get you used to "
        "writing and reading Rust code",
    )
    parser.add_argument(
        "--nocapture", action="store_true", help="show outputs from the test exercises"
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="show the executable version"
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("verify", help="verifies all exercises in the recommended order")
    watch_parser = sub.add_parser("watch", help="reruns `verify` when files are edited")
    watch_parser.add_argument(
        "--success-hints", action="store_true", help="show hints on success"
    )
    for name, text in (
        ("run", "runs/tests a single exercise"),
        ("reset", 'resets a single exercise using "git stash -- <filename>"'),
        ("hint", "returns a hint for the given exercise"),
    ):
        named = sub.add_parser(name, help=text)
        named.add_argument("name", help="the name of the exercise")

    list_parser = sub.add_parser("list", help="lists the available exercises")
    list_parser.add_argument(
        "-p", "--paths", action="store_true", help="show only the paths of the exercises"
    )
    list_parser.add_argument(
        "-n", "--names", action="store_true", help="show only the names of the exercises"
    )
    list_parser.add_argument(
        "-f",
        "--filter",
        help="a string to match exercise names; comma separated patterns are accepted",
    )
    list_parser.add_argument(
        "-u", "--unsolved", action="store_true", help="display only unsolved exercises"
    )
    list_parser.add_argument(
        "-s", "--solved", action="store_true", help="display only solved exercises"
    )

    sub.add_parser("lsp", help="enable rust-analyzer for exercises")
    sub.add_parser("cicvverify", help="grade every exercise and write a JSON summary")
    return parser


def find_exercise(name: str, exercises: Sequence[Exercise]) -> Exercise:
    """Find an exercise by name, or the first pending one for "next"."""
    if name == "next":
        found = next((e for e in exercises if not e.looks_done()), None)
        if found is None:
            raise ExerciseNotFound(
                "🎉 Congratulations! You have done all the exercises!\n"
                "🔚 There are no more exercises to do next!"
            )
        return found
    found = next((e for e in exercises if e.name == name), None)
    if found is None:
        raise ExerciseNotFound(f"No exercise found for '{name}'!")
    return found


def list_exercises(
    exercises: Sequence[Exercise],
    paths: bool = False,
    names: bool = False,
    filter_text: str | None = None,
    unsolved: bool = False,
    solved: bool = False,
) -> int:
    """Print the selected exercises and the progress line; return the number done."""
    out = sys.stdout
    if not paths and not names:
        out.write(f"{'Name':<17}\t{'Path':<46}\t{'Status':<7}\n")
    done_count = 0
    filters = [f for f in (filter_text or "").lower().split(",") if f.strip()]
    for exercise in exercises:
        fname = str(exercise.path)
        matches = any(f in exercise.name or f in fname for f in filters)
        done = exercise.looks_done()
        if done:
            done_count += 1
        status = "Done" if done else "Pending"
        wanted = (done and solved) or (not done and unsolved) or (not solved and not unsolved)
        if wanted and (matches or filter_text is None):
            if paths:
                line = f"{fname}\n"
            elif names:
                line = f"{exercise.name}\n"
            else:
                line = f"{exercise.name:<17}\t{fname:<46}\t{status:<7}\n"
            out.write(line)
    percentage = done_count / len(exercises) * 100.0 if exercises else math.nan
    out.write(
        f"Progress: You completed {done_count} / {len(exercises)} "
        f"exercises ({percentage:.1f} %).\n"
    )
    out.flush()
    return done_count


def rustc_exists() -> bool:
    """True when `rustc --version` can be run successfully."""
    try:
        result = subprocess.run(["rustc", "--version"], stdout=subprocess.DEVNULL)
    except OSError:
        return False
    return result.returncode == 0


def _lsp() -> int:
    project = RustAnalyzerProject()
    try:
        project.get_sysroot_src()
    except OSError:
        print("Couldn't find toolchain path, do you have `rustc` installed?")
        return 1
    project.exercises_to_json()
    if not project.crates:
        print("Failed find any exercises, make sure you're in the `ferrules` folder")
        return 0
    try:
        project.write_to_disk()
    except OSError:
        print("Failed to write rust-project.json to disk for rust-analyzer")
        return 0
    print("Successfully generated rust-project.json")
    print("rust-analyzer will now parse exercises, restart your language server or editor")
    return 0


def _watch(exercises: list[Exercise], verbose: bool, success_hints: bool) -> int:
    try:
        status = watch(exercises, verbose, success_hints)
    except OSError as exc:
        print(f"Error: Could not watch your progress. Error message was {exc!r}.")
        print(
            "Most likely you've run out of disk space or your "
            "'inotify limit' has been reached."
        )
        return 1
    if status is WatchStatus.FINISHED:
        mark = "🎉" if use_emoji() else "★"
        print(f"{mark} All exercises completed! {mark}")
        print(f"\n{FINISH_LINE}\n")
    else:
        print("We hope you're enjoying learning about Rust!")
        print(
            "If you want to continue working on the exercises at a later point, "
            "you can simply run `ferrules watch` again"
        )
    return 0


def _dispatch(args: argparse.Namespace, exercises: list[Exercise]) -> int:
    verbose = args.nocapture
    match args.command:
        case "list":
            try:
                list_exercises(
                    exercises, args.paths, args.names, args.filter,
                    args.unsolved, args.solved,
                )
            except BrokenPipeError:
                return 0
            return 0
        case "run" | "reset" | "hint":
            try:
                exercise = find_exercise(args.name, exercises)
            except ExerciseNotFound as exc:
                print(exc)
                return 1
            if args.command == "hint":
                print(exercise.hint)
                return 0
            try:
                if args.command == "run":
                    run(exercise, verbose)
                else:
                    reset(exercise)
            except (ExerciseFailed, OSError):
                return 1
            return 0
        case "verify":
            try:
                verify(exercises, (0, len(exercises)), verbose, False)
            except ExerciseFailed:
                return 1
            return 0
        case "cicvverify":
            try:
                Path(DEFAULT_RESULT_PATH).parent.mkdir(parents=True, exist_ok=True)
                cicv_verify(exercises, DEFAULT_RESULT_PATH)
            except OSError as exc:
                print(f"Failed to write the check result: {exc}")
                return 1
            return 0
        case "lsp":
            return _lsp()
        case "watch":
            return _watch(exercises, verbose, args.success_hints)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; return the exit status."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return 0 if exc.code in (0, None) else 1

    if args.version:
        print(f"v{VERSION}")
        return 0

    if args.command is None:
        print(f"\n{WELCOME}\n")

    if not Path(INFO_FILE).exists():
        print(f"{os.path.abspath(sys.argv[0])} must be run from the ferrules directory")
        print("Try `cd ferrules/`!")
        return 1

    if not rustc_exists():
        print("We cannot find `rustc`.")
        print("Try running `rustc --version` to diagnose your problem.")
        print("For instructions on how to install Rust, check the README.")
        return 1

    exercises = load_exercises(INFO_FILE)

    if args.command is None:
        print(f"{DEFAULT_OUT}\n")
        return 0

    return _dispatch(args, exercises)