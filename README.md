# ferrules

A command-line companion for working through a collection of small Rust
exercises. It compiles and runs each exercise with `rustc` (or `cargo` for
Clippy and build-script exercises), reports which ones still need work, shows
hints, writes a `rust-project.json` for rust-analyzer, and can watch the
exercise folder and re-check your progress whenever you save a file.

## Requirements

- Python 3.11 or later
- A Rust toolchain with `rustc` on your `PATH`, and `cargo` for `clippy` and
  `buildscript` exercises
- `git`, if you want to reset exercises

## Installation

```
pip install .
```

## Getting started

Run `ferrules` from the directory that holds `info.toml` and the `exercises/`
folder. Every command except `--version` stops with exit status 1 if
`info.toml` is missing or `rustc --version` cannot be run.

`info.toml` lists the exercises in their recommended order:

```toml
[[exercises]]
name = "intro1"
path = "exercises/intro/intro1.rs"
mode = "compile"
hint = "No hints this time ;)"
```

`mode` is one of:

- `compile` – build the file with `rustc` and run the binary
- `test` – build it with `rustc --test` and run the test harness
- `clippy` – write `exercises/clippy/Cargo.toml` for the exercise and run
  `cargo clippy` with warnings denied
- `buildscript` – write `exercises/tests/Cargo.toml` and run `cargo test`

An exercise counts as pending while its file still contains a marker comment
such as `// I AM NOT DONE`. Delete that line once the exercise compiles and
does what it should, and `verify` and `watch` move on to the next one.

## Commands

```
ferrules                     # welcome message and a short introduction
ferrules --version           # print the version
ferrules watch               # verify everything, then re-check on every save
ferrules watch --success-hints
ferrules verify              # verify all exercises in order; stop at the first failure
ferrules run <name>          # compile and run (or test) one exercise
ferrules run next            # run the first exercise that is not done yet
ferrules hint <name>         # print the hint for an exercise
ferrules reset <name>        # discard your changes with `git stash -- <file>`
ferrules list                # table of names, paths and status, then progress
ferrules list --paths        # only paths
ferrules list --names        # only names
ferrules list --filter a,b   # only exercises whose name or path contains a or b
ferrules list --solved       # only finished exercises
ferrules list --unsolved     # only pending exercises
ferrules lsp                 # write rust-project.json for rust-analyzer
ferrules cicvverify          # grade every exercise and write a JSON report
```

`run`, `hint` and `reset` also accept `next`. Short forms exist for the list
options: `-p`, `-n`, `-f`, `-s`, `-u`; `-v` for `--version`.

Add `--nocapture` before a command to see the output of test exercises.

Commands exit with status 0 on success and 1 when an exercise fails, is not
found, or the arguments are wrong.

### Environment

- `NO_EMOJI` – use plain-text symbols in place of emoji
- `NO_COLOR` – turn off colored output
- `CLICOLOR_FORCE` – force colored output even when not writing to a terminal
- `RUST_SRC_PATH` – used by `lsp` as the standard library source path instead
  of asking `rustc --print sysroot`

### Watch mode

Watch mode first verifies every exercise. If all pass, it finishes; otherwise
it watches `./exercises` and, whenever a `.rs` file is created or changed,
re-checks that exercise followed by the other pending ones.

While watching, type one of these commands and press Enter:

- `hint` – print the hint for the exercise you are stuck on
- `clear` – clear the screen
- `quit` – leave watch mode
- `!<cmd>` – run a command, for example `!rustc --explain E0381`
- `help` – show this list

### Grading report

`ferrules cicvverify` runs every exercise concurrently, as `run --nocapture`
would, and writes `.github/result/check_result.json` (creating the folder if
needed). An exercise passes when it builds and runs or its tests pass; the
marker comment is not checked. The report holds:

- `exercises` – a list of `{"name": ..., "result": true|false}`
- `user_name` – always `null`
- `statistics` – `total_exercations`, `total_succeeds`, `total_failures` and
  `total_time` (seconds)

## Using it from Python

The pieces behind the commands can also be used directly, for example:

```python
from ferrules.exercise import load_exercises
from ferrules.verify import ExerciseFailed, verify

exercises = load_exercises("info.toml")
pending = [e for e in exercises if not e.looks_done()]
try:
    verify(exercises, (0, len(exercises)))
except ExerciseFailed as exc:
    print(exc.exercise.hint)
```

`Exercise.compile()` raises `CompileError` and returns a `CompiledExercise`
that removes its binary when closed or used as a context manager; its `run()`
raises `RunError`. `Exercise.state()` returns `None` for a finished exercise,
or the lines around the marker comment.

## What it does not do

ferrules ships no exercises and no `info.toml`; it works on an exercise
collection you already have. It does not install or manage the Rust
toolchain.

## Running the tests

```
pip install .[test]
pytest
```