"""Watch mode: re-verify exercises whenever their files change."""

from __future__ import annotations

import os
import queue
import subprocess
import sys
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .exercise import Exercise
from .verify import ExerciseFailed, verify

_HELP = """Commands available to you in watch mode:
  hint   - prints the current exercise's hint
  clear  - clears the screen
  quit   - quits watch mode
  !<cmd> - executes a command, like `!rustc --explain E0381`
  help   - displays this help message

Watch mode automatically re-evaluates the current exercise
when you edit a file's contents."""


class WatchStatus(Enum):
    """How watch mode ended."""

    FINISHED = auto()
    UNFINISHED = auto()


@dataclass
class WatchState:
    """State shared between the watch loop and the command shell."""

    hint: str | None = None
    should_quit: threading.Event = field(default_factory=threading.Event)


def handle_command(line: str, state: WatchState) -> None:
    """Carry out one command typed in watch mode."""
    command = line.strip()
    if command == "hint":
        if state.hint is not None:
            print(state.hint)
    elif command == "clear":
        print("\x1b[2J\x1b[1;1H")
    elif command == "quit":
        state.should_quit.set()
        print("Bye!")
    elif command == "help":
        print(_HELP)
    elif command.startswith("!"):
        shell_command = command[1:]
        parts = shell_command.split()
        if not parts:
            print("no command provided")
            return
        try:
            subprocess.run(parts)
        except OSError as exc:
            print(f"failed to execute command `{shell_command}`: {exc}")
    else:
        print(f"unknown command: {command}")


def _ends_with(path: Path, suffix: Path) -> bool:
    tail = suffix.parts
    return len(tail) <= len(path.parts) and path.parts[len(path.parts) - len(tail):] == tail


def exercises_to_recheck(
    changed_path: str | os.PathLike, exercises: Sequence[Exercise]
) -> list[Exercise]:
    """The changed exercise first, then every other pending exercise."""
    filepath = Path(changed_path).resolve()
    changed = next((e for e in exercises if _ends_with(filepath, e.path)), None)
    pending = [
        e for e in exercises if not e.looks_done() and not _ends_with(filepath, e.path)
    ]
    return ([changed] if changed is not None else []) + pending


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, events: queue.Queue) -> None:
        super().__init__()
        self._events = events

    def _put(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._events.put(os.fsdecode(event.src_path))

    def on_created(self, event: FileSystemEvent) -> None:
        self._put(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._put(event)


def _clear_screen() -> None:
    print("\x1bc")


def _spawn_shell(state: WatchState) -> None:
    print(
        "Welcome to watch mode! You can type 'help' to get an overview "
        "of the commands you can use here."
    )

    def loop() -> None:
        while True:
            try:
                line = sys.stdin.readline()
            except (OSError, ValueError) as exc:
                print(f"error reading command: {exc}")
                return
            if not line:
                return
            handle_command(line, state)

    threading.Thread(target=loop, daemon=True).start()


def _next_batch(events: queue.Queue, timeout: float) -> list[str]:
    """Wait for a change, then gather the distinct paths changed within a second."""
    try:
        first = events.get(timeout=timeout)
    except queue.Empty:
        return []
    paths = [first]
    while True:
        try:
            path = events.get(timeout=1.0)
        except queue.Empty:
            break
        if path not in paths:
            paths.append(path)
    return paths


def watch(
    exercises: Sequence[Exercise], verbose: bool = False, success_hints: bool = False
) -> WatchStatus:
    """Verify exercises, then re-verify on every change until done or quit."""
    events: queue.Queue = queue.Queue()
    observer = Observer()
    observer.schedule(_ChangeHandler(events), "./exercises", recursive=True)
    observer.start()
    try:
        _clear_screen()
        state = WatchState()
        try:
            verify(exercises, (0, len(exercises)), verbose, success_hints)
        except ExerciseFailed as exc:
            state.hint = exc.exercise.hint
        else:
            return WatchStatus.FINISHED

        _spawn_shell(state)
        while True:
            for changed in _next_batch(events, timeout=1.0):
                path = Path(changed)
                if path.suffix != ".rs" or not path.exists():
                    continue
                pending = exercises_to_recheck(path, exercises)
                num_done = sum(1 for e in exercises if e.looks_done())
                _clear_screen()
                try:
                    verify(pending, (num_done, len(exercises)), verbose, success_hints)
                except ExerciseFailed as exc:
                    state.hint = exc.exercise.hint
                else:
                    return WatchStatus.FINISHED
            if state.should_quit.is_set():
                return WatchStatus.UNFINISHED
    finally:
        observer.stop()
        observer.join()