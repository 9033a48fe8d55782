"""Grading every exercise and writing a JSON summary of the results."""

from __future__ import annotations

import json
import os
import threading
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from .exercise import Exercise
from .run import run
from .verify import ExerciseFailed

DEFAULT_RESULT_PATH = ".github/result/check_result.json"


def _now() -> int:
    return int(time.time())


@dataclass
class ExerciseResult:
    """Whether one exercise passed."""

    name: str
    result: bool


@dataclass
class ExerciseStatistics:
    """Totals over a grading run."""

    total_exercations: int = 0
    total_succeeds: int = 0
    total_failures: int = 0
    total_time: int = 0


@dataclass
class ExerciseCheckList:
    """Results of grading all exercises."""

    exercises: list[ExerciseResult] = field(default_factory=list)
    user_name: str | None = None
    statistics: ExerciseStatistics = field(default_factory=ExerciseStatistics)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def record(self, name: str, result: bool) -> None:
        """Add one exercise's result and update the totals."""
        with self._lock:
            self.exercises.append(ExerciseResult(name=name, result=result))
            if result:
                self.statistics.total_succeeds += 1
            else:
                self.statistics.total_failures += 1

    def to_dict(self) -> dict:
        """Return the results as plain data."""
        stats = self.statistics
        return {
            "exercises": [
                {"name": entry.name, "result": entry.result} for entry in self.exercises
            ],
            "user_name": self.user_name,
            "statistics": {
                "total_exercations": stats.total_exercations,
                "total_succeeds": stats.total_succeeds,
                "total_failures": stats.total_failures,
                "total_time": stats.total_time,
            },
        }

    def to_json(self) -> str:
        """Serialize to indented JSON."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


def check_exercises(
    exercises: Iterable[Exercise], runner: Callable[[Exercise], object]
) -> ExerciseCheckList:
    """Run every exercise concurrently and collect which ones pass.

    The runner raises ExerciseFailed for an exercise that does not pass.
    """
    exercises = list(exercises)
    started = _now()
    total = len(exercises)
    check_list = ExerciseCheckList(
        statistics=ExerciseStatistics(total_exercations=total)
    )
    print_lock = threading.Lock()

    def grade(exercise: Exercise) -> None:
        exercise_started = _now()
        try:
            runner(exercise)
        except ExerciseFailed:
            passed = False
        else:
            passed = True
        check_list.record(exercise.name, passed)
        with print_lock:
            verdict = "执行成功" if passed else "执行失败"
            print(f"{exercise.name}{verdict}")
            print(f"总的题目数: {total}")
            print(f"当前做正确的题目数: {check_list.statistics.total_succeeds}")
            print(f"当前修改试卷耗时: {_now() - exercise_started} s")

    if exercises:
        with ThreadPoolExecutor() as pool:
            for future in [pool.submit(grade, exercise) for exercise in exercises]:
                future.result()

    total_time = _now() - started
    print(
        "===============================试卷批改完成,总耗时: "
        f"{total_time} s; =================================="
    )
    check_list.statistics.total_time = total_time
    return check_list


def cicv_verify(
    exercises: Iterable[Exercise],
    output_path: str | os.PathLike = DEFAULT_RESULT_PATH,
) -> ExerciseCheckList:
    """Grade all exercises and write the summary to output_path."""
    check_list = check_exercises(exercises, lambda exercise: run(exercise, True))
    Path(output_path).write_text(check_list.to_json(), encoding="utf-8")
    return check_list