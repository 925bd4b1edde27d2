from __future__ import annotations

import inspect
import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from modules.path_collector import (
    InputSource,
    OrderedPathSet,
    canonical_path,
    collect_inputs,
    collect_paths,
)


def _write(path: Path, text: str = "data") -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_no_paths_falls_back_to_stdin() -> None:
    assert collect_inputs() == [InputSource.stdin()]
    assert collect_inputs()[0].is_stdin
    assert collect_inputs()[0].label == "-"


def test_explicit_files_keep_order_and_spelling(tmp_path: Path, monkeypatch) -> None:
    tmp_path = tmp_path.resolve()
    b = _write(tmp_path / "b.txt")
    a = _write(tmp_path / "a.txt")
    monkeypatch.chdir(tmp_path)

    paths = collect_paths([b, "a.txt", "./a.txt", a, "sub/../b.txt"])

    assert paths == [b, "a.txt"]


def test_ordered_path_set_dedups_by_canonical_path(tmp_path: Path, monkeypatch) -> None:
    tmp_path = tmp_path.resolve()
    monkeypatch.chdir(tmp_path)
    paths = OrderedPathSet()

    assert paths.add("x.txt") is True
    assert paths.add(str(tmp_path / "x.txt")) is False
    assert "./x.txt" in paths
    assert list(paths) == ["x.txt"]
    assert len(paths) == 1
    assert canonical_path("x.txt") == os.path.join(str(tmp_path), "x.txt")


def test_canonical_path_falls_back_to_literal(monkeypatch) -> None:
    def broken(path: str) -> str:
        raise FileNotFoundError("cwd removed")

    monkeypatch.setattr(os.path, "abspath", broken)

    assert canonical_path("relative.txt") == "relative.txt"


def test_directory_lists_files_sorted_and_skips_subdirectories(tmp_path: Path) -> None:
    root = tmp_path / "root"
    _write(root / "b.txt")
    _write(root / "a.txt")
    _write(root / "nested" / "c.txt")

    paths = collect_paths(directory=str(root))

    assert paths == [str(root / "a.txt"), str(root / "b.txt")]


def test_recursive_walk_includes_every_file_once(tmp_path: Path) -> None:
    root = tmp_path / "root"
    _write(root / "b.txt")
    _write(root / "a" / "z.txt")
    _write(root / "a" / "deeper" / "y.txt")
    _write(root / "c.txt")
    (root / "empty").mkdir()

    paths = collect_paths(directory=str(root), recursive=True)

    assert paths == [
        str(root / "a" / "deeper" / "y.txt"),
        str(root / "a" / "z.txt"),
        str(root / "b.txt"),
        str(root / "c.txt"),
    ]


def test_explicit_file_wins_over_directory_entry(tmp_path: Path, monkeypatch) -> None:
    tmp_path = tmp_path.resolve()
    root = tmp_path / "root"
    _write(root / "a.txt")
    _write(root / "b.txt")
    extra = _write(tmp_path / "extra.txt")
    monkeypatch.chdir(tmp_path)

    paths = collect_paths(["root/b.txt", extra], directory=str(root))

    assert paths == ["root/b.txt", extra, str(root / "a.txt")]


def test_directory_path_is_normalised_in_labels(tmp_path: Path, monkeypatch) -> None:
    tmp_path = tmp_path.resolve()
    _write(tmp_path / "root" / "a.txt")
    monkeypatch.chdir(tmp_path)

    assert collect_paths(directory="./root/") == ["root/a.txt"]


def test_missing_directory_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        collect_paths(directory=str(tmp_path / "missing"))
    with pytest.raises(FileNotFoundError):
        collect_paths(directory=str(tmp_path / "missing"), recursive=True)


def test_recursive_requires_directory() -> None:
    with pytest.raises(ValueError, match="--recursive requires --directory"):
        collect_paths(["a.txt"], recursive=True)


def test_empty_directory_falls_back_to_stdin(tmp_path: Path) -> None:
    assert collect_inputs(directory=str(tmp_path)) == [InputSource.stdin()]


def test_recursive_walk_is_not_bounded_by_the_interpreter_stack(tmp_path: Path) -> None:
    root = tmp_path / "deep"
    root.mkdir()
    _write(root / "top.txt")
    deepest = root
    for _ in range(150):
        deepest = deepest / "d"
        deepest.mkdir()
    leaf = _write(deepest / "leaf.txt")

    limit = sys.getrecursionlimit()
    sys.setrecursionlimit(len(inspect.stack(0)) + 60)
    try:
        paths = collect_paths(directory=str(root), recursive=True)
    finally:
        sys.setrecursionlimit(limit)

    assert paths == [leaf, str(root / "top.txt")]
