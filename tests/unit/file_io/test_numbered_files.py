from __future__ import annotations

import os
import threading
from pathlib import Path

import pytest

from oshelpers.core.exceptions import InvalidArgumentError, InvalidPatternError
from oshelpers.core.io import (
    INVALID_SPECIFIER_MSG,
    create_numbered_file,
    highest_n,
    highest_n_between,
    highest_n_in,
    numbered_path,
    split_path_from_file_name_prefix,
    split_pattern,
)


@pytest.mark.parametrize(
    "prefix, specifier, postfix",
    [
        ("prefix1", "n", "postfix1"),
        ("dir/prefix2", "n", "postfix2.blah"),
        ("", "yak yak", ""),
        ("p", "n", "x"),
    ],
)
def test_split_pattern(prefix: str, specifier: str, postfix: str) -> None:
    assert split_pattern(f"{prefix}{{{specifier}}}{postfix}") == (prefix, specifier, postfix)


@pytest.mark.parametrize(
    "pattern, message",
    [
        ("prefix}postfix", "Missing specifier."),
        ("prefix{postfix", "Malformed specifier"),
        ("prefix{}postfix", "Malformed specifier"),
        ("a}b{n", "Malformed specifier"),
    ],
)
def test_split_pattern_errors(pattern: str, message: str) -> None:
    with pytest.raises(InvalidPatternError, match=message):
        split_pattern(pattern)


def test_split_pattern_rejects_empty() -> None:
    with pytest.raises(InvalidArgumentError):
        split_pattern("")


def test_split_path_from_file_name_prefix(tmp_path: Path) -> None:
    assert split_path_from_file_name_prefix("plain-") == (".", "plain-")
    assert split_path_from_file_name_prefix(f"{tmp_path}{os.sep}run-") == (str(tmp_path), "run-")
    assert split_path_from_file_name_prefix(f"{tmp_path}{os.sep}") == (str(tmp_path), "")


def _touch_range(root: Path, prefix: str, postfix: str, first: int, last: int) -> None:
    for n in range(first, last + 1):
        (root / f"{prefix}{n}{postfix}").touch()


@pytest.mark.parametrize("first, last", [(0, 0), (0, 9), (5, 12), (98, 101)])
def test_highest_n_overloads_agree(tmp_path: Path, first: int, last: int) -> None:
    prefix, postfix = "pre-", "-post.tmp"
    _touch_range(tmp_path, prefix, postfix, first, last)
    base = f"{tmp_path}{os.sep}{prefix}"

    assert highest_n_in(tmp_path, prefix, postfix) == last
    assert highest_n_between(base, postfix) == last
    assert highest_n(base + "{n}" + postfix) == last


def test_highest_n_ignores_noise(tmp_path: Path) -> None:
    for name in ["pre-3-post.tmp", "pre--post.tmp", "pre-x7-post.tmp", "pre-12a-post.tmp", "other-50-post.tmp"]:
        (tmp_path / name).touch()
    (tmp_path / "pre-99-post.tmp").mkdir()

    assert highest_n_in(tmp_path, "pre-", "-post.tmp") == 3


def test_highest_n_empty_directory(tmp_path: Path) -> None:
    assert highest_n(f"{tmp_path}{os.sep}log{{n}}.txt") == -1


def test_highest_n_invalid_specifier(tmp_path: Path) -> None:
    with pytest.raises(InvalidPatternError, match=INVALID_SPECIFIER_MSG):
        highest_n(f"{tmp_path}{os.sep}pre-{{INVALID_SPECIFIER}}.txt")


def test_numbered_path() -> None:
    assert numbered_path("out", "report", "-", 7, "txt") == os.path.join("out", "report") + "-7.txt"
    assert numbered_path(None, "x", None, 1, None) == "x1"
    assert numbered_path(None, None, None, 3, ".bin") == "3.bin"


def test_create_numbered_file_skips_taken_names(tmp_path: Path) -> None:
    (tmp_path / "report-1.txt").touch()
    (tmp_path / "report-2.txt").touch()

    with create_numbered_file(tmp_path, "report", "txt", "-") as fh:
        fh.write(b"data")
        name = fh.name

    assert name == str(tmp_path / "report-3.txt")
    assert (tmp_path / "report-3.txt").read_bytes() == b"data"


def test_create_numbered_file_honours_floor(tmp_path: Path) -> None:
    with create_numbered_file(tmp_path, "log", floor=10, mode="x", encoding="utf-8") as fh:
        fh.write("text")
    assert (tmp_path / "log10").read_text(encoding="utf-8") == "text"


def test_create_numbered_file_requires_exclusive_mode(tmp_path: Path) -> None:
    with pytest.raises(InvalidArgumentError):
        create_numbered_file(tmp_path, "log", mode="w+b")


def test_create_numbered_file_propagates_other_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        create_numbered_file(tmp_path / "missing", "log")


def test_concurrent_numbered_files_are_distinct(tmp_path: Path) -> None:
    names: list[str] = []
    names_lock = threading.Lock()

    def worker() -> None:
        for _ in range(10):
            with create_numbered_file(tmp_path, "item", "dat", "_") as fh:
                with names_lock:
                    names.append(fh.name)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(names) == 40
    assert len(set(names)) == 40
    assert highest_n(f"{tmp_path}{os.sep}item_{{n}}.dat") == 40
